#!/usr/bin/env python3
"""Write sample CSV recordings for the replay sensors.

The recording covers three phases: awake and still (baseline), wrist
moving with a low heart rate, then still and drowsy.

Usage:
    python scripts/make_recording.py [OUTPUT_DIR] [SECONDS_PER_PHASE]
"""
import csv
import sys
from pathlib import Path

from napalert.mocks import MockAccelerometer, MockHeartRateSensor

PHASES = [
    # (name, moving, drowsy)
    ("awake", False, False),
    ("moving", True, True),
    ("drowsy", False, True),
]


def write_recording(out_dir, seconds_per_phase=60, hr_interval=5, seed=7):
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    heart_rate = MockHeartRateSensor(seed=seed)
    accelerometer = MockAccelerometer(seed=seed)

    with open(out_dir / "heart_rate.csv", "w", newline="") as hr_file, \
            open(out_dir / "motion.csv", "w", newline="") as motion_file:
        hr_writer = csv.writer(hr_file)
        motion_writer = csv.writer(motion_file)
        hr_writer.writerow(["elapsed_seconds", "bpm"])
        motion_writer.writerow(["elapsed_seconds", "x", "y", "z"])

        elapsed = 0
        for name, moving, drowsy in PHASES:
            heart_rate.simulate_drowsy(drowsy)
            accelerometer.simulate_moving(moving)
            for _ in range(seconds_per_phase):
                elapsed += 1
                a = accelerometer.generate_sample()
                motion_writer.writerow([elapsed, f"{a.x:.4f}", f"{a.y:.4f}", f"{a.z:.4f}"])
                if elapsed % hr_interval == 0:
                    hr_writer.writerow([elapsed, heart_rate.generate_sample().bpm])
            print(f"{name}: ends at {elapsed}s")

    return out_dir


if __name__ == "__main__":
    out = sys.argv[1] if len(sys.argv) > 1 else "recordings"
    seconds = int(sys.argv[2]) if len(sys.argv) > 2 else 60
    path = write_recording(out, seconds)
    print(f"Recordings written to {path}")
