# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Sensor adapters for heart rate and wrist motion.

Adapters push observations through a callback from their own thread:
- Heart-rate sensors call back with a bpm value (latest of each batch)
- Motion sensors call back with an is-moving flag whenever it changes

stop() is synchronous: once it returns, no further callbacks are made.

Two families are provided:
- Replay adapters that play back CSV recordings (this module)
- Simulated adapters for development (mocks.py)
"""

import csv
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from napalert.models import AccelerationSample, HeartRateSample
from napalert.motion import DEFAULT_MOTION_THRESHOLD_G, WristMotionDetector

logger = logging.getLogger(__name__)


class SensorAdapter(ABC):
    """Common start/stop handling for threaded sensor adapters."""

    name = "sensor"

    def __init__(self, callback: Optional[Callable] = None):
        self.callback = callback
        self._running = False
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        # start() and stop() are called from the event loop and web threads
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start producing observations in a background thread."""
        with self._lock:
            if self._running:
                return
            if self._thread is not None and self._thread.is_alive():
                logger.warning(f"{self.name} adapter thread still exiting, not restarting")
                return

            self._on_start()
            self._running = True
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run_loop, name=f"{self.name}-adapter", daemon=True
            )
            self._thread.start()
        logger.info(f"{self.name} adapter started")

    def stop(self) -> None:
        """Stop producing observations; returns once the thread has exited."""
        with self._lock:
            if not self._running and self._thread is None:
                return

            self._running = False
            self._stop_event.set()
            thread = self._thread
            if thread and thread is not threading.current_thread():
                thread.join(timeout=5)
            if thread is not None and thread.is_alive():
                # Keep the reference so start() won't spawn a second producer
                logger.warning(f"{self.name} adapter thread did not exit yet")
            else:
                self._thread = None
            self._on_stop()
        logger.info(f"{self.name} adapter stopped")

    def _on_start(self) -> None:
        pass

    def _on_stop(self) -> None:
        pass

    def _wait(self, seconds: float) -> bool:
        """Sleep unless stopped; returns True if the adapter should keep going."""
        return not self._stop_event.wait(max(0.0, seconds))

    @abstractmethod
    def _run_loop(self) -> None:
        ...


class HeartRateSensor(SensorAdapter):
    """Base for adapters delivering heart-rate samples."""

    name = "heart-rate"

    def deliver_batch(self, samples: Sequence[HeartRateSample]) -> None:
        """Forward only the most recent sample of a batch."""
        if not samples or not self._running:
            return
        latest = samples[-1]
        if self.callback:
            self.callback(latest.bpm)


class MotionSensor(SensorAdapter):
    """Base for adapters turning accelerometer data into motion flags."""

    name = "motion"

    def __init__(
        self,
        callback: Optional[Callable[[bool], None]] = None,
        threshold_g: float = DEFAULT_MOTION_THRESHOLD_G,
    ):
        super().__init__(callback)
        self.detector = WristMotionDetector(threshold_g)
        self._last_reported: Optional[bool] = None

    def _on_start(self) -> None:
        self.detector.reset()
        self._last_reported = None

    def _on_stop(self) -> None:
        self.detector.reset()
        self._last_reported = None

    def deliver_acceleration(self, sample: AccelerationSample) -> None:
        """Run a sample through the detector and report changes."""
        if not self._running:
            return
        is_moving = self.detector.update(sample)
        if is_moving is None or is_moving == self._last_reported:
            return
        self._last_reported = is_moving
        logger.debug(f"Wrist {'moving' if is_moving else 'still'}")
        if self.callback:
            self.callback(is_moving)


# ==================== Replay adapters ====================

def _read_rows(path: Path, columns: int) -> List[Tuple[float, ...]]:
    """Read numeric CSV rows, skipping a header and blank lines."""
    rows = []
    with open(path, newline='') as f:
        for line_no, row in enumerate(csv.reader(f), start=1):
            if not row or row[0].strip().startswith('#'):
                continue
            try:
                values = tuple(float(v) for v in row[:columns])
            except ValueError:
                if line_no == 1:
                    continue  # Header
                raise ValueError(f"{path}:{line_no}: expected {columns} numeric columns")
            if len(values) < columns:
                raise ValueError(f"{path}:{line_no}: expected {columns} numeric columns")
            rows.append(values)
    return rows


class ReplayHeartRateSensor(HeartRateSensor):
    """Plays back a recording of `elapsed_seconds,bpm` rows."""

    def __init__(self, path, callback=None, speed: float = 1.0):
        super().__init__(callback)
        self.path = Path(path)
        self.speed = speed
        self._rows = _read_rows(self.path, 2)
        logger.info(f"Loaded {len(self._rows)} heart-rate rows from {self.path}")

    def _run_loop(self) -> None:
        previous = 0.0
        for elapsed, bpm in self._rows:
            if not self._wait((elapsed - previous) / self.speed):
                return
            previous = elapsed
            self.deliver_batch([HeartRateSample(bpm=bpm)])
        logger.info("Heart-rate recording finished")


class ReplayMotionSensor(MotionSensor):
    """Plays back a recording of `elapsed_seconds,x,y,z` rows."""

    def __init__(self, path, callback=None, speed: float = 1.0,
                 threshold_g: float = DEFAULT_MOTION_THRESHOLD_G):
        super().__init__(callback, threshold_g)
        self.path = Path(path)
        self.speed = speed
        self._rows = _read_rows(self.path, 4)
        logger.info(f"Loaded {len(self._rows)} accelerometer rows from {self.path}")

    def _run_loop(self) -> None:
        previous = 0.0
        for elapsed, x, y, z in self._rows:
            if not self._wait((elapsed - previous) / self.speed):
                return
            previous = elapsed
            self.deliver_acceleration(AccelerationSample(x, y, z))
        logger.info("Accelerometer recording finished")


def get_sensors(config, hr_callback=None, motion_callback=None):
    """Factory returning (heart_rate_sensor, motion_sensor) for the config.

    Raises:
        ValueError: If recordings are required but not configured
    """
    sensors = config.sensors
    if config.mock_mode:
        from napalert.mocks import MockAccelerometer, MockHeartRateSensor
        logger.info("Using simulated sensors (mock_mode=True)")
        return (
            MockHeartRateSensor(
                callback=hr_callback,
                interval=sensors.heart_rate_interval_seconds,
            ),
            MockAccelerometer(
                callback=motion_callback,
                interval=sensors.motion_interval_seconds,
                threshold_g=sensors.motion_threshold_g,
            ),
        )

    if not sensors.heart_rate_file or not sensors.motion_file:
        raise ValueError("Replay sensors need sensors.heart_rate_file and sensors.motion_file")

    logger.info("Using replay sensors")
    return (
        ReplayHeartRateSensor(
            config.resolve_path(sensors.heart_rate_file),
            callback=hr_callback,
            speed=sensors.replay_speed,
        ),
        ReplayMotionSensor(
            config.resolve_path(sensors.motion_file),
            callback=motion_callback,
            speed=sensors.replay_speed,
            threshold_g=sensors.motion_threshold_g,
        ),
    )
