# tests
import threading
import time
from pathlib import Path

import pytest

from napalert.config import get_default_config
from napalert.mocks import MockAccelerometer, MockHeartRateSensor
from napalert.models import AccelerationSample, HeartRateSample
from napalert.sensors import ReplayHeartRateSensor, ReplayMotionSensor, get_sensors

from conftest import ManualHeartRateSensor, ManualMotionSensor


def test_batch_delivers_latest_sample_only():
    received = []
    sensor = ManualHeartRateSensor(callback=received.append)
    sensor.start()

    sensor.deliver_batch([HeartRateSample(80), HeartRateSample(75), HeartRateSample(71)])
    sensor.deliver_batch([])

    assert received == [71]


def test_nothing_delivered_after_stop():
    received = []
    sensor = ManualHeartRateSensor(callback=received.append)
    sensor.start()
    sensor.stop()

    sensor.deliver_batch([HeartRateSample(80)])
    assert received == []
    assert not sensor.is_running


def test_motion_reported_on_change_only():
    received = []
    sensor = ManualMotionSensor(callback=received.append)
    sensor.start()

    for sample in [
        AccelerationSample(0.0, -1.0, 0.0),   # primes
        AccelerationSample(0.0, -1.0, 0.001),  # still
        AccelerationSample(0.0, -1.0, 0.002),  # still again
        AccelerationSample(0.3, -0.7, 0.0),   # moving
        AccelerationSample(0.0, -1.0, 0.0),   # moving
        AccelerationSample(0.0, -1.0, 0.0),   # still
    ]:
        sensor.deliver_acceleration(sample)

    assert received == [False, True, False]


def test_motion_sensor_restart_primes_again():
    received = []
    sensor = ManualMotionSensor(callback=received.append)
    sensor.start()
    sensor.deliver_acceleration(AccelerationSample(0.0, -1.0, 0.0))
    sensor.deliver_acceleration(AccelerationSample(0.0, -1.0, 0.0))
    sensor.stop()
    sensor.start()
    sensor.deliver_acceleration(AccelerationSample(0.5, 0.5, 0.5))

    assert received == [False]


class _StopDuringStart(threading.Event):
    """Event that fires sensor.stop() from another thread inside start()."""

    def __init__(self, sensor):
        super().__init__()
        self.sensor = sensor
        self.stopper = None

    def clear(self):
        if self.stopper is None:
            self.stopper = threading.Thread(target=self.sensor.stop)
            self.stopper.start()
            self.stopper.join(timeout=0.2)
        super().clear()


def _adapter_threads(name):
    return [t for t in threading.enumerate() if t.name == name and t.is_alive()]


def test_stop_racing_start_leaves_single_producer():
    received = []
    sensor = MockHeartRateSensor(callback=received.append, interval=0.01, seed=1)
    race = _StopDuringStart(sensor)
    sensor._stop_event = race

    sensor.start()
    race.stopper.join(timeout=5)

    assert not sensor.is_running
    assert _adapter_threads("heart-rate-adapter") == []

    sensor.start()
    time.sleep(0.1)
    try:
        assert len(_adapter_threads("heart-rate-adapter")) == 1
    finally:
        sensor.stop()
    assert _adapter_threads("heart-rate-adapter") == []


def test_concurrent_start_stop_from_two_threads():
    sensor = MockHeartRateSensor(callback=lambda bpm: None, interval=0.01, seed=2)

    def toggle(method):
        for _ in range(50):
            method()

    threads = [
        threading.Thread(target=toggle, args=(sensor.start,)),
        threading.Thread(target=toggle, args=(sensor.stop,)),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    sensor.start()
    try:
        assert len(_adapter_threads("heart-rate-adapter")) == 1
    finally:
        sensor.stop()
    assert _adapter_threads("heart-rate-adapter") == []


def _replay(sensor):
    sensor.start()
    sensor._thread.join(timeout=5)
    sensor.stop()


def test_replay_heart_rate(tmp_path: Path):
    path = tmp_path / "hr.csv"
    path.write_text("elapsed_seconds,bpm\n0.1,72\n0.2,71.5\n\n0.3,70\n")
    received = []

    _replay(ReplayHeartRateSensor(path, callback=received.append, speed=100.0))

    assert received == [72.0, 71.5, 70.0]


def test_replay_motion(tmp_path: Path):
    path = tmp_path / "motion.csv"
    path.write_text(
        "elapsed_seconds,x,y,z\n"
        "0.1,0,-1,0\n"
        "0.2,0,-1,0.001\n"
        "0.3,0.4,-0.6,0\n"
    )
    received = []

    _replay(ReplayMotionSensor(path, callback=received.append, speed=100.0))

    assert received == [False, True]


def test_replay_rejects_bad_rows(tmp_path: Path):
    path = tmp_path / "hr.csv"
    path.write_text("elapsed_seconds,bpm\n1,72\n2,fast\n")
    with pytest.raises(ValueError):
        ReplayHeartRateSensor(path)


def test_factory_mock_mode():
    config = get_default_config()
    config.mock_mode = True

    hr, motion = get_sensors(config)

    assert isinstance(hr, MockHeartRateSensor)
    assert isinstance(motion, MockAccelerometer)
    assert motion.detector.threshold_g == config.sensors.motion_threshold_g


def test_factory_replay_requires_files():
    config = get_default_config()
    with pytest.raises(ValueError):
        get_sensors(config)


def test_factory_replay(tmp_path: Path):
    (tmp_path / "hr.csv").write_text("1,70\n")
    (tmp_path / "motion.csv").write_text("1,0,0,1\n")
    config = get_default_config()
    config.sensors.heart_rate_file = "hr.csv"
    config.sensors.motion_file = "motion.csv"
    config._base_path = tmp_path

    hr, motion = get_sensors(config)

    assert isinstance(hr, ReplayHeartRateSensor)
    assert isinstance(motion, ReplayMotionSensor)
