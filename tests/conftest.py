# tests/conftest.py
import pytest

from napalert.config import get_default_config
from napalert.sensors import HeartRateSensor, MotionSensor


class ManualHeartRateSensor(HeartRateSensor):
    """Heart-rate adapter whose samples are pushed by the test."""

    def __init__(self, callback=None):
        super().__init__(callback)
        self.starts = 0
        self.stops = 0

    def start(self):
        self.starts += 1
        super().start()

    def stop(self):
        self.stops += 1
        super().stop()

    def _run_loop(self):
        pass


class ManualMotionSensor(MotionSensor):
    """Motion adapter whose accelerometer samples are pushed by the test."""

    def __init__(self, callback=None, threshold_g=0.02):
        super().__init__(callback, threshold_g)
        self.starts = 0
        self.stops = 0

    def start(self):
        self.starts += 1
        super().start()

    def stop(self):
        self.stops += 1
        super().stop()

    def _run_loop(self):
        pass


class RecordingAlertManager:
    def __init__(self):
        self.events = []

    async def notify(self, event):
        self.events.append(event)


@pytest.fixture
def config():
    cfg = get_default_config()
    cfg.mock_mode = True
    cfg.alerting.local_audio.enabled = False
    return cfg


@pytest.fixture
def hr_sensor():
    return ManualHeartRateSensor()


@pytest.fixture
def motion_sensor():
    return ManualMotionSensor()


@pytest.fixture
def alert_manager():
    return RecordingAlertManager()
