# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Mock sensor implementations for running without a wearable.

This module provides simulated versions of the heart-rate sensor and the
wrist accelerometer that generate realistic data for exercising the
detection pipeline end to end.

Enable mock mode by:
- Setting MOCK_HARDWARE=true environment variable, OR
- Setting mock_mode: true in config.yaml, OR
- Passing --mock on the command line
"""

import logging
import random
from typing import Callable, Optional

from napalert.models import AccelerationSample, HeartRateSample
from napalert.motion import DEFAULT_MOTION_THRESHOLD_G
from napalert.sensors import HeartRateSensor, MotionSensor

logger = logging.getLogger(__name__)


class MockHeartRateSensor(HeartRateSensor):
    """Simulated heart-rate sensor.

    Generates heart rate around a base value with small jitter. The mock
    can be switched into a "drowsy" mode where readings drop well below
    the base value.

    Attributes:
        interval: Seconds between samples
        callback: Function called with each bpm value
    """

    def __init__(
        self,
        callback: Optional[Callable[[float], None]] = None,
        interval: float = 5.0,
        base_bpm: float = 72.0,
        jitter: float = 2.0,
        seed: Optional[int] = None,
    ):
        """Initialize mock heart-rate sensor.

        Args:
            callback: Function to call with each bpm value
            interval: Seconds between samples
            base_bpm: Resting heart rate to vary around
            jitter: Maximum random deviation in bpm
            seed: Optional seed for reproducible sequences
        """
        super().__init__(callback)
        self.interval = interval
        self._base_bpm = base_bpm
        self._jitter = jitter
        self._drowsy_drop = 0.0
        self._random = random.Random(seed)

        logger.info(f"MockHeartRateSensor initialized (base {base_bpm} bpm)")

    def _run_loop(self) -> None:
        while self._wait(self.interval):
            self.deliver_batch([self.generate_sample()])

    def generate_sample(self) -> HeartRateSample:
        """Generate a simulated sample."""
        bpm = self._base_bpm - self._drowsy_drop
        bpm += self._random.uniform(-self._jitter, self._jitter)
        bpm = round(max(35.0, min(200.0, bpm)), 1)
        logger.debug(f"MockHeartRateSensor: Generated {bpm} bpm")
        return HeartRateSample(bpm=bpm)

    # Simulation control methods

    def set_base_bpm(self, bpm: float) -> None:
        self._base_bpm = bpm
        logger.info(f"MockHeartRateSensor: Base heart rate {bpm} bpm")

    def simulate_drowsy(self, drowsy: bool = True, drop: float = 10.0) -> None:
        """Simulate heart rate falling below the resting level.

        Args:
            drowsy: True to lower readings, False to restore them
            drop: How far (bpm) readings fall below the base value
        """
        self._drowsy_drop = drop if drowsy else 0.0
        logger.info(f"MockHeartRateSensor: Simulating drowsy={drowsy} (drop={drop} bpm)")


class MockAccelerometer(MotionSensor):
    """Simulated wrist accelerometer.

    Produces gravity-dominated readings with tiny noise while the wrist is
    still, and larger swings while it is moving. Readings go through the
    same WristMotionDetector as real data.
    """

    STILL_NOISE_G = 0.003
    MOVING_SWING_G = 0.3

    def __init__(
        self,
        callback: Optional[Callable[[bool], None]] = None,
        interval: float = 1.0,
        threshold_g: float = DEFAULT_MOTION_THRESHOLD_G,
        seed: Optional[int] = None,
    ):
        super().__init__(callback, threshold_g)
        self.interval = interval
        self._moving = False
        self._random = random.Random(seed)

        logger.info("MockAccelerometer initialized")

    def _run_loop(self) -> None:
        while self._wait(self.interval):
            self.deliver_acceleration(self.generate_sample())

    def generate_sample(self) -> AccelerationSample:
        spread = self.MOVING_SWING_G if self._moving else self.STILL_NOISE_G
        return AccelerationSample(
            x=self._random.uniform(-spread, spread),
            y=-1.0 + self._random.uniform(-spread, spread),
            z=self._random.uniform(-spread, spread),
        )

    def simulate_moving(self, moving: bool = True) -> None:
        self._moving = moving
        logger.info(f"MockAccelerometer: Simulating moving={moving}")


class MockScenarioRunner:
    """Helper class to run demo scenarios with mocks."""

    def __init__(
        self,
        heart_rate: MockHeartRateSensor,
        accelerometer: MockAccelerometer,
    ):
        self.heart_rate = heart_rate
        self.accelerometer = accelerometer

    def scenario_awake(self) -> None:
        """Wrist still, heart rate at resting level."""
        self.heart_rate.simulate_drowsy(False)
        self.accelerometer.simulate_moving(False)
        logger.info("Scenario: Awake")

    def scenario_drowsy(self, drop: float = 10.0) -> None:
        """Wrist still, heart rate dropping below baseline."""
        self.heart_rate.simulate_drowsy(True, drop=drop)
        self.accelerometer.simulate_moving(False)
        logger.info(f"Scenario: Drowsy (drop={drop} bpm)")

    def scenario_moving(self) -> None:
        """Wrist moving; heart rate low but alerts gated by motion."""
        self.heart_rate.simulate_drowsy(True)
        self.accelerometer.simulate_moving(True)
        logger.info("Scenario: Moving")

    def run(self, name: str, **kwargs) -> None:
        """Run a scenario by name ("awake", "drowsy" or "moving")."""
        scenario = getattr(self, f"scenario_{name}", None)
        if scenario is None:
            raise ValueError(f"Unknown scenario '{name}'")
        scenario(**kwargs)
