# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Wrist motion detection from accelerometer readings.

Consecutive 3-axis samples are compared; when the magnitude of the change
exceeds the threshold (in g) the wrist is considered to be moving.

Usage:
    detector = WristMotionDetector()
    is_moving = detector.update(AccelerationSample(0.01, -0.98, 0.12))
    if is_moving is None:
        # First sample only primes the detector
        ...
"""

from typing import Optional

import numpy as np

from napalert.models import AccelerationSample

DEFAULT_MOTION_THRESHOLD_G = 0.02


class WristMotionDetector:
    """Derive an is-moving flag from consecutive accelerometer samples."""

    def __init__(self, threshold_g: float = DEFAULT_MOTION_THRESHOLD_G) -> None:
        self.threshold_g = threshold_g
        self._last: Optional[np.ndarray] = None
        self.is_moving: Optional[bool] = None

    def update(self, sample: AccelerationSample) -> Optional[bool]:
        """Feed one sample; returns the motion flag, or None when priming."""
        current = np.array([sample.x, sample.y, sample.z], dtype=np.float64)

        if self._last is not None:
            delta = float(np.linalg.norm(current - self._last))
            self.is_moving = delta > self.threshold_g

        self._last = current
        return self.is_moving

    def reset(self) -> None:
        self._last = None
        self.is_moving = None
