# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Baseline heart-rate estimation.

The baseline is the mean of the first N heart-rate samples observed after
detection starts. Once established it stays fixed until reset().
"""

import logging
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

BASELINE_SAMPLE_COUNT = 10


class BaselineEstimator:
    """Collects the first N samples of a session and freezes their mean.

    Attributes:
        target: Number of samples required (N)
        baseline: Mean of the collected window, or None while collecting
    """

    def __init__(self, target: int = BASELINE_SAMPLE_COUNT):
        if target < 1:
            raise ValueError("Baseline sample count must be at least 1")
        self.target = target
        self._history: List[float] = []
        self._baseline: Optional[float] = None

    @property
    def baseline(self) -> Optional[float]:
        return self._baseline

    @property
    def history(self) -> Tuple[float, ...]:
        return tuple(self._history)

    @property
    def sample_count(self) -> int:
        return len(self._history)

    @property
    def is_established(self) -> bool:
        return self._baseline is not None

    def ingest(self, bpm: float) -> Optional[float]:
        """Feed one sample into the baseline window.

        The Nth sample establishes the baseline in the same call.

        Args:
            bpm: Heart rate in beats per minute (not validated)

        Returns:
            The baseline if it is established, else None
        """
        if self._baseline is not None:
            return self._baseline

        if len(self._history) < self.target:
            self._history.append(bpm)
            logger.debug(
                f"Baseline sample {len(self._history)}/{self.target}: {bpm} bpm"
            )

        if len(self._history) == self.target:
            self._baseline = sum(self._history) / self.target
            logger.info(f"Baseline heart rate established: {self._baseline:.1f} bpm")

        return self._baseline

    def reset(self) -> None:
        """Clear the window and the baseline."""
        self._history = []
        self._baseline = None
