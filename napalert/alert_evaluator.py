# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Drowsiness evaluation against an established baseline.

Rules, applied to each heart-rate sample once a baseline exists:
- Wrist moving: no evaluation (motion always wins)
- Wrist still: drowsy when baseline - sample > threshold (strict)

There is no debounce: every qualifying sample is reported.
"""

import logging
from typing import Optional

from napalert.models import DEFAULT_SENSITIVITY, Evaluation

logger = logging.getLogger(__name__)


class AlertEvaluator:
    """Stateless evaluator holding the active drop threshold."""

    def __init__(self, threshold: float = DEFAULT_SENSITIVITY.threshold):
        self.threshold = threshold

    def evaluate(
        self,
        heart_rate: float,
        baseline: Optional[float],
        is_moving: bool,
    ) -> Evaluation:
        """Classify one sample.

        Args:
            heart_rate: Current sample in bpm
            baseline: Established baseline, or None while collecting
            is_moving: Latest known motion state

        Returns:
            COLLECTING, MOVING, AWAKE or DROWSY
        """
        if baseline is None:
            return Evaluation.COLLECTING

        if is_moving:
            logger.debug(f"Wrist moving, skipping evaluation ({heart_rate} bpm)")
            return Evaluation.MOVING

        if baseline - heart_rate > self.threshold:
            logger.warning(
                f"Drowsiness detected ({heart_rate} < {baseline - self.threshold:.1f})"
            )
            return Evaluation.DROWSY

        logger.debug(f"Awake heart rate. Baseline: {baseline:.1f}, current: {heart_rate}")
        return Evaluation.AWAKE
