# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Detection session: the synchronous drowsiness-detection core.

The session ties together the baseline estimator, the alert evaluator, the
active sensitivity and the latest motion state. It performs no I/O and no
locking; exactly one writer may call into it (see state_machine.py).

Phase flow within an active session:
    COLLECTING_BASELINE -> MONITORING (after N samples)
    * -> COLLECTING_BASELINE (on stop/start)

Usage:
    from napalert.session import DetectionSession

    session = DetectionSession()
    session.add_drowsiness_listener(on_event)
    session.start()
    session.on_motion(False)
    session.on_heart_rate(72.0)
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from napalert.alert_evaluator import AlertEvaluator
from napalert.baseline import BASELINE_SAMPLE_COUNT, BaselineEstimator
from napalert.models import (
    DEFAULT_SENSITIVITY, DetectionPhase, DrowsinessEvent,
    Evaluation, SessionSnapshot, Sensitivity
)

logger = logging.getLogger(__name__)

DrowsinessListener = Callable[[DrowsinessEvent], None]
StateListener = Callable[[SessionSnapshot], None]


class DetectionSession:
    """Owns all detection state for one wearer.

    Attributes:
        is_active: Whether detection is turned on
        sensitivity: Active Sensitivity level
        threshold: Drop threshold derived from sensitivity
        is_moving: Latest known motion state
    """

    def __init__(
        self,
        sensitivity: Sensitivity = DEFAULT_SENSITIVITY,
        baseline_sample_count: int = BASELINE_SAMPLE_COUNT,
    ):
        self._estimator = BaselineEstimator(baseline_sample_count)
        self._evaluator = AlertEvaluator(sensitivity.threshold)
        self._sensitivity = sensitivity

        self._active = False
        self._is_moving = False
        self._last_heart_rate: Optional[float] = None

        self._drowsiness_count = 0
        self._last_event_time: Optional[datetime] = None

        self._drowsiness_listeners: List[DrowsinessListener] = []
        self._state_listeners: List[StateListener] = []

    # ==================== Properties ====================

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def sensitivity(self) -> Sensitivity:
        return self._sensitivity

    @property
    def threshold(self) -> float:
        return self._evaluator.threshold

    @property
    def baseline(self) -> Optional[float]:
        return self._estimator.baseline

    @property
    def baseline_history(self):
        return self._estimator.history

    @property
    def phase(self) -> DetectionPhase:
        if self._estimator.is_established:
            return DetectionPhase.MONITORING
        return DetectionPhase.COLLECTING_BASELINE

    @property
    def is_moving(self) -> bool:
        return self._is_moving

    @property
    def last_heart_rate(self) -> Optional[float]:
        return self._last_heart_rate

    def snapshot(self) -> SessionSnapshot:
        """Build a read-only snapshot of the current state."""
        return SessionSnapshot(
            timestamp=datetime.now(),
            is_active=self._active,
            phase=self.phase,
            sensitivity=self._sensitivity,
            threshold=self.threshold,
            baseline=self._estimator.baseline,
            baseline_progress=self._estimator.sample_count,
            baseline_target=self._estimator.target,
            is_moving=self._is_moving,
            last_heart_rate=self._last_heart_rate,
            drowsiness_count=self._drowsiness_count,
            last_event_time=self._last_event_time,
        )

    # ==================== Listeners ====================

    def add_drowsiness_listener(self, listener: DrowsinessListener) -> None:
        self._drowsiness_listeners.append(listener)

    def add_state_listener(self, listener: StateListener) -> None:
        self._state_listeners.append(listener)

    def _publish_state(self) -> None:
        if not self._state_listeners:
            return
        snapshot = self.snapshot()
        for listener in self._state_listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"State listener error: {e}")

    def _publish_drowsiness(self, event: DrowsinessEvent) -> None:
        for listener in self._drowsiness_listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Drowsiness listener error: {e}")

    # ==================== Lifecycle ====================

    def start(self) -> None:
        """Turn detection on with a fresh baseline window."""
        self._active = True
        self._estimator.reset()
        self._drowsiness_count = 0
        self._last_event_time = None
        logger.info("Detection turned on")
        self._publish_state()

    def stop(self) -> None:
        """Turn detection off, clearing the baseline and observed vitals.

        The wrist counts as moving until the next motion reading arrives.
        """
        self._active = False
        self._estimator.reset()
        self._is_moving = True
        self._last_heart_rate = None
        logger.info("Detection turned off")
        self._publish_state()

    def set_sensitivity(self, level: Sensitivity) -> None:
        """Change sensitivity; the baseline is left untouched."""
        self._sensitivity = level
        self._evaluator.threshold = level.threshold
        logger.info(f"Sensitivity changed: {level.value} (threshold {level.threshold} bpm)")
        self._publish_state()

    # ==================== Inputs ====================

    def on_motion(self, is_moving: bool) -> None:
        """Record the latest motion state."""
        self._is_moving = bool(is_moving)
        self._publish_state()

    def on_heart_rate(self, bpm: float) -> Evaluation:
        """Process one heart-rate sample.

        Args:
            bpm: Heart rate in beats per minute

        Returns:
            Evaluation outcome for this sample
        """
        if not self._active:
            return Evaluation.IGNORED

        self._last_heart_rate = bpm

        if not self._estimator.is_established:
            self._estimator.ingest(bpm)
            self._publish_state()
            return Evaluation.COLLECTING

        baseline = self._estimator.baseline
        result = self._evaluator.evaluate(bpm, baseline, self._is_moving)

        if result == Evaluation.DROWSY:
            event = DrowsinessEvent(
                heart_rate=bpm,
                baseline=baseline,
                threshold=self.threshold,
                sensitivity=self._sensitivity,
            )
            self._drowsiness_count += 1
            self._last_event_time = event.timestamp
            self._publish_drowsiness(event)

        self._publish_state()
        return result
