# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""NapAlert - heart-rate based drowsiness detection for wearables.

Usage:
    from napalert.session import DetectionSession
    from napalert.models import Sensitivity

    session = DetectionSession(Sensitivity.MEDIUM)
    session.add_drowsiness_listener(print)
    session.start()
    for bpm in readings:
        session.on_heart_rate(bpm)
"""

from .models import DetectionPhase, DrowsinessEvent, Evaluation, SessionSnapshot, Sensitivity
from .session import DetectionSession

__version__ = "1.0.0"

__all__ = [
    "DetectionPhase",
    "DetectionSession",
    "DrowsinessEvent",
    "Evaluation",
    "SessionSnapshot",
    "Sensitivity",
]
