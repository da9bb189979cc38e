# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Data models for NapAlert.

Plain dataclasses and enums shared by the detection core, the sensor
adapters, the alerting layer and the web API.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class Sensitivity(Enum):
    """Detection sensitivity selected by the wearer."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def threshold(self) -> float:
        """Heart-rate drop (bpm) below baseline that counts as drowsy."""
        return DROP_THRESHOLDS[self]

    @property
    def description(self) -> str:
        return SENSITIVITY_DESCRIPTIONS[self]

    @classmethod
    def parse(cls, label: str) -> "Sensitivity":
        """Parse a label such as "medium" (case-insensitive).

        Raises:
            ValueError: If the label is not a known sensitivity
        """
        key = str(label).strip().lower()
        for level in cls:
            if level.value == key:
                return level
        raise ValueError(
            f"Unknown sensitivity '{label}'. Available: {[s.value for s in cls]}"
        )


DROP_THRESHOLDS = {
    Sensitivity.LOW: 7.0,
    Sensitivity.MEDIUM: 5.0,
    Sensitivity.HIGH: 3.0,
}

SENSITIVITY_DESCRIPTIONS = {
    Sensitivity.LOW: "Fewer false detections, but a larger drop is needed",
    Sensitivity.MEDIUM: "Balanced",
    Sensitivity.HIGH: "Detects small changes, but may cause more false detections",
}

DEFAULT_SENSITIVITY = Sensitivity.MEDIUM


class DetectionPhase(Enum):
    """Phase of the drowsiness evaluator within an active session."""
    COLLECTING_BASELINE = "collecting_baseline"
    MONITORING = "monitoring"


class Evaluation(Enum):
    """Outcome of processing a single heart-rate sample."""
    IGNORED = "ignored"        # Detection is off
    COLLECTING = "collecting"  # Sample went into the baseline window
    MOVING = "moving"          # Wrist moving, no evaluation
    AWAKE = "awake"
    DROWSY = "drowsy"


@dataclass
class HeartRateSample:
    """A single heart-rate observation."""
    bpm: float
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class AccelerationSample:
    """A single 3-axis accelerometer reading in g."""
    x: float
    y: float
    z: float
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class DrowsinessEvent:
    """Emitted once per heart-rate sample that qualifies as drowsy."""
    heart_rate: float
    baseline: float
    threshold: float
    sensitivity: Sensitivity
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def drop(self) -> float:
        """How far the heart rate fell below the baseline."""
        return self.baseline - self.heart_rate

    @property
    def message(self) -> str:
        return (
            f"Drowsiness detected: {self.heart_rate:.0f} bpm is "
            f"{self.drop:.1f} bpm below baseline {self.baseline:.1f}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "heart_rate": self.heart_rate,
            "baseline": self.baseline,
            "threshold": self.threshold,
            "drop": self.drop,
            "sensitivity": self.sensitivity.value,
        }


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the detection session for a presentation layer."""
    timestamp: datetime
    is_active: bool
    phase: DetectionPhase
    sensitivity: Sensitivity
    threshold: float
    baseline: Optional[float]
    baseline_progress: int
    baseline_target: int
    is_moving: bool
    last_heart_rate: Optional[float]
    drowsiness_count: int = 0
    last_event_time: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "detection": {
                "active": self.is_active,
                "phase": self.phase.value,
                "sensitivity": self.sensitivity.value,
                "threshold": self.threshold,
            },
            "baseline": {
                "value": self.baseline,
                "progress": self.baseline_progress,
                "target": self.baseline_target,
            },
            "vitals": {
                "heart_rate": self.last_heart_rate,
                "is_moving": self.is_moving,
            },
            "drowsiness": {
                "count": self.drowsiness_count,
                "last_event_time": (
                    self.last_event_time.isoformat() if self.last_event_time else None
                ),
            },
        }
