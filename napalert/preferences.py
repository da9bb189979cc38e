# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Persistence of the wearer's sensitivity preference.

The preference file is a small YAML document holding a single key:

    sensitivity: medium

Anything missing or unrecognized loads as the default (medium).
"""

import logging
from pathlib import Path
from typing import Union

import yaml

from napalert.models import DEFAULT_SENSITIVITY, Sensitivity

logger = logging.getLogger(__name__)

SENSITIVITY_KEY = "sensitivity"


class SensitivityStore:
    """Loads and saves the chosen Sensitivity to a YAML file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Sensitivity:
        """Load the saved sensitivity, falling back to medium."""
        if not self.path.exists():
            return DEFAULT_SENSITIVITY

        try:
            with open(self.path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not read preferences from {self.path}: {e}")
            return DEFAULT_SENSITIVITY

        if not isinstance(data, dict) or data.get(SENSITIVITY_KEY) is None:
            return DEFAULT_SENSITIVITY

        try:
            return Sensitivity.parse(data[SENSITIVITY_KEY])
        except ValueError:
            logger.warning(
                f"Unrecognized saved sensitivity {data[SENSITIVITY_KEY]!r}, "
                f"using {DEFAULT_SENSITIVITY.value}"
            )
            return DEFAULT_SENSITIVITY

    def save(self, level: Sensitivity) -> None:
        """Persist the chosen sensitivity, keeping any other keys."""
        existing = {}
        if self.path.exists():
            try:
                with open(self.path, 'r') as f:
                    existing = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError):
                existing = {}
            if not isinstance(existing, dict):
                existing = {}

        existing[SENSITIVITY_KEY] = level.value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            yaml.dump(existing, f, default_flow_style=False, sort_keys=False)

        logger.debug(f"Sensitivity '{level.value}' saved to {self.path}")
