# =============================================================================
# DISCLAIMER: This software is NOT a medical device and is NOT intended for
# medical monitoring, diagnosis, or treatment. This is a proof of concept for
# educational purposes only. Do not rely on this system for health decisions.
# =============================================================================
"""Configuration loader for NapAlert.

Loads configuration from YAML file with environment variable substitution.
"""

import os
import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from napalert.models import Sensitivity

logger = logging.getLogger(__name__)

# Default config file locations (in order of priority)
CONFIG_PATHS = [
    "config.local.yaml",  # Local overrides (not in git)
    "config.yaml",        # Default config
]


@dataclass
class DetectionConfig:
    """Drowsiness detection settings."""
    baseline_sample_count: int = 10
    default_sensitivity: str = "medium"
    # Turn detection on as soon as the app starts
    start_on_launch: bool = False


@dataclass
class SensorsConfig:
    """Sensor adapter settings."""
    # Seconds between simulated heart-rate samples
    heart_rate_interval_seconds: float = 5.0
    # Accelerometer update interval
    motion_interval_seconds: float = 1.0
    # Change in acceleration (g) between samples that counts as moving
    motion_threshold_g: float = 0.02
    # Recordings used when mock_mode is off
    heart_rate_file: str = ""
    motion_file: str = ""
    # Playback speed for recordings (2.0 = twice as fast)
    replay_speed: float = 1.0


@dataclass
class PreferencesConfig:
    """Where the wearer's sensitivity choice is stored."""
    path: str = "data/preferences.yaml"


@dataclass
class LocalAudioConfig:
    """Local audio pulse played for each drowsiness event."""
    enabled: bool = True
    alert_sound: str = "sounds/alert.wav"
    volume: int = 90


@dataclass
class WebhookConfig:
    """JSON webhook notified for each drowsiness event."""
    enabled: bool = False
    url: str = ""
    timeout_seconds: float = 10.0


@dataclass
class AlertingConfig:
    """Alerting configuration container."""
    local_audio: LocalAudioConfig = field(default_factory=LocalAudioConfig)
    webhook: WebhookConfig = field(default_factory=WebhookConfig)


@dataclass
class WebConfig:
    """Status API configuration."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 5000


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: str = "logs/napalert.log"
    max_size_mb: int = 10
    backup_count: int = 5


@dataclass
class Config:
    """Main configuration container.

    This is the root configuration object containing all settings.
    """
    mock_mode: bool = False
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    sensors: SensorsConfig = field(default_factory=SensorsConfig)
    preferences: PreferencesConfig = field(default_factory=PreferencesConfig)
    alerting: AlertingConfig = field(default_factory=AlertingConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Internal: base path for resolving relative paths
    _base_path: Path = field(default_factory=Path.cwd)

    def resolve_path(self, path: str) -> Path:
        """Resolve a path relative to the config file location."""
        p = Path(path)
        if p.is_absolute():
            return p
        return self._base_path / p


def _substitute_env_vars(value: Any) -> Any:
    """Recursively substitute ${VAR} patterns with environment variables.

    Args:
        value: Value to process (can be str, dict, list, or other)

    Returns:
        Value with environment variables substituted
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}]+)\}'

        def replace_env(match):
            var_name = match.group(1)
            env_value = os.environ.get(var_name, "")
            if not env_value:
                logger.warning(f"Environment variable {var_name} not set")
            return env_value

        return re.sub(pattern, replace_env, value)

    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]

    return value


def _dict_to_dataclass(cls, data: Dict[str, Any]):
    """Convert a dictionary to a dataclass, handling nested structures.

    Args:
        cls: The dataclass type to create
        data: Dictionary of values

    Returns:
        Instance of cls populated with data
    """
    if data is None:
        return cls()

    field_types = {f.name: f.type for f in cls.__dataclass_fields__.values()}

    kwargs = {}
    for field_name, field_type in field_types.items():
        if field_name.startswith('_'):
            continue

        if field_name not in data:
            continue

        value = data[field_name]

        if hasattr(field_type, '__dataclass_fields__'):
            kwargs[field_name] = _dict_to_dataclass(field_type, value)
        else:
            kwargs[field_name] = value

    return cls(**kwargs)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("true", "1", "yes")


def load_config(config_path: Optional[str] = None, base_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, searches default locations.
        base_path: Base path for resolving relative paths. Defaults to cwd.

    Returns:
        Config object with all settings loaded

    Raises:
        FileNotFoundError: If no config file is found
        ValueError: If required settings are missing or invalid
        yaml.YAMLError: If config file is invalid YAML
    """
    env_path = Path(base_path or Path.cwd()) / ".env"
    if env_path.exists():
        load_dotenv(env_path)
        logger.debug(f"Loaded environment from {env_path}")

    if config_path:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        base = base_path or Path.cwd()
        config_file = None
        for path in CONFIG_PATHS:
            candidate = base / path
            if candidate.exists():
                config_file = candidate
                break

        if config_file is None:
            raise FileNotFoundError(
                f"No config file found. Searched: {', '.join(CONFIG_PATHS)}"
            )

    logger.info(f"Loading config from {config_file}")

    with open(config_file, 'r') as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        raw_config = {}

    config_data = _substitute_env_vars(raw_config)

    if _env_flag("MOCK_HARDWARE"):
        logger.info("MOCK_HARDWARE environment variable set - enabling mock mode")
        config_data["mock_mode"] = True

    config = _dict_to_dataclass(Config, config_data)
    config._base_path = config_file.parent

    _validate_config(config)

    return config


def _validate_config(config: Config) -> None:
    """Validate configuration settings.

    Args:
        config: Config object to validate

    Raises:
        ValueError: If required settings are missing or invalid
    """
    errors = []

    if config.detection.baseline_sample_count < 1:
        errors.append("detection.baseline_sample_count must be at least 1")

    try:
        Sensitivity.parse(config.detection.default_sensitivity)
    except ValueError:
        logger.warning(
            f"detection.default_sensitivity '{config.detection.default_sensitivity}' "
            "is not recognized, using medium"
        )
        config.detection.default_sensitivity = "medium"

    if not config.mock_mode:
        if not config.sensors.heart_rate_file:
            errors.append("sensors.heart_rate_file is required (or enable mock_mode)")
        if not config.sensors.motion_file:
            errors.append("sensors.motion_file is required (or enable mock_mode)")

    if config.sensors.replay_speed <= 0:
        logger.warning("sensors.replay_speed must be positive, using 1.0")
        config.sensors.replay_speed = 1.0

    if config.sensors.motion_threshold_g < 0:
        logger.warning("sensors.motion_threshold_g must not be negative, using 0.02")
        config.sensors.motion_threshold_g = 0.02

    if config.alerting.local_audio.volume < 0 or config.alerting.local_audio.volume > 100:
        logger.warning("alerting.local_audio.volume must be 0-100, clamping to valid range")
        config.alerting.local_audio.volume = max(0, min(100, config.alerting.local_audio.volume))

    if config.alerting.webhook.enabled and not config.alerting.webhook.url:
        logger.warning("alerting.webhook.url not set - webhook notifications disabled")
        config.alerting.webhook.enabled = False

    if errors:
        raise ValueError("Configuration errors:\n  " + "\n  ".join(errors))


def get_default_config() -> Config:
    """Get a Config object with all default values.

    Useful for testing or when no config file exists.

    Returns:
        Config with default values
    """
    return Config()
