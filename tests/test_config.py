# tests
from pathlib import Path

import pytest

from napalert.config import load_config


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


def test_defaults_from_minimal_file(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("MOCK_HARDWARE", raising=False)
    config = load_config(str(_write(tmp_path, "mock_mode: true\n")), base_path=tmp_path)

    assert config.mock_mode is True
    assert config.detection.baseline_sample_count == 10
    assert config.detection.default_sensitivity == "medium"
    assert config.sensors.motion_threshold_g == 0.02
    assert config.resolve_path("data/preferences.yaml") == tmp_path / "data/preferences.yaml"


def test_nested_values_and_env_substitution(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("HOOK_URL", "http://example.test/hook")
    config = load_config(str(_write(tmp_path, """
mock_mode: true
detection:
  baseline_sample_count: 5
  start_on_launch: true
alerting:
  webhook:
    enabled: true
    url: ${HOOK_URL}
""")), base_path=tmp_path)

    assert config.detection.baseline_sample_count == 5
    assert config.detection.start_on_launch is True
    assert config.alerting.webhook.url == "http://example.test/hook"
    assert config.alerting.webhook.enabled is True


def test_search_default_locations(tmp_path: Path):
    (tmp_path / "config.yaml").write_text("mock_mode: true\n")
    (tmp_path / "config.local.yaml").write_text("mock_mode: true\nweb:\n  port: 6001\n")

    config = load_config(base_path=tmp_path)

    assert config.web.port == 6001


def test_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))
    with pytest.raises(FileNotFoundError):
        load_config(base_path=tmp_path)


def test_mock_hardware_env_override(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("MOCK_HARDWARE", "true")
    config = load_config(str(_write(tmp_path, "mock_mode: false\n")), base_path=tmp_path)
    assert config.mock_mode is True


def test_replay_files_required_without_mock(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("MOCK_HARDWARE", raising=False)
    with pytest.raises(ValueError, match="heart_rate_file"):
        load_config(str(_write(tmp_path, "mock_mode: false\n")), base_path=tmp_path)


def test_invalid_values_are_fixed_or_rejected(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("MOCK_HARDWARE", raising=False)
    config = load_config(str(_write(tmp_path, """
mock_mode: true
detection:
  default_sensitivity: extreme
sensors:
  replay_speed: 0
alerting:
  local_audio:
    volume: 150
  webhook:
    enabled: true
""")), base_path=tmp_path)

    assert config.detection.default_sensitivity == "medium"
    assert config.sensors.replay_speed == 1.0
    assert config.alerting.local_audio.volume == 100
    assert config.alerting.webhook.enabled is False

    with pytest.raises(ValueError, match="baseline_sample_count"):
        load_config(str(_write(tmp_path, "mock_mode: true\ndetection:\n  baseline_sample_count: 0\n")),
                    base_path=tmp_path)
