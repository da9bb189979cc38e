# tests
from pathlib import Path

import yaml

from napalert.models import Sensitivity
from napalert.preferences import SensitivityStore


def test_missing_file_defaults_to_medium(tmp_path: Path):
    store = SensitivityStore(tmp_path / "prefs.yaml")
    assert store.load() == Sensitivity.MEDIUM


def test_save_then_load(tmp_path: Path):
    store = SensitivityStore(tmp_path / "nested" / "prefs.yaml")
    store.save(Sensitivity.HIGH)

    assert store.load() == Sensitivity.HIGH
    assert yaml.safe_load(store.path.read_text()) == {"sensitivity": "high"}


def test_unrecognized_value_defaults_to_medium(tmp_path: Path):
    path = tmp_path / "prefs.yaml"
    path.write_text("sensitivity: extreme\n")
    assert SensitivityStore(path).load() == Sensitivity.MEDIUM


def test_missing_key_and_garbage_default_to_medium(tmp_path: Path):
    path = tmp_path / "prefs.yaml"
    path.write_text("other: 1\n")
    assert SensitivityStore(path).load() == Sensitivity.MEDIUM

    path.write_text("- just\n- a list\n")
    assert SensitivityStore(path).load() == Sensitivity.MEDIUM

    path.write_text("sensitivity: [unclosed\n")
    assert SensitivityStore(path).load() == Sensitivity.MEDIUM


def test_save_keeps_other_keys(tmp_path: Path):
    path = tmp_path / "prefs.yaml"
    path.write_text("theme: dark\nsensitivity: low\n")

    SensitivityStore(path).save(Sensitivity.MEDIUM)

    assert yaml.safe_load(path.read_text()) == {"theme": "dark", "sensitivity": "medium"}
