import json

import pytest

from neorisk.config.preferences import (
    ClockSettings,
    JsonPreferenceStore,
    load_clock_settings,
    rate_persister,
)
from neorisk.config.settings import (
    DEFAULT_RATE,
    RATE_PRESETS,
    RATE_STORAGE_KEY,
    clamp_rate,
    rate_label,
    validate_settings,
)


def test_settings_are_consistent():
    validate_settings()
    assert DEFAULT_RATE == RATE_PRESETS["1wk"] == 604800.0
    assert rate_label(86400.0) == "1d"
    assert rate_label(12.5) is None


@pytest.mark.parametrize("raw, expected", [
    (None, DEFAULT_RATE),
    ("3600", 3600.0),
    ("garbage", DEFAULT_RATE),
    (-5, DEFAULT_RATE),
    (float("nan"), DEFAULT_RATE),
    (0, DEFAULT_RATE),
])
def test_clamp_rate(raw, expected):
    assert clamp_rate(raw) == expected


def test_missing_file_gives_default_settings(tmp_path):
    store = JsonPreferenceStore(str(tmp_path / "prefs.json"))
    settings = load_clock_settings(store)
    assert settings == ClockSettings()
    assert settings.label == "1wk"


def test_persisted_rate_round_trips(tmp_path):
    path = tmp_path / "prefs.json"
    store = JsonPreferenceStore(str(path))
    rate_persister(store)(86400.0)

    assert json.loads(path.read_text(encoding="utf-8")) == {RATE_STORAGE_KEY: "86400.0"}
    assert load_clock_settings(JsonPreferenceStore(str(path))).rate_multiplier == 86400.0


def test_corrupt_file_is_treated_as_empty(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonPreferenceStore(str(path))

    assert store.get(RATE_STORAGE_KEY) is None
    assert load_clock_settings(store).rate_multiplier == DEFAULT_RATE

    store.set("other", 1)
    assert store.get("other") == 1


def test_invalid_stored_rate_falls_back(tmp_path):
    path = tmp_path / "prefs.json"
    path.write_text(json.dumps({RATE_STORAGE_KEY: "-10"}), encoding="utf-8")
    assert load_clock_settings(JsonPreferenceStore(str(path))).rate_multiplier == DEFAULT_RATE
