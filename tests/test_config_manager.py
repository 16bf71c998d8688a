"""Tests for llm_usage_tracker.services.config_manager."""

import logging

import pytest

from llm_usage_tracker.services.config_manager import DEFAULTS, REFRESH_RATE_MS, ConfigManager


@pytest.fixture
def config(qapp, store):
    """Create a ConfigManager over an isolated store."""
    return ConfigManager(store)


# ---------------------------------------------------------------------------
# 1. Defaults
# ---------------------------------------------------------------------------

def test_default_string(config):
    """Unset keys return the value from DEFAULTS."""
    assert config.get_string("refreshRate") == DEFAULTS["refreshRate"] == "15min"
    assert config.get_string("normalFontSize") == "medium"


def test_default_bool(config):
    assert config.get_bool("debugLogging") is False


def test_unknown_key(config):
    assert config.get_string("nope") == ""
    assert config.get_int("nope") == 0


# ---------------------------------------------------------------------------
# 2. Typed setters
# ---------------------------------------------------------------------------

def test_set_get_string(config):
    config.set_string("miniFontSize", "large")
    assert config.get_string("miniFontSize") == "large"


def test_set_get_int(config):
    config.set_int("windowWidth", 640)
    assert config.get_int("windowWidth") == 640


def test_invalid_int_falls_back(config, store):
    store.set_setting("windowWidth", "wide")
    assert config.get_int("windowWidth") == 0


def test_int_of_non_numeric_default(config, store):
    """Keys whose default is not an int read as 0 through get_int."""
    assert config.get_int("refreshRate") == 0
    assert config.get_int("debugLogging") == 0

    store.set_setting("refreshRate", "1hour")
    assert config.get_int("refreshRate") == 0


def test_set_get_bool(config, store):
    config.set_bool("debugLogging", True)
    assert config.get_bool("debugLogging") is True
    assert store.get_setting("debugLogging") == "true"

    config.set_bool("debugLogging", False)
    assert config.get_bool("debugLogging") is False


def test_values_persist_in_store(config, store):
    """Values written through the manager are visible to a second manager."""
    config.set_string("refreshRate", "1hour")
    assert ConfigManager(store).get_string("refreshRate") == "1hour"


# ---------------------------------------------------------------------------
# 3. Settings changed signal
# ---------------------------------------------------------------------------

def test_settings_changed_signal(config):
    """settings_changed emits the key that was changed."""
    keys = []
    config.settings_changed.connect(lambda k: keys.append(k))
    config.set_string("refreshRate", "30min")
    config.set_bool("debugLogging", True)
    assert keys == ["refreshRate", "debugLogging"]


# ---------------------------------------------------------------------------
# 4. Refresh interval
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("rate", ["15min", "30min", "1hour"])
def test_refresh_interval(config, rate):
    config.set_string("refreshRate", rate)
    assert config.refresh_interval_ms() == REFRESH_RATE_MS[rate]


def test_refresh_interval_default(config):
    assert config.refresh_interval_ms() == 15 * 60 * 1000


def test_unknown_refresh_rate_uses_default(config, caplog):
    config.set_string("refreshRate", "5sec")
    with caplog.at_level(logging.WARNING):
        assert config.refresh_interval_ms() == REFRESH_RATE_MS["15min"]
    assert "5sec" in caplog.text
