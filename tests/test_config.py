"""Tests for environment configuration."""

import pytest

from fitlog.config import Config
from fitlog.errors import ConfigError


@pytest.fixture
def env(monkeypatch):
    for name in (
        "FITLOG_REQUEST_TIMEOUT",
        "FITLOG_LOG_FORMAT",
        "FITLOG_LOG_LEVEL",
        "FITLOG_FIREBASE_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("FITLOG_REST_URL", "https://db.example.test")
    monkeypatch.setenv("FITLOG_API_KEY", "anon-key")
    return monkeypatch


def test_defaults(env):
    config = Config.from_env()
    assert config.rest_url == "https://db.example.test"
    assert config.api_key == "anon-key"
    assert config.request_timeout_seconds is None
    assert config.log_format == "text"
    assert config.log_level == "INFO"
    assert config.firebase_api_key is None
    assert config.rest_base == "https://db.example.test/rest/v1"


def test_overrides(env):
    env.setenv("FITLOG_REQUEST_TIMEOUT", "2.5")
    env.setenv("FITLOG_LOG_FORMAT", "json")
    env.setenv("FITLOG_LOG_LEVEL", "debug")
    env.setenv("FITLOG_FIREBASE_API_KEY", "fb-key")
    config = Config.from_env()
    assert config.request_timeout_seconds == 2.5
    assert config.log_format == "json"
    assert config.log_level == "DEBUG"
    assert config.firebase_api_key == "fb-key"


@pytest.mark.parametrize("missing", ["FITLOG_REST_URL", "FITLOG_API_KEY"])
def test_required_values(env, missing):
    env.delenv(missing)
    with pytest.raises(ConfigError, match=f"{missing} must be set"):
        Config.from_env()


def test_config_is_frozen(env):
    config = Config.from_env()
    with pytest.raises(AttributeError):
        config.api_key = "other"


@pytest.mark.parametrize(
    "raw, message",
    [
        ("abc", "FITLOG_REQUEST_TIMEOUT must be a number"),
        ("0", "FITLOG_REQUEST_TIMEOUT must be a positive number"),
        ("-3", "FITLOG_REQUEST_TIMEOUT must be a positive number"),
        ("inf", "FITLOG_REQUEST_TIMEOUT must be a positive number"),
    ],
)
def test_bad_timeout_is_config_error(env, raw, message):
    env.setenv("FITLOG_REQUEST_TIMEOUT", raw)
    with pytest.raises(ConfigError, match=message):
        Config.from_env()


def test_bad_log_level_is_config_error(env):
    env.setenv("FITLOG_LOG_LEVEL", "loud")
    with pytest.raises(ConfigError, match="FITLOG_LOG_LEVEL must be one of"):
        Config.from_env()


def test_bad_log_format_is_config_error(env):
    env.setenv("FITLOG_LOG_FORMAT", "xml")
    with pytest.raises(ConfigError, match="FITLOG_LOG_FORMAT must be one of text, json"):
        Config.from_env()


def test_log_format_is_case_insensitive(env):
    env.setenv("FITLOG_LOG_FORMAT", " JSON ")
    assert Config.from_env().log_format == "json"
