"""Tests for guard configuration and logging setup."""

from __future__ import annotations

import dataclasses
import logging

import pytest
from pythonjsonlogger import jsonlogger

from config import GuardConfig
from errors import ConfigurationError
from observability import setup_logging

ENV_VARS = ("CSRF_TOKEN_KEY", "CSRF_CHECK_WITHOUT_EXCLUSIONS", "CSRF_ROTATE_ON_SUCCESS", "CSRF_TOKEN_BYTES")


@pytest.fixture(autouse=True)
def _env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    cfg = GuardConfig()
    assert cfg.token_key == "csrf_token"
    assert cfg.check_without_exclusions is False
    assert cfg.rotate_on_success is False
    assert cfg.token_bytes == 32


def test_config_is_immutable():
    cfg = GuardConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.token_key = "other"


def test_from_env_defaults():
    assert GuardConfig.from_env() == GuardConfig()


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("", False),
        ("0", False),
        ("off", False),
        ("1", True),
        ("true", True),
        ("Yes", True),
        (" on ", True),
    ],
)
def test_from_env_flags(value, expected, monkeypatch):
    monkeypatch.setenv("CSRF_CHECK_WITHOUT_EXCLUSIONS", value)
    monkeypatch.setenv("CSRF_ROTATE_ON_SUCCESS", value)
    cfg = GuardConfig.from_env()
    assert cfg.check_without_exclusions is expected
    assert cfg.rotate_on_success is expected


def test_from_env_values(monkeypatch):
    monkeypatch.setenv("CSRF_TOKEN_KEY", "_xsrf")
    monkeypatch.setenv("CSRF_TOKEN_BYTES", "24")
    cfg = GuardConfig.from_env()
    assert cfg.token_key == "_xsrf"
    assert cfg.token_bytes == 24


def test_from_env_custom_prefix(monkeypatch):
    monkeypatch.setenv("APP_TOKEN_KEY", "app-token")
    assert GuardConfig.from_env(prefix="APP_").token_key == "app-token"


@pytest.mark.parametrize(("name", "value"), [("CSRF_TOKEN_KEY", "bad key"), ("CSRF_TOKEN_BYTES", "lots"), ("CSRF_TOKEN_BYTES", "4")])
def test_from_env_invalid(name, value, monkeypatch):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        GuardConfig.from_env()


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        GuardConfig(token_key="no spaces")


def test_setup_logging_installs_json_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("debug")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
