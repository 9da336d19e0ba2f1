"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from coderunner.config import Config

ENV_VARS = [
    "CODERUNNER_DOCKER_HOST",
    "CODERUNNER_EXECUTION_TIMEOUT",
    "CODERUNNER_IMAGE_POLL_ATTEMPTS",
    "CODERUNNER_IMAGE_POLL_INTERVAL",
    "CODERUNNER_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


def test_defaults():
    config = Config.from_env()
    assert config.docker_host is None
    assert config.execution_timeout == 60
    assert config.timeout == 60
    assert config.image_poll_attempts == 10
    assert config.image_poll_interval == 0.5
    assert config.log_level == "INFO"


def test_overrides(monkeypatch):
    monkeypatch.setenv("CODERUNNER_DOCKER_HOST", "tcp://127.0.0.1:2375")
    monkeypatch.setenv("CODERUNNER_EXECUTION_TIMEOUT", "5")
    monkeypatch.setenv("CODERUNNER_IMAGE_POLL_ATTEMPTS", "3")
    monkeypatch.setenv("CODERUNNER_IMAGE_POLL_INTERVAL", "0.25")
    monkeypatch.setenv("CODERUNNER_LOG_LEVEL", "debug")

    config = Config.load()

    assert config.docker_host == "tcp://127.0.0.1:2375"
    assert config.timeout == 5
    assert config.image_poll_attempts == 3
    assert config.image_poll_interval == 0.25
    assert config.log_level == "DEBUG"


def test_zero_timeout_disables_deadline(monkeypatch):
    monkeypatch.setenv("CODERUNNER_EXECUTION_TIMEOUT", "0")
    config = Config.load()
    assert config.execution_timeout == 0
    assert config.timeout is None


@pytest.mark.parametrize(
    "name, value, message",
    [
        ("CODERUNNER_EXECUTION_TIMEOUT", "soon", "Invalid integer for CODERUNNER_EXECUTION_TIMEOUT"),
        ("CODERUNNER_EXECUTION_TIMEOUT", "-1", "must not be negative"),
        ("CODERUNNER_IMAGE_POLL_INTERVAL", "fast", "Invalid number for CODERUNNER_IMAGE_POLL_INTERVAL"),
        ("CODERUNNER_IMAGE_POLL_ATTEMPTS", "0", "must be at least 1"),
        ("CODERUNNER_LOG_LEVEL", "LOUD", "Invalid CODERUNNER_LOG_LEVEL"),
    ],
)
def test_invalid_values(monkeypatch, name, value, message):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=message):
        Config.load()
