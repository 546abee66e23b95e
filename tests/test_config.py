"""
Tests for environment driven settings.
"""

import math

import pytest

from sincpro_async_limit.config import (
    CONCURRENCY_ENV,
    DEFAULT_CONCURRENCY,
    SHUTDOWN_TIMEOUT_ENV,
    UNBOUNDED,
    USE_UVLOOP_ENV,
    Settings,
    parse_concurrency,
    validate_concurrency,
)
from sincpro_async_limit.exceptions import InvalidConcurrencyError


def test_defaults_when_environment_is_empty():
    settings = Settings.from_env({})

    assert settings.default_concurrency == DEFAULT_CONCURRENCY
    assert settings.use_uvloop is True
    assert settings.shutdown_timeout == 2.0


def test_reads_values_from_environment():
    settings = Settings.from_env(
        {CONCURRENCY_ENV: "4", USE_UVLOOP_ENV: "false", SHUTDOWN_TIMEOUT_ENV: "0.5"}
    )

    assert settings.default_concurrency == 4
    assert settings.use_uvloop is False
    assert settings.shutdown_timeout == 0.5


def test_reads_os_environ_by_default(monkeypatch):
    monkeypatch.setenv(CONCURRENCY_ENV, "7")
    assert Settings.from_env().default_concurrency == 7


@pytest.mark.parametrize("raw", ["inf", "Infinity", " unbounded "])
def test_unbounded_names(raw):
    assert parse_concurrency(raw) == UNBOUNDED


@pytest.mark.parametrize("raw", ["0", "-2", "1.5", "many"])
def test_invalid_concurrency_text(raw):
    with pytest.raises(InvalidConcurrencyError):
        Settings.from_env({CONCURRENCY_ENV: raw})


def test_settings_validate_direct_construction():
    with pytest.raises(InvalidConcurrencyError):
        Settings(default_concurrency=0)


@pytest.mark.parametrize("value", [1, 2, 1000, math.inf])
def test_validate_concurrency_accepts(value):
    assert validate_concurrency(value) == value


@pytest.mark.parametrize("value", [0, -1, 1.5, 2.0, True, False, None, "3", -math.inf])
def test_validate_concurrency_rejects(value):
    with pytest.raises(InvalidConcurrencyError) as exc_info:
        validate_concurrency(value)
    assert exc_info.value.value is value
