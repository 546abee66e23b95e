"""
Environment driven settings for sincpro_async_limit.
"""

import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from sincpro_async_limit.exceptions import InvalidConcurrencyError

UNBOUNDED = math.inf

CONCURRENCY_ENV = "SINCPRO_ASYNC_LIMIT_CONCURRENCY"
USE_UVLOOP_ENV = "SINCPRO_ASYNC_LIMIT_USE_UVLOOP"
SHUTDOWN_TIMEOUT_ENV = "SINCPRO_ASYNC_LIMIT_SHUTDOWN_TIMEOUT"

DEFAULT_CONCURRENCY = 10
DEFAULT_SHUTDOWN_TIMEOUT = 2.0

_UNBOUNDED_NAMES = {"inf", "infinity", "unbounded"}
_FALSE_NAMES = {"0", "false", "no", "off"}


def validate_concurrency(value: object) -> Union[int, float]:
    """
    Check that value is a usable concurrency limit.

    Args:
        value: Candidate limit

    Returns:
        The value itself when valid

    Raises:
        InvalidConcurrencyError: If value is not a positive int or UNBOUNDED
    """
    if isinstance(value, bool):
        raise InvalidConcurrencyError(value)
    if isinstance(value, int) and value >= 1:
        return value
    if isinstance(value, float) and value == UNBOUNDED:
        return value
    raise InvalidConcurrencyError(value)


def parse_concurrency(raw: str) -> Union[int, float]:
    """Parse a concurrency limit written as text."""
    text = raw.strip().lower()
    if text in _UNBOUNDED_NAMES:
        return UNBOUNDED
    try:
        value = int(text)
    except ValueError:
        raise InvalidConcurrencyError(raw) from None
    return validate_concurrency(value)


@dataclass(frozen=True)
class Settings:
    default_concurrency: Union[int, float] = DEFAULT_CONCURRENCY
    use_uvloop: bool = True
    shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT

    def __post_init__(self) -> None:
        validate_concurrency(self.default_concurrency)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from, defaults to os.environ

        Returns:
            Settings with unset variables falling back to defaults
        """
        env = os.environ if environ is None else environ

        concurrency: Union[int, float] = DEFAULT_CONCURRENCY
        if env.get(CONCURRENCY_ENV):
            concurrency = parse_concurrency(env[CONCURRENCY_ENV])

        use_uvloop = env.get(USE_UVLOOP_ENV, "1").strip().lower() not in _FALSE_NAMES

        shutdown_timeout = DEFAULT_SHUTDOWN_TIMEOUT
        if env.get(SHUTDOWN_TIMEOUT_ENV):
            shutdown_timeout = float(env[SHUTDOWN_TIMEOUT_ENV])

        return cls(
            default_concurrency=concurrency,
            use_uvloop=use_uvloop,
            shutdown_timeout=shutdown_timeout,
        )
