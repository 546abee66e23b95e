"""
Exception module for sincpro_async_limit.

This module defines specific exceptions that may be raised by the component.
Failures raised by submitted tasks are never wrapped: they reach the caller
unchanged through the task's own future.
"""


class AsyncLimitError(Exception):
    """Base exception for errors in the async limiter."""


class InvalidConcurrencyError(AsyncLimitError, ValueError):
    """Raised when a concurrency limit is not a positive integer or UNBOUNDED."""

    def __init__(self, value: object) -> None:
        super().__init__(
            f"Expected concurrency to be an integer from 1 and up or UNBOUNDED, got {value!r}"
        )
        self.value = value


class LimiterNotRunningError(AsyncLimitError):
    """Raised when trying to use a dispatcher that has been shut down."""
