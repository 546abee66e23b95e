"""
Core implementation of the process-wide limiter for synchronous callers.
"""

import threading
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from sincpro_async_limit.domain.scheduler import Concurrency
from sincpro_async_limit.infrastructure.dispatcher import Dispatcher

T = TypeVar("T")

_dispatcher: Optional[Dispatcher] = None
_lock = threading.Lock()


def get_dispatcher() -> Dispatcher:
    """Return the process-wide dispatcher, creating it on first use."""
    global _dispatcher

    with _lock:
        if _dispatcher is None:
            _dispatcher = Dispatcher()
        return _dispatcher


def run_limited_task(
    task: Callable[..., Union[Awaitable[T], T]],
    *args: Any,
    timeout: Optional[float] = None,
    **kwargs: Any,
) -> T:
    """
    Run a task through the process-wide scheduler and wait for its result.

    This is the main interface for synchronous code. If the dispatcher
    hasn't been initialized, it will be automatically created with the
    concurrency configured in SINCPRO_ASYNC_LIMIT_CONCURRENCY.

    Args:
        task: Callable returning a value or an awaitable
        *args: Positional arguments forwarded to the task
        timeout: Maximum time to wait for the result in seconds
        **kwargs: Keyword arguments forwarded to the task

    Returns:
        The result of the task

    Raises:
        TimeoutError: If the operation times out
        Exception: Any exception raised by the task
    """
    return get_dispatcher().execute(task, *args, timeout=timeout, **kwargs)


def set_concurrency(value: Concurrency) -> None:
    """Change the limit of the process-wide scheduler."""
    get_dispatcher().concurrency = value


def shutdown() -> None:
    """Stop the process-wide dispatcher. A later call starts a new one."""
    global _dispatcher

    with _lock:
        if _dispatcher is not None:
            _dispatcher.shutdown()
            _dispatcher = None
