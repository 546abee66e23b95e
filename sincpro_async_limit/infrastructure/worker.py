"""
Worker component that owns the dedicated event loop thread.
"""

import asyncio
import concurrent.futures
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from sincpro_async_limit.config import Settings
from sincpro_async_limit.infrastructure.event_loop import EventLoop

logger = logging.getLogger(__name__)
T = TypeVar("T")


class Worker:
    """
    Worker that manages the execution of async tasks in a separate thread.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """Initialize the Worker component."""
        settings = settings or Settings.from_env()
        self._event_loop = EventLoop(
            use_uvloop=settings.use_uvloop, shutdown_timeout=settings.shutdown_timeout
        )
        logger.debug("Worker initialized")

    def start(self) -> None:
        """Start the worker in a separate thread."""
        self._event_loop.start()
        logger.debug("Worker started")

    def run_coroutine(self, coro: Awaitable[T]) -> Optional[concurrent.futures.Future]:
        """
        Run a coroutine in the worker's event loop.

        Args:
            coro: The coroutine to run

        Returns:
            A concurrent future for the result of the coroutine, or None if failed
        """
        return self._event_loop.run_coroutine(coro)

    def call(self, callback: Callable[..., T], *args: Any) -> T:
        """Run a callable on the worker thread and return its result."""
        return self._event_loop.call(callback, *args)

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        """Schedule a callable on the worker thread without waiting for it."""
        self._event_loop.call_soon(callback, *args)

    def get_event_loop(self) -> Optional[asyncio.AbstractEventLoop]:
        """Get the event loop instance."""
        return self._event_loop.get_loop()

    def shutdown(self) -> None:
        """Shutdown the worker."""
        self._event_loop.shutdown()
        logger.debug("Worker shutdown completed")

    def is_running(self) -> bool:
        """Check if the worker is running."""
        return self._event_loop.is_running()
