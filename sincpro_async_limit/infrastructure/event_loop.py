"""
EventLoop component that runs a dedicated event loop in a daemon thread.
Simple and direct approach: it always owns its loop.
"""

import asyncio
import concurrent.futures
import logging
import threading
import warnings
from typing import Any, Awaitable, Callable, Optional, TypeVar

import uvloop

from sincpro_async_limit.config import DEFAULT_SHUTDOWN_TIMEOUT

logger = logging.getLogger(__name__)
T = TypeVar("T")

THREAD_NAME = "AsyncLimitThread"


class EventLoop:
    """
    EventLoop that owns a fresh loop running in its own thread.
    Never reuses a loop that belongs to the caller.
    """

    def __init__(
        self, use_uvloop: bool = True, shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT
    ) -> None:
        """Initialize the EventLoop."""
        self._use_uvloop = use_uvloop
        self._shutdown_timeout = shutdown_timeout
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._is_running = False
        logger.debug("EventLoop initialized")

    def start(self) -> None:
        """Start the event loop if not already running."""
        if self._is_running:
            logger.warning("EventLoop is already running")
            return

        try:
            if self._use_uvloop:
                self._loop = uvloop.new_event_loop()
            else:
                self._loop = asyncio.new_event_loop()

            started = threading.Event()
            self._thread = threading.Thread(
                target=self._run_forever, args=(started,), name=THREAD_NAME, daemon=True
            )
            self._thread.start()
            started.wait()
            self._is_running = True
            logger.info("Started event loop in new thread")

        except Exception as e:
            error_msg = f"Failed to start event loop: {e}"
            logger.error(error_msg)
            warnings.warn(error_msg, RuntimeWarning)
            self._is_running = False

    def _run_forever(self, started: threading.Event) -> None:
        loop = self._loop
        asyncio.set_event_loop(loop)
        loop.call_soon(started.set)
        try:
            loop.run_forever()
        finally:
            # Let cancelled tasks unwind before the loop is closed
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_asyncgens())

    def run_coroutine(self, coro: Awaitable[T]) -> Optional[concurrent.futures.Future]:
        """Run a coroutine in the event loop from any other thread."""
        if not self._is_running:
            self.start()

        if not self._is_running or self._loop is None:
            warnings.warn("No event loop available", RuntimeWarning)
            return None

        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def call(self, callback: Callable[..., T], *args: Any) -> T:
        """
        Run a plain callable on the loop thread and wait for its return value.

        When already on the loop thread the callable runs inline.
        """
        loop = self.get_loop()
        if self.in_loop_thread():
            return callback(*args)

        async def invoke() -> T:
            return callback(*args)

        return asyncio.run_coroutine_threadsafe(invoke(), loop).result()

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        """Schedule a callable on the loop thread from any thread."""
        if self.is_running():
            self._loop.call_soon_threadsafe(callback, *args)

    def in_loop_thread(self) -> bool:
        """Check if the caller is running on the loop thread."""
        return self._thread is not None and threading.current_thread() is self._thread

    def get_loop(self) -> Optional[asyncio.AbstractEventLoop]:
        """Get the current event loop."""
        if not self._is_running:
            self.start()
        return self._loop

    def shutdown(self) -> None:
        """Stop the loop, wait for its thread and close it."""
        if not self._is_running:
            return

        try:
            logger.info("Shutting down owned event loop")
            self._loop.call_soon_threadsafe(self._loop.stop)

            if self._thread and self._thread.is_alive():
                self._thread.join(timeout=self._shutdown_timeout)

            if self._thread and self._thread.is_alive():
                logger.warning("Event loop thread did not terminate gracefully")
            elif not self._loop.is_closed():
                self._loop.close()

        except Exception as e:
            error_msg = f"Error during shutdown: {e}"
            logger.error(error_msg)
            warnings.warn(error_msg, RuntimeWarning)
        finally:
            self._loop = None
            self._thread = None
            self._is_running = False

    def is_running(self) -> bool:
        """Check if the event loop is running."""
        return self._is_running and self._loop is not None and not self._loop.is_closed()
