"""
Dispatcher component that lets synchronous code share one Scheduler.
"""

import concurrent.futures
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from sincpro_async_limit.config import Settings, validate_concurrency
from sincpro_async_limit.domain.scheduler import Concurrency
from sincpro_async_limit.exceptions import LimiterNotRunningError
from sincpro_async_limit.infrastructure.worker import Worker
from sincpro_async_limit.scheduler import Scheduler

logger = logging.getLogger(__name__)
T = TypeVar("T")


class Dispatcher:
    """
    Hosts a Scheduler on a dedicated event loop thread.

    Any thread may submit work. Scheduler bookkeeping only ever runs on the
    worker thread, so it never interleaves.
    """

    def __init__(
        self, concurrency: Optional[Concurrency] = None, settings: Optional[Settings] = None
    ) -> None:
        """
        Initialize the Dispatcher component.

        Args:
            concurrency: Limit for the hosted scheduler, defaults to settings
            settings: Settings, read from the environment when omitted

        Raises:
            InvalidConcurrencyError: If concurrency is not valid
        """
        settings = settings or Settings.from_env()
        if concurrency is None:
            concurrency = settings.default_concurrency
        self._closed = False
        self._scheduler = Scheduler(concurrency)
        self._worker = Worker(settings)
        self._worker.start()
        logger.debug("Dispatcher initialized and worker started")

    @property
    def active_count(self) -> int:
        """Number of tasks running on the worker loop."""
        return self._scheduler.active_count

    @property
    def pending_count(self) -> int:
        """Number of tasks waiting for admission."""
        return self._scheduler.pending_count

    @property
    def concurrency(self) -> Concurrency:
        return self._scheduler.concurrency

    @concurrency.setter
    def concurrency(self, value: Concurrency) -> None:
        validate_concurrency(value)
        self._ensure_running()
        self._worker.call(setattr, self._scheduler, "concurrency", value)

    def execute_async(
        self, task: Callable[..., Union[Awaitable[T], T]], *args: Any, **kwargs: Any
    ) -> concurrent.futures.Future:
        """
        Submit a task and return immediately.

        Cancelling the returned future before the task is admitted keeps it
        from ever starting.

        Returns:
            A concurrent future settled with the outcome of the task
        """
        self._ensure_running()
        coro = self._submit(task, args, kwargs)
        future = self._worker.run_coroutine(coro)
        if future is None:
            coro.close()
            raise LimiterNotRunningError("Dispatcher event loop is not available")
        return future

    def execute(
        self,
        task: Callable[..., Union[Awaitable[T], T]],
        *args: Any,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> T:
        """
        Submit a task and wait for its result.

        Args:
            task: Callable returning a value or an awaitable
            *args: Positional arguments forwarded to the task
            timeout: Optional timeout in seconds
            **kwargs: Keyword arguments forwarded to the task

        Returns:
            The result of the task

        Raises:
            TimeoutError: If the task did not finish within timeout seconds
            Exception: Any exception raised by the task
        """
        future = self.execute_async(task, *args, **kwargs)
        try:
            return future.result(timeout=timeout)
        except TimeoutError:
            if future.done():
                # The task itself raised TimeoutError
                return future.result()
            future.cancel()
            raise TimeoutError(f"Task took longer than {timeout} seconds") from None

    def clear_queue(self, cancel: bool = False) -> None:
        """Discard tasks that have not started yet."""
        self._ensure_running()
        self._worker.call(self._scheduler.clear_queue, cancel)

    def shutdown(self) -> None:
        """Discard pending work and stop the worker."""
        if self._closed:
            return
        self._closed = True
        if self._worker.is_running():
            self._worker.call_soon(self._scheduler.clear_queue, True)
        self._worker.shutdown()
        logger.debug("Dispatcher shut down")

    def __del__(self) -> None:
        """Cleanup when the dispatcher is destroyed."""
        if getattr(self, "_worker", None) is not None:
            self.shutdown()

    async def _submit(self, task: Callable[..., Any], args: tuple, kwargs: dict) -> Any:
        return await self._scheduler.submit(task, *args, **kwargs)

    def _ensure_running(self) -> None:
        if self._closed or not self._worker.is_running():
            raise LimiterNotRunningError("Dispatcher has been shut down")
