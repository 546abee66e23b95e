"""
Scheduler component that bounds how many tasks run at the same time.

Tasks are admitted in submission order. When the limit is reached, new
submissions wait in a FIFO queue until a running task completes or the limit
is raised.
"""

import asyncio
import contextvars
import functools
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Set, Tuple, TypeVar, Union

from sincpro_async_limit.config import Settings, validate_concurrency
from sincpro_async_limit.domain.scheduler import Concurrency, SchedulerInterface
from sincpro_async_limit.wait_queue import WaitQueue

logger = logging.getLogger(__name__)
T = TypeVar("T")


class _AdmissionToken:
    """Deferred start of one submitted task."""

    __slots__ = ("_scheduler", "_future", "_context", "_task", "_args", "_kwargs")

    def __init__(
        self,
        scheduler: "Scheduler",
        future: asyncio.Future,
        context: contextvars.Context,
        task: Callable[..., Any],
        args: Tuple[Any, ...],
        kwargs: Dict[str, Any],
    ) -> None:
        self._scheduler = scheduler
        self._future = future
        self._context = context
        self._task = task
        self._args = args
        self._kwargs = kwargs

    def __call__(self) -> bool:
        """Start the task. Returns False if its handle was cancelled while waiting."""
        if self._future.cancelled() or self._future.get_loop().is_closed():
            return False
        self._scheduler._start(self._future, self._context, self._task, self._args, self._kwargs)
        return True

    def discard(self) -> None:
        self._future.cancel()


class Scheduler(SchedulerInterface):
    """
    Runs submitted tasks with at most ``concurrency`` of them active at once.

    All bookkeeping happens on the event loop thread; a Scheduler must not be
    shared between threads (see ``Dispatcher`` for that).
    It serves one event loop at a time: the first submission from a new loop
    drops whatever was left queued or running on the previous one.

    Example:
        >>> scheduler = Scheduler(2)
        >>> results = await asyncio.gather(*(scheduler.submit(fetch, url) for url in urls))
    """

    def __init__(self, concurrency: Concurrency) -> None:
        """
        Initialize the Scheduler.

        Args:
            concurrency: Positive int or UNBOUNDED

        Raises:
            InvalidConcurrencyError: If concurrency is not valid
        """
        self._concurrency: Concurrency = validate_concurrency(concurrency)
        self._queue = WaitQueue()
        self._active_count = 0
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._running: Set[asyncio.Task] = set()
        logger.debug(f"Scheduler initialized with concurrency {concurrency}")

    def __repr__(self) -> str:
        return (
            f"<Scheduler concurrency={self._concurrency} "
            f"active={self._active_count} pending={self._queue.size}>"
        )

    @property
    def active_count(self) -> int:
        """Number of tasks admitted and not yet completed."""
        return self._active_count

    @property
    def pending_count(self) -> int:
        """Number of tasks waiting for admission."""
        return self._queue.size

    @property
    def concurrency(self) -> Concurrency:
        """Current concurrency limit."""
        return self._concurrency

    @concurrency.setter
    def concurrency(self, value: Concurrency) -> None:
        """
        Change the concurrency limit.

        Raising the limit schedules a catch-up pass on the event loop that
        admits as many queued tasks as the new headroom allows. Lowering it
        never interrupts running tasks, it only holds back admissions.

        Raises:
            InvalidConcurrencyError: If value is not valid; the limit is left unchanged
        """
        self._concurrency = validate_concurrency(value)
        logger.debug(f"Concurrency changed to {value}")

        if self._loop is not None and not self._loop.is_closed():
            self._loop.call_soon(self._catch_up)

    def submit(
        self, task: Callable[..., Union[Awaitable[T], T]], *args: Any, **kwargs: Any
    ) -> "asyncio.Future[T]":
        """
        Submit a task for bounded execution.

        Must be called with a running event loop. The task never starts
        before this method returns, and its failure is delivered only
        through the returned future.

        Args:
            task: Callable returning a value or an awaitable
            *args: Positional arguments forwarded to the task
            **kwargs: Keyword arguments forwarded to the task

        Returns:
            A future settled with the outcome of the task
        """
        loop = asyncio.get_running_loop()
        if loop is not self._loop:
            self._bind(loop)
        future: asyncio.Future = loop.create_future()
        token = _AdmissionToken(self, future, contextvars.copy_context(), task, args, kwargs)

        if self._active_count < self._concurrency and not self._queue:
            token()
        else:
            self._queue.enqueue(token)
            loop.call_soon(self._recheck)

        return future

    def __call__(
        self, task: Callable[..., Union[Awaitable[T], T]], *args: Any, **kwargs: Any
    ) -> "asyncio.Future[T]":
        return self.submit(task, *args, **kwargs)

    def clear_queue(self, cancel: bool = False) -> None:
        """
        Discard tasks that have not started yet.

        Running tasks are not affected.

        Args:
            cancel: If True, cancel the futures of the discarded tasks.
                Otherwise they are left unsettled.
        """
        discarded = self._queue.size
        if cancel:
            for token in self._queue.drain():
                token.discard()
        else:
            self._queue.clear()
        logger.debug(f"Discarded {discarded} pending tasks")

    def _start(
        self,
        future: asyncio.Future,
        context: contextvars.Context,
        task: Callable[..., Any],
        args: Tuple[Any, ...],
        kwargs: Dict[str, Any],
    ) -> None:
        self._active_count += 1
        running = future.get_loop().create_task(
            self._run(future, task, args, kwargs), context=context
        )
        self._running.add(running)
        running.add_done_callback(self._running.discard)

    async def _run(
        self,
        future: asyncio.Future,
        task: Callable[..., Any],
        args: Tuple[Any, ...],
        kwargs: Dict[str, Any],
    ) -> None:
        try:
            result = task(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            if not future.done():
                future.set_exception(e)
        else:
            if not future.done():
                future.set_result(result)
        finally:
            # Tasks of a loop this scheduler no longer serves do not touch its counters
            if future.get_loop() is self._loop:
                self._active_count -= 1
                # Cancelled from outside means the loop is shutting down: start nothing new
                if not asyncio.current_task().cancelling():
                    self._resume_next()

    def _bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Serve a new event loop, dropping state left behind by the previous one."""
        if self._loop is not None:
            stale = self._queue.size
            # Futures of the previous loop can no longer be settled
            self._queue.clear()
            self._running = set()
            self._active_count = 0
            logger.debug(f"Scheduler moved to a new event loop, dropped {stale} pending tasks")
        self._loop = loop

    def _resume_next(self) -> bool:
        """Admit the next queued task if there is capacity."""
        while self._active_count < self._concurrency:
            token = self._queue.dequeue()
            if token is None:
                return False
            if token():
                return True
        return False

    def _recheck(self) -> None:
        if self._active_count < self._concurrency:
            self._resume_next()

    def _catch_up(self) -> None:
        admitted = 0
        while self._active_count < self._concurrency and self._queue:
            if not self._resume_next():
                break
            admitted += 1
        if admitted:
            logger.debug(f"Admitted {admitted} queued tasks after concurrency change")


def create_scheduler(concurrency: Optional[Concurrency] = None) -> Scheduler:
    """
    Create a Scheduler.

    Args:
        concurrency: Positive int or UNBOUNDED. Defaults to the configured
            SINCPRO_ASYNC_LIMIT_CONCURRENCY value.

    Raises:
        InvalidConcurrencyError: If concurrency is not valid
    """
    if concurrency is None:
        concurrency = Settings.from_env().default_concurrency
    return Scheduler(concurrency)


def limit_function(
    task: Optional[Callable[..., Any]] = None, *, concurrency: Optional[Concurrency] = None
) -> Callable[..., Any]:
    """
    Bind a function to its own private Scheduler.

    The returned wrapper has the signature of ``task`` and returns a future
    for every call. The scheduler is available as ``wrapper.scheduler``.
    Without ``task`` a decorator is returned:

        >>> @limit_function(concurrency=2)
        ... async def fetch(url): ...

    Raises:
        InvalidConcurrencyError: If concurrency is not valid
    """
    if concurrency is not None:
        validate_concurrency(concurrency)

    def decorate(function: Callable[..., Any]) -> Callable[..., Any]:
        scheduler = create_scheduler(concurrency)

        @functools.wraps(function)
        def wrapper(*args: Any, **kwargs: Any) -> asyncio.Future:
            return scheduler.submit(function, *args, **kwargs)

        wrapper.scheduler = scheduler  # type: ignore[attr-defined]
        return wrapper

    if task is None:
        return decorate
    return decorate(task)
