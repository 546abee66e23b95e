"""
Domain interface for the Scheduler component.
"""

import asyncio
from typing import Any, Awaitable, Callable, Protocol, TypeVar, Union, runtime_checkable

T = TypeVar("T")

Concurrency = Union[int, float]


@runtime_checkable
class SchedulerInterface(Protocol):
    """
    Interface for the Scheduler component.
    Defines the contract that all Scheduler implementations must follow.
    """

    def submit(
        self, task: Callable[..., Union[Awaitable[T], T]], *args: Any, **kwargs: Any
    ) -> "asyncio.Future[T]":
        """
        Submit a task for bounded execution.

        Args:
            task: Callable returning a value or an awaitable
            *args: Positional arguments forwarded to the task
            **kwargs: Keyword arguments forwarded to the task

        Returns:
            A future settled with the outcome of the task
        """
        ...

    @property
    def active_count(self) -> int:
        """Number of tasks currently running."""
        ...

    @property
    def pending_count(self) -> int:
        """Number of tasks waiting for admission."""
        ...

    @property
    def concurrency(self) -> Concurrency:
        """Current concurrency limit."""
        ...

    def clear_queue(self, cancel: bool = False) -> None:
        """Discard tasks that have not started yet."""
        ...
