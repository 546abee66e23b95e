"""
Bounded-concurrency task scheduling for asyncio.
"""

from sincpro_async_limit.config import UNBOUNDED, Settings
from sincpro_async_limit.core import run_limited_task, set_concurrency, shutdown
from sincpro_async_limit.exceptions import (
    AsyncLimitError,
    InvalidConcurrencyError,
    LimiterNotRunningError,
)
from sincpro_async_limit.infrastructure.dispatcher import Dispatcher
from sincpro_async_limit.scheduler import Scheduler, create_scheduler, limit_function
from sincpro_async_limit.wait_queue import WaitQueue

__all__ = [
    "UNBOUNDED",
    "Settings",
    "Scheduler",
    "create_scheduler",
    "limit_function",
    "WaitQueue",
    "Dispatcher",
    "run_limited_task",
    "set_concurrency",
    "shutdown",
    "AsyncLimitError",
    "InvalidConcurrencyError",
    "LimiterNotRunningError",
]
