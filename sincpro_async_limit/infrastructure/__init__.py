from sincpro_async_limit.infrastructure.dispatcher import Dispatcher
from sincpro_async_limit.infrastructure.event_loop import EventLoop
from sincpro_async_limit.infrastructure.worker import Worker

__all__ = ["Dispatcher", "EventLoop", "Worker"]
