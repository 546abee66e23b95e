"""
FIFO wait queue holding admission tokens of tasks that are not running yet.
"""

from collections import deque
from typing import Deque, Iterator, Optional

from sincpro_async_limit.domain.queue import AdmissionToken, WaitQueueInterface


class WaitQueue(WaitQueueInterface):
    """Unbounded FIFO queue of admission tokens."""

    def __init__(self) -> None:
        """Initialize an empty wait queue."""
        self._items: Deque[AdmissionToken] = deque()

    def enqueue(self, token: AdmissionToken) -> None:
        """Append a token at the tail."""
        self._items.append(token)

    def dequeue(self) -> Optional[AdmissionToken]:
        """Remove and return the head token, None when the queue is empty."""
        if not self._items:
            return None
        return self._items.popleft()

    def peek(self) -> Optional[AdmissionToken]:
        """Return the head token without removing it."""
        if not self._items:
            return None
        return self._items[0]

    def clear(self) -> None:
        """Remove every token."""
        self._items.clear()

    @property
    def size(self) -> int:
        """Number of tokens currently waiting."""
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[AdmissionToken]:
        yield from self._items

    def drain(self) -> Iterator[AdmissionToken]:
        """Yield tokens head to tail, removing each one as it is yielded."""
        while self._items:
            yield self._items.popleft()
