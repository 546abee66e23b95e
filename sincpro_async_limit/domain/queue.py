"""
Wait queue domain abstractions.
"""

from typing import Callable, Iterator, Optional, Protocol, runtime_checkable

AdmissionToken = Callable[[], bool]


@runtime_checkable
class WaitQueueInterface(Protocol):
    """Protocol defining the FIFO container of admission tokens."""

    def enqueue(self, token: AdmissionToken) -> None:
        """Append a token at the tail."""
        ...

    def dequeue(self) -> Optional[AdmissionToken]:
        """Remove and return the head token, or None if empty."""
        ...

    def peek(self) -> Optional[AdmissionToken]:
        """Return the head token without removing it."""
        ...

    def clear(self) -> None:
        """Remove every token."""
        ...

    @property
    def size(self) -> int:
        """Number of tokens currently waiting."""
        ...

    def __iter__(self) -> Iterator[AdmissionToken]: ...

    def drain(self) -> Iterator[AdmissionToken]:
        """Yield and remove tokens head to tail."""
        ...
