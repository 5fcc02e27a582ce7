"""Bounded single-producer / single-consumer ring queue."""

from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class SpscQueue(Generic[T]):
    """Ring queue for exactly one producer thread and one consumer thread.

    ``slots`` must be a power of two and at least 2; one slot is kept free to
    tell full from empty, so at most ``slots - 1`` items are held. ``None``
    cannot be queued because :meth:`try_pop` returns it for "empty".
    """

    def __init__(self, slots: int = 16) -> None:
        if slots < 2:
            raise ValueError("slot count must be >= 2")
        if slots & (slots - 1):
            raise ValueError("slot count must be a power of two")
        self._mask = slots - 1
        self._slots: List[Optional[T]] = [None] * slots
        self._head = 0
        self._tail = 0

    def try_push(self, value: T) -> bool:
        """Append ``value``; return False if the queue is full."""
        if value is None:
            raise ValueError("None cannot be queued")
        head = self._head
        following = (head + 1) & self._mask
        if following == self._tail:
            return False
        self._slots[head] = value
        self._head = following
        return True

    def try_pop(self) -> Optional[T]:
        """Remove and return the oldest item, or None if the queue is empty."""
        tail = self._tail
        if tail == self._head:
            return None
        value = self._slots[tail]
        self._slots[tail] = None
        self._tail = (tail + 1) & self._mask
        return value

    def __len__(self) -> int:
        return (self._head - self._tail) & self._mask

    def empty(self) -> bool:
        return self._head == self._tail

    def capacity(self) -> int:
        """The most items the queue can hold at once."""
        return self._mask