"""A simple first-in, first-out queue."""

from __future__ import annotations

from collections import deque
from typing import Any, Iterator


class Queue:
    """FIFO queue whose dequeue and peek return None when empty."""

    def __init__(self) -> None:
        self._items: deque[Any] = deque()

    def enqueue(self, item: Any) -> None:
        self._items.append(item)

    def dequeue(self) -> Any:
        """Remove and return the oldest item, or None if the queue is empty."""
        return self._items.popleft() if self._items else None

    def peek(self) -> Any:
        """Return the oldest item without removing it, or None if empty."""
        return self._items[0] if self._items else None

    def is_empty(self) -> bool:
        return not self._items

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)