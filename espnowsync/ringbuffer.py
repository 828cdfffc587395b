"""Fixed capacity FIFO that overwrites its oldest element when full."""

from __future__ import annotations

from collections import deque
from typing import Any


class RingBuffer:
    """Bounded queue; pushing onto a full buffer drops the oldest item."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._items: deque = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._items)

    def is_full(self) -> bool:
        """Whether the buffer holds ``capacity`` items."""
        return len(self._items) == self._items.maxlen

    def is_empty(self) -> bool:
        """Whether the buffer holds no items."""
        return not self._items

    def push(self, item: Any) -> bool:
        """Add ``item``; return ``False`` if the oldest item had to be dropped."""
        was_full = self.is_full()
        self._items.append(item)
        return not was_full

    def pop(self) -> Any:
        """Remove and return the oldest item; raises ``IndexError`` if empty."""
        if not self._items:
            raise IndexError("pop from an empty ring buffer")
        return self._items.popleft()

    def front(self) -> Any:
        """Return the oldest item without removing it; raises ``IndexError`` if empty."""
        if not self._items:
            raise IndexError("front of an empty ring buffer")
        return self._items[0]