from __future__ import annotations

from collections import deque


class SlidingWindow:
    """Bounded FIFO of the most recent admitted values, oldest first."""

    __slots__ = ("capacity", "_buf")

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError(f"window capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._buf: deque[float] = deque()

    def offer(self, value: float) -> None:
        if len(self._buf) >= self.capacity:
            self._buf.popleft()
        self._buf.append(value)

    def snapshot(self) -> tuple[float, ...]:
        return tuple(self._buf)

    def size(self) -> int:
        return len(self._buf)

    @property
    def is_full(self) -> bool:
        return len(self._buf) == self.capacity

    def __len__(self) -> int:
        return len(self._buf)
