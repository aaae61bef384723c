from collections import deque
from typing import Deque, Generic, Iterator, List, TypeVar

T = TypeVar("T")

DEFAULT_CAPACITY = 10


class BoundedHistory(Generic[T]):
    """Fixed-capacity sequence of the most recent items, newest first."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"History capacity must be >= 1, got {capacity}")
        self._items: Deque[T] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._items.maxlen

    def push(self, item: T) -> None:
        # A full deque drops from the right (oldest) on appendleft
        self._items.appendleft(item)

    def snapshot(self) -> List[T]:
        return list(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"BoundedHistory(capacity={self.capacity}, size={len(self)})"
