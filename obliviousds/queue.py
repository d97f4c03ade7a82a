"""A small first-in first-out queue whose accesses scan every slot.

Each element carries a timestamp. Pushing writes into the first free slot,
and popping removes the element with the lowest timestamp. Both operations
touch every slot, so neither the position used nor, for the ``maybe_``
variants, whether the operation really happened shows in the access pattern.
"""

from __future__ import annotations

import copy
import operator
from dataclasses import dataclass
from typing import Generic, Iterator, List, TypeVar

T = TypeVar("T")


@dataclass
class ShortQueueElement(Generic[T]):
    """A queue slot. A timestamp of zero marks the slot as free."""

    timestamp: int = 0
    value: T = None  # type: ignore[assignment]

    def is_empty(self) -> bool:
        """Return True if the slot holds no element."""
        return self.timestamp == 0


class ShortQueue(Generic[T]):
    """Queue with room for at most ``capacity`` elements."""

    def __init__(self, capacity: int, default: T = 0) -> None:
        capacity = operator.index(capacity)
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._default = default
        self._highest_timestamp = 0
        self._lowest_timestamp = 1
        self._size = 0
        self._slots: List[ShortQueueElement[T]] = [
            ShortQueueElement(0, copy.deepcopy(default)) for _ in range(capacity)
        ]

    @property
    def capacity(self) -> int:
        """Maximum number of elements the queue can hold."""
        return len(self._slots)

    def maybe_push(self, real: bool, element: T) -> None:
        """Append ``element`` if ``real`` is true; otherwise leave the queue as is."""
        real = bool(real)
        if real and self._size >= len(self._slots):
            raise IndexError("push onto a full queue")

        if real:
            self._size += 1
            self._highest_timestamp += 1

        inserted = not real
        lowest = self._highest_timestamp
        for slot in self._slots:
            empty = slot.is_empty()
            should_insert = not inserted and empty
            is_lower = not empty and slot.timestamp < lowest
            if should_insert:
                slot.timestamp = self._highest_timestamp
                slot.value = element
            if is_lower:
                lowest = slot.timestamp
            inserted = inserted or should_insert

        if real:
            self._lowest_timestamp = lowest

    def maybe_pop(self, real: bool) -> T:
        """Remove and return the oldest element if ``real`` is true.

        When ``real`` is false nothing is removed and a copy of the default
        value is returned.
        """
        real = bool(real)
        if real and self._size == 0:
            raise IndexError("pop from an empty queue")

        if real:
            self._size -= 1

        result = copy.deepcopy(self._default)
        second_lowest = self._highest_timestamp
        for slot in self._slots:
            is_lowest = slot.timestamp == self._lowest_timestamp
            could_be_second = (
                not slot.is_empty()
                and not is_lowest
                and slot.timestamp < second_lowest
            )
            should_pop = real and is_lowest
            if could_be_second:
                second_lowest = slot.timestamp
            if should_pop:
                result = slot.value
                slot.timestamp = 0

        if real:
            self._lowest_timestamp = second_lowest
        return result

    def __iter__(self) -> Iterator[ShortQueueElement[T]]:
        """Yield every slot, free ones included, in storage order."""
        return iter(self._slots)

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"ShortQueue(size={self._size}, capacity={len(self._slots)})"