"""A growable vector on top of an oblivious dynamic array.

The capacity doubles when full, so only the length rounded up to a power of
two is revealed; element accesses are oblivious.
"""

from __future__ import annotations

import operator
from typing import Generic, TypeVar

from obliviousds.array import DynamicArray

T = TypeVar("T")


class EagerVector(Generic[T]):
    """Variable-length vector whose storage doubles eagerly when full."""

    def __init__(self, default: T = 0) -> None:
        self._length = 0
        self._data: DynamicArray[T] = DynamicArray(2, default)

    def _check(self, index: int) -> int:
        index = operator.index(index)
        if not 0 <= index < self._length:
            raise IndexError(f"index {index} out of range for length {self._length}")
        return index

    def read(self, index: int) -> T:
        """Return the element at ``index``."""
        return self._data.read(self._check(index))

    def write(self, index: int, value: T) -> None:
        """Store ``value`` at ``index``."""
        self._data.write(self._check(index), value)

    def push_back(self, value: T) -> None:
        """Append ``value``, doubling the capacity first if needed."""
        if self._length == len(self._data):
            self._data.resize(2 * self._length)
        self._data.write(self._length, value)
        self._length += 1

    def pop_back(self) -> T:
        """Remove and return the last element."""
        if self._length == 0:
            raise IndexError("pop from an empty vector")
        self._length -= 1
        return self._data.read(self._length)

    def capacity(self) -> int:
        """Number of slots currently allocated; never less than the length."""
        return len(self._data)

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return f"EagerVector(len={self._length}, capacity={self.capacity()})"