"""A bounded stack kept as a linked list inside an oblivious tree store.

Every push and pop reads and rewrites exactly one random-looking path of the
tree, whether or not the operation is real, so the access pattern reveals
neither the stack contents nor which operations took effect.
"""

from __future__ import annotations

import copy
import operator
import random
from typing import Any, Generic, Optional, TypeVar

from obliviousds.array import _ABSENT, _TreeStore

T = TypeVar("T")

_DUMMY_KEY: Any = object()


class Stack(Generic[T]):
    """Last-in first-out stack holding at most ``max_size`` elements."""

    def __init__(self, max_size: int, default: T = 0) -> None:
        max_size = operator.index(max_size)
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self._max_size = max_size
        self._default = default
        self._store = _TreeStore(max_size)
        self._rng = random.SystemRandom()
        self._top: Optional[int] = None
        self._size = 0

    @property
    def max_size(self) -> int:
        """Maximum number of elements the stack can hold."""
        return self._max_size

    def _random_leaf(self) -> int:
        return self._rng.randrange(self._store.leaves)

    def maybe_push(self, real: bool, value: T) -> None:
        """Push ``value`` if ``real`` is true; otherwise leave the stack as is."""
        real = bool(real)
        if real and self._size >= self._max_size:
            raise IndexError("push onto a full stack")

        read_leaf = self._random_leaf()
        new_leaf = self._random_leaf()
        if real:
            entry = (value, self._top)
            self._store.access(self._size + 1, read_leaf, new_leaf, lambda _old: entry)
            self._top = new_leaf
            self._size += 1
        else:
            self._store.access(_DUMMY_KEY, read_leaf, new_leaf, lambda current: current)

    def maybe_pop(self, real: bool) -> T:
        """Remove and return the top element if ``real`` is true.

        When ``real`` is false nothing is removed and a copy of the default
        value is returned.
        """
        real = bool(real)
        if real and self._size == 0:
            raise IndexError("pop from an empty stack")

        if not real:
            leaf = self._random_leaf()
            self._store.access(_DUMMY_KEY, leaf, leaf, lambda current: current)
            return copy.deepcopy(self._default)

        assert self._top is not None
        current, _ = self._store.access(
            self._size, self._top, self._top, lambda _old: _ABSENT
        )
        if current is _ABSENT:
            raise RuntimeError("stack top element is missing from the store")
        value, next_leaf = current
        self._top = next_leaf
        self._size -= 1
        return value

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"Stack(size={self._size}, max_size={self._max_size})"