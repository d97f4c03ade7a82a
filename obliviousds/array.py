"""Arrays whose memory access pattern does not reveal which index is touched.

``ShortArray`` scans every slot on each access, which is cheapest for small
sizes. ``LongArray``, ``DynamicArray`` and ``MultiWayArray`` keep their
elements in a tree-shaped oblivious store. Each element is mapped to a random
leaf, and every access reads and rewrites one whole root-to-leaf path.
``FixedArray`` picks one of the two strategies from the size.
"""

from __future__ import annotations

import copy
import operator
import random
from typing import Any, Callable, Generic, List, Tuple, TypeVar

T = TypeVar("T")

SHORT_ARRAY_THRESHOLD = 128
"""Sizes up to this value use a linear scan, larger sizes use the tree store."""

_BUCKET_SIZE = 4
_ABSENT: Any = object()


def _checked_index(index: int, size: int) -> int:
    index = operator.index(index)
    if not 0 <= index < size:
        raise IndexError(f"index {index} out of range for size {size}")
    return index


def _checked_size(size: int, minimum: int) -> int:
    size = operator.index(size)
    if size < minimum:
        raise ValueError(f"size must be at least {minimum}, got {size}")
    return size


class _TreeStore:
    """A binary tree of small buckets plus a stash, addressed by leaf."""

    def __init__(self, capacity: int) -> None:
        self.leaves = 1 << max(0, (capacity - 1).bit_length())
        self._buckets: List[List[Tuple[Any, int, Any]]] = [
            [] for _ in range(2 * self.leaves)
        ]
        self._stash: dict = {}

    def _path(self, leaf: int) -> List[int]:
        node = self.leaves + leaf
        nodes = []
        while node >= 1:
            nodes.append(node)
            node >>= 1
        return nodes

    def access(
        self, key: Any, old_leaf: int, new_leaf: int, func: Callable[[Any], Any]
    ) -> Tuple[Any, Any]:
        """Apply ``func`` to the element stored under ``key``.

        ``func`` receives the current value, or an absent marker, and returns
        the value to keep (or the absent marker to keep nothing). The element
        is remapped to ``new_leaf``. Returns the old and the new value.
        """
        path = self._path(old_leaf)
        for node in path:
            for block_key, leaf, value in self._buckets[node]:
                self._stash[block_key] = (leaf, value)
            self._buckets[node] = []

        _, current = self._stash.pop(key, (None, _ABSENT))
        updated = func(current)
        if updated is not _ABSENT:
            self._stash[key] = (new_leaf, updated)

        leaf_node = self.leaves + old_leaf
        for node in path:
            shift = leaf_node.bit_length() - node.bit_length()
            fitting = [
                block_key
                for block_key, (leaf, _) in self._stash.items()
                if (self.leaves + leaf) >> shift == node
            ][:_BUCKET_SIZE]
            self._buckets[node] = [
                (block_key, *self._stash.pop(block_key)) for block_key in fitting
            ]
        return current, updated


class _PositionMap:
    """Maps each logical index to the leaf its element currently lives on."""

    def __init__(self, size: int, leaves: int, rng: random.Random) -> None:
        self._leaves = [rng.randrange(leaves) for _ in range(size)]

    def __len__(self) -> int:
        return len(self._leaves)

    def swap(self, index: int, new_leaf: int) -> int:
        old_leaf = self._leaves[index]
        self._leaves[index] = new_leaf
        return old_leaf


class _TreeBacked(Generic[T]):
    """Shared machinery for arrays kept in a tree store."""

    def __init__(self, capacity: int, default: T) -> None:
        self._default = default
        self._rng = random.SystemRandom()
        self._store = _TreeStore(capacity)

    def _new_positions(self, size: int) -> _PositionMap:
        return _PositionMap(size, self._store.leaves, self._rng)

    def _fresh_default(self) -> T:
        return copy.deepcopy(self._default)

    def _access(
        self, positions: _PositionMap, index: int, key: Any, func: Callable[[Any], Any]
    ) -> Tuple[Any, Any]:
        new_leaf = self._rng.randrange(self._store.leaves)
        old_leaf = positions.swap(index, new_leaf)
        return self._store.access(key, old_leaf, new_leaf, func)

    def _read(self, positions: _PositionMap, index: int, key: Any) -> T:
        current, _ = self._access(positions, index, key, lambda value: value)
        return self._fresh_default() if current is _ABSENT else current

    def _write(self, positions: _PositionMap, index: int, key: Any, value: T) -> None:
        self._access(positions, index, key, lambda _old: value)

    def _update(
        self, positions: _PositionMap, index: int, key: Any, func: Callable[[T], T]
    ) -> Tuple[bool, T]:
        def apply(current: Any) -> Any:
            return func(self._fresh_default() if current is _ABSENT else current)

        current, updated = self._access(positions, index, key, apply)
        return current is not _ABSENT, updated


class ShortArray(Generic[T]):
    """Fixed-size array that touches every slot on each read and write."""

    def __init__(self, size: int, default: T = 0) -> None:
        size = _checked_size(size, 0)
        self._default = default
        self._data: List[T] = [copy.deepcopy(default) for _ in range(size)]

    def read(self, index: int) -> T:
        """Return the value at ``index``."""
        index = _checked_index(index, len(self._data))
        result = self._default
        for position, item in enumerate(self._data):
            if position == index:
                result = item
        return result

    def write(self, index: int, value: T) -> None:
        """Store ``value`` at ``index``."""
        index = _checked_index(index, len(self._data))
        self._data = [
            value if position == index else item
            for position, item in enumerate(self._data)
        ]

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ShortArray(size={len(self._data)})"


class LongArray(_TreeBacked[T]):
    """Fixed-size array kept in a tree store, suited to large sizes."""

    def __init__(self, size: int, default: T = 0) -> None:
        size = _checked_size(size, 1)
        super().__init__(size, default)
        self._positions = self._new_positions(size)

    def read(self, index: int) -> T:
        """Return the value at ``index``."""
        index = _checked_index(index, len(self))
        return self._read(self._positions, index, index)

    def write(self, index: int, value: T) -> None:
        """Store ``value`` at ``index``."""
        index = _checked_index(index, len(self))
        self._write(self._positions, index, index, value)

    def __len__(self) -> int:
        return len(self._positions)

    def __repr__(self) -> str:
        return f"LongArray(size={len(self)})"


class FixedArray(Generic[T]):
    """Fixed-size array: a ``ShortArray`` up to the threshold, else a ``LongArray``."""

    def __init__(self, size: int, default: T = 0) -> None:
        size = _checked_size(size, 1)
        if size <= SHORT_ARRAY_THRESHOLD:
            self._inner: Any = ShortArray(size, default)
        else:
            self._inner = LongArray(size, default)

    def read(self, index: int) -> T:
        """Return the value at ``index``."""
        return self._inner.read(index)

    def write(self, index: int, value: T) -> None:
        """Store ``value`` at ``index``."""
        self._inner.write(index, value)

    def __len__(self) -> int:
        return len(self._inner)

    def __repr__(self) -> str:
        return f"FixedArray({self._inner!r})"


class DynamicArray(_TreeBacked[T]):
    """Array whose size is chosen at runtime and may be changed by ``resize``."""

    def __init__(self, size: int, default: T = 0) -> None:
        size = _checked_size(size, 1)
        super().__init__(size, default)
        self._positions = self._new_positions(size)

    def read(self, index: int) -> T:
        """Return the value at ``index``."""
        index = _checked_index(index, len(self))
        return self._read(self._positions, index, index)

    def write(self, index: int, value: T) -> None:
        """Store ``value`` at ``index``."""
        index = _checked_index(index, len(self))
        self._write(self._positions, index, index, value)

    def update(self, index: int, func: Callable[[T], T]) -> Tuple[bool, T]:
        """Replace the value at ``index`` by ``func(value)``.

        Returns whether the slot had been written before, and the new value.
        """
        index = _checked_index(index, len(self))
        return self._update(self._positions, index, index, func)

    def resize(self, size: int) -> None:
        """Rebuild the array with ``size`` slots, keeping the leading values."""
        size = _checked_size(size, 1)
        resized = DynamicArray(size, self._default)
        for index in range(min(len(self), size)):
            resized.write(index, self.read(index))
        self._store = resized._store
        self._positions = resized._positions
        self._rng = resized._rng

    def __len__(self) -> int:
        return len(self._positions)

    def __repr__(self) -> str:
        return f"DynamicArray(size={len(self)})"


class MultiWayArray(_TreeBacked[T]):
    """``ways`` subarrays of ``size`` slots sharing one store of ``size`` elements.

    Which subarray is accessed is not hidden; the index within it is.
    """

    def __init__(self, size: int, ways: int, default: T = 0) -> None:
        size = _checked_size(size, 1)
        ways = operator.index(ways)
        if ways < 1 or ways & (ways - 1):
            raise ValueError(f"ways must be a power of two, got {ways}")
        super().__init__(size, default)
        self._ways = ways
        self._shift = ways.bit_length() - 1
        self._positions = [self._new_positions(size) for _ in range(ways)]

    @property
    def ways(self) -> int:
        """Number of subarrays."""
        return self._ways

    def _locate(self, subarray: int, index: int) -> Tuple[_PositionMap, int, int]:
        subarray = _checked_index(subarray, self._ways)
        index = _checked_index(index, len(self))
        return self._positions[subarray], index, (index << self._shift) | subarray

    def read(self, subarray: int, index: int) -> T:
        """Return the value at ``index`` of ``subarray``."""
        return self._read(*self._locate(subarray, index))

    def write(self, subarray: int, index: int, value: T) -> None:
        """Store ``value`` at ``index`` of ``subarray``."""
        self._write(*self._locate(subarray, index), value)

    def update(
        self, subarray: int, index: int, func: Callable[[T], T]
    ) -> Tuple[bool, T]:
        """Replace the value at ``index`` of ``subarray`` by ``func(value)``.

        Returns whether the slot had been written before, and the new value.
        """
        return self._update(*self._locate(subarray, index), func)

    def __len__(self) -> int:
        return len(self._positions[0])

    def __repr__(self) -> str:
        return f"MultiWayArray(size={len(self)}, ways={self._ways})"