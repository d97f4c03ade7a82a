"""A path oblivious heap.

Elements live in a binary tree of small buckets plus a stash, each element
bound to a random leaf. Every node also records the smallest element in its
subtree. Each operation reads and rewrites whole root-to-leaf paths only, so
the access pattern does not reveal which element was touched.
"""

from __future__ import annotations

import operator
import random
from dataclasses import dataclass
from typing import Any, Generic, List, Tuple, TypeVar

V = TypeVar("V")

_Z = 2
"""Entries per tree bucket."""


@dataclass(frozen=True)
class HeapEntry(Generic[V]):
    """An element of the heap: its priority, payload, leaf and timestamp."""

    key: Any = None
    value: Any = None
    pos: int = -1
    timestamp: int = -1

    def is_empty(self) -> bool:
        """Return True for the marker that stands for no element."""
        return self.timestamp < 0


_EMPTY: HeapEntry = HeapEntry()


def _smaller(candidate: HeapEntry, current: HeapEntry) -> bool:
    return not candidate.is_empty() and (
        current.is_empty() or candidate.key < current.key
    )


class Heap(Generic[V]):
    """Oblivious min-heap sized for ``max_size`` elements."""

    def __init__(self, max_size: int) -> None:
        max_size = operator.index(max_size)
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        self.max_size = max_size
        self._leaves = 1 << max(0, (max_size - 1).bit_length())
        self._buckets: List[List[HeapEntry]] = [[] for _ in range(2 * self._leaves)]
        self._subtree_min: List[HeapEntry] = [_EMPTY] * (2 * self._leaves)
        self._stash: List[HeapEntry] = []
        self._rng = random.SystemRandom()
        self._timestamp = 0

    def _path(self, pos: int) -> List[int]:
        node = self._leaves + pos
        nodes = []
        while node >= 1:
            nodes.append(node)
            node >>= 1
        return nodes

    def _random_leaf(self) -> int:
        return self._rng.randrange(self._leaves)

    def _read_path(self, path: List[int]) -> None:
        for node in path:
            self._stash.extend(self._buckets[node])
            self._buckets[node] = []

    def _write_back(self, path: List[int]) -> None:
        for level, node in enumerate(path):
            placed: List[HeapEntry] = []
            kept: List[HeapEntry] = []
            for entry in self._stash:
                if len(placed) < _Z and (self._leaves + entry.pos) >> level == node:
                    placed.append(entry)
                else:
                    kept.append(entry)
            self._buckets[node] = placed
            self._stash = kept

    def _update_min(self, path: List[int]) -> None:
        for node in path:
            candidates = list(self._buckets[node])
            if node < self._leaves:
                candidates.append(self._subtree_min[2 * node])
                candidates.append(self._subtree_min[2 * node + 1])
            best = _EMPTY
            for candidate in candidates:
                if _smaller(candidate, best):
                    best = candidate
            self._subtree_min[node] = best

    def _evict(self, pos: int) -> None:
        path = self._path(pos)
        self._read_path(path)
        self._write_back(path)
        self._update_min(path)

    def find_min(self) -> HeapEntry[V]:
        """Return the element with the smallest key, or an empty entry."""
        best = self._subtree_min[1]
        for entry in self._stash:
            if _smaller(entry, best):
                best = entry
        return best

    def insert(self, key: Any, value: V) -> Tuple[int, int]:
        """Add ``value`` with priority ``key``.

        Returns the leaf and timestamp that identify the element for ``delete``.
        """
        pos = self._random_leaf()
        timestamp = self._timestamp
        self._timestamp += 1
        self._stash.append(HeapEntry(key, value, pos, timestamp))
        for _ in range(2):
            self._evict(self._random_leaf())
        return pos, timestamp

    def delete(self, pos: int, timestamp: int) -> None:
        """Remove the element with this leaf and timestamp, if it is present."""
        pos = operator.index(pos)
        if not 0 <= pos < self._leaves:
            raise ValueError(f"position {pos} out of range")
        path = self._path(pos)
        self._read_path(path)
        self._stash = [entry for entry in self._stash if entry.timestamp != timestamp]
        self._write_back(path)
        self._update_min(path)
        self._evict(self._random_leaf())

    def extract_min(self) -> HeapEntry[V]:
        """Remove and return the smallest element; an empty entry if none."""
        smallest = self.find_min()
        if smallest.is_empty():
            self._evict(self._random_leaf())
            self._evict(self._random_leaf())
        else:
            self.delete(smallest.pos, smallest.timestamp)
        return smallest

    def __repr__(self) -> str:
        return f"Heap(max_size={self.max_size})"