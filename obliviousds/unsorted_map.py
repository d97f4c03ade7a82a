"""A hash map whose lookups and updates touch a fixed set of locations.

The map uses cuckoo hashing over two tables of small buckets. Both tables
live in one oblivious multi-way array. Insertions go through a short
oblivious queue and are spread over later calls, so that each call does the
same fixed amount of work.
"""

from __future__ import annotations

import operator
import random
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Tuple, TypeVar

from obliviousds.array import MultiWayArray
from obliviousds.queue import ShortQueue

K = TypeVar("K")
V = TypeVar("V")

INSERTION_QUEUE_MAX_SIZE = 10
"""Room in the queue of insertions that have not yet found a table slot."""

DEAMORTIZED_INSERTIONS = 2
"""Queued insertions attempted on every call to ``insert``."""

BUCKET_SIZE = 4
"""Number of entries in each table bucket."""

_TABLES = 2


@dataclass
class _Entry:
    key: Any
    value: Any


_Bucket = List[Optional[_Entry]]


class UnsortedMap(Generic[K, V]):
    """Map holding up to about ``capacity`` keys with oblivious access.

    A key appears at most once across the two tables and the insertion
    queue. Each table uses its own keyed hash.
    """

    def __init__(self, capacity: int, default: V = 0) -> None:
        capacity = operator.index(capacity)
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._default = default
        self._size = 0
        self._capacity = capacity
        # Load factor 0.8: capacity / (0.8 * BUCKET_SIZE), rounded up.
        self._table_size = max(-(-(capacity * 5) // (4 * BUCKET_SIZE)), 2)
        empty_bucket: _Bucket = [None] * BUCKET_SIZE
        self._table: MultiWayArray[_Bucket] = MultiWayArray(
            self._table_size, _TABLES, empty_bucket
        )
        self._rng = random.SystemRandom()
        self._salts = tuple(self._rng.getrandbits(64) for _ in range(_TABLES))
        self._queue: ShortQueue[Optional[_Entry]] = ShortQueue(
            INSERTION_QUEUE_MAX_SIZE, None
        )

    @property
    def capacity(self) -> int:
        """Number of keys the map was sized for."""
        return self._capacity

    def _hash(self, table: int, key: Any) -> int:
        return hash((self._salts[table], key)) % self._table_size

    def _lookup(self, key: K) -> Tuple[bool, V]:
        found = False
        result = self._default
        for table in range(_TABLES):
            bucket = self._table.read(table, self._hash(table, key))
            for slot in bucket:
                if slot is not None and slot.key == key:
                    result = slot.value
                    found = True
        for queued in self._queue:
            if not queued.is_empty() and queued.value.key == key:
                result = queued.value.value
                found = True
        return found, result

    def get(self, key: K) -> V:
        """Return the value stored for ``key``, or the map's default if absent."""
        return self._lookup(key)[1]

    def __contains__(self, key: object) -> bool:
        return self._lookup(key)[0]  # type: ignore[arg-type]

    def _try_insert_entry(
        self, real: bool, element: Optional[_Entry]
    ) -> Tuple[bool, Optional[_Entry]]:
        """Place ``element`` into a table, evicting a random entry on collision.

        Returns whether the work is finished, and the entry still to be
        placed (the evicted one) when it is not.
        """
        done = not real

        def place(bucket: _Bucket) -> _Bucket:
            nonlocal done, element
            if not done:
                for slot_index, slot in enumerate(bucket):
                    if slot is None:
                        bucket[slot_index] = element
                        done = True
                        break
            victim = self._rng.randrange(BUCKET_SIZE)
            if not done:
                bucket[victim], element = element, bucket[victim]
            return bucket

        for table in reversed(range(_TABLES)):
            key = element.key if element is not None else None
            self._table.update(table, self._hash(table, key), place)
        return done, element

    def deamortize_insertion_queue(self) -> None:
        """Move up to ``DEAMORTIZED_INSERTIONS`` queued entries into the tables."""
        for _ in range(DEAMORTIZED_INSERTIONS):
            real = len(self._queue) > 0
            # First in, first out, so cuckoo eviction cycles do not trap an entry.
            element = self._queue.maybe_pop(real)
            done, element = self._try_insert_entry(real, element)
            self._queue.maybe_push(not done, element)

    def insert(self, key: K, value: V) -> None:
        """Add ``key`` with ``value``. The key must not be in the map already."""
        if len(self._queue) >= INSERTION_QUEUE_MAX_SIZE:
            raise OverflowError("insertion queue is full")
        self._queue.maybe_push(True, _Entry(key, value))
        self.deamortize_insertion_queue()
        self._size += 1

    def write(self, key: K, value: V) -> None:
        """Replace the value of ``key``, which must already be in the map."""
        updated = False

        def replace(bucket: _Bucket) -> _Bucket:
            nonlocal updated
            for slot in bucket:
                if not updated and slot is not None and slot.key == key:
                    slot.value = value
                    updated = True
            return bucket

        for table in range(_TABLES):
            self._table.update(table, self._hash(table, key), replace)

        for queued in self._queue:
            if not updated and not queued.is_empty() and queued.value.key == key:
                queued.value.value = value
                updated = True

        if not updated:
            raise KeyError(key)

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"UnsortedMap(size={self._size}, capacity={self._capacity})"