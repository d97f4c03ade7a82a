"""A hash map split across worker threads and queried in fixed-size batches.

Every key belongs to one of ``PARTITIONS`` partitions, chosen by a keyed hash.
Each partition is an ``UnsortedMap`` owned by its own worker thread. A batch
of queries is spread so that every partition receives exactly
``batch_size`` requests, real or padding. How many keys went to which
partition therefore stays hidden.
"""

from __future__ import annotations

import operator
import queue
import random
import threading
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, Sequence, Tuple, TypeVar

from obliviousds.unsorted_map import UnsortedMap

K = TypeVar("K")
V = TypeVar("V")

PARTITIONS = 15
"""Number of partitions, and of worker threads, in every sharded map."""

_INVALID_INDEX = 1 << 64
_COMMAND_QUEUE_SIZE = 10


@dataclass
class _BatchBlock:
    """One request in a batch: where it came from, its key and its value."""

    index: int = _INVALID_INDEX
    key: Any = None
    found: bool = False
    value: Any = None

    @property
    def is_real(self) -> bool:
        return self.index != _INVALID_INDEX


@dataclass
class _Command:
    kind: str
    blocks: List[_BatchBlock]
    reply: "queue.Queue[Tuple[int, Any]]"


_SHUTDOWN = _Command("shutdown", [], queue.Queue())


class _Worker:
    """A thread that owns one partition of the map."""

    def __init__(
        self, capacity: int, pid: int, default: Any, startup: threading.Barrier
    ) -> None:
        self.pid = pid
        self._capacity = capacity
        self._default = default
        self._startup = startup
        self.commands: "queue.Queue[_Command]" = queue.Queue(_COMMAND_QUEUE_SIZE)
        self._thread = threading.Thread(
            target=self._run, name=f"partition-{pid}", daemon=True
        )
        self._thread.start()

    def _run(self) -> None:
        self._startup.wait()
        partition: UnsortedMap[Any, Any] = UnsortedMap(self._capacity, self._default)
        while True:
            command = self.commands.get()
            if command.kind == "shutdown":
                break
            try:
                if command.kind == "get":
                    for block in command.blocks:
                        block.found = block.key in partition
                        block.value = partition.get(block.key)
                    command.reply.put((self.pid, command.blocks))
                else:
                    for block in command.blocks:
                        if block.is_real:
                            partition.insert(block.key, block.value)
                        else:
                            partition.deamortize_insertion_queue()
                    command.reply.put((self.pid, None))
            except Exception as error:  # handed back to the caller
                command.reply.put((self.pid, error))

    def stop(self) -> None:
        self.commands.put(_SHUTDOWN)
        self._thread.join()


class ShardedMap(Generic[K, V]):
    """Map of up to ``capacity`` keys spread over ``PARTITIONS`` worker threads.

    ``batch_size`` is the most keys of one batch that may fall into a single
    partition. Only the batch length and ``batch_size`` are revealed by a
    batch operation.
    """

    def __init__(self, capacity: int, batch_size: int, default: V = 0) -> None:
        capacity = operator.index(capacity)
        batch_size = operator.index(batch_size)
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        per_partition = -(-capacity // PARTITIONS)
        self._batch_size = batch_size
        self._default = default
        self._size = 0
        self._capacity = per_partition * PARTITIONS
        self._salt = random.SystemRandom().getrandbits(64)
        startup = threading.Barrier(PARTITIONS + 1)
        self._workers = [
            _Worker(per_partition, pid, default, startup) for pid in range(PARTITIONS)
        ]
        startup.wait()
        self._closed = False

    @property
    def capacity(self) -> int:
        """Total number of keys the map can hold, rounded up to fill all partitions."""
        return self._capacity

    @property
    def batch_size(self) -> int:
        """Most keys of one batch that may go to a single partition."""
        return self._batch_size

    def _partition(self, key: Any) -> int:
        return hash((self._salt, key)) % PARTITIONS

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("operation on a closed ShardedMap")

    def _spread(
        self, keys: Sequence[K], values: Optional[Sequence[V]], width: int
    ) -> List[List[_BatchBlock]]:
        """Build one list of ``batch_size`` blocks per partition.

        Every partition first receives a block for every key, marked invalid
        unless the key hashes there; the valid blocks are then moved to the
        front, keeping their order.
        """
        per_partition: List[List[_BatchBlock]] = [
            [_BatchBlock() for _ in range(width)] for _ in range(PARTITIONS)
        ]
        for position, key in enumerate(keys):
            target = self._partition(key)
            for pid, blocks in enumerate(per_partition):
                block = blocks[position]
                block.key = key
                if values is not None:
                    block.value = values[position]
                    block.found = True
                block.index = position if pid == target else _INVALID_INDEX

        compacted = []
        for blocks in per_partition:
            real = [block for block in blocks if block.is_real]
            if len(real) > self._batch_size:
                raise OverflowError(
                    f"{len(real)} keys fall into one partition, "
                    f"more than batch_size {self._batch_size}"
                )
            padding = [block for block in blocks if not block.is_real]
            compacted.append((real + padding)[: self._batch_size])
        return compacted

    def _dispatch(self, kind: str, batches: List[List[_BatchBlock]]) -> List[Any]:
        reply: "queue.Queue[Tuple[int, Any]]" = queue.Queue(PARTITIONS)
        for worker, blocks in zip(self._workers, batches):
            worker.commands.put(_Command(kind, blocks, reply))
        results: List[Any] = [None] * PARTITIONS
        failure: Optional[BaseException] = None
        for _ in range(PARTITIONS):
            pid, payload = reply.get()
            if isinstance(payload, BaseException):
                failure = failure or payload
            results[pid] = payload
        if failure is not None:
            raise failure
        return results

    def get_batch_distinct(self, keys: Sequence[K]) -> List[Optional[V]]:
        """Look up every key; absent keys give None. Keys must be distinct."""
        self._check_open()
        keys = list(keys)
        batches = self._spread(keys, None, max(len(keys), self._batch_size))
        replies = self._dispatch("get", batches)
        merged = [block for blocks in replies for block in blocks]
        merged.sort(key=lambda block: block.index)
        return [block.value if block.found else None for block in merged[: len(keys)]]

    def insert_batch_distinct(self, keys: Sequence[K], values: Sequence[V]) -> None:
        """Insert distinct keys not yet in the map, with their values."""
        self._check_open()
        keys = list(keys)
        values = list(values)
        if len(keys) != len(values):
            raise ValueError("keys and values must have the same length")
        if self._size + len(keys) > self._capacity:
            raise OverflowError("Map is full, cannot insert more elements.")
        if len(keys) > self._batch_size:
            raise ValueError(
                f"a batch of {len(keys)} keys exceeds batch_size {self._batch_size}"
            )
        batches = self._spread(keys, values, self._batch_size)
        self._dispatch("insert", batches)
        self._size += len(keys)

    def close(self) -> None:
        """Stop all worker threads. Further operations raise RuntimeError."""
        if self._closed:
            return
        self._closed = True
        for worker in self._workers:
            worker.stop()

    def __enter__(self) -> "ShardedMap[K, V]":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return (
            f"ShardedMap(size={self._size}, capacity={self._capacity}, "
            f"batch_size={self._batch_size})"
        )