# obliviousds

Data structures whose sequence of memory accesses does not depend on which
element is being read or written. Small structures scan every slot on each
operation. Larger ones keep their elements in a binary tree of small buckets
plus a stash. Each element is bound to a random leaf and moved to a fresh
random leaf on every access, so each access reads and rewrites one
random-looking root-to-leaf path.

## Installing

```
pip install .
```

There are no runtime dependencies. The `test` extra installs pytest.

## Contents

| Module | Classes | Purpose |
| --- | --- | --- |
| `obliviousds.array` | `ShortArray`, `LongArray`, `FixedArray`, `DynamicArray`, `MultiWayArray` | Fixed-size and resizable arrays |
| `obliviousds.queue` | `ShortQueue`, `ShortQueueElement` | Bounded FIFO queue with conditional push and pop |
| `obliviousds.stack` | `Stack` | Bounded LIFO stack kept as a linked list in the tree store |
| `obliviousds.vector` | `EagerVector` | Growable vector that doubles its capacity when full |
| `obliviousds.unsorted_map` | `UnsortedMap` | Two-table cuckoo hash map with a queue of pending insertions |
| `obliviousds.heap` | `Heap`, `HeapEntry` | Path-oblivious min-heap |
| `obliviousds.sharded_map` | `ShardedMap` | Hash map split over 15 worker threads, queried in fixed-size batches |

Sizes and capacities are public. Indices out of range raise `IndexError`,
and invalid sizes raise `ValueError`. Reading a slot that was never written
returns a copy of the structure's `default` value.

### Arrays

- `ShortArray(size, default=0)` scans every slot on each `read` and `write`.
- `LongArray(size, default=0)` uses the tree store.
- `FixedArray(size, default=0)` is a `ShortArray` for sizes up to
  `SHORT_ARRAY_THRESHOLD` (128) and a `LongArray` above it.
- `DynamicArray(size, default=0)` adds `resize(size)`, which keeps the leading
  values. It also adds `update(index, func)`, which returns
  `(was_written_before, new_value)`.
- `MultiWayArray(size, ways, default=0)` holds `ways` subarrays (a power of
  two) in one store. Which subarray is accessed is not hidden.

```python
from obliviousds.array import FixedArray, DynamicArray

arr = FixedArray(200, 0)
arr.write(7, 42)
assert arr.read(7) == 42
assert len(arr) == 200

dyn = DynamicArray(4, 0)
dyn.write(3, 9)
dyn.resize(8)
assert dyn.read(3) == 9 and len(dyn) == 8
```

### Queue, stack and vector

The `maybe_` operations do the same work whether or not `real` is true. The
flag only decides whether the work takes effect. A `maybe_pop` with
`real=False` returns a copy of the default. A real push onto a full
structure, or a real pop from an empty one, raises `IndexError`.

```python
from obliviousds.queue import ShortQueue
from obliviousds.stack import Stack

q = ShortQueue(3, 0)
q.maybe_push(True, 1)
q.maybe_push(False, 99)   # no effect
assert len(q) == 1
assert q.maybe_pop(True) == 1

s = Stack(10, 0)
s.maybe_push(True, 100)
s.maybe_push(True, 222)
assert s.maybe_pop(True) == 222
```

```python
from obliviousds.vector import EagerVector

v = EagerVector(0)
assert v.capacity() == 2
for x in (1, 2, 3):
    v.push_back(x)
assert v.capacity() == 4
assert v.pop_back() == 3
```

### UnsortedMap

`insert` adds a key that must not already be present. It raises
`OverflowError` if the pending-insertion queue is full. `write` replaces the
value of a present key and raises `KeyError` otherwise. `get` returns the
default for an absent key, and `in` tests for presence.

```python
from obliviousds.unsorted_map import UnsortedMap

m = UnsortedMap(1024, 0)
m.insert(1, 2)
assert 1 in m and m.get(1) == 2
m.write(1, 3)
assert m.get(1) == 3
```

### Heap

`insert(key, value)` returns `(pos, timestamp)`, which identify the element
for `delete(pos, timestamp)`. `find_min()` returns a `HeapEntry`. When the
heap is empty, the entry's `is_empty()` is true. `extract_min()` removes the
smallest entry and returns it.

```python
from obliviousds.heap import Heap

h = Heap(8)
h.insert(10, 100)
h.insert(5, 50)
smallest = h.find_min()
assert (smallest.key, smallest.value) == (5, 50)
assert h.extract_min().key == 5
assert h.find_min().key == 10
```

### ShardedMap

`ShardedMap(capacity, batch_size, default=0)` starts one worker thread per
partition. Use it as a context manager, or call `close()`. Each partition
receives exactly `batch_size` requests per batch, so more keys than
`batch_size` landing in one partition raises `OverflowError`. An insert
batch may hold at most `batch_size` keys. `get_batch_distinct` returns one
value per key, or `None` for absent keys.

```python
from obliviousds.sharded_map import ShardedMap

with ShardedMap(32, 4, 0) as sm:
    sm.insert_batch_distinct([1, 2, 3, 4], [10, 20, 30, 40])
    assert sm.get_batch_distinct([1, 2, 3, 4]) == [10, 20, 30, 40]
    assert sm.get_batch_distinct([99]) == [None]
    assert len(sm) == 4
```

## What it does not do

- Everything lives in process memory. Nothing is stored on disk or shared
  between processes.
- `UnsortedMap` and `ShardedMap` have no delete operation.
- `ShardedMap` has no upsert.
- The obliviousness is a property of the algorithms' logical access
  sequence. The Python runtime itself gives no constant-time or side-channel
  guarantees.
- There is no command-line interface.

## Running the tests

```
pip install .[test]
pytest
```