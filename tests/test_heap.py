import heapq
import random

import pytest

from obliviousds.heap import Heap


def test_insert_and_find_min():
    heap = Heap(4)
    heap.insert(10, 100)
    heap.insert(5, 50)
    heap.insert(20, 200)
    smallest = heap.find_min()
    assert smallest.key == 5
    assert smallest.value == 50


def test_insert_and_extract_min():
    heap = Heap(4)
    heap.insert(30, 300)
    heap.insert(10, 100)
    heap.insert(20, 200)

    smallest = heap.find_min()
    assert (smallest.key, smallest.value) == (10, 100)

    heap.extract_min()

    smallest = heap.find_min()
    assert (smallest.key, smallest.value) == (20, 200)


def test_delete():
    heap = Heap(4)
    heap.insert(15, 150)
    smallest = heap.find_min()
    heap.delete(smallest.pos, smallest.timestamp)
    assert heap.find_min().is_empty()


def test_multiple_inserts_and_extracts():
    heap = Heap(8)
    for i in range(8, 0, -1):
        heap.insert(i, i * 10)
    last_key = 0
    for _ in range(8):
        smallest = heap.find_min()
        assert not smallest.is_empty()
        assert smallest.key >= last_key
        last_key = smallest.key
        heap.extract_min()
    assert heap.find_min().is_empty()


def test_stress_with_many_operations():
    heap = Heap(32)
    reference = []
    chooser = random.Random(12345)

    for _ in range(12):
        for _ in range(chooser.randrange(1, 6)):
            key = chooser.randrange(1000)
            heap.insert(key, key * 10)
            heapq.heappush(reference, (key, key * 10))
            assert heap.find_min().key == reference[0][0]

        for _ in range(chooser.randrange(1, len(reference) + 1)):
            smallest = heap.find_min()
            removed = heap.extract_min()
            assert removed == smallest
            expected = heapq.heappop(reference)
            assert (smallest.key, smallest.value) == expected

    drained = [
        (entry.key, entry.value)
        for entry in (heap.extract_min() for _ in range(len(reference)))
    ]
    assert drained == sorted(reference)
    assert heap.find_min().is_empty()


def test_insert_returns_location_and_delete_from_middle():
    heap = Heap(16)
    locations = [heap.insert(key, key) for key in (7, 3, 9, 1, 5, 11, 2, 8)]
    assert [timestamp for _, timestamp in locations] == list(range(8))
    assert all(0 <= pos < 16 for pos, _ in locations)

    pos, timestamp = locations[len(locations) // 2]  # key 5
    heap.delete(pos, timestamp)

    remaining = []
    while not heap.find_min().is_empty():
        remaining.append(heap.extract_min().key)
    assert remaining == [1, 2, 3, 7, 8, 9, 11]


def test_delete_absent_element_changes_nothing():
    heap = Heap(4)
    heap.insert(4, 40)
    heap.delete(0, 99)
    assert heap.find_min().key == 4


def test_extract_min_on_empty_heap_returns_empty_entry():
    heap = Heap(4)
    assert heap.extract_min().is_empty()


def test_invalid_sizes_and_positions():
    with pytest.raises(ValueError):
        Heap(0)
    heap = Heap(4)
    with pytest.raises(ValueError):
        heap.delete(4, 0)