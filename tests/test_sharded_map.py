import pytest

from obliviousds.sharded_map import PARTITIONS, ShardedMap

N = 4
B = N


@pytest.fixture
def small_map():
    with ShardedMap(32, B) as sharded:
        yield sharded


def test_new_map_rounds_capacity_and_starts_empty():
    requested = 100
    with ShardedMap(requested, B) as sharded:
        per_part = -(-requested // PARTITIONS)
        assert sharded.capacity == per_part * PARTITIONS
        assert sharded.capacity == 105
        assert len(sharded) == 0


def test_insert_batch_then_get_batch_returns_expected_values(small_map):
    keys = [1, 2, 3, 4]
    values = [10, 20, 30, 40]
    small_map.insert_batch_distinct(keys, values)
    assert small_map.get_batch_distinct(keys) == values


def test_querying_absent_keys_returns_none():
    with ShardedMap(16, B) as sharded:
        assert sharded.get_batch_distinct([100, 200, 300, 400]) == [None] * 4


def test_size_updates_after_insert():
    with ShardedMap(16, B) as sharded:
        sharded.insert_batch_distinct([11, 22, 33, 44], [111, 222, 333, 444])
        assert len(sharded) == N


def test_mixed_present_and_absent_keys_keep_order(small_map):
    small_map.insert_batch_distinct([1, 2, 3, 4], [10, 20, 30, 40])
    assert small_map.get_batch_distinct([3, 99, 1, 100]) == [30, None, 10, None]


def test_several_batches_accumulate(small_map):
    small_map.insert_batch_distinct([1, 2], [10, 20])
    small_map.insert_batch_distinct([5, 6, 7], [50, 60, 70])
    assert len(small_map) == 5
    assert small_map.get_batch_distinct([7, 6, 5, 2, 1]) == [70, 60, 50, 20, 10]


def test_get_batch_longer_than_batch_size_when_spread():
    with ShardedMap(32, 16) as sharded:
        sharded.insert_batch_distinct(list(range(10)), [k * 3 for k in range(10)])
        assert sharded.get_batch_distinct(list(range(10))) == [
            k * 3 for k in range(10)
        ]


def test_partition_overflow_raises():
    with ShardedMap(64, 1) as sharded:
        with pytest.raises(OverflowError):
            sharded.get_batch_distinct(list(range(PARTITIONS + 1)))


def test_insert_more_than_batch_size_raises():
    with ShardedMap(64, 1) as sharded:
        with pytest.raises(ValueError):
            sharded.insert_batch_distinct([1, 2], [10, 20])
        assert len(sharded) == 0


def test_full_map_raises():
    with ShardedMap(15, 16) as sharded:
        assert sharded.capacity == 15
        with pytest.raises(OverflowError, match="full"):
            sharded.insert_batch_distinct(list(range(16)), list(range(16)))


def test_mismatched_lengths_raise(small_map):
    with pytest.raises(ValueError):
        small_map.insert_batch_distinct([1, 2], [10])


def test_closed_map_rejects_operations():
    sharded = ShardedMap(16, B)
    sharded.close()
    with pytest.raises(RuntimeError):
        sharded.get_batch_distinct([1])
    with pytest.raises(RuntimeError):
        sharded.insert_batch_distinct([1], [2])


def test_invalid_construction_arguments():
    with pytest.raises(ValueError):
        ShardedMap(0, 4)
    with pytest.raises(ValueError):
        ShardedMap(10, 0)


def test_string_keys_and_default(small_map):
    small_map.insert_batch_distinct(["a", "b"], ["x", "y"])
    assert small_map.get_batch_distinct(["b", "c", "a"]) == ["y", None, "x"]