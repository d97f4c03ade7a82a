import pytest

from obliviousds.unsorted_map import UnsortedMap


def test_unsorted_map():
    m = UnsortedMap(2)
    assert len(m) == 0
    assert 1 not in m
    assert m.get(1) == 0
    m.insert(1, 2)
    assert len(m) == 1
    assert 1 in m
    assert m.get(1) == 2
    m.write(1, 3)
    assert 1 in m
    assert m.get(1) == 3


def test_full_map():
    size = 1024
    m = UnsortedMap(size)
    assert len(m) == 0
    for i in range(size):
        m.insert(i, i * 2)
        assert i in m
        assert m.get(i) == i * 2
        assert len(m) == i + 1
        m.write(i, i * 3)
        assert m.get(i) == i * 3
        assert len(m) == i + 1
    for i in range(0, size, 97):
        assert m.get(i) == i * 3


@pytest.mark.parametrize(
    "key, value",
    [
        (0, 0),
        (-1, -1),
        (2**64 - 1, 2**64 - 1),
        (-(2**127), 2**127 - 1),
        ("", ""),
        ((0, 0), (0, 0)),
    ],
)
def test_map_multiple_types(key, value):
    m = UnsortedMap(1024, default=value)
    assert len(m) == 0
    assert key not in m
    m.insert(key, value)
    assert len(m) == 1
    assert key in m
    assert m.get(key) == value


def test_get_missing_returns_default():
    m = UnsortedMap(8, default=-7)
    m.insert(3, 30)
    assert m.get(4) == -7
    assert m.get(3) == 30


def test_write_missing_key_raises():
    m = UnsortedMap(4)
    m.insert(1, 10)
    with pytest.raises(KeyError):
        m.write(2, 20)
    assert m.get(1) == 10


def test_zero_capacity_rejected():
    with pytest.raises(ValueError):
        UnsortedMap(0)


def test_deamortize_on_empty_queue_keeps_contents():
    m = UnsortedMap(16)
    for i in range(5):
        m.insert(i, i + 100)
    for _ in range(5):
        m.deamortize_insertion_queue()
    assert len(m) == 5
    assert [m.get(i) for i in range(5)] == [100, 101, 102, 103, 104]


def test_capacity_reported():
    assert UnsortedMap(50).capacity == 50