import math

import pytest

from ljwall.rand import (
    Ran,
    Ranfib,
    Ranq1,
    Ranq2,
    circle_point_picking,
    for_each_shuffle,
    hypersphere_point_picking,
    shuffle,
    sphere_point_picking,
)


def test_same_seed_same_sequence():
    pairs = [
        (Ran(1234), Ran(1234)),
        (Ranq1(1234), Ranq1(1234)),
        (Ranq2(1234), Ranq2(1234)),
        (Ranfib(1234), Ranfib(1234)),
    ]
    for a, b in pairs:
        assert [a.doub() for _ in range(50)] == [b.doub() for _ in range(50)]


def test_different_seeds_differ():
    pairs = [
        (Ran(1), Ran(2)),
        (Ranq1(1), Ranq1(2)),
        (Ranq2(1), Ranq2(2)),
        (Ranfib(1), Ranfib(2)),
    ]
    for a, b in pairs:
        assert [a.doub() for _ in range(10)] != [b.doub() for _ in range(10)]


def test_doub_in_unit_interval():
    for rng in (Ran(99), Ranq1(99), Ranq2(99), Ranfib(99)):
        values = [rng.doub() for _ in range(2000)]
        assert all(0.0 <= v < 1.0 for v in values)
        assert 0.4 < sum(values) / len(values) < 0.6


def test_int64_range():
    for rng in (Ran(5), Ranq1(5), Ranq2(5)):
        assert all(0 <= rng.int64() < 2**64 for _ in range(500))


def test_int32_is_low_bits_of_int64():
    pairs = [(Ran(42), Ran(42)), (Ranq1(42), Ranq1(42)), (Ranq2(42), Ranq2(42))]
    for a, b in pairs:
        assert all(a.int32() == b.int64() & 0xFFFFFFFF for _ in range(100))


def test_doub_scales_int64():
    pairs = [(Ran(17), Ran(17)), (Ranq1(17), Ranq1(17)), (Ranq2(17), Ranq2(17))]
    for a, b in pairs:
        assert all(a.doub() == 5.42101086242752217e-20 * b.int64() for _ in range(100))


def test_ranfib_int32_range_and_determinism():
    a = Ranfib(3)
    b = Ranfib(3)
    values = [a.int32() for _ in range(200)]
    assert values == [b.int32() for _ in range(200)]
    assert all(0 <= v <= 4294967295 for v in values)


def test_negative_seed_is_accepted_as_unsigned():
    a = Ranq2(-1)
    b = Ranq2(2**64 - 1)
    assert a.int64() == b.int64()


def test_circle_point_picking_unit_norm():
    rng = Ranq2(8)
    for _ in range(100):
        x, y = circle_point_picking(rng)
        assert math.hypot(x, y) == pytest.approx(1.0)


def test_sphere_point_picking_unit_norm():
    rng = Ranq2(9)
    for _ in range(100):
        x, y, z = sphere_point_picking(rng)
        assert math.sqrt(x * x + y * y + z * z) == pytest.approx(1.0)


def test_hypersphere_point_picking_unit_norm():
    rng = Ran(10)
    for _ in range(100):
        point = hypersphere_point_picking(rng)
        assert len(point) == 4
        assert math.sqrt(sum(c * c for c in point)) == pytest.approx(1.0)


def test_shuffle_is_permutation_and_deterministic():
    data = list(range(30))
    a = data.copy()
    b = data.copy()
    shuffle(a, Ranq2(4))
    shuffle(b, Ranq2(4))
    assert a == b
    assert sorted(a) == data
    assert a != data


def test_shuffle_empty():
    arr = []
    shuffle(arr, Ranq2(1))
    assert arr == []


def test_for_each_shuffle_visits_all_and_matches_shuffle():
    data = list(range(12))
    a = data.copy()
    shuffle(a, Ranq1(21))
    b = data.copy()
    visited = []
    for_each_shuffle(b, Ranq1(21), visited.append)
    assert b == a
    assert sorted(visited) == data
    assert visited == list(reversed(b))


def test_for_each_shuffle_single_element():
    visited = []
    for_each_shuffle(["only"], Ranq2(1), visited.append)
    assert visited == ["only"]