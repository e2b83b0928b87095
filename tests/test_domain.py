import pytest

from ljwall.domain import Domain, Grid, PeriodicDomain, WalledDomain
from ljwall.particle import Particle
from ljwall.vect import Vec2


def test_grid_exact_division():
    grid = Grid(Vec2(100.0, 100.0), 2.5)
    assert grid.n.x == 40
    assert grid.n == grid.gl_n
    assert grid.lc.x == pytest.approx(2.5)


def test_grid_cells_cover_box_and_exceed_cutoff():
    gl_l = Vec2(10.0, 7.0)
    grid = Grid(gl_l, 2.5)
    for dim in (0, 1):
        assert grid.n[dim] * grid.lc[dim] == pytest.approx(gl_l[dim])
        assert grid.lc[dim] >= 2.5
        assert grid.lc[dim] * grid.inverse_lc[dim] == pytest.approx(1.0)
    assert grid.origin == Vec2(0, 0)


def test_grid_box_smaller_than_cutoff():
    with pytest.raises(ValueError):
        Grid(Vec2(2.0, 10.0), 2.5)


def test_domain_defaults():
    dm = Domain(Vec2(30.0, 20.0))
    assert dm.l == Vec2(30.0, 20.0)
    assert dm.gl_l == dm.l
    assert dm.origin == Vec2(0.0, 0.0)
    assert dm.proc_size == Vec2(1, 1)


def test_tangle_wraps_into_box():
    dm = PeriodicDomain(Vec2(10.0, 10.0))
    pos = Vec2(-1.0, 10.5)
    dm.tangle(pos)
    assert pos.x == pytest.approx(-1.0 + 10.0)
    assert pos.y == pytest.approx(10.5 - 10.0)


def test_tangle_leaves_inside_points():
    dm = PeriodicDomain(Vec2(10.0, 10.0))
    pos = Vec2(3.0, 0.0)
    dm.tangle(pos)
    assert pos == Vec2(3.0, 0.0)


def test_untangle_gives_minimum_image():
    dm = PeriodicDomain(Vec2(10.0, 10.0))
    r = Vec2(6.0, -6.0)
    dm.untangle(r)
    assert abs(r.x) <= 5.0 and abs(r.y) <= 5.0
    assert r.x == pytest.approx(6.0 - 10.0)
    assert r.y == pytest.approx(-6.0 + 10.0)


def test_no_pbc_leaves_vectors_alone():
    dm = PeriodicDomain(Vec2(10.0, 10.0), (False, False))
    pos = Vec2(-1.0, 12.0)
    dm.tangle(pos)
    r = Vec2(8.0, -8.0)
    dm.untangle(r)
    assert pos == Vec2(-1.0, 12.0)
    assert r == Vec2(8.0, -8.0)


def test_periodic_wall_force_is_noop():
    dm = PeriodicDomain(Vec2(10.0, 10.0))
    p = Particle(Vec2(0.1, 0.1), Vec2(0.0, 0.0))
    dm.wall_force(p)
    assert p.force == Vec2(0.0, 0.0)


def test_walled_domain_is_periodic_only_in_x():
    dm = WalledDomain(Vec2(10.0, 10.0), True, False, 1.0)
    pos = Vec2(-1.0, -1.0)
    dm.tangle(pos)
    assert pos.x == pytest.approx(-1.0 + 10.0)
    assert pos.y == -1.0


def test_walled_domain_pushes_away_from_walls():
    dm = WalledDomain(Vec2(10.0, 10.0), False, False, 1.0)
    low = Particle(Vec2(5.0, 0.3), Vec2(0.0, 0.0))
    high = Particle(Vec2(5.0, 9.7), Vec2(0.0, 0.0))
    mid = Particle(Vec2(5.0, 5.0), Vec2(0.0, 0.0))
    for p in (low, high, mid):
        dm.wall_force(p)
    assert low.force.y > 0
    assert high.force.y < 0
    assert high.force.y == pytest.approx(-low.force.y)
    assert mid.force == Vec2(0.0, 0.0)