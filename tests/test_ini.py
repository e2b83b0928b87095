import math

import pytest

from ljwall.domain import PeriodicDomain
from ljwall.ini import (
    ini,
    ini_from_snap,
    ini_rand,
    ini_rand_w_hwalls,
    ini_rand_wo_overlap,
)
from ljwall.particle import Node, Particle
from ljwall.rand import Ranq2
from ljwall.vect import Vec2


class _FakeSnap:
    def __init__(self, particles):
        self.particles = particles

    def read_last_frame(self):
        return list(self.particles)


def test_ini_rand_count_and_bounds():
    gl_l = Vec2(5.0, 8.0)
    origin = Vec2(1.0, 2.0)
    nodes = ini_rand(Ranq2(3), 50, gl_l, origin)
    assert len(nodes) == 50
    for p in nodes:
        assert origin.x <= p.pos.x < origin.x + gl_l.x
        assert origin.y <= p.pos.y < origin.y + gl_l.y
        assert p.force == Vec2(0.0, 0.0)


def test_ini_rand_is_deterministic():
    a = ini_rand(Ranq2(11), 5, Vec2(4.0, 4.0), Vec2(0.0, 0.0))
    b = ini_rand(Ranq2(11), 5, Vec2(4.0, 4.0), Vec2(0.0, 0.0))
    assert [p.pos for p in a] == [p.pos for p in b]


def test_wo_overlap_separates_particles():
    gl_l = Vec2(10.0, 10.0)
    nodes = ini_rand_wo_overlap(Ranq2(5), 10, gl_l, 1.0, n_step=200)
    dom = PeriodicDomain(gl_l)
    assert len(nodes) == 10
    for i, a in enumerate(nodes):
        assert 0.0 <= a.pos.x < gl_l.x
        assert 0.0 <= a.pos.y < gl_l.y
        for b in nodes[i + 1:]:
            r = b.pos - a.pos
            dom.untangle(r)
            assert math.sqrt(r.square()) > 0.9


def test_w_hwalls_keeps_particles_between_walls():
    gl_l = Vec2(10.0, 10.0)
    nodes = ini_rand_w_hwalls(Ranq2(9), 10, gl_l, 1.0, n_step=200)
    assert len(nodes) == 10
    for p in nodes:
        assert 0.0 <= p.pos.x < gl_l.x
        assert 0.0 < p.pos.y < gl_l.y


def test_ini_from_snap_converts_to_nodes():
    snap = _FakeSnap([Particle(pos=Vec2(1.0, 2.0)), Particle(pos=Vec2(3.0, 4.0))])
    nodes = ini_from_snap(snap)
    assert all(isinstance(p, Node) for p in nodes)
    assert [p.pos for p in nodes] == [Vec2(1.0, 2.0), Vec2(3.0, 4.0)]


def test_ini_resume_uses_snapshot():
    snap = _FakeSnap([Particle(pos=Vec2(0.5, 0.5))])
    nodes = ini("resume", Ranq2(1), 1, Vec2(4.0, 4.0), snap)
    assert [p.pos for p in nodes] == [Vec2(0.5, 0.5)]


def test_ini_rand_mode_places_requested_number():
    gl_l = Vec2(3.0, 3.0)
    nodes = ini("rand", Ranq2(2), 2, gl_l, None)
    assert len(nodes) == 2
    for p in nodes:
        assert 0.0 <= p.pos.x < gl_l.x
        assert 0.0 <= p.pos.y < gl_l.y


def test_ini_rejects_unknown_mode():
    with pytest.raises(ValueError):
        ini("bogus", Ranq2(1), 1, Vec2(4.0, 4.0), None)