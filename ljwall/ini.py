"""Initial configurations: random placement relaxed against overlaps, or a saved snapshot."""

from __future__ import annotations

from .celllist import CellList
from .domain import Grid, PeriodicDomain, WalledDomain
from .force import SpringForce
from .integrate import BrownianDynamicsEM
from .particle import Node
from .rand import UniformSource
from .vect import Vec2

_RELAX_K = 10.0
_RELAX_H = 0.05
_RELAX_STEPS = 10000


def ini_rand(rng: UniformSource, n_par: int, gl_l: Vec2, origin: Vec2) -> list[Node]:
    """Place ``n_par`` nodes uniformly in the box of size ``gl_l`` at ``origin``."""
    return [Node.random(rng, gl_l, origin) for _ in range(n_par)]


def _relax(p_arr: list[Node], rng: UniformSource, domain, gl_l: Vec2,
           sigma: float, n_step: int) -> None:
    r_cut = sigma
    grid = Grid(gl_l, r_cut)
    cl = CellList(domain, grid)
    integrator = BrownianDynamicsEM(_RELAX_H, 0.0)
    kernel = SpringForce(r_cut, _RELAX_K, sigma)

    def f1(p1, p2):
        kernel(p1, p2)

    def f2(p1, p2):
        kernel(p1, p2, domain)

    cl.create(p_arr)
    for _ in range(n_step):
        cl.for_each_pair(f1, f2)
        for p in p_arr:
            integrator.update(p, domain, rng)
        cl.recreate(p_arr)


def ini_rand_wo_overlap(rng: UniformSource, n_par: int, gl_l: Vec2,
                        sigma: float = 1.0, n_step: int = _RELAX_STEPS) -> list[Node]:
    """Random nodes in a periodic box, pushed apart by soft springs."""
    p_arr = ini_rand(rng, n_par, gl_l, Vec2(0.0, 0.0))
    _relax(p_arr, rng, PeriodicDomain(gl_l), gl_l, sigma, n_step)
    return p_arr


def ini_rand_w_hwalls(rng: UniformSource, n_par: int, gl_l: Vec2,
                      sigma: float = 1.0, n_step: int = _RELAX_STEPS) -> list[Node]:
    """Random nodes between two repulsive horizontal walls, pushed apart by soft springs."""
    new_l = Vec2(gl_l.x, gl_l.y - sigma)
    new_o = Vec2(0.0, sigma / 2)
    p_arr = ini_rand(rng, n_par, new_l, new_o)
    domain = WalledDomain(gl_l, False, False, 0.1)
    _relax(p_arr, rng, domain, gl_l, sigma, n_step)
    return p_arr


def ini_from_snap(snap) -> list[Node]:
    """Nodes taken from the last frame of ``snap``."""
    return [
        p if isinstance(p, Node) else Node(pos=Vec2(p.pos.x, p.pos.y))
        for p in snap.read_last_frame()
    ]


def ini(ini_mode: str, rng: UniformSource, n_par: int, gl_l: Vec2, snap,
        sigma: float = 1.0, flag_wall: bool = False) -> list[Node]:
    """Build the initial configuration for ``ini_mode`` ("rand" or "resume")."""
    if ini_mode == "rand":
        if flag_wall:
            return ini_rand_w_hwalls(rng, n_par, gl_l, sigma)
        return ini_rand_wo_overlap(rng, n_par, gl_l, sigma)
    if ini_mode == "resume":
        return ini_from_snap(snap)
    raise ValueError(f"ini_mode must be one of rand or resume, got {ini_mode!r}")