"""Simulation boxes: the cell grid, periodic domains and domains with horizontal walls."""

from __future__ import annotations

from typing import Callable, Optional

from .force import LJHWalls
from .vect import Vec2


class Grid:
    """The box divided into cells no smaller than the interaction cutoff."""

    def __init__(self, gl_l: Vec2, r_cut: float) -> None:
        nx = int(gl_l.x / r_cut)
        ny = int(gl_l.y / r_cut)
        if nx < 1 or ny < 1:
            raise ValueError(
                f"box {gl_l.x:g} x {gl_l.y:g} is smaller than the cutoff {r_cut:g}")
        self.gl_n = Vec2(nx, ny)
        self.n = Vec2(nx, ny)
        self.origin = Vec2(0, 0)
        self.lc = Vec2(gl_l.x / nx, gl_l.y / ny)
        self.inverse_lc = Vec2(1.0 / self.lc.x, 1.0 / self.lc.y)
        print(f"r_cut ={r_cut:g}")
        print(f"grid size:{self.n.x}\t{self.n.y}")


class Domain:
    """A rectangular simulation box handled by a single process."""

    def __init__(self, gl_l: Vec2) -> None:
        self.proc_size = Vec2(1, 1)
        self.proc_rank = Vec2(0, 0)
        self.gl_l = Vec2(gl_l.x, gl_l.y)
        self.l = Vec2(gl_l.x, gl_l.y)
        self.origin = Vec2(0.0, 0.0)


class PeriodicDomain(Domain):
    """A box with periodic boundaries along the flagged directions."""

    def __init__(self, gl_l: Vec2, flag_pbc: tuple[bool, bool] = (True, True)) -> None:
        super().__init__(gl_l)
        self.flag_pbc = (bool(flag_pbc[0]), bool(flag_pbc[1]))
        self.gl_half_l = Vec2(gl_l.x * 0.5, gl_l.y * 0.5)

    def tangle(self, pos: Vec2) -> None:
        """Wrap a position back into the box, in place."""
        for dim in (0, 1):
            if self.flag_pbc[dim]:
                length = self.gl_l[dim]
                if pos[dim] < 0.0:
                    pos[dim] += length
                elif pos[dim] >= length:
                    pos[dim] -= length

    def untangle(self, r12: Vec2) -> None:
        """Replace a separation by its minimum image, in place."""
        for dim in (0, 1):
            if self.flag_pbc[dim]:
                half = self.gl_half_l[dim]
                if r12[dim] < -half:
                    r12[dim] += self.gl_l[dim]
                elif r12[dim] > half:
                    r12[dim] -= self.gl_l[dim]

    def wall_force(self, p) -> None:
        """Periodic boxes have no walls."""


class WalledDomain(PeriodicDomain):
    """Periodic in x, bounded by Lennard-Jones walls at y = 0 and y = Ly."""

    def __init__(self, gl_l: Vec2, flag_attractive_lower: bool,
                 flag_attractive_upper: bool, eps: float, sigma: float = 1.0,
                 wall_cls: Optional[Callable[..., LJHWalls]] = None) -> None:
        super().__init__(gl_l, (True, False))
        factory = wall_cls if wall_cls is not None else LJHWalls
        self.wall = factory(gl_l.y, flag_attractive_lower, flag_attractive_upper,
                            eps, sigma)

    def wall_force(self, p) -> None:
        """Add the wall force on particle ``p``."""
        self.wall.interact(p)