"""Pair forces (harmonic spring, Lennard-Jones) and Lennard-Jones horizontal walls."""

from __future__ import annotations

import math
from typing import Optional, Protocol

from .vect import Vec2


class _Boundary(Protocol):
    def untangle(self, r12: Vec2) -> None: ...


class SpringForce:
    """Linear spring F(r) = k (r - sigma), acting within ``r_cut``."""

    def __init__(self, r_cut: float, k: float, sigma: float = 1.0) -> None:
        self.r_cut = r_cut
        self.r_cut_square = r_cut * r_cut
        self.k = k
        self.sigma = sigma

    def interact(self, p1, p2, r12_vec: Vec2, r12_square: float) -> None:
        """Add the spring force between ``p1`` and ``p2`` separated by ``r12_vec``."""
        r12 = math.sqrt(r12_square)
        r12_hat = r12_vec / r12
        f12 = self.k * (r12 - self.sigma) * r12_hat
        p1.force += f12
        p2.force -= f12

    def __call__(self, p1, p2, bc: Optional[_Boundary] = None) -> None:
        r12 = p2.pos - p1.pos
        if bc is not None:
            bc.untangle(r12)
        r12_square = r12.square()
        if r12_square < self.r_cut_square:
            self.interact(p1, p2, r12, r12_square)


class LJForce:
    """Lennard-Jones force F(r) = 6 eps [2 (sigma/r)^12 - (sigma/r)^6] / r."""

    def __init__(self, r_cut: float, eps: float = 1.0, sigma: float = 1.0) -> None:
        self.r_cut = r_cut
        self.r_cut_square = r_cut * r_cut
        self.eps_6 = eps * 6
        self.sigma = sigma

    def interact(self, p1, p2, r12_vec: Vec2, r12_square: float) -> None:
        """Add the Lennard-Jones force between ``p1`` and ``p2``."""
        r12 = math.sqrt(r12_square)
        inverse_r = 1.0 / r12
        pow6 = (self.sigma * inverse_r) ** 6
        pow12 = pow6 * pow6
        f12 = self.eps_6 * (2 * pow12 - pow6) * inverse_r * inverse_r * r12_vec
        p1.force -= f12
        p2.force += f12

    def __call__(self, p1, p2, bc: Optional[_Boundary] = None) -> None:
        r12 = p2.pos - p1.pos
        if bc is not None:
            bc.untangle(r12)
        r12_square = r12.square()
        if r12_square < self.r_cut_square:
            self.interact(p1, p2, r12, r12_square)


class LJHWalls:
    """Lennard-Jones walls at y = 0 and y = Ly, each attractive or purely repulsive."""

    def __init__(self, ly: float, flag_attractive_lower: bool,
                 flag_attractive_upper: bool, eps: float, sigma: float = 1.0) -> None:
        self.ly = ly
        self.eps_6 = eps * 6
        self.sigma = sigma
        self.half_sigma = 0.5 * sigma
        repulsive_cut = 2.0 ** (1.0 / 6) * sigma
        self.r_cut = (
            2.5 * sigma if flag_attractive_lower else repulsive_cut,
            2.5 * sigma if flag_attractive_upper else repulsive_cut,
        )
        print(f"sigma={sigma:g}\tr_cut={self.r_cut[0]:g}, {self.r_cut[1]:g}")

    def get_lj_force(self, r: float) -> float:
        """Magnitude of the wall force at distance ``r``; positive is repulsive."""
        inverse_r = 1.0 / r
        pow6 = (self.sigma * inverse_r) ** 6
        pow12 = pow6 * pow6
        return self.eps_6 * (2 * pow12 - pow6) * inverse_r

    def interact(self, p) -> None:
        """Add the force of the nearer wall within its cutoff to ``p``."""
        dy0 = p.pos.y + self.half_sigma
        if dy0 < self.r_cut[0]:
            p.force.y += self.get_lj_force(dy0)
        else:
            dy1 = self.ly - p.pos.y + self.half_sigma
            if dy1 < self.r_cut[1]:
                p.force.y -= self.get_lj_force(dy1)