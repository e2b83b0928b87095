"""Euler-Maruyama integration of overdamped Brownian motion."""

from __future__ import annotations

from .rand import UniformSource


class BrownianDynamicsEM:
    """Euler-Maruyama step with time step ``h`` and translational diffusion ``dt``."""

    def __init__(self, h: float, dt: float) -> None:
        self.h = h
        self.noise_amplitude = 24 * dt * h

    def update(self, p, domain, rng: UniformSource) -> None:
        """Advance ``p`` by one step, wrap it into ``domain`` and clear its force."""
        domain.wall_force(p)
        p.pos += p.force * self.h
        p.pos.x += (rng.doub() - 0.5) * self.noise_amplitude
        p.pos.y += (rng.doub() - 0.5) * self.noise_amplitude
        domain.tangle(p.pos)
        p.force.x = 0.0
        p.force.y = 0.0

    def update_par_cell_list(self, p, domain, rng: UniformSource, cl) -> None:
        """Advance ``p`` and move it to its new cell in ``cl`` if it changed cell."""
        ic_old = cl.get_ic(p)
        self.update(p, domain, rng)
        ic_new = cl.get_ic(p)
        if ic_old != ic_new:
            cl.update(p, ic_old, ic_new)