"""Brownian dynamics of 2D Lennard-Jones fluids, optionally between walls, with GSD output."""

__version__ = "0.1.0"

__all__ = [
    "celllist",
    "comn",
    "domain",
    "exporter",
    "force",
    "gsd",
    "ini",
    "integrate",
    "particle",
    "rand",
    "simulation",
    "vect",
]