"""Brownian dynamics of Lennard-Jones fluids, periodic or between horizontal walls."""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Optional, Sequence, Union

from .celllist import CellList
from .comn import make_dir
from .domain import Grid, PeriodicDomain, WalledDomain
from .exporter import LogExporter, SnapGSD
from .force import LJForce
from .ini import ini
from .integrate import BrownianDynamicsEM
from .rand import Ranq2
from .vect import Vec2

PathLike = Union[str, os.PathLike]

_R_CUT = 2.5
_LOG_INTERVAL = 10000


def _run(*, lx: float, ly: float, rho0: float, eps: float, h: float, n_step: int,
         snap_log_sep: float, seed: int, ini_mode: str, folder: PathLike,
         basename: str, domain, flag_wall: bool) -> Path:
    snap_interval = 1
    if snap_log_sep >= 1:
        snap_interval = int(snap_log_sep)
        snap_log_sep = -1.0
    n_par = int(rho0 * lx * ly)

    rng = Ranq2(seed)
    gl_l = Vec2(lx, ly)
    grid = Grid(gl_l, _R_CUT)
    cl = CellList(domain, grid)
    integrator = BrownianDynamicsEM(h, 1.0)
    kernel = LJForce(_R_CUT, eps)

    def f1(p1, p2):
        kernel(p1, p2)

    def f2(p1, p2):
        kernel(p1, p2, domain)

    folder = Path(folder)
    log_folder = folder / "log"
    make_dir(log_folder)
    gsd_file = folder / f"{basename}.gsd"

    with SnapGSD(gsd_file, n_step, snap_interval, 0, h, snap_log_sep,
                 gl_l, ini_mode) as snap:
        start = snap.start
        log_file = log_folder / f"{basename}_t{start}.dat"
        with LogExporter(log_file, start, n_step, _LOG_INTERVAL, n_par) as log:
            p_arr = ini(ini_mode, rng, n_par, gl_l, snap, 1.0, flag_wall)
            cl.create(p_arr)
            for t in range(1, n_step + 1):
                cl.for_each_pair(f1, f2)
                for p in p_arr:
                    integrator.update_par_cell_list(p, domain, rng, cl)
                snap.dump(t, p_arr)
                log.record(t)
    return gsd_file


def run_lj(lx: float, ly: float, rho0: float, eps: float, h: float, n_step: int,
           snap_log_sep: float, seed: int, ini_mode: str, folder: PathLike) -> Path:
    """Simulate a Lennard-Jones fluid in a periodic box; return the trajectory path."""
    basename = "L%g_%g_r%.4f_e%.4f_h%g_S%d" % (lx, ly, rho0, eps, h, seed)
    domain = PeriodicDomain(Vec2(lx, ly))
    return _run(lx=lx, ly=ly, rho0=rho0, eps=eps, h=h, n_step=n_step,
                snap_log_sep=snap_log_sep, seed=seed, ini_mode=ini_mode,
                folder=folder, basename=basename, domain=domain, flag_wall=False)


def run_lj_hwall(lx: float, ly: float, rho0: float, eps: float, eps_w: float,
                 h: float, n_step: int, snap_log_sep: float, seed: int,
                 ini_mode: str, folder: PathLike) -> Path:
    """Simulate a Lennard-Jones fluid between an attractive lower and a repulsive upper wall."""
    basename = "L%g_%g_r%.4f_e%.4f_%.4f_h%g_S%d" % (lx, ly, rho0, eps, eps_w, h, seed)
    domain = WalledDomain(Vec2(lx, ly), True, False, eps_w, 1.0)
    return _run(lx=lx, ly=ly, rho0=rho0, eps=eps, h=h, n_step=n_step,
                snap_log_sep=snap_log_sep, seed=seed, ini_mode=ini_mode,
                folder=folder, basename=basename, domain=domain, flag_wall=True)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        description="Brownian dynamics of a Lennard-Jones fluid between walls.")
    parser.add_argument("--lx", type=float, default=100.0)
    parser.add_argument("--ly", type=float, default=100.0)
    parser.add_argument("--rho0", type=float, default=0.25)
    parser.add_argument("--eps", type=float, default=0.5)
    parser.add_argument("--eps-w", type=float, default=1.0)
    parser.add_argument("--h", type=float, default=0.0025)
    parser.add_argument("--n-step", type=int, default=1000000)
    parser.add_argument("--snap-log-sep", type=float, default=10000.0,
                        help="snapshot interval if >= 1, else spacing in log10 time")
    parser.add_argument("--seed", type=int, default=1234)
    parser.add_argument("--ini-mode", choices=("rand", "resume"), default="resume")
    parser.add_argument("--folder", default="data")
    parser.add_argument("--no-wall", action="store_true",
                        help="use a fully periodic box instead of walls")
    args = parser.parse_args(argv)

    if args.no_wall:
        run_lj(args.lx, args.ly, args.rho0, args.eps, args.h, args.n_step,
               args.snap_log_sep, args.seed, args.ini_mode, args.folder)
    else:
        run_lj_hwall(args.lx, args.ly, args.rho0, args.eps, args.eps_w, args.h,
                     args.n_step, args.snap_log_sep, args.seed, args.ini_mode,
                     args.folder)
    return 0