# ljwall

Overdamped (Brownian) dynamics of a two-dimensional Lennard-Jones fluid in a
rectangular box. The box is either periodic in both directions, or periodic in
x and bounded in y by two Lennard-Jones walls. Snapshots go to a GSD file in
the HOOMD schema, and a plain-text log records the run's progress. The package
is pure Python and has no runtime dependencies.

## Installation

```
pip install .
```

For the test suite:

```
pip install .[test]
pytest
```

## Running a simulation

The `ljwall` command runs a system with walls. The lower wall is attractive and
the upper wall is purely repulsive. The defaults are:

- box 100 x 100, density 0.25
- particle-particle epsilon 0.5, wall epsilon 1
- time step 0.0025, 1000000 steps
- a snapshot every 10000 steps
- seed 1234
- output folder `data`

The default initial mode is `resume`, which continues from an existing
trajectory file. To start a new run, ask for random initial positions:

```
ljwall --ini-mode rand
```

Options:

| option | meaning |
| --- | --- |
| `--lx`, `--ly` | box lengths |
| `--rho0` | number density; the particle count is `int(rho0 * lx * ly)` |
| `--eps` | particle-particle Lennard-Jones epsilon |
| `--eps-w` | wall epsilon |
| `--h` | time step |
| `--n-step` | number of steps |
| `--snap-log-sep` | snapshot interval if 1 or more, otherwise spacing in log10 of time |
| `--seed` | random seed |
| `--ini-mode` | `rand` or `resume` |
| `--folder` | output folder |
| `--no-wall` | use a fully periodic box instead of walls |

Runs can also be started from Python. Both functions return the path of the
GSD file:

```python
from ljwall.simulation import run_lj, run_lj_hwall

# Fully periodic box
run_lj(20, 20, 0.25, 0.5, 0.0025, 1000, 100, 1234, "rand", "data")

# Periodic in x; attractive wall at y = 0, repulsive wall at y = Ly
run_lj_hwall(20, 20, 0.25, 0.5, 1.0, 0.0025, 1000, 100, 1234, "rand", "data")
```

### Arguments

The arguments are, in order:

- the box lengths;
- the number density;
- the Lennard-Jones epsilon, and for `run_lj_hwall` the wall epsilon;
- the time step and the number of steps;
- the snapshot spacing;
- the seed;
- the initial mode;
- the output folder.

### Initial modes

- `"rand"` places particles uniformly at random. It then relaxes overlaps for
  10000 steps with a soft spring potential; in the walled case, repulsive walls
  are also present during this relaxation.
- `"resume"` reads the last frame of the existing GSD file and continues. Step
  numbers carry on from that frame's time step.

Any other mode raises `ValueError`.

### Output files

The GSD file is named after the run's parameters, for example
`L20_20_r0.2500_e0.5000_h0.0025_S1234.gsd`. Each frame holds
`configuration/step`, `particles/N` and `particles/position`. Positions are
given relative to the box centre, with a third column that is always 0.

The log is written to `log/<name>_t<start>.dat` in the output folder. It
records:

- the start time;
- the elapsed time every 10000 steps;
- at the end, the finish time and the throughput.

## Building blocks

- `ljwall.vect`: `Vec2` and `Vec3` vectors.
- `ljwall.rand`: the uniform generators `Ran`, `Ranq1`, `Ranq2` and `Ranfib`.
  It also provides `circle_point_picking`, `sphere_point_picking`,
  `hypersphere_point_picking`, `shuffle` and `for_each_shuffle`.
- `ljwall.particle`: `Particle`, and `Node`, a particle that sits in a doubly
  linked list. It also provides helpers that visit pairs of nodes.
- `ljwall.domain`: `Grid`, `Domain`, `PeriodicDomain` (wrapping and minimum
  image) and `WalledDomain`.
- `ljwall.force`: `SpringForce`, `LJForce` and the wall potential `LJHWalls`.
- `ljwall.integrate`: the Euler–Maruyama integrator `BrownianDynamicsEM`.
- `ljwall.celllist`: `CellList`, which bins nodes into cells. It visits
  neighbouring pairs with `for_each_pair`, `for_each_pair_fast` or
  `for_each_pair_slow`.
- `ljwall.ini`: initial configurations (`ini`, `ini_rand`,
  `ini_rand_wo_overlap`, `ini_rand_w_hwalls`, `ini_from_snap`).
- `ljwall.gsd`: a pure-Python GSD reader and writer.
  - Functions: `create`, `create_and_open`, `open_file`.
  - The `GsdFile` methods: `write_chunk`, `end_frame`, `find_chunk`,
    `read_chunk`, `find_matching_chunk_names`, `truncate`, `close`.
  - Failures raise subclasses of `GsdError`.
- `ljwall.exporter`: `LogExporter`, `OrderParaExporter` and `SnapGSD`.
- `ljwall.comn`: `make_dir`, `split` and `str_to_num`.

Reading a trajectory back:

```python
import struct
from ljwall import gsd

with gsd.open_file("data/run.gsd", gsd.OpenFlag.READONLY) as f:
    for frame in range(f.nframes()):
        chunk = f.find_chunk(frame, "particles/position")
        values = struct.unpack(f"<{chunk.n * chunk.m}f", f.read_chunk(chunk))
```

## Limitations

- A run uses a single process. The box is not split across workers.
- The GSD module reads version 1 files, but it has no way to upgrade them.
  Files opened for writing are marked as version 2.1 only when they already
  have major version 2.