"""Output of simulation data: run logs, order parameters and GSD trajectory snapshots."""

from __future__ import annotations

import itertools
import math
import os
import struct
import time
from typing import Sequence, Union

from . import gsd
from .gsd import GsdError, GsdType, OpenFlag
from .particle import Particle
from .vect import Vec2

PathLike = Union[str, os.PathLike]


def _round_half_away(x: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def _now_text() -> str:
    return time.strftime("%c", time.localtime())


class ExporterBase:
    """Decides at which time steps data is written.

    Either every ``sep`` steps, or, after :meth:`set_log_scale_frames`, at
    steps spaced evenly on a logarithmic time axis.
    """

    def __init__(self, n_step: int, sep: int, start: int = 0) -> None:
        self.n_step = n_step
        self.sep = sep
        self.start = start
        self.frames: list[int] = []
        self.cur_frame = 0
        self.log_sep = -1.0

    def need_export(self, i_step: int) -> bool:
        """Whether step ``i_step`` (counted from ``start``) is to be written."""
        if self.log_sep < 0:
            return i_step % self.sep == 0
        if (self.cur_frame < len(self.frames)
                and i_step + self.start == self.frames[self.cur_frame]):
            self.cur_frame += 1
            return True
        return False

    def set_log_scale_frames(self, h: float, log_sep: float = 0.1) -> None:
        """Write at steps round(10**t / h) for t = 1, 1 + log_sep, 1 + 2 log_sep, ..."""
        frame_size = int(20 / log_sep)
        if frame_size < 1:
            raise ValueError(f"log_sep {log_sep:g} leaves no frames")
        self.log_sep = log_sep
        log10_t = itertools.accumulate(
            itertools.repeat(log_sep, frame_size - 1), initial=1.0)
        self.frames = [_round_half_away(10 ** t / h) for t in log10_t]

        cur_step = self.start + 1
        if cur_step <= self.frames[0]:
            self.cur_frame = 0
        else:
            for i, (lower, upper) in enumerate(zip(self.frames, self.frames[1:]), start=1):
                if lower < cur_step <= upper:
                    self.cur_frame = i
                    break


class LogExporter(ExporterBase):
    """Log of wall-clock progress: start and finish times, elapsed time every ``sep`` steps."""

    def __init__(self, outfile: PathLike, start: int, n_step: int, sep: int,
                 n_par: int) -> None:
        super().__init__(n_step, sep, start)
        self.n_par = n_par
        self.step_count = 0
        print(os.fspath(outfile))
        self._fout = open(outfile, "w", encoding="utf-8")
        self._t_start = time.monotonic()
        self._fout.write(f"Started simulation at {_now_text()}\n")

    def record(self, i_step: int) -> None:
        """Write the elapsed time as h:m:s if step ``i_step`` is due."""
        if self.need_export(i_step):
            dt = time.monotonic() - self._t_start
            hour = int(dt / 3600)
            minute = int((dt - hour * 3600) / 60)
            sec = int(dt - hour * 3600 - minute * 60)
            self._fout.write(f"{i_step}\t{hour}:{minute}:{sec}\n")
            self._fout.flush()
        self.step_count += 1

    def close(self) -> None:
        """Write the finish time and throughput, then close the log."""
        if self._fout.closed:
            return
        elapsed = time.monotonic() - self._t_start
        self._fout.write(f"Finished simulation at {_now_text()}\n")
        work = self.step_count * float(self.n_par)
        speed = work / elapsed if elapsed > 0 else math.inf
        self._fout.write(f"speed={speed:e} particle time step per second per core\n")
        self._fout.close()

    def __enter__(self) -> LogExporter:
        return self

    def __exit__(self, *args) -> None:
        self.close()


class OrderParaExporter(ExporterBase):
    """Writes the polar order parameter of particles carrying an angle ``psi``."""

    def __init__(self, outfile: PathLike, start: int, n_step: int, sep: int) -> None:
        super().__init__(n_step, sep, start)
        self._fout = open(outfile, "w", encoding="utf-8")

    def dump(self, i_step: int, particles: Sequence) -> None:
        """Write step, magnitude and angle of the mean heading if the step is due."""
        if not self.need_export(i_step):
            return
        if not particles:
            raise ValueError("no particles to average over")
        ux = sum(math.cos(p.psi) for p in particles) / len(particles)
        uy = sum(math.sin(p.psi) for p in particles) / len(particles)
        phi = math.sqrt(ux * ux + uy * uy)
        theta = math.atan2(uy, ux)
        self._fout.write(f"{i_step}\t{phi:.8g}\t{theta:.8g}\n")

    def close(self) -> None:
        self._fout.close()

    def __enter__(self) -> OrderParaExporter:
        return self

    def __exit__(self, *args) -> None:
        self.close()


class SnapGSD(ExporterBase):
    """Trajectory snapshots in a GSD file, in the HOOMD schema.

    Positions are stored relative to the box centre. With ``open_flag`` equal
    to ``"resume"`` an existing file is extended and :attr:`start` is set to
    the time step of its last frame; otherwise the file is created anew.
    """

    def __init__(self, filename: PathLike, n_step: int, sep: int, start: int,
                 h: float, log_sep: float, gl_l: Vec2, open_flag: str) -> None:
        super().__init__(n_step, sep, start)
        if open_flag != "resume":
            gsd.create(filename, "cpp", "hoomd", gsd.make_version(1, 4))
            self._handle = gsd.open_file(filename, OpenFlag.READWRITE)
            box = struct.pack("<6f", gl_l.x, gl_l.y, 1.0, 0.0, 0.0, 0.0)
            self._handle.write_chunk("configuration/box", GsdType.FLOAT, 6, 1, box)
        else:
            self._handle = gsd.open_file(filename, OpenFlag.READWRITE)
            print(f"open {os.fspath(filename)}")
        self.half_l = Vec2(gl_l.x / 2, gl_l.y / 2)
        self.reset_start_time_step()
        if log_sep > 0:
            self.set_log_scale_frames(h, log_sep)

    def _last_step(self) -> int | None:
        n_frame = self._handle.nframes()
        if n_frame == 0:
            return None
        chunk = self._handle.find_chunk(n_frame - 1, "configuration/step")
        if chunk is None:
            return None
        (step,) = struct.unpack("<Q", self._handle.read_chunk(chunk))
        return step

    def get_data_from_par(self, p_arr: Sequence) -> list[float]:
        """Flattened (x, y, theta) of every particle, positions relative to the centre."""
        data: list[float] = []
        for p in p_arr:
            data.extend((p.pos.x - self.half_l.x, p.pos.y - self.half_l.y, p.get_theta()))
        return data

    def get_time_step(self) -> int:
        """Time step of the next frame: that of the last one plus ``sep``."""
        last = self._last_step()
        return self.sep if last is None else last + self.sep

    def reset_start_time_step(self) -> int:
        """Set :attr:`start` to the time step of the last frame (0 if none) and return it."""
        if self._handle.nframes() == 0:
            self.start = 0
        else:
            last = self._last_step()
            if last is None:
                print("Warning, failed to read the time step of the last frame")
                self.start = 0
            else:
                self.start = last
        return self.start

    def dump(self, i_step: int, p_arr: Sequence) -> None:
        """Write a frame of ``p_arr`` if step ``i_step`` is due."""
        if not self.need_export(i_step):
            return
        n_par = len(p_arr)
        data = self.get_data_from_par(p_arr)
        step = self.start + i_step
        print(f"dump frame {self._handle.nframes()} at time step {step}")
        self._handle.write_chunk("configuration/step", GsdType.UINT64, 1, 1,
                                 struct.pack("<Q", step))
        self._handle.write_chunk("particles/N", GsdType.UINT32, 1, 1,
                                 struct.pack("<I", n_par))
        self._handle.write_chunk("particles/position", GsdType.FLOAT, n_par, 3,
                                 struct.pack(f"<{3 * n_par}f", *data) if n_par else None)
        self._handle.end_frame()

    def read(self, i_frame: int) -> list[Particle]:
        """Particles of frame ``i_frame``, wrapped back into the box."""
        n_chunk = self._handle.find_chunk(i_frame, "particles/N")
        if n_chunk is None:
            raise GsdError(f"frame {i_frame} has no particles/N chunk")
        (n_par,) = struct.unpack("<I", self._handle.read_chunk(n_chunk))
        print(f"frame {i_frame}: find {n_par} particles")
        if n_par == 0:
            return []
        pos_chunk = self._handle.find_chunk(i_frame, "particles/position")
        if pos_chunk is None:
            raise GsdError(f"frame {i_frame} has no particles/position chunk")
        values = struct.unpack(f"<{3 * n_par}f", self._handle.read_chunk(pos_chunk))

        lx = self.half_l.x * 2
        ly = self.half_l.y * 2
        particles = []
        for j in range(n_par):
            x = values[3 * j] + self.half_l.x
            y = values[3 * j + 1] + self.half_l.y
            if x < 0:
                x += lx
            elif x >= lx:
                x -= lx
            if y < 0:
                y += ly
            elif y >= ly:
                y -= ly
            particles.append(Particle(pos=Vec2(x, y)))
        return particles

    def read_last_frame(self) -> list[Particle]:
        """Particles of the last frame in the file."""
        nframes = self._handle.nframes()
        if nframes < 1:
            raise GsdError(f"Error, nframes={nframes}")
        return self.read(nframes - 1)

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> SnapGSD:
        return self

    def __exit__(self, *args) -> None:
        self.close()