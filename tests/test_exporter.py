import math
import struct

import pytest

from ljwall import gsd
from ljwall.exporter import ExporterBase, LogExporter, OrderParaExporter, SnapGSD
from ljwall.gsd import GsdError
from ljwall.particle import Particle
from ljwall.vect import Vec2


class _Heading:
    def __init__(self, psi):
        self.psi = psi


def test_need_export_linear():
    ex = ExporterBase(100, 5, 0)
    assert [i for i in range(1, 21) if ex.need_export(i)] == [5, 10, 15, 20]


def test_log_scale_frames_first_and_length():
    ex = ExporterBase(1000, 1, 0)
    ex.set_log_scale_frames(0.1, 0.5)
    assert len(ex.frames) == int(20 / 0.5)
    assert ex.frames[0] == 100
    assert all(a <= b for a, b in zip(ex.frames, ex.frames[1:]))
    assert ex.cur_frame == 0


def test_log_scale_export_sequence_matches_frames():
    ex = ExporterBase(1000, 1, 0)
    ex.set_log_scale_frames(0.1, 0.5)
    exported = [i for i in range(1, 1001) if ex.need_export(i)]
    assert exported == [f for f in ex.frames if f <= 1000]


def test_log_scale_with_start_offset():
    ex = ExporterBase(1000, 1, 150)
    ex.set_log_scale_frames(0.1, 0.5)
    assert ex.cur_frame == 1
    assert ex.need_export(ex.frames[1] - 150) is True
    assert ex.cur_frame == 2


def test_log_scale_rejects_huge_separation():
    ex = ExporterBase(10, 1, 0)
    with pytest.raises(ValueError):
        ex.set_log_scale_frames(0.1, 50.0)


def test_log_exporter_writes_lines(tmp_path):
    path = tmp_path / "run.dat"
    with LogExporter(path, 0, 5, 2, 10) as log:
        for t in range(1, 6):
            log.record(t)
        assert log.step_count == 5
    lines = path.read_text().splitlines()
    assert lines[0].startswith("Started simulation at ")
    step_lines = [line for line in lines if "\t" in line]
    assert [line.split("\t")[0] for line in step_lines] == ["2", "4"]
    assert lines[-2].startswith("Finished simulation at ")
    assert lines[-1].startswith("speed=")
    assert lines[-1].endswith("particle time step per second per core")


def test_order_para_aligned(tmp_path):
    path = tmp_path / "op.dat"
    with OrderParaExporter(path, 0, 10, 3) as op:
        op.dump(1, [_Heading(0.0)] * 4)
        op.dump(3, [_Heading(0.0)] * 4)
    assert path.read_text() == "3\t1\t0\n"


def test_order_para_opposite_cancels(tmp_path):
    path = tmp_path / "op.dat"
    with OrderParaExporter(path, 0, 10, 1) as op:
        op.dump(1, [_Heading(0.0), _Heading(math.pi)])
    step, phi, _theta = path.read_text().split("\t")
    assert step == "1"
    assert float(phi) < 1e-8


def test_order_para_empty_raises(tmp_path):
    with OrderParaExporter(tmp_path / "op.dat", 0, 10, 1) as op:
        with pytest.raises(ValueError):
            op.dump(1, [])


def test_snap_round_trip(tmp_path):
    path = tmp_path / "snap.gsd"
    particles = [Particle(pos=Vec2(0.0, 0.0)), Particle(pos=Vec2(1.5, 2.25)),
                 Particle(pos=Vec2(7.75, 3.5))]
    with SnapGSD(path, 10, 2, 0, 0.1, -1, Vec2(8.0, 4.0), "rand") as snap:
        assert snap.start == 0
        snap.dump(1, particles)
        snap.dump(2, particles)
        back = snap.read_last_frame()
    assert [(p.pos.x, p.pos.y) for p in back] == [(p.pos.x, p.pos.y) for p in particles]


def test_get_data_from_par_centres_positions(tmp_path):
    with SnapGSD(tmp_path / "s.gsd", 10, 1, 0, 0.1, -1, Vec2(8.0, 4.0), "rand") as snap:
        data = snap.get_data_from_par([Particle(pos=Vec2(5.0, 1.0))])
    assert data == [1.0, -1.0, 0.0]


def test_snap_file_contents(tmp_path):
    path = tmp_path / "snap.gsd"
    with SnapGSD(path, 10, 3, 0, 0.1, -1, Vec2(8.0, 4.0), "rand") as snap:
        for t in range(1, 7):
            snap.dump(t, [Particle(pos=Vec2(1.0, 1.0))])
    with gsd.open_file(path) as f:
        assert f.nframes() == 2
        box = struct.unpack("<6f", f.read_chunk(f.find_chunk(0, "configuration/box")))
        assert box == (8.0, 4.0, 1.0, 0.0, 0.0, 0.0)
        steps = [struct.unpack("<Q", f.read_chunk(f.find_chunk(i, "configuration/step")))[0]
                 for i in range(2)]
        assert steps == [3, 6]
        assert f.header.schema == "hoomd"
        assert f.header.schema_version == gsd.make_version(1, 4)


def test_snap_resume_continues_steps(tmp_path):
    path = tmp_path / "snap.gsd"
    particles = [Particle(pos=Vec2(2.0, 3.0))]
    with SnapGSD(path, 10, 10, 0, 0.1, -1, Vec2(8.0, 4.0), "rand") as snap:
        snap.dump(10, particles)
    with SnapGSD(path, 10, 10, 0, 0.1, -1, Vec2(8.0, 4.0), "resume") as snap:
        assert snap.start == 10
        assert snap.get_time_step() == 20
        snap.dump(10, particles)
        assert snap.reset_start_time_step() == 20
    with gsd.open_file(path) as f:
        assert f.nframes() == 2


def test_snap_log_scale_dumps(tmp_path):
    path = tmp_path / "snap.gsd"
    with SnapGSD(path, 400, 1, 0, 0.1, 0.5, Vec2(8.0, 4.0), "rand") as snap:
        expected = [f for f in snap.frames if f <= 400]
        for t in range(1, 401):
            snap.dump(t, [Particle(pos=Vec2(1.0, 1.0))])
    with gsd.open_file(path) as f:
        steps = [struct.unpack("<Q", f.read_chunk(f.find_chunk(i, "configuration/step")))[0]
                 for i in range(f.nframes())]
    assert steps == expected


def test_read_last_frame_without_frames_raises(tmp_path):
    with SnapGSD(tmp_path / "e.gsd", 10, 1, 0, 0.1, -1, Vec2(8.0, 4.0), "rand") as snap:
        with pytest.raises(GsdError):
            snap.read_last_frame()