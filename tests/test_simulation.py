import struct

import pytest

from ljwall import gsd
from ljwall.simulation import main, run_lj, run_lj_hwall


def _steps_and_counts(path):
    with gsd.open_file(path) as f:
        steps = []
        counts = []
        for i in range(f.nframes()):
            steps.append(struct.unpack(
                "<Q", f.read_chunk(f.find_chunk(i, "configuration/step")))[0])
            counts.append(struct.unpack(
                "<I", f.read_chunk(f.find_chunk(i, "particles/N")))[0])
    return steps, counts


def test_run_lj_rand_then_resume(tmp_path):
    path = run_lj(5.0, 5.0, 0.1, 0.5, 0.0025, 4, 2, 7, "rand", tmp_path)
    assert path.exists()
    steps, counts = _steps_and_counts(path)
    assert steps == [2, 4]
    assert counts == [int(0.1 * 5.0 * 5.0)] * 2
    assert (tmp_path / "log" / f"{path.stem}_t0.dat").exists()

    again = run_lj(5.0, 5.0, 0.1, 0.5, 0.0025, 4, 2, 7, "resume", tmp_path)
    assert again == path
    steps, counts = _steps_and_counts(path)
    assert steps == [2, 4, 6, 8]
    assert (tmp_path / "log" / f"{path.stem}_t4.dat").exists()


def test_run_lj_hwall_keeps_particles_between_walls(tmp_path):
    path = run_lj_hwall(6.0, 6.0, 0.1, 0.5, 1.0, 0.0025, 3, 1, 11, "rand", tmp_path)
    with gsd.open_file(path) as f:
        assert f.nframes() == 3
        chunk = f.find_chunk(2, "particles/position")
        values = struct.unpack(f"<{3 * chunk.n}f", f.read_chunk(chunk))
    ys = values[1::3]
    assert all(-3.0 <= y < 3.0 for y in ys)


def test_bad_ini_mode_raises(tmp_path):
    with pytest.raises(ValueError):
        run_lj(5.0, 5.0, 0.1, 0.5, 0.0025, 2, 1, 3, "other", tmp_path)


def test_main_writes_named_trajectory(tmp_path):
    code = main(["--lx", "6", "--ly", "6", "--rho0", "0.1", "--n-step", "4",
                 "--snap-log-sep", "2", "--ini-mode", "rand",
                 "--folder", str(tmp_path)])
    assert code == 0
    files = sorted(p.name for p in tmp_path.glob("*.gsd"))
    assert files == ["L6_6_r0.1000_e0.5000_1.0000_h0.0025_S1234.gsd"]
    steps, _ = _steps_and_counts(tmp_path / files[0])
    assert steps == [2, 4]
    assert (tmp_path / "log").is_dir()