"""Tests for point cloud loading and mesh / field output."""

import os
import tempfile

import numpy as np
import numpy.testing as npt
import pytest

from poisson3d.io import load_point_cloud, load_pwn, load_xyzn, save_npy, save_obj
from poisson3d.samples import sphere_points


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _write_pwn(path, P, N):
    lines = [str(len(P))]
    lines += [" ".join(f"{c:.17g}" for c in row) for row in P]
    lines += [" ".join(f"{c:.17g}" for c in row) for row in N]
    path.write_text("\n".join(lines) + "\n")


def _write_xyzn(path, P, N):
    rows = np.hstack([P, N])
    path.write_text("\n".join(" ".join(f"{c:.17g}" for c in row) for row in rows))


# ===========================================================================
# Loading
# ===========================================================================

class TestLoadPwn:
    def test_values(self, tmp_path):
        P, N = sphere_points(20)
        path = tmp_path / "sphere.pwn"
        _write_pwn(path, P, N)
        P2, N2 = load_pwn(path)
        npt.assert_allclose(P2, P)
        npt.assert_allclose(N2, N)

    def test_wrong_count(self, tmp_path):
        path = tmp_path / "bad.pwn"
        path.write_text("3\n0 0 0\n1 1 1\n0 0 1\n0 0 1\n")
        with pytest.raises(ValueError, match="expected 6 rows"):
            load_pwn(path)

    def test_missing_header(self, tmp_path):
        path = tmp_path / "bad.pwn"
        path.write_text("0 0 0\n0 0 1\n")
        with pytest.raises(ValueError, match="point count"):
            load_pwn(path)

    def test_non_numeric(self, tmp_path):
        path = tmp_path / "bad.pwn"
        path.write_text("1\n0 zero 0\n0 0 1\n")
        with pytest.raises(ValueError, match=":2:"):
            load_pwn(path)


class TestLoadXyzn:
    def test_values(self, tmp_path):
        P, N = sphere_points(15)
        path = tmp_path / "sphere.xyzn"
        _write_xyzn(path, P, N)
        P2, N2 = load_xyzn(path)
        npt.assert_allclose(P2, P)
        npt.assert_allclose(N2, N)

    def test_comments_and_blank_lines(self, tmp_path):
        path = tmp_path / "cloud.xyz"
        path.write_text("# header\n\n0 0 0 0 0 1\n1 0 0 1 0 0\n")
        P, N = load_xyzn(path)
        assert P.shape == (2, 3)
        npt.assert_allclose(N[1], [1.0, 0.0, 0.0])

    def test_wrong_width(self, tmp_path):
        path = tmp_path / "cloud.xyzn"
        path.write_text("0 0 0 0 0\n")
        with pytest.raises(ValueError, match="6 values"):
            load_xyzn(path)


class TestLoadPointCloud:
    def test_dispatch_pwn(self, tmp_path):
        P, N = sphere_points(5)
        path = tmp_path / "a.PWN"
        _write_pwn(path, P, N)
        npt.assert_allclose(load_point_cloud(path)[0], P)

    def test_dispatch_txt(self, tmp_path):
        P, N = sphere_points(5)
        path = tmp_path / "a.txt"
        _write_xyzn(path, P, N)
        npt.assert_allclose(load_point_cloud(path)[1], N)

    def test_unknown_suffix(self, tmp_path):
        with pytest.raises(ValueError, match="unsupported"):
            load_point_cloud(tmp_path / "a.ply")


# ===========================================================================
# Saving
# ===========================================================================

class TestSaveObj:
    def test_contents(self, tmp_path):
        V = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.5, 0.0]])
        F = np.array([[0, 1, 2]])
        path = tmp_path / "tri.obj"
        save_obj(path, V, F)
        lines = path.read_text().splitlines()
        assert lines == ["v 0 0 0", "v 1 0 0", "v 0 1.5 0", "f 1 2 3"]

    def test_creates_nested_dirs(self, tmp_path):
        path = tmp_path / "a" / "b" / "mesh.obj"
        save_obj(path, np.zeros((3, 3)), np.array([[0, 1, 2]]))
        assert path.is_file()


class TestSaveNpy:
    def test_round_trip(self):
        phi = np.random.rand(4, 4, 4)
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "potential.npy")
            save_npy(path, phi)
            loaded = np.load(path)
        npt.assert_array_equal(phi, loaded)

    def test_creates_nested_dirs(self):
        phi = np.zeros((4, 4, 4))
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "a", "b", "potential.npy")
            save_npy(path, phi)
            assert os.path.isfile(path)
