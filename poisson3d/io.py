"""Plain-text point cloud input and mesh / field output.

Supported formats
-----------------
``.pwn``
    First line is the point count ``n``; then ``n`` lines ``x y z``; then
    ``n`` lines ``nx ny nz``.
``.xyzn`` / ``.xyz`` / ``.txt``
    One ``x y z nx ny nz`` line per point.
``.obj`` (output only)
    ``v`` and ``f`` records, faces one-based.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Tuple, Union

import numpy as np
import numpy.typing as npt

from ._common import _F, as_oriented_cloud

_PathLike = Union[str, Path]


def _numeric_rows(text: str, path: Path) -> List[List[float]]:
    rows: List[List[float]] = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            rows.append([float(tok) for tok in line.split()])
        except ValueError:
            raise ValueError(f"{path}:{lineno}: non-numeric entry in {line!r}") from None
    return rows


def load_pwn(path: _PathLike) -> Tuple[_F, _F]:
    """Read a ``.pwn`` file and return ``(points, normals)``."""
    path = Path(path)
    rows = _numeric_rows(path.read_text(), path)
    if not rows or len(rows[0]) != 1:
        raise ValueError(f"{path}: first line must hold the point count")
    n = int(rows[0][0])
    body = rows[1:]
    if len(body) != 2 * n or any(len(r) != 3 for r in body):
        raise ValueError(f"{path}: expected {2 * n} rows of 3 values after the count")
    data = np.array(body, dtype=np.float64)
    return as_oriented_cloud(data[:n], data[n:])


def load_xyzn(path: _PathLike) -> Tuple[_F, _F]:
    """Read ``x y z nx ny nz`` rows and return ``(points, normals)``."""
    path = Path(path)
    rows = _numeric_rows(path.read_text(), path)
    if not rows or any(len(r) != 6 for r in rows):
        raise ValueError(f"{path}: every row must hold 6 values (x y z nx ny nz)")
    data = np.array(rows, dtype=np.float64)
    return as_oriented_cloud(data[:, :3], data[:, 3:])


def load_point_cloud(path: _PathLike) -> Tuple[_F, _F]:
    """Dispatch on the file suffix to :func:`load_pwn` or :func:`load_xyzn`."""
    suffix = Path(path).suffix.lower()
    if suffix == ".pwn":
        return load_pwn(path)
    if suffix in (".xyzn", ".xyz", ".txt"):
        return load_xyzn(path)
    raise ValueError(f"unsupported point cloud format {suffix!r}")


def save_obj(path: _PathLike, vertices: npt.ArrayLike, faces: npt.ArrayLike) -> None:
    """Write a triangle mesh as Wavefront OBJ (creates parent directories)."""
    V = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
    F = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    out_dir = os.path.dirname(os.fspath(path))
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    lines = [f"v {x:.9g} {y:.9g} {z:.9g}" for x, y, z in V]
    lines += [f"f {a + 1} {b + 1} {c + 1}" for a, b, c in F]
    Path(path).write_text("\n".join(lines) + "\n")


def save_npy(path: _PathLike, field: npt.ArrayLike) -> None:
    """Save *field* array to *path* (creates parent directories if needed)."""
    out_dir = os.path.dirname(os.fspath(path))
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    np.save(path, np.asarray(field))
