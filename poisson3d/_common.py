"""Shared helpers used across the poisson3d modules.

This module provides:

* **Type aliases**: :data:`_F`, :data:`_I`, :data:`_Shape3D`
* **Input checks**: :func:`as_points`, :func:`as_oriented_cloud`
* **Lattice helpers**: :func:`lattice_size`, :func:`staggered_shape`,
  :func:`staggered_size`

Not meant to be imported directly by end users.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
import numpy.typing as npt

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------
_F = npt.NDArray[np.floating]
_I = npt.NDArray[np.integer]
_Shape3D = Tuple[int, int, int]

__all__ = [
    "_F", "_I", "_Shape3D",
    "as_points", "as_oriented_cloud",
    "lattice_size", "staggered_shape", "staggered_size",
]


# ===========================================================================
# Input checks
# ===========================================================================

def as_points(arr: npt.ArrayLike, name: str = "points") -> _F:
    """Return *arr* as a finite ``(n, 3)`` float64 array with ``n >= 1``."""
    a = np.asarray(arr, dtype=np.float64)
    if a.ndim != 2 or a.shape[1] != 3:
        raise ValueError(f"{name} must have shape (n, 3), got {a.shape}")
    if a.shape[0] == 0:
        raise ValueError(f"{name} must contain at least one row")
    if not np.all(np.isfinite(a)):
        raise ValueError(f"{name} contains non-finite values")
    return a


def as_oriented_cloud(points: npt.ArrayLike, normals: npt.ArrayLike) -> Tuple[_F, _F]:
    """Validate a point cloud and its normals; rows must correspond."""
    P = as_points(points, "points")
    N = as_points(normals, "normals")
    if P.shape != N.shape:
        raise ValueError(
            f"points and normals must have matching shapes, got {P.shape} and {N.shape}"
        )
    return P, N


# ===========================================================================
# Lattice helpers
# ===========================================================================

def lattice_size(shape: _Shape3D) -> int:
    """Number of nodes in an ``(nx, ny, nz)`` lattice."""
    nx, ny, nz = shape
    return int(nx) * int(ny) * int(nz)


def staggered_shape(shape: _Shape3D, axis: int) -> _Shape3D:
    """Shape of the lattice offset by half a cell along *axis*."""
    if axis not in (0, 1, 2):
        raise ValueError(f"axis must be 0, 1 or 2, got {axis!r}")
    dims = list(shape)
    dims[axis] -= 1
    return (dims[0], dims[1], dims[2])


def staggered_size(shape: _Shape3D) -> int:
    """Total node count of the x-, y- and z-staggered lattices together."""
    return sum(lattice_size(staggered_shape(shape, a)) for a in range(3))
