"""Trilinear sampling operators from scattered points to a regular lattice.

``W = interpolation_matrix(nx, ny, nz, h, corner, points)`` is an
``(n_points, nx*ny*nz)`` sparse matrix: ``W @ f`` samples a lattice field
``f`` at the points, and ``W.T @ q`` splats per-point values ``q`` back onto
the lattice with the same weights.
"""

from __future__ import annotations

from itertools import product

import numpy as np
import numpy.typing as npt
import scipy.sparse as sp

from ._common import as_points

# Points this many cells outside the lattice are still accepted (round-off).
_OUTSIDE_TOL = 1e-9


def interpolation_matrix(
    nx: int,
    ny: int,
    nz: int,
    h: float,
    corner: npt.ArrayLike,
    points: npt.ArrayLike,
) -> sp.csr_matrix:
    """Build the trilinear interpolation operator for a lattice.

    Parameters
    ----------
    nx, ny, nz:
        Number of lattice nodes along x, y, z (each at least 2).
    h:
        Lattice spacing.
    corner:
        ``(3,)`` position of node ``(0, 0, 0)``.
    points:
        ``(n, 3)`` sample positions, all inside the lattice.

    Returns
    -------
    scipy.sparse.csr_matrix
        Shape ``(n, nx*ny*nz)``. Row ``p`` holds the (at most 8) trilinear
        weights of point ``p``; weights sum to 1. Columns use the linear
        index ``i + nx*(j + k*ny)``. Exact zero weights are dropped, so a
        point sitting on a node has a single unit entry.

    Raises
    ------
    ValueError
        If a lattice dimension is below 2, *h* is not positive, or a point
        lies outside the lattice.
    """
    P = as_points(points)
    dims = np.array([nx, ny, nz], dtype=np.int64)
    if np.any(dims < 2):
        raise ValueError(f"lattice needs at least 2 nodes per axis, got {tuple(dims)}")
    if not h > 0.0:
        raise ValueError(f"spacing h must be positive, got {h}")
    corner = np.asarray(corner, dtype=np.float64).reshape(3)

    t = (P - corner) / h
    outside = np.any((t < -_OUTSIDE_TOL) | (t > dims - 1 + _OUTSIDE_TOL), axis=1)
    if np.any(outside):
        first = int(np.flatnonzero(outside)[0])
        raise ValueError(
            f"{int(outside.sum())} point(s) lie outside the lattice, "
            f"first is #{first} at {P[first].tolist()}"
        )

    # Base cell, clamped so points on the upper faces use the last cell.
    base = np.clip(np.floor(t), 0, dims - 2).astype(np.int64)
    frac = np.clip(t - base, 0.0, 1.0)

    n = len(P)
    rows = np.tile(np.arange(n), 8)
    cols = np.empty(8 * n, dtype=np.int64)
    vals = np.empty(8 * n, dtype=np.float64)
    for c, (dk, dj, di) in enumerate(product((0, 1), repeat=3)):
        wx = frac[:, 0] if di else 1.0 - frac[:, 0]
        wy = frac[:, 1] if dj else 1.0 - frac[:, 1]
        wz = frac[:, 2] if dk else 1.0 - frac[:, 2]
        i = base[:, 0] + di
        j = base[:, 1] + dj
        k = base[:, 2] + dk
        cols[c * n:(c + 1) * n] = i + nx * (j + k * ny)
        vals[c * n:(c + 1) * n] = wx * wy * wz

    W = sp.csr_matrix((vals, (rows, cols)), shape=(n, int(dims.prod())))
    W.eliminate_zeros()
    return W
