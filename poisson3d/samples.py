"""Synthetic oriented point clouds for demos and tests."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from ._common import _F


def sphere_points(
    n: int = 1000,
    radius: float = 1.0,
    center: Sequence[float] = (0.0, 0.0, 0.0),
) -> Tuple[_F, _F]:
    """Sample *n* near-uniform points on a sphere (Fibonacci lattice).

    Returns ``(points, normals)`` with outward unit normals.
    """
    if n < 1:
        raise ValueError(f"n must be positive, got {n}")
    golden = np.pi * (3.0 - np.sqrt(5.0))
    i = np.arange(n)
    z = 1.0 - 2.0 * (i + 0.5) / n
    r = np.sqrt(1.0 - z * z)
    theta = golden * i
    normals = np.stack([r * np.cos(theta), r * np.sin(theta), z], axis=-1)
    return np.asarray(center, dtype=np.float64) + radius * normals, normals


def square_patch_points(
    n_side: int = 30,
    side: float = 1.0,
    height: float = 0.0,
) -> Tuple[_F, _F]:
    """Regular ``n_side x n_side`` samples of the square ``|x|, |y| <= side/2``.

    The patch lies in the plane ``z = height`` with normals ``+z``.
    """
    if n_side < 2:
        raise ValueError(f"n_side must be at least 2, got {n_side}")
    lin = np.linspace(-0.5 * side, 0.5 * side, n_side)
    Y, X = np.meshgrid(lin, lin, indexing="ij")
    points = np.stack([X.ravel(), Y.ravel(), np.full(X.size, float(height))], axis=-1)
    normals = np.tile([0.0, 0.0, 1.0], (len(points), 1))
    return points, normals
