"""Splat point normals onto the three staggered grids.

Each normal component ``N[:, a]`` approximates the derivative of the
potential along axis ``a``; it is distributed onto the grid staggered along
``a`` with the transpose of that grid's trilinear sampling operator.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from ._common import _F, as_oriented_cloud, staggered_size
from .grid import Grid
from .interpolate import interpolation_matrix


def splat(grid: Grid, points: _F, values: _F, axis: int) -> _F:
    """Distribute per-point *values* onto ``grid.staggered(axis)``."""
    sg = grid.staggered(axis)
    W = interpolation_matrix(*sg.shape, sg.h, sg.corner, points)
    return W.T @ values


def distribute_normals(grid: Grid, points: npt.ArrayLike, normals: npt.ArrayLike) -> _F:
    """Return the target derivative vector ``v = [v_x, v_y, v_z]``.

    ``len(v)`` equals the total node count of the three staggered grids,
    i.e. the row count of :func:`poisson3d.gradient.gradient_matrix`.
    """
    P, N = as_oriented_cloud(points, normals)
    v = np.concatenate([splat(grid, P, N[:, axis], axis) for axis in range(3)])
    assert v.size == staggered_size(grid.shape)
    return v
