"""Shift the potential so the surface is its zero level set."""

from __future__ import annotations

from typing import Tuple

import numpy as np
import numpy.typing as npt

from ._common import _F, as_points
from .grid import Grid
from .interpolate import interpolation_matrix


def calibrate_isovalue(grid: Grid, points: npt.ArrayLike, g: npt.ArrayLike) -> Tuple[_F, float]:
    """Return ``(g - sigma, sigma)`` where *sigma* is the mean of *g* at *points*.

    *g* is resampled at the input points with the primary-grid trilinear
    operator. The input array is not modified.
    """
    P = as_points(points)
    g = np.asarray(g, dtype=np.float64)
    if g.shape != (grid.size,):
        raise ValueError(f"potential must have shape ({grid.size},), got {g.shape}")
    W = interpolation_matrix(*grid.shape, grid.h, grid.corner, P)
    sigma = float(np.mean(W @ g))
    return g - sigma, sigma
