"""Regular grid construction for Poisson surface reconstruction.

A :class:`Grid` is an axis-aligned node lattice ``corner + h * (i, j, k)``.
Every grid-indexed vector in this package uses the linear index
``i + nx * (j + k * ny)``: x varies fastest, then y, then z.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from ._common import _F, _I, _Shape3D, as_points, lattice_size, staggered_shape
from .errors import DegeneratePointCloudError

logger = logging.getLogger(__name__)

# Extents below this fraction of the coordinate magnitude count as zero.
_DEGENERATE_RTOL = 1e-12
# Absorbs round-off in (extent + 2*pad*h) / h before truncation.
_ROUNDOFF = 1e-9


@dataclass(frozen=True, eq=False)
class Grid:
    """Axis-aligned regular lattice.

    Parameters
    ----------
    corner:
        ``(3,)`` position of node ``(0, 0, 0)``.
    h:
        Spacing between neighbouring nodes (same along every axis).
    shape:
        ``(nx, ny, nz)`` number of nodes along each axis.
    """

    corner: _F
    h: float
    shape: _Shape3D

    @property
    def size(self) -> int:
        """Total number of nodes ``nx * ny * nz``."""
        return lattice_size(self.shape)

    @property
    def upper(self) -> _F:
        """Position of the last node ``(nx-1, ny-1, nz-1)``."""
        return self.corner + self.h * (np.asarray(self.shape) - 1)

    def index(self, i: npt.ArrayLike, j: npt.ArrayLike, k: npt.ArrayLike) -> _I:
        """Linear index of node(s) ``(i, j, k)``."""
        nx, ny, _ = self.shape
        return np.asarray(i) + nx * (np.asarray(j) + np.asarray(k) * ny)

    def subscripts(self, index: npt.ArrayLike) -> _I:
        """Inverse of :meth:`index`; returns ``(..., 3)`` integer subscripts."""
        nx, ny, _ = self.shape
        index = np.asarray(index)
        i = index % nx
        j = (index // nx) % ny
        k = index // (nx * ny)
        return np.stack([i, j, k], axis=-1)

    def node_positions(self) -> _F:
        """Return the ``(nx*ny*nz, 3)`` node positions in linear-index order."""
        nx, ny, nz = self.shape
        K, J, I = np.meshgrid(np.arange(nz), np.arange(ny), np.arange(nx), indexing="ij")
        ijk = np.stack([I.ravel(), J.ravel(), K.ravel()], axis=-1)
        return self.corner + self.h * ijk

    def staggered(self, axis: int) -> "Grid":
        """Face-centred grid offset by ``h/2`` along *axis*, one node shorter there."""
        shape = staggered_shape(self.shape, axis)
        offset = np.zeros(3)
        offset[axis] = 0.5 * self.h
        return Grid(self.corner + offset, self.h, shape)

    def __repr__(self) -> str:
        c = ", ".join(f"{v:.6g}" for v in self.corner)
        return f"Grid(corner=({c}), h={self.h:.6g}, shape={self.shape})"


def build_grid(points: npt.ArrayLike, pad: int = 8, cells: int = 30) -> Grid:
    """Fit a padded regular grid around *points*.

    The largest bounding-box side is divided into *cells* cells, then *pad*
    cells are added on every side. Each axis gets at least 3 nodes.

    Parameters
    ----------
    points:
        ``(n, 3)`` point positions.
    pad:
        Number of empty cells beyond the bounding box on every side.
    cells:
        Number of cells spanning the largest bounding-box side.

    Returns
    -------
    Grid

    Raises
    ------
    DegeneratePointCloudError
        If the bounding box has (near) zero extent along every axis, which
        would make the spacing zero or non-finite.
    """
    P = as_points(points)
    lo = P.min(axis=0)
    hi = P.max(axis=0)
    extent = hi - lo
    max_extent = float(extent.max())

    scale = max(1.0, float(np.abs(P).max()))
    if not np.isfinite(max_extent) or max_extent <= _DEGENERATE_RTOL * scale:
        raise DegeneratePointCloudError(
            f"degenerate point cloud: bounding-box extent {max_extent:g} "
            f"cannot define a grid spacing"
        )

    h = max_extent / float(cells + 2 * pad)
    corner = lo - pad * h

    counts = (extent + 2.0 * pad * h) / h
    ncells = np.ceil(counts - _ROUNDOFF).astype(np.int64)
    nx, ny, nz = (int(n) for n in np.maximum(ncells + 1, 3))

    grid = Grid(corner, h, (nx, ny, nz))
    logger.debug("built %r for %d points", grid, len(P))
    return grid
