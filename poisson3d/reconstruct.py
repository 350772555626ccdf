"""End-to-end Poisson surface reconstruction."""

from __future__ import annotations

import logging
from typing import NamedTuple, Optional, Tuple

import numpy.typing as npt

from ._common import _F, _I, as_oriented_cloud
from .calibrate import calibrate_isovalue
from .config import ReconstructionConfig
from .distribute import distribute_normals
from .gradient import gradient_matrix
from .grid import Grid, build_grid
from .mesh import extract_mesh
from .solver import PotentialSolution, solve_potential

logger = logging.getLogger(__name__)


class ReconstructionResult(NamedTuple):
    """Output of :func:`poisson_surface_reconstruction`.

    Attributes
    ----------
    vertices:
        ``(m, 3)`` mesh vertex positions.
    faces:
        ``(t, 3)`` zero-based triangle indices into *vertices*.
    grid:
        The grid the potential was solved on.
    potential:
        ``(nx*ny*nz,)`` calibrated potential (surface at zero).
    isovalue:
        Mean raw potential at the input points, subtracted during calibration.
    solution:
        Solver diagnostics; the raw (uncalibrated) potential is
        ``solution.values``.
    """

    vertices: _F
    faces: _I
    grid: Grid
    potential: _F
    isovalue: float
    solution: PotentialSolution

    @property
    def converged(self) -> bool:
        return self.solution.converged


def poisson_surface_reconstruction(
    points: npt.ArrayLike,
    normals: npt.ArrayLike,
    config: Optional[ReconstructionConfig] = None,
) -> ReconstructionResult:
    """Reconstruct a triangle mesh from an oriented point cloud.

    Parameters
    ----------
    points:
        ``(n, 3)`` sample positions.
    normals:
        ``(n, 3)`` outward unit normals, row-aligned with *points*.
    config:
        Grid and solver parameters; defaults to :class:`ReconstructionConfig`.

    Returns
    -------
    ReconstructionResult
        Check :attr:`ReconstructionResult.converged` before trusting the mesh;
        a non-converged solve also emits a
        :class:`~poisson3d.errors.SolverConvergenceWarning`.

    Raises
    ------
    ValueError
        Malformed input arrays.
    DegeneratePointCloudError
        All points (nearly) coincide.
    EmptyIsosurfaceError
        The calibrated potential has no zero crossing.
    SolverConvergenceError
        Only with ``config.strict``; the solve did not converge.

    Examples
    --------
    >>> from poisson3d import poisson_surface_reconstruction
    >>> from poisson3d.samples import sphere_points
    >>> P, N = sphere_points(800)
    >>> result = poisson_surface_reconstruction(P, N)
    >>> result.vertices.shape[1], result.faces.shape[1]
    (3, 3)
    """
    config = config or ReconstructionConfig()
    P, N = as_oriented_cloud(points, normals)

    grid = build_grid(P, pad=config.pad, cells=config.cells)
    nx, ny, nz = grid.shape

    v = distribute_normals(grid, P, N)
    G = gradient_matrix(nx, ny, nz, grid.h)
    solution = solve_potential(
        G, v,
        method=config.solver,
        rtol=config.rtol,
        maxiter=config.maxiter,
        strict=config.strict,
    )

    g, sigma = calibrate_isovalue(grid, P, solution.values)
    logger.debug("isovalue %.6g", sigma)

    V, F = extract_mesh(g, grid.node_positions(), nx, ny, nz)
    logger.debug("extracted %d vertices, %d faces", len(V), len(F))
    return ReconstructionResult(V, F, grid, g, sigma, solution)


def reconstruct_mesh(
    points: npt.ArrayLike,
    normals: npt.ArrayLike,
    config: Optional[ReconstructionConfig] = None,
) -> Tuple[_F, _I]:
    """Like :func:`poisson_surface_reconstruction` but return only ``(V, F)``."""
    result = poisson_surface_reconstruction(points, normals, config)
    return result.vertices, result.faces
