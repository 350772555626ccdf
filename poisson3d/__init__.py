"""
poisson3d — Poisson Surface Reconstruction on Regular Grids
============================================================

Reconstructs a closed triangle mesh from an oriented point cloud by solving
for a scalar potential whose gradient best matches the point normals, then
extracting the potential's zero level set.

Implemented features
--------------------
- Padded regular grid fitting: :func:`build_grid`, :class:`Grid`
- Trilinear sampling operators: :func:`interpolation_matrix`
- Staggered finite-difference gradient: :func:`gradient_matrix`
- Normal splatting onto staggered grids: :func:`distribute_normals`
- Normal-equations Krylov solve with diagnostics: :func:`solve_potential`
- Iso-value calibration: :func:`calibrate_isovalue`
- Marching-cubes extraction (scikit-image): :func:`extract_mesh`
- Full pipeline: :func:`poisson_surface_reconstruction`
- Point cloud / mesh I/O: :mod:`poisson3d.io`

Quick start
-----------
::

    from poisson3d import poisson_surface_reconstruction
    from poisson3d.samples import sphere_points

    P, N = sphere_points(1000, radius=1.0)
    result = poisson_surface_reconstruction(P, N)
    V, F = result.vertices, result.faces
    assert result.converged
"""

from .config import ReconstructionConfig
from .errors import (
    ReconstructionError,
    DegeneratePointCloudError,
    EmptyIsosurfaceError,
    SolverConvergenceError,
    SolverConvergenceWarning,
)
from .grid import Grid, build_grid
from .interpolate import interpolation_matrix
from .gradient import gradient_matrix, partial_derivative_matrix
from .distribute import distribute_normals
from .solver import PotentialSolution, solve_potential
from .calibrate import calibrate_isovalue
from .mesh import extract_mesh, signed_volume, boundary_edges, is_closed_manifold
from .reconstruct import ReconstructionResult, poisson_surface_reconstruction, reconstruct_mesh

__version__ = "0.1.0"

__all__ = [
    # Configuration and errors
    "ReconstructionConfig",
    "ReconstructionError",
    "DegeneratePointCloudError",
    "EmptyIsosurfaceError",
    "SolverConvergenceError",
    "SolverConvergenceWarning",

    # Grid
    "Grid",
    "build_grid",

    # Operators
    "interpolation_matrix",
    "gradient_matrix",
    "partial_derivative_matrix",

    # Pipeline stages
    "distribute_normals",
    "PotentialSolution",
    "solve_potential",
    "calibrate_isovalue",
    "extract_mesh",

    # Mesh utilities
    "signed_volume",
    "boundary_edges",
    "is_closed_manifold",

    # End to end
    "ReconstructionResult",
    "poisson_surface_reconstruction",
    "reconstruct_mesh",
]
