"""Exceptions and warnings raised by the reconstruction pipeline."""

from __future__ import annotations


class ReconstructionError(Exception):
    """Base class for fatal reconstruction failures."""


class DegeneratePointCloudError(ReconstructionError, ValueError):
    """The point cloud has (near) zero bounding-box extent."""


class EmptyIsosurfaceError(ReconstructionError, ValueError):
    """The potential never crosses the zero level, so there is no surface."""


class SolverConvergenceError(ReconstructionError, RuntimeError):
    """The linear solve stopped before reaching its tolerance (strict mode)."""


class SolverConvergenceWarning(RuntimeWarning):
    """The linear solve stopped before reaching its tolerance.

    The returned potential is an approximation; check
    :attr:`PotentialSolution.residual` before trusting the mesh.
    """
