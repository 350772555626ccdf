"""Configuration for :func:`poisson3d.poisson_surface_reconstruction`."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional

#: Krylov methods accepted by :func:`poisson3d.solver.solve_potential`.
SOLVERS = ("cg", "bicgstab", "minres")


@dataclass(frozen=True)
class ReconstructionConfig:
    """Tunable parameters of one reconstruction call.

    Parameters
    ----------
    pad:
        Empty cells added beyond the bounding box on every side.
    cells:
        Cells spanning the largest bounding-box side before padding.
    solver:
        One of :data:`SOLVERS`.
    rtol:
        Relative residual tolerance of the iterative solve.
    maxiter:
        Iteration cap; ``None`` uses scipy's default (``10 * n``).
    strict:
        Raise :class:`~poisson3d.errors.SolverConvergenceError` instead of
        warning when the solve does not converge.
    """

    pad: int = 8
    cells: int = 30
    solver: str = "cg"
    rtol: float = 1e-8
    maxiter: Optional[int] = None
    strict: bool = False

    def __post_init__(self) -> None:
        if self.pad < 0:
            raise ValueError(f"pad must be >= 0, got {self.pad}")
        if self.cells < 1:
            raise ValueError(f"cells must be >= 1, got {self.cells}")
        if self.solver not in SOLVERS:
            raise ValueError(f"solver must be one of {SOLVERS}, got {self.solver!r}")
        if not self.rtol > 0.0:
            raise ValueError(f"rtol must be positive, got {self.rtol}")
        if self.maxiter is not None and self.maxiter < 1:
            raise ValueError(f"maxiter must be positive or None, got {self.maxiter}")

    def replace(self, **changes) -> "ReconstructionConfig":
        """Return a copy with *changes* applied (validated again)."""
        return dataclasses.replace(self, **changes)
