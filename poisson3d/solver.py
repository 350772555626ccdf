"""Least-squares solve for the node-centred potential.

Finds ``g`` minimising ``||G g - v||`` through the normal equations
``(G^T G) g = G^T v``. ``G^T G`` is a discrete Laplacian: symmetric, positive
semi-definite, with the constant vector in its null space. The right-hand
side lies in ``range(G^T)``, so a Krylov method started from ``g = 0`` stays
in ``range(G^T G)`` and needs no pinned node.
"""

from __future__ import annotations

import logging
import warnings
from typing import NamedTuple, Optional, Tuple

import numpy as np
import numpy.typing as npt
import scipy.sparse as sp
import scipy.sparse.linalg as spla

from ._common import _F
from .config import SOLVERS
from .errors import SolverConvergenceError, SolverConvergenceWarning

logger = logging.getLogger(__name__)


class PotentialSolution(NamedTuple):
    """Result of :func:`solve_potential`.

    Attributes
    ----------
    values:
        ``(nx*ny*nz,)`` potential at the primary grid nodes.
    converged:
        ``True`` when the solver reached *rtol* within its iteration cap.
    iterations:
        Number of solver iterations performed.
    residual:
        Relative residual ``||A g - b|| / ||b||`` of the normal equations.
    info:
        Raw scipy status code (0 success, > 0 iteration cap, < 0 breakdown).
    """

    values: _F
    converged: bool
    iterations: int
    residual: float
    info: int


def normal_equations(G: sp.spmatrix, v: npt.ArrayLike) -> Tuple[sp.csr_matrix, _F]:
    """Return ``(G^T G, G^T v)`` with the matrix in CSR format."""
    v = np.asarray(v, dtype=np.float64).ravel()
    assert G.shape[0] == v.size, f"G has {G.shape[0]} rows but v has {v.size} entries"
    Gt = G.T.tocsr()
    return (Gt @ G).tocsr(), Gt @ v


def solve_potential(
    G: sp.spmatrix,
    v: npt.ArrayLike,
    method: str = "cg",
    rtol: float = 1e-8,
    maxiter: Optional[int] = None,
    strict: bool = False,
) -> PotentialSolution:
    """Solve ``(G^T G) g = G^T v`` iteratively.

    Parameters
    ----------
    G:
        Sparse gradient operator, shape ``(staggered nodes, primary nodes)``.
    v:
        Target derivatives on the staggered grids, ``len(v) == G.shape[0]``.
    method:
        ``"cg"``, ``"bicgstab"`` or ``"minres"``.
    rtol:
        Relative residual tolerance.
    maxiter:
        Iteration cap (``None`` for scipy's default).
    strict:
        Raise :class:`SolverConvergenceError` instead of warning when the
        solve does not converge.

    Returns
    -------
    PotentialSolution
        A non-converged solution is still returned (with a
        :class:`SolverConvergenceWarning`) unless *strict* is set.
    """
    if method not in SOLVERS:
        raise ValueError(f"method must be one of {SOLVERS}, got {method!r}")

    A, b = normal_equations(G, v)
    x0 = np.zeros(A.shape[0])
    b_norm = float(np.linalg.norm(b))
    if b_norm == 0.0:
        logger.debug("zero right-hand side, potential is identically zero")
        return PotentialSolution(x0, True, 0, 0.0, 0)

    iterations = 0

    def _count(_xk):
        nonlocal iterations
        iterations += 1

    if method == "minres":
        g, info = spla.minres(A, b, x0=x0, rtol=rtol, maxiter=maxiter, callback=_count)
    else:
        krylov = spla.cg if method == "cg" else spla.bicgstab
        g, info = krylov(A, b, x0=x0, rtol=rtol, atol=0.0, maxiter=maxiter, callback=_count)

    residual = float(np.linalg.norm(A @ g - b)) / b_norm
    solution = PotentialSolution(g, info == 0, iterations, residual, int(info))
    logger.debug(
        "%s: %d unknowns, %d iterations, relative residual %.3e (info=%d)",
        method, A.shape[0], iterations, residual, info,
    )
    if not solution.converged:
        _report_divergence(solution, method, rtol, strict)
    return solution


def _report_divergence(solution: PotentialSolution, method: str, rtol: float, strict: bool) -> None:
    reason = "iteration limit reached" if solution.info > 0 else "numerical breakdown"
    msg = (
        f"{method} did not converge ({reason}) after {solution.iterations} iterations: "
        f"relative residual {solution.residual:.3e} > rtol {rtol:.1e}"
    )
    if strict:
        raise SolverConvergenceError(msg)
    logger.warning(msg)
    warnings.warn(msg, SolverConvergenceWarning, stacklevel=3)
