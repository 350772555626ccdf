"""Tests for normal splatting and the potential solve."""

import warnings

import numpy as np
import numpy.testing as npt
import pytest
import scipy.sparse as sp

from poisson3d import (
    Grid,
    SolverConvergenceError,
    SolverConvergenceWarning,
    build_grid,
    distribute_normals,
    gradient_matrix,
    solve_potential,
)
from poisson3d._common import staggered_size
from poisson3d.samples import sphere_points
from poisson3d.solver import normal_equations


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_GRID = Grid(np.zeros(3), 1.0, (8, 7, 6))


def _smooth_potential(grid: Grid) -> np.ndarray:
    x = grid.node_positions()
    return np.sin(0.7 * x[:, 0]) + np.cos(0.4 * x[:, 1]) * x[:, 2] - 0.1 * x[:, 2] ** 2


# ===========================================================================
# distribute_normals
# ===========================================================================

class TestDistributeNormals:
    def test_length_matches_gradient_rows(self):
        P, N = sphere_points(300)
        grid = build_grid(P, pad=3, cells=10)
        v = distribute_normals(grid, P, N)
        G = gradient_matrix(*grid.shape, grid.h)
        assert v.shape == (staggered_size(grid.shape),)
        assert v.size == G.shape[0]

    def test_point_on_staggered_node(self):
        grid = Grid(np.zeros(3), 1.0, (4, 4, 4))
        v = distribute_normals(grid, [[1.5, 2.0, 1.0]], [[1.0, 0.0, 0.0]])
        sx = grid.staggered(0)
        assert np.count_nonzero(v) == 1
        assert v[sx.index(1, 2, 1)] == pytest.approx(1.0)

    def test_blocks_in_xyz_order(self):
        grid = Grid(np.zeros(3), 1.0, (4, 4, 4))
        v = distribute_normals(grid, [[1.5, 1.5, 1.5]], [[0.0, 0.0, 1.0]])
        nx_block = grid.staggered(0).size
        ny_block = grid.staggered(1).size
        assert not v[:nx_block + ny_block].any()
        assert v[nx_block + ny_block:].sum() == pytest.approx(1.0)

    def test_component_mass_preserved(self):
        P, N = sphere_points(200, radius=0.5, center=(1.0, 2.0, 3.0))
        grid = build_grid(P, pad=2, cells=8)
        v = distribute_normals(grid, P, N)
        sizes = [grid.staggered(axis).size for axis in range(3)]
        for axis, block in enumerate(np.split(v, np.cumsum(sizes)[:-1])):
            assert block.sum() == pytest.approx(N[:, axis].sum(), abs=1e-10)

    def test_mismatched_rows(self):
        with pytest.raises(ValueError, match="matching"):
            distribute_normals(_GRID, np.ones((3, 3)), np.ones((4, 3)))


# ===========================================================================
# solve_potential
# ===========================================================================

class TestSolvePotential:
    @pytest.mark.parametrize("method", ["cg", "bicgstab", "minres"])
    def test_recovers_potential_up_to_constant(self, method):
        G = gradient_matrix(*_GRID.shape, _GRID.h)
        g_true = _smooth_potential(_GRID)
        v = G @ g_true
        sol = solve_potential(G, v, method=method, rtol=1e-10)
        assert sol.converged
        assert sol.values.shape == (_GRID.size,)
        npt.assert_allclose(G @ sol.values, v, atol=1e-6)
        npt.assert_allclose(sol.values - sol.values.mean(), g_true - g_true.mean(), atol=1e-6)

    def test_minimum_norm_solution(self):
        G = gradient_matrix(*_GRID.shape, _GRID.h)
        sol = solve_potential(G, G @ _smooth_potential(_GRID), rtol=1e-10)
        assert abs(sol.values.mean()) < 1e-6

    def test_diagnostics(self):
        G = gradient_matrix(*_GRID.shape, _GRID.h)
        sol = solve_potential(G, G @ _smooth_potential(_GRID), rtol=1e-10)
        assert sol.info == 0
        assert sol.iterations > 0
        assert sol.residual < 1e-9

    def test_shapes_match_operator(self):
        P, N = sphere_points(300)
        grid = build_grid(P, pad=3, cells=10)
        G = gradient_matrix(*grid.shape, grid.h)
        sol = solve_potential(G, distribute_normals(grid, P, N))
        assert sol.values.size == G.shape[1] == grid.size

    def test_zero_rhs(self):
        G = gradient_matrix(*_GRID.shape, _GRID.h)
        sol = solve_potential(G, np.zeros(G.shape[0]))
        assert sol.converged
        assert sol.iterations == 0
        npt.assert_array_equal(sol.values, 0.0)

    def test_non_convergence_warns(self):
        G = gradient_matrix(*_GRID.shape, _GRID.h)
        with pytest.warns(SolverConvergenceWarning, match="did not converge"):
            sol = solve_potential(G, G @ _smooth_potential(_GRID), maxiter=1)
        assert not sol.converged
        assert sol.info > 0
        assert sol.residual > 1e-8
        assert sol.values.shape == (_GRID.size,)

    def test_non_convergence_strict_raises(self):
        G = gradient_matrix(*_GRID.shape, _GRID.h)
        with pytest.raises(SolverConvergenceError):
            solve_potential(G, G @ _smooth_potential(_GRID), maxiter=1, strict=True)

    def test_converged_solve_is_silent(self):
        G = gradient_matrix(*_GRID.shape, _GRID.h)
        with warnings.catch_warnings():
            warnings.simplefilter("error", SolverConvergenceWarning)
            solve_potential(G, G @ _smooth_potential(_GRID))

    def test_row_mismatch_asserts(self):
        G = gradient_matrix(*_GRID.shape, _GRID.h)
        with pytest.raises(AssertionError):
            solve_potential(G, np.ones(G.shape[0] - 1))

    def test_unknown_method(self):
        G = gradient_matrix(*_GRID.shape, _GRID.h)
        with pytest.raises(ValueError):
            solve_potential(G, np.ones(G.shape[0]), method="lu")


class TestNormalEquations:
    def test_types_and_shapes(self):
        G = gradient_matrix(*_GRID.shape, _GRID.h)
        v = G @ _smooth_potential(_GRID)
        A, b = normal_equations(G, v)
        assert sp.issparse(A) and A.format == "csr"
        assert A.shape == (_GRID.size, _GRID.size)
        assert isinstance(b, np.ndarray) and b.shape == (_GRID.size,)
        npt.assert_allclose(b, G.T @ v)

    def test_constant_in_null_space(self):
        G = gradient_matrix(*_GRID.shape, _GRID.h)
        A, _ = normal_equations(G, np.zeros(G.shape[0]))
        npt.assert_allclose(A @ np.ones(_GRID.size), 0.0, atol=1e-12)
