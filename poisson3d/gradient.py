"""Staggered finite-difference gradient operators."""

from __future__ import annotations

import numpy as np
import scipy.sparse as sp

from ._common import lattice_size, staggered_shape


def partial_derivative_matrix(nx: int, ny: int, nz: int, h: float, axis: int) -> sp.csr_matrix:
    """Forward-difference derivative along *axis*, sampled on the staggered grid.

    Row ``s`` corresponds to node ``s = (i, j, k)`` of the lattice offset by
    ``h/2`` along *axis* and computes ``(f[s + e_axis] - f[s]) / h`` from the
    primary node values ``f``.

    Returns
    -------
    scipy.sparse.csr_matrix
        Shape ``(staggered nodes, nx*ny*nz)``.
    """
    if not h > 0.0:
        raise ValueError(f"spacing h must be positive, got {h}")
    shape = (nx, ny, nz)
    snx, sny, snz = staggered_shape(shape, axis)
    K, J, I = np.meshgrid(np.arange(snz), np.arange(sny), np.arange(snx), indexing="ij")
    lo = I.ravel() + nx * (J.ravel() + K.ravel() * ny)
    hi = lo + (1, nx, nx * ny)[axis]

    m = lo.size
    rows = np.concatenate([np.arange(m), np.arange(m)])
    cols = np.concatenate([lo, hi])
    vals = np.concatenate([np.full(m, -1.0 / h), np.full(m, 1.0 / h)])
    return sp.csr_matrix((vals, (rows, cols)), shape=(m, lattice_size(shape)))


def gradient_matrix(nx: int, ny: int, nz: int, h: float) -> sp.csr_matrix:
    """Stack the x, y and z staggered derivatives (in that order) into ``G``."""
    blocks = [partial_derivative_matrix(nx, ny, nz, h, axis) for axis in range(3)]
    return sp.vstack(blocks, format="csr")
