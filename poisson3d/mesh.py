"""Zero level-set extraction and small triangle-mesh utilities.

Mesh extraction delegates to scikit-image's Lewiner marching cubes; this
module only converts between the package's flat, linear-indexed fields and
the dense volume scikit-image expects.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
import numpy.typing as npt
from skimage import measure

from ._common import _F, _I
from .errors import EmptyIsosurfaceError


def extract_mesh(
    g: npt.ArrayLike,
    x: npt.ArrayLike,
    nx: int,
    ny: int,
    nz: int,
) -> Tuple[_F, _I]:
    """Triangulate the ``g = 0`` level set of a field on a regular grid.

    Parameters
    ----------
    g:
        ``(nx*ny*nz,)`` field values in linear-index order
        ``i + nx*(j + k*ny)``.
    x:
        ``(nx*ny*nz, 3)`` node positions in the same order.
    nx, ny, nz:
        Grid dimensions.

    Returns
    -------
    vertices : numpy.ndarray
        ``(m, 3)`` float64 vertex positions.
    faces : numpy.ndarray
        ``(t, 3)`` int64 zero-based vertex indices. scikit-image's default
        winding is kept: for a potential that is negative inside, face
        normals point outwards and the signed volume is positive.

    Raises
    ------
    EmptyIsosurfaceError
        If *g* does not change sign.
    """
    g = np.asarray(g, dtype=np.float64).ravel()
    x = np.asarray(x, dtype=np.float64)
    n = nx * ny * nz
    if g.size != n or x.shape != (n, 3):
        raise ValueError(
            f"expected {n} values and ({n}, 3) positions, got {g.shape} and {x.shape}"
        )
    if not (g.min() < 0.0 < g.max()):
        raise EmptyIsosurfaceError(
            f"field range [{g.min():.3e}, {g.max():.3e}] does not contain the zero level"
        )

    corner = x[0]
    h = float(x[1, 0] - x[0, 0])

    # Linear index is x-fastest, so the C-ordered reshape is indexed [k, j, i].
    volume = np.ascontiguousarray(g.reshape(nz, ny, nx).transpose(2, 1, 0))
    verts, faces, _, _ = measure.marching_cubes(
        volume,
        level=0.0,
        spacing=(h, h, h),
        allow_degenerate=False,
    )
    return verts.astype(np.float64) + corner, faces.astype(np.int64)


# ===========================================================================
# Mesh utilities
# ===========================================================================

def signed_volume(vertices: npt.ArrayLike, faces: npt.ArrayLike) -> float:
    """Volume enclosed by a closed mesh; positive for outward-facing triangles."""
    V = np.asarray(vertices, dtype=np.float64)
    F = np.asarray(faces, dtype=np.int64)
    if len(F) == 0:
        return 0.0
    a, b, c = V[F[:, 0]], V[F[:, 1]], V[F[:, 2]]
    return float(np.einsum("ij,ij->i", a, np.cross(b, c)).sum() / 6.0)


def edge_counts(faces: npt.ArrayLike) -> Tuple[_I, _I]:
    """Return unique undirected edges ``(e, 2)`` and how many faces use each."""
    F = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    if len(F) == 0:
        return np.zeros((0, 2), dtype=np.int64), np.zeros(0, dtype=np.int64)
    edges = np.concatenate([F[:, [0, 1]], F[:, [1, 2]], F[:, [2, 0]]])
    edges = np.sort(edges, axis=1)
    return np.unique(edges, axis=0, return_counts=True)


def boundary_edges(faces: npt.ArrayLike) -> _I:
    """Edges used by exactly one face."""
    edges, counts = edge_counts(faces)
    return edges[counts == 1]


def is_closed_manifold(faces: npt.ArrayLike) -> bool:
    """``True`` when every edge is shared by exactly two faces."""
    edges, counts = edge_counts(faces)
    return len(edges) > 0 and bool(np.all(counts == 2))
