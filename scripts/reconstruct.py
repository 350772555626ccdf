"""Reconstruct a mesh from an oriented point cloud and optionally render it.

Usage::

    python scripts/reconstruct.py --demo sphere                 # saves sphere.obj
    python scripts/reconstruct.py --input data/bunny.pwn --out bunny.obj
    python scripts/reconstruct.py --demo patch --render patch.png -v

Requirements: numpy, scipy, scikit-image (matplotlib for ``--render``)
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
import time

# Ensure the repo root (parent of scripts/) is importable regardless of cwd
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np

from poisson3d import (
    ReconstructionConfig,
    ReconstructionError,
    boundary_edges,
    poisson_surface_reconstruction,
    signed_volume,
)
from poisson3d.io import load_point_cloud, save_npy, save_obj
from poisson3d.samples import sphere_points, square_patch_points


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def render_mesh(verts: np.ndarray, faces: np.ndarray, out_path: str, title: str = "") -> None:
    try:
        import matplotlib.pyplot as plt
        from mpl_toolkits.mplot3d.art3d import Poly3DCollection
    except ImportError:
        print("  matplotlib not available, skipping PNG")
        return

    _FACE_COLOR = np.array([0.4, 0.7, 1.0])

    tris  = verts[faces]
    norms = np.cross(tris[:, 1] - tris[:, 0], tris[:, 2] - tris[:, 0])
    nlen  = np.linalg.norm(norms, axis=1, keepdims=True)
    norms = norms / np.where(nlen > 0, nlen, 1.0)
    shade = 0.3 + 0.7 * np.clip(norms @ np.array([0.577, 0.577, 0.577]), 0, 1)

    fig = plt.figure(figsize=(5, 5), facecolor="#111")
    ax  = fig.add_subplot(111, projection="3d")
    ax.set_facecolor("#111"); ax.set_axis_off(); ax.set_box_aspect([1, 1, 1])
    ax.add_collection3d(Poly3DCollection(tris, facecolors=np.outer(shade, _FACE_COLOR),
                                         edgecolors="none"))
    lo, hi = verts.min(axis=0), verts.max(axis=0)
    half = 0.5 * float((hi - lo).max())
    mid = 0.5 * (lo + hi)
    ax.set_xlim(mid[0] - half, mid[0] + half)
    ax.set_ylim(mid[1] - half, mid[1] + half)
    ax.set_zlim(mid[2] - half, mid[2] + half)
    ax.set_title(title, color="white", fontsize=9)
    fig.savefig(out_path, dpi=150, bbox_inches="tight", facecolor="#111")
    plt.close(fig)
    print(f"  Saved: {out_path}")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def _load(args: argparse.Namespace):
    if args.input:
        return load_point_cloud(args.input), os.path.splitext(os.path.basename(args.input))[0]
    if args.demo == "patch":
        return square_patch_points(int(np.sqrt(args.points))), "patch"
    return sphere_points(args.points), "sphere"


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Poisson surface reconstruction of an oriented point cloud."
    )
    src = parser.add_mutually_exclusive_group()
    src.add_argument("--input", help="Point cloud file (.pwn, .xyzn, .xyz, .txt)")
    src.add_argument("--demo", choices=("sphere", "patch"), default="sphere",
                     help="Synthetic point cloud to use when --input is absent")
    parser.add_argument("--points", type=int, default=1000, help="Demo sample count (default 1000)")
    parser.add_argument("--out", help="Output OBJ path (default <name>.obj)")
    parser.add_argument("--field", help="Also save the calibrated potential as .npy")
    parser.add_argument("--render", help="Render the mesh to this PNG path")
    parser.add_argument("--method", choices=("cg", "bicgstab", "minres"), default="cg")
    parser.add_argument("--rtol", type=float, default=1e-8)
    parser.add_argument("--maxiter", type=int, default=None)
    parser.add_argument("--pad", type=int, default=8)
    parser.add_argument("--cells", type=int, default=30)
    parser.add_argument("--strict", action="store_true",
                        help="Fail instead of warning when the solver does not converge")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = ReconstructionConfig(
        pad=args.pad, cells=args.cells, solver=args.method,
        rtol=args.rtol, maxiter=args.maxiter, strict=args.strict,
    )
    (P, N), name = _load(args)

    print("=" * 60)
    print(f"POISSON RECONSTRUCTION: {name} ({len(P):,} points)")
    print("=" * 60)

    t0 = time.perf_counter()
    try:
        result = poisson_surface_reconstruction(P, N, config)
    except ReconstructionError as exc:
        raise SystemExit(f"reconstruction failed: {exc}")
    elapsed = time.perf_counter() - t0

    sol = result.solution
    print(f"  Grid          : {result.grid.shape}  h={result.grid.h:.4g}")
    print(f"  Solver        : {config.solver}, {sol.iterations} iterations, "
          f"residual {sol.residual:.2e}  converged={sol.converged}")
    print(f"  Isovalue      : {result.isovalue:+.4g}")
    print(f"  Mesh          : {len(result.vertices):,} vertices, {len(result.faces):,} faces")
    print(f"  Boundary edges: {len(boundary_edges(result.faces)):,}")
    print(f"  Signed volume : {signed_volume(result.vertices, result.faces):.4g}")
    print(f"  Time          : {elapsed:.2f} s")

    out = args.out or f"{name}.obj"
    save_obj(out, result.vertices, result.faces)
    print(f"  Saved: {out}")
    if args.field:
        save_npy(args.field, result.potential.reshape(result.grid.shape[::-1]))
        print(f"  Saved: {args.field}")
    if args.render:
        render_mesh(result.vertices, result.faces, args.render, title=name)


if __name__ == "__main__":
    main()
