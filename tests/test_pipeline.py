"""Lightweight smoke tests for the normal estimation pipeline.

Why this file exists:
- `setup.py` exposes an optional console entrypoint: `normals-test=tests.test_pipeline:main`

These tests are fast and data-free. They build a unit cube, run every batch
driver and check the results against the closed-form normals.
"""

from __future__ import annotations

import os
import sys

import numpy as np

# Allow running this file directly via `python tests/test_pipeline.py`
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


def _make_unit_cube_mesh():
    """Return an axis-aligned unit cube made of 6 outward-facing quads.

    - 8 vertices
    - 6 quads, 12 edges
    """
    from src.halfedge import SurfaceMesh

    verts = np.array(
        [
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [1.0, 1.0, 0.0],
            [0.0, 1.0, 0.0],
            [0.0, 0.0, 1.0],
            [1.0, 0.0, 1.0],
            [1.0, 1.0, 1.0],
            [0.0, 1.0, 1.0],
        ],
        dtype=np.float64,
    )

    faces = [
        [0, 3, 2, 1],  # bottom (z=0)
        [4, 5, 6, 7],  # top (z=1)
        [0, 1, 5, 4],  # front (y=0)
        [2, 3, 7, 6],  # back (y=1)
        [0, 4, 7, 3],  # left (x=0)
        [1, 2, 6, 5],  # right (x=1)
    ]

    return SurfaceMesh(verts, faces)


def _assert_finite_array(name: str, arr: np.ndarray) -> None:
    if not np.isfinite(arr).all():
        bad = np.argwhere(~np.isfinite(arr))[:10]
        raise AssertionError(f"{name} contains non-finite values at indices: {bad.tolist()}")


def _assert_unit_rows(name: str, arr: np.ndarray) -> None:
    lengths = np.linalg.norm(arr, axis=1)
    if not np.allclose(lengths, 1.0):
        raise AssertionError(f"{name} has non-unit rows: {lengths.tolist()}")


def test_normal_pipeline_smoke() -> None:
    # Import here to keep module import lightweight.
    from src.algorithms import (
        compute_vertex_normals,
        compute_face_normals,
        compute_corner_normals,
    )

    mesh = _make_unit_cube_mesh()
    centroid = mesh.points.mean(axis=0)

    fnormals = compute_face_normals(mesh)
    assert fnormals.array.shape == (6, 3)
    _assert_finite_array("face normals", fnormals.array)
    _assert_unit_rows("face normals", fnormals.array)

    axes = {tuple(row) for row in np.vstack([np.eye(3), -np.eye(3)])}
    assert {tuple(row) for row in fnormals.array} == axes

    vnormals = compute_vertex_normals(mesh)
    assert vnormals.array.shape == (8, 3)
    _assert_finite_array("vertex normals", vnormals.array)
    for v in mesh.vertices():
        octant = np.sign(mesh.position(v) - centroid)
        np.testing.assert_allclose(vnormals[v], octant / np.sqrt(3.0))

    hnormals = compute_corner_normals(mesh, crease_angle=60.0)
    assert hnormals.array.shape == (24, 3)
    _assert_finite_array("corner normals", hnormals.array)
    _assert_unit_rows("corner normals", hnormals.array)


def main() -> int:
    """CLI entrypoint used by `normals-test`."""

    test_normal_pipeline_smoke()
    print("OK: normal estimation pipeline executed successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
