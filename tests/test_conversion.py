"""Tests for SurfaceMesh <-> pyvista.PolyData conversion."""

from __future__ import annotations

import os
import sys

import numpy as np
import pytest
import pyvista as pv

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from src.algorithms import compute_face_normals, compute_vertex_normals  # noqa: E402
from src.halfedge.conversion import from_polydata, to_polydata  # noqa: E402
from test_pipeline import _make_unit_cube_mesh  # noqa: E402


def _cube_polydata() -> pv.PolyData:
    mesh = _make_unit_cube_mesh()
    cells = []
    for f in mesh.faces():
        ids = [v.idx for v in mesh.vertices_around_face(f)]
        cells += [len(ids)] + ids
    return pv.PolyData(mesh.points.copy(), np.asarray(cells))


def test_from_polydata_builds_halfedge_mesh():
    mesh = from_polydata(_cube_polydata())
    assert mesh.n_vertices() == 8
    assert mesh.n_faces() == 6
    assert mesh.n_edges() == 12

    vnormals = compute_vertex_normals(mesh)
    centroid = mesh.points.mean(axis=0)
    for v in mesh.vertices():
        octant = np.sign(mesh.position(v) - centroid)
        np.testing.assert_allclose(vnormals[v], octant / np.sqrt(3.0))


def test_from_polydata_drops_line_cells():
    points = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0]], dtype=float)
    poly = pv.PolyData(points, faces=[3, 0, 1, 2], lines=[2, 0, 1])
    with pytest.warns(UserWarning, match="non-polygon"):
        mesh = from_polydata(poly)
    assert mesh.n_faces() == 1


def test_to_polydata_attaches_normals():
    mesh = _make_unit_cube_mesh()
    compute_vertex_normals(mesh)
    compute_face_normals(mesh)

    poly = to_polydata(mesh)
    assert poly.n_points == 8
    assert poly.n_cells == 6
    np.testing.assert_allclose(poly.point_data["Normals"], mesh.get_or_create_vertex_normals().array)
    np.testing.assert_allclose(poly.cell_data["Normals"], mesh.get_or_create_face_normals().array)


def test_to_polydata_without_normals():
    poly = to_polydata(_make_unit_cube_mesh())
    assert "Normals" not in poly.point_data
    assert "Normals" not in poly.cell_data
