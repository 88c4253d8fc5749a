"""
Conversion between SurfaceMesh and pyvista.PolyData.

pyvista stores polygons in a flat "padded" connectivity array
``[n0, i0, i1, ..., n1, j0, j1, ...]``; each cell is prefixed with its
vertex count.
"""

import warnings

import numpy as np
import pyvista as pv

from .surface_mesh import SurfaceMesh


def _split_padded_faces(flat: np.ndarray):
    polygons = []
    i = 0
    while i < len(flat):
        n = int(flat[i])
        polygons.append(flat[i + 1:i + 1 + n].tolist())
        i += n + 1
    return polygons


def from_polydata(poly: pv.PolyData) -> SurfaceMesh:
    """
    Build a half-edge mesh from the polygon cells of a PolyData surface.

    Vertex, line and triangle-strip cells have no half-edge representation
    and are dropped with a warning.
    """
    dropped = poly.n_verts + poly.n_lines + poly.n_strips
    if dropped:
        warnings.warn(f"dropping {dropped} non-polygon cells from PolyData")

    polygons = _split_padded_faces(np.asarray(poly.faces))
    return SurfaceMesh(np.asarray(poly.points, dtype=np.float64), polygons)


def to_polydata(mesh: SurfaceMesh) -> pv.PolyData:
    """
    Export a SurfaceMesh as PolyData.

    Normals already computed on the mesh are attached as
    ``point_data["Normals"]`` (per vertex) and ``cell_data["Normals"]``
    (per face).
    """
    cells = []
    for f in mesh.faces():
        ids = [v.idx for v in mesh.vertices_around_face(f)]
        cells.append(len(ids))
        cells.extend(ids)

    if cells:
        poly = pv.PolyData(mesh.points.copy(), np.asarray(cells, dtype=np.int64))
    else:
        poly = pv.PolyData(mesh.points.copy())

    if mesh.has_vertex_normals():
        poly.point_data["Normals"] = mesh.get_or_create_vertex_normals().array.copy()
    if mesh.has_face_normals() and mesh.n_faces() > 0:
        poly.cell_data["Normals"] = mesh.get_or_create_face_normals().array.copy()
    return poly
