"""
Half-edge surface mesh.

Connectivity is built once from a point array and a list of polygons and is
stored in flat numpy index arrays:

    - halfedges are allocated in pairs, so opposite(h) == h ^ 1 and the
      undirected edge of h is h // 2,
    - every halfedge stores its target vertex, next/prev halfedge and face
      (-1 for boundary halfedges),
    - boundary halfedges are linked into closed boundary loops, and the
      outgoing halfedge of a boundary vertex is always a boundary halfedge.

With this layout one full cw (or ccw) rotation around any manifold vertex
visits all of its outgoing halfedges, boundary ones included.
"""

import warnings
from typing import Iterable, Iterator, Optional, Sequence

import numpy as np
from scipy import sparse

from .handles import Edge, Face, Halfedge, Handle, Vertex
from .properties import NormalProperty


class NonManifoldError(ValueError):
    """Raised when polygon data cannot be represented as an oriented 2-manifold."""


class SurfaceMesh:
    """
    Polygonal surface mesh with half-edge connectivity.

    Args:
        points: (N, 3) array_like of vertex positions
        faces: iterable of polygons, each a sequence of >= 3 vertex indices
            in counter-clockwise order

    Raises:
        ValueError: malformed points or face definitions
        NonManifoldError: non-manifold edges/vertices or inconsistent
            face orientation
    """

    def __init__(self, points, faces: Optional[Iterable[Sequence[int]]] = None):
        pts = np.array(points, dtype=np.float64)
        if pts.size == 0:
            pts = pts.reshape(0, 3)
        if pts.ndim != 2 or pts.shape[1] != 3:
            raise ValueError("points must be shaped (N, 3)")
        self._points = pts

        polygons = [] if faces is None else [[int(i) for i in face] for face in faces]
        _validate_polygons(polygons, len(pts))
        _check_duplicate_edges(polygons, len(pts))

        self._build(polygons)

        # Per-element normal storage, created on demand
        self._vnormals = None
        self._fnormals = None
        self._hnormals = None

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def _build(self, polygons):
        n_verts = len(self._points)
        n_corners = sum(len(poly) for poly in polygons)
        # Upper bound: every corner opens a new edge (pair of halfedges)
        capacity = 2 * n_corners

        to_vertex = np.full(capacity, -1, dtype=np.int64)
        next_h = np.full(capacity, -1, dtype=np.int64)
        prev_h = np.full(capacity, -1, dtype=np.int64)
        hface = np.full(capacity, -1, dtype=np.int64)
        vhalfedge = np.full(n_verts, -1, dtype=np.int64)
        fhalfedge = np.full(len(polygons), -1, dtype=np.int64)

        directed = {}
        n_edges = 0

        for fi, poly in enumerate(polygons):
            k = len(poly)
            loop = []
            for j in range(k):
                u, v = poly[j], poly[(j + 1) % k]
                twin = directed.get((v, u))
                if twin is not None:
                    h = twin ^ 1
                else:
                    h = 2 * n_edges
                    n_edges += 1
                    to_vertex[h] = v
                    to_vertex[h ^ 1] = u
                directed[(u, v)] = h
                hface[h] = fi
                vhalfedge[u] = h
                loop.append(h)

            for j in range(k):
                next_h[loop[j]] = loop[(j + 1) % k]
                prev_h[loop[(j + 1) % k]] = loop[j]
            fhalfedge[fi] = loop[0]

        n_halfedges = 2 * n_edges
        self._to = to_vertex[:n_halfedges]
        self._next = next_h[:n_halfedges]
        self._prev = prev_h[:n_halfedges]
        self._hface = hface[:n_halfedges]
        self._vhalfedge = vhalfedge
        self._fhalfedge = fhalfedge

        self._link_boundary_loops()
        self._check_vertex_fans()

        isolated = np.flatnonzero(self._vhalfedge < 0)
        if isolated.size > 0:
            warnings.warn(f"mesh has {isolated.size} isolated vertices")

    def _link_boundary_loops(self):
        boundary = np.flatnonzero(self._hface < 0)
        outgoing = {}
        for h in boundary:
            origin = int(self._to[h ^ 1])
            if origin in outgoing:
                raise NonManifoldError(f"vertex #{origin} lies on more than one boundary fan")
            outgoing[origin] = int(h)

        for h in boundary:
            nh = outgoing[int(self._to[h])]
            self._next[h] = nh
            self._prev[nh] = h

        # Boundary vertices point to their boundary halfedge so that rotation
        # always starts at the gap of the fan
        for v, h in outgoing.items():
            self._vhalfedge[v] = h

    def _check_vertex_fans(self):
        n_out = np.bincount(self._to[np.arange(len(self._to)) ^ 1], minlength=len(self._points))
        for vi in range(len(self._points)):
            start = int(self._vhalfedge[vi])
            if start < 0:
                continue
            count = 0
            h = start
            while True:
                count += 1
                h = int(self._next[h ^ 1])
                if h == start:
                    break
            if count != n_out[vi]:
                raise NonManifoldError(f"vertex #{vi} is non-manifold")

    # -------------------------------------------------------------------------
    # Sizes and iteration
    # -------------------------------------------------------------------------

    def n_vertices(self) -> int:
        return len(self._points)

    def n_faces(self) -> int:
        return len(self._fhalfedge)

    def n_halfedges(self) -> int:
        return len(self._to)

    def n_edges(self) -> int:
        return len(self._to) // 2

    def vertices(self) -> Iterator[Vertex]:
        return (Vertex(i) for i in range(self.n_vertices()))

    def faces(self) -> Iterator[Face]:
        return (Face(i) for i in range(self.n_faces()))

    def halfedges(self) -> Iterator[Halfedge]:
        return (Halfedge(i) for i in range(self.n_halfedges()))

    def edges(self) -> Iterator[Edge]:
        return (Edge(i) for i in range(self.n_edges()))

    # -------------------------------------------------------------------------
    # Geometry
    # -------------------------------------------------------------------------

    @property
    def points(self) -> np.ndarray:
        return self._points

    def position(self, v: Vertex) -> np.ndarray:
        return self._points[v.idx]

    def set_position(self, v: Vertex, p) -> None:
        self._points[v.idx] = p

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def halfedge(self, handle: Handle, i: int = 0) -> Halfedge:
        """
        Halfedge attached to a vertex (outgoing), a face (one of its
        boundary halfedges) or an edge (``i`` selects which of the two).
        """
        if isinstance(handle, Vertex):
            return Halfedge(self._vhalfedge[handle.idx])
        if isinstance(handle, Face):
            return Halfedge(self._fhalfedge[handle.idx])
        if isinstance(handle, Edge):
            return Halfedge(2 * handle.idx + i)
        raise TypeError(f"no halfedge for {handle!r}")

    def to_vertex(self, h: Halfedge) -> Vertex:
        return Vertex(self._to[h.idx])

    def from_vertex(self, h: Halfedge) -> Vertex:
        return Vertex(self._to[h.idx ^ 1])

    def next_halfedge(self, h: Halfedge) -> Halfedge:
        return Halfedge(self._next[h.idx])

    def prev_halfedge(self, h: Halfedge) -> Halfedge:
        return Halfedge(self._prev[h.idx])

    def opposite_halfedge(self, h: Halfedge) -> Halfedge:
        return Halfedge(h.idx ^ 1)

    def cw_rotated_halfedge(self, h: Halfedge) -> Halfedge:
        """Next outgoing halfedge of from_vertex(h) in clockwise order."""
        return Halfedge(self._next[h.idx ^ 1])

    def ccw_rotated_halfedge(self, h: Halfedge) -> Halfedge:
        """Next outgoing halfedge of from_vertex(h) in counter-clockwise order."""
        return Halfedge(self._prev[h.idx] ^ 1)

    def edge(self, h: Halfedge) -> Edge:
        return Edge(h.idx >> 1)

    def face(self, h: Halfedge) -> Face:
        return Face(self._hface[h.idx])

    def is_boundary(self, handle: Handle) -> bool:
        """
        Boundary test for any element kind. A halfedge is on the boundary
        when it has no face; vertices, edges and faces are on the boundary
        when one of their halfedges is. Isolated vertices count as boundary.
        """
        if isinstance(handle, Halfedge):
            return bool(self._hface[handle.idx] < 0)
        if isinstance(handle, Vertex):
            h = self._vhalfedge[handle.idx]
            return bool(h < 0 or self._hface[h] < 0)
        if isinstance(handle, Edge):
            return bool(self._hface[2 * handle.idx] < 0 or self._hface[2 * handle.idx + 1] < 0)
        if isinstance(handle, Face):
            return any(self.is_boundary(self.opposite_halfedge(h))
                       for h in self.halfedges_around_face(handle))
        raise TypeError(f"cannot test boundary of {handle!r}")

    def is_isolated(self, v: Vertex) -> bool:
        return bool(self._vhalfedge[v.idx] < 0)

    # -------------------------------------------------------------------------
    # Circulators
    # -------------------------------------------------------------------------

    def halfedges_around_vertex(self, v: Vertex) -> Iterator[Halfedge]:
        """Outgoing halfedges of v, one full ccw turn."""
        start = self.halfedge(v)
        if not start.is_valid():
            return
        h = start
        while True:
            yield h
            h = self.ccw_rotated_halfedge(h)
            if h == start:
                break

    def vertices_around_vertex(self, v: Vertex) -> Iterator[Vertex]:
        for h in self.halfedges_around_vertex(v):
            yield self.to_vertex(h)

    def faces_around_vertex(self, v: Vertex) -> Iterator[Face]:
        for h in self.halfedges_around_vertex(v):
            if not self.is_boundary(h):
                yield self.face(h)

    def halfedges_around_face(self, f: Face) -> Iterator[Halfedge]:
        start = self.halfedge(f)
        h = start
        while True:
            yield h
            h = self.next_halfedge(h)
            if h == start:
                break

    def vertices_around_face(self, f: Face) -> Iterator[Vertex]:
        for h in self.halfedges_around_face(f):
            yield self.to_vertex(h)

    def valence(self, handle: Handle) -> int:
        """Number of incident edges of a vertex, or number of corners of a face."""
        if isinstance(handle, Vertex):
            return sum(1 for _ in self.halfedges_around_vertex(handle))
        if isinstance(handle, Face):
            return sum(1 for _ in self.halfedges_around_face(handle))
        raise TypeError(f"no valence for {handle!r}")

    def is_triangle_mesh(self) -> bool:
        return all(self.valence(f) == 3 for f in self.faces())

    # -------------------------------------------------------------------------
    # Normal storage
    # -------------------------------------------------------------------------

    def get_or_create_vertex_normals(self) -> NormalProperty:
        if self._vnormals is None:
            self._vnormals = NormalProperty(Vertex, self.n_vertices())
        return self._vnormals

    def get_or_create_face_normals(self) -> NormalProperty:
        if self._fnormals is None:
            self._fnormals = NormalProperty(Face, self.n_faces())
        return self._fnormals

    def get_or_create_halfedge_normals(self) -> NormalProperty:
        if self._hnormals is None:
            self._hnormals = NormalProperty(Halfedge, self.n_halfedges())
        return self._hnormals

    def has_vertex_normals(self) -> bool:
        return self._vnormals is not None

    def has_face_normals(self) -> bool:
        return self._fnormals is not None

    def has_halfedge_normals(self) -> bool:
        return self._hnormals is not None

    def remove_vertex_normals(self) -> None:
        self._vnormals = None

    def remove_face_normals(self) -> None:
        self._fnormals = None

    def remove_halfedge_normals(self) -> None:
        self._hnormals = None

    def __repr__(self):
        return (f"SurfaceMesh(n_vertices={self.n_vertices()}, "
                f"n_faces={self.n_faces()}, n_edges={self.n_edges()})")


def _validate_polygons(polygons, num_verts):
    for fi, poly in enumerate(polygons):
        if len(poly) < 3:
            raise ValueError(f"face #{fi} has fewer than 3 vertices")
        if len(set(poly)) != len(poly):
            raise ValueError(f"face #{fi} references a vertex more than once")
        if min(poly) < 0 or max(poly) >= num_verts:
            raise ValueError(f"face #{fi} references a vertex index out of range")


def _check_duplicate_edges(polygons, num_verts):
    """
    Every directed edge may belong to at most one face. A repeated directed
    edge means three or more faces share an edge, or two neighbouring faces
    disagree on orientation.
    """
    if not polygons:
        return
    tails = np.concatenate([np.asarray(poly, dtype=np.int64) for poly in polygons])
    heads = np.concatenate([np.roll(np.asarray(poly, dtype=np.int64), -1) for poly in polygons])
    data = np.ones(len(tails))

    # COO -> CSR conversion sums repeated (tail, head) entries
    counts = sparse.coo_matrix((data, (tails, heads)), shape=(num_verts, num_verts)).tocsr()
    counts.sum_duplicates()

    if counts.nnz and counts.data.max() > 1:
        coo = counts.tocoo()
        bad = np.flatnonzero(coo.data > 1)[0]
        raise NonManifoldError(
            f"edge ({coo.row[bad]}, {coo.col[bad]}) is shared by faces with "
            "the same orientation or by more than two faces"
        )
