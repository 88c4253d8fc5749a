"""
Surface Normal Estimation on Half-Edge Meshes

Three shading models:
- vertex normals: angle-weighted average of incident face normals,
  insensitive to how the one-ring is tessellated
- face normals: Newell's method, exact for triangles and robust for
  non-planar or non-convex polygons
- corner normals: vertex normals restricted to the faces whose normal lies
  within a crease angle of the corner's own face, giving hard seams across
  sharp edges and smooth shading elsewhere

Degenerate corners (zero-length edges, collinear edges) contribute nothing;
an element without any usable contribution gets the zero vector.

Reference: Thürmer & Wüthrich, "Computing Vertex Normals from Polygonal
Facets" (1998)
"""

import math

import numpy as np

from ..halfedge import Face, Halfedge, NormalProperty, SurfaceMesh, Vertex

# Smallest positive normalized double. Lengths at or below it are treated as
# zero when deciding whether a corner can be weighted.
EPSILON = np.finfo(np.float64).tiny

# Crease angles (degrees) below/above which the corner normal degenerates to
# the plain face/vertex normal
_FACETED_CREASE_ANGLE = 0.01
_SMOOTH_CREASE_ANGLE = 179.0

# Lower bound keeps cos() of the crease angle away from exactly 1
_MIN_CREASE_ANGLE = 0.001

# Default for compute_corner_normals (degrees)
DEFAULT_CREASE_ANGLE = 60.0


# =============================================================================
# NUMERIC HELPERS
# =============================================================================

def clamp_cos(x: float) -> float:
    """Clamp a cosine into [-1, 1] so acos() never sees rounding overshoot."""
    if x < -1.0:
        return -1.0
    if x > 1.0:
        return 1.0
    return x


def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector along v; vectors of length <= EPSILON are returned unchanged."""
    n = np.linalg.norm(v)
    if n > EPSILON:
        return v / n
    return v


def _corner_angle(p1: np.ndarray, p2: np.ndarray):
    """Angle between two edge vectors, or None if either is degenerate."""
    denom = math.sqrt(np.dot(p1, p1) * np.dot(p2, p2))
    if denom <= EPSILON:
        return None
    return math.acos(clamp_cos(np.dot(p1, p2) / denom))


# =============================================================================
# PER-ELEMENT NORMALS
# =============================================================================

def compute_vertex_normal(mesh: SurfaceMesh, v: Vertex) -> np.ndarray:
    """
    Angle-weighted vertex normal.

    Each incident face contributes its unit normal scaled by the interior
    angle it subtends at v. Boundary gaps and degenerate corners are skipped.

    Args:
        mesh: half-edge mesh
        v: vertex handle

    Returns:
        (3,) unit normal, or zero vector for isolated/fully degenerate vertices
    """
    nn = np.zeros(3)
    h = mesh.halfedge(v)
    if not h.is_valid():
        return nn

    hend = h
    p0 = mesh.position(v)

    while True:
        if not mesh.is_boundary(h):
            p1 = mesh.position(mesh.to_vertex(h)) - p0
            p2 = mesh.position(mesh.from_vertex(mesh.prev_halfedge(h))) - p0

            angle = _corner_angle(p1, p2)
            if angle is not None:
                n = np.cross(p1, p2)
                length = np.linalg.norm(n)
                if length > EPSILON:
                    nn += n * (angle / length)

        h = mesh.cw_rotated_halfedge(h)
        if h == hend:
            break

    return normalize(nn)


def compute_face_normal(mesh: SurfaceMesh, f: Face) -> np.ndarray:
    """
    Face normal via Newell's method.

    Triangles take a single cross product. General polygons sum the cross
    product at every corner, which approximates the best-fit plane normal
    for non-planar faces.
    """
    h = mesh.halfedge(f)
    hend = h

    p0 = mesh.position(mesh.to_vertex(h))
    h = mesh.next_halfedge(h)
    p1 = mesh.position(mesh.to_vertex(h))
    h = mesh.next_halfedge(h)
    p2 = mesh.position(mesh.to_vertex(h))

    if mesh.next_halfedge(h) == hend:
        return normalize(np.cross(p2 - p1, p0 - p1))

    n = np.zeros(3)
    hend = h
    while True:
        n += np.cross(p2 - p1, p0 - p1)
        h = mesh.next_halfedge(h)
        p0, p1 = p1, p2
        p2 = mesh.position(mesh.to_vertex(h))
        if h == hend:
            break

    return normalize(n)


def compute_corner_normal(mesh: SurfaceMesh, h: Halfedge,
                          crease_angle: float) -> np.ndarray:
    """
    Crease-aware normal for one face corner.

    Rotates around to_vertex(h), starting at h's face, and averages
    (angle-weighted) only those incident faces whose normal is within
    crease_angle of h's face normal.

    Args:
        mesh: half-edge mesh
        h: halfedge selecting the corner
        crease_angle: threshold in degrees; below 0.01 the face normal is
            returned, above 179 the vertex normal of from_vertex(h)

    Returns:
        (3,) unit normal, or zero vector for boundary halfedges
    """
    if crease_angle < _FACETED_CREASE_ANGLE:
        return compute_face_normal(mesh, mesh.face(h))
    if crease_angle > _SMOOTH_CREASE_ANGLE:
        return compute_vertex_normal(mesh, mesh.from_vertex(h))

    crease_angle = max(crease_angle, _MIN_CREASE_ANGLE)
    cos_crease = math.cos(math.radians(crease_angle))

    nn = np.zeros(3)
    if mesh.is_boundary(h):
        return nn

    hend = h
    p0 = mesh.position(mesh.to_vertex(h))

    p1 = mesh.position(mesh.to_vertex(mesh.next_halfedge(h))) - p0
    p2 = mesh.position(mesh.from_vertex(h)) - p0
    nf = normalize(np.cross(p1, p2))

    while True:
        if not mesh.is_boundary(h):
            p1 = mesh.position(mesh.to_vertex(mesh.next_halfedge(h))) - p0
            p2 = mesh.position(mesh.from_vertex(h)) - p0

            n = np.cross(p1, p2)
            length = np.linalg.norm(n)
            if length > EPSILON:
                n = n / length

                # faces across a crease sharper than the threshold are left out
                if np.dot(n, nf) >= cos_crease:
                    angle = _corner_angle(p1, p2)
                    if angle is not None:
                        nn += n * angle

        h = mesh.opposite_halfedge(mesh.next_halfedge(h))
        if h == hend:
            break

    return normalize(nn)


# =============================================================================
# BATCH DRIVERS
# =============================================================================

def compute_vertex_normals(mesh: SurfaceMesh) -> NormalProperty:
    """Compute and store the normal of every vertex; returns the storage."""
    vnormals = mesh.get_or_create_vertex_normals()
    for v in mesh.vertices():
        vnormals[v] = compute_vertex_normal(mesh, v)
    return vnormals


def compute_face_normals(mesh: SurfaceMesh) -> NormalProperty:
    """Compute and store the normal of every face; returns the storage."""
    fnormals = mesh.get_or_create_face_normals()
    for f in mesh.faces():
        fnormals[f] = compute_face_normal(mesh, f)
    return fnormals


def compute_corner_normals(mesh: SurfaceMesh,
                           crease_angle: float = DEFAULT_CREASE_ANGLE) -> NormalProperty:
    """
    Compute the corner normal of every interior halfedge.

    Boundary halfedges have no corner and are stored as zero vectors.
    """
    hnormals = mesh.get_or_create_halfedge_normals()
    for h in mesh.halfedges():
        if mesh.is_boundary(h):
            hnormals[h] = 0.0
        else:
            hnormals[h] = compute_corner_normal(mesh, h, crease_angle)
    return hnormals
