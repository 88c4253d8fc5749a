"""
Surface normal estimation algorithms for half-edge meshes.
"""

from .surface_normals import (
    EPSILON,
    DEFAULT_CREASE_ANGLE,
    clamp_cos,
    normalize,
    compute_vertex_normal,
    compute_face_normal,
    compute_corner_normal,
    compute_vertex_normals,
    compute_face_normals,
    compute_corner_normals,
)

__all__ = [
    # Numeric helpers
    'EPSILON',
    'DEFAULT_CREASE_ANGLE',
    'clamp_cos',
    'normalize',
    # Per-element normals
    'compute_vertex_normal',
    'compute_face_normal',
    'compute_corner_normal',
    # Batch drivers
    'compute_vertex_normals',
    'compute_face_normals',
    'compute_corner_normals',
]
