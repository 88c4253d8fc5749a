"""
Half-edge mesh data structure used by the normal estimation algorithms.
"""

from .handles import Vertex, Halfedge, Edge, Face
from .properties import NormalProperty
from .surface_mesh import SurfaceMesh, NonManifoldError

__all__ = [
    'Vertex',
    'Halfedge',
    'Edge',
    'Face',
    'NormalProperty',
    'SurfaceMesh',
    'NonManifoldError',
]
