"""
Lightweight element handles for the half-edge mesh.

A handle is just an index into the mesh's connectivity arrays. It owns no
data; all geometry and topology queries go through the SurfaceMesh that
created it. An index of -1 marks an invalid handle.
"""


class Handle:
    """Base class for typed element indices."""

    __slots__ = ("_idx",)

    def __init__(self, idx: int = -1):
        self._idx = int(idx)

    @property
    def idx(self) -> int:
        return self._idx

    def is_valid(self) -> bool:
        return self._idx >= 0

    def __index__(self) -> int:
        return self._idx

    def __eq__(self, other):
        # A Vertex(3) and a Face(3) are different elements
        if type(other) is not type(self):
            return NotImplemented
        return self._idx == other._idx

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __lt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._idx < other._idx

    def __hash__(self):
        return hash((type(self).__name__, self._idx))

    def __repr__(self):
        return f"{type(self).__name__}({self._idx})"


class Vertex(Handle):
    __slots__ = ()


class Halfedge(Handle):
    __slots__ = ()


class Edge(Handle):
    __slots__ = ()


class Face(Handle):
    __slots__ = ()
