"""Per-element normal storage owned by a SurfaceMesh."""

from typing import Iterator, Tuple, Type

import numpy as np

from .handles import Handle


class NormalProperty:
    """
    Writable mapping from element handles to 3D normals.

    Values live in a contiguous (n, 3) float64 array so that batch results
    can be handed straight to numpy or pyvista via ``array``.

    Args:
        handle_type: handle class accepted as key (Vertex, Face or Halfedge)
        size: number of elements of that kind in the mesh
    """

    def __init__(self, handle_type: Type[Handle], size: int):
        self._handle_type = handle_type
        self._data = np.zeros((size, 3), dtype=np.float64)

    @property
    def array(self) -> np.ndarray:
        return self._data

    @property
    def handle_type(self) -> Type[Handle]:
        return self._handle_type

    def _check_key(self, handle: Handle) -> int:
        if not isinstance(handle, self._handle_type):
            raise TypeError(
                f"expected {self._handle_type.__name__} handle, got {type(handle).__name__}"
            )
        return handle.idx

    def __getitem__(self, handle: Handle) -> np.ndarray:
        return self._data[self._check_key(handle)]

    def __setitem__(self, handle: Handle, value) -> None:
        self._data[self._check_key(handle)] = value

    def __len__(self) -> int:
        return self._data.shape[0]

    def __iter__(self) -> Iterator[Handle]:
        return (self._handle_type(i) for i in range(self._data.shape[0]))

    def items(self) -> Iterator[Tuple[Handle, np.ndarray]]:
        for i in range(self._data.shape[0]):
            yield self._handle_type(i), self._data[i]

    def fill(self, value=0.0) -> None:
        self._data[:] = value

    def __repr__(self):
        return f"NormalProperty({self._handle_type.__name__}, n={len(self)})"
