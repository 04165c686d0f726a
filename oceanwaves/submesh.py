"""Renderable meshes made of sub-meshes that carry per-vertex tangents."""

from __future__ import annotations

from typing import Iterator, Sequence

import numpy as np


def _vec(value: Sequence[float], size: int, what: str) -> np.ndarray:
    arr = np.asarray(value, dtype=float)
    if arr.shape != (size,):
        raise ValueError(f"{what} must have {size} components, got shape {arr.shape}")
    return arr.copy()


def _check_index(index: int, count: int, what: str) -> int:
    if not isinstance(index, (int, np.integer)) or isinstance(index, bool):
        raise TypeError(f"{what} index must be an integer, got {index!r}")
    if index < 0 or index >= count:
        raise IndexError(f"{what} index {index} out of range for {count} entries")
    return int(index)


class SubMesh:
    """Vertices, normals, tangents, texture coordinates and triangle indices."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._vertices: list[np.ndarray] = []
        self._normals: list[np.ndarray] = []
        self._tangents: list[np.ndarray] = []
        self._tex_coords: list[np.ndarray] = []
        self._indices: list[int] = []

    # Adding data

    def add_vertex(self, x, y, z) -> None:
        self._vertices.append(np.array([x, y, z], dtype=float))

    def add_normal(self, x, y, z) -> None:
        self._normals.append(np.array([x, y, z], dtype=float))

    def add_tangent(self, x, y, z) -> None:
        self._tangents.append(np.array([x, y, z], dtype=float))

    def add_tex_coord(self, u, v) -> None:
        self._tex_coords.append(np.array([u, v], dtype=float))

    def add_index(self, index) -> None:
        if not isinstance(index, (int, np.integer)) or isinstance(index, bool):
            raise TypeError(f"index must be an integer, got {index!r}")
        if index < 0:
            raise ValueError(f"index must not be negative, got {index}")
        self._indices.append(int(index))

    # Replacing data

    def set_vertex(self, index, value) -> None:
        i = _check_index(index, len(self._vertices), "vertex")
        self._vertices[i] = _vec(value, 3, "vertex")

    def set_normal(self, index, value) -> None:
        i = _check_index(index, len(self._normals), "normal")
        self._normals[i] = _vec(value, 3, "normal")

    def set_tangent(self, index, value) -> None:
        i = _check_index(index, len(self._tangents), "tangent")
        self._tangents[i] = _vec(value, 3, "tangent")

    def set_tex_coord(self, index, value) -> None:
        i = _check_index(index, len(self._tex_coords), "texture coordinate")
        self._tex_coords[i] = _vec(value, 2, "texture coordinate")

    # Reading data

    def tangent(self, index) -> np.ndarray:
        """The tangent at an index."""
        i = _check_index(index, len(self._tangents), "tangent")
        return self._tangents[i].copy()

    def has_tangent(self, index) -> bool:
        """Whether a tangent exists at the index."""
        return 0 <= index < len(self._tangents)

    def tangent_count(self) -> int:
        return len(self._tangents)

    @property
    def vertices(self) -> np.ndarray:
        return np.array(self._vertices, dtype=float).reshape(-1, 3)

    @property
    def normals(self) -> np.ndarray:
        return np.array(self._normals, dtype=float).reshape(-1, 3)

    @property
    def tangents(self) -> np.ndarray:
        return np.array(self._tangents, dtype=float).reshape(-1, 3)

    @property
    def tex_coords(self) -> np.ndarray:
        return np.array(self._tex_coords, dtype=float).reshape(-1, 2)

    @property
    def indices(self) -> list[int]:
        return list(self._indices)


class Mesh:
    """A named collection of sub-meshes."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._submeshes: list[SubMesh] = []

    def add_submesh(self, submesh: SubMesh) -> None:
        if not isinstance(submesh, SubMesh):
            raise TypeError(f"expected a SubMesh, got {type(submesh).__name__}")
        self._submeshes.append(submesh)

    def submesh(self, index) -> SubMesh:
        i = _check_index(index, len(self._submeshes), "submesh")
        return self._submeshes[i]

    def __len__(self) -> int:
        return len(self._submeshes)

    def __iter__(self) -> Iterator[SubMesh]:
        return iter(self._submeshes)