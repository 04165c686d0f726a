"""A square tile of ocean surface driven by a wave simulation."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

import numpy as np

from oceanwaves.submesh import Mesh, SubMesh
from oceanwaves.tangent_space import compute_vertex_normals, compute_vertex_tbn

_log = logging.getLogger(__name__)

ABOVE_OCEAN_MESH_NAME = "AboveOceanTileMesh"
BELOW_OCEAN_MESH_NAME = "BelowOceanTileMesh"

# Bump map scaling: texture coordinates advance by this fraction of a cell size.
_TEX_SCALE = 0.1


class WaveSimulation(Protocol):
    """A wave simulation sampled on an nx * ny grid, indexed iy * nx + ix."""

    def set_time(self, time: float) -> None:
        ...

    def set_wind_velocity(self, ux: float, uy: float) -> None:
        ...

    def set_steepness(self, value: float) -> None:
        ...

    def elevation_at(self) -> Sequence[float]:
        """Surface heights."""
        ...

    def displacement_at(self) -> tuple[Sequence[float], Sequence[float]]:
        """Horizontal displacements (sx, sy)."""
        ...

    def displacement_and_deriv_at(self) -> tuple[Sequence[float], ...]:
        """(h, sx, sy, dhdx, dhdy, dsxdx, dsydy, dsxdy)."""
        ...


def _count(value, what: str) -> int:
    if isinstance(value, bool) or int(value) != value or value < 1:
        raise ValueError(f"{what} must be a positive integer, got {value!r}")
    return int(value)


class OceanTile:
    """A tile of (nx + 1) * (ny + 1) vertices and 2 * nx * ny faces.

    The outer row and column of vertices (the skirt) repeat the first row
    and column, as the wave field is periodic over the tile.
    """

    def __init__(self, nx, ny, lx, ly, wave_sim: WaveSimulation,
                 has_visuals=True) -> None:
        self._nx = _count(nx, "nx")
        self._ny = _count(ny, "ny")
        self._lx = float(lx)
        self._ly = float(ly)
        self._wave_sim = wave_sim
        self._has_visuals = bool(has_visuals)
        self._created = False

        self._vertices0 = np.zeros((0, 3))
        self._vertices = np.zeros((0, 3))
        self._tex_coords = np.zeros((0, 2))
        self._faces = np.zeros((0, 3), dtype=int)
        self._tangents = np.zeros((0, 3))
        self._bitangents = np.zeros((0, 3))
        self._normals = np.zeros((0, 3))
        self._w_index = np.zeros(0, dtype=int)

    # Configuration

    def tile_size(self) -> tuple[float, float]:
        """Size of the tile in metres."""
        return (self._lx, self._ly)

    def cell_count(self) -> tuple[int, int]:
        """Number of cells in each direction."""
        return (self._nx, self._ny)

    def set_wind_velocity(self, ux, uy) -> None:
        self._wave_sim.set_wind_velocity(ux, uy)

    def set_steepness(self, value) -> None:
        self._wave_sim.set_steepness(value)

    # Construction

    def create(self) -> None:
        """Build the flat tile: vertices, texture coordinates and faces."""
        nx, ny = self._nx, self._ny
        dx = self._lx / nx
        dy = self._ly / ny
        _log.info("OceanTile: create tile")
        _log.info("Resolution:    %d, %d", nx, ny)
        _log.info("NumFaces:      %d", 2 * nx * ny)
        _log.info("TileSize:      %g, %g", self._lx, self._ly)
        _log.info("Spacing:       %g, %g", dx, dy)

        ix, iy = np.meshgrid(np.arange(nx + 1), np.arange(ny + 1))
        ix = ix.ravel()
        iy = iy.ravel()
        self._vertices0 = np.column_stack([
            ix * dx - self._lx / 2.0,
            iy * dy - self._ly / 2.0,
            np.zeros(ix.size),
        ])
        self._vertices = self._vertices0.copy()
        # Texture coordinates (u, v): top left (0, 0), bottom right (1, 1).
        self._tex_coords = np.column_stack([
            ix * (_TEX_SCALE * dx),
            1.0 - iy * (_TEX_SCALE * dy),
        ])

        faces = []
        for cy in range(ny):
            for cx in range(nx):
                idx0 = cy * (nx + 1) + cx
                idx1 = idx0 + 1
                idx2 = (cy + 1) * (nx + 1) + cx + 1
                idx3 = (cy + 1) * (nx + 1) + cx
                faces.append((idx0, idx1, idx2))
                faces.append((idx0, idx2, idx3))
        self._faces = np.array(faces, dtype=int).reshape(-1, 3)

        n = len(self._vertices)
        self._tangents = np.zeros((n, 3))
        self._bitangents = np.zeros((n, 3))
        self._normals = np.zeros((n, 3))

        # Simulated sample feeding each mesh vertex, skirt included.
        self._w_index = (iy % ny) * nx + (ix % nx)
        self._created = True

    def create_mesh(self) -> Mesh:
        """Create the tile and return a new mesh for the surface seen from above."""
        self.create()
        return self.build_mesh(ABOVE_OCEAN_MESH_NAME, 0.0, False)

    def build_mesh(self, name, offset_z, reverse_orientation) -> Mesh:
        """A new mesh of the current tile state, raised by offset_z."""
        self._require_created()
        _log.info("OceanTile: creating mesh")
        mesh = Mesh(name)
        submesh = SubMesh()
        for vertex, normal, tangent, uv in zip(
                self._vertices, self._normals, self._tangents, self._tex_coords):
            submesh.add_vertex(vertex[0], vertex[1], vertex[2] + offset_z)
            submesh.add_normal(*normal)
            submesh.add_tangent(*tangent)
            submesh.add_tex_coord(*uv)
        for a, b, c in self._faces:
            for index in ((a, c, b) if reverse_orientation else (a, b, c)):
                submesh.add_index(int(index))
        mesh.add_submesh(submesh)
        _log.info("OceanTile: mesh created.")
        return mesh

    # Tangent space by finite differences over the mesh

    def compute_normals(self) -> None:
        """Vertex normals from the faces of the current vertex positions."""
        self._require_created()
        self._normals = compute_vertex_normals(self._vertices, self._faces)

    def compute_tangent_space(self) -> None:
        """Vertex tangents, bitangents and normals from the faces."""
        self._require_created()
        tbn = compute_vertex_tbn(self._vertices, self._tex_coords, self._faces)
        self._tangents, self._bitangents, self._normals = tbn

    # Time evolution

    def update(self, time) -> None:
        """Move the vertices to the wave surface at the given time."""
        self._require_created()
        self._wave_sim.set_time(time)
        w = self._w_index

        if self._has_visuals:
            fields = self._wave_sim.displacement_and_deriv_at()
            if len(fields) != 8:
                raise ValueError("displacement_and_deriv_at must return eight fields")
            h, sx, sy, dhdx, dhdy, dsxdx, dsydy, dsxdy = (
                self._field(f)[w] for f in fields)
            self._displace(h, sx, sy)

            self._tangents = np.column_stack([dsydy + 1.0, dsxdy, dhdy])
            self._bitangents = np.column_stack([dsxdy, dsxdx + 1.0, dhdx])
            # The change from matrix to cartesian indexing reflects the
            # surface in the line x = y, which flips its orientation.
            self._normals = -np.cross(self._tangents, self._bitangents)
        else:
            h = self._field(self._wave_sim.elevation_at())[w]
            sx, sy = self._wave_sim.displacement_at()
            self._displace(h, self._field(sx)[w], self._field(sy)[w])

    def update_mesh(self, time, mesh: Mesh) -> None:
        """Update the tile and copy its state into the mesh's first submesh."""
        self.update(time)
        submesh = mesh.submesh(0)
        for i, (vertex, normal, tangent, uv) in enumerate(zip(
                self._vertices, self._normals, self._tangents, self._tex_coords)):
            submesh.set_vertex(i, vertex)
            submesh.set_normal(i, normal)
            submesh.set_tangent(i, tangent)
            submesh.set_tex_coord(i, uv)

    # Access

    def vertex_count(self) -> int:
        return len(self._vertices)

    def vertex(self, index) -> np.ndarray:
        return self._vertices[self._index(index, len(self._vertices))].copy()

    def uv0(self, index) -> np.ndarray:
        return self._tex_coords[self._index(index, len(self._tex_coords))].copy()

    def face_count(self) -> int:
        return len(self._faces)

    def face(self, index) -> tuple[int, int, int]:
        a, b, c = self._faces[self._index(index, len(self._faces))]
        return (int(a), int(b), int(c))

    def vertices(self) -> np.ndarray:
        """Current vertex positions, shape ((nx + 1) * (ny + 1), 3)."""
        return self._vertices.copy()

    # Helpers

    def _require_created(self) -> None:
        if not self._created:
            raise RuntimeError("the tile has not been created; call create() first")

    def _field(self, values) -> np.ndarray:
        arr = np.asarray(values, dtype=float).ravel()
        expected = self._nx * self._ny
        if arr.size != expected:
            raise ValueError(f"wave field has {arr.size} samples, expected {expected}")
        return arr

    def _displace(self, h: np.ndarray, sx: np.ndarray, sy: np.ndarray) -> None:
        self._vertices = self._vertices0 + np.column_stack([sy, sx, h])

    @staticmethod
    def _index(index, count: int) -> int:
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise TypeError(f"index must be an integer, got {index!r}")
        if index < 0 or index >= count:
            raise IndexError(f"index {index} out of range for {count} entries")
        return int(index)