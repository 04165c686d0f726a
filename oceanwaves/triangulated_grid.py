"""A regular triangulated grid with point location and height queries."""

from __future__ import annotations

from typing import NamedTuple, Optional, Sequence

import numpy as np

from oceanwaves.hydrodynamics import TriangleMesh

_INSIDE_TOL = 1.0e-12
_DEGENERATE_TOL = 1.0e-300


class HeightQuery(NamedTuple):
    """Heights for a batch of queries and whether every query was answered."""

    heights: np.ndarray
    found_all: bool


def _as_point(query: Sequence[float]) -> np.ndarray:
    arr = np.asarray(query, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"expected a 3D point, got shape {arr.shape}")
    return arr


class TriangulatedGrid:
    """A rectangular tile of nx by ny cells split into 2 * nx * ny triangles.

    The tile is centred on the origin. Each cell is split along the diagonal
    from its lower left to its upper right corner. Point location works on the
    projection onto the xy-plane; the triangulation keeps its connectivity
    when points are moved.
    """

    def __init__(self, nx, ny, lx, ly) -> None:
        if int(nx) != nx or int(ny) != ny or nx < 1 or ny < 1:
            raise ValueError(f"cell counts must be positive integers, got ({nx}, {ny})")
        self._nx = int(nx)
        self._ny = int(ny)
        self._lx = float(lx)
        self._ly = float(ly)
        self._origin = np.zeros(3)
        self._points0 = np.zeros((0, 3))
        self._points = np.zeros((0, 3))
        self._indices = np.zeros((0, 3), dtype=int)
        self._infinite_indices = np.zeros((0, 2), dtype=int)
        # Vertex positions as seen by the triangulation; None until built.
        self._tri_points: Optional[np.ndarray] = None
        self._tri_faces = np.zeros((0, 3), dtype=int)

    def create_mesh(self) -> None:
        """Build the grid points, the face indices and the boundary edges."""
        nx, ny = self._nx, self._ny
        nx_plus1 = nx + 1
        xs = np.arange(nx_plus1) * (self._lx / nx) - self._lx / 2.0
        ys = np.arange(ny + 1) * (self._ly / ny) - self._ly / 2.0
        gx, gy = np.meshgrid(xs, ys)
        points = np.column_stack([gx.ravel(), gy.ravel(), np.zeros(gx.size)])
        self._points = points
        self._points0 = points.copy()

        faces = []
        for iy in range(ny):
            for ix in range(nx):
                idx0 = iy * nx_plus1 + ix
                idx1 = idx0 + 1
                idx2 = (iy + 1) * nx_plus1 + ix + 1
                idx3 = (iy + 1) * nx_plus1 + ix
                faces.append((idx0, idx1, idx2))
                faces.append((idx0, idx2, idx3))
        self._indices = np.array(faces, dtype=int).reshape(-1, 3)

        # Boundary edges, counter clockwise around the grid.
        edges = [(0, 0)] * (2 * nx + 2 * ny)
        for ix in range(nx):
            idx = ix
            edges[ix] = (idx, idx + 1)
            idx = ny * nx_plus1 + ix
            edges[2 * nx + ny - 1 - ix] = (idx + 1, idx)
        for iy in range(ny):
            idx = iy * nx_plus1 + nx
            edges[nx + iy] = (idx, idx + nx_plus1)
            idx = iy * nx_plus1
            edges[2 * nx + 2 * ny - 1 - iy] = (idx + nx_plus1, idx)
        self._infinite_indices = np.array(edges, dtype=int).reshape(-1, 2)

    def create_triangulation(self) -> None:
        """Build the triangulation over the current points and faces."""
        self._tri_points = self._points.copy()
        self._tri_faces = self._indices.copy()

    # Queries

    def _barycentric(self, query: np.ndarray) -> tuple[Optional[int], Optional[np.ndarray]]:
        """Face containing the query in xy and its barycentric coordinates."""
        tri = self._tri_points[self._tri_faces]
        a = tri[:, 0, :2]
        v0 = tri[:, 1, :2] - a
        v1 = tri[:, 2, :2] - a
        v2 = query[:2] - a
        d = v0[:, 0] * v1[:, 1] - v1[:, 0] * v0[:, 1]
        valid = np.abs(d) > _DEGENERATE_TOL
        safe_d = np.where(valid, d, 1.0)
        beta = (v2[:, 0] * v1[:, 1] - v1[:, 0] * v2[:, 1]) / safe_d
        gamma = (v0[:, 0] * v2[:, 1] - v2[:, 0] * v0[:, 1]) / safe_d
        alpha = 1.0 - beta - gamma
        inside = valid & (alpha >= -_INSIDE_TOL) & (beta >= -_INSIDE_TOL) & (gamma >= -_INSIDE_TOL)
        hits = np.flatnonzero(inside)
        if hits.size == 0:
            return None, None
        i = int(hits[0])
        return i, np.array([alpha[i], beta[i], gamma[i]])

    def _surface_z(self, query: np.ndarray) -> Optional[float]:
        if self._tri_points is None or len(self._tri_faces) == 0:
            return None
        face, bary = self._barycentric(query)
        if face is None:
            return None
        zs = self._tri_points[self._tri_faces[face], 2]
        return float(bary @ zs)

    def locate(self, query) -> Optional[int]:
        """Index of the face containing the query point in xy.

        Returns -1 for a point outside the grid and None when there is no
        triangulation to search.
        """
        q = _as_point(query)
        if self._tri_points is None or len(self._tri_faces) == 0:
            return None
        face, _ = self._barycentric(q)
        return -1 if face is None else face

    def height(self, query) -> Optional[float]:
        """Vertical distance from the query point up to the surface, or None."""
        q = _as_point(query)
        z = self._surface_z(q)
        return None if z is None else z - float(q[2])

    def heights(self, queries) -> HeightQuery:
        """Heights for many queries; unanswered queries get 0.0."""
        results = []
        found_all = True
        for query in queries:
            h = self.height(query)
            found_all &= h is not None
            results.append(0.0 if h is None else h)
        return HeightQuery(np.array(results, dtype=float), found_all)

    def interpolate(self, patch: "TriangulatedGrid") -> bool:
        """Set the height of each patch point to the surface height here.

        Points outside this grid get height 0.0. Returns True if every point
        was found.
        """
        found_all = True
        for point in patch._points:
            z = self._surface_z(point)
            found_all &= z is not None
            point[2] = 0.0 if z is None else z
        return found_all

    # Updates

    def _sync_triangulation(self) -> None:
        if self._tri_points is not None:
            self._tri_points = self._points.copy()

    def apply_pose(self, x, y) -> None:
        """Slide the grid in the xy-plane so that its centre is at (x, y)."""
        self._origin = np.array([float(x), float(y), 0.0])
        self._points = self._points0 + np.array([float(x), float(y), 0.0])
        self._sync_triangulation()

    def update_points(self, points) -> None:
        """Replace point positions from a sequence of points or a TriangleMesh.

        Only as many points as both sides hold are copied.
        """
        source = points.vertices if isinstance(points, TriangleMesh) else points
        arr = np.asarray(source, dtype=float)
        if arr.size == 0:
            arr = arr.reshape(0, 3)
        if arr.ndim != 2 or arr.shape[1] != 3:
            raise ValueError(f"points must have shape (n, 3), got {arr.shape}")
        n = min(len(arr), len(self._points))
        self._points[:n] = arr[:n]
        self._sync_triangulation()

    # Accessors

    def points(self) -> np.ndarray:
        """Current point positions, shape (n, 3)."""
        return self._points.copy()

    def indices(self) -> np.ndarray:
        """Face vertex indices, shape (2 * nx * ny, 3)."""
        return self._indices.copy()

    def infinite_indices(self) -> np.ndarray:
        """Boundary edges in counter clockwise order, shape (2 * nx + 2 * ny, 2)."""
        return self._infinite_indices.copy()

    def origin(self) -> np.ndarray:
        """Centre of the grid."""
        return self._origin.copy()

    def tile_size(self) -> tuple[float, float]:
        return (self._lx, self._ly)

    def cell_count(self) -> tuple[int, int]:
        return (self._nx, self._ny)

    def is_valid(self) -> bool:
        """Check the triangulation: indices in range, every vertex used and
        every face non-degenerate and counter clockwise in xy."""
        if self._tri_points is None:
            return True
        faces = self._tri_faces
        n = len(self._tri_points)
        if len(faces) == 0:
            return n == 0
        if faces.min() < 0 or faces.max() >= n:
            return False
        if len(np.unique(faces)) != n:
            return False
        tri = self._tri_points[faces]
        v0 = tri[:, 1, :2] - tri[:, 0, :2]
        v1 = tri[:, 2, :2] - tri[:, 0, :2]
        d = v0[:, 0] * v1[:, 1] - v1[:, 0] * v0[:, 1]
        return bool(np.all(d > 0.0))


def create_grid(nx, ny, lx, ly) -> TriangulatedGrid:
    """Create a grid with its mesh and triangulation built."""
    grid = TriangulatedGrid(nx, ny, lx, ly)
    grid.create_mesh()
    grid.create_triangulation()
    return grid