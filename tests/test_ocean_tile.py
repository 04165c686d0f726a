import numpy as np
import pytest

from oceanwaves.ocean_tile import OceanTile
from oceanwaves.submesh import Mesh


class FakeWaveSim:
    def __init__(self, nx, ny, h=None, sx=0.0, sy=0.0, derivs=None):
        size = nx * ny
        self.size = size
        self.h = np.zeros(size) if h is None else np.asarray(h, dtype=float)
        self.sx = np.full(size, sx)
        self.sy = np.full(size, sy)
        self.derivs = derivs or [np.zeros(size)] * 5
        self.times = []
        self.wind = None
        self.steepness = None

    def set_time(self, time):
        self.times.append(time)

    def set_wind_velocity(self, ux, uy):
        self.wind = (ux, uy)

    def set_steepness(self, value):
        self.steepness = value

    def elevation_at(self):
        return self.h

    def displacement_at(self):
        return self.sx, self.sy

    def displacement_and_deriv_at(self):
        return (self.h, self.sx, self.sy, *self.derivs)


def make_tile(nx=2, ny=3, lx=20.0, ly=30.0, has_visuals=True, **sim_kwargs):
    sim = FakeWaveSim(nx, ny, **sim_kwargs)
    tile = OceanTile(nx, ny, lx, ly, sim, has_visuals)
    return tile, sim


def test_create_counts_and_layout():
    tile, _ = make_tile()
    tile.create()
    assert tile.vertex_count() == 3 * 4
    assert tile.face_count() == 2 * 2 * 3
    np.testing.assert_allclose(tile.vertex(0), [-10.0, -15.0, 0.0])
    np.testing.assert_allclose(tile.vertex(tile.vertex_count() - 1), [10.0, 15.0, 0.0])
    assert tile.face(0) == (0, 1, 4)
    assert tile.face(1) == (0, 4, 3)
    assert tile.tile_size() == (20.0, 30.0)
    assert tile.cell_count() == (2, 3)


def test_texture_coordinates():
    tile, _ = make_tile()
    tile.create()
    np.testing.assert_allclose(tile.uv0(0), [0.0, 1.0])
    # u grows along x, v shrinks along y
    assert tile.uv0(1)[0] > tile.uv0(0)[0]
    assert tile.uv0(3)[1] < tile.uv0(0)[1]


def test_update_before_create_raises():
    tile, _ = make_tile()
    with pytest.raises(RuntimeError):
        tile.update(0.0)


def test_invalid_cell_count():
    with pytest.raises(ValueError):
        OceanTile(0, 2, 1.0, 1.0, FakeWaveSim(1, 2))


def test_index_out_of_range():
    tile, _ = make_tile()
    tile.create()
    with pytest.raises(IndexError):
        tile.vertex(tile.vertex_count())
    with pytest.raises(IndexError):
        tile.face(-1)


def test_update_displaces_vertices_and_sets_time():
    tile, sim = make_tile(h=np.full(6, 0.5), sx=0.2, sy=0.3)
    tile.create()
    before = tile.vertices()
    tile.update(4.0)
    assert sim.times == [4.0]
    after = tile.vertices()
    # x moves by sy, y by sx, z by h
    np.testing.assert_allclose(after - before, np.tile([0.3, 0.2, 0.5], (len(before), 1)))


def test_update_with_visuals_sets_flat_tangent_space():
    tile, _ = make_tile()
    tile.create()
    tile.update(0.0)
    mesh = tile.build_mesh("m", 0.0, False)
    sub = mesh.submesh(0)
    np.testing.assert_allclose(sub.tangents, np.tile([1.0, 0.0, 0.0], (12, 1)))
    np.testing.assert_allclose(sub.normals, np.tile([0.0, 0.0, -1.0], (12, 1)))


@pytest.mark.parametrize("has_visuals", [True, False])
def test_skirt_is_periodic(has_visuals):
    nx, ny = 2, 3
    tile, _ = make_tile(nx=nx, ny=ny, has_visuals=has_visuals,
                        h=np.arange(nx * ny, dtype=float))
    tile.create()
    tile.update(1.0)
    z = tile.vertices()[:, 2].reshape(ny + 1, nx + 1)
    np.testing.assert_allclose(z[:ny, :nx], np.arange(nx * ny).reshape(ny, nx))
    np.testing.assert_allclose(z[ny, :], z[0, :])
    np.testing.assert_allclose(z[:, nx], z[:, 0])


def test_bad_field_size_raises():
    tile, sim = make_tile()
    sim.h = np.zeros(5)
    tile.create()
    with pytest.raises(ValueError):
        tile.update(0.0)


def test_create_mesh_contents():
    tile, _ = make_tile()
    mesh = tile.create_mesh()
    assert isinstance(mesh, Mesh)
    assert mesh.name == "AboveOceanTileMesh"
    sub = mesh.submesh(0)
    np.testing.assert_allclose(sub.vertices, tile.vertices())
    assert sub.tangent_count() == tile.vertex_count()
    assert sub.indices[:3] == list(tile.face(0))
    assert len(sub.indices) == 3 * tile.face_count()


def test_build_mesh_reverse_and_offset():
    tile, _ = make_tile()
    tile.create()
    mesh = tile.build_mesh("below", -0.05, True)
    sub = mesh.submesh(0)
    a, b, c = tile.face(0)
    assert sub.indices[:3] == [a, c, b]
    np.testing.assert_allclose(sub.vertices[:, 2], tile.vertices()[:, 2] - 0.05)


def test_update_mesh_copies_vertices():
    tile, _ = make_tile(h=np.full(6, 0.7))
    mesh = tile.create_mesh()
    tile.update_mesh(2.0, mesh)
    np.testing.assert_allclose(mesh.submesh(0).vertices, tile.vertices())
    np.testing.assert_allclose(mesh.submesh(0).vertices[:, 2], 0.7)


def test_compute_normals_flat_tile():
    tile, _ = make_tile()
    tile.create()
    tile.compute_normals()
    normals = tile.build_mesh("m", 0.0, False).submesh(0).normals
    np.testing.assert_allclose(normals, np.tile([0.0, 0.0, 1.0], (12, 1)))


def test_compute_tangent_space_orthonormal():
    tile, _ = make_tile()
    tile.create()
    tile.compute_tangent_space()
    sub = tile.build_mesh("m", 0.0, False).submesh(0)
    np.testing.assert_allclose(np.linalg.norm(sub.tangents, axis=1), 1.0)
    np.testing.assert_allclose(np.einsum("ij,ij->i", sub.tangents, sub.normals), 0.0, atol=1e-12)
    np.testing.assert_allclose(sub.normals, np.tile([0.0, 0.0, 1.0], (12, 1)))


def test_wind_and_steepness_forwarded():
    tile, sim = make_tile()
    tile.set_wind_velocity(5.0, -2.0)
    tile.set_steepness(0.8)
    assert sim.wind == (5.0, -2.0)
    assert sim.steepness == 0.8