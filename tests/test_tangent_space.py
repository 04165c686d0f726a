import numpy as np
import pytest

from oceanwaves.tangent_space import (
    compute_face_tbn,
    compute_vertex_normals,
    compute_vertex_tbn,
)


def _grid(nx=3, ny=2, lx=6.0, ly=4.0, tex_scale=0.1, height=None):
    dx = lx / nx
    dy = ly / ny
    vertices = []
    uvs = []
    for iy in range(ny + 1):
        py = iy * dy - ly / 2.0
        for ix in range(nx + 1):
            px = ix * dx - lx / 2.0
            z = 0.0 if height is None else height(px, py)
            vertices.append((px, py, z))
            uvs.append((ix * tex_scale * dx, 1.0 - iy * tex_scale * dy))
    faces = []
    for iy in range(ny):
        for ix in range(nx):
            i0 = iy * (nx + 1) + ix
            i1 = i0 + 1
            i2 = (iy + 1) * (nx + 1) + ix + 1
            i3 = (iy + 1) * (nx + 1) + ix
            faces.append((i0, i1, i2))
            faces.append((i0, i2, i3))
    return np.array(vertices), np.array(uvs), np.array(faces)


def test_face_tbn_flat_triangle_points_up():
    t, b, n = compute_face_tbn(
        (0, 0, 0), (1, 0, 0), (1, 1, 0),
        (0.0, 1.0), (0.1, 1.0), (0.1, 0.9),
    )
    assert np.allclose(t, [1.0, 0.0, 0.0])
    assert np.allclose(b, [0.0, 1.0, 0.0])
    assert np.allclose(n, [0.0, 0.0, 1.0])


def test_face_tbn_is_unit_and_normal_orthogonal():
    t, b, n = compute_face_tbn(
        (0, 0, 0.2), (1, 0, 0.5), (1, 1, -0.1),
        (0.0, 1.0), (0.1, 1.0), (0.1, 0.9),
    )
    for v in (t, b, n):
        assert np.linalg.norm(v) == pytest.approx(1.0)
    assert np.dot(n, t) == pytest.approx(0.0, abs=1e-12)
    assert np.dot(n, b) == pytest.approx(0.0, abs=1e-12)


def test_face_tbn_degenerate_uv_raises():
    with pytest.raises(ValueError):
        compute_face_tbn(
            (0, 0, 0), (1, 0, 0), (1, 1, 0),
            (0.0, 0.0), (0.0, 0.0), (0.0, 0.0),
        )


def test_vertex_tbn_flat_grid_normals_agree_with_vertex_normals():
    vertices, uvs, faces = _grid()
    tbn = compute_vertex_tbn(vertices, uvs, faces)
    normals = compute_vertex_normals(vertices, faces)
    assert tbn.normal.shape == vertices.shape
    assert np.allclose(tbn.normal, normals)
    assert np.allclose(tbn.tangent[:, 2], 0.0)
    assert np.allclose(np.linalg.norm(tbn.bitangent, axis=1), 1.0)


def test_vertex_normals_tilted_plane_orthogonal_to_edges():
    vertices, _, faces = _grid(height=lambda x, y: 0.3 * x - 0.2 * y)
    normals = compute_vertex_normals(vertices, faces)
    assert np.allclose(np.linalg.norm(normals, axis=1), 1.0)
    for face in faces:
        v0, v1, v2 = vertices[face]
        for n in normals[face]:
            assert np.dot(n, v1 - v0) == pytest.approx(0.0, abs=1e-12)
            assert np.dot(n, v2 - v0) == pytest.approx(0.0, abs=1e-12)
    assert np.all(normals[:, 2] > 0.0)


def test_vertex_normals_reversed_faces_point_down():
    vertices, _, faces = _grid()
    up = compute_vertex_normals(vertices, faces)
    down = compute_vertex_normals(vertices, faces[:, [0, 2, 1]])
    assert np.allclose(down, -up)


def test_unused_vertex_keeps_zero_normal():
    vertices = np.array([(0, 0, 0), (1, 0, 0), (0, 1, 0), (5, 5, 5)], dtype=float)
    normals = compute_vertex_normals(vertices, [(0, 1, 2)])
    assert np.allclose(normals[3], 0.0)
    assert np.allclose(normals[:3], normals[0])


def test_face_index_out_of_range_raises():
    vertices = np.zeros((3, 3))
    with pytest.raises(IndexError):
        compute_vertex_normals(vertices, [(0, 1, 3)])


def test_tex_coord_count_mismatch_raises():
    vertices, uvs, faces = _grid()
    with pytest.raises(ValueError):
        compute_vertex_tbn(vertices, uvs[:-1], faces)