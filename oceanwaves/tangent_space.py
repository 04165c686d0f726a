"""Tangent space (tangent, bitangent, normal) for textured triangle meshes.

Texture coordinates follow the convention with v = 0 at the top of a
texture and v = 1 at the bottom; the basis is corrected for it.
"""

from __future__ import annotations

from typing import NamedTuple

import numpy as np

_ZERO_LENGTH = 1.0e-6


class TangentSpace(NamedTuple):
    tangent: np.ndarray
    bitangent: np.ndarray
    normal: np.ndarray


def _normalized(v: np.ndarray) -> np.ndarray:
    """Unit vector along v; vectors of (near) zero length are left as they are."""
    length = float(np.linalg.norm(v))
    if abs(length) <= _ZERO_LENGTH:
        return v.copy()
    return v / length


def _normalized_rows(arr: np.ndarray) -> np.ndarray:
    lengths = np.linalg.norm(arr, axis=1)
    out = arr.copy()
    mask = np.abs(lengths) > _ZERO_LENGTH
    out[mask] /= lengths[mask, None]
    return out


def _points(values, width: int, what: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        arr = arr.reshape(0, width)
    if arr.ndim != 2 or arr.shape[1] != width:
        raise ValueError(f"{what} must have shape (n, {width}), got {arr.shape}")
    return arr


def _faces(faces, count: int) -> np.ndarray:
    arr = np.asarray(faces, dtype=int)
    if arr.size == 0:
        return arr.reshape(0, 3)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"faces must have shape (m, 3), got {arr.shape}")
    if arr.min() < 0 or arr.max() >= count:
        raise IndexError("face refers to a vertex that does not exist")
    return arr


def compute_face_tbn(p0, p1, p2, uv0, uv1, uv2) -> TangentSpace:
    """Unit tangent, bitangent and normal of one textured triangle."""
    p0, p1, p2 = (np.asarray(p, dtype=float) for p in (p0, p1, p2))
    uv0, uv1, uv2 = (np.asarray(uv, dtype=float) for uv in (uv0, uv1, uv2))
    vsgn = -1.0
    edge1 = p1 - p0
    edge2 = p2 - p0
    duv1 = uv1 - uv0
    duv2 = uv2 - uv0

    det = duv1[0] * duv2[1] - duv2[0] * duv1[1]
    if det == 0.0:
        raise ValueError("texture coordinates of the triangle are degenerate")
    f = 1.0 / det * vsgn

    tangent = _normalized(f * (duv2[1] * edge1 - duv1[1] * edge2) * vsgn)
    bitangent = _normalized(f * (-duv2[0] * edge1 + duv1[0] * edge2))
    normal = _normalized(np.cross(tangent, bitangent))
    return TangentSpace(tangent, bitangent, normal)


def compute_vertex_tbn(vertices, tex_coords, faces) -> TangentSpace:
    """Per-vertex tangent space: face bases summed over adjacent faces, then normalised.

    Each field of the result is an (n, 3) array.
    """
    verts = _points(vertices, 3, "vertices")
    uvs = _points(tex_coords, 2, "tex_coords")
    if len(uvs) != len(verts):
        raise ValueError("need one texture coordinate per vertex")
    face_arr = _faces(faces, len(verts))

    tangents = np.zeros_like(verts)
    bitangents = np.zeros_like(verts)
    normals = np.zeros_like(verts)
    for face in face_arr:
        t, b, n = compute_face_tbn(*verts[face], *uvs[face])
        tangents[face] += t
        bitangents[face] += b
        normals[face] += n

    return TangentSpace(
        _normalized_rows(tangents),
        _normalized_rows(bitangents),
        _normalized_rows(normals),
    )


def compute_vertex_normals(vertices, faces) -> np.ndarray:
    """Per-vertex normals from the sum of the unit normals of adjacent faces."""
    verts = _points(vertices, 3, "vertices")
    face_arr = _faces(faces, len(verts))
    normals = np.zeros_like(verts)
    for face in face_arr:
        v0, v1, v2 = verts[face]
        normals[face] += _normalized(np.cross(v1 - v0, v2 - v0))
    return _normalized_rows(normals)