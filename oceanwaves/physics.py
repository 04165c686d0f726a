"""Hydrostatic and hydrodynamic helper functions for floating bodies."""

from __future__ import annotations

import math
from typing import NamedTuple, Protocol, Sequence

import numpy as np

GRAVITY = -9.81
"""Acceleration due to gravity (m s^-2), negative along z."""

GRAVITATIONAL_CONSTANT = 6.67408e-11
"""Newton's gravitational constant (m^3 kg^-1 s^-2)."""

WATER_DENSITY = 1025.0
"""Density of sea water (kg m^-3)."""

WATER_KINEMATIC_VISCOSITY = 1.0533e-6
"""Kinematic viscosity of sea water (m^2 s^-1)."""

_TOL = 1.0e-16


class DepthSampler(Protocol):
    """Anything that reports the depth of a point below the water surface."""

    def compute_depth(self, point: np.ndarray) -> float:
        ...


class AppliedForce(NamedTuple):
    """A force together with its point of application."""

    center: np.ndarray
    force: np.ndarray


def _point(p: Sequence[float]) -> np.ndarray:
    arr = np.asarray(p, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"expected a 3D point, got shape {arr.shape}")
    return arr


def _triangle(triangle: Sequence[Sequence[float]]) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    if len(triangle) != 3:
        raise ValueError("a triangle needs exactly three vertices")
    p0, p1, p2 = (_point(p) for p in triangle)
    return p0, p1, p2


def _normalize(v: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(v))
    if norm == 0.0:
        return np.zeros(3)
    return v / norm


def triangle_normal(triangle) -> np.ndarray:
    """Unit normal of a triangle following its vertex winding."""
    p0, p1, p2 = _triangle(triangle)
    return _normalize(np.cross(p1 - p0, p2 - p0))


def triangle_area(triangle) -> float:
    """Area of a triangle."""
    p0, p1, p2 = _triangle(triangle)
    return 0.5 * float(np.linalg.norm(np.cross(p1 - p0, p2 - p0)))


def triangle_centroid(triangle) -> np.ndarray:
    """Centroid of a triangle."""
    p0, p1, p2 = _triangle(triangle)
    return (p0 + p1 + p2) / 3.0


def _horizontal_intercept(h: np.ndarray, m: np.ndarray, l: np.ndarray) -> np.ndarray:
    """Point on edge H-L at the height of M."""
    dz = h[2] - l[2]
    if abs(dz) <= _TOL:
        return l.copy()
    t = (h[2] - m[2]) / dz
    return h + (l - h) * t


def center_of_force(f_a, f_b, a, b) -> np.ndarray:
    """Point of application of two parallel forces acting at a and b."""
    a = _point(a)
    b = _point(b)
    div = f_a + f_b
    if math.fabs(div) > _TOL:
        t = f_a / div
        return b + (a - b) * t
    return b.copy()


def deep_water_dispersion_to_omega(wavenumber) -> float:
    """Angular frequency of a deep water wave with the given wavenumber."""
    g = math.fabs(GRAVITY)
    return math.sqrt(g * wavenumber)


def deep_water_dispersion_to_wavenumber(omega) -> float:
    """Wavenumber of a deep water wave with the given angular frequency."""
    g = math.fabs(GRAVITY)
    return omega * omega / g


def viscous_drag_coefficient(rn) -> float:
    """ITTC 1957 friction coefficient for a Reynolds number.

    The Reynolds number is clamped below at 1.0E+3 to stay clear of the
    formula's pole at 1.0E+2.
    """
    r = max(1.0e3, rn)
    d = math.log10(r) - 2.0
    return 0.075 / (d * d)


def center_of_pressure_apex_up(z0, h, m, b) -> np.ndarray:
    """Centre of pressure of a triangle with apex H above a horizontal base."""
    h_pt = _point(h)
    m_pt = _point(m)
    b_pt = _point(b)
    alt = b_pt - h_pt
    height = h_pt[2] - m_pt[2]
    tc = 2.0 / 3.0
    div = 6.0 * z0 + 4.0 * height
    if math.fabs(div) > _TOL:
        tc = (4.0 * z0 + 3.0 * height) / div
    return h_pt + alt * tc


def center_of_pressure_apex_dn(z0, l, m, b) -> np.ndarray:
    """Centre of pressure of a triangle with apex L below a horizontal base."""
    l_pt = _point(l)
    m_pt = _point(m)
    b_pt = _point(b)
    alt = l_pt - b_pt
    height = m_pt[2] - l_pt[2]
    tc = 1.0 / 3.0
    div = 6.0 * z0 + 2.0 * height
    if math.fabs(div) > _TOL:
        tc = (2.0 * z0 + height) / div
    return b_pt + alt * tc


def buoyancy_force_at_center_of_pressure(depth_c, c, h, m, l, normal) -> AppliedForce:
    """Hydrostatic force on a triangle with vertices sorted high, mid, low.

    The triangle is split by a horizontal line through the mid vertex and
    the force on each part is applied at its centre of pressure.
    """
    c = _point(c)
    h = _point(h)
    m = _point(m)
    l = _point(l)
    normal = _point(normal)

    d = _horizontal_intercept(h, m, l)
    b = 0.5 * (m + d)

    f_upper = 0.0
    f_lower = 0.0
    cp_upper = b.copy()
    cp_lower = b.copy()

    if h[2] >= m[2]:
        z0 = depth_c - (h[2] - c[2])
        cp_upper = center_of_pressure_apex_up(z0, h, m, b)
        tri = (h, m, d)
        h_cu = depth_c + (c[2] - triangle_centroid(tri)[2])
        f_upper = WATER_DENSITY * GRAVITY * triangle_area(tri) * h_cu

    if m[2] > l[2]:
        z0 = depth_c + (c[2] - m[2])
        cp_lower = center_of_pressure_apex_dn(z0, l, m, b)
        tri = (l, m, d)
        h_cl = depth_c + (c[2] - triangle_centroid(tri)[2])
        f_lower = WATER_DENSITY * GRAVITY * triangle_area(tri) * h_cl

    force = normal * (f_upper + f_lower)
    center = center_of_force(f_upper, f_lower, cp_upper, cp_lower)
    return AppliedForce(center, force)


def buoyancy_force_at_centroid(sampler: DepthSampler, triangle) -> AppliedForce:
    """Hydrostatic force on a triangle using the depth at its centroid."""
    center = triangle_centroid(triangle)
    depth = sampler.compute_depth(center)
    normal = triangle_normal(triangle)
    area = triangle_area(triangle)
    force = normal * (WATER_DENSITY * GRAVITY * area * depth)
    return AppliedForce(center, force)


def _sort_indexes_descending(values: Sequence[float]) -> list[int]:
    return sorted(range(len(values)), key=lambda i: values[i], reverse=True)


def triangle_buoyancy_at_center_of_pressure(sampler: DepthSampler, triangle) -> AppliedForce:
    """Hydrostatic force on a triangle applied at its centre of pressure."""
    vertices = _triangle(triangle)
    order = _sort_indexes_descending([v[2] for v in vertices])
    h, m, l = (vertices[i] for i in order)
    centroid = triangle_centroid(vertices)
    depth_c = sampler.compute_depth(centroid)
    normal = triangle_normal(vertices)
    return buoyancy_force_at_center_of_pressure(depth_c, centroid, h, m, l, normal)


def compute_height_map(sampler: DepthSampler, triangle) -> tuple[float, float, float]:
    """Height of each triangle vertex above the water surface."""
    p0, p1, p2 = _triangle(triangle)
    return tuple(-sampler.compute_depth(p) for p in (p0, p1, p2))