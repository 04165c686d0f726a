"""Forces and torques on a rigid body floating in a wave field."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Sequence

import numpy as np

from oceanwaves.physics import (
    WATER_DENSITY,
    WATER_KINEMATIC_VISCOSITY,
    DepthSampler,
    triangle_area,
    triangle_buoyancy_at_center_of_pressure,
    triangle_centroid,
    triangle_normal,
    viscous_drag_coefficient,
)

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, np.integer)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"parameter {name!r} expects a boolean, got {value!r}")


def _as_float(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"parameter {name!r} expects a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"parameter {name!r} expects a number, got {value!r}") from exc


@dataclass
class HydrodynamicsParameters:
    """Switches and coefficients for the hydrodynamic force model."""

    damping_on: bool = True
    viscous_drag_on: bool = True
    pressure_drag_on: bool = True
    c_damp_l1: float = 1.0e-6
    c_damp_l2: float = 1.0e-6
    c_damp_r1: float = 1.0e-6
    c_damp_r2: float = 1.0e-6
    c_p_drag1: float = 1.0e2
    c_p_drag2: float = 1.0e2
    f_p_drag: float = 0.4
    c_s_drag1: float = 1.0e2
    c_s_drag2: float = 1.0e2
    f_s_drag: float = 0.4
    v_r_drag: float = 1.0

    # Names as they appear in model descriptions, mapped to fields.
    _BOOL_KEYS = {
        "damping_on": "damping_on",
        "viscous_drag_on": "viscous_drag_on",
        "pressure_drag_on": "pressure_drag_on",
    }
    _FLOAT_KEYS = {
        "cDampL1": "c_damp_l1",
        "cDampL2": "c_damp_l2",
        "cDampR1": "c_damp_r1",
        "cDampR2": "c_damp_r2",
        "cPDrag1": "c_p_drag1",
        "cPDrag2": "c_p_drag2",
        "fPDrag": "f_p_drag",
        "cSDrag1": "c_s_drag1",
        "cSDrag2": "c_s_drag2",
        "fSDrag": "f_s_drag",
        "vRDrag": "v_r_drag",
    }

    def update(self, values: Mapping[str, Any]) -> None:
        """Set parameters from a name/value mapping; absent names keep their value."""
        for key, attr in self._BOOL_KEYS.items():
            if key in values:
                setattr(self, attr, _as_bool(key, values[key]))
        for key, attr in self._FLOAT_KEYS.items():
            if key in values:
                setattr(self, attr, _as_float(key, values[key]))


class TriangleMesh:
    """A triangulated surface: vertex positions and faces of vertex indices."""

    def __init__(self, vertices, faces) -> None:
        verts = np.asarray(vertices, dtype=float)
        if verts.ndim != 2 or verts.shape[1] != 3:
            raise ValueError(f"vertices must have shape (n, 3), got {verts.shape}")
        face_arr = np.asarray(faces, dtype=int).reshape(-1, 3) if len(faces) else np.zeros((0, 3), int)
        if face_arr.size and (face_arr.min() < 0 or face_arr.max() >= len(verts)):
            raise IndexError("face refers to a vertex that does not exist")
        self.vertices = verts
        self.faces = face_arr

    def triangles(self) -> Iterator[np.ndarray]:
        """Yield each face as a (3, 3) array of vertex positions."""
        for face in self.faces:
            yield self.vertices[face]


@dataclass
class _TriangleProperties:
    normal: np.ndarray
    area: float
    height_map: tuple[float, float, float]
    vh: np.ndarray = field(default_factory=lambda: np.zeros(3))
    vm: np.ndarray = field(default_factory=lambda: np.zeros(3))
    vl: np.ndarray = field(default_factory=lambda: np.zeros(3))
    hh: float = math.nan
    hm: float = math.nan
    hl: float = math.nan
    sub_area: float = math.nan


@dataclass
class _SubmergedTriangleProperties:
    normal: np.ndarray
    centroid: np.ndarray
    area: float
    xr: np.ndarray = field(default_factory=lambda: np.zeros(3))
    vp: np.ndarray = field(default_factory=lambda: np.zeros(3))
    up: np.ndarray = field(default_factory=lambda: np.zeros(3))
    cos_theta: float = math.nan
    vn: np.ndarray = field(default_factory=lambda: np.zeros(3))
    vt: np.ndarray = field(default_factory=lambda: np.zeros(3))
    ut: np.ndarray = field(default_factory=lambda: np.zeros(3))
    uf: np.ndarray = field(default_factory=lambda: np.zeros(3))
    vf: np.ndarray = field(default_factory=lambda: np.zeros(3))


def _unit(v: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(v))
    if norm == 0.0:
        return np.zeros(3)
    return v / norm


def _vector(v, name: str) -> np.ndarray:
    arr = np.asarray(v, dtype=float)
    if arr.shape != (3,):
        raise ValueError(f"{name} must be a 3-vector, got shape {arr.shape}")
    return arr


class Hydrodynamics:
    """Buoyancy, drag and damping on a rigid body described by a surface mesh."""

    def __init__(self, params: HydrodynamicsParameters, mesh: TriangleMesh,
                 sampler: DepthSampler) -> None:
        self._params = params
        self._mesh = mesh
        self._sampler = sampler
        self._position = np.zeros(3)
        self._rotation = np.eye(3)
        self._lin_velocity = np.zeros(3)
        self._ang_velocity = np.zeros(3)
        self._waterline_length = 0.0
        self._area = 0.0
        self._submerged_area = 0.0
        self._submerged_triangles: list[np.ndarray] = []
        self._triangle_props: list[_TriangleProperties] = []
        self._submerged_props: list[_SubmergedTriangleProperties] = []
        self._waterline: list[tuple[np.ndarray, np.ndarray]] = []
        self._force = np.zeros(3)
        self._torque = np.zeros(3)

    def update(self, sampler: DepthSampler, position, rotation,
               lin_velocity, ang_velocity) -> None:
        """Recompute the force and torque for a new body state.

        ``rotation`` is the 3x3 rotation matrix of the body frame.
        """
        rot = np.asarray(rotation, dtype=float)
        if rot.shape != (3, 3):
            raise ValueError(f"rotation must be a 3x3 matrix, got shape {rot.shape}")
        self._sampler = sampler
        self._position = _vector(position, "position")
        self._rotation = rot
        self._lin_velocity = _vector(lin_velocity, "lin_velocity")
        self._ang_velocity = _vector(ang_velocity, "ang_velocity")

        self._force = np.zeros(3)
        self._torque = np.zeros(3)

        self._update_submerged_triangles()
        self._compute_areas()
        self._compute_waterline_length()
        self._compute_point_velocities()
        self._compute_buoyancy_force()

        if self._params.viscous_drag_on:
            self._compute_viscous_drag_force()
        if self._params.pressure_drag_on:
            self._compute_pressure_drag_force()
        if self._params.damping_on:
            self._compute_damping_force()

    def force(self) -> np.ndarray:
        """Total force from the last update."""
        return self._force.copy()

    def torque(self) -> np.ndarray:
        """Total torque about the centre of mass from the last update."""
        return self._torque.copy()

    def waterline(self) -> list[tuple[np.ndarray, np.ndarray]]:
        """Segments where the surface crosses the water line."""
        return list(self._waterline)

    def submerged_triangles(self) -> list[np.ndarray]:
        """The submerged parts of the surface as (3, 3) arrays."""
        return list(self._submerged_triangles)

    def reynolds_number(self) -> float:
        """Reynolds number from body speed and waterline length."""
        u = float(np.linalg.norm(self._lin_velocity))
        return u * self._waterline_length / WATER_KINEMATIC_VISCOSITY

    # Submerged surface

    def _update_submerged_triangles(self) -> None:
        self._submerged_triangles = []
        self._triangle_props = []
        self._submerged_props = []
        self._waterline = []

        mesh = self._mesh
        depths = [self._sampler.compute_depth(v) for v in mesh.vertices]

        for face in mesh.faces:
            triangle = mesh.vertices[face]
            props = _TriangleProperties(
                normal=triangle_normal(triangle),
                area=triangle_area(triangle),
                height_map=tuple(-depths[i] for i in face),
            )
            self._triangle_props.append(props)
            self._populate_submerged_triangle(triangle, props)

    def _populate_submerged_triangle(self, triangle: np.ndarray,
                                     props: _TriangleProperties) -> None:
        hmap = props.height_map
        ih, im, il = sorted(range(3), key=lambda i: hmap[i], reverse=True)
        props.hh, props.hm, props.hl = hmap[ih], hmap[im], hmap[il]
        props.vh, props.vm, props.vl = triangle[ih], triangle[im], triangle[il]

        if props.hh > 0:
            if props.hm > 0:
                if props.hl <= 0:
                    self._split_partially_submerged_1(props)
            else:
                self._split_partially_submerged_2(props)
        else:
            self._add_fully_submerged(props)

    def _add_submerged(self, tri: np.ndarray, normal: np.ndarray | None = None,
                       area: float | None = None) -> float:
        self._submerged_triangles.append(tri)
        sub = _SubmergedTriangleProperties(
            normal=triangle_normal(tri) if normal is None else normal,
            centroid=triangle_centroid(tri),
            area=triangle_area(tri) if area is None else area,
        )
        self._submerged_props.append(sub)
        return sub.area

    def _split_partially_submerged_1(self, props: _TriangleProperties) -> None:
        n, vh, vm, vl = props.normal, props.vh, props.vm, props.vl
        hh, hm, hl = props.hh, props.hm, props.hl

        tm = -hl / (hm - hl)
        th = -hl / (hh - hl)
        vmi = vl + (vm - vl) * tm
        vhi = vl + (vh - vl) * th

        tri0 = np.array([vl, vmi, vhi])
        if float(np.dot(n, triangle_normal(tri0))) < 0.0:
            tri0 = np.array([vl, vhi, vmi])

        props.sub_area = self._add_submerged(tri0)
        self._waterline.append((vmi, vhi))

    def _split_partially_submerged_2(self, props: _TriangleProperties) -> None:
        n, vh, vm, vl = props.normal, props.vh, props.vm, props.vl
        hh, hm, hl = props.hh, props.hm, props.hl

        tm = -hm / (hh - hm)
        tl = -hl / (hh - hl)
        vmi = vm + (vh - vm) * tm
        vli = vl + (vh - vl) * tl

        tri0 = np.array([vm, vmi, vl])
        tri1 = np.array([vmi, vli, vl])
        if float(np.dot(n, triangle_normal(tri0))) < 0.0:
            tri0 = np.array([vmi, vm, vl])
        if float(np.dot(n, triangle_normal(tri1))) < 0.0:
            tri1 = np.array([vli, vmi, vl])

        area0 = self._add_submerged(tri0)
        area1 = self._add_submerged(tri1)
        props.sub_area = area0 + area1
        self._waterline.append((vmi, vli))

    def _add_fully_submerged(self, props: _TriangleProperties) -> None:
        n, vh, vm, vl = props.normal, props.vh, props.vm, props.vl
        tri = np.array([vh, vm, vl])
        if float(np.dot(n, triangle_normal(tri))) < 0.0:
            tri = np.array([vm, vh, vl])
        props.sub_area = self._add_submerged(tri, normal=props.normal, area=props.area)

    # Derived quantities

    def _compute_areas(self) -> None:
        self._area = sum(p.area for p in self._triangle_props)
        self._submerged_area = sum(p.area for p in self._submerged_props)

    def _compute_waterline_length(self) -> None:
        xaxis = self._rotation @ np.array([1.0, 0.0, 0.0])
        length = sum(abs(float(np.dot(q - p, xaxis))) for p, q in self._waterline)
        self._waterline_length = 0.5 * length

    def _compute_point_velocities(self) -> None:
        v = self._lin_velocity
        omega = self._ang_velocity
        for sub in self._submerged_props:
            sub.xr = sub.centroid - self._position
            sub.vp = v + np.cross(omega, sub.xr)
            sub.up = _unit(sub.vp)
            sub.cos_theta = float(np.dot(sub.up, sub.normal))
            sub.vn = sub.normal * sub.cos_theta
            sub.vt = sub.vp - sub.vn
            sub.ut = _unit(sub.vt)
            sub.uf = -sub.ut
            sub.vf = sub.uf * float(np.linalg.norm(sub.vp))

    # Forces

    def _compute_buoyancy_force(self) -> None:
        sum_force = np.zeros(3)
        sum_torque = np.zeros(3)
        for tri in self._submerged_triangles:
            center, force = triangle_buoyancy_at_center_of_pressure(self._sampler, tri)
            sum_force += force
            sum_torque += np.cross(center - self._position, force)
        self._force += sum_force
        self._torque += sum_torque

    def _compute_damping_force(self) -> None:
        p = self._params
        rs = self._submerged_area / self._area if self._area > 0.0 else 0.0

        v = self._lin_velocity
        lin_speed = float(np.linalg.norm(v))
        c_l = -rs * (p.c_damp_l1 + p.c_damp_l2 * lin_speed)

        omega = self._ang_velocity
        ang_speed = float(np.linalg.norm(omega))
        c_r = -rs * (p.c_damp_r1 + p.c_damp_r2 * ang_speed)

        self._force += v * c_l
        self._torque += omega * c_r

    def _compute_viscous_drag_force(self) -> None:
        c_f = viscous_drag_coefficient(self.reynolds_number())
        sum_force = np.zeros(3)
        sum_torque = np.zeros(3)
        for sub in self._submerged_props:
            f_drag = 0.5 * WATER_DENSITY * c_f * sub.area * float(np.linalg.norm(sub.vf))
            force = sub.vf * f_drag
            sum_force += force
            sum_torque += np.cross(sub.xr, force)
        self._force += sum_force
        self._torque += sum_torque

    def _compute_pressure_drag_force(self) -> None:
        p = self._params
        sum_force = np.zeros(3)
        sum_torque = np.zeros(3)
        for sub in self._submerged_props:
            s = sub.area
            v = float(np.linalg.norm(sub.vp)) / p.v_r_drag
            cos_theta = sub.cos_theta
            if cos_theta >= 0.0:
                drag = -(p.c_p_drag1 * v + p.c_p_drag2 * v * v) * s * cos_theta ** p.f_p_drag
            else:
                drag = (p.c_s_drag1 * v + p.c_s_drag2 * v * v) * s * (-cos_theta) ** p.f_s_drag
            force = sub.normal * drag
            sum_force += force
            sum_torque += np.cross(sub.xr, force)
        self._force += sum_force
        self._torque += sum_torque


def _sequence_of_points(points: Sequence[Sequence[float]]) -> np.ndarray:
    return np.asarray(points, dtype=float)