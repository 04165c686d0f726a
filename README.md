# oceanwaves

Building blocks for floating bodies on an ocean surface. The package covers
hydrostatic and hydrodynamic forces on triangulated hulls, a regular
triangulated grid for height lookups, and an ocean surface tile that can be
exported as a render mesh with per-vertex tangents.

## Modules

- `oceanwaves.physics`: physical constants (`GRAVITY`, `WATER_DENSITY`,
  `WATER_KINEMATIC_VISCOSITY`, `GRAVITATIONAL_CONSTANT`) and triangle helpers
  (`triangle_normal`, `triangle_area`, `triangle_centroid`). It has the
  deep-water dispersion relations `deep_water_dispersion_to_omega` and
  `deep_water_dispersion_to_wavenumber`, and the ITTC 1957 friction
  coefficient `viscous_drag_coefficient`, which clamps the Reynolds number
  below at 1.0E+3. For buoyancy it has `buoyancy_force_at_centroid` and
  `triangle_buoyancy_at_center_of_pressure`. Both return an `AppliedForce`
  (`center`, `force`). It also has `compute_height_map`. Depths come from any
  object with a `compute_depth(point)` method (the `DepthSampler` protocol).
  Depth is positive below the surface.
- `oceanwaves.hydrodynamics`: `TriangleMesh` holds vertex positions and
  faces. `HydrodynamicsParameters` is a dataclass of switches and
  coefficients. Its `update(values)` accepts names such as `"damping_on"`,
  `"cDampL1"` or `"fPDrag"`, and raises `ValueError` when a value has the
  wrong type. `Hydrodynamics` splits the mesh at the water surface. It then
  sums buoyancy, viscous drag, pressure drag and damping forces and torques
  about the centre of mass. After `update(sampler, position, rotation,
  lin_velocity, ang_velocity)`, where `rotation` is a 3x3 matrix, read
  `force()`, `torque()`, `waterline()`, `submerged_triangles()` and
  `reynolds_number()`.
- `oceanwaves.triangulated_grid`: `TriangulatedGrid` and `create_grid(nx,
  ny, lx, ly)` build a tile centred on the origin with `2 * nx * ny`
  triangles. The grid offers these operations:
  - `locate` returns a face index, or -1 outside the grid.
  - `height` and `heights` give the vertical distance up to the surface.
  - `interpolate` sets the heights of another grid's points.
  - `apply_pose(x, y)` slides the grid in the xy-plane.
  - `update_points` takes a sequence of points or a `TriangleMesh`.
  - `is_valid` checks the triangulation.
- `oceanwaves.submesh`: `SubMesh` stores vertices, normals, tangents,
  texture coordinates and indices. Out-of-range access raises `IndexError`.
  `Mesh` is a named list of sub-meshes.
- `oceanwaves.tangent_space`: `compute_face_tbn` computes the tangent space
  of one triangle. `compute_vertex_tbn` and `compute_vertex_normals` compute
  it per vertex. Texture coordinates have v = 0 at the top of a texture.
- `oceanwaves.ocean_tile`: `OceanTile` is a periodic grid of `(nx + 1) *
  (ny + 1)` vertices. A wave simulation that you supply displaces it. Call
  `create()` before `update(time)` or `build_mesh(...)`. `create_mesh()`
  creates the tile and returns a `Mesh`. `update_mesh(time, mesh)` copies the
  new state into the mesh's first sub-mesh.

## Example

```python
from oceanwaves.hydrodynamics import Hydrodynamics, HydrodynamicsParameters, TriangleMesh
from oceanwaves.physics import deep_water_dispersion_to_omega
from oceanwaves.triangulated_grid import create_grid


class FlatSea:
    """Calm water with its surface at z = 0."""

    def compute_depth(self, point):
        return -point[2]


omega = deep_water_dispersion_to_omega(0.1)   # rad/s for k = 0.1 rad/m

# One downward-facing triangle, one metre under water.
hull = TriangleMesh([(0, 0, -1), (0, 1, -1), (1, 0, -1)], [(0, 1, 2)])
params = HydrodynamicsParameters()
params.update({"damping_on": False})
hydro = Hydrodynamics(params, hull, FlatSea())
hydro.update(FlatSea(), (0, 0, 0), [[1, 0, 0], [0, 1, 0], [0, 0, 1]],
             (0, 0, 0), (0, 0, 0))
print(hydro.force(), hydro.torque())

grid = create_grid(4, 4, 10.0, 10.0)
print(grid.cell_count(), grid.tile_size(), grid.locate((0.5, 0.5, 0.0)))
```

## Installation

```
pip install .
```

Tests:

```
pip install ".[test]"
pytest
```

## What the package does not do

The package contains no wave simulation and no wave-field sampler. An
`OceanTile` must be given an object with `set_time`, `set_wind_velocity`,
`set_steepness`, `elevation_at`, `displacement_at` and
`displacement_and_deriv_at`. `Hydrodynamics` and the buoyancy functions must
be given an object with `compute_depth`. The package does not read model or
world description files, and it does not render meshes. It has no
command-line program.