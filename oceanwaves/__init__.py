"""Ocean surface tiles, triangulated grids, render meshes and hydrodynamic forces on floating bodies."""

__version__ = "1.0.0"