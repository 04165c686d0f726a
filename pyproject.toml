[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oceanwaves"
version = "1.0.0"
description = "Ocean surface tiles, triangulated grids and hydrodynamic forces on floating bodies"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["ocean", "waves", "hydrodynamics", "buoyancy", "mesh", "tangent space"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["oceanwaves"]

[tool.pytest.ini_options]
addopts = "-ra"
