[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "ljwall"
version = "0.1.0"
description = "Brownian dynamics of two-dimensional Lennard-Jones fluids, with optional Lennard-Jones walls, writing GSD trajectories"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "brownian dynamics",
    "lennard-jones",
    "cell list",
    "gsd",
    "simulation",
    "soft matter",
]
classifiers = [
    "Development Status :: 3 - Alpha",
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
test = ["pytest"]

[project.scripts]
ljwall = "ljwall.simulation:main"

[tool.setuptools.packages.find]
include = ["ljwall*"]

[tool.pytest.ini_options]
addopts = "-ra"
