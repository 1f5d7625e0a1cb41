[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mnistsearch"
version = "0.1.0"
description = "Approximate nearest-neighbour search over MNIST-style IDX image sets with LSH, hypercube projection, GNNS and MRNG graphs"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "nearest-neighbour",
    "ann",
    "lsh",
    "locality-sensitive-hashing",
    "hypercube",
    "gnns",
    "mrng",
    "graph-search",
    "mnist",
    "idx",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Information Analysis",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
mnist-lsh = "mnistsearch.lsh_cli:main"
mnist-cube = "mnistsearch.cube_cli:main"
mnist-graph-search = "mnistsearch.graph_search:main"

[tool.hatch.build.targets.wheel]
packages = ["mnistsearch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
