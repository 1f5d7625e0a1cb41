"""Approximate nearest-neighbour search over IDX image sets: LSH, hypercube, GNNS and MRNG."""

__version__ = "0.1.0"