"""Base of the graph-based nearest-neighbour indexes."""

from __future__ import annotations

import numpy as np


class GraphIndex:
    """A dataset of images and an adjacency list over them."""

    def __init__(self, images):
        self.images = np.asarray(images)
        if self.images.ndim != 2:
            raise ValueError("images must be a two-dimensional array")
        self.count, self.pixels = self.images.shape
        self.adj: list[list[int]] = [[] for _ in range(self.count)]