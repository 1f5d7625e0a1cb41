"""Graph Nearest Neighbour Search over a k-nearest-neighbour graph."""

from __future__ import annotations

import math
from operator import attrgetter

import numpy as np

from mnistsearch.dataset import p_norm
from mnistsearch.graph_index import GraphIndex
from mnistsearch.lsh import LSH
from mnistsearch.method import Point

_LSH_WINDOW = 150
_LSH_FUNCTIONS = 4
_LSH_TABLES = 5
_RAND_LIMIT = 2**31


class GNNS(GraphIndex):
    """Greedy search with random restarts on a graph whose edges come from LSH."""

    def __init__(self, images, k: int = 50, rng: np.random.Generator | None = None):
        super().__init__(images)
        self.k = k
        self.rng = rng if rng is not None else np.random.default_rng()
        self.candidates: list[Point] = []

        lsh = LSH(self.images, int(self.rng.integers(0, _RAND_LIMIT)), _LSH_WINDOW,
                  _LSH_FUNCTIONS, _LSH_TABLES, self.rng)
        for index, image in enumerate(self.images):
            lsh.query(image)
            self.adj[index] = [point.id for point in lsh.nearest_search(k)]

    def _add_neighbours(self, neighbours: list[int], query: np.ndarray, e: int,
                        marked: set[int], metric: int) -> Point:
        """Add the first ``e`` neighbours to the candidates; return the one nearest to ``query``."""
        chosen = neighbours[:max(e, 0)]
        best = Point(math.inf, -1)
        if not chosen:
            return best
        dists = np.atleast_1d(p_norm(self.images[chosen], query, metric)).tolist()
        for image, dist in zip(chosen, dists):
            if dist < best.dist:
                best = Point(dist, image)
            if image not in marked:
                marked.add(image)
                self.candidates.append(Point(dist, image))
        return best

    def query(self, query, metric: int = 2, e: int = 30, r: int = 1, t: int = 20) -> None:
        """Run ``r`` greedy walks of at most ``t`` steps, expanding ``e`` neighbours per step."""
        self.candidates = []
        marked: set[int] = set()
        q = np.asarray(query, dtype=np.float64)
        for _ in range(r):
            start = int(self.rng.integers(0, self.count))
            current = Point(p_norm(self.images[start], q, metric), start)
            for _ in range(t):
                step = self._add_neighbours(self.adj[current.id], q, e, marked, metric)
                if step.dist > current.dist:
                    break
                current = step
        self.candidates.sort(key=attrgetter("dist"))

    def nearest_search(self, n: int = 1) -> list[Point]:
        """The ``n`` nearest candidates found by the last query."""
        return self.candidates[:max(n, 0)]