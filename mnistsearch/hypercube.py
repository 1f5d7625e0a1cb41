"""Randomized projection of images onto the vertices of a hypercube."""

from __future__ import annotations

from itertools import combinations

import numpy as np

from mnistsearch.dataset import p_norm
from mnistsearch.method import Method, Point

_RAND_LIMIT = 2**31


def bin_to_dec(bits) -> int:
    """Integer whose bit ``j`` is ``bits[j]``."""
    return sum(int(bool(bit)) << j for j, bit in enumerate(bits))


class Cube(Method):
    """Maps every image to a vertex of {0,1}^k and probes nearby vertices."""

    def __init__(self, images, w: int, k: int = 14,
                 rng: np.random.Generator | None = None):
        super().__init__(images, w, k, rng)
        self._make_factors(k)
        self.f = self.rng.integers(0, _RAND_LIMIT, size=k, dtype=np.int64)
        self._weights = np.left_shift(np.int64(1), np.arange(k, dtype=np.int64))
        self.keys = self._vertex_keys(self.images)
        self.hypercube: dict[int, list[int]] = {}
        for image, key in enumerate(np.atleast_1d(self.keys).tolist()):
            self.hypercube.setdefault(key, []).append(image)

    def _vertex_bits(self, vectors) -> np.ndarray:
        """f_i(h_i(p)) in {0, 1} for each projection."""
        return (self._calc_h(vectors) + self.f) & 1

    def _vertex_keys(self, vectors) -> np.ndarray:
        """Vertex number of each vector, bit ``j`` taken from projection ``j``."""
        return self._vertex_bits(vectors) @ self._weights

    def _probe(self, query_key: int, m: int, probes: int) -> list[int]:
        """Non-empty vertices near ``query_key``, by increasing Hamming distance."""
        adjacent: list[int] = []
        found = 0
        for distance in range(1, self.k + 1):
            for flipped in combinations(range(self.k), distance):
                if len(adjacent) >= probes or found >= m:
                    return adjacent
                key = query_key ^ sum(1 << bit for bit in flipped)
                members = self.hypercube.get(key)
                if members:
                    adjacent.append(key)
                    found += len(members)
        return adjacent

    def query(self, query, m: int = 10, probes: int = 2, metric: int = 2) -> None:
        """Collect candidates from the query's vertex and the probed vertices before the last."""
        if probes <= 0:
            return
        q = np.asarray(query, dtype=np.float64)
        query_key = int(self._vertex_keys(q))
        adjacent = self._probe(query_key, m, probes)
        visited = [query_key, *adjacent][:len(adjacent)]

        self.candidates = []
        for key in visited:
            members = self.hypercube.get(key, [])
            if not members:
                continue
            dists = np.atleast_1d(p_norm(self.images[members], q, metric))
            self.candidates.extend(
                Point(dist, image)
                for image, dist in zip(members, dists.tolist())
                if dist != 0
            )