"""Common machinery of the hashing search methods and brute-force search."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import islice
from operator import attrgetter

import numpy as np

from mnistsearch.dataset import p_norm

_SEARCH_CEILING = 500000.0


@dataclass(frozen=True)
class Point:
    """A dataset image and its distance to a query."""

    dist: float
    id: int


class Method:
    """Dataset, random projections and candidate list shared by hashing methods."""

    def __init__(self, images, w: int, k: int, rng: np.random.Generator | None = None):
        self.images = np.asarray(images)
        if self.images.ndim != 2:
            raise ValueError("images must be a two-dimensional array")
        self.count, self.pixels = self.images.shape
        self.w = w
        self.k = k
        self.rng = rng if rng is not None else np.random.default_rng()
        self.v = np.empty((0, self.pixels))
        self.t = np.empty(0)
        self.candidates: list[Point] = []

    def _make_factors(self, rows: int) -> None:
        """Draw the projection vectors v and offsets t in [0, w) for ``rows`` functions."""
        self.v = self.rng.standard_normal((rows, self.pixels))
        self.t = self.rng.uniform(0.0, self.w, size=rows)

    def _calc_h(self, vectors) -> np.ndarray:
        """Values of h for each projection, wrapped to unsigned 32 bits."""
        x = np.asarray(vectors, dtype=np.float64)
        values = np.trunc((x @ self.v.T + self.t) / float(self.w))
        return values.astype(np.int64) & 0xFFFFFFFF

    def nearest_search(self, n: int) -> list[Point]:
        """Up to ``n`` distinct candidates closest to the last query, nearest first."""
        result: list[Point] = []
        seen: set[int] = set()
        for point in sorted(self.candidates, key=attrgetter("dist")):
            if len(result) >= n or point.dist >= _SEARCH_CEILING:
                break
            if point.id in seen:
                continue
            seen.add(point.id)
            result.append(point)
        return result

    def range_search(self, radius: float) -> list[int]:
        """Ids of candidates within ``radius`` of the last query, in candidate order."""
        return [point.id for point in self.candidates if point.dist <= radius]


def brute_nearest(images, query, n: int, metric: int = 2) -> list[Point]:
    """Exact ``n`` nearest images to ``query``, ignoring images at distance zero."""
    dists = np.atleast_1d(p_norm(np.asarray(images), query, metric))
    order = np.argsort(dists, kind="stable")
    found = (Point(float(dists[i]), int(i)) for i in order if dists[i] > 0)
    return list(islice(found, max(n, 0)))