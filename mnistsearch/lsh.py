"""Locality-sensitive hashing index over Euclidean space."""

from __future__ import annotations

import numpy as np

from mnistsearch.dataset import p_norm
from mnistsearch.method import Method, Point

_MODULUS = np.uint64(4294967291)
_MASK = np.uint64(0xFFFFFFFF)
_CANDIDATES_PER_TABLE = 200


class LSH(Method):
    """L hash tables, each keyed by g(p) built from k projections h_i."""

    def __init__(self, images, r: int, w: int, k: int = 4, l: int = 5,
                 rng: np.random.Generator | None = None):
        super().__init__(images, w, k, rng)
        self.l = l
        self.r = r & 0xFFFFFFFF
        self.table_size = self.count // 8
        if self.table_size == 0:
            raise ValueError("LSH needs at least 8 images")
        self._make_factors(l * k)

        hashes = self._calc_h(self.images).reshape(self.count, l, k)
        self.ids = self._combine(hashes).T  # one row of ids per table
        self.tables: list[dict[int, list[int]]] = []
        for row in self.ids:
            table: dict[int, list[int]] = {}
            for image, bucket in enumerate((row % np.uint64(self.table_size)).tolist()):
                table.setdefault(bucket, []).append(image)
            self.tables.append(table)

    def _combine(self, hashes: np.ndarray) -> np.ndarray:
        """ID(p) = sum(r * h_i(p) mod M) in unsigned 32-bit arithmetic, over the last axis."""
        ident = np.zeros(hashes.shape[:-1], dtype=np.uint64)
        r = np.uint64(self.r)
        for column in np.moveaxis(hashes.astype(np.uint64), -1, 0):
            column = column % _MODULUS
            ident = (ident + ((r * column) & _MASK) % _MODULUS) & _MASK
        return ident

    def query(self, query, metric: int = 2) -> None:
        """Collect candidates sharing a bucket and an ID with ``query`` in any table."""
        self.candidates = []
        q = np.asarray(query, dtype=np.float64)
        query_ids = self._combine(self._calc_h(q).reshape(self.l, self.k))
        limit = _CANDIDATES_PER_TABLE * self.l
        for table, table_ids, qid in zip(self.tables, self.ids, query_ids):
            bucket = np.asarray(table.get(int(qid % np.uint64(self.table_size)), []), dtype=np.int64)
            if bucket.size == 0:
                continue
            matching = bucket[table_ids[bucket] == qid]
            if matching.size == 0:
                continue
            dists = np.atleast_1d(p_norm(self.images[matching], q, metric))
            for image, dist in zip(matching.tolist(), dists.tolist()):
                if dist == 0:
                    continue
                self.candidates.append(Point(dist, image))
                if len(self.candidates) > limit:
                    return