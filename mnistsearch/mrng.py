"""Search on a Monotonic Relative Neighbourhood Graph."""

from __future__ import annotations

from dataclasses import dataclass
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


@dataclass
class Candidate:
    """A node met during a search, with its distance to the query."""

    dist: float
    id: int
    marked: bool = False


class MRNG(GraphIndex):
    """Graph whose edges skip any point reachable through a shorter triangle side."""

    def __init__(self, images, rng: np.random.Generator | None = None):
        super().__init__(images)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.candidates: list[Candidate] = []

        lsh = LSH(self.images, int(self.rng.integers(0, _RAND_LIMIT)), _LSH_WINDOW,
                  _LSH_FUNCTIONS, _LSH_TABLES, self.rng)
        for p, image in enumerate(self.images):
            lsh.query(image)
            self.adj[p] = self._neighbours_of(p, lsh.nearest_search(1))

        total = self.images.sum(axis=0, dtype=np.uint64)
        centroid = (total // np.uint64(self.count)).astype(np.uint8)
        lsh.query(centroid)
        found = lsh.nearest_search(1)
        if found:
            self.start_node = found[0]
        else:
            dists = np.atleast_1d(p_norm(self.images, centroid, 2))
            nearest = int(np.argmin(dists))
            self.start_node = Point(float(dists[nearest]), nearest)

    def _neighbours_of(self, p: int, seed: list[Point]) -> list[int]:
        """MRNG edges of ``p``, starting from the seed neighbours."""
        ids = [point.id for point in seed]
        edge_dists = [point.dist for point in seed]
        chosen = set(ids)
        origin = self.images[p]
        dists = np.atleast_1d(p_norm(self.images, origin, 2))
        for r in np.argsort(dists, kind="stable").tolist():
            if r == p or r in chosen:
                continue
            pr = float(dists[r])
            closer = [t for t, pt in zip(ids, edge_dists) if pt < pr]
            if closer:
                rt = np.atleast_1d(p_norm(self.images[closer], self.images[r], 2))
                if np.any(pr >= rt):
                    continue
            ids.append(r)
            edge_dists.append(pr)
            chosen.add(r)
        return ids

    def query(self, query, l_cand: int = 20, metric: int = 2) -> None:
        """Walk the graph from the start node until ``l_cand`` candidates are gathered."""
        q = np.asarray(query, dtype=np.float64)
        start = self.start_node.id
        self.candidates = [Candidate(p_norm(self.images[start], q, metric), start, True)]
        seen = {start}
        inserted = 1
        current = start
        while True:
            fresh = [n for n in self.adj[current] if n not in seen]
            if fresh:
                dists = np.atleast_1d(p_norm(self.images[fresh], q, metric)).tolist()
                self.candidates.extend(Candidate(d, n) for n, d in zip(fresh, dists))
                seen.update(fresh)
                inserted += len(fresh)
            self.candidates.sort(key=attrgetter("dist"))
            if inserted >= l_cand:
                break
            nxt = next((c for c in self.candidates if not c.marked), None)
            if nxt is None:
                break
            nxt.marked = True
            current = nxt.id

    def nearest_search(self, n: int = 1) -> list[Point]:
        """The ``n`` nearest candidates found by the last query."""
        return [Point(c.dist, c.id) for c in self.candidates[:max(n, 0)]]