import numpy as np
import pytest

from mnistsearch.dataset import p_norm
from mnistsearch.lsh import LSH
from mnistsearch.method import brute_nearest


def _images(count: int, pixels: int = 16, seed: int = 0) -> np.ndarray:
    return np.random.default_rng(seed).integers(0, 256, size=(count, pixels), dtype=np.uint8)


def test_rejects_small_dataset():
    with pytest.raises(ValueError):
        LSH(_images(7), r=11, w=150, rng=np.random.default_rng(0))


def test_every_image_in_one_bucket_per_table():
    images = _images(64)
    lsh = LSH(images, r=12345, w=150, k=3, l=4, rng=np.random.default_rng(1))
    assert len(lsh.tables) == 4
    for table in lsh.tables:
        members = sorted(i for bucket in table.values() for i in bucket)
        assert members == list(range(64))
        assert all(0 <= key < lsh.table_size for key in table)


def test_wide_window_matches_brute_force():
    images = _images(64, seed=2)
    lsh = LSH(images, r=99, w=10**9, rng=np.random.default_rng(2))
    lsh.query(images[0])
    assert lsh.nearest_search(5) == brute_nearest(images, images[0], 5, 2)


def test_query_excludes_exact_match():
    images = _images(64, seed=3)
    lsh = LSH(images, r=7, w=10**9, rng=np.random.default_rng(3))
    lsh.query(images[3])
    assert all(p.id != 3 for p in lsh.candidates)
    assert all(p.dist > 0 for p in lsh.candidates)


def test_candidate_cap():
    images = _images(1100, seed=4)
    lsh = LSH(images, r=5, w=10**9, k=2, l=1, rng=np.random.default_rng(4))
    lsh.query(images[0])
    assert len(lsh.candidates) == 201


def test_candidates_distances_match_p_norm():
    images = _images(80, seed=5)
    lsh = LSH(images, r=31337, w=150, rng=np.random.default_rng(5))
    query = images[10]
    lsh.query(query)
    for point in lsh.candidates:
        assert point.dist == pytest.approx(p_norm(images[point.id], query, 2))


def test_same_seed_gives_same_index_and_results():
    images = _images(64, seed=6)
    first = LSH(images, r=42, w=150, rng=np.random.default_rng(9))
    second = LSH(images, r=42, w=150, rng=np.random.default_rng(9))
    assert first.tables == second.tables
    first.query(images[5])
    second.query(images[5])
    assert first.candidates == second.candidates


def test_nearest_never_beats_brute_force():
    images = _images(96, seed=7)
    lsh = LSH(images, r=2024, w=150, rng=np.random.default_rng(7))
    query = images[0].astype(np.float64) + 0.5
    lsh.query(query)
    found = lsh.nearest_search(3)
    dists = [p.dist for p in found]
    assert dists == sorted(dists)
    truth = brute_nearest(images, query, 1, 2)[0]
    assert all(d >= truth.dist - 1e-9 for d in dists)


def test_range_search_respects_radius():
    images = _images(64, seed=8)
    lsh = LSH(images, r=3, w=10**9, rng=np.random.default_rng(8))
    query = images[1]
    lsh.query(query)
    radius = float(np.median([p.dist for p in lsh.candidates]))
    inside = lsh.range_search(radius)
    assert inside
    assert all(p_norm(images[i], query, 2) <= radius for i in inside)
    assert len(inside) == sum(p.dist <= radius for p in lsh.candidates)


def test_query_resets_candidates():
    images = _images(64, seed=9)
    lsh = LSH(images, r=3, w=10**9, rng=np.random.default_rng(10))
    lsh.query(images[0])
    lsh.query(images[1])
    assert all(p.id != 1 for p in lsh.candidates)
    assert len({p.id for p in lsh.candidates}) == len(lsh.candidates) // lsh.l