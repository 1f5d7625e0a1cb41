import numpy as np
import pytest

from mnistsearch.dataset import p_norm
from mnistsearch.method import Method, Point, brute_nearest


def _method() -> Method:
    images = np.zeros((10, 4), dtype=np.uint8)
    return Method(images, w=4, k=2, rng=np.random.default_rng(0))


def test_method_rejects_flat_images():
    with pytest.raises(ValueError):
        Method(np.zeros(5, dtype=np.uint8), w=4, k=2)


def test_nearest_search_orders_and_limits():
    method = _method()
    method.candidates = [Point(3.0, 1), Point(1.0, 2), Point(2.0, 3), Point(4.0, 4)]
    assert method.nearest_search(3) == [Point(1.0, 2), Point(2.0, 3), Point(3.0, 1)]


def test_nearest_search_skips_duplicate_ids():
    method = _method()
    method.candidates = [Point(2.0, 5), Point(2.0, 5), Point(3.0, 6)]
    assert method.nearest_search(3) == [Point(2.0, 5), Point(3.0, 6)]


def test_nearest_search_ignores_far_points():
    method = _method()
    method.candidates = [Point(600000.0, 1), Point(10.0, 2)]
    assert method.nearest_search(5) == [Point(10.0, 2)]


def test_nearest_search_ties_keep_candidate_order():
    method = _method()
    method.candidates = [Point(1.0, 7), Point(1.0, 3)]
    assert [p.id for p in method.nearest_search(2)] == [7, 3]


def test_nearest_search_empty():
    method = _method()
    assert method.nearest_search(4) == []


def test_range_search_inclusive_and_keeps_duplicates():
    method = _method()
    method.candidates = [Point(1.0, 0), Point(2.5, 1), Point(2.0, 2), Point(1.0, 0)]
    assert method.range_search(2.0) == [0, 2, 0]


def test_brute_nearest_excludes_exact_match():
    images = np.array([[0, 0], [3, 4], [1, 1], [10, 10]], dtype=np.uint8)
    result = brute_nearest(images, images[1], 3, 2)
    assert all(p.id != 1 for p in result)
    assert [p.id for p in result] == [2, 0, 3]


def test_brute_nearest_distances_match_p_norm():
    rng = np.random.default_rng(3)
    images = rng.integers(0, 256, size=(20, 6), dtype=np.uint8)
    query = rng.integers(0, 256, size=6, dtype=np.uint8)
    result = brute_nearest(images, query, 5, 2)
    for point in result:
        assert point.dist == pytest.approx(p_norm(images[point.id], query, 2))
    dists = [p.dist for p in result]
    assert dists == sorted(dists)


def test_brute_nearest_is_the_true_minimum():
    rng = np.random.default_rng(4)
    images = rng.integers(0, 256, size=(30, 5), dtype=np.uint8)
    query = rng.integers(0, 256, size=5, dtype=np.uint8)
    best = brute_nearest(images, query, 1, 2)[0]
    assert best.dist == pytest.approx(min(p_norm(images, query, 2)))


def test_brute_nearest_returns_available_when_n_too_large():
    images = np.array([[1, 1], [1, 1], [2, 2]], dtype=np.uint8)
    result = brute_nearest(images, images[0], 5, 2)
    assert [p.id for p in result] == [2]


def test_brute_nearest_zero_requested():
    images = np.array([[1, 1], [2, 2]], dtype=np.uint8)
    assert brute_nearest(images, [0, 0], 0, 2) == []