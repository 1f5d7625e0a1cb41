import io
import struct

import numpy as np
import pytest

from mnistsearch.graph_search import GraphOptions, main, parse_options
from mnistsearch.method import brute_nearest


def _write_idx(path, images):
    count, pixels = images.shape
    header = struct.pack(">iiii", 2051, count, 4, pixels // 4)
    path.write_bytes(header + images.astype(np.uint8).tobytes())


@pytest.fixture
def files(tmp_path):
    images = np.random.default_rng(13).integers(0, 8, size=(40, 16), dtype=np.uint8)
    queries = np.random.default_rng(14).integers(0, 8, size=(10, 16), dtype=np.uint8)
    data = tmp_path / "data.idx"
    query = tmp_path / "query.idx"
    _write_idx(data, images)
    _write_idx(query, queries)
    return images, queries, data, query, tmp_path / "out.txt"


def _argv(data, query, out, method):
    return ["-d", str(data), "-q", str(query), "-o", str(out), "-m", str(method)]


def test_defaults():
    options = parse_options(["-d", "a", "-q", "b", "-o", "c", "-m", "1"])
    assert options == GraphOptions("a", "b", "c", 50, 30, 1, 1, 20, 1)


def test_e_clamped_to_k():
    options = parse_options(["-d", "a", "-q", "b", "-o", "c", "-m", "1",
                             "-k", "10", "-E", "40"])
    assert options.e == options.k


def test_l_raised_to_n():
    options = parse_options(["-d", "a", "-q", "b", "-o", "c", "-m", "2",
                             "-N", "7", "-l", "2"])
    assert options.l == options.n


def test_missing_file_exits():
    with pytest.raises(SystemExit) as info:
        parse_options(["-d", "a", "-q", "b", "-m", "1"])
    assert info.value.code == 1


def test_missing_method_exits():
    with pytest.raises(SystemExit) as info:
        parse_options(["-d", "a", "-q", "b", "-o", "c"])
    assert info.value.code == 1


def test_mrng_report(files, monkeypatch):
    images, queries, data, query, out = files
    monkeypatch.setattr("sys.stdin", io.StringIO("No\n"))
    assert main(_argv(data, query, out, 2)) == 0
    lines = out.read_text().splitlines()
    assert sum(line.startswith("Query ") for line in lines) == 10
    assert "Query 0:" in lines
    true_lines = [line for line in lines if line.startswith("distanceTrue: ")]
    expected = [f"distanceTrue: {brute_nearest(images, q, 1, 2)[0].dist:g}" for q in queries]
    assert true_lines == expected
    assert sum(line.startswith("distanceMRNG: ") for line in lines) == 10
    maf = float(next(line for line in lines if line.startswith("MAF: ")).split()[1])
    assert maf >= 1.0


def test_gnns_report_repeats_for_new_query_file(files, monkeypatch):
    _, _, data, query, out = files
    monkeypatch.setattr("sys.stdin", io.StringIO(f"{query}\nNo\n"))
    assert main(_argv(data, query, out, 1) + ["-k", "10", "-E", "5"]) == 0
    text = out.read_text()
    assert text.count("Query 0:") == 2
    assert text.count("MAF Average: ") == 2
    assert text.count("distanceGKNN: ") == 20


def test_missing_input_file_fails(files, monkeypatch):
    _, _, _, query, out = files
    monkeypatch.setattr("sys.stdin", io.StringIO("No\n"))
    missing = out.parent / "absent.idx"
    assert main(_argv(missing, query, out, 2)) == 1