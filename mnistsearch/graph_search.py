"""Command answering nearest-neighbour queries with GNNS or MRNG graphs."""

from __future__ import annotations

import argparse
import re
import sys
import time
from dataclasses import dataclass
from itertools import zip_longest
from typing import Callable, TextIO

import numpy as np

from mnistsearch.dataset import load_images, read_image, read_meta
from mnistsearch.gnns import GNNS
from mnistsearch.method import Point, brute_nearest
from mnistsearch.mrng import MRNG

QUERIES = 10
GREEDY_STEPS = 50
GNNS_RESULTS = 10
_FLOAT_MAX = float(np.finfo(np.float32).max)
_MISSING = Point(float("inf"), -1)


@dataclass
class GraphOptions:
    """Settings of one graph search run."""

    input_file: str
    query_file: str
    output_file: str
    k: int = 50
    e: int = 30
    r: int = 1
    n: int = 1
    l: int = 20
    method: int = 0


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def parse_options(argv=None) -> GraphOptions:
    """Parse the command line; exits with status 1 if a file or the method is missing."""
    parser = argparse.ArgumentParser(prog="graph_search", add_help=False)
    parser.add_argument("-d", dest="input_file")
    parser.add_argument("-q", dest="query_file")
    parser.add_argument("-o", dest="output_file")
    parser.add_argument("-k", dest="k", type=_atoi, default=50)
    parser.add_argument("-E", dest="e", type=_atoi, default=30)
    parser.add_argument("-R", dest="r", type=_atoi, default=1)
    parser.add_argument("-N", dest="n", type=_atoi, default=1)
    parser.add_argument("-l", dest="l", type=_atoi, default=20)
    parser.add_argument("-m", dest="method", type=_atoi, default=0)
    args, _ = parser.parse_known_args(argv)
    if not (args.input_file and args.query_file and args.output_file):
        print("Give i/o or query file")
        raise SystemExit(1)
    if args.method == 0:
        print("Give method (1: GNNS, 2: MRNG)")
        raise SystemExit(1)
    options = GraphOptions(args.input_file, args.query_file, args.output_file,
                           args.k, args.e, args.r, args.n, args.l, args.method)
    if options.e > options.k:
        print("parameters E > K were given, but E must be at most equal to K. Giving E=K")
        options.e = options.k
    if options.l < options.n:
        print("parameters l < N were given, but l must be at least equal to N. Giving l=N")
        options.l = options.n
    return options


def _read_queries(path, pixels: int) -> list[np.ndarray]:
    with open(path, "rb") as stream:
        _, count, _, _ = read_meta(stream)
        return [read_image(stream, pixels) for _ in range(min(QUERIES, count))]


def _ask_next_file() -> str:
    """Next word typed on standard input; end of input counts as "No"."""
    while True:
        try:
            words = input().split()
        except EOFError:
            return "No"
        if words:
            return words[0]


def _report(out: TextIO, images: np.ndarray, queries: list[np.ndarray],
            search: Callable[[np.ndarray], list[Point]], n: int, label: str) -> None:
    maf = _FLOAT_MAX
    maf_sum = 0.0
    approx_time = 0.0
    true_time = 0.0
    for number, query in enumerate(queries):
        out.write(f"Query {number}:\n")
        start = time.perf_counter()
        approx = search(query)
        approx_time += time.perf_counter() - start

        start = time.perf_counter()
        exact = brute_nearest(images, query, n, 2)
        true_time += time.perf_counter() - start

        if approx and exact and exact[0].dist > 0:
            ratio = approx[0].dist / exact[0].dist
            maf_sum += ratio
            maf = min(maf, ratio)

        pairs = zip_longest(approx[:max(n, 0)], exact, fillvalue=_MISSING)
        for rank, (found, true) in enumerate(pairs, 1):
            out.write(f"Nearest neighbor-{rank}: {found.id}\n")
            out.write(f"distance{label}: {found.dist:g}\n")
            out.write(f"distanceTrue: {true.dist:g}\n")

    total = len(queries) or 1
    out.write(f"\ntAverageApproximate: {approx_time / total:g} sec\n")
    out.write(f"tAverageTrue: {true_time / total:g} sec\n")
    out.write(f"MAF: {maf:g}\n")
    out.write(f"MAF Average: {maf_sum / total:g}\n")
    out.flush()


def _session(options: GraphOptions, images: np.ndarray,
             search: Callable[[np.ndarray], list[Point]], label: str) -> int:
    query_file = options.query_file
    with open(options.output_file, "w", encoding="utf-8") as out:
        while True:
            try:
                queries = _read_queries(query_file, images.shape[1])
            except (OSError, ValueError) as exc:
                print(f"open: {exc}", file=sys.stderr)
                return 1
            _report(out, images, queries, search, options.n, label)
            print('Give query file or exit with "No"')
            answer = _ask_next_file()
            if answer == "No":
                return 0
            query_file = answer


def _load(options: GraphOptions) -> np.ndarray | None:
    try:
        return load_images(options.input_file)
    except (OSError, ValueError) as exc:
        print(f"open: {exc}", file=sys.stderr)
        return None


def run_gnns(options: GraphOptions) -> int:
    """Answer queries with a GNNS graph and write the report."""
    images = _load(options)
    if images is None:
        return 1
    try:
        gnns = GNNS(images, options.k, np.random.default_rng())
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1

    def search(query: np.ndarray) -> list[Point]:
        gnns.query(query, 2, options.e, options.r, GREEDY_STEPS)
        return gnns.nearest_search(GNNS_RESULTS)

    return _session(options, images, search, "GKNN")


def run_mrng(options: GraphOptions) -> int:
    """Answer queries with an MRNG graph and write the report."""
    images = _load(options)
    if images is None:
        return 1
    try:
        mrng = MRNG(images, np.random.default_rng())
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1

    def search(query: np.ndarray) -> list[Point]:
        mrng.query(query, options.l, 2)
        return mrng.nearest_search(options.n)

    return _session(options, images, search, "MRNG")


def main(argv=None) -> int:
    """Run the graph search chosen on the command line."""
    options = parse_options(argv)
    if options.method == 1:
        return run_gnns(options)
    if options.method == 2:
        return run_mrng(options)
    return 0


if __name__ == "__main__":
    sys.exit(main())