"""Command answering nearest-neighbour queries on MNIST images with a hypercube."""

from __future__ import annotations

import argparse
import re
import sys
import time
from dataclasses import dataclass
from itertools import zip_longest
from typing import TextIO

import numpy as np

from mnistsearch.dataset import load_images, read_image, read_meta
from mnistsearch.hypercube import Cube
from mnistsearch.method import Point, brute_nearest

QUERIES = 10
WINDOW = 500
_MISSING = Point(float("inf"), -1)


@dataclass
class CubeOptions:
    """Settings of one hypercube run."""

    input_file: str
    query_file: str
    output_file: str
    k: int = 4
    m: int = 10
    probes: int = 2
    n: int = 1
    radius: int = 10000


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def parse_options(argv=None) -> CubeOptions:
    """Parse the command line; exits with status 1 if a file is missing."""
    parser = argparse.ArgumentParser(prog="cube", add_help=False)
    parser.add_argument("-d", dest="input_file")
    parser.add_argument("-q", dest="query_file")
    parser.add_argument("-o", dest="output_file")
    parser.add_argument("-k", dest="k", type=_atoi, default=4)
    parser.add_argument("-M", dest="m", type=_atoi, default=10)
    parser.add_argument("-p", "--probes", dest="probes", type=_atoi, default=2)
    parser.add_argument("-N", dest="n", type=_atoi, default=1)
    parser.add_argument("-R", dest="radius", type=_atoi, default=10000)
    args, _ = parser.parse_known_args(argv)
    if not (args.input_file and args.query_file and args.output_file):
        print("Give i/o or query/config file")
        raise SystemExit(1)
    return CubeOptions(args.input_file, args.query_file, args.output_file,
                       args.k, args.m, args.probes, args.n, args.radius)


def _read_queries(path, pixels: int) -> list[np.ndarray]:
    with open(path, "rb") as stream:
        _, count, _, _ = read_meta(stream)
        return [read_image(stream, pixels) for _ in range(min(QUERIES, count))]


def _write_result(out: TextIO, number: int, approx, exact, in_radius,
                  elapsed_approx: float, elapsed_true: float) -> None:
    out.write(f"Query: {number}\n")
    pairs = zip_longest(approx, exact, fillvalue=_MISSING)
    for rank, (found, true) in enumerate(pairs, 1):
        out.write(f"Nearest neighbor-{rank}: {found.id}\n")
        out.write(f"distanceCube: {found.dist:g}\n")
        out.write(f"distanceTrue: {true.dist:g}\n")
    out.write(f"tCube: {elapsed_approx:g}sec\n")
    out.write(f"tTrue: {elapsed_true:g}sec\n")
    out.write("R-near neighbors:\n")
    out.writelines(f"{image}\n" for image in in_radius)
    out.write("_____________\n")


def main(argv=None) -> int:
    """Build a hypercube index, answer the queries and write the report."""
    options = parse_options(argv)
    try:
        images = load_images(options.input_file)
        queries = _read_queries(options.query_file, images.shape[1])
    except (OSError, ValueError) as exc:
        print(f"open: {exc}", file=sys.stderr)
        return 1

    cube = Cube(images, WINDOW, options.k, np.random.default_rng())

    with open(options.output_file, "w", encoding="utf-8") as out:
        for number, query in enumerate(queries, 1):
            start = time.perf_counter()
            exact = brute_nearest(images, query, options.n, 2)
            elapsed_true = time.perf_counter() - start

            start = time.perf_counter()
            cube.query(query, options.m, options.probes, 2)
            approx = cube.nearest_search(options.n)
            elapsed_approx = time.perf_counter() - start

            in_radius = cube.range_search(float(options.radius))
            _write_result(out, number, approx, exact, in_radius,
                          elapsed_approx, elapsed_true)
    return 0


if __name__ == "__main__":
    sys.exit(main())