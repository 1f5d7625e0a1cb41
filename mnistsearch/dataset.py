"""Vector arithmetic and readers for the MNIST IDX file format."""

from __future__ import annotations

import struct
from os import PathLike
from typing import BinaryIO

import numpy as np

_META = struct.Struct(">iiii")
_LABEL_HEADER_SIZE = 8


def p_norm(p, q, norm: int = 2):
    """Distance between ``p`` and ``q``.

    Each absolute difference is squared ``norm - 1`` times before summing, and
    the sum is raised to ``1 / norm``. When ``p`` holds several vectors as
    rows, one distance per row is returned as an array.
    """
    diff = np.abs(np.asarray(p, dtype=np.float64) - np.asarray(q, dtype=np.float64))
    for _ in range(norm - 1):
        diff = diff * diff
    total = diff.sum(axis=-1)
    dist = np.power(total, 1.0 / norm)
    if np.ndim(dist) == 0:
        return float(dist)
    return dist


def dot_prod(a, b) -> float:
    """Dot product of two vectors as a float."""
    return float(np.dot(np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64)))


def reverse_int(i: int) -> int:
    """Swap the byte order of a 32-bit integer, giving a signed result."""
    raw = (i & 0xFFFFFFFF).to_bytes(4, "little")
    return int.from_bytes(raw, "big", signed=True)


def read_meta(stream: BinaryIO) -> tuple[int, int, int, int]:
    """Read the four big-endian header integers: magic, count, rows, columns."""
    data = stream.read(_META.size)
    if len(data) < _META.size:
        raise ValueError("truncated IDX header")
    return _META.unpack(data)


def read_image(stream: BinaryIO, pixels: int) -> np.ndarray:
    """Read one image of ``pixels`` unsigned bytes."""
    data = stream.read(pixels)
    if len(data) < pixels:
        raise ValueError("truncated image data")
    return np.frombuffer(data, dtype=np.uint8).copy()


def read_labels(path: str | PathLike, total_labels: int) -> np.ndarray:
    """Read ``total_labels`` label bytes from an IDX label file."""
    with open(path, "rb") as stream:
        header = stream.read(_LABEL_HEADER_SIZE)
        if len(header) < _LABEL_HEADER_SIZE:
            raise ValueError("truncated label header")
        data = stream.read(total_labels)
    if len(data) < total_labels:
        raise ValueError("truncated label data")
    return np.frombuffer(data, dtype=np.uint8).copy()


def load_images(path: str | PathLike) -> np.ndarray:
    """Load every image of an IDX image file as rows of a uint8 array."""
    with open(path, "rb") as stream:
        _, count, rows, columns = read_meta(stream)
        pixels = rows * columns
        if count < 0 or pixels < 0:
            raise ValueError("invalid IDX header")
        data = stream.read(count * pixels)
    if len(data) < count * pixels:
        raise ValueError("truncated image data")
    return np.frombuffer(data, dtype=np.uint8).reshape(count, pixels).copy()