"""Shared helpers: path checks, tensor loading, text scanning and array utilities."""

from __future__ import annotations

import re
import sys
from collections.abc import Callable, Iterable, Sequence
from os import PathLike
from pathlib import Path
from typing import Any, TextIO

import numpy as np

TOLERANCE = 1e-6
SEED = 987654

NUM_PATTERN = re.compile(r"[0-9.E\+-]+")


def check_path_exists(path: str | PathLike[str]) -> bool:
    """Return whether ``path`` exists, reporting a missing path on stderr."""
    if not Path(path).exists():
        print(f"Cannot find {path}", file=sys.stderr)
        return False
    return True


def load_tensor(path: str | PathLike[str]) -> np.ndarray | None:
    """Load an array saved with ``numpy.save``; ``None`` if missing or unreadable."""
    if not check_path_exists(path):
        return None
    try:
        loaded = np.load(path, allow_pickle=False)
    except (OSError, ValueError) as exc:
        print(f"Failed to load tensor from {path}\n{exc}", file=sys.stderr)
        return None
    if not isinstance(loaded, np.ndarray):
        loaded.close()
        print(f"Failed to load tensor from {path}\nnot a single array", file=sys.stderr)
        return None
    return loaded


def find_line(stream: TextIO | Iterable[str], pattern: str | re.Pattern[str]) -> str | None:
    """Return the first line of ``stream`` matching ``pattern``, without its newline."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    for raw in stream:
        line = raw.rstrip("\n")
        if regex.search(line):
            return line
    return None


def get_numerics(line: str, size: int) -> list[float] | None:
    """Extract exactly ``size`` numbers from ``line``; ``None`` if the count differs."""
    tokens = NUM_PATTERN.findall(line)
    if len(tokens) != size:
        return None
    return [float(token) for token in tokens]


def vmap(values: np.ndarray, function: Callable[[Any], Any]) -> np.ndarray:
    """Apply ``function`` element-wise, keeping the shape and dtype of ``values``."""
    values = np.asarray(values)
    result = np.zeros_like(values)
    for index, value in np.ndenumerate(values):
        result[index] = function(value)
    return result


def relative_error(computed: np.ndarray, expected: np.ndarray) -> float:
    """Mean absolute relative error of ``computed`` against ``expected``."""
    computed = np.asarray(computed)
    expected = np.asarray(expected)
    if not np.issubdtype(computed.dtype, np.floating):
        raise TypeError(f"relative_error expects a floating type, got {computed.dtype}")
    tiny = np.finfo(computed.dtype).tiny
    return float(np.mean(np.abs((computed - expected) / (computed + tiny))))


def mean_error(computed: np.ndarray, expected: np.ndarray) -> float:
    """Mean absolute difference between ``computed`` and ``expected``."""
    return float(np.mean(np.abs(np.asarray(computed) - np.asarray(expected))))


def flatten_tensors(tensors: Iterable[np.ndarray]) -> np.ndarray:
    """Concatenate the flattened arrays into a single 1-D array."""
    return np.concatenate([np.ravel(np.asarray(t)) for t in tensors])


def unflatten_like(flat: np.ndarray, like: Sequence[np.ndarray]) -> list[np.ndarray]:
    """Split a 1-D array into copies shaped like the arrays in ``like``."""
    flat = np.asarray(flat)
    if flat.ndim > 1:
        raise ValueError("expecting 1D data to unflatten")
    pieces = []
    start = 0
    for reference in like:
        reference = np.asarray(reference)
        stop = start + reference.size
        pieces.append(flat[start:stop].copy().reshape(reference.shape))
        start = stop
    return pieces


def stack(vec_tensors: Iterable[Iterable[np.ndarray]]) -> np.ndarray:
    """Stack groups of arrays, each group flattened and concatenated into one row."""
    return np.stack([flatten_tensors(tensors) for tensors in vec_tensors])