# tests/utils.py
"""
Small, reusable helpers used across the featurebasins test suite.

Functions:
- to_numpy(x): torch tensor or array-like to a numpy array.
- label_counts(labels): number of samples per label, -1 included.
- block_purity(labels, split_index): fraction of each synthetic block that carries
  its block's majority label, for 2-way datasets.
- time_block(label, meta=None): context manager that prints wall-clock time with optional metadata.
- print_timing(label, seconds, **meta): convenience printer for timings (used by time_block).
"""

from __future__ import annotations

import json
import time
from contextlib import contextmanager
from typing import Any, Dict, Tuple

import numpy as np
import torch


def to_numpy(x: Any) -> np.ndarray:
    """Convert a torch tensor or array-like to numpy."""
    if isinstance(x, torch.Tensor):
        return x.detach().cpu().numpy()
    return np.asarray(x)


def label_counts(labels: Any) -> Dict[int, int]:
    """
    Number of samples per label, in ascending label order.

    Parameters
    ----------
    labels : (n,) tensor or array of integer labels

    Returns
    -------
    dict label -> count
    """
    values, counts = np.unique(to_numpy(labels), return_counts=True)
    return {int(v): int(c) for v, c in zip(values, counts)}


def block_purity(labels: Any, split_index: int) -> Tuple[float, float]:
    """
    Purity of the two blocks of a 2-way synthetic dataset.

    The first `split_index` samples form block 0 and the rest block 1. Each
    block's purity is the share of its samples carrying the block's most
    common label; unclassified samples (-1) count against purity.

    Returns
    -------
    (purity_0, purity_1)
    """
    y = to_numpy(labels).astype(int)
    if not (0 < split_index < y.size):
        raise ValueError(f"split_index must be in (0, {y.size}), got {split_index}")

    def _purity(block: np.ndarray) -> float:
        block = block[block != -1]
        if block.size == 0:
            return 0.0
        return float(np.bincount(block - block.min()).max())

    first, second = y[:split_index], y[split_index:]
    return _purity(first) / first.size, _purity(second) / second.size


@contextmanager
def time_block(label: str, meta: Dict[str, Any] | None = None):
    """
    Context manager to time a block and print a single-line summary.

    Example
    -------
    >>> with time_block("classify", {"n": 200, "d": 2}):
    ...     classifier.classify(features)

    Output
    ------
    [timing] classify {"n":200,"d":2} 0.123s
    """
    t0 = time.perf_counter()
    try:
        yield
    finally:
        dt = time.perf_counter() - t0
        print_timing(label, dt, **(meta or {}))


def print_timing(label: str, seconds: float, **meta: Any) -> None:
    """
    Print timing in a compact, machine-readable single line.

    Example:
    [timing] classify {"n":200,"d":2} 0.123s
    """
    meta_str = ""
    if meta:
        try:
            meta_str = " " + json.dumps(meta, separators=(",", ":"))
        except TypeError:
            meta_str = " " + repr(meta)
    print(f"[timing] {label}{meta_str} {seconds:.3f}s")
