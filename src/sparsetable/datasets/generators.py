"""
Entry-batch generators for sparse-table tests and benchmarks.

Each generator returns `n` DISTINCT keys in `[0, size)` plus one value per
key, in shuffled (unsorted) order so construction always exercises the
oracle.

Currently implemented:
- dist == "random":
    Keys drawn uniformly without replacement from [0, size).

- dist == "clustered":
    A contiguous run [offset, offset + n) at a uniformly chosen offset.

- dist == "strided":
    Evenly spaced keys 0, stride, 2*stride, ... with stride = size // n.

- dist == "boundary":
    Like "random", but always contains 0 and, for n >= 2, size - 1, to
    exercise the padding slots.

Public API (stable):
    make_entries(n: int, spec: dict, rng: numpy.random.Generator)
        -> tuple[list[int], list[int]]

Spec shape:
    {
        "dist": "random",
        "size": 1_000_000,                        # logical table length (>= 1)
        "params": { "value_range": [1, 2**32 - 1] }  # optional; inclusive
    }

Conventions:
- `value_range` is **inclusive** on both ends; default [1, 4294967295], so a
  stored value never collides with the default 0.
- Returns Python lists of Python ints (tables stay NumPy-agnostic).
- The caller supplies the RNG (for reproducibility across runs).
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

import numpy as np

SUPPORTED_DISTS = {
    "random",
    "clustered",
    "strided",
    "boundary",
}
DEFAULT_VALUE_RANGE: Tuple[int, int] = (1, 4294967295)

__all__ = ["SUPPORTED_DISTS", "DEFAULT_VALUE_RANGE", "make_entries"]


def make_entries(
    n: int, spec: Dict[str, Any], rng: np.random.Generator
) -> Tuple[List[int], List[int]]:
    """
    Generate `n` (key, value) pairs according to `spec`, using the provided RNG.

    Parameters
    ----------
    n : int
        Number of entries. Must be >= 0 and <= spec["size"].
    spec : dict
        Distribution specification (see module docstring).
    rng : numpy.random.Generator
        Random number generator owned by the caller (seeded upstream).

    Returns
    -------
    (keys, values) : tuple[list[int], list[int]]
        Two lists of length `n`; keys are distinct and unsorted.

    Raises
    ------
    ValueError
        If inputs are invalid or if the distribution is unsupported.
    """
    _validate_n(n)

    if not isinstance(spec, dict):
        raise ValueError("spec must be a dict")

    dist = spec.get("dist", None)
    if dist not in SUPPORTED_DISTS:
        raise ValueError(
            f"Unsupported dataset dist: {dist!r}. Supported: {sorted(SUPPORTED_DISTS)}"
        )

    size = _parse_size(spec)
    if n > size:
        raise ValueError(f"cannot draw {n} distinct keys from size {size}")

    params = spec.get("params", {}) or {}
    lo, hi = _parse_value_range(params)

    if dist == "random":
        keys = _distinct_uniform(n, 0, size, rng)

    elif dist == "clustered":
        offset = int(rng.integers(0, size - n + 1)) if n else 0
        keys = list(range(offset, offset + n))

    elif dist == "strided":
        stride = size // n if n else 1
        keys = [i * stride for i in range(n)]

    elif dist == "boundary":
        if n == 0:
            keys = []
        elif size == 1 or n == 1:
            keys = [0]
        else:
            inner = _distinct_uniform(n - 2, 1, size - 1, rng)
            keys = [0, size - 1] + inner

    else:
        # Should be unreachable because of the check above; keep explicit for clarity.
        raise ValueError(f"Unhandled dataset dist: {dist!r}")

    keys = [keys[int(i)] for i in rng.permutation(len(keys))]
    values = rng.integers(lo, hi + 1, size=len(keys), dtype=np.int64).tolist()
    return keys, values


# ------------------------- helpers ------------------------- #


def _distinct_uniform(k: int, lo: int, hi: int, rng: np.random.Generator) -> List[int]:
    """Draw `k` distinct ints from [lo, hi) without materialising the range."""
    span = hi - lo
    if k > span:
        raise ValueError(f"cannot draw {k} distinct values from [{lo}, {hi})")
    if k == 0:
        return []
    # Dense requests: a permutation prefix is cheaper than rejection.
    if span <= 4 * k:
        return [lo + int(x) for x in rng.permutation(span)[:k]]

    chosen: List[int] = []
    seen = set()
    while len(chosen) < k:
        need = k - len(chosen)
        batch = rng.integers(lo, hi, size=need * 2, dtype=np.int64)  # oversample to reduce collisions
        for v in map(int, batch):
            if v not in seen:
                seen.add(v)
                chosen.append(v)
                if len(chosen) == k:
                    break
    return chosen


def _validate_n(n: int) -> None:
    if not _is_int_like(n):
        raise ValueError("n must be an int")
    if n < 0:
        raise ValueError("n must be nonnegative")


def _parse_size(spec: Dict[str, Any]) -> int:
    if "size" not in spec:
        raise ValueError("spec.size must be provided (int >= 1)")
    size = spec["size"]
    if not _is_int_like(size) or int(size) < 1:
        raise ValueError(f"spec.size must be an integer >= 1; got {size!r}")
    return int(size)


def _parse_value_range(params: Dict[str, Any]) -> Tuple[int, int]:
    """
    Parse the optional inclusive value range; default DEFAULT_VALUE_RANGE.
    """
    if "value_range" not in params:
        return DEFAULT_VALUE_RANGE
    spec = params["value_range"]
    if not isinstance(spec, (list, tuple)) or len(spec) != 2:
        raise ValueError("params.value_range must be a 2-element list/tuple [min, max]")
    lo_raw, hi_raw = spec
    if not _is_int_like(lo_raw) or not _is_int_like(hi_raw):
        raise ValueError("params.value_range values must be integers")
    lo, hi = int(lo_raw), int(hi_raw)
    if lo > hi:
        raise ValueError(f"params.value_range invalid: min > max ({lo} > {hi})")
    return lo, hi


def _is_int_like(x: Any) -> bool:
    # Accept Python ints and NumPy integer types
    return isinstance(x, (int, np.integer)) and not isinstance(x, bool)
