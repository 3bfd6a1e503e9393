"""
Latency sampling for one (variant, operation) benchmark cell.

A sample is one call `op_fn(setup())` in which only `op_fn` sits inside the
`perf_counter_ns` window. `setup` hands each sample its own input, e.g. a
freshly built `MutSparseArray`, since a pass of `set` calls spends capacity
and cannot be repeated on the same table.

Result schema returned by `time_table_call`:
    op                   cell label, e.g. "mutable.set"
    repeats              samples requested
    samples_ns           elapsed ns of each finished sample
    status               "ok", "timeout" (a sample ran over budget) or "error"
    error                repr of the exception when status == "error"
    timed_out_on_repeat  repeat index that ran over budget
"""

from __future__ import annotations

import gc
import logging
import time
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)

__all__ = ["time_table_call"]


def time_table_call(
    *,
    op_name: str,
    op_fn: Callable[[Any], Any],
    setup: Callable[[], Any],
    repeats: int,
    warmup: bool,
    disable_gc: bool,
    timeout_seconds: float,
) -> Dict[str, Any]:
    """
    Collect up to `repeats` latency samples of `op_fn`.

    Table errors (CapacityExceeded, RangeViolation, ...) raised by `op_fn` end
    the cell with status "error" instead of propagating, so the runner can
    skip that cell at larger sizes. With `warmup`, one untimed call runs
    first; with `disable_gc`, the collector is off for the sampling loop only.
    """
    if repeats < 0:
        raise ValueError("repeats must be nonnegative")
    if timeout_seconds <= 0:
        raise ValueError("timeout_seconds must be positive")

    result: Dict[str, Any] = {
        "op": op_name,
        "repeats": repeats,
        "samples_ns": [],
        "status": "ok",
        "error": None,
        "timed_out_on_repeat": None,
    }

    if warmup and repeats > 0:
        try:
            op_fn(setup())
        except Exception as e:
            logger.debug("warmup of %s failed", op_name, exc_info=True)
            result.update(status="error", error=f"warmup failed: {e!r}")
            return result

    budget_ns = int(timeout_seconds * 1e9)
    gc_was_on = gc.isenabled()
    if disable_gc:
        gc.collect()
        gc.disable()
    try:
        for r in range(repeats):
            try:
                arg = setup()
                start = time.perf_counter_ns()
                op_fn(arg)
                elapsed = time.perf_counter_ns() - start
            except Exception as e:
                logger.debug("%s failed at repeat %d", op_name, r, exc_info=True)
                result.update(status="error", error=f"run failed at repeat {r}: {e!r}")
                break

            result["samples_ns"].append(elapsed)
            if elapsed > budget_ns:
                result.update(status="timeout", timed_out_on_repeat=r)
                break
    finally:
        if disable_gc and gc_was_on:
            gc.enable()

    return result
