"""
Experiment runner: orchestrates a table latency sweep from a YAML config.

Usage (from repo root):
    python -m sparsetable.bench.runner experiments/configs/01_lookup_scaling.yaml

Outputs in a new run directory:
    - config_resolved.yaml    # the config we actually used
    - meta.json               # environment info (python, numpy, cpu/ram, git commit)
    - results.jsonl           # one JSON line per successful timing sample
    - summary.csv             # median + IQR per (variant, op, n)
    - (console) rich/tqdm summaries

Design notes:
- For each entry count n, we generate ONE batch and ONE query list and give
  the same inputs to every variant.
- `get` and `set` time a whole pass over the query list; `ns_per_op` divides
  by its length.
- `set` only applies to variants that support updates; mutable variants are
  built with room for every query so inserts never hit CapacityExceeded.
- On timeout/error for a (variant, op) at size n, we skip larger sizes for it.
"""

from __future__ import annotations

import argparse
import datetime as _dt
import json
import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
import psutil
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from tqdm import tqdm

from sparsetable.bench.measure import time_table_call
from sparsetable.datasets import make_entries
from sparsetable.tables import MutSparseArray, SparseArray, SparseTable

logger = logging.getLogger(__name__)
_console = Console()

VARIANTS: Dict[str, Any] = {
    "immutable": SparseArray,
    "mutable": MutSparseArray,
    "bounded": SparseTable,
}
MUTABLE_VARIANTS = {"mutable", "bounded"}
SUPPORTED_OPS = ("create", "get", "set")

SUMMARY_COLUMNS = ["variant", "op", "n", "samples_ok", "median_ns", "iqr_ns", "min_ns", "max_ns", "median_ns_per_op"]


# ------------------------- data structures ------------------------- #

@dataclass(frozen=True)
class VariantSpec:
    name: str
    table_cls: Any
    ops: Tuple[str, ...]


# ------------------------- helpers: IO & meta ------------------------- #

def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def _write_yaml(obj: Dict[str, Any], path: Path) -> None:
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(obj, f, sort_keys=False)


def _append_jsonl(obj: Dict[str, Any], path: Path) -> None:
    with path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(obj, separators=(",", ":"), ensure_ascii=False))
        f.write("\n")


def _timestamp() -> str:
    return _dt.datetime.now().strftime("%Y%m%d_%H%M%S")


def _ensure_run_dir(base_dir: Path, experiment_name: str) -> Path:
    base_dir.mkdir(parents=True, exist_ok=True)
    run_dir = base_dir / f"{_timestamp()}_{experiment_name}"
    run_dir.mkdir(parents=False, exist_ok=False)
    return run_dir


def _git_commit_short() -> Optional[str]:
    try:
        out = subprocess.check_output(["git", "rev-parse", "--short", "HEAD"], stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):
        return None
    return out.decode("utf-8").strip()


def _gather_meta() -> Dict[str, Any]:
    import platform
    meta = {
        "python": platform.python_version(),
        "numpy": np.__version__,
        "pandas": pd.__version__,
        "psutil": psutil.__version__,
        "git_commit": _git_commit_short(),
        "machine": {
            "cpu": platform.processor() or platform.machine(),
            "cores_logical": psutil.cpu_count(logical=True),
            "cores_physical": psutil.cpu_count(logical=False),
            "ram_gb": round(psutil.virtual_memory().total / (1024**3), 2),
            "platform": platform.platform(),
        },
        "start_time": _dt.datetime.now().isoformat(timespec="seconds"),
        "pid": os.getpid(),
        "cwd": str(Path.cwd()),
    }
    return meta


def _resolve_variants(names: List[Any], ops: List[Any]) -> List[VariantSpec]:
    for op in ops:
        if op not in SUPPORTED_OPS:
            raise ValueError(f"Unsupported operation {op!r}. Supported: {list(SUPPORTED_OPS)}")

    specs: List[VariantSpec] = []
    seen = set()
    for name in names:
        if not name or not isinstance(name, str):
            raise ValueError("Each variant must be a non-empty string")
        if name in seen:
            raise ValueError(f"Duplicate variant name in config: {name}")
        seen.add(name)
        if name not in VARIANTS:
            raise ValueError(f"Unknown variant {name!r}. Known: {sorted(VARIANTS)}")

        variant_ops = tuple(op for op in ops if op != "set" or name in MUTABLE_VARIANTS)
        specs.append(VariantSpec(name=name, table_cls=VARIANTS[name], ops=variant_ops))
    return specs


def _q1(s: pd.Series) -> float:
    return s.quantile(0.25)


def _q3(s: pd.Series) -> float:
    return s.quantile(0.75)


def _aggregate_summary(jsonl_path: Path) -> pd.DataFrame:
    if not jsonl_path.exists():
        return pd.DataFrame(columns=SUMMARY_COLUMNS)
    df = pd.read_json(jsonl_path, lines=True)
    # Filter only successful samples (lines with time_ns present)
    if "time_ns" not in df.columns:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)
    df = df[df["time_ns"].notna()]
    if df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    out = (
        df.groupby(["variant", "op", "n"], as_index=False)
        .agg(
            samples_ok=("time_ns", "count"),
            median_ns=("time_ns", "median"),
            q1_ns=("time_ns", _q1),
            q3_ns=("time_ns", _q3),
            min_ns=("time_ns", "min"),
            max_ns=("time_ns", "max"),
            median_ns_per_op=("ns_per_op", "median"),
        )
    )
    out["iqr_ns"] = out["q3_ns"] - out["q1_ns"]
    out = out.drop(columns=["q1_ns", "q3_ns"])
    # Convert to int for clean CSV (pandas may hand back floats)
    int_cols = ["median_ns", "iqr_ns", "min_ns", "max_ns", "median_ns_per_op"]
    out[int_cols] = out[int_cols].astype("int64")
    return out[SUMMARY_COLUMNS].sort_values(["variant", "op", "n"], ignore_index=True)


def _print_rich_summary(summary: pd.DataFrame, sizes: List[int]) -> None:
    table = Table(title="Benchmark Summary (median ns per op)")
    table.add_column("Variant", style="bold")
    table.add_column("Op")
    for n in sizes:
        table.add_column(f"n={n}", justify="right")

    if summary.empty:
        _console.print("(no samples)")
        return

    for (variant, op), group in summary.groupby(["variant", "op"], sort=True):
        row = [f"[bold]{variant}[/]", str(op)]
        for n in sizes:
            s = group[group["n"] == n]
            row.append("—" if s.empty else f"{int(s['median_ns_per_op'].values[0]):,}")
        table.add_row(*row)
    _console.print()
    _console.print(table)
    _console.print()


# ------------------------- operations ------------------------- #

def _build_op(
    op: str,
    spec: VariantSpec,
    keys: List[int],
    values: List[int],
    size: int,
    queries: List[int],
) -> Tuple[Callable[[], Any], Callable[[Any], Any], int]:
    """Return (setup, op_fn, ops_per_call) for one (variant, op) cell."""
    kwargs: Dict[str, Any] = {}
    if spec.name in MUTABLE_VARIANTS:
        kwargs["capacity"] = len(keys) + len(queries)

    def _create() -> Any:
        return spec.table_cls.create(keys, values, size, **kwargs)

    if op == "create":
        return (lambda: None), (lambda _: _create()), 1

    if op == "get":
        built = _create()

        def _get_all(table: Any) -> None:
            for q in queries:
                table.get(q)

        return (lambda: built), _get_all, max(len(queries), 1)

    if op == "set":
        def _set_all(table: Any) -> None:
            for i, q in enumerate(queries):
                table.set(q, i + 1)

        return _create, _set_all, max(len(queries), 1)

    raise ValueError(f"Unsupported operation: {op!r}")


# ------------------------- core runner ------------------------- #

def run_experiment(config_path: Path) -> Path:
    cfg = _load_yaml(config_path)

    # Required keys & basic validation
    required = ["experiment_name", "output_dir", "seed", "repeats", "warmup", "disable_gc", "timeout_seconds", "dataset", "sizes", "variants"]
    missing = [k for k in required if k not in cfg]
    if missing:
        raise ValueError(f"Missing required config keys: {missing}")

    experiment_name: str = str(cfg["experiment_name"])
    output_dir = Path(cfg["output_dir"])
    sizes: List[int] = [int(n) for n in cfg["sizes"]]
    repeats: int = int(cfg["repeats"])
    warmup: bool = bool(cfg["warmup"])
    disable_gc: bool = bool(cfg["disable_gc"])
    timeout_seconds: float = float(cfg["timeout_seconds"])
    dataset_spec: Dict[str, Any] = dict(cfg["dataset"])
    n_queries: int = int(cfg.get("queries", 1000))
    ops: List[str] = list(cfg.get("operations", list(SUPPORTED_OPS)))

    if not sizes:
        raise ValueError("Config 'sizes' must be a non-empty list of nonnegative integers")
    if "size" not in dataset_spec:
        raise ValueError("Config 'dataset' must define 'size' (logical table length)")
    table_size = int(dataset_spec["size"])

    variants = _resolve_variants(list(cfg["variants"]), ops)

    run_dir = _ensure_run_dir(output_dir, experiment_name)
    results_path = run_dir / "results.jsonl"
    summary_path = run_dir / "summary.csv"
    meta_path = run_dir / "meta.json"
    cfg_resolved_path = run_dir / "config_resolved.yaml"

    # Persist resolved config early
    _write_yaml(cfg, cfg_resolved_path)

    with meta_path.open("w", encoding="utf-8") as f:
        json.dump(_gather_meta(), f, indent=2)

    rng = np.random.default_rng(int(cfg["seed"]))

    # Per-(variant, op) skip flags (set on timeout/error)
    skip = {(v.name, op): False for v in variants for op in v.ops}

    _console.print(f"[bold green]Run directory:[/bold green] {run_dir}")
    _console.print(f"[bold]Experiment:[/bold] {experiment_name}")
    _console.print(f"[bold]Variants:[/bold] {', '.join(v.name for v in variants)}")
    _console.print()

    for n in tqdm(sizes, desc="Sizes", unit="n"):
        keys, values = make_entries(n, dataset_spec, rng)
        queries = rng.integers(0, table_size, size=n_queries, dtype=np.int64).tolist()
        logger.debug("n=%d: generated %d entries and %d queries", n, len(keys), len(queries))

        for v in variants:
            for op in v.ops:
                if skip[(v.name, op)]:
                    continue

                setup, op_fn, per_call = _build_op(op, v, keys, values, table_size, queries)
                res = time_table_call(
                    op_name=f"{v.name}.{op}",
                    op_fn=op_fn,
                    setup=setup,
                    repeats=repeats,
                    warmup=warmup,
                    disable_gc=disable_gc,
                    timeout_seconds=timeout_seconds,
                )

                for trial_idx, t_ns in enumerate(res["samples_ns"]):
                    _append_jsonl(
                        {
                            "variant": v.name,
                            "op": op,
                            "n": int(n),
                            "dataset": dataset_spec,
                            "trial": int(trial_idx),
                            "time_ns": int(t_ns),
                            "ns_per_op": int(t_ns) // per_call,
                        },
                        results_path,
                    )

                status = res.get("status", "ok")
                if status in ("timeout", "error"):
                    skip[(v.name, op)] = True
                    logger.warning("%s.%s at n=%d: %s %s", v.name, op, n, status, res.get("error") or "")
                    _append_jsonl(
                        {
                            "variant": v.name,
                            "op": op,
                            "n": int(n),
                            "status": status,
                            "error": res.get("error"),
                            "timed_out_on_repeat": res.get("timed_out_on_repeat"),
                        },
                        results_path,
                    )

    # Aggregate → summary.csv
    summary_df = _aggregate_summary(results_path)
    summary_df.to_csv(summary_path, index=False)

    _print_rich_summary(summary_df, sizes)

    _console.print("[bold green]Done.[/bold green] Wrote:")
    _console.print(f" - {results_path}")
    _console.print(f" - {summary_path}")
    _console.print(f" - {meta_path}")
    _console.print(f" - {cfg_resolved_path}")

    return run_dir


# ------------------------- CLI ------------------------- #

def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Run a sparse-table benchmark experiment from a YAML config.")
    p.add_argument("config", type=str, help="Path to YAML experiment config")
    p.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=_console, rich_tracebacks=True)],
    )
    config_path = Path(args.config).resolve()
    if not config_path.exists():
        raise SystemExit(f"Config file not found: {config_path}")
    try:
        run_experiment(config_path)
    except Exception as e:
        _console.print(f"[bold red]Runner failed:[/bold red] {e!r}")
        raise


if __name__ == "__main__":
    main()
