"""Benchmark: permission-set algebra throughput: operations per second.

Measures how many union/intersection/difference/contains rounds complete per
second on two role-sized sets drawn from a wide, three-level schema.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from permtree.manager.permission_manager import PermissionManager

_ITERATIONS: int = 2_000
_RESOURCES: int = 20
_VERBS: tuple[str, ...] = ("create", "view", "edit", "delete")


def _make_schema() -> dict[str, object]:
    """Build a schema of resources, each with verbs and a nested comment group."""
    schema: dict[str, object] = {}
    for index in range(_RESOURCES):
        group: dict[str, object] = {verb: True for verb in _VERBS}
        group["comment"] = {verb: True for verb in _VERBS}
        schema[f"resource{index}"] = group
    return schema


def bench_algebra_throughput() -> dict[str, object]:
    """Benchmark one round of the four algebra operations.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms.
    """
    manager = PermissionManager.from_reference(_make_schema())
    editor = manager.perm_from_actions(
        {f"resource{i}.{verb}" for i in range(_RESOURCES) for verb in ("view", "edit")}
    )
    moderator = manager.perm_from_actions(
        {f"resource{i}.comment.{verb}" for i in range(0, _RESOURCES, 2) for verb in _VERBS}
        | {f"resource{i}.view" for i in range(_RESOURCES)}
    )

    start = time.perf_counter()
    for _ in range(_ITERATIONS):
        union = editor.union(moderator)
        editor.intersection(moderator)
        union.difference(editor)
        union.contains(moderator)
    total = time.perf_counter() - start

    result: dict[str, object] = {
        "operation": "algebra_round_throughput",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(total / _ITERATIONS * 1000, 4),
    }
    print(
        f"[bench_algebra_throughput] {result['operation']}: "
        f"{result['ops_per_second']:,.0f} ops/sec  "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_algebra_throughput()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "algebra_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
