"""Benchmark: validated derivation latency.

Measures the cost of PermissionManager.perm_from_actions() and
perm_from_structure(), both of which check every path against the
reference schema.
"""
from __future__ import annotations

import json
import statistics
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from permtree.manager.permission_manager import PermissionManager

_ITERATIONS: int = 1_000


def _make_schema() -> dict[str, object]:
    return {
        app: {
            area: {verb: True for verb in ("create", "view", "edit", "delete")}
            for area in ("users", "billing", "reports", "settings")
        }
        for app in ("admin", "portal", "api")
    }


def bench_derivation_latency() -> dict[str, object]:
    """Benchmark alternating action-list and structure derivations.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms.
    """
    manager = PermissionManager.from_reference(_make_schema())
    actions = {f"portal.{area}.view" for area in ("users", "billing", "reports")}
    structure = {"admin": {"users": {"create": True, "delete": False}}}

    latencies: list[float] = []
    for index in range(_ITERATIONS):
        start = time.perf_counter()
        if index % 2:
            manager.perm_from_actions(actions)
        else:
            manager.perm_from_structure(structure)
        latencies.append(time.perf_counter() - start)

    total = sum(latencies)
    p99 = statistics.quantiles(latencies, n=100)[98] if len(latencies) > 1 else latencies[0]
    result: dict[str, object] = {
        "operation": "validated_derivation_latency",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(total / _ITERATIONS * 1000, 4),
        "p99_latency_ms": round(p99 * 1000, 4),
    }
    print(
        f"[bench_derivation_latency] {result['operation']}: "
        f"avg {result['avg_latency_ms']:.4f} ms  p99 {result['p99_latency_ms']:.4f} ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_derivation_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "derivation_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
