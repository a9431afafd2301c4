"""Benchmark: bridge call throughput.

Measures how many string round-trips and collection mutations complete
per second against the reference runtime.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from nsbridge import Bridge, HandleScope, ReferenceRuntime

_ITERATIONS: int = 5_000
_COLLECTION_SIZE: int = 200


def _report(operation: str, iterations: int, total: float) -> dict[str, object]:
    result: dict[str, object] = {
        "operation": operation,
        "iterations": iterations,
        "total_seconds": round(total, 4),
        "ops_per_second": round(iterations / total, 1),
        "avg_latency_ms": round(total / iterations * 1000, 4),
    }
    print(
        f"[bench_throughput] {result['operation']}: "
        f"{result['ops_per_second']:,.0f} ops/sec  "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def bench_text_round_trip() -> dict[str, object]:
    """Benchmark text → native string → text round-trips.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms.
    """
    bridge = Bridge(runtime=ReferenceRuntime())
    start = time.perf_counter()
    for index in range(_ITERATIONS):
        handle = bridge.scalars.text_to_native(f"notification-{index}")
        bridge.scalars.native_to_text(handle)
        bridge.runtime.release(handle)
    total = time.perf_counter() - start
    return _report("text_round_trip", _ITERATIONS, total)


def bench_collection_mutation() -> dict[str, object]:
    """Benchmark append / swap / remove_first_equal on a native collection.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms.
    """
    bridge = Bridge(runtime=ReferenceRuntime())
    arrays = bridge.arrays
    with HandleScope(bridge.runtime) as scope:
        elements = [scope.own(bridge.scalars.text_to_native(str(i))) for i in range(_COLLECTION_SIZE)]
        collection = scope.own(arrays.new_mutable_collection())
        start = time.perf_counter()
        for index in range(_ITERATIONS):
            element = elements[index % _COLLECTION_SIZE]
            arrays.append(collection, element)
            if arrays.count(collection) > 1:
                arrays.swap(collection, 0, arrays.count(collection) - 1)
            if arrays.count(collection) >= _COLLECTION_SIZE:
                arrays.remove_first_equal(collection, element)
        total = time.perf_counter() - start
    return _report("collection_mutation", _ITERATIONS, total)


if __name__ == "__main__":
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)

    for bench_fn, fname in [
        (bench_text_round_trip, "text_round_trip_baseline.json"),
        (bench_collection_mutation, "collection_mutation_baseline.json"),
    ]:
        result = bench_fn()
        output_path = results_dir / fname
        with open(output_path, "w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2)
        print(f"Results saved to {output_path}")
