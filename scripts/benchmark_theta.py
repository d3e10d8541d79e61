#!/usr/bin/env python3
"""
Benchmark the Barnes-Hut accuracy/speed tradeoff across theta values.

For each body count, builds one tree from a random cloud and times the
force traversal at every theta, comparing against the exact pairwise sum.

Usage:
    uv run python scripts/benchmark_theta.py [--sizes N,...] [--thetas T,...]

Examples:
    uv run python scripts/benchmark_theta.py
    uv run python scripts/benchmark_theta.py --sizes 100,1000 --thetas 0,0.5,1
    uv run python scripts/benchmark_theta.py --output results.json
"""

from __future__ import annotations

import argparse
import json
import time
from typing import Any

from barnes_hut import (
    QuadTree,
    exact_accelerations,
    force_error,
    random_bodies,
    tree_accelerations,
)

SIZE = (1000.0, 800.0)


def benchmark_theta(n: int, theta: float, seed: int = 42) -> dict[str, Any]:
    """
    Benchmark a single (body count, theta) pair.

    Returns:
        Dict with timing, traversal and error info
    """
    bodies = random_bodies(n, size=SIZE, random_seed=seed)

    start = time.perf_counter()
    tree = QuadTree((0.0, 0.0, *SIZE), theta=theta)
    for body in bodies:
        tree.insert(body)
    build_time = time.perf_counter() - start

    visits = 0
    start = time.perf_counter()
    approx = tree_accelerations(tree, bodies, theta)
    force_time = time.perf_counter() - start
    for body in bodies:
        tree.calculate_force(body, theta)
        visits += tree.last_visit_count

    exact = exact_accelerations(bodies, tree.min_distance)

    return {
        "num_bodies": n,
        "theta": theta,
        "build_seconds": build_time,
        "force_seconds": force_time,
        "mean_visits": visits / max(1, n),
        "mean_relative_error": force_error(approx, exact),
    }


def run_benchmarks(sizes: list[int], thetas: list[float]) -> list[dict]:
    """Run benchmarks over every size and theta."""
    results = []

    print(f"\nBenchmarking {len(thetas)} theta values on {len(sizes)} body counts")
    print("=" * 80)
    print(f"{'Bodies':>8s}{'Theta':>8s}{'Build s':>12s}{'Force s':>12s}{'Visits':>10s}{'Error':>12s}")
    print("-" * 80)

    for n in sizes:
        for theta in thetas:
            result = benchmark_theta(n, theta)
            results.append(result)
            print(
                f"{n:>8d}{theta:>8.2f}"
                f"{result['build_seconds']:>12.4f}{result['force_seconds']:>12.4f}"
                f"{result['mean_visits']:>10.1f}{result['mean_relative_error']:>12.2e}"
            )

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Barnes-Hut theta values")
    parser.add_argument("--sizes", default="100,500,2000", help="Comma-separated body counts")
    parser.add_argument("--thetas", default="0,0.25,0.5,1.0", help="Comma-separated theta values")
    parser.add_argument("--output", help="Output JSON file for results")

    args = parser.parse_args()

    sizes = [int(s) for s in args.sizes.split(",")]
    thetas = [float(t) for t in args.thetas.split(",")]

    results = run_benchmarks(sizes, thetas)

    if args.output and results:
        with open(args.output, "w") as f:
            json.dump(results, f, indent=2)
        print(f"\nResults saved to {args.output}")


if __name__ == "__main__":
    main()
