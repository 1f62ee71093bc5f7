#!/usr/bin/env python3
"""
Fanout Performance Benchmarks

Measures the cost of the subject's hot paths and prints a summary table.

Usage:
    python scripts/benchmark.py              # Run all benchmarks
    python scripts/benchmark.py --config     # Show current benchmark configuration
    python scripts/benchmark.py --writers 8  # Writer threads for the contention run

Configuration:
    Adjust the constants at the top of the file to change benchmark parameters.
"""

import argparse
import threading
import time
from typing import Callable, Dict, List

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from fanout import Subject

NOTIFY_ROUNDS = 100_000  # notify calls per notify benchmark
SUBSCRIBERS = 10  # subscribers under the notified tag
CHURN_ROUNDS = 10_000  # subscribe/unsubscribe pairs per churn benchmark
DEFAULT_WRITERS = 4  # writer threads during the contention benchmark


def print_config():
    """Print the current benchmark configuration."""
    print("Benchmark configuration:")
    print(f"  NOTIFY_ROUNDS   = {NOTIFY_ROUNDS:,}")
    print(f"  SUBSCRIBERS     = {SUBSCRIBERS}")
    print(f"  CHURN_ROUNDS    = {CHURN_ROUNDS:,}")
    print(f"  DEFAULT_WRITERS = {DEFAULT_WRITERS}")


def _on_value(value: int) -> None:
    pass


def _populated_subject() -> Subject:
    subject = Subject()
    for _ in range(SUBSCRIBERS):
        subject.subscribe("bench", _on_value)
    return subject


def bench_notify() -> Dict[str, float]:
    """Notify with no concurrent writers."""
    subject = _populated_subject()
    start = time.perf_counter()
    for i in range(NOTIFY_ROUNDS):
        subject.notify_tagged("bench", i)
    elapsed = time.perf_counter() - start
    return {"operations": NOTIFY_ROUNDS, "elapsed": elapsed}


def bench_notify_unmatched() -> Dict[str, float]:
    """Notify with an argument shape no subscriber accepts."""
    subject = _populated_subject()
    start = time.perf_counter()
    for i in range(NOTIFY_ROUNDS):
        subject.notify_tagged("bench", float(i))
    elapsed = time.perf_counter() - start
    return {"operations": NOTIFY_ROUNDS, "elapsed": elapsed}


def bench_churn() -> Dict[str, float]:
    """Subscribe followed by unsubscribe on one thread."""
    subject = _populated_subject()
    start = time.perf_counter()
    for _ in range(CHURN_ROUNDS):
        subject.subscribe("bench", _on_value).unsubscribe()
    elapsed = time.perf_counter() - start
    return {"operations": CHURN_ROUNDS * 2, "elapsed": elapsed}


def bench_notify_under_contention(writers: int) -> Dict[str, float]:
    """Notify while writer threads keep subscribing and unsubscribing."""
    subject = _populated_subject()
    stop = threading.Event()

    def churn():
        while not stop.is_set():
            subject.subscribe("bench", _on_value).unsubscribe()

    threads = [threading.Thread(target=churn) for _ in range(writers)]
    for thread in threads:
        thread.start()
    try:
        start = time.perf_counter()
        for i in range(NOTIFY_ROUNDS):
            subject.notify_tagged("bench", i)
        elapsed = time.perf_counter() - start
    finally:
        stop.set()
        for thread in threads:
            thread.join()
    return {"operations": NOTIFY_ROUNDS, "elapsed": elapsed}


class FanoutBenchmark:
    """Run the benchmarks and render the results with rich."""

    def __init__(self, writers: int):
        self.console = Console()
        self.benchmarks: List[tuple[str, Callable[[], Dict[str, float]]]] = [
            ("Notify", bench_notify),
            ("Notify (no match)", bench_notify_unmatched),
            ("Subscribe + unsubscribe", bench_churn),
            (
                f"Notify ({writers} writers)",
                lambda: bench_notify_under_contention(writers),
            ),
        ]

    def run_benchmarks(self):
        self.console.print(
            Panel(
                Align.center("Fanout Performance Benchmark Suite"),
                title="Fanout Benchmarks",
                border_style="blue",
            )
        )
        self.console.print()

        results = []
        for name, bench in self.benchmarks:
            self.console.print(f"[yellow]Running {name}...[/yellow]")
            result = bench()
            ops_sec = result["operations"] / max(result["elapsed"], 1e-9)
            self.console.print(f"[green]✓[/green] {name}: {ops_sec:,.0f} ops/sec")
            results.append((name, result, ops_sec))

        table = Table(title="Benchmark Results")
        table.add_column("Benchmark", style="cyan", no_wrap=True)
        table.add_column("Operations", style="magenta", justify="right")
        table.add_column("Performance", style="green", justify="right")
        table.add_column("Latency", style="yellow", justify="right")
        for name, result, ops_sec in results:
            latency_us = result["elapsed"] / result["operations"] * 1e6
            table.add_row(
                name,
                f"{result['operations']:,}",
                f"{ops_sec:,.0f} ops/sec",
                f"{latency_us:.2f}μs",
            )
        self.console.print()
        self.console.print(table)


def main():
    """Main entry point for the benchmark script."""
    parser = argparse.ArgumentParser(description="Fanout Performance Benchmarks")
    parser.add_argument(
        "--config", action="store_true", help="Show current benchmark configuration"
    )
    parser.add_argument(
        "--writers",
        type=int,
        default=DEFAULT_WRITERS,
        help="Writer threads during the contention benchmark",
    )
    args = parser.parse_args()

    if args.config:
        print_config()
        return

    FanoutBenchmark(args.writers).run_benchmarks()


if __name__ == "__main__":
    main()
