"""
Boyer-Moore Majority Vote: demo, interactive CLI and benchmark experiments

Commands:
  demo         run the algorithm on a few fixed arrays
  test         print validation, generation and metric checks
  benchmark    quick benchmark (sizes 1000, 10000, 100000; 5 runs each)
  cli          interactive menu (choices 0-9)
  experiments  size sweep with and without a majority, written to --outdir
  help         show usage

With no command a short start menu is shown.

Outputs of `experiments` (in --outdir):
  - metrics.csv     (raw row per run)
  - summary.csv     (grouped mean/stdev per size and majority flag)
  - report.txt      (text report)
  - *.png           (charts)

How to run:
  python experiments.py demo
  python experiments.py experiments --outdir results --runs 10 --sizes 1000,10000,100000
  python experiments.py experiments --runs 5 --workers 4 --no_plots
"""

from __future__ import annotations

import argparse
import csv
import gc
import random
import statistics
import time
import tracemalloc
from pathlib import Path
from typing import Callable, Dict, List, Optional, TextIO

import matplotlib.pyplot as plt

import majority_vote as mv
from tracker import (
    PerformanceSample,
    PerformanceSummary,
    PerformanceTracker,
    step_sizes,
    stress_sizes,
)


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def parse_int_list(s: str) -> List[int]:
    return [int(x) for x in parse_csv_list(s)]

def format_array(array: Optional[List[int]]) -> str:
    if array is None:
        return "null"
    return "[" + ", ".join(str(x) for x in array) + "]"

def memory_usage_stats() -> str:
    """tracemalloc current/peak (zero unless tracing is on) and the gc-tracked object count"""
    current, peak = tracemalloc.get_traced_memory() if tracemalloc.is_tracing() else (0, 0)
    return (
        f"Memory Usage: Current={current / (1024 * 1024):.1f} MB, "
        f"Peak={peak / (1024 * 1024):.1f} MB, Tracked objects={len(gc.get_objects())}"
    )


# Demo / basic checks

DEMO_ARRAYS = [
    ("Array with majority element", [1, 1, 2, 1, 3, 1, 4]),
    ("Array without majority element", [1, 2, 3, 4, 5]),
    ("Array with negative numbers", [-1, -1, -1, 2, 3]),
    ("Edge case - single element", [42]),
    ("Edge case - empty array", []),
]

def run_demo(out: Optional[TextIO] = None) -> None:
    print("\n=== Algorithm Demonstration ===", file=out)
    for i, (title, array) in enumerate(DEMO_ARRAYS, start=1):
        print(f"\n{i}. {title}:", file=out)
        print(f"Input: {format_array(array)}", file=out)
        print(f"Result: {mv.find_majority(array)}", file=out)


def run_basic_tests(out: Optional[TextIO] = None) -> None:
    print("\n=== Running Basic Tests ===", file=out)

    print("\n1. Input Validation Tests:", file=out)
    print(f"Null input: {mv.validate(None)}", file=out)
    print(f"Empty input: {mv.validate([])}", file=out)
    print(f"Valid input: {mv.validate([1, 2, 3])}", file=out)

    print("\n2. Array Generation Tests:", file=out)
    print(f"Array with majority (size 10): {format_array(mv.generate_test_array(10, True))}", file=out)
    print(f"Array without majority (size 10): {format_array(mv.generate_test_array(10, False))}", file=out)

    print("\n3. Performance Tests:", file=out)
    for size in (100, 1000, 10000):
        metrics = mv.find_majority(mv.generate_test_array(size, True)).metrics
        print(
            f"Size {size}: {metrics.comparisons} comparisons, "
            f"{metrics.element_accesses} accesses, {metrics.elapsed_millis:.3f} ms",
            file=out,
        )


def run_quick_benchmark(tracker: PerformanceTracker, out: Optional[TextIO] = None) -> Dict[int, PerformanceSummary]:
    print("\n=== Quick Benchmark ===", file=out)
    t0 = now_ns()
    summaries = tracker.run_matrix([1000, 10000, 100000], True, 5)
    print(f"Benchmark completed in {ns_to_ms(now_ns() - t0):.0f} ms", file=out)
    for summary in summaries.values():
        print(summary, file=out)
    return summaries


# Interactive menu

MENU = """
=== Main Menu ===
1. Run Single Test
2. Quick Benchmark
3. Comprehensive Benchmark
4. Comparison Test (Majority vs No Majority)
5. Interactive Test
6. Display Results
7. Export Results
8. Memory Statistics
9. Stress Test
0. Exit"""


class BenchmarkMenu:
    """
    Numbered-choice REPL over a PerformanceTracker
    read_line is injectable so the loop can be driven from tests
    """

    def __init__(self, tracker: Optional[PerformanceTracker] = None,
                 read_line: Callable[[str], str] = input, out: Optional[TextIO] = None,
                 export_dir: Path = Path(".")):
        self.tracker = tracker if tracker is not None else PerformanceTracker()
        self.read_line = read_line
        self.out = out
        self.export_dir = export_dir

        self.actions: Dict[str, Callable[[], None]] = {
            "1": self.single_test,
            "2": self.quick_benchmark,
            "3": self.comprehensive_benchmark,
            "4": self.comparison_test,
            "5": self.interactive_test,
            "6": self.display_results,
            "7": self.export_results,
            "8": self.memory_stats,
            "9": self.stress_test,
        }

    def say(self, text: str = "") -> None:
        print(text, file=self.out)

    def ask(self, prompt: str) -> str:
        return self.read_line(prompt).strip()

    def ask_int(self, prompt: str) -> int:
        return int(self.ask(prompt)) # ValueError reaches the loop

    def ask_yes(self, prompt: str) -> bool:
        return self.ask(prompt).lower().startswith("y")

    def run(self) -> None:
        self.say("=== Boyer-Moore Majority Vote Algorithm Benchmark Runner ===")
        while True:
            self.say(MENU)
            try:
                choice = self.ask("Enter your choice: ")
            except EOFError:
                self.say("Goodbye!")
                return

            if choice == "0":
                self.say("Goodbye!")
                return

            action = self.actions.get(choice)
            if action is None:
                self.say("Invalid choice. Please try again.")
                continue

            try:
                action()
            except EOFError:
                self.say("Goodbye!")
                return
            except Exception as e:
                self.say(f"Error: {e}")
                self.say("Please try again.")

    def _print_summaries(self, summaries: Dict[int, PerformanceSummary], indent: str = "") -> None:
        for summary in summaries.values():
            self.say(f"{indent}{summary}")

    def single_test(self) -> None:
        self.say("\n=== Single Test ===")
        size = self.ask_int("Enter array size: ")
        want_majority = self.ask_yes("Should array have majority element? (y/n): ")
        runs = self.ask_int("Number of runs: ")

        self.say("\nRunning test...")
        t0 = now_ns()
        samples = self.tracker.run_trials(size, want_majority, runs)
        self.say(f"Test completed in {ns_to_ms(now_ns() - t0):.0f} ms")
        self.say(f"Results for {len(samples)} runs:")
        if samples:
            self.say(str(PerformanceSummary.from_samples(mv.ALGORITHM_NAME, size, samples)))

    def quick_benchmark(self) -> None:
        run_quick_benchmark(self.tracker, self.out)

    def comprehensive_benchmark(self) -> None:
        self.say("\n=== Comprehensive Benchmark ===")
        min_size = self.ask_int("Enter minimum size: ")
        max_size = self.ask_int("Enter maximum size: ")
        step = self.ask_int("Enter step size: ")
        runs = self.ask_int("Runs per size: ")
        want_majority = self.ask_yes("Should arrays have majority elements? (y/n): ")

        sizes = step_sizes(min_size, max_size, step)
        self.say(f"Sizes: {sizes}")
        self.say(f"Runs per size: {runs}")
        t0 = now_ns()
        summaries = self.tracker.run_matrix(sizes, want_majority, runs)
        self.say(f"Benchmark completed in {ns_to_ms(now_ns() - t0):.0f} ms")
        self.say("\nResults:")
        self._print_summaries(summaries)

    def comparison_test(self) -> None:
        self.say("\n=== Comparison Test ===")
        sizes = parse_int_list(self.ask("Enter array sizes (comma-separated): "))
        runs = self.ask_int("Runs per configuration: ")

        t0 = now_ns()
        comparison = self.tracker.compare_majority_vs_none(sizes, runs)
        self.say(f"Comparison completed in {ns_to_ms(now_ns() - t0):.0f} ms")
        self.say("\nResults:")
        for label, summaries in comparison.items():
            self.say(f"\n{label}:")
            self._print_summaries(summaries, indent="  ")

    def interactive_test(self) -> None:
        self.say("\n=== Interactive Test ===")
        while True:
            line = self.ask("Enter array elements (comma-separated, or 'quit' to exit): ")
            if line.lower() == "quit":
                return
            try:
                array = parse_int_list(line)
            except ValueError:
                self.say("Invalid input. Please enter comma-separated integers.")
                continue

            self.say(f"Array: {format_array(array)}")
            problem = mv.validate(array)
            if problem is not None:
                self.say(f"Error: {problem}")
                continue

            result = mv.find_majority(array)
            if result.has_error:
                self.say(f"Error: {result.error}")
            else:
                self.say(f"Result: {result}")

    def display_results(self) -> None:
        self.say("\n=== Stored Results ===")
        if len(self.tracker.store) == 0:
            self.say("No results stored.")
        else:
            self.say(self.tracker.store.export_report())

    def export_results(self) -> None:
        self.say("\n=== Export Results ===")
        name = self.ask("Enter filename (without extension): ")
        if not name:
            name = f"benchmark_results_{time.time_ns() // 1_000_000}"

        safe_mkdir(self.export_dir)
        csv_path = self.export_dir / f"{name}.csv"
        report_path = self.export_dir / f"{name}.txt"
        csv_path.write_text(self.tracker.store.export_csv(), encoding="utf-8")
        report_path.write_text(self.tracker.store.export_report(), encoding="utf-8")
        self.say(f"Results exported to {csv_path} and {report_path}")

    def memory_stats(self) -> None:
        self.say("\n=== Memory Statistics ===")
        self.say(memory_usage_stats())

    def stress_test(self) -> None:
        self.say("\n=== Stress Test ===")
        max_size = self.ask_int("Enter maximum array size for stress test: ")
        runs = self.ask_int("Number of test runs: ")

        sizes = stress_sizes(max_size)
        self.say(f"Running stress test with sizes: {sizes}")
        t0 = now_ns()
        for size in sizes:
            self.say(f"Testing size {size}...")
            samples = self.tracker.run_trials(size, True, runs)
            if samples:
                self.say(str(PerformanceSummary.from_samples(mv.ALGORITHM_NAME, size, samples)))
        self.say(f"Stress test completed in {ns_to_ms(now_ns() - t0):.0f} ms")


# Experiment output

SUMMARY_FIELDS = [
    "input_size", "has_majority", "n_runs",
    "time_ms_mean", "time_ms_stdev", "time_ms_min", "time_ms_max",
    "comparisons_mean", "accesses_mean", "allocations_mean",
    "majority_found_rate",
]

def write_summary_csv(path: Path, comparison: Dict[str, Dict[int, PerformanceSummary]]) -> None:
    """
    One row per (majority flag, size), grouped mean/stdev
    """
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=SUMMARY_FIELDS)
        w.writeheader()
        for label, summaries in comparison.items():
            for size, s in summaries.items():
                found_rate = sum(x.has_majority for x in s.samples) / s.run_count
                w.writerow({
                    "input_size": size,
                    "has_majority": label == "with_majority",
                    "n_runs": s.run_count,
                    "time_ms_mean": s.avg_time_ms,
                    "time_ms_stdev": s.stddev_time_ms,
                    "time_ms_min": s.min_time_ms,
                    "time_ms_max": s.max_time_ms,
                    "comparisons_mean": s.avg_comparisons,
                    "accesses_mean": s.avg_accesses,
                    "allocations_mean": s.avg_allocations,
                    "majority_found_rate": found_rate,
                })


PLOTS = [
    ("time_vs_size.png", "avg_time_ms", "Average Time (ms)", "Execution Time vs Size"),
    ("comparisons_vs_size.png", "avg_comparisons", "Comparisons (avg)", "Comparisons vs Size"),
    ("accesses_vs_size.png", "avg_accesses", "Element Accesses (avg)", "Element Accesses vs Size"),
]

def plot_comparison(comparison: Dict[str, Dict[int, PerformanceSummary]], outdir: Path) -> List[Path]:
    written: List[Path] = []
    if not any(comparison.values()):
        return written

    for filename, attr, ylabel, title in PLOTS:
        plt.figure()
        for label, summaries in comparison.items():
            sizes = list(summaries.keys())
            y = [getattr(summaries[s], attr) for s in sizes]
            plt.plot(sizes, y, marker="o", label=label)
        plt.xlabel("Input Size")
        plt.ylabel(ylabel)
        plt.title(title)
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / filename, dpi=200)
        plt.close()
        written.append(outdir / filename)

    # error bars only make sense for timing
    plt.figure()
    for label, summaries in comparison.items():
        sizes = list(summaries.keys())
        plt.errorbar(sizes, [summaries[s].avg_time_ms for s in sizes],
                     yerr=[summaries[s].stddev_time_ms for s in sizes],
                     marker="o", capsize=3, label=label)
    plt.xlabel("Input Size")
    plt.ylabel("Time (ms), mean ± stdev")
    plt.title("Execution Time Spread vs Size")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "time_spread_vs_size.png", dpi=200)
    plt.close()
    written.append(outdir / "time_spread_vs_size.png")
    return written


def run_experiments(tracker: PerformanceTracker, sizes: List[int], runs: int, outdir: Path,
                    workers: int = 1, plots: bool = True, out: Optional[TextIO] = None) -> Dict[str, Dict[int, PerformanceSummary]]:
    safe_mkdir(outdir)

    comparison = tracker.compare_majority_vs_none(sizes, runs, workers=workers)

    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    report_txt = outdir / "report.txt"
    metrics_csv.write_text(tracker.store.export_csv(), encoding="utf-8")
    write_summary_csv(summary_csv, comparison)
    report_txt.write_text(tracker.store.export_report(), encoding="utf-8")

    if plots:
        plot_comparison(comparison, outdir)

    # only this sweep; the store may hold samples from earlier runs
    samples: List[PerformanceSample] = [
        s for summaries in comparison.values() for summary in summaries.values() for s in summary.samples
    ]
    expected = 2 * runs * len(sizes)
    print(f"Recorded {len(samples)} trials", file=out)
    print(f"Wrote {len(tracker.store)} rows to {metrics_csv}", file=out)
    if len(samples) < expected:
        print(f"Warning: {expected - len(samples)} trials reported errors and were dropped", file=out)
    print(f"Wrote grouped summary to {summary_csv}", file=out)
    if samples:
        print(f"Mean time across all runs: {statistics.fmean(s.elapsed_millis for s in samples):.3f} ms", file=out)
    print("Outputs saved in:", outdir.resolve(), file=out)
    return comparison


# Main

HELP = """
=== Help ===
Usage: python experiments.py [command] [options]

Commands:
  demo         - Run algorithm demonstration
  cli          - Start interactive CLI interface
  test         - Run basic tests
  benchmark    - Run quick benchmark
  experiments  - Run size sweep and write CSV/report/plots to --outdir
  help         - Display this help message

If no command is provided, an interactive menu will be displayed.

Examples:
  python experiments.py demo
  python experiments.py cli
  python experiments.py experiments --runs 10 --sizes 100,1000,10000
"""

COMMANDS = ("demo", "cli", "test", "benchmark", "experiments", "help")

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Boyer-Moore Majority Vote benchmark runner")
    ap.add_argument("command", nargs="?", default=None, help="One of: " + ", ".join(COMMANDS))
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV, report and plots")
    ap.add_argument("--runs", type=int, default=10, help="Repetitions per configuration")
    ap.add_argument("--sizes", type=str, default="100,1000,10000,100000", help="Comma-separated input sizes")
    ap.add_argument("--workers", type=int, default=1, help="Threads used to run sizes in parallel")
    ap.add_argument("--seed", type=int, default=None, help="Seed for shuffling (random when omitted)")
    ap.add_argument("--no_plots", action="store_true", help="Skip chart generation")
    return ap


def start_menu(tracker: PerformanceTracker, read_line: Callable[[str], str] = input, out: Optional[TextIO] = None) -> int:
    print("Choose an option:", file=out)
    print("1. Run Demo", file=out)
    print("2. Start CLI Interface", file=out)
    print("3. Run Basic Tests", file=out)
    print("4. Run Quick Benchmark", file=out)
    print("5. Exit", file=out)
    try:
        choice = int(read_line("Enter your choice (1-5): ").strip())
    except (ValueError, EOFError):
        print("Invalid input. Please run the program again.", file=out)
        return 1

    if choice == 1:
        run_demo(out)
    elif choice == 2:
        BenchmarkMenu(tracker, read_line, out).run()
    elif choice == 3:
        run_basic_tests(out)
    elif choice == 4:
        run_quick_benchmark(tracker, out)
    elif choice == 5:
        print("Goodbye!", file=out)
    else:
        print("Invalid choice. Please run the program again.", file=out)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    print("=== Boyer-Moore Majority Vote Algorithm Implementation ===")
    print()

    rng = random.Random(args.seed) if args.seed is not None else None
    tracker = PerformanceTracker(rng=rng)

    if args.command is None:
        return start_menu(tracker)

    command = args.command.lower()
    if command == "demo":
        run_demo()
    elif command == "cli":
        BenchmarkMenu(tracker).run()
    elif command == "test":
        run_basic_tests()
    elif command == "benchmark":
        run_quick_benchmark(tracker)
    elif command == "experiments":
        try:
            sizes = parse_int_list(args.sizes)
        except ValueError:
            print(f"Invalid --sizes value: {args.sizes!r}")
            return 2
        run_experiments(tracker, sizes, args.runs, Path(args.outdir),
                        workers=args.workers, plots=not args.no_plots)
    elif command == "help":
        print(HELP)
    else:
        print(f"Unknown command: {command}")
        print(HELP)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
