"""
Repeated-trial benchmarking for the majority vote engine

PerformanceTracker runs trials (generate -> shuffle -> find_majority) and
records every successful one in a ResultStore. The store groups samples by
(algorithm, input size, majority flag) and renders CSV and text reports.
"""

from __future__ import annotations

import random
import statistics
import threading
import time
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import majority_vote as mv

StoreKey = Tuple[str, int, bool]

CSV_HEADER = "Algorithm,InputSize,ExecutionTimeMs,Comparisons,ArrayAccesses,MemoryAllocations,HasMajority,Timestamp"


def now_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class PerformanceSample:
    input_size: int
    elapsed_nanos: int
    comparisons: int
    accesses: int
    allocations: int
    has_majority: bool
    algorithm_name: str
    created_at: int = field(default_factory=now_millis) # epoch millis

    @property
    def elapsed_millis(self) -> float:
        return self.elapsed_nanos / 1_000_000.0

    @classmethod
    def from_result(cls, input_size: int, result: mv.VoteResult, algorithm_name: str = mv.ALGORITHM_NAME) -> "PerformanceSample":
        m = result.metrics
        return cls(
            input_size=input_size,
            elapsed_nanos=m.elapsed_nanos,
            comparisons=m.comparisons,
            accesses=m.element_accesses,
            allocations=m.allocations,
            has_majority=result.has_majority,
            algorithm_name=algorithm_name,
        )

    def csv_row(self) -> str:
        return (
            f"{self.algorithm_name},{self.input_size},{self.elapsed_millis:.6f},"
            f"{self.comparisons},{self.accesses},{self.allocations},"
            f"{str(self.has_majority).lower()},{self.created_at}"
        )


@dataclass(frozen=True)
class PerformanceSummary:
    algorithm_name: str
    input_size: int
    run_count: int
    avg_time_ms: float
    min_time_ms: float
    max_time_ms: float
    stddev_time_ms: float
    avg_comparisons: float
    avg_accesses: float
    avg_allocations: float
    samples: Tuple[PerformanceSample, ...] = field(repr=False, compare=False)

    @classmethod
    def from_samples(cls, algorithm_name: str, input_size: int, samples: Sequence[PerformanceSample]) -> "PerformanceSummary":
        if not samples:
            raise ValueError(f"cannot summarize {algorithm_name} size={input_size}: no samples")

        times = [s.elapsed_millis for s in samples]
        # population stddev; a single run has zero spread
        return cls(
            algorithm_name=algorithm_name,
            input_size=input_size,
            run_count=len(samples),
            avg_time_ms=statistics.fmean(times),
            min_time_ms=min(times),
            max_time_ms=max(times),
            stddev_time_ms=statistics.pstdev(times),
            avg_comparisons=statistics.fmean(s.comparisons for s in samples),
            avg_accesses=statistics.fmean(s.accesses for s in samples),
            avg_allocations=statistics.fmean(s.allocations for s in samples),
            samples=tuple(samples),
        )

    def __str__(self) -> str:
        return (
            f"{self.algorithm_name}: size={self.input_size}, runs={self.run_count}, "
            f"avgTime={self.avg_time_ms:.3f}±{self.stddev_time_ms:.3f} ms, "
            f"min={self.min_time_ms:.3f} ms, max={self.max_time_ms:.3f} ms, "
            f"avgComparisons={self.avg_comparisons:.1f}, avgAccesses={self.avg_accesses:.1f}, "
            f"avgAllocations={self.avg_allocations:.1f}"
        )


class _Bucket:
    __slots__ = ("lock", "samples")

    def __init__(self):
        self.lock = threading.Lock()
        self.samples: List[PerformanceSample] = []


class ResultStore:
    """
    Append-only in-memory store, safe to write from several threads
    Each key has its own lock, so appends to different keys never wait on each other
    """

    def __init__(self):
        self._buckets: Dict[StoreKey, _Bucket] = {}
        self._guard = threading.Lock() # protects the bucket dict, not the buckets

    def _bucket_for(self, key: StoreKey) -> _Bucket:
        with self._guard:
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = _Bucket()
                self._buckets[key] = bucket
            return bucket

    def record(self, sample: PerformanceSample) -> None:
        self.record_many([sample])

    def record_many(self, samples: Iterable[PerformanceSample], majority_flag: Optional[bool] = None) -> None:
        """
        Append samples; the key's majority flag is majority_flag when given
        (the configuration the trials were generated for), else each sample's own result
        """
        grouped: Dict[StoreKey, List[PerformanceSample]] = defaultdict(list)
        for s in samples:
            flag = s.has_majority if majority_flag is None else majority_flag
            grouped[(s.algorithm_name, s.input_size, flag)].append(s)

        for key, items in grouped.items():
            bucket = self._bucket_for(key)
            with bucket.lock:
                bucket.samples.extend(items)

    def _snapshot(self) -> List[Tuple[StoreKey, List[PerformanceSample]]]:
        with self._guard:
            entries = list(self._buckets.items())
        snapshot = []
        for key, bucket in entries:
            with bucket.lock:
                snapshot.append((key, list(bucket.samples)))
        return snapshot

    def keys(self) -> List[StoreKey]:
        return [key for key, _ in self._snapshot()]

    def __len__(self) -> int:
        return sum(len(items) for _, items in self._snapshot())

    def query(self, algorithm_name: str) -> List[PerformanceSample]:
        out: List[PerformanceSample] = []
        for (name, _size, _flag), items in self._snapshot():
            if name == algorithm_name:
                out.extend(items)
        return out

    def summarize(self, algorithm_name: str, input_size: int) -> Optional[PerformanceSummary]:
        matching = [s for s in self.query(algorithm_name) if s.input_size == input_size]
        if not matching:
            return None
        return PerformanceSummary.from_samples(algorithm_name, input_size, matching)

    def clear(self) -> None:
        with self._guard:
            self._buckets.clear()

    def export_csv(self) -> str:
        lines = [CSV_HEADER]
        for _key, items in self._snapshot():
            lines.extend(s.csv_row() for s in items)
        return "\n".join(lines) + "\n"

    def export_report(self) -> str:
        by_algorithm: Dict[str, List[PerformanceSample]] = defaultdict(list)
        for (name, _size, _flag), items in self._snapshot():
            by_algorithm[name].extend(items)

        out = ["=== Performance Analysis Report ===", ""]
        for name in sorted(by_algorithm):
            items = by_algorithm[name]
            out.append(f"Algorithm: {name}")
            out.append(f"Total runs: {len(items)}")

            by_size: Dict[int, List[PerformanceSample]] = defaultdict(list)
            for s in items:
                by_size[s.input_size].append(s)
            for size in sorted(by_size):
                summary = PerformanceSummary.from_samples(name, size, by_size[size])
                out.append(f"  Input size {size}: {summary}")
            out.append("")

        return "\n".join(out) + "\n"


class PerformanceTracker:
    """Runs trials against the engine and keeps every successful one in a ResultStore."""

    def __init__(self, store: Optional[ResultStore] = None, rng: Optional[random.Random] = None):
        self.store = store if store is not None else ResultStore()
        self.rng = rng
        self._rng_lock = threading.Lock() # random.Random instances are shared across workers

    def _shuffle(self, array: List[int]) -> None:
        if self.rng is None:
            mv.shuffle_array(array)
            return
        with self._rng_lock:
            mv.shuffle_array(array, self.rng)

    def run_trials(self, size: int, want_majority: bool, runs: int) -> List[PerformanceSample]:
        samples: List[PerformanceSample] = []

        for _ in range(runs):
            array = mv.generate_test_array(size, want_majority)
            self._shuffle(array)
            result = mv.find_majority(array)

            if result.has_error: # dropped, not retried
                continue
            samples.append(PerformanceSample.from_result(size, result))

        if samples:
            self.store.record_many(samples, want_majority)
        return samples

    def run_matrix(self, sizes: Sequence[int], want_majority: bool, runs: int, workers: int = 1) -> Dict[int, PerformanceSummary]:
        """
        Run trials per size and summarize each size
        Sizes whose trials all failed are left out; result order follows sizes
        """
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as ex:
                futures = [ex.submit(self.run_trials, size, want_majority, runs) for size in sizes]
                per_size = [f.result() for f in futures]
        else:
            per_size = [self.run_trials(size, want_majority, runs) for size in sizes]

        summaries: Dict[int, PerformanceSummary] = {}
        for size, samples in zip(sizes, per_size):
            if samples:
                summaries[size] = PerformanceSummary.from_samples(mv.ALGORITHM_NAME, size, samples)
        return summaries

    def compare_majority_vs_none(self, sizes: Sequence[int], runs: int, workers: int = 1) -> Dict[str, Dict[int, PerformanceSummary]]:
        return {
            "with_majority": self.run_matrix(sizes, True, runs, workers=workers),
            "without_majority": self.run_matrix(sizes, False, runs, workers=workers),
        }


# Size sweeps used by the CLI

def step_sizes(min_size: int, max_size: int, step: int) -> List[int]:
    if step <= 0:
        raise ValueError("step must be positive")
    return list(range(min_size, max_size + 1, step))


def stress_sizes(max_size: int) -> List[int]:
    return [max_size // 10, max_size // 5, max_size // 2, max_size]
