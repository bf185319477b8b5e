"""
Boyer-Moore majority vote with instrumentation counters

Two linear passes: pick a candidate, then verify it by counting.
Every call reports comparisons, element accesses, allocations and elapsed time.
Failures come back as structured results; find_majority never raises.
"""

from __future__ import annotations

import enum
import random
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

ALGORITHM_NAME = "BoyerMooreMajorityVote"
MAJORITY_VALUE = 1 # sentinel used by generate_test_array


class ErrorKind(enum.Enum):
    NULL_INPUT = "null_input"
    EMPTY_INPUT = "empty_input"      # only reported by validate()
    NULL_ELEMENT = "null_element"    # only reported by validate()
    UNEXPECTED_FAULT = "unexpected_fault"


@dataclass(frozen=True)
class VoteError:
    kind: ErrorKind
    message: str
    index: Optional[int] = None # set for NULL_ELEMENT

    def __str__(self) -> str:
        return self.message


NULL_INPUT_MESSAGE = "Input array cannot be null"
EMPTY_INPUT_MESSAGE = "Input array is empty"


@dataclass
class Metrics:
    comparisons: int = 0
    element_accesses: int = 0
    allocations: int = 0
    start_ns: int = 0
    end_ns: int = 0

    def increment_comparisons(self) -> None:
        self.comparisons += 1

    def increment_accesses(self) -> None:
        self.element_accesses += 1

    def increment_allocations(self) -> None:
        self.allocations += 1

    def start_timer(self) -> None:
        self.start_ns = time.perf_counter_ns()
        self.end_ns = self.start_ns

    def end_timer(self) -> None:
        self.end_ns = max(time.perf_counter_ns(), self.start_ns)

    @property
    def elapsed_nanos(self) -> int:
        return self.end_ns - self.start_ns

    @property
    def elapsed_millis(self) -> float:
        return self.elapsed_nanos / 1_000_000.0

    def reset(self) -> None:
        self.comparisons = 0
        self.element_accesses = 0
        self.allocations = 0
        self.start_ns = 0
        self.end_ns = 0

    def __str__(self) -> str:
        return (
            f"Metrics{{comparisons={self.comparisons}, accesses={self.element_accesses}, "
            f"allocations={self.allocations}, executionTime={self.elapsed_millis:.3f} ms}}"
        )


@dataclass(frozen=True)
class VoteResult:
    candidate: Optional[int]
    has_majority: bool
    metrics: Metrics = field(compare=False)
    error: Optional[VoteError] = None

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, metrics: Metrics) -> "VoteResult":
        return cls(candidate=None, has_majority=False, metrics=metrics, error=VoteError(kind, message))

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def __str__(self) -> str:
        if self.error is not None:
            return f"Result{{error='{self.error}', {self.metrics}}}"
        candidate = "null" if self.candidate is None else self.candidate
        return f"Result{{majorityElement={candidate}, hasMajority={str(self.has_majority).lower()}, {self.metrics}}}"


# Algorithm

def find_majority(sequence: Optional[Sequence[int]]) -> VoteResult:
    metrics = Metrics()
    metrics.start_timer()
    metrics.increment_allocations() # metrics/result object

    try:
        if sequence is None:
            metrics.end_timer()
            return VoteResult.failure(ErrorKind.NULL_INPUT, NULL_INPUT_MESSAGE, metrics)

        metrics.increment_accesses() # presence check

        n = len(sequence)
        if n == 0:
            metrics.end_timer()
            return VoteResult(None, False, metrics)

        metrics.increment_accesses() # length check

        if n == 1:
            metrics.increment_accesses() # sequence[0]
            metrics.end_timer()
            return VoteResult(sequence[0], True, metrics)

        candidate = _find_candidate(sequence, metrics)
        is_majority = _verify_candidate(sequence, candidate, metrics)

        metrics.end_timer()
        return VoteResult(candidate, is_majority, metrics)

    except Exception as exc:
        metrics.end_timer()
        return VoteResult.failure(ErrorKind.UNEXPECTED_FAULT, f"Unexpected error: {exc}", metrics)


def _find_candidate(sequence: Sequence[int], metrics: Metrics) -> Optional[int]:
    candidate = None
    count = 0

    for element in sequence:
        metrics.increment_accesses()

        if count == 0: # fresh assignment, not an equality test
            candidate = element
            count = 1
        else:
            metrics.increment_comparisons()
            if element == candidate:
                count += 1
            else:
                count -= 1

    return candidate


def _verify_candidate(sequence: Sequence[int], candidate: Optional[int], metrics: Metrics) -> bool:
    if candidate is None:
        return False

    n = len(sequence)
    threshold = n // 2 + 1
    count = 0

    for element in sequence:
        metrics.increment_accesses()
        metrics.increment_comparisons()

        if element == candidate:
            count += 1
            if count >= threshold: # early termination
                return True

    return count > n // 2


def validate(sequence: Optional[Sequence[Optional[int]]]) -> Optional[VoteError]:
    """
    Check input before running the algorithm
    Returns None when the sequence is usable, otherwise the first problem found
    """
    if sequence is None:
        return VoteError(ErrorKind.NULL_INPUT, NULL_INPUT_MESSAGE)

    if len(sequence) == 0:
        return VoteError(ErrorKind.EMPTY_INPUT, EMPTY_INPUT_MESSAGE)

    for i, element in enumerate(sequence):
        if element is None:
            return VoteError(ErrorKind.NULL_ELEMENT, f"Array contains null element at index {i}", index=i)

    return None


# Test data

def generate_test_array(size: int, want_majority: bool) -> List[int]:
    if size <= 0:
        return []

    majority_count = size // 2 + 1

    if want_majority and size > 1:
        array = [MAJORITY_VALUE] * majority_count
        # distinct values starting at 2, never equal to the sentinel
        array.extend(i - majority_count + 2 for i in range(majority_count, size))
        return array

    # size == 1 lands here even when a majority is not wanted; the engine still
    # reports a single element as a majority
    return [i % majority_count for i in range(size)]


def shuffle_array(sequence: Optional[List[int]], rng: Optional[random.Random] = None) -> None:
    """In-place Fisher-Yates shuffle. Pass rng for reproducible order."""
    if sequence is None or len(sequence) <= 1:
        return

    rand = rng if rng is not None else random
    for i in range(len(sequence) - 1, 0, -1):
        j = rand.randrange(i + 1)
        sequence[i], sequence[j] = sequence[j], sequence[i]
