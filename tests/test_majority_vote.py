"""Tests for the instrumented majority vote engine and the test-data helpers."""

import random
from collections import Counter

import pytest

import majority_vote as mv
from majority_vote import ErrorKind, Metrics, VoteResult


class Exploding:
    """Element whose equality check fails, to drive the fault path."""

    def __eq__(self, other):
        raise RuntimeError("boom")

    __hash__ = object.__hash__


class TestEdgeCases:

    def test_null_input(self):
        result = mv.find_majority(None)
        assert result.has_error
        assert result.error.kind is ErrorKind.NULL_INPUT
        assert str(result.error) == "Input array cannot be null"
        assert result.candidate is None
        assert result.has_majority is False
        assert result.metrics is not None
        assert result.metrics.elapsed_nanos >= 0

    def test_empty_array(self):
        result = mv.find_majority([])
        assert not result.has_error
        assert result.candidate is None
        assert result.has_majority is False
        assert result.metrics.element_accesses > 0

    def test_single_element(self):
        result = mv.find_majority([42])
        assert not result.has_error
        assert result.candidate == 42
        assert result.has_majority is True
        assert result.metrics.comparisons == 0

    def test_two_different_elements(self):
        result = mv.find_majority([1, 2])
        assert not result.has_error
        assert result.has_majority is False

    def test_two_same_elements(self):
        result = mv.find_majority([1, 1])
        assert result.candidate == 1
        assert result.has_majority is True

    def test_fault_is_returned_not_raised(self):
        result = mv.find_majority([Exploding(), Exploding()])
        assert result.has_error
        assert result.error.kind is ErrorKind.UNEXPECTED_FAULT
        assert str(result.error) == "Unexpected error: boom"
        assert result.candidate is None
        assert result.has_majority is False
        assert result.metrics.end_ns >= result.metrics.start_ns

    def test_tuple_input_accepted(self):
        result = mv.find_majority((3, 3, 4))
        assert result.candidate == 3
        assert result.has_majority is True


class TestMajority:

    @pytest.mark.parametrize("array, expected", [
        ([1, 1, 2, 1, 3, 1, 4], 1),
        ([1, 1, 2], 1),
        ([2, 2, 1, 1, 1, 2, 2], 2),
        ([5, 5, 5, 5, 5, 1, 2, 3, 4], 5),
        ([-1, -1, -1, 2, 3], -1),
        ([0, 0, 0, 1, 2], 0),
        ([1, 2, 1, 2, 1, 2, 1], 1),
        ([42] * 100, 42),
    ])
    def test_finds_majority(self, array, expected):
        result = mv.find_majority(array)
        assert not result.has_error
        assert result.candidate == expected
        assert result.has_majority is True

    @pytest.mark.parametrize("array", [
        [1, 2, 3],
        [1, 1, 2, 2],
        [1, 2, 3, 4, 5],
        [1, 1, 1, 2, 2, 3],
    ])
    def test_no_majority(self, array):
        result = mv.find_majority(array)
        assert not result.has_error
        assert result.has_majority is False

    def test_random_arrays_agree_with_counter(self, rng):
        for _ in range(200):
            n = rng.randint(2, 40)
            array = [rng.randint(0, 3) for _ in range(n)]
            value, count = Counter(array).most_common(1)[0]
            result = mv.find_majority(array)
            if count > n // 2:
                assert result.has_majority and result.candidate == value
            else:
                assert result.has_majority is False


class TestMetrics:

    def test_counts_for_known_input(self):
        metrics = mv.find_majority([1, 1, 2, 1, 3, 1, 4]).metrics
        # 6 comparisons while scanning, 6 while verifying (stops at the 4th match)
        assert metrics.comparisons == 12
        assert metrics.element_accesses == 2 + 7 + 6
        assert metrics.allocations == 1
        assert metrics.elapsed_nanos >= 0
        assert metrics.elapsed_millis == metrics.elapsed_nanos / 1_000_000.0

    def test_early_termination_skips_tail(self):
        n = 101
        array = [7] * 51 + list(range(100, 150))
        metrics = mv.find_majority(array).metrics
        verify_accesses = metrics.element_accesses - 2 - n
        assert verify_accesses == 51

    def test_reset(self):
        metrics = Metrics()
        metrics.increment_comparisons()
        metrics.increment_accesses()
        metrics.increment_allocations()
        metrics.start_timer()
        metrics.end_timer()
        assert metrics.elapsed_nanos >= 0

        metrics.reset()
        assert metrics.comparisons == 0
        assert metrics.element_accesses == 0
        assert metrics.allocations == 0
        assert metrics.elapsed_nanos == 0

    @pytest.mark.parametrize("size", [10, 100, 1000, 10000])
    def test_scales_linearly(self, size, rng):
        array = mv.generate_test_array(size, True)
        mv.shuffle_array(array, rng)
        result = mv.find_majority(array)
        assert result.has_majority

        m = result.metrics
        assert size <= m.element_accesses <= 3 * size
        assert size / 2 <= m.comparisons <= 2 * size

    def test_str_rendering(self):
        result = mv.find_majority([1, 1, 2])
        text = str(result)
        assert text.startswith("Result{majorityElement=1, hasMajority=true, Metrics{comparisons=")
        assert "executionTime=" in text and text.endswith(" ms}}")

        empty = str(mv.find_majority([]))
        assert empty.startswith("Result{majorityElement=null, hasMajority=false, ")

        failed = VoteResult.failure(ErrorKind.NULL_INPUT, "Input array cannot be null", Metrics())
        assert str(failed).startswith("Result{error='Input array cannot be null', Metrics{")


class TestValidation:

    def test_null(self):
        err = mv.validate(None)
        assert err.kind is ErrorKind.NULL_INPUT
        assert str(err) == "Input array cannot be null"

    def test_empty(self):
        err = mv.validate([])
        assert err.kind is ErrorKind.EMPTY_INPUT
        assert str(err) == "Input array is empty"

    def test_null_element(self):
        err = mv.validate([1, None, 3])
        assert err.kind is ErrorKind.NULL_ELEMENT
        assert err.index == 1
        assert str(err) == "Array contains null element at index 1"

    def test_valid(self):
        assert mv.validate([1, 2, 3, 4, 5]) is None


class TestGenerator:

    def test_with_majority(self):
        array = mv.generate_test_array(10, True)
        assert len(array) == 10
        assert array.count(mv.MAJORITY_VALUE) == 6
        # the rest are distinct and never the sentinel
        rest = [x for x in array if x != mv.MAJORITY_VALUE]
        assert len(set(rest)) == len(rest) == 4

    def test_without_majority(self):
        array = mv.generate_test_array(10, False)
        assert array == [0, 1, 2, 3, 4, 5, 0, 1, 2, 3]

    @pytest.mark.parametrize("size", [2, 5, 10, 101, 1000])
    def test_majority_bound(self, size):
        array = mv.generate_test_array(size, True)
        assert Counter(array).most_common(1)[0][1] >= size // 2 + 1

    @pytest.mark.parametrize("size", [10, 100, 1000, 10000])
    def test_no_majority_bound(self, size):
        array = mv.generate_test_array(size, False)
        top = Counter(array).most_common(1)[0][1]
        assert top <= size // 2 + 1
        assert top <= size / 2

    @pytest.mark.parametrize("size", [0, -5])
    def test_non_positive_size(self, size):
        assert mv.generate_test_array(size, True) == []
        assert mv.generate_test_array(size, False) == []

    def test_size_one_is_reported_as_majority(self):
        # the generator does not aim for a majority here, but a single
        # element is always a majority to the engine
        array = mv.generate_test_array(1, False)
        assert array == [0]
        result = mv.find_majority(array)
        assert result.has_majority is True
        assert result.candidate == 0

    def test_large_arrays(self):
        with_majority = mv.find_majority(mv.generate_test_array(10000, True))
        assert with_majority.has_majority and with_majority.candidate == mv.MAJORITY_VALUE
        assert mv.find_majority(mv.generate_test_array(10000, False)).has_majority is False


class TestShuffle:

    def test_preserves_elements(self, rng):
        original = [1, 2, 3, 4, 5, 5, 9]
        shuffled = list(original)
        mv.shuffle_array(shuffled, rng)
        assert sorted(shuffled) == sorted(original)

    def test_seeded_rng_is_reproducible(self):
        a = list(range(50))
        b = list(range(50))
        mv.shuffle_array(a, random.Random(7))
        mv.shuffle_array(b, random.Random(7))
        assert a == b
        assert sorted(a) == list(range(50))

    def test_default_random_source(self):
        array = list(range(20))
        mv.shuffle_array(array)
        assert sorted(array) == list(range(20))

    def test_null_and_tiny_inputs(self):
        mv.shuffle_array(None)
        empty = []
        mv.shuffle_array(empty)
        assert empty == []
        single = [3]
        mv.shuffle_array(single)
        assert single == [3]
