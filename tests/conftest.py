"""Pytest fixtures for the majority vote tests."""

import os
import random

os.environ.setdefault("MPLBACKEND", "Agg") # before experiments imports pyplot

import pytest

from tracker import PerformanceTracker, ResultStore


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def store():
    return ResultStore()


@pytest.fixture
def tracker(store, rng):
    return PerformanceTracker(store=store, rng=rng)
