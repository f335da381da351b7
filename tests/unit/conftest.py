from __future__ import annotations

import math

import numpy as np
import pytest
from joblib import Parallel

from MedoidClustering.cluster.medoid import MedoidSearch


def euclidean(a: tuple[float, ...], b: tuple[float, ...]) -> float:
    return math.dist(a, b)


def absolute(a: float, b: float) -> float:
    return abs(a - b)


@pytest.fixture
def metric():
    return euclidean


@pytest.fixture(params=[1, 3], ids=["serial", "threads3"])
def search(request):
    """MedoidSearch over a Euclidean metric, with one and three workers."""
    with Parallel(n_jobs=request.param, backend="threading") as parallel:
        yield MedoidSearch(euclidean, parallel)


@pytest.fixture
def abs_search():
    with Parallel(n_jobs=2, backend="threading") as parallel:
        yield MedoidSearch(absolute, parallel)


@pytest.fixture
def two_blobs() -> list[tuple[float, float]]:
    """100 points: two well-separated Gaussian blobs of 50 points each."""
    rng = np.random.RandomState(0)
    a = rng.randn(50, 2)
    b = rng.randn(50, 2) + 20.0
    return [(float(x), float(y)) for x, y in np.vstack([a, b])]


@pytest.fixture
def random_points() -> list[tuple[float, float]]:
    rng = np.random.RandomState(7)
    return [(float(x), float(y)) for x, y in rng.randn(60, 2) * 5.0]


@pytest.fixture
def three_groups() -> list[tuple[float, float]]:
    """Three visually separate groups, each a single location repeated."""
    return [(0.0, 0.0)] * 10 + [(10.0, 0.0)] * 10 + [(0.0, 10.0)] * 10


@pytest.fixture
def spread_groups() -> list[tuple[float, float]]:
    """150 points: unit Gaussian groups of 50 around (0, 0), (20, 0) and (0, 20)."""
    rng = np.random.RandomState(3)
    centers = np.repeat([[0.0, 0.0], [20.0, 0.0], [0.0, 20.0]], 50, axis=0)
    return [(float(x), float(y)) for x, y in centers + rng.randn(150, 2)]


@pytest.fixture
def identical_points() -> list[tuple[float, float]]:
    return [(3.0, 4.0)] * 10
