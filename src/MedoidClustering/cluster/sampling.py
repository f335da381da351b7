"""Random sampling of working sets and distinct seed elements."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

import numpy as np

from MedoidClustering.pipeline.errors import PreconditionError

logger = logging.getLogger(__name__)


@runtime_checkable
class DataSource(Protocol):
    """Protocol for (possibly distributed) collections the trainer samples from.

    The trainer only ever counts, collects, or Bernoulli-samples a source.
    """

    def count(self) -> int: ...

    def collect(self) -> list[Any]: ...

    def sample(self, fraction: float, seed: int) -> list[Any]: ...


class SequenceSource:
    """Adapter exposing an in-memory sequence through the DataSource protocol."""

    def __init__(self, data: Sequence[Any]) -> None:
        self._data = list(data)

    def count(self) -> int:
        return len(self._data)

    def collect(self) -> list[Any]:
        return list(self._data)

    def sample(self, fraction: float, seed: int) -> list[Any]:
        rng = np.random.RandomState(seed)
        keep = rng.random_sample(len(self._data)) < fraction
        return [e for e, k in zip(self._data, keep) if k]


def sample_fraction(n: int, sample_size: int) -> float:
    """Return the Bernoulli sampling fraction yielding sample_size of n items.

    The resulting sample size varies randomly, with mean sample_size.
    """
    if n < 0:
        raise PreconditionError(f"n={n} must be >= 0")
    if sample_size < 0:
        raise PreconditionError(f"sample_size={sample_size} must be >= 0")
    if sample_size <= 0 or n <= 0:
        return 0.0
    return min(1.0, min(sample_size, n) / n)


def sample_by_size(
    data: Sequence[Any] | DataSource, sample_size: int, seed: int
) -> list[Any]:
    """Return a random sample of data whose expected size is sample_size.

    A sample_size of zero or less yields an empty sample.
    """
    if sample_size <= 0:
        return []
    source = data if isinstance(data, DataSource) else SequenceSource(data)
    fraction = sample_fraction(source.count(), sample_size)
    if fraction <= 0.0:
        return []
    if fraction >= 1.0:
        return source.collect()
    return source.sample(fraction, seed)


def sample_distinct(
    data: Sequence[Any], k: int, rng: np.random.RandomState | int
) -> list[Any]:
    """Return k distinct elements randomly selected from data.

    Raises PreconditionError if data holds fewer than k distinct elements.
    """
    if isinstance(rng, (int, np.integer)):
        rng = np.random.RandomState(rng)
    if k < 0:
        raise PreconditionError(f"k={k} must be >= 0")
    if len(data) < k:
        raise PreconditionError(f"data did not have >= {k} distinct elements")

    # dict keeps insertion order, which keeps the output seed-deterministic
    chosen: dict[Any, None] = {}
    tries = 0
    while len(chosen) < k and tries <= 2 * k:
        chosen[data[rng.randint(len(data))]] = None
        tries += 1

    if len(chosen) < k:
        remaining = [e for e in dict.fromkeys(data) if e not in chosen]
        if len(remaining) + len(chosen) < k:
            raise PreconditionError(
                f"data did not have >= {k} distinct elements"
            )
        shortfall = k - len(chosen)
        logger.debug(
            "[KMEDOIDS] stage=sample event=distinct_fallback "
            "shortfall=%d remaining=%d",
            shortfall,
            len(remaining),
        )
        # each level works on at most half the remaining elements
        if shortfall <= len(remaining) // 2:
            extra = sample_distinct(remaining, shortfall, rng)
        else:
            excluded = set(sample_distinct(remaining, len(remaining) - shortfall, rng))
            extra = [e for e in remaining if e not in excluded]
        for e in extra:
            chosen[e] = None

    if len(chosen) != k:
        raise AssertionError("logic error in sample_distinct")
    return list(chosen)
