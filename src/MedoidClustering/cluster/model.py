"""Trained K-Medoids clustering model."""
from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from MedoidClustering.cluster.medoid import model_cost, nearest_distance, nearest_index
from MedoidClustering.pipeline.errors import PreconditionError
from MedoidClustering.shared.types import Metric


class KMedoidsModel:
    """Immutable clustering model: an ordered medoid sequence plus its metric.

    Every medoid is a real element of the training sample.
    """

    def __init__(self, medoids: Sequence[Any], metric: Metric) -> None:
        if len(medoids) == 0:
            raise PreconditionError("a model needs at least one medoid")
        self._medoids = tuple(medoids)
        self._metric = metric

    @property
    def medoids(self) -> tuple[Any, ...]:
        return self._medoids

    @property
    def metric(self) -> Metric:
        return self._metric

    @property
    def k(self) -> int:
        return len(self._medoids)

    def predict(self, x: Any) -> int:
        """Index of the medoid closest to x."""
        return nearest_index(x, self._medoids, self._metric)

    def predictor(self) -> Callable[[Any], int]:
        medoids, metric = self._medoids, self._metric
        return lambda x: nearest_index(x, medoids, metric)

    def distance(self, x: Any) -> float:
        """Distance from x to its closest medoid."""
        return nearest_distance(x, self._medoids, self._metric)

    def cost(self, data: Sequence[Any]) -> float:
        """Mean distance from each element of data to its closest medoid."""
        return model_cost(self._medoids, data, self._metric)

    def __repr__(self) -> str:
        return f"KMedoidsModel(k={self.k}, medoids={list(self._medoids)!r})"
