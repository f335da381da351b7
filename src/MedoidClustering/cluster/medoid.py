"""Medoid search over a bounded worker pool."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import numpy as np
from joblib import Parallel, delayed

from MedoidClustering.pipeline.errors import PreconditionError
from MedoidClustering.shared.types import Metric

logger = logging.getLogger(__name__)


def nearest_index(e: Any, medoids: Sequence[Any], metric: Metric) -> int:
    """Index of the medoid closest to e. The lowest index wins ties."""
    best = float("inf")
    best_j = 0
    for j, m in enumerate(medoids):
        d = metric(e, m)
        if d < best:
            best = d
            best_j = j
    return best_j


def nearest_distance(e: Any, medoids: Sequence[Any], metric: Metric) -> float:
    """Distance from e to the closest medoid."""
    return min(metric(e, m) for m in medoids)


def medoid_cost(candidate: Any, data: Sequence[Any], metric: Metric) -> float:
    """Total distance from candidate to every element of data."""
    return sum(metric(candidate, x) for x in data)


def model_cost(medoids: Sequence[Any], data: Sequence[Any], metric: Metric) -> float:
    """Mean distance from each element to its nearest medoid."""
    if not data:
        return 0.0
    return sum(nearest_distance(x, medoids, metric) for x in data) / len(data)


def _chunk_minimum(
    cluster: Sequence[Any], indices: np.ndarray, metric: Metric
) -> tuple[float, int]:
    best_cost = float("inf")
    best_i = int(indices[0])
    for i in indices:
        cost = medoid_cost(cluster[i], cluster, metric)
        if cost < best_cost:
            best_cost = cost
            best_i = int(i)
    return best_cost, best_i


class MedoidSearch:
    """Finds cluster medoids with a fork/join over a joblib worker pool.

    Candidates of every cluster are split into disjoint chunks; each worker
    returns the (cost, index) minimum of its chunk and the calling thread
    reduces them. Exact cost ties resolve to the lowest candidate index, so
    results do not depend on the pool width.
    """

    def __init__(self, metric: Metric, parallel: Parallel) -> None:
        self._metric = metric
        self._parallel = parallel

    @property
    def width(self) -> int:
        return max(1, self._parallel.n_jobs or 1)

    def medoid(self, cluster: Sequence[Any]) -> Any:
        """Element of cluster minimizing the total distance to the others."""
        return self.medoids([cluster])[0]

    def medoids(self, clusters: Sequence[Sequence[Any]]) -> list[Any]:
        """Medoid of each cluster, computed in one fork/join round."""
        tasks: list[tuple[int, Sequence[Any], np.ndarray]] = []
        for c, cluster in enumerate(clusters):
            if len(cluster) == 0:
                raise PreconditionError(f"cluster {c} is empty")
            n_chunks = min(self.width, len(cluster))
            for indices in np.array_split(np.arange(len(cluster)), n_chunks):
                tasks.append((c, cluster, indices))

        partials = self._parallel(
            delayed(_chunk_minimum)(cluster, indices, self._metric)
            for _, cluster, indices in tasks
        )

        best: list[tuple[float, int] | None] = [None] * len(clusters)
        for (c, _, _), partial in zip(tasks, partials):
            if best[c] is None or partial < best[c]:
                best[c] = partial
        logger.debug(
            "[KMEDOIDS] stage=medoid event=search_complete clusters=%d tasks=%d",
            len(clusters),
            len(tasks),
        )
        return [cluster[b[1]] for cluster, b in zip(clusters, best)]
