"""Alternating assignment / medoid-update refinement loop."""
from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Any

from MedoidClustering.cluster.medoid import MedoidSearch, model_cost, nearest_index
from MedoidClustering.shared.types import Metric, RefinementResult, RefinementState

logger = logging.getLogger(__name__)


def assign_clusters(
    data: Sequence[Any], medoids: Sequence[Any], metric: Metric
) -> list[list[Any]]:
    """Group data by nearest medoid, one (possibly empty) group per medoid."""
    clusters: list[list[Any]] = [[] for _ in medoids]
    for x in data:
        clusters[nearest_index(x, medoids, metric)].append(x)
    return clusters


def partition(
    data: Sequence[Any], medoids: Sequence[Any], metric: Metric
) -> list[list[Any]]:
    """Like assign_clusters, but empty groups are dropped."""
    return [c for c in assign_clusters(data, medoids, metric) if c]


class Refiner:
    """Refines a medoid set until the cost improvement stalls.

    Halting is checked in order: absolute improvement <= epsilon,
    relative improvement <= fraction_epsilon, iteration budget spent.
    A halting iteration only adopts its medoids if they strictly lower
    the cost, so the returned model is never worse than the one before.
    """

    def __init__(
        self,
        metric: Metric,
        search: MedoidSearch,
        max_iterations: int,
        epsilon: float = 0.0,
        fraction_epsilon: float = 0.0,
    ) -> None:
        self._metric = metric
        self._search = search
        self._max_iterations = max_iterations
        self._epsilon = epsilon
        self._fraction_epsilon = fraction_epsilon

    def refine(
        self,
        data: Sequence[Any],
        initial: Sequence[Any],
        initial_cost: float | None = None,
    ) -> RefinementResult:
        start = time.perf_counter()
        current = tuple(initial)
        current_cost = (
            model_cost(current, data, self._metric)
            if initial_cost is None
            else initial_cost
        )
        costs = [current_cost]
        logger.debug(
            "[KMEDOIDS] stage=refine event=%s k=%d cost=%.6g",
            RefinementState.INITIALIZED.value,
            len(current),
            current_cost,
        )

        itr = 1
        state = RefinementState.ITERATING
        while state is RefinementState.ITERATING:
            itr_start = time.perf_counter()
            logger.debug(
                "[KMEDOIDS] stage=refine event=iteration itr=%d k=%d "
                "cost=%.6g elapsed=%.1f",
                itr,
                len(current),
                current_cost,
                itr_start - start,
            )

            clusters = partition(data, current, self._metric)
            nxt = tuple(self._search.medoids(clusters))
            next_cost = model_cost(nxt, data, self._metric)

            delta = current_cost - next_cost
            if delta <= self._epsilon:
                logger.debug(
                    "[KMEDOIDS] stage=refine event=converged delta=%.4g", delta
                )
                state = RefinementState.CONVERGED
            elif (
                current_cost > 0.0
                and delta / current_cost <= self._fraction_epsilon
            ):
                logger.debug(
                    "[KMEDOIDS] stage=refine event=converged fraction_delta=%.4g",
                    delta / current_cost,
                )
                state = RefinementState.CONVERGED
            elif itr >= self._max_iterations:
                logger.debug(
                    "[KMEDOIDS] stage=refine event=max_iterations itr=%d", itr
                )
                state = RefinementState.MAX_ITERS_REACHED

            if state is RefinementState.ITERATING:
                itr += 1
                current, current_cost = nxt, next_cost
                costs.append(current_cost)
            elif next_cost < current_cost:
                current, current_cost = nxt, next_cost
                costs.append(current_cost)

        logger.info(
            "[KMEDOIDS] stage=refine event=complete iterations=%d k=%d "
            "cost=%.6g state=%s elapsed=%.1f",
            itr,
            len(current),
            current_cost,
            state.value,
            time.perf_counter() - start,
        )
        return RefinementResult(
            medoids=current,
            cost=current_cost,
            iterations=itr,
            converged=state is RefinementState.CONVERGED,
            state=state,
            costs=tuple(costs),
        )
