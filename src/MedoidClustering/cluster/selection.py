"""Greedy cluster-splitting search scored by Minimum Description Length."""
from __future__ import annotations

import logging
import math
import time
from collections.abc import Sequence
from typing import Any

from MedoidClustering.cluster.density import fit_density
from MedoidClustering.cluster.medoid import MedoidSearch, model_cost
from MedoidClustering.cluster.refine import Refiner, assign_clusters
from MedoidClustering.pipeline.errors import PreconditionError
from MedoidClustering.shared.types import Metric, ModelHypothesis, ModelSelection

logger = logging.getLogger(__name__)

ZERO_DENSITY_PENALTY = 100.0


class ModelSelector:
    """Grows a clustering from k=1 by greedy binary splits and picks k by MDL.

    At each step every cluster is tried as the one to split; the split with
    the lowest model cost over all data becomes the next candidate. The
    search stops at max_candidates clusters or when no cluster can be
    split into exactly k distinct medoids.
    """

    def __init__(
        self,
        metric: Metric,
        search: MedoidSearch,
        refiner: Refiner,
        max_candidates: int,
    ) -> None:
        self._metric = metric
        self._search = search
        self._refiner = refiner
        self._max_candidates = max_candidates

    def candidates(
        self, data: Sequence[Any]
    ) -> list[tuple[tuple[Any, ...], list[list[Any]]]]:
        """Return the (medoids, clusters) candidate for each reachable k."""
        if not data:
            raise PreconditionError("cannot select a model from empty data")

        logger.info("[KMEDOIDS] stage=split event=init k=1")
        current = (self._search.medoid(data),)
        clusters = [list(data)]
        found = [(current, clusters)]

        for k in range(2, self._max_candidates + 1):
            logger.info("[KMEDOIDS] stage=split event=testing k=%d", k)
            best = None
            best_cost = float("inf")
            for j in range(len(current)):
                split = self._try_split(data, current, clusters, j, k)
                if split is None:
                    continue
                cost = model_cost(split, data, self._metric)
                if cost < best_cost:
                    best, best_cost = split, cost
            if best is None:
                logger.info(
                    "[KMEDOIDS] stage=split event=exhausted k=%d", k
                )
                break
            current = best
            clusters = assign_clusters(data, current, self._metric)
            found.append((current, clusters))
        return found

    def _try_split(
        self,
        data: Sequence[Any],
        current: tuple[Any, ...],
        clusters: list[list[Any]],
        j: int,
        k: int,
    ) -> tuple[Any, ...] | None:
        metric = self._metric
        cluster = clusters[j]
        if not cluster:
            return None
        m0 = max(cluster, key=lambda x: metric(x, current[j]))
        m1 = max(cluster, key=lambda x: metric(x, m0))
        if metric(m0, m1) <= 0.0:
            logger.debug(
                "[KMEDOIDS] stage=split event=skip cluster=%d reason=zero_seed", j
            )
            return None

        split_model = self._refiner.refine(cluster, (m0, m1)).medoids
        seed = current[:j] + split_model + current[j + 1:]
        refined = self._refiner.refine(data, seed).medoids
        if len(refined) != k:
            logger.debug(
                "[KMEDOIDS] stage=split event=skip cluster=%d reason=lost_medoids "
                "k=%d got=%d",
                j,
                k,
                len(refined),
            )
            return None
        return refined

    def score(
        self,
        medoids: tuple[Any, ...],
        clusters: list[list[Any]],
        n: int,
    ) -> ModelHypothesis:
        """MDL cost of a candidate: representation cost plus parameter cost."""
        metric = self._metric
        distances = [metric(x, m) for m, c in zip(medoids, clusters) for x in c]
        density = fit_density(distances)

        representation_cost = 0.0
        for d in distances:
            f = density.pdf(d)
            representation_cost += -math.log(f) if f > 0.0 else ZERO_DENSITY_PENALTY

        k = len(medoids)
        parameter_cost = (k + density.free_params / 2.0) * math.log(n)
        hypothesis = ModelHypothesis(
            k=k,
            medoids=medoids,
            model_cost=sum(distances) / len(distances),
            representation_cost=representation_cost,
            parameter_cost=parameter_cost,
            density_family=density.family,
        )
        logger.info(
            "[KMEDOIDS] stage=mdl event=scored k=%d family=%s "
            "rep_cost=%.4g param_cost=%.4g mdl_cost=%.4g",
            k,
            density.family,
            representation_cost,
            parameter_cost,
            hypothesis.mdl_cost,
        )
        return hypothesis

    def select(self, data: Sequence[Any]) -> ModelSelection:
        start = time.perf_counter()
        hypotheses = tuple(
            self.score(medoids, clusters, len(data))
            for medoids, clusters in self.candidates(data)
        )
        best = min(hypotheses, key=lambda h: h.mdl_cost)
        logger.info(
            "[KMEDOIDS] stage=mdl event=selected k=%d mdl_cost=%.4g "
            "candidates=%s elapsed=%.1f",
            best.k,
            best.mdl_cost,
            [h.k for h in hypotheses],
            time.perf_counter() - start,
        )
        return ModelSelection(best=best, hypotheses=hypotheses)
