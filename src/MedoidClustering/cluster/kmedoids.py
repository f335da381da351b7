"""K-Medoids trainer: sampling, fixed-k refinement and MDL model selection."""
from __future__ import annotations

import dataclasses
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
from joblib import Parallel

from MedoidClustering.cluster.medoid import MedoidSearch, model_cost
from MedoidClustering.cluster.model import KMedoidsModel
from MedoidClustering.cluster.refine import Refiner
from MedoidClustering.cluster.sampling import DataSource, sample_by_size, sample_distinct
from MedoidClustering.cluster.selection import ModelSelector
from MedoidClustering.pipeline.errors import PreconditionError
from MedoidClustering.shared.config import KMedoidsConfig
from MedoidClustering.shared.types import Metric, ModelHypothesis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainingResult:
    """The trained model plus statistics of the run that produced it.

    With a fixed k, iterations and converged describe the refinement run.
    When k is selected by MDL, iterations counts the scored candidates in
    hypotheses and converged is True once the split search has finished.
    """

    model: KMedoidsModel
    sample_size: int
    cost: float
    iterations: int
    converged: bool
    hypotheses: tuple[ModelHypothesis, ...] = ()


class KMedoids:
    """Trains K-Medoid clustering models on Sequence or DataSource input.

    Data only needs a metric, not an algebra over elements as k-means does.
    With config.k == 0 the number of clusters is chosen by Minimum
    Description Length. Training runs with the same seed are identical.
    """

    def __init__(
        self, metric: Metric, config: KMedoidsConfig | None = None
    ) -> None:
        self._metric = metric
        self._config = config or KMedoidsConfig()

    @property
    def metric(self) -> Metric:
        return self._metric

    @property
    def config(self) -> KMedoidsConfig:
        return self._config

    def _replace(self, **changes: Any) -> KMedoids:
        return KMedoids(self._metric, dataclasses.replace(self._config, **changes))

    def with_metric(self, metric: Metric) -> KMedoids:
        return KMedoids(metric, self._config)

    def with_k(self, k: int) -> KMedoids:
        return self._replace(k=k)

    def with_max_iterations(self, max_iterations: int) -> KMedoids:
        return self._replace(max_iterations=max_iterations)

    def with_epsilon(self, epsilon: float) -> KMedoids:
        return self._replace(epsilon=epsilon)

    def with_fraction_epsilon(self, fraction_epsilon: float) -> KMedoids:
        return self._replace(fraction_epsilon=fraction_epsilon)

    def with_sample_size(self, sample_size: int) -> KMedoids:
        return self._replace(sample_size=sample_size)

    def with_num_threads(self, num_threads: int) -> KMedoids:
        return self._replace(num_threads=num_threads)

    def with_seed(self, seed: int) -> KMedoids:
        return self._replace(seed=seed)

    def run(self, data: Sequence[Any] | DataSource) -> KMedoidsModel:
        """Train a model on data and return it."""
        return self.train(data).model

    def train(self, data: Sequence[Any] | DataSource) -> TrainingResult:
        config = self._config
        start = time.perf_counter()
        rng = np.random.RandomState(config.seed)

        logger.info(
            "[KMEDOIDS] stage=sample event=start sample_size=%d",
            config.sample_size,
        )
        sample = sample_by_size(data, config.sample_size, rng.randint(2**31))
        logger.info("[KMEDOIDS] stage=sample event=complete size=%d", len(sample))
        if not sample:
            raise PreconditionError("cannot train on an empty data sample")
        if config.k > len(sample):
            raise PreconditionError(
                f"k={config.k} exceeds the sample size {len(sample)}"
            )

        with Parallel(n_jobs=config.num_threads, backend="threading") as parallel:
            search = MedoidSearch(self._metric, parallel)
            refiner = Refiner(
                self._metric,
                search,
                max_iterations=config.max_iterations,
                epsilon=config.epsilon,
                fraction_epsilon=config.fraction_epsilon,
            )
            if config.k > 0:
                result = self._train_fixed(sample, rng, refiner)
            else:
                result = self._train_mdl(sample, search, refiner)

        logger.info(
            "[KMEDOIDS] stage=train event=complete k=%d cost=%.6g "
            "iterations=%d converged=%s elapsed=%.1f",
            result.model.k,
            result.cost,
            result.iterations,
            result.converged,
            time.perf_counter() - start,
        )
        return result

    def _train_fixed(
        self,
        sample: list[Any],
        rng: np.random.RandomState,
        refiner: Refiner,
    ) -> TrainingResult:
        k = self._config.k
        start = time.perf_counter()
        logger.info(
            "[KMEDOIDS] stage=init event=start k=%d source=random_distinct", k
        )
        initial = sample_distinct(sample, k, rng)
        initial_cost = model_cost(initial, sample, self._metric)
        logger.info(
            "[KMEDOIDS] stage=init event=complete cost=%.6g elapsed=%.1f",
            initial_cost,
            time.perf_counter() - start,
        )

        refined = refiner.refine(sample, initial, initial_cost)
        return TrainingResult(
            model=KMedoidsModel(refined.medoids, self._metric),
            sample_size=len(sample),
            cost=refined.cost,
            iterations=refined.iterations,
            converged=refined.converged,
        )

    def _train_mdl(
        self,
        sample: list[Any],
        search: MedoidSearch,
        refiner: Refiner,
    ) -> TrainingResult:
        selector = ModelSelector(
            self._metric,
            search,
            refiner,
            max_candidates=self._config.max_iterations,
        )
        selection = selector.select(sample)
        best = selection.best
        return TrainingResult(
            model=KMedoidsModel(best.medoids, self._metric),
            sample_size=len(sample),
            cost=best.model_cost,
            iterations=len(selection.hypotheses),
            converged=True,
            hypotheses=selection.hypotheses,
        )
