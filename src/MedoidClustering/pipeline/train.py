"""Training stage: load numeric rows, train K-Medoids, summarize the result."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from MedoidClustering.cluster.kmedoids import KMedoids, TrainingResult
from MedoidClustering.cluster.sampling import sample_by_size
from MedoidClustering.pipeline.errors import (
    ClusteringError,
    PreconditionError,
    TrainingError,
)
from MedoidClustering.shared.config import PipelineConfig

logger = logging.getLogger(__name__)

METRICS = ("cityblock", "cosine", "euclidean", "l1", "l2", "manhattan")


@dataclass(frozen=True)
class TrainingSummary:
    """Training result mapped back onto the rows of the input file."""

    result: TrainingResult
    rows: tuple[int, ...]
    medoid_rows: tuple[int, ...]
    medoid_points: NDArray[np.float64]

    def to_dict(self) -> dict[str, Any]:
        result = self.result
        return {
            "k": result.model.k,
            "cost": result.cost,
            "iterations": result.iterations,
            "converged": result.converged,
            "sample_size": result.sample_size,
            "medoid_rows": list(self.medoid_rows),
            "medoids": self.medoid_points.tolist(),
            "hypotheses": [
                {
                    "k": h.k,
                    "model_cost": h.model_cost,
                    "representation_cost": h.representation_cost,
                    "parameter_cost": h.parameter_cost,
                    "mdl_cost": h.mdl_cost,
                    "density": h.density_family,
                }
                for h in result.hypotheses
            ],
        }


def load_points(config: PipelineConfig) -> NDArray[np.float64]:
    """Load a numeric CSV into an (N, d) matrix."""
    if not config.input_file.exists():
        raise PreconditionError(f"Input file not found: {config.input_file}")
    points = np.loadtxt(
        config.input_file, delimiter=config.delimiter, ndmin=2, dtype=np.float64
    )
    if points.shape[0] == 0:
        raise PreconditionError(f"Input file has no rows: {config.input_file}")
    return points


def run_train(config: PipelineConfig) -> TrainingSummary:
    """Run the training stage.

    The working sample is drawn here and its pairwise distances are
    precomputed, so the trainer clusters row positions under a lookup
    metric. Raises TrainingError on unexpected failures.
    """
    if config.metric not in METRICS:
        raise PreconditionError(
            f"Unknown metric {config.metric!r}. "
            f"Available: {', '.join(METRICS)}"
        )
    try:
        from sklearn.metrics import pairwise_distances

        points = load_points(config)
        kmedoids_config = config.kmedoids
        rows = sample_by_size(
            list(range(points.shape[0])),
            kmedoids_config.sample_size,
            kmedoids_config.seed,
        )
        logger.info(
            "[KMEDOIDS] stage=train event=points_loaded rows=%d dim=%d sampled=%d",
            points.shape[0],
            points.shape[1],
            len(rows),
        )
        if not rows:
            raise PreconditionError("cannot train on an empty data sample")

        distances = pairwise_distances(points[rows], metric=config.metric)

        def metric(i: int, j: int) -> float:
            return float(distances[i, j])

        trainer = KMedoids(
            metric,
            kmedoids_config.with_sample_size(len(rows)),
        )
        result = trainer.train(list(range(len(rows))))

        medoid_rows = tuple(rows[i] for i in result.model.medoids)
        logger.info(
            "[KMEDOIDS] stage=train event=summary k=%d cost=%.6g medoid_rows=%s",
            result.model.k,
            result.cost,
            list(medoid_rows),
        )
        return TrainingSummary(
            result=result,
            rows=tuple(rows),
            medoid_rows=medoid_rows,
            medoid_points=points[list(medoid_rows)],
        )

    except ClusteringError:
        raise
    except Exception as exc:
        logger.warning(
            "[KMEDOIDS] stage=train event=error error=%s",
            str(exc),
        )
        raise TrainingError(str(exc)) from exc
