"""Cluster bounded context: K-Medoids training over an arbitrary metric."""

from MedoidClustering.cluster.density import FittedDensity, fit_density
from MedoidClustering.cluster.kmedoids import KMedoids, TrainingResult
from MedoidClustering.cluster.medoid import MedoidSearch, model_cost
from MedoidClustering.cluster.model import KMedoidsModel
from MedoidClustering.cluster.refine import Refiner
from MedoidClustering.cluster.sampling import (
    DataSource,
    SequenceSource,
    sample_by_size,
    sample_distinct,
    sample_fraction,
)
from MedoidClustering.cluster.selection import ModelSelector

__all__ = [
    "DataSource",
    "FittedDensity",
    "KMedoids",
    "KMedoidsModel",
    "MedoidSearch",
    "ModelSelector",
    "Refiner",
    "SequenceSource",
    "TrainingResult",
    "fit_density",
    "model_cost",
    "sample_by_size",
    "sample_distinct",
    "sample_fraction",
]
