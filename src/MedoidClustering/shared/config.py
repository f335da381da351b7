from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path

from MedoidClustering.pipeline.errors import ConfigurationError

DEFAULT_K = 2
DEFAULT_MAX_ITERATIONS = 25
DEFAULT_EPSILON = 0.0
DEFAULT_FRACTION_EPSILON = 0.0001
DEFAULT_SAMPLE_SIZE = 1000
DEFAULT_NUM_THREADS = 1
DEFAULT_SEED = 42


@dataclass(frozen=True)
class KMedoidsConfig:
    """Configuration for a K-Medoids training run.

    k: number of clusters. Zero selects the number of clusters by
        Minimum Description Length.
    max_iterations: maximum refinement iterations per refinement run, and
        the largest cluster count tried when k is zero.
    epsilon: refinement halts when (c0 - c1) <= epsilon.
    fraction_epsilon: refinement halts when (c0 - c1) / c0 <= fraction_epsilon.
    sample_size: target size of the random working sample.
    num_threads: width of the worker pool used for medoid searches.
    seed: RNG seed. Runs with the same seed and data are identical.
    """

    k: int = DEFAULT_K
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    epsilon: float = DEFAULT_EPSILON
    fraction_epsilon: float = DEFAULT_FRACTION_EPSILON
    sample_size: int = DEFAULT_SAMPLE_SIZE
    num_threads: int = DEFAULT_NUM_THREADS
    seed: int = DEFAULT_SEED

    def __post_init__(self) -> None:
        if self.k < 0:
            raise ConfigurationError(f"k={self.k} must be >= 0")
        if self.max_iterations <= 0:
            raise ConfigurationError(
                f"max_iterations={self.max_iterations} must be > 0"
            )
        if not self.epsilon >= 0.0:
            raise ConfigurationError(f"epsilon={self.epsilon} must be >= 0.0")
        if not self.fraction_epsilon >= 0.0:
            raise ConfigurationError(
                f"fraction_epsilon={self.fraction_epsilon} must be >= 0.0"
            )
        if self.sample_size <= 0:
            raise ConfigurationError(
                f"sample_size={self.sample_size} must be > 0"
            )
        if self.num_threads <= 0:
            raise ConfigurationError(
                f"num_threads={self.num_threads} must be > 0"
            )

    def with_k(self, k: int) -> KMedoidsConfig:
        return dataclasses.replace(self, k=k)

    def with_max_iterations(self, max_iterations: int) -> KMedoidsConfig:
        return dataclasses.replace(self, max_iterations=max_iterations)

    def with_epsilon(self, epsilon: float) -> KMedoidsConfig:
        return dataclasses.replace(self, epsilon=epsilon)

    def with_fraction_epsilon(self, fraction_epsilon: float) -> KMedoidsConfig:
        return dataclasses.replace(self, fraction_epsilon=fraction_epsilon)

    def with_sample_size(self, sample_size: int) -> KMedoidsConfig:
        return dataclasses.replace(self, sample_size=sample_size)

    def with_num_threads(self, num_threads: int) -> KMedoidsConfig:
        return dataclasses.replace(self, num_threads=num_threads)

    def with_seed(self, seed: int) -> KMedoidsConfig:
        return dataclasses.replace(self, seed=seed)


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration for a training stage run over a CSV input file."""

    input_file: Path
    metric: str = "euclidean"
    delimiter: str = ","
    kmedoids: KMedoidsConfig = dataclasses.field(default_factory=KMedoidsConfig)
