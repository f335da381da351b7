from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

Metric = Callable[[Any, Any], float]
"""A pure distance function: metric(x, y) >= 0 and metric(x, x) == 0."""


class RefinementState(enum.Enum):
    """Lifecycle of a single refinement run."""

    INITIALIZED = "initialized"
    ITERATING = "iterating"
    CONVERGED = "converged"
    MAX_ITERS_REACHED = "max_iters_reached"


@dataclass(frozen=True)
class RefinementResult:
    """Outcome of a refinement run.

    costs holds every adopted model cost, starting with the initial one,
    so it is non-increasing by construction.
    """

    medoids: tuple[Any, ...]
    cost: float
    iterations: int
    converged: bool
    state: RefinementState
    costs: tuple[float, ...] = ()

    @property
    def k(self) -> int:
        return len(self.medoids)


@dataclass(frozen=True)
class ModelHypothesis:
    """A candidate clustering scored by its MDL cost."""

    k: int
    medoids: tuple[Any, ...]
    model_cost: float
    representation_cost: float
    parameter_cost: float
    density_family: str

    @property
    def mdl_cost(self) -> float:
        return self.representation_cost + self.parameter_cost


@dataclass(frozen=True)
class ModelSelection:
    """Result of the MDL search: the winner plus every scored candidate."""

    best: ModelHypothesis
    hypotheses: tuple[ModelHypothesis, ...]

    @property
    def candidate_ks(self) -> list[int]:
        return [h.k for h in self.hypotheses]
