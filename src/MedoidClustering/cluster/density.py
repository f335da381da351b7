"""Parametric density fitting for non-negative distance data."""
from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np
from scipy import stats

from MedoidClustering.pipeline.errors import PreconditionError

logger = logging.getLogger(__name__)

POINT_MASS_DENSITY = 1e10
# Below this log-spread the gamma shape estimate is unbounded.
_MIN_LOG_SPREAD = 1e-9


@dataclass(frozen=True)
class FittedDensity:
    """A density over distances plus its free-parameter count."""

    pdf: Callable[[float], float]
    free_params: int
    family: str
    shape: float = 0.0
    scale: float = 0.0


def _point_mass(_x: float) -> float:
    return POINT_MASS_DENSITY


def _gamma_candidate(positive: np.ndarray) -> tuple[float, float] | None:
    """Approximate gamma MLE with the shape clamped to >= 1.

    See https://en.wikipedia.org/wiki/Gamma_distribution#Maximum_likelihood_estimation
    """
    mean = float(np.mean(positive))
    s = math.log(mean) - float(np.mean(np.log(positive)))
    if s < _MIN_LOG_SPREAD:
        return None
    shape = (3.0 - s + math.sqrt((s - 3.0) ** 2 + 24.0 * s)) / (12.0 * s)
    shape = max(1.0, shape)
    return shape, mean / shape


def fit_density(distances: Sequence[float]) -> FittedDensity:
    """Fit a gamma-family density to distance data (all values >= 0).

    If every distance is zero the support is the single point zero and a
    constant, very large "density" with no free parameters is returned.
    Otherwise a shape-clamped gamma (fit on the positive distances) and an
    exponential (fit on all distances) compete, and the one with the
    smaller Kolmogorov-Smirnov D statistic wins.
    """
    data = np.asarray(distances, dtype=np.float64)
    if data.size == 0:
        raise PreconditionError("cannot fit a density to an empty sample")

    positive = data[data > 0.0]
    if positive.size == 0:
        logger.debug("[KMEDOIDS] stage=mdl event=density_fit family=point-mass")
        return FittedDensity(pdf=_point_mass, free_params=0, family="point-mass")

    candidates: list[tuple[str, float, float]] = []
    gamma_fit = _gamma_candidate(positive)
    if gamma_fit is not None:
        candidates.append(("gamma", *gamma_fit))
    candidates.append(("exponential", 1.0, float(np.mean(data))))

    best = None
    best_d = float("inf")
    for family, shape, scale in candidates:
        dist = stats.gamma(a=shape, scale=scale)
        d = float(stats.kstest(data, dist.cdf).statistic)
        logger.debug(
            "[KMEDOIDS] stage=mdl event=density_candidate family=%s "
            "shape=%.4g scale=%.4g ks_d=%.4g",
            family,
            shape,
            scale,
            d,
        )
        if best is None or d < best_d:
            best = (family, shape, scale, dist)
            best_d = d

    family, shape, scale, dist = best
    # both candidates are gamma variants and are charged two parameters
    return FittedDensity(
        pdf=lambda x: float(dist.pdf(x)),
        free_params=2,
        family=family,
        shape=shape,
        scale=scale,
    )
