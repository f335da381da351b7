"""Tests for the MDL-driven greedy splitting search."""
from __future__ import annotations

import math

import numpy as np
import pytest

from MedoidClustering.cluster.density import fit_density
from MedoidClustering.cluster.medoid import MedoidSearch
from MedoidClustering.cluster.refine import Refiner
from MedoidClustering.cluster.selection import ZERO_DENSITY_PENALTY, ModelSelector
from MedoidClustering.pipeline.errors import PreconditionError


def _selector(search: MedoidSearch, metric, max_candidates: int = 25) -> ModelSelector:
    refiner = Refiner(metric, search, max_iterations=25, epsilon=0.0, fraction_epsilon=0.0)
    return ModelSelector(metric, search, refiner, max_candidates=max_candidates)


class TestCandidates:
    def test_grows_until_clusters_are_unsplittable(
        self, search: MedoidSearch, three_groups, metric,
    ) -> None:
        found = _selector(search, metric).candidates(three_groups)
        assert [len(medoids) for medoids, _ in found] == [1, 2, 3]

    def test_final_candidate_covers_each_group(
        self, search: MedoidSearch, three_groups, metric,
    ) -> None:
        medoids, clusters = _selector(search, metric).candidates(three_groups)[-1]
        assert set(medoids) == {(0.0, 0.0), (10.0, 0.0), (0.0, 10.0)}
        assert [len(c) for c in clusters] == [10, 10, 10]

    def test_stops_at_max_candidates(
        self, search: MedoidSearch, three_groups, metric,
    ) -> None:
        found = _selector(search, metric, max_candidates=2).candidates(three_groups)
        assert [len(medoids) for medoids, _ in found] == [1, 2]

    def test_identical_points_cannot_split(
        self, search: MedoidSearch, identical_points, metric,
    ) -> None:
        found = _selector(search, metric).candidates(identical_points)
        assert len(found) == 1

    def test_empty_data_raises(self, search: MedoidSearch, metric) -> None:
        with pytest.raises(PreconditionError):
            _selector(search, metric).candidates([])


class TestScore:
    def test_point_mass_parameter_cost(
        self, search: MedoidSearch, identical_points, metric,
    ) -> None:
        selector = _selector(search, metric)
        hypothesis = selector.score(
            (identical_points[0],), [identical_points], len(identical_points)
        )
        assert hypothesis.density_family == "point-mass"
        assert hypothesis.parameter_cost == pytest.approx(math.log(10))
        assert hypothesis.representation_cost == pytest.approx(-10 * math.log(1e10))
        assert hypothesis.model_cost == 0.0

    def test_zero_density_is_penalized(self, abs_search: MedoidSearch) -> None:
        selector = _selector(abs_search, lambda a, b: abs(a - b))
        rng = np.random.RandomState(3)
        data = [0.0] + [float(x) for x in rng.gamma(5.0, 2.0, size=200)]
        # a gamma with shape > 1 has zero density at zero
        density = fit_density(data)
        assert density.family == "gamma"
        assert density.pdf(0.0) == 0.0

        hypothesis = selector.score((0.0,), [data], len(data))
        expected = ZERO_DENSITY_PENALTY + sum(-math.log(density.pdf(d)) for d in data[1:])
        assert hypothesis.representation_cost == pytest.approx(expected)


class TestSelect:
    def test_selects_three_clusters(
        self, search: MedoidSearch, three_groups, metric,
    ) -> None:
        selection = _selector(search, metric).select(three_groups)
        assert selection.best.k == 3
        assert selection.candidate_ks == [1, 2, 3]
        assert selection.best.mdl_cost == min(h.mdl_cost for h in selection.hypotheses)

    def test_mdl_cost_is_sum_of_parts(
        self, search: MedoidSearch, three_groups, metric,
    ) -> None:
        selection = _selector(search, metric).select(three_groups)
        for h in selection.hypotheses:
            assert h.mdl_cost == h.representation_cost + h.parameter_cost
            assert h.parameter_cost > 0.0
