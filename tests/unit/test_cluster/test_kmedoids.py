"""End-to-end tests for the K-Medoids trainer."""
from __future__ import annotations

import math

import pytest

from MedoidClustering.cluster.kmedoids import KMedoids
from MedoidClustering.cluster.medoid import medoid_cost, model_cost
from MedoidClustering.cluster.sampling import SequenceSource
from MedoidClustering.pipeline.errors import ConfigurationError, PreconditionError
from MedoidClustering.shared.config import KMedoidsConfig


def _euclidean(a, b) -> float:
    return math.dist(a, b)


class TestFixedK:
    def test_two_blobs_recover_cores(self, two_blobs) -> None:
        trainer = KMedoids(_euclidean, KMedoidsConfig(k=2, seed=42))
        result = trainer.train(two_blobs)

        xs = sorted(m[0] for m in result.model.medoids)
        assert result.model.k == 2
        assert xs[0] < 10.0 < xs[1]

        single = min(two_blobs, key=lambda c: medoid_cost(c, two_blobs, _euclidean))
        one_medoid_cost = model_cost([single], two_blobs, _euclidean)
        assert result.cost < one_medoid_cost / 5.0
        assert result.converged

    def test_reproducible_with_same_seed(self, two_blobs) -> None:
        trainer = KMedoids(_euclidean, KMedoidsConfig(k=3, seed=7))
        first = trainer.train(two_blobs)
        second = trainer.train(two_blobs)
        assert first.model.medoids == second.model.medoids
        assert first.cost == second.cost
        assert first.iterations == second.iterations

    def test_pool_width_does_not_change_result(self, random_points) -> None:
        trainer = KMedoids(_euclidean, KMedoidsConfig(k=4, seed=11))
        serial = trainer.train(random_points)
        threaded = trainer.with_num_threads(4).train(random_points)
        assert serial.model.medoids == threaded.model.medoids
        assert serial.cost == threaded.cost

    def test_identical_points(self, identical_points) -> None:
        result = KMedoids(_euclidean, KMedoidsConfig(k=1)).train(identical_points)
        assert result.cost == 0.0
        assert result.iterations == 1
        assert result.converged
        assert result.model.medoids == ((3.0, 4.0),)

    def test_medoids_drawn_from_sample(self, random_points) -> None:
        model = KMedoids(_euclidean, KMedoidsConfig(k=3)).run(random_points)
        assert all(m in random_points for m in model.medoids)

    def test_accepts_data_source(self, two_blobs) -> None:
        trainer = KMedoids(_euclidean, KMedoidsConfig(k=2, sample_size=40))
        result = trainer.train(SequenceSource(two_blobs))
        assert result.model.k == 2
        assert 0 < result.sample_size <= len(two_blobs)

    def test_not_enough_distinct_elements(self) -> None:
        trainer = KMedoids(_euclidean, KMedoidsConfig(k=2))
        with pytest.raises(PreconditionError, match="distinct"):
            trainer.train([(1.0, 1.0)] * 5)

    def test_k_larger_than_sample(self) -> None:
        trainer = KMedoids(_euclidean, KMedoidsConfig(k=5))
        with pytest.raises(PreconditionError):
            trainer.train([(0.0, 0.0), (1.0, 1.0)])

    def test_empty_data(self) -> None:
        with pytest.raises(PreconditionError, match="empty"):
            KMedoids(_euclidean).train([])


class TestAutoK:
    def test_selects_three_clusters(self, three_groups) -> None:
        result = KMedoids(_euclidean, KMedoidsConfig(k=0)).train(three_groups)
        assert result.model.k == 3
        assert [h.k for h in result.hypotheses] == [1, 2, 3]
        assert result.cost == 0.0

    @pytest.mark.xfail(
        reason="distance-only MDL keeps splitting continuous groups; see DESIGN.md",
    )
    def test_spread_groups_select_three_clusters(self, spread_groups) -> None:
        result = KMedoids(_euclidean, KMedoidsConfig(k=0)).train(spread_groups)
        assert result.model.k == 3

    def test_spread_groups_pick_minimum_mdl_candidate(self, spread_groups) -> None:
        result = KMedoids(_euclidean, KMedoidsConfig(k=0)).train(spread_groups)
        ks = [h.k for h in result.hypotheses]
        assert ks[:3] == [1, 2, 3]
        assert ks == list(range(1, len(ks) + 1))
        assert len(ks) <= 25

        best = min(result.hypotheses, key=lambda h: h.mdl_cost)
        assert result.model.k == best.k
        assert result.model.medoids == best.medoids
        assert result.cost == best.model_cost
        assert result.iterations == len(result.hypotheses)
        assert result.converged

    def test_identical_points_stay_single_cluster(self, identical_points) -> None:
        result = KMedoids(_euclidean, KMedoidsConfig(k=0)).train(identical_points)
        assert result.model.k == 1
        assert result.hypotheses[0].density_family == "point-mass"


class TestSetters:
    def test_setters_return_copies(self) -> None:
        trainer = KMedoids(_euclidean)
        updated = trainer.with_k(5).with_seed(3).with_max_iterations(10)
        assert trainer.config.k == 2
        assert updated.config.k == 5
        assert updated.config.seed == 3
        assert updated.config.max_iterations == 10

    def test_with_metric(self) -> None:
        trainer = KMedoids(_euclidean)

        def other(a, b):
            return 0.0

        assert trainer.with_metric(other).metric is other
        assert trainer.metric is _euclidean

    def test_setters_validate(self) -> None:
        trainer = KMedoids(_euclidean)
        with pytest.raises(ConfigurationError):
            trainer.with_num_threads(0)
        with pytest.raises(ConfigurationError):
            trainer.with_epsilon(-1.0)
        with pytest.raises(ConfigurationError):
            trainer.with_fraction_epsilon(-0.1)
        with pytest.raises(ConfigurationError):
            trainer.with_sample_size(0)
