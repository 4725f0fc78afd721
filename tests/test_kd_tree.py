"""Tests for the KD-tree wrapper and neighborhood descriptors."""

from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from pynormals.kd_tree import KDTree3D, Neighborhood, NeighborhoodType


@pytest.fixture()
def line_points() -> np.ndarray:
    return np.array([[float(i), 0.0, 0.0] for i in range(6)])


class TestKnnSearch:
    def test_nearest_first_with_squared_distances(self, line_points):
        tree = KDTree3D(line_points)
        idx, d2 = tree.knn_search(line_points[2], 3)
        assert idx[0] == 2
        assert set(idx.tolist()) == {1, 2, 3}
        np.testing.assert_allclose(d2, [0.0, 1.0, 1.0])

    def test_fewer_points_than_k(self, line_points):
        tree = KDTree3D(line_points[:2])
        idx, d2 = tree.knn_search(line_points[0], 10)
        assert len(idx) == 2
        assert len(d2) == 2

    def test_single_neighbor(self, line_points):
        idx, d2 = KDTree3D(line_points).knn_search([4.1, 0, 0], 1)
        assert idx.tolist() == [4]
        np.testing.assert_allclose(d2, [0.01])

    def test_zero_k(self, line_points):
        idx, d2 = KDTree3D(line_points).knn_search(line_points[0], 0)
        assert len(idx) == 0 and len(d2) == 0

    def test_negative_k(self, line_points):
        with pytest.raises(ValueError):
            KDTree3D(line_points).knn_search(line_points[0], -1)

    def test_bad_query_shape(self, line_points):
        with pytest.raises(ValueError):
            KDTree3D(line_points).knn_search([0.0, 0.0], 2)


class TestRadiusSearch:
    def test_neighbors_within_radius(self, line_points):
        tree = KDTree3D(line_points)
        idx, d2 = tree.radius_search(line_points[2], 1.5 ** 2)
        assert idx[0] == 2
        assert sorted(idx.tolist()) == [1, 2, 3]
        assert np.all(np.diff(d2) >= 0)

    def test_only_self_when_radius_small(self, line_points):
        idx, _ = KDTree3D(line_points).radius_search(line_points[0], 0.25)
        assert idx.tolist() == [0]

    def test_nothing_near(self, line_points):
        idx, d2 = KDTree3D(line_points).radius_search([0.0, 50.0, 0.0], 1.0)
        assert len(idx) == 0 and len(d2) == 0

    def test_negative_radius(self, line_points):
        with pytest.raises(ValueError):
            KDTree3D(line_points).radius_search(line_points[0], -1.0)


class TestKnnInRadiusSearch:
    def test_capped_by_k(self, line_points):
        idx, _ = KDTree3D(line_points).knn_in_radius_search(line_points[2], 2, 10.0 ** 2)
        assert len(idx) == 2
        assert idx[0] == 2

    def test_capped_by_radius(self, line_points):
        idx, d2 = KDTree3D(line_points).knn_in_radius_search(line_points[0], 5, 1.5 ** 2)
        assert sorted(idx.tolist()) == [0, 1]
        assert np.all(d2 < 1.5 ** 2)

    def test_no_padding_entries(self, line_points):
        tree = KDTree3D(line_points)
        idx, d2 = tree.knn_in_radius_search([0.0, 0.0, 0.0], 6, 0.5 ** 2)
        assert idx.tolist() == [0]
        assert np.all(np.isfinite(d2))


class TestEmptyTree:
    def test_queries_return_nothing(self):
        tree = KDTree3D(np.empty((0, 3)))
        assert len(tree) == 0
        for idx, d2 in (
            tree.knn_search([0, 0, 0], 3),
            tree.radius_search([0, 0, 0], 1.0),
            tree.knn_in_radius_search([0, 0, 0], 3, 1.0),
        ):
            assert len(idx) == 0 and len(d2) == 0

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            KDTree3D(np.zeros((4, 2)))


class TestNeighborhood:
    def test_constructors(self):
        assert Neighborhood.knn(8).type is NeighborhoodType.KNN
        assert Neighborhood.radius_search(0.1).type is NeighborhoodType.RADIUS
        nh = Neighborhood.knn_in_radius(8, 0.1)
        assert nh.type is NeighborhoodType.KNN_IN_RADIUS
        assert nh.max_neighbors == 8
        assert nh.radius == 0.1

    def test_frozen(self):
        nh = Neighborhood.knn(8)
        with pytest.raises(dataclasses.FrozenInstanceError):
            nh.max_neighbors = 3

    @pytest.mark.parametrize(
        "factory",
        [
            lambda: Neighborhood.knn(-1),
            lambda: Neighborhood.knn(2.5),
            lambda: Neighborhood.radius_search(-0.1),
            lambda: Neighborhood.radius_search(float("nan")),
            lambda: Neighborhood.knn_in_radius(5, -1.0),
            lambda: Neighborhood("knn", 5),
        ],
    )
    def test_invalid(self, factory):
        with pytest.raises(ValueError):
            factory()
