"""Shared test fixtures: small point sets with known geometry."""

from __future__ import annotations

import numpy as np
import pytest

from pynormals.kd_tree import KDTree3D
from pynormals.logger import set_logger


class CountingTree(KDTree3D):
    """KDTree3D that records how many queries it answered."""

    def __init__(self, points):
        super().__init__(points)
        self.calls = 0

    def knn_search(self, query, k):
        self.calls += 1
        return super().knn_search(query, k)

    def radius_search(self, query, radius_sq):
        self.calls += 1
        return super().radius_search(query, radius_sq)

    def knn_in_radius_search(self, query, k, radius_sq):
        self.calls += 1
        return super().knn_in_radius_search(query, k, radius_sq)


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    set_logger(None)


@pytest.fixture()
def square_points() -> np.ndarray:
    """Corners of the unit square in the XY plane."""
    return np.array(
        [[0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 0]], dtype=np.float64
    )


@pytest.fixture()
def noisy_plane_points() -> np.ndarray:
    """400 points near the plane z = 0.5 * x, with a little noise."""
    rng = np.random.default_rng(7)
    xy = rng.uniform(-1, 1, size=(400, 2))
    z = 0.5 * xy[:, 0] + rng.normal(scale=0.002, size=400)
    return np.column_stack((xy, z))


@pytest.fixture()
def random_points() -> np.ndarray:
    rng = np.random.default_rng(3)
    return rng.uniform(-1, 1, size=(300, 3))
