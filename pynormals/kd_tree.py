"""
KD-tree over 3D points and the neighborhood descriptors used to query it.
"""
from dataclasses import dataclass
from enum import Enum
import numbers

import numpy as np
from scipy.spatial import cKDTree


class NeighborhoodType(Enum):
    """The three supported neighbor query modes."""
    KNN = 'knn'
    RADIUS = 'radius'
    KNN_IN_RADIUS = 'knn_in_radius'


@dataclass(frozen=True)
class Neighborhood:
    """
    Describes how the neighbors of a point are gathered.

    Use the constructors instead of filling the fields by hand:
    ``Neighborhood.knn(k)``, ``Neighborhood.radius_search(r)`` and
    ``Neighborhood.knn_in_radius(k, r)``. ``max_neighbors`` is ignored for
    RADIUS and ``radius`` is ignored for KNN.
    """
    type: NeighborhoodType
    max_neighbors: int = 0
    radius: float = 0.0

    def __post_init__(self):
        if not isinstance(self.type, NeighborhoodType):
            raise ValueError(f"Unknown neighborhood type: {self.type!r}")
        if self.type in (NeighborhoodType.KNN, NeighborhoodType.KNN_IN_RADIUS):
            validate_k(self.max_neighbors)
        if self.type in (NeighborhoodType.RADIUS, NeighborhoodType.KNN_IN_RADIUS):
            validate_radius(self.radius)

    @classmethod
    def knn(cls, k):
        return cls(NeighborhoodType.KNN, max_neighbors=k)

    @classmethod
    def radius_search(cls, radius):
        return cls(NeighborhoodType.RADIUS, radius=radius)

    @classmethod
    def knn_in_radius(cls, k, radius):
        return cls(NeighborhoodType.KNN_IN_RADIUS, max_neighbors=k, radius=radius)


def validate_k(k):
    """Raise ValueError unless k is a non-negative integer."""
    if isinstance(k, bool) or not isinstance(k, numbers.Integral) or k < 0:
        raise ValueError(f"Number of neighbors must be a non-negative integer, got {k!r}")


def validate_radius(radius):
    """Raise ValueError unless radius is a finite non-negative number."""
    if not isinstance(radius, numbers.Real) or not np.isfinite(radius) or radius < 0:
        raise ValueError(f"Radius must be a finite non-negative number, got {radius!r}")


def _empty_result():
    return np.empty(0, dtype=np.intp), np.empty(0, dtype=np.float64)


class KDTree3D:
    """
    Read-only KD-tree over an (N, 3) point array.

    All queries take a single query point and return ``(indices, sq_distances)``
    sorted by increasing distance. Both arrays may be shorter than requested and
    never contain padding entries. Queries do not modify the tree and are safe
    to run from several threads at once.
    """

    def __init__(self, points, leafsize=16):
        """
        Args:
            points: (N, 3) array-like of 3D points
            leafsize: Leaf size handed to scipy's cKDTree
        """
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 3:
            raise ValueError(f"Expected an (N, 3) point array, got shape {points.shape}")
        self._points = points
        # cKDTree cannot answer queries on an empty set, so an empty tree is
        # represented by None and every query returns nothing.
        self._tree = cKDTree(points, leafsize=leafsize) if len(points) else None

    def __len__(self):
        return len(self._points)

    @property
    def points(self):
        return self._points

    def _as_query(self, query):
        query = np.asarray(query, dtype=np.float64)
        if query.shape != (3,):
            raise ValueError(f"Query point must have shape (3,), got {query.shape}")
        return query

    def knn_search(self, query, k):
        """
        Find the ``k`` nearest neighbors of ``query`` (the point itself included
        when it belongs to the indexed set). Returns fewer than ``k`` neighbors
        when the tree holds fewer points.
        """
        validate_k(k)
        query = self._as_query(query)
        k = min(k, len(self))
        if k == 0 or self._tree is None:
            return _empty_result()
        distances, indices = self._tree.query(query, k=k)
        distances = np.atleast_1d(distances)
        indices = np.atleast_1d(indices).astype(np.intp)
        return indices, distances ** 2

    def radius_search(self, query, radius_sq):
        """
        Find every point whose distance to ``query`` is at most ``sqrt(radius_sq)``.
        """
        validate_radius(radius_sq)
        query = self._as_query(query)
        if self._tree is None:
            return _empty_result()
        indices = np.asarray(
            self._tree.query_ball_point(query, r=np.sqrt(radius_sq)), dtype=np.intp
        )
        if len(indices) == 0:
            return _empty_result()
        sq_distances = np.sum((self._points[indices] - query) ** 2, axis=1)
        order = np.argsort(sq_distances, kind='stable')
        return indices[order], sq_distances[order]

    def knn_in_radius_search(self, query, k, radius_sq):
        """
        Find at most ``k`` nearest neighbors of ``query``, keeping only those
        strictly closer than ``sqrt(radius_sq)``.
        """
        validate_k(k)
        validate_radius(radius_sq)
        query = self._as_query(query)
        k = min(k, len(self))
        if k == 0 or self._tree is None:
            return _empty_result()
        distances, indices = self._tree.query(
            query, k=k, distance_upper_bound=np.sqrt(radius_sq)
        )
        distances = np.atleast_1d(distances)
        indices = np.atleast_1d(indices)
        # Missing neighbors come back as (inf, len(points))
        sq_distances = distances ** 2
        keep = np.isfinite(distances) & (sq_distances < radius_sq)
        return indices[keep].astype(np.intp), sq_distances[keep]
