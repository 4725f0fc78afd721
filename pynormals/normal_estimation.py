"""
NormalEstimation: per-point surface normals from local PCA plane fits,
oriented towards a viewpoint.
"""
import os
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from .kd_tree import KDTree3D, NeighborhoodType, validate_k, validate_radius
from .logger import get_logger, LogLevel
from .pca import PrincipalComponentAnalysis3D
from .pointcloud import PointCloud

# A plane needs at least three points
MIN_NEIGHBORS = 3


class _OwnedIndex:
    """KD-tree built by the estimator; dropped when the estimator is closed."""
    owned = True

    def __init__(self, tree):
        self.tree = tree

    def release(self):
        self.tree = None


class _BorrowedIndex:
    """KD-tree supplied by the caller. Only queried, never released."""
    owned = False

    def __init__(self, tree):
        self.tree = tree

    def release(self):
        pass


def _read_only_points(points):
    points = np.asarray(points, dtype=np.float64)
    if points.size == 0:
        points = np.empty((0, 3), dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError(f"Expected an (N, 3) point array, got shape {points.shape}")
    # A view keeps the caller's array writeable while blocking writes through ours
    view = points.view()
    view.flags.writeable = False
    return view


class NormalEstimation:
    """
    Estimate surface normals of a point set.

    Each normal is the least-variance principal axis of the point's neighborhood,
    flipped if needed so that it points towards ``view_point``. Points whose
    neighborhood holds fewer than three points get a NaN normal.

    The estimator is built over either an (N, 3) array or a ``PointCloud``. Only
    the latter supports the ``*_in_place`` methods, which write the result into
    ``cloud.normals``; on an array-backed estimator they do nothing.
    """

    def __init__(self, source, kd_tree=None, n_jobs=1, chunk_size=1024):
        """
        Args:
            source: (N, 3) array-like of points, or a PointCloud
            kd_tree: Optional prebuilt KDTree3D over the same points. It is only
                queried and stays owned by the caller. When omitted, the estimator
                builds and owns its own tree.
            n_jobs: Number of worker threads (1 runs inline, -1 uses every CPU)
            chunk_size: Number of consecutive points handed to a worker at a time
        """
        if n_jobs == 0 or n_jobs < -1:
            raise ValueError("n_jobs must be a positive integer or -1")
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")

        if isinstance(source, PointCloud):
            self._cloud = source
            self._points = _read_only_points(source.points)
        else:
            self._cloud = None
            self._points = _read_only_points(source)

        if kd_tree is None:
            self._index = _OwnedIndex(KDTree3D(self._points))
        else:
            if len(kd_tree) != len(self._points):
                raise ValueError(
                    f"kd_tree indexes {len(kd_tree)} points but {len(self._points)} were given"
                )
            self._index = _BorrowedIndex(kd_tree)

        self.n_jobs = n_jobs
        self.chunk_size = chunk_size
        self._view_point = np.zeros(3)

    # -- lifetime ---------------------------------------------------------

    def close(self):
        """Release the KD-tree if the estimator owns it. Further estimation raises RuntimeError."""
        if self._index is not None:
            self._index.release()
            self._index = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def kd_tree_owned(self):
        return self._index is not None and self._index.owned

    @property
    def kd_tree(self):
        return self._index.tree if self._index is not None else None

    @property
    def points(self):
        return self._points

    @property
    def point_cloud(self):
        return self._cloud

    # -- viewpoint --------------------------------------------------------

    @property
    def view_point(self):
        return self._view_point.copy()

    @view_point.setter
    def view_point(self, view_point):
        view_point = np.asarray(view_point, dtype=np.float64)
        if view_point.shape != (3,) or not np.all(np.isfinite(view_point)):
            raise ValueError(f"view_point must be three finite numbers, got {view_point!r}")
        self._view_point = view_point.copy()

    def set_view_point(self, view_point):
        """Set the viewpoint and return the estimator, for chaining."""
        self.view_point = view_point
        return self

    # -- estimation -------------------------------------------------------

    def estimate_normals_knn(self, k):
        """Normals from the ``k`` nearest neighbors of each point (the point included)."""
        validate_k(k)
        if len(self._points) < MIN_NEIGHBORS:
            self._require_index()
            get_logger().debug(
                f"[estimate_normals_knn] only {len(self._points)} points, all normals undefined"
            )
            return np.full((len(self._points), 3), np.nan)
        return self._estimate(
            lambda tree, p: tree.knn_search(p, k), 'estimate_normals_knn', f"k={k}"
        )

    def estimate_normals_knn_in_place(self, k):
        if self._cloud is None:
            self._skip_in_place('estimate_normals_knn_in_place')
            return
        self._cloud.normals = self.estimate_normals_knn(k)

    def estimate_normals_radius(self, radius):
        """Normals from every point within ``radius`` of each point."""
        validate_radius(radius)
        radius_sq = radius * radius
        return self._estimate(
            lambda tree, p: tree.radius_search(p, radius_sq),
            'estimate_normals_radius', f"radius={radius}"
        )

    def estimate_normals_radius_in_place(self, radius):
        if self._cloud is None:
            self._skip_in_place('estimate_normals_radius_in_place')
            return
        self._cloud.normals = self.estimate_normals_radius(radius)

    def estimate_normals_knn_in_radius(self, k, radius):
        """Normals from at most ``k`` nearest neighbors lying strictly within ``radius``."""
        validate_k(k)
        validate_radius(radius)
        radius_sq = radius * radius
        return self._estimate(
            lambda tree, p: tree.knn_in_radius_search(p, k, radius_sq),
            'estimate_normals_knn_in_radius', f"k={k}, radius={radius}"
        )

    def estimate_normals_knn_in_radius_in_place(self, k, radius):
        if self._cloud is None:
            self._skip_in_place('estimate_normals_knn_in_radius_in_place')
            return
        self._cloud.normals = self.estimate_normals_knn_in_radius(k, radius)

    def estimate_normals(self, neighborhood):
        """
        Normals for the strategy described by a Neighborhood.

        Raises:
            ValueError: if the neighborhood type is not one of NeighborhoodType
        """
        nh_type = neighborhood.type
        if nh_type is NeighborhoodType.KNN:
            return self.estimate_normals_knn(neighborhood.max_neighbors)
        elif nh_type is NeighborhoodType.RADIUS:
            return self.estimate_normals_radius(neighborhood.radius)
        elif nh_type is NeighborhoodType.KNN_IN_RADIUS:
            return self.estimate_normals_knn_in_radius(neighborhood.max_neighbors, neighborhood.radius)
        raise ValueError(f"Unsupported neighborhood type: {nh_type!r}")

    def estimate_normals_in_place(self, neighborhood):
        if self._cloud is None:
            self._skip_in_place('estimate_normals_in_place')
            return
        self._cloud.normals = self.estimate_normals(neighborhood)

    # -- internals --------------------------------------------------------

    def _require_index(self):
        if self._index is None:
            raise RuntimeError("NormalEstimation has been closed")
        return self._index.tree

    def _skip_in_place(self, method):
        get_logger().debug(f"[{method}] estimator has no PointCloud, nothing to do")

    def _num_workers(self):
        if self.n_jobs == -1:
            return os.cpu_count() or 1
        return self.n_jobs

    def _estimate(self, search, method, params):
        """
        Run ``search(tree, point) -> (indices, sq_distances)`` for every point,
        fit a plane to each neighborhood and orient the result.
        """
        tree = self._require_index()
        points = self._points
        view_point = self._view_point.copy()
        n_points = len(points)
        normals = np.full((n_points, 3), np.nan)

        logger = get_logger()
        logger.debug(f"[{method}] {n_points} points, {params}")

        def fill(start, stop):
            # Writes rows [start, stop) only
            for i in range(start, stop):
                neighbors, _ = search(tree, points[i])
                if len(neighbors) < MIN_NEIGHBORS:
                    continue
                normal = PrincipalComponentAnalysis3D(points[neighbors]).normal
                if np.dot(normal, view_point - points[i]) < 0.0:
                    normal = -normal
                normals[i] = normal

        chunks = [
            (start, min(start + self.chunk_size, n_points))
            for start in range(0, n_points, self.chunk_size)
        ]
        workers = min(self._num_workers(), len(chunks))
        if workers <= 1:
            for start, stop in chunks:
                fill(start, stop)
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(fill, start, stop) for start, stop in chunks]
                for future in futures:
                    future.result()

        if logger.isEnabledFor(LogLevel.DEBUG):
            undefined = int(np.isnan(normals).any(axis=1).sum())
            logger.debug(f"[{method}] {undefined}/{n_points} normals undefined")
        return normals
