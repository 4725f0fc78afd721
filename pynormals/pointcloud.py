"""
PointCloud container: a point array plus an optional per-point normal array,
with conversion to and from Open3D.
"""
import open3d as o3d
import numpy as np


def _as_xyz(array, what):
    array = np.asarray(array, dtype=np.float64)
    if array.size == 0:
        return np.empty((0, 3), dtype=np.float64)
    if array.ndim != 2 or array.shape[1] != 3:
        raise ValueError(f"{what} must be an (N, 3) array, got shape {array.shape}")
    return array


class PointCloud:
    def __init__(self, points, normals=None):
        """
        Args:
            points: (N, 3) array-like of 3D points
            normals: optional (N, 3) array-like of normals; empty when omitted
        """
        self.points = _as_xyz(points, "points")
        self._normals = np.empty((0, 3), dtype=np.float64)
        if normals is not None:
            self.normals = normals

    @property
    def normals(self):
        """(N, 3) normals, or an empty (0, 3) array when none have been set."""
        return self._normals

    @normals.setter
    def normals(self, normals):
        normals = _as_xyz(normals, "normals")
        if len(normals) and len(normals) != len(self.points):
            raise ValueError(
                f"normals length {len(normals)} does not match points length {len(self.points)}"
            )
        self._normals = normals

    def __len__(self):
        return len(self.points)

    def has_normals(self):
        return len(self.points) > 0 and len(self._normals) == len(self.points)

    @classmethod
    def from_open3d(cls, o3d_pcd):
        """Wrap the points (and normals, if any) of an Open3D PointCloud."""
        points = np.asarray(o3d_pcd.points)
        normals = np.asarray(o3d_pcd.normals) if o3d_pcd.has_normals() else None
        return cls(points, normals)

    @classmethod
    def from_file(cls, filename):
        """Load point cloud from file (PLY, PCD, XYZ, etc.) through Open3D."""
        return cls.from_open3d(o3d.io.read_point_cloud(filename))

    def to_open3d(self):
        """Return a new Open3D PointCloud holding copies of the points and normals."""
        pcd = o3d.geometry.PointCloud()
        pcd.points = o3d.utility.Vector3dVector(self.points)
        if self.has_normals():
            pcd.normals = o3d.utility.Vector3dVector(self._normals)
        return pcd

    def to_numpy(self):
        """Return points as Nx3 numpy array."""
        return self.points

    def normals_numpy(self):
        """Return normals as Nx3 numpy array, or None if there are none."""
        return self._normals if self.has_normals() else None

    def valid_normals_mask(self):
        """Boolean mask of the points whose normal is defined (no NaN component)."""
        if not self.has_normals():
            return np.zeros(len(self.points), dtype=bool)
        return ~np.isnan(self._normals).any(axis=1)

    def select(self, indices):
        """
        Return a new PointCloud made of the given points (index array or boolean mask).
        Normals are carried over when present.
        """
        indices = np.asarray(indices)
        normals = self._normals[indices] if self.has_normals() else None
        return PointCloud(self.points[indices], normals)

    def estimate_normals(self, radius=0.05, max_nn=30, view_point=None):
        """
        Estimate normals in place from up to ``max_nn`` neighbors within ``radius``.
        Normals are oriented towards ``view_point`` (the origin by default).
        """
        from .normal_estimation import NormalEstimation

        with NormalEstimation(self) as estimator:
            if view_point is not None:
                estimator.set_view_point(view_point)
            estimator.estimate_normals_knn_in_radius_in_place(max_nn, radius)
        return self
