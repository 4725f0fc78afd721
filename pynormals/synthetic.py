"""
Synthetic point clouds with known normals.
"""
import numpy as np

from .pointcloud import PointCloud
from .utils import fibonacci_sphere


def _orthonormal_pair(normal):
    if np.allclose(np.abs(normal), [1, 0, 0]):
        u = np.array([0., 1., 0.])
    else:
        u = np.cross(normal, [1, 0, 0])
    u = u / np.linalg.norm(u)
    v = np.cross(normal, u)
    return u, v / np.linalg.norm(v)


def generate_plane_point_cloud(center, normal, extent=1.0, n_points=1000, noise=0.0, rng=None):
    """
    Sample a square patch of a plane.

    Args:
        center: (3,) center of the patch
        normal: (3,) plane normal (will be normalized)
        extent: side length of the patch
        n_points: int, number of points
        noise: float, stddev of Gaussian noise added to the points
        rng: optional numpy Generator
    Returns:
        PointCloud whose normals are the exact plane normal
    """
    rng = rng or np.random.default_rng()
    center = np.asarray(center, dtype=np.float64)
    normal = np.asarray(normal, dtype=np.float64)
    normal = normal / np.linalg.norm(normal)
    u, v = _orthonormal_pair(normal)
    a = rng.uniform(-extent / 2, extent / 2, size=(n_points, 1))
    b = rng.uniform(-extent / 2, extent / 2, size=(n_points, 1))
    pts = center + a * u + b * v
    if noise > 0:
        pts += rng.normal(scale=noise, size=pts.shape)
    return PointCloud(pts, np.tile(normal, (n_points, 1)))


def generate_sphere_point_cloud(center, radius, n_points=2000, noise=0.0, rng=None):
    """
    Sample a sphere evenly (Fibonacci lattice).

    Returns:
        PointCloud whose normals are the exact outward sphere normals
    """
    center = np.asarray(center, dtype=np.float64)
    directions = fibonacci_sphere(n_points)
    pts = center + radius * directions
    if noise > 0:
        rng = rng or np.random.default_rng()
        pts += rng.normal(scale=noise, size=pts.shape)
    return PointCloud(pts, directions)
