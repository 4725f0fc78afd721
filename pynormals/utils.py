"""
Utility functions: direction sampling, point spacing and normal comparison.
"""
import numpy as np
from scipy.spatial import cKDTree


def fibonacci_sphere(samples=100):
    """Generate evenly distributed unit directions on a sphere."""
    if samples < 2:
        raise ValueError("samples must be at least 2")
    i = np.arange(samples)
    phi = np.pi * (3. - np.sqrt(5.))  # golden angle
    y = 1 - (i / float(samples - 1)) * 2  # y goes from 1 to -1
    radius = np.sqrt(1 - y * y)
    theta = phi * i
    return np.column_stack((np.cos(theta) * radius, y, np.sin(theta) * radius))


def compute_mean_spacing(points, k=10):
    """
    Mean distance from each point to its k nearest neighbors (itself excluded).
    Handy for picking a search radius.

    Args:
        points: (N, 3) numpy array or PointCloud
        k: Number of neighbors to average over
    Returns:
        float: Mean neighbor distance, 0.0 for fewer than two points
    """
    if hasattr(points, 'points'):  # PointCloud
        points = points.points
    points = np.asarray(points, dtype=np.float64)

    if len(points) <= 1:
        return 0.0
    k = min(k, len(points) - 1)
    if k < 1:
        return 0.0

    tree = cKDTree(points)
    distances, _ = tree.query(points, k=k + 1)  # k+1 because point is its own neighbor
    return float(np.mean(distances[:, 1:]))


def angle_between_normals_deg(normals, reference, oriented=True):
    """
    Per-row angle in degrees between two (N, 3) normal arrays (or one array and a
    single reference vector). With ``oriented=False`` the sign of the normals is
    ignored and angles fall in [0, 90]. Rows containing NaN give NaN.
    """
    normals = np.asarray(normals, dtype=np.float64)
    reference = np.asarray(reference, dtype=np.float64)
    a = normals / np.linalg.norm(normals, axis=-1, keepdims=True)
    b = reference / np.linalg.norm(reference, axis=-1, keepdims=True)
    dots = np.sum(a * b, axis=-1)
    if not oriented:
        dots = np.abs(dots)
    return np.degrees(np.arccos(np.clip(dots, -1.0, 1.0)))
