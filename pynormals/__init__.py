"""
pynormals: Python library for surface normal estimation in point clouds
"""

# Make core modules available at package level
from .normal_estimation import NormalEstimation
from .kd_tree import KDTree3D, Neighborhood, NeighborhoodType
from .pca import PrincipalComponentAnalysis3D
from .pointcloud import PointCloud
from .synthetic import generate_plane_point_cloud, generate_sphere_point_cloud
from .utils import fibonacci_sphere, compute_mean_spacing, angle_between_normals_deg
from .logger import NormalsLogger, LogLevel, get_logger, set_logger

__all__ = [
    'NormalEstimation',
    'KDTree3D',
    'Neighborhood',
    'NeighborhoodType',
    'PrincipalComponentAnalysis3D',
    'PointCloud',
    'generate_plane_point_cloud',
    'generate_sphere_point_cloud',
    'fibonacci_sphere',
    'compute_mean_spacing',
    'angle_between_normals_deg',
    'NormalsLogger',
    'LogLevel',
    'get_logger',
    'set_logger'
]
