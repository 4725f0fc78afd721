"""
Example: estimate normals on a synthetic sphere and compare them to the ground truth.
"""
import numpy as np

from pynormals.logger import NormalsLogger, set_logger
from pynormals.normal_estimation import NormalEstimation
from pynormals.kd_tree import KDTree3D, Neighborhood
from pynormals.pointcloud import PointCloud
from pynormals.synthetic import generate_sphere_point_cloud
from pynormals.utils import compute_mean_spacing, angle_between_normals_deg


def main(n_points=2000, noise=0.002, seed=42, n_jobs=-1):
    logger = NormalsLogger(mode='console')
    set_logger(logger)

    rng = np.random.default_rng(seed)
    center = np.array([0.0, 0.0, 0.0])
    sphere = generate_sphere_point_cloud(center, radius=1.0, n_points=n_points, noise=noise, rng=rng)
    ground_truth = sphere.normals.copy()
    logger(f"Generated {len(sphere)} points on a unit sphere.")

    spacing = compute_mean_spacing(sphere, k=10)
    radius = 3.0 * spacing
    logger(f"Mean point spacing: {spacing:.4f}, search radius: {radius:.4f}")

    # One tree shared by two estimators
    tree = KDTree3D(sphere.points)
    cloud = PointCloud(sphere.points)

    # Viewpoint at the center: normals point inwards
    with NormalEstimation(cloud, kd_tree=tree, n_jobs=n_jobs) as inward:
        inward.set_view_point(center)
        inward.estimate_normals_in_place(Neighborhood.knn_in_radius(30, radius))
    inward_err = angle_between_normals_deg(cloud.normals, -ground_truth)

    # Viewpoint far outside along +z: only the upper half faces it
    with NormalEstimation(sphere.points, kd_tree=tree, n_jobs=n_jobs) as outward:
        outward.set_view_point([0.0, 0.0, 100.0])
        normals = outward.estimate_normals_knn(15)
    upper = sphere.points[:, 2] > 0.1
    outward_err = angle_between_normals_deg(normals[upper], ground_truth[upper])

    stats = {
        'radius': radius,
        'undefined': int((~cloud.valid_normals_mask()).sum()),
        'inward_mean_deg': float(np.nanmean(inward_err)),
        'outward_upper_mean_deg': float(np.nanmean(outward_err)),
    }
    logger("\n[RESULTS]")
    logger(f"  Undefined normals:                {stats['undefined']}")
    logger(f"  Mean error, inward (deg):         {stats['inward_mean_deg']:.3f}")
    logger(f"  Mean error, outward upper (deg):  {stats['outward_upper_mean_deg']:.3f}")
    return stats


if __name__ == "__main__":
    main()
