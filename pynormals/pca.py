"""
Principal component analysis of small 3D point sets (local plane fitting).
"""
import numpy as np


class PrincipalComponentAnalysis3D:
    """
    PCA of a set of 3D points.

    ``eigenvectors`` is a 3x3 matrix whose columns are the principal axes,
    ordered by descending variance; ``eigenvalues`` holds the matching
    variances. For a locally planar neighborhood the last column
    (``eigenvectors[:, 2]``) is the plane normal, up to sign.
    """

    def __init__(self, points):
        """
        Args:
            points: (M, 3) array-like with M >= 2
        """
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 3:
            raise ValueError(f"Expected an (M, 3) point array, got shape {points.shape}")
        if len(points) < 2:
            raise ValueError("PCA needs at least 2 points")

        self.mean = points.mean(axis=0)
        cov = np.cov(points - self.mean, rowvar=False)
        eigvals, eigvecs = np.linalg.eigh(cov)
        # eigh sorts ascending
        self.eigenvalues = eigvals[::-1]
        self.eigenvectors = eigvecs[:, ::-1]

    @property
    def normal(self):
        """Least-variance direction (unoriented)."""
        return self.eigenvectors[:, 2]

    def project(self, points, dims=3):
        """
        Express points in the principal frame, keeping the first ``dims`` axes.

        Args:
            points: (3,) or (M, 3) array-like
            dims: Number of leading principal axes to keep (1-3)
        Returns:
            (dims,) or (M, dims) array of coordinates
        """
        if dims not in (1, 2, 3):
            raise ValueError("dims must be 1, 2 or 3")
        points = np.asarray(points, dtype=np.float64)
        return (points - self.mean) @ self.eigenvectors[:, :dims]

    def reconstruct(self, coords):
        """
        Map principal-frame coordinates back to world space. The number of
        coordinates per point selects how many leading axes are used, so
        ``reconstruct(project(p, 2))`` is ``p`` projected onto the fitted plane.
        """
        coords = np.asarray(coords, dtype=np.float64)
        dims = coords.shape[-1]
        if dims not in (1, 2, 3):
            raise ValueError("coords must have 1, 2 or 3 components")
        return self.mean + coords @ self.eigenvectors[:, :dims].T
