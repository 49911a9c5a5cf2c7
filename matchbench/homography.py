# matchbench/homography.py
"""
Ground-truth homography loading and inlier classification.

Correspondences are scored by their forward reprojection error: the point
in image 1 is mapped through H and compared with its match in image 2.
No model is estimated here, H is taken as given.
"""

import os
from dataclasses import dataclass

import numpy as np

from .matching import Correspondence


W_EPS = 1e-10


@dataclass(frozen=True)
class ClassifiedCorrespondence:
    """Correspondence tagged as inlier or outlier."""
    point_a: tuple
    point_b: tuple
    inlier: bool
    reprojection_error: float | None   # None when H sends point_a to infinity


def validate_homography(H) -> np.ndarray:
    """Return H as a read-only (3, 3) float64 array, or raise ValueError."""
    H = np.array(H, dtype=np.float64)
    if H.shape != (3, 3):
        raise ValueError(f"Homography must be 3x3, got shape {H.shape}")
    if not np.all(np.isfinite(H)):
        raise ValueError("Homography contains non-finite values")
    if not np.any(H):
        raise ValueError("Homography is the zero matrix")
    H.flags.writeable = False
    return H


def load_homography(path: str) -> np.ndarray:
    """Read a 3x3 row-major homography from a whitespace-separated text file.

    Parameters
    ----------
    path : text file with 3 rows of 3 values (e.g. Oxford ``H1to2p``)

    Returns
    -------
    H : (3, 3) read-only float64 array mapping image 1 -> image 2
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Homography file not found: {path}")
    try:
        values = np.loadtxt(path, dtype=np.float64, ndmin=2)
    except ValueError as e:
        raise ValueError(f"Could not parse homography file {path}: {e}") from e
    if values.size != 9:
        raise ValueError(
            f"Homography file {path} must hold 9 values, found {values.size}"
        )
    return validate_homography(values.reshape(3, 3))


def project_points(
    H: np.ndarray,
    pts: np.ndarray,
    eps: float = W_EPS,
) -> tuple[np.ndarray, np.ndarray]:
    """Apply H to 2D points.

    Parameters
    ----------
    H : (3, 3) homography
    pts : (n, 2) points
    eps : |w| below this is treated as a point at infinity

    Returns
    -------
    proj : (n, 2) projected points, nan where the projection is invalid
    valid : (n,) boolean mask of finite projections
    """
    pts = np.asarray(pts, dtype=np.float64).reshape(-1, 2)
    n = len(pts)
    pts_h = np.column_stack([pts, np.ones(n)])
    proj_h = (H @ pts_h.T).T
    w = proj_h[:, 2]

    valid = np.abs(w) >= eps
    proj = np.full((n, 2), np.nan)
    if np.any(valid):
        proj[valid] = proj_h[valid, :2] / w[valid, np.newaxis]
    return proj, valid


def reprojection_errors(
    H: np.ndarray,
    pts1: np.ndarray,
    pts2: np.ndarray,
    eps: float = W_EPS,
) -> np.ndarray:
    """Euclidean distance between H(pts1) and pts2; inf for points at infinity."""
    pts2 = np.asarray(pts2, dtype=np.float64).reshape(-1, 2)
    proj, valid = project_points(H, pts1, eps)
    errors = np.full(len(pts2), np.inf)
    if np.any(valid):
        diff = proj[valid] - pts2[valid]
        errors[valid] = np.hypot(diff[:, 0], diff[:, 1])
    return errors


def classify_correspondences(
    correspondences: list[Correspondence],
    H: np.ndarray,
    threshold: float = 2.5,
    eps: float = W_EPS,
) -> list[ClassifiedCorrespondence]:
    """Tag every correspondence as inlier (error < threshold) or outlier.

    An exact reprojection (zero error) is always an inlier, so the inlier
    set grows monotonically with *threshold* starting from threshold = 0.
    Inliers and outliers are both returned, in input order.
    """
    if not correspondences:
        return []

    pts1 = np.array([c.point_a for c in correspondences], dtype=np.float64)
    pts2 = np.array([c.point_b for c in correspondences], dtype=np.float64)
    errors = reprojection_errors(H, pts1, pts2, eps)
    finite = np.isfinite(errors)
    inlier_mask = finite & ((errors < threshold) | (errors == 0.0))

    return [
        ClassifiedCorrespondence(
            point_a=c.point_a,
            point_b=c.point_b,
            inlier=bool(inlier_mask[i]),
            reprojection_error=float(errors[i]) if finite[i] else None,
        )
        for i, c in enumerate(correspondences)
    ]


def split_inliers(
    classified: list[ClassifiedCorrespondence],
) -> tuple[list[ClassifiedCorrespondence], list[ClassifiedCorrespondence]]:
    """Partition classified correspondences into (inliers, outliers)."""
    inliers = [c for c in classified if c.inlier]
    outliers = [c for c in classified if not c.inlier]
    return inliers, outliers
