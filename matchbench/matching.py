# matchbench/matching.py
"""
Descriptor matching with the nearest-neighbour distance ratio (NNDR) test.

The 2-nearest-neighbour search is delegated to OpenCV's brute-force
matcher; the norm is chosen from the metric declared by the pipeline,
never from the descriptor contents.
"""

from dataclasses import dataclass
from enum import Enum

import cv2
import numpy as np


class DistanceMetric(Enum):
    """Distance used to compare descriptors of one pipeline."""
    EUCLIDEAN = 'euclidean'
    HAMMING = 'hamming'
    HAMMING2 = 'hamming2'   # 2-bit cells, ORB with WTA_K = 3 or 4

    @property
    def is_binary(self) -> bool:
        return self is not DistanceMetric.EUCLIDEAN

    @property
    def norm_type(self) -> int:
        if self is DistanceMetric.HAMMING:
            return cv2.NORM_HAMMING
        if self is DistanceMetric.HAMMING2:
            return cv2.NORM_HAMMING2
        return cv2.NORM_L2

    @property
    def dtype(self):
        return np.uint8 if self.is_binary else np.float32


@dataclass(frozen=True)
class MatchCandidate:
    """Two nearest neighbours in image 2 for one query keypoint of image 1."""
    query_point: tuple
    best_point: tuple
    best_distance: float
    second_point: tuple | None = None     # None when image 2 has one descriptor
    second_distance: float | None = None


@dataclass(frozen=True)
class Correspondence:
    """Accepted point pair (image 1 -> image 2)."""
    point_a: tuple
    point_b: tuple


def _point(keypoint) -> tuple:
    x, y = keypoint.pt
    return (float(x), float(y))


def knn2(
    desc1: np.ndarray | None,
    desc2: np.ndarray | None,
    kpts1: list,
    kpts2: list,
    metric: DistanceMetric,
) -> list[MatchCandidate]:
    """Find the two nearest descriptors of image 2 for every descriptor of image 1.

    Parameters
    ----------
    desc1, desc2 : (n, d) descriptor matrices, index-aligned with kpts1 / kpts2
    kpts1, kpts2 : keypoints (anything with a ``.pt`` attribute)
    metric : distance used by the brute-force search

    Returns
    -------
    candidates : one MatchCandidate per row of desc1, in query order.
        Empty if either descriptor set is empty.
    """
    n1 = 0 if desc1 is None else len(desc1)
    n2 = 0 if desc2 is None else len(desc2)
    if n1 != len(kpts1) or n2 != len(kpts2):
        raise ValueError(
            f"Descriptor/keypoint count mismatch: "
            f"{n1}/{len(kpts1)} (image 1), {n2}/{len(kpts2)} (image 2)"
        )
    if n1 == 0 or n2 == 0:
        return []
    if desc1.shape[1] != desc2.shape[1]:
        raise ValueError(
            f"Descriptors must have the same dimension: "
            f"{desc1.shape[1]} vs {desc2.shape[1]}"
        )

    d1 = np.ascontiguousarray(desc1, dtype=metric.dtype)
    d2 = np.ascontiguousarray(desc2, dtype=metric.dtype)

    matcher = cv2.BFMatcher(metric.norm_type)
    raw_matches = matcher.knnMatch(d1, d2, k=2)

    candidates = []
    for m_pair in raw_matches:
        if len(m_pair) == 0:
            continue
        best = m_pair[0]
        second = m_pair[1] if len(m_pair) > 1 else None
        candidates.append(MatchCandidate(
            query_point=_point(kpts1[best.queryIdx]),
            best_point=_point(kpts2[best.trainIdx]),
            best_distance=float(best.distance),
            second_point=_point(kpts2[second.trainIdx]) if second is not None else None,
            second_distance=float(second.distance) if second is not None else None,
        ))
    return candidates


def passes_ratio_test(best_distance: float, second_distance: float | None,
                      ratio: float) -> bool:
    """Lowe's ratio test; a zero or missing second distance is a rejection."""
    if second_distance is None or second_distance <= 0.0:
        return False
    return best_distance < ratio * second_distance


def nndr_filter(candidates: list[MatchCandidate], ratio: float = 0.8) -> list[Correspondence]:
    """Keep the candidates whose best neighbour is distinctive enough.

    A candidate is accepted iff ``best_distance / second_distance < ratio``.
    Acceptance order follows the query order of *candidates*.
    """
    return [
        Correspondence(point_a=c.query_point, point_b=c.best_point)
        for c in candidates
        if passes_ratio_test(c.best_distance, c.second_distance, ratio)
    ]
