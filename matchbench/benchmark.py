# matchbench/benchmark.py
"""
Benchmark runner: detect, describe, match, NNDR-filter and classify
correspondences for each pipeline, and collect per-pipeline statistics.

Pipelines only read the shared image pair and homography, so they can be
dispatched to a thread pool; results are always returned in pipeline order.
"""

import time
import traceback
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import numpy as np

from .detectors import PipelineConfig, detect_and_describe
from .homography import (
    ClassifiedCorrespondence,
    classify_correspondences,
    validate_homography,
)
from .matching import knn2, nndr_filter


@dataclass(frozen=True)
class BenchmarkConfig:
    """Thresholds and execution options shared by all pipelines."""
    ratio: float = 0.8              # NNDR threshold
    inlier_threshold: float = 2.5   # max reprojection error (px) of an inlier
    max_workers: int = 1            # > 1 runs pipelines concurrently
    verbose: bool = False

    def __post_init__(self):
        if not 0.0 < self.ratio < 1.0:
            raise ValueError(f"NNDR ratio must be in (0, 1), got {self.ratio}")
        if not self.inlier_threshold >= 0.0:
            raise ValueError(
                f"Inlier threshold must be >= 0, got {self.inlier_threshold}"
            )
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")


@dataclass(frozen=True)
class PipelineResult:
    """Statistics of one pipeline over the image pair."""
    name: str
    n_keypoints1: int
    n_keypoints2: int
    n_matches: int
    n_inliers: int
    n_outliers: int
    inlier_ratio: float | None     # percent; None when there are no matches
    elapsed_ms: float
    correspondences: tuple[ClassifiedCorrespondence, ...] = ()
    keypoints1: np.ndarray = field(default_factory=lambda: np.zeros((0, 2)),
                                   repr=False, compare=False)
    keypoints2: np.ndarray = field(default_factory=lambda: np.zeros((0, 2)),
                                   repr=False, compare=False)
    metric: str = ''
    error: str | None = None       # set when the pipeline failed

    @property
    def no_matches(self) -> bool:
        return self.n_matches == 0

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def inliers(self) -> list[ClassifiedCorrespondence]:
        return [c for c in self.correspondences if c.inlier]

    @property
    def outliers(self) -> list[ClassifiedCorrespondence]:
        return [c for c in self.correspondences if not c.inlier]

    def to_dict(self, include_correspondences: bool = True) -> dict:
        d = {
            'name': self.name,
            'metric': self.metric,
            'n_keypoints1': self.n_keypoints1,
            'n_keypoints2': self.n_keypoints2,
            'n_matches': self.n_matches,
            'n_inliers': self.n_inliers,
            'n_outliers': self.n_outliers,
            'inlier_ratio': self.inlier_ratio,
            'no_matches': self.no_matches,
            'elapsed_ms': self.elapsed_ms,
            'error': self.error,
        }
        if include_correspondences:
            d['correspondences'] = [
                {
                    'point_a': list(c.point_a),
                    'point_b': list(c.point_b),
                    'inlier': c.inlier,
                    'reprojection_error': c.reprojection_error,
                }
                for c in self.correspondences
            ]
        return d


def inlier_ratio(n_inliers: int, n_matches: int) -> float | None:
    """Percentage of inliers among the matches, None if there are no matches."""
    if n_matches == 0:
        return None
    return 100.0 * n_inliers / n_matches


def _keypoint_coords(keypoints) -> np.ndarray:
    if not keypoints:
        coords = np.zeros((0, 2))
    else:
        coords = np.array([kp.pt for kp in keypoints], dtype=np.float64)
    coords.flags.writeable = False
    return coords


def run_pipeline(
    pipeline: PipelineConfig,
    img1: np.ndarray,
    img2: np.ndarray,
    H: np.ndarray,
    config: BenchmarkConfig | None = None,
) -> PipelineResult:
    """Run one pipeline end to end and time it.

    Any failure inside the pipeline is reported in ``PipelineResult.error``
    together with the counts computed before it; it is never raised.
    """
    config = config or BenchmarkConfig()
    n_kpts1 = n_kpts2 = 0
    coords1 = coords2 = _keypoint_coords([])
    n_candidates = 0
    classified = []

    t_start = time.time()
    try:
        feature2d = pipeline.factory()
        kpts1, desc1 = detect_and_describe(feature2d, img1)
        n_kpts1 = len(kpts1)
        coords1 = _keypoint_coords(kpts1)
        kpts2, desc2 = detect_and_describe(feature2d, img2)
        n_kpts2 = len(kpts2)
        coords2 = _keypoint_coords(kpts2)

        candidates = knn2(desc1, desc2, kpts1, kpts2, pipeline.metric)
        n_candidates = len(candidates)
        matches = nndr_filter(candidates, config.ratio)
        classified = classify_correspondences(matches, H, config.inlier_threshold)
        error = None
    except Exception as e:
        # counts gathered before the failure are kept, later stages stay empty
        classified = []
        error = f"{type(e).__name__}: {e}"
        if config.verbose:
            traceback.print_exc()
    elapsed_ms = 1000.0 * (time.time() - t_start)

    n_matches = len(classified)
    n_inliers = sum(1 for c in classified if c.inlier)

    if config.verbose:
        status = f"FAILED ({error})" if error else f"{n_matches} matches"
        print(
            f"  {pipeline.name}: {n_kpts1}/{n_kpts2} keypoints, "
            f"{n_candidates} candidates, {status}, {elapsed_ms:.1f} ms"
        )

    return PipelineResult(
        name=pipeline.name,
        n_keypoints1=n_kpts1,
        n_keypoints2=n_kpts2,
        n_matches=n_matches,
        n_inliers=n_inliers,
        n_outliers=n_matches - n_inliers,
        inlier_ratio=inlier_ratio(n_inliers, n_matches),
        elapsed_ms=elapsed_ms,
        correspondences=tuple(classified),
        keypoints1=coords1,
        keypoints2=coords2,
        metric=pipeline.metric.value,
        error=error,
    )


def _check_image(img, label: str) -> np.ndarray:
    if img is None:
        raise ValueError(f"{label} is missing")
    img = np.asarray(img)
    if img.ndim != 2 or img.size == 0:
        raise ValueError(
            f"{label} must be a non-empty grayscale (2-D) image, got shape {img.shape}"
        )
    return img


def _read_only(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.flags.writeable = False
    return view


def run_benchmark(
    pipelines: list[PipelineConfig],
    img1: np.ndarray,
    img2: np.ndarray,
    H,
    config: BenchmarkConfig | None = None,
) -> list[PipelineResult]:
    """Run every pipeline on the same image pair and ground-truth homography.

    Invalid shared inputs (missing image, bad homography) raise ValueError
    before any pipeline starts. Per-pipeline failures are isolated in their
    own results.

    Returns
    -------
    results : one PipelineResult per pipeline, in pipeline order
    """
    config = config or BenchmarkConfig()
    img1 = _read_only(_check_image(img1, 'Image 1'))
    img2 = _read_only(_check_image(img2, 'Image 2'))
    H = validate_homography(H)

    if config.verbose:
        print(
            f"  Running {len(pipelines)} pipeline(s) on "
            f"{img1.shape[1]}x{img1.shape[0]} / {img2.shape[1]}x{img2.shape[0]} "
            f"(ratio={config.ratio}, threshold={config.inlier_threshold} px)"
        )

    def run(pipeline):
        return run_pipeline(pipeline, img1, img2, H, config)

    if config.max_workers > 1 and len(pipelines) > 1:
        with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
            return list(pool.map(run, pipelines))
    return [run(p) for p in pipelines]
