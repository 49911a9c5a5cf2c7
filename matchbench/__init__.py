"""
Evaluation of keypoint detector/descriptor pipelines on an image pair
related by a known ground-truth homography.
"""

from .matching import (
    DistanceMetric,
    MatchCandidate,
    Correspondence,
    knn2,
    nndr_filter,
)
from .homography import (
    ClassifiedCorrespondence,
    load_homography,
    project_points,
    reprojection_errors,
    classify_correspondences,
)
from .detectors import (
    PipelineConfig,
    OrbParams,
    BriskParams,
    AkazeParams,
    orb_pipeline,
    brisk_pipeline,
    akaze_pipeline,
    default_pipelines,
)
from .benchmark import (
    BenchmarkConfig,
    PipelineResult,
    run_pipeline,
    run_benchmark,
)

__all__ = [
    'DistanceMetric',
    'MatchCandidate',
    'Correspondence',
    'knn2',
    'nndr_filter',
    'ClassifiedCorrespondence',
    'load_homography',
    'project_points',
    'reprojection_errors',
    'classify_correspondences',
    'PipelineConfig',
    'OrbParams',
    'BriskParams',
    'AkazeParams',
    'orb_pipeline',
    'brisk_pipeline',
    'akaze_pipeline',
    'default_pipelines',
    'BenchmarkConfig',
    'PipelineResult',
    'run_pipeline',
    'run_benchmark',
]
