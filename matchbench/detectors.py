# matchbench/detectors.py
"""
Detector/descriptor pipelines compared by the benchmark.

Each pipeline is described by a factory building a fresh OpenCV Feature2D
object, the distance metric of its descriptors, and its tuning values.
Default values follow the classic ORB / BRISK / A-KAZE comparison setup.
"""

from dataclasses import asdict, dataclass, field
from functools import partial
from typing import Callable

import cv2
import numpy as np

from .matching import DistanceMetric


AKAZE_DESCRIPTORS = {
    'KAZE_UPRIGHT': cv2.AKAZE_DESCRIPTOR_KAZE_UPRIGHT,
    'KAZE': cv2.AKAZE_DESCRIPTOR_KAZE,
    'MLDB_UPRIGHT': cv2.AKAZE_DESCRIPTOR_MLDB_UPRIGHT,
    'MLDB': cv2.AKAZE_DESCRIPTOR_MLDB,
}

DIFFUSIVITIES = {
    'PM_G1': cv2.KAZE_DIFF_PM_G1,
    'PM_G2': cv2.KAZE_DIFF_PM_G2,
    'WEICKERT': cv2.KAZE_DIFF_WEICKERT,
    'CHARBONNIER': cv2.KAZE_DIFF_CHARBONNIER,
}


@dataclass(frozen=True)
class OrbParams:
    max_keypoints: int = 1500
    scale_factor: float = 1.5
    pyramid_levels: int = 3
    edge_threshold: int = 31
    first_level: int = 0
    wta_k: int = 2
    patch_size: int = 31

    def __post_init__(self):
        if self.max_keypoints <= 0:
            raise ValueError(f"ORB max_keypoints must be > 0, got {self.max_keypoints}")
        if not self.scale_factor > 1.0:
            raise ValueError(f"ORB scale_factor must be > 1, got {self.scale_factor}")
        if self.pyramid_levels <= 0:
            raise ValueError(f"ORB pyramid_levels must be > 0, got {self.pyramid_levels}")
        if self.edge_threshold < 0 or self.first_level < 0:
            raise ValueError("ORB edge_threshold and first_level must be >= 0")
        if self.wta_k not in (2, 3, 4):
            raise ValueError(f"ORB wta_k must be 2, 3 or 4, got {self.wta_k}")
        if self.patch_size < 2:
            raise ValueError(f"ORB patch_size must be >= 2, got {self.patch_size}")

    @property
    def metric(self) -> DistanceMetric:
        # WTA_K = 3 or 4 packs each comparison into 2 bits
        return DistanceMetric.HAMMING if self.wta_k == 2 else DistanceMetric.HAMMING2


@dataclass(frozen=True)
class BriskParams:
    threshold: int = 10
    octaves: int = 4

    def __post_init__(self):
        if self.threshold < 0:
            raise ValueError(f"BRISK threshold must be >= 0, got {self.threshold}")
        if self.octaves < 0:
            raise ValueError(f"BRISK octaves must be >= 0, got {self.octaves}")


@dataclass(frozen=True)
class AkazeParams:
    descriptor: str = 'MLDB'
    descriptor_size: int = 0       # 0 = full size
    descriptor_channels: int = 3
    threshold: float = 0.001
    octaves: int = 4
    sublevels: int = 4
    diffusivity: str = 'PM_G2'

    def __post_init__(self):
        if self.descriptor not in AKAZE_DESCRIPTORS:
            raise ValueError(
                f"Unknown A-KAZE descriptor: {self.descriptor}. "
                f"Use one of {sorted(AKAZE_DESCRIPTORS)}."
            )
        if self.diffusivity not in DIFFUSIVITIES:
            raise ValueError(
                f"Unknown diffusivity: {self.diffusivity}. "
                f"Use one of {sorted(DIFFUSIVITIES)}."
            )

    @property
    def is_binary(self) -> bool:
        # MLDB variants are bit strings, KAZE variants are float vectors
        return self.descriptor.startswith('MLDB')


@dataclass(frozen=True)
class PipelineConfig:
    """One detector/descriptor pipeline."""
    name: str
    factory: Callable     # () -> object with detect(image, mask) / compute(image, kpts)
    metric: DistanceMetric
    params: dict = field(default_factory=dict, compare=False)


def _create_orb(p: OrbParams):
    return cv2.ORB_create(
        nfeatures=p.max_keypoints,
        scaleFactor=p.scale_factor,
        nlevels=p.pyramid_levels,
        edgeThreshold=p.edge_threshold,
        firstLevel=p.first_level,
        WTA_K=p.wta_k,
        patchSize=p.patch_size,
    )


def _create_brisk(p: BriskParams):
    return cv2.BRISK_create(thresh=p.threshold, octaves=p.octaves)


def _create_akaze(p: AkazeParams):
    return cv2.AKAZE_create(
        descriptor_type=AKAZE_DESCRIPTORS[p.descriptor],
        descriptor_size=p.descriptor_size,
        descriptor_channels=p.descriptor_channels,
        threshold=p.threshold,
        nOctaves=p.octaves,
        nOctaveLayers=p.sublevels,
        diffusivity=DIFFUSIVITIES[p.diffusivity],
    )


def orb_pipeline(params: OrbParams | None = None, name: str = 'ORB') -> PipelineConfig:
    params = params or OrbParams()
    return PipelineConfig(name, partial(_create_orb, params),
                          params.metric, asdict(params))


def brisk_pipeline(params: BriskParams | None = None, name: str = 'BRISK') -> PipelineConfig:
    params = params or BriskParams()
    return PipelineConfig(name, partial(_create_brisk, params),
                          DistanceMetric.HAMMING, asdict(params))


def akaze_pipeline(params: AkazeParams | None = None, name: str = 'A-KAZE') -> PipelineConfig:
    params = params or AkazeParams()
    metric = DistanceMetric.HAMMING if params.is_binary else DistanceMetric.EUCLIDEAN
    return PipelineConfig(name, partial(_create_akaze, params),
                          metric, asdict(params))


def default_pipelines(
    orb: OrbParams | None = None,
    brisk: BriskParams | None = None,
    akaze: AkazeParams | None = None,
) -> list[PipelineConfig]:
    """ORB, BRISK and A-KAZE pipelines, in that order."""
    return [orb_pipeline(orb), brisk_pipeline(brisk), akaze_pipeline(akaze)]


def detect_and_describe(feature2d, image: np.ndarray) -> tuple[list, np.ndarray | None]:
    """Detect keypoints, then compute their descriptors.

    The descriptor extractor may drop keypoints it cannot describe (e.g. too
    close to the border); the returned keypoint list is the one aligned with
    the descriptor rows.

    Returns
    -------
    keypoints : list of cv2.KeyPoint
    descriptors : (n, d) array, or None when no keypoint was found
    """
    keypoints = feature2d.detect(image, None)
    if keypoints is None or len(keypoints) == 0:
        return [], None

    keypoints, descriptors = feature2d.compute(image, keypoints)
    keypoints = list(keypoints) if keypoints is not None else []
    n_desc = 0 if descriptors is None else len(descriptors)
    if n_desc != len(keypoints):
        raise ValueError(
            f"Descriptor extractor returned {n_desc} descriptors "
            f"for {len(keypoints)} keypoints"
        )
    if n_desc == 0:
        return [], None
    return keypoints, descriptors
