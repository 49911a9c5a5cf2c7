# matchbench/io_utils.py
"""Image loading and JSON export of benchmark results."""

import json
import os

import cv2
import numpy as np


def load_grayscale(path: str) -> np.ndarray:
    """Read an image from disk as an 8-bit grayscale array."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Image not found: {path}")
    img = cv2.imread(path, cv2.IMREAD_GRAYSCALE)
    if img is None:
        raise FileNotFoundError(f"Could not read image: {path}")
    return img


def _convert(obj):
    if isinstance(obj, np.integer):
        return int(obj)
    elif isinstance(obj, np.floating):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, np.bool_):
        return bool(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def save_results(results, path: str, extra: dict | None = None,
                 include_correspondences: bool = True) -> None:
    """Save pipeline results (and optional run metadata) as JSON."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    payload = dict(extra or {})
    payload['results'] = [
        r.to_dict(include_correspondences=include_correspondences) for r in results
    ]
    with open(path, 'w') as f:
        json.dump(payload, f, indent=2, default=_convert)
