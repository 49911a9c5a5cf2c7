import cv2
import numpy as np
import pytest


def make_textured_image(shape=(240, 320), seed=0) -> np.ndarray:
    """Grayscale image of random filled rectangles and circles (corner-rich)."""
    rng = np.random.default_rng(seed)
    h, w = shape
    img = np.full(shape, 127, dtype=np.uint8)
    for _ in range(80):
        x, y = int(rng.integers(0, w)), int(rng.integers(0, h))
        dx, dy = int(rng.integers(8, 40)), int(rng.integers(8, 40))
        cv2.rectangle(img, (x, y), (x + dx, y + dy), int(rng.integers(0, 256)), -1)
    for _ in range(30):
        center = (int(rng.integers(0, w)), int(rng.integers(0, h)))
        cv2.circle(img, center, int(rng.integers(4, 20)), int(rng.integers(0, 256)), -1)
    return cv2.GaussianBlur(img, (3, 3), 0)


@pytest.fixture
def textured_image():
    return make_textured_image()


@pytest.fixture
def blank_image():
    return np.full((240, 320), 127, dtype=np.uint8)
