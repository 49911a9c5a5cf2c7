# matchbench/visualization.py
"""
Visualization of benchmark results.

Draws detected keypoints and classified matches side by side, and compares
pipelines with bar charts.
"""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib
import cv2

matplotlib.use('Agg')  # non-interactive backend for saving figures


INLIER_COLOR = (0, 0.8, 0)
OUTLIER_COLOR = (0.9, 0, 0)
KEYPOINT_COLOR = (0.2, 0.5, 1.0)


def _to_rgb(img: np.ndarray) -> np.ndarray:
    if len(img.shape) == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def side_by_side(img1: np.ndarray, img2: np.ndarray) -> tuple[np.ndarray, int]:
    """Composite RGB canvas with img1 on the left; returns (canvas, x offset of img2)."""
    img1_rgb = _to_rgb(img1)
    img2_rgb = _to_rgb(img2)
    h1, w1 = img1_rgb.shape[:2]
    h2, w2 = img2_rgb.shape[:2]
    canvas = np.zeros((max(h1, h2), w1 + w2, 3), dtype=np.uint8)
    canvas[:h1, :w1] = img1_rgb
    canvas[:h2, w1:w1 + w2] = img2_rgb
    return canvas, w1


def draw_keypoints(ax, keypoints: np.ndarray, offset: float = 0.0,
                   color=KEYPOINT_COLOR) -> None:
    """Scatter (n, 2) keypoint coordinates on an axis, shifted by *offset* in x."""
    if len(keypoints) == 0:
        return
    ax.scatter(keypoints[:, 0] + offset, keypoints[:, 1], s=6,
               facecolors='none', edgecolors=[color], linewidths=0.5, alpha=0.6)


def draw_matches(
    img1: np.ndarray,
    img2: np.ndarray,
    result,
    max_display: int = 300,
    show_outliers: bool = True,
    seed: int | None = 0,
    figsize: tuple = (16, 8),
) -> plt.Figure:
    """Draw the keypoints and classified matches of one pipeline.

    Green lines for inliers, red for outliers.

    Parameters
    ----------
    img1, img2 : grayscale or BGR images
    result : PipelineResult
    max_display : maximum matches to draw (subsampled if more)
    show_outliers : also draw the outlier matches
    seed : seed of the subsampling
    figsize : figure size

    Returns
    -------
    fig : matplotlib Figure
    """
    canvas, w1 = side_by_side(img1, img2)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(canvas)
    ax.set_axis_off()

    draw_keypoints(ax, result.keypoints1)
    draw_keypoints(ax, result.keypoints2, offset=w1)

    matches = [c for c in result.correspondences if c.inlier or show_outliers]
    n = len(matches)
    if n > max_display:
        rng = np.random.default_rng(seed)
        indices = np.sort(rng.choice(n, max_display, replace=False))
    else:
        indices = np.arange(n)

    for idx in indices:
        c = matches[idx]
        x1, y1 = c.point_a
        x2, y2 = c.point_b
        if c.inlier:
            color, alpha, lw = INLIER_COLOR, 0.7, 0.8
        else:
            color, alpha, lw = OUTLIER_COLOR, 0.3, 0.4
        ax.plot([x1, x2 + w1], [y1, y2], '-', color=color, alpha=alpha, linewidth=lw)

    if result.failed:
        subtitle = f'failed: {result.error}'
    elif result.no_matches:
        subtitle = 'no matches found'
    else:
        subtitle = (f'{result.n_inliers} inliers / {result.n_matches} matches '
                    f'({result.inlier_ratio:.1f} %)')
    ax.set_title(f'{result.name}: {subtitle}', fontsize=14)

    fig.tight_layout()
    return fig


def plot_comparison(results, figsize: tuple = (12, 5)) -> plt.Figure:
    """Bar charts of inlier ratio and processing time per pipeline.

    Pipelines without matches get no ratio bar and an 'n/a' label.
    """
    names = [r.name for r in results]
    x = np.arange(len(results))

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    for i, r in enumerate(results):
        if r.inlier_ratio is None:
            ax1.text(i, 1, 'n/a', ha='center', va='bottom', fontsize=10)
        else:
            ax1.bar(i, r.inlier_ratio, color='tab:green', alpha=0.8)
            ax1.text(i, r.inlier_ratio, f'{r.inlier_ratio:.1f}', ha='center',
                     va='bottom', fontsize=9)
    ax1.set_xticks(x)
    ax1.set_xticklabels(names)
    ax1.set_ylim(0, 105)
    ax1.set_ylabel('Inlier ratio (%)', fontsize=12)
    ax1.set_title('Inlier ratio', fontsize=13)
    ax1.grid(True, axis='y', alpha=0.3)

    ax2.bar(x, [r.elapsed_ms for r in results], color='tab:blue', alpha=0.8)
    ax2.set_xticks(x)
    ax2.set_xticklabels(names)
    ax2.set_ylabel('Time (ms)', fontsize=12)
    ax2.set_title('Detection + description + matching time', fontsize=13)
    ax2.grid(True, axis='y', alpha=0.3)

    fig.tight_layout()
    return fig
