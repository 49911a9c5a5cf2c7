# matchbench/report.py
"""Text report of benchmark results."""


SEPARATOR = '*' * 38


def format_ratio(result) -> str:
    if result.no_matches:
        return 'no matches found'
    return f"{result.inlier_ratio:.2f} %"


def format_result(result) -> str:
    """Multi-line summary of one pipeline."""
    lines = [
        f"{result.name} Results",
        SEPARATOR,
    ]
    if result.failed:
        lines.append(f"Pipeline failed: {result.error}")
    lines += [
        f"Number of Keypoints Image 1: {result.n_keypoints1}",
        f"Number of Keypoints Image 2: {result.n_keypoints2}",
        f"Number of Matches: {result.n_matches}",
        f"Number of Inliers: {result.n_inliers}",
        f"Number of Outliers: {result.n_outliers}",
        f"Inliers Ratio: {format_ratio(result)}",
        f"{result.name} Features Extraction Time (ms): {result.elapsed_ms:.2f}",
    ]
    return '\n'.join(lines)


def format_summary(results) -> str:
    """One line per pipeline, for side-by-side comparison."""
    header = (f"{'Pipeline':<10} {'Kpts1':>7} {'Kpts2':>7} {'Matches':>8} "
              f"{'Inliers':>8} {'Ratio':>17} {'Time (ms)':>10}")
    rows = [header, '-' * len(header)]
    for r in results:
        ratio = 'FAILED' if r.failed and r.no_matches else format_ratio(r)
        rows.append(
            f"{r.name:<10} {r.n_keypoints1:>7} {r.n_keypoints2:>7} "
            f"{r.n_matches:>8} {r.n_inliers:>8} {ratio:>17} {r.elapsed_ms:>10.1f}"
        )
    return '\n'.join(rows)


def print_report(results) -> None:
    for r in results:
        print(format_result(r))
        print()
    print(format_summary(results))
