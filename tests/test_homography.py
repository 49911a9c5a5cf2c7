"""Tests for homography loading, projection and inlier classification."""

import numpy as np
import pytest

import sys, os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from matchbench.homography import (
    classify_correspondences,
    load_homography,
    project_points,
    reprojection_errors,
    split_inliers,
    validate_homography,
)
from matchbench.matching import Correspondence


H_PERSPECTIVE = np.array([
    [1.05, 0.08, 15],
    [-0.03, 0.98, 10],
    [0.0001, 0.00005, 1],
])


class TestLoadHomography:
    def test_reads_text_matrix(self, tmp_path):
        path = tmp_path / "H1to2p"
        path.write_text(
            "8.7976964e-01   3.1245438e-01  -3.9430589e+01\n"
            "-1.8389418e-01   9.3847198e-01   1.5315784e+02\n"
            "1.9641425e-04  -1.6015275e-05   1.0000000e+00\n"
        )
        H = load_homography(str(path))
        assert H.shape == (3, 3)
        assert H[0, 2] == pytest.approx(-39.430589)
        assert H[2, 2] == pytest.approx(1.0)

    def test_result_is_read_only(self, tmp_path):
        path = tmp_path / "H"
        path.write_text("1 0 0\n0 1 0\n0 0 1\n")
        H = load_homography(str(path))
        with pytest.raises(ValueError):
            H[0, 0] = 2.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_homography(str(tmp_path / "nope.txt"))

    def test_wrong_size(self, tmp_path):
        path = tmp_path / "H"
        path.write_text("1 0 0\n0 1 0\n")
        with pytest.raises(ValueError):
            load_homography(str(path))

    def test_not_numeric(self, tmp_path):
        path = tmp_path / "H"
        path.write_text("a b c\nd e f\ng h i\n")
        with pytest.raises(ValueError):
            load_homography(str(path))


class TestValidateHomography:
    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            validate_homography(np.eye(2))

    def test_rejects_non_finite(self):
        H = np.eye(3)
        H[0, 1] = np.nan
        with pytest.raises(ValueError):
            validate_homography(H)

    def test_rejects_zero_matrix(self):
        with pytest.raises(ValueError):
            validate_homography(np.zeros((3, 3)))

    def test_does_not_alias_input(self):
        H = np.eye(3)
        validate_homography(H)
        H[0, 0] = 3.0  # caller's array stays writable


class TestProjectPoints:
    def test_identity(self):
        pts = np.array([[1.0, 2.0], [100.0, 50.0]])
        proj, valid = project_points(np.eye(3), pts)
        assert np.all(valid)
        np.testing.assert_allclose(proj, pts)

    def test_translation(self):
        H = np.array([[1, 0, 5], [0, 1, -3], [0, 0, 1]], dtype=float)
        proj, _ = project_points(H, np.array([[10.0, 10.0]]))
        np.testing.assert_allclose(proj, [[15.0, 7.0]])

    def test_homogeneous_division(self):
        H = np.diag([1.0, 1.0, 2.0])
        proj, _ = project_points(H, np.array([[10.0, 4.0]]))
        np.testing.assert_allclose(proj, [[5.0, 2.0]])

    def test_point_at_infinity(self):
        # w = x - 10 vanishes at x = 10
        H = np.array([[1, 0, 0], [0, 1, 0], [1, 0, -10]], dtype=float)
        proj, valid = project_points(H, np.array([[10.0, 3.0], [20.0, 3.0]]))
        assert not valid[0]
        assert valid[1]
        assert np.all(np.isnan(proj[0]))
        np.testing.assert_allclose(proj[1], [2.0, 0.3])


class TestReprojectionErrors:
    def test_known_offset(self):
        pts1 = np.array([[0.0, 0.0], [10.0, 10.0]])
        pts2 = np.array([[3.0, 4.0], [10.0, 10.0]])
        errors = reprojection_errors(np.eye(3), pts1, pts2)
        np.testing.assert_allclose(errors, [5.0, 0.0])

    def test_infinite_for_invalid_projection(self):
        H = np.array([[1, 0, 0], [0, 1, 0], [1, 0, -10]], dtype=float)
        errors = reprojection_errors(H, np.array([[10.0, 0.0]]), np.array([[0.0, 0.0]]))
        assert np.isinf(errors[0])


class TestClassifyCorrespondences:
    def test_scenario_far_outlier(self):
        """(0,0) -> (5,5) under identity: error sqrt(50) ~ 7.07 > 2.5."""
        result = classify_correspondences(
            [Correspondence((0.0, 0.0), (5.0, 5.0))], np.eye(3), threshold=2.5)
        assert len(result) == 1
        assert not result[0].inlier
        assert result[0].reprojection_error == pytest.approx(np.sqrt(50))

    def test_exact_projection_is_inlier_for_any_threshold(self):
        rng = np.random.default_rng(3)
        pts1 = rng.uniform(0, 500, (20, 2))
        pts2, _ = project_points(H_PERSPECTIVE, pts1)
        corr = [Correspondence(tuple(a), tuple(b)) for a, b in zip(pts1, pts2)]
        for tau in [0.0, 1e-9, 0.5, 2.5, 100.0]:
            result = classify_correspondences(corr, H_PERSPECTIVE, threshold=tau)
            assert all(c.inlier for c in result)

    def test_strict_threshold(self):
        corr = [Correspondence((0.0, 0.0), (2.5, 0.0))]
        assert not classify_correspondences(corr, np.eye(3), threshold=2.5)[0].inlier
        assert classify_correspondences(corr, np.eye(3), threshold=2.6)[0].inlier

    def test_monotone_in_threshold(self):
        rng = np.random.default_rng(11)
        pts1 = rng.uniform(0, 500, (200, 2))
        pts2, _ = project_points(H_PERSPECTIVE, pts1)
        pts2 = pts2 + rng.normal(0, 3.0, pts2.shape)
        corr = [Correspondence(tuple(a), tuple(b)) for a, b in zip(pts1, pts2)]

        counts = []
        for tau in np.linspace(0, 15, 31):
            result = classify_correspondences(corr, H_PERSPECTIVE, threshold=tau)
            counts.append(sum(c.inlier for c in result))
        assert all(a <= b for a, b in zip(counts, counts[1:]))
        assert counts[0] < counts[-1]

    def test_point_at_infinity_is_outlier(self):
        H = np.array([[1, 0, 0], [0, 1, 0], [1, 0, -10]], dtype=float)
        result = classify_correspondences(
            [Correspondence((10.0, 0.0), (0.0, 0.0))], H, threshold=1e9)
        assert not result[0].inlier
        assert result[0].reprojection_error is None

    def test_keeps_all_in_order(self):
        corr = [
            Correspondence((0.0, 0.0), (0.5, 0.0)),
            Correspondence((1.0, 1.0), (9.0, 9.0)),
            Correspondence((2.0, 2.0), (2.0, 2.0)),
        ]
        result = classify_correspondences(corr, np.eye(3), threshold=2.5)
        assert [c.point_a for c in result] == [c.point_a for c in corr]
        assert [c.inlier for c in result] == [True, False, True]

        inliers, outliers = split_inliers(result)
        assert len(inliers) == 2
        assert len(outliers) == 1
        assert len(inliers) + len(outliers) == len(corr)

    def test_empty(self):
        assert classify_correspondences([], np.eye(3)) == []


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
