"""Tests for shape context construction."""

from __future__ import annotations

import math

import numpy as np
import pytest

from keymatch.errors import InsufficientEdgePointsError
from keymatch.extract.edges import find_edges
from keymatch.features.shape_context import (
    DESCRIPTOR_SHAPE,
    LOG_SCALE_FACTOR,
    NUM_LOG_BINS,
    NUM_POINTS,
    compute_shape_context,
    find_angle,
    log_polar_histograms,
    normalized_distances,
    reference_angle,
    select_points,
)
from keymatch.io.models import Point


class TestFindAngle:
    @pytest.mark.parametrize(
        ("x", "y", "expected"),
        [
            (1, 0, 0.0),
            (1, 1, math.pi / 4),
            (0, 1, math.pi / 2),
            (-1, 1, 3 * math.pi / 4),
            (-1, 0, math.pi),
            (-1, -1, 5 * math.pi / 4),
            (0, -1, 3 * math.pi / 2),
            (1, -1, 7 * math.pi / 4),
            (0, 0, 0.0),
        ],
    )
    def test_quadrants_and_axes(self, x, y, expected):
        assert find_angle(x, y) == pytest.approx(expected)

    def test_range(self):
        for step in range(64):
            theta = step * 2 * math.pi / 64
            angle = find_angle(math.cos(theta), math.sin(theta))
            assert 0.0 <= angle < 2 * math.pi


class TestReferenceAngle:
    @pytest.mark.parametrize(
        ("previous", "current", "expected"),
        [
            ((0, 0), (2, 1), math.atan(2.0)),
            ((2, 1), (0, 0), math.atan(2.0)),
            ((0, 0), (1, -1), 3 * math.pi / 4),
            ((0, 0), (4, 0), math.pi / 2),
            ((4, 0), (0, 0), math.pi / 2),
            ((0, 0), (0, 3), 0.0),
            ((0, 3), (0, 0), math.pi),
            ((5, 5), (5, 5), 0.0),
        ],
    )
    def test_follows_line_slope(self, previous, current, expected):
        assert reference_angle(previous, current) == pytest.approx(expected)

    def test_rotates_histogram_bins(self):
        # The boundary runs down the slope 1 line towards the origin, yet the
        # base angle is still pi / 4: the point to the right of the origin
        # sits at 7 pi / 4 (bin 10) and the previous point at 0 (bin 0).
        points = np.array([[1.0, 1.0], [0.0, 0.0], [1.0, 0.0]])
        histograms = log_polar_histograms(points)
        assert histograms[1, 10].sum() == 1
        assert histograms[1, 0].sum() == 1


class TestSelectPoints:
    def test_too_few_edges(self):
        edges = [Point(i, 0) for i in range(NUM_POINTS - 1)]
        with pytest.raises(InsufficientEdgePointsError) as excinfo:
            select_points(edges)
        assert excinfo.value.found == NUM_POINTS - 1
        assert excinfo.value.required == NUM_POINTS

    def test_even_stride(self):
        edges = [Point(i, i % 7) for i in range(2 * NUM_POINTS + 50)]
        points = select_points(edges)
        assert points.shape == (NUM_POINTS, 2)
        assert tuple(points[0]) == (0, 0)
        assert tuple(points[1]) == (2, 2)
        assert tuple(points[-1]) == (2 * (NUM_POINTS - 1), (2 * (NUM_POINTS - 1)) % 7)


class TestNormalizedDistances:
    def test_mean_is_scale_factor(self):
        points = np.array([[0, 0], [3, 4], [6, 8]], dtype=np.float64)
        distances = normalized_distances(points)
        assert distances.shape == (3, 3)
        assert distances.mean() == pytest.approx(LOG_SCALE_FACTOR)
        assert np.all(np.diag(distances) == 0)

    def test_coincident_points(self):
        points = np.zeros((4, 2), dtype=np.float64)
        assert np.all(normalized_distances(points) == 0)


class TestLogPolarHistograms:
    def test_every_point_votes_once_for_each_other(self, rectangle_grid):
        descriptor = compute_shape_context(find_edges(rectangle_grid))
        assert descriptor.shape == DESCRIPTOR_SHAPE
        assert np.all(descriptor >= 0)
        np.testing.assert_array_equal(descriptor.sum(axis=(1, 2)), NUM_POINTS - 1)

    def test_is_deterministic(self, rectangle_grid):
        edges = find_edges(rectangle_grid)
        np.testing.assert_array_equal(compute_shape_context(edges), compute_shape_context(edges))

    def test_log_bins_stay_in_range(self):
        # One far outlier pushes its normalized distances past e ** NUM_LOG_BINS.
        points = np.vstack([np.column_stack([np.arange(300), np.zeros(300)]), [[1e7, 0]]])
        histograms = log_polar_histograms(points)
        assert histograms.shape == (301, 12, NUM_LOG_BINS)
        np.testing.assert_array_equal(histograms.sum(axis=(1, 2)), 300)
        assert histograms[:, :, NUM_LOG_BINS - 1].sum() > 0

    def test_single_point(self):
        histograms = log_polar_histograms(np.array([[3.0, 4.0]]))
        assert histograms.sum() == 0

    def test_rejects_bad_shape(self):
        with pytest.raises(ValueError):
            log_polar_histograms(np.zeros((5, 3)))
