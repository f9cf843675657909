"""Log-polar shape context descriptors for key edges."""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.distance import cdist

from ..errors import InsufficientEdgePointsError
from ..io.models import Point

logger = logging.getLogger(__name__)

NUM_POINTS = 200
NUM_RADIAL_BINS = 12
NUM_LOG_BINS = 5
LOG_SCALE_FACTOR = 10

DESCRIPTOR_SHAPE = (NUM_POINTS, NUM_RADIAL_BINS, NUM_LOG_BINS)

_TWO_PI = 2.0 * math.pi


def compute_shape_context(edges: Sequence[Point]) -> NDArray[np.int64]:
    """Return the ``(NUM_POINTS, NUM_RADIAL_BINS, NUM_LOG_BINS)`` descriptor for *edges*."""
    points = select_points(edges)
    return log_polar_histograms(points)


def select_points(edges: Sequence[Point], num_points: int = NUM_POINTS) -> NDArray[np.float64]:
    """Return *num_points* edge points taken at an even stride from the start."""
    if len(edges) < num_points:
        raise InsufficientEdgePointsError(len(edges), num_points)
    step = len(edges) // num_points
    selected = [edges[i * step] for i in range(num_points)]
    return np.array([[p.x, p.y] for p in selected], dtype=np.float64)


def normalized_distances(points: NDArray[np.float64]) -> NDArray[np.float64]:
    """Return pairwise distances divided by their mean and scaled for log binning.

    The mean runs over all N * N pairs, self-distances included.
    """
    distances = cdist(points, points)
    mean_distance = float(distances.sum()) / distances.size if distances.size else 0.0
    logger.debug("Mean distance between sampled points: %.3f", mean_distance)
    if mean_distance == 0.0:
        return np.zeros_like(distances)
    return distances / mean_distance * LOG_SCALE_FACTOR


def find_angle(x: float, y: float) -> float:
    """Return the angle of vector (*x*, *y*) from the horizontal, in [0, 2*pi)."""
    return float(_angles(np.array([x], dtype=np.float64), np.array([y], dtype=np.float64))[0])


def reference_angle(previous: Sequence[float], current: Sequence[float]) -> float:
    """Return the tangent angle at *current*, in [0, pi].

    This is ``find_angle(m, 1)`` for the slope ``m`` of the line through
    *previous* and *current*, so it depends on the line and not on which
    way the boundary runs, except for vertical lines: those take 0 going
    down the image and pi going up, as the sign of the infinite slope
    would. Horizontal lines give pi / 2 and a repeated point gives 0.
    """
    dx = float(current[0]) - float(previous[0])
    dy = float(current[1]) - float(previous[1])
    if dx == 0.0:
        return 0.0 if dy >= 0.0 else math.pi
    return find_angle(dy / dx, 1.0)


def log_polar_histograms(points: NDArray[np.float64]) -> NDArray[np.int64]:
    """Return the log-polar histogram of every point relative to all others.

    Angles are measured against the slope of the line through the
    previous point (wrapping for the first), so the descriptor follows the
    boundary's local orientation.
    """
    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 2:
        raise ValueError("points must be an (N, 2) array of x, y coordinates")
    count = points.shape[0]

    histograms = np.zeros((count, NUM_RADIAL_BINS, NUM_LOG_BINS), dtype=np.int64)
    if count < 2:
        return histograms

    distances = normalized_distances(points)
    log_bins_all = _log_bins(distances)

    for i in range(count):
        base_angle = reference_angle(points[i - 1], points[i])

        others = np.arange(count) != i
        relative = points[others] - points[i]
        angles = _angles(relative[:, 0], relative[:, 1]) - base_angle
        angles = np.where(angles < 0.0, angles + _TWO_PI, angles)

        radial_bins = (angles * NUM_RADIAL_BINS / _TWO_PI).astype(np.int64)
        radial_bins = np.clip(radial_bins, 0, NUM_RADIAL_BINS - 1)

        np.add.at(histograms[i], (radial_bins, log_bins_all[i, others]), 1)

    return histograms


def _angles(x: NDArray[np.float64], y: NDArray[np.float64]) -> NDArray[np.float64]:
    # atan(y / x) moved into the vector's quadrant; points on an axis take
    # their exact angle so no division by zero reaches the result.
    with np.errstate(divide="ignore", invalid="ignore"):
        raw = np.arctan(y / x)
    angles = np.where(x < 0.0, raw + math.pi, raw)
    angles = np.where((x > 0.0) & (y < 0.0), raw + _TWO_PI, angles)

    angles = np.where((x == 0.0) & (y > 0.0), math.pi / 2.0, angles)
    angles = np.where((x == 0.0) & (y < 0.0), 1.5 * math.pi, angles)
    angles = np.where((x == 0.0) & (y == 0.0), 0.0, angles)
    angles = np.where((y == 0.0) & (x < 0.0), math.pi, angles)
    return np.where((y == 0.0) & (x > 0.0), 0.0, angles)


def _log_bins(distances: NDArray[np.float64]) -> NDArray[np.int64]:
    # Distances below 1 (and zero) fall into the first bin, very large ones
    # into the last.
    safe = np.where(distances > 0.0, distances, 1.0)
    bins = np.floor(np.log(safe)).astype(np.int64)
    return np.clip(bins, 0, NUM_LOG_BINS - 1)
