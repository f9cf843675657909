"""Otsu thresholding of grayscale key photographs into two-class grids."""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

RANGE_VALUES = 255
BIN_WIDTH = 5
HISTOGRAM_LENGTH = RANGE_VALUES // BIN_WIDTH + 1

BLACK = 0
WHITE = 1
FOREGROUND = BLACK
BACKGROUND = WHITE


def luminosity_histogram(gray: NDArray[np.integer]) -> NDArray[np.int64]:
    """Return the luminosity histogram of *gray* using ``BIN_WIDTH`` wide bins.

    Every value is rounded up to the next bin so near-white shades share a
    bin with pure white; 255 itself is not shifted. Bin 0 is never filled.
    """
    values = _as_intensity_grid(gray).ravel().astype(np.int64)
    bins = values // BIN_WIDTH
    bins = np.where(values == RANGE_VALUES, bins, bins + 1)
    return np.bincount(bins, minlength=HISTOGRAM_LENGTH).astype(np.int64)


def otsu_threshold(histogram: NDArray[np.integer]) -> int:
    """Return the gray threshold maximising the between-class variance.

    Class weights are normalised by the number of bins rather than by the
    pixel count. A candidate leaving either class empty has no defined mean
    and is never selected. When no candidate is valid the result is one bin
    below zero, so a uniform image binarizes to background throughout.
    """
    counts = np.asarray(histogram, dtype=np.float64)
    if counts.ndim != 1 or counts.size == 0:
        raise ValueError("histogram must be a non-empty 1-D sequence")

    length = counts.size
    weighted = counts * np.arange(length, dtype=np.float64)

    max_index = -1
    max_variance = -1.0
    for threshold_index in range(length):
        sum_b = float(counts[:threshold_index].sum())
        sum_f = float(counts[threshold_index:].sum())
        if sum_b == 0.0 or sum_f == 0.0:
            continue

        weight_b = sum_b / length
        mean_b = float(weighted[:threshold_index].sum()) / sum_b
        weight_f = sum_f / length
        mean_f = float(weighted[threshold_index:].sum()) / sum_f

        variance = weight_b * weight_f * (mean_b - mean_f) ** 2
        if variance > max_variance:
            max_variance = variance
            max_index = threshold_index

    if max_index < 0:
        logger.debug("No threshold separates two classes")

    return max_index * BIN_WIDTH


def binarize(gray: NDArray[np.integer]) -> NDArray[np.uint8]:
    """Return a binary grid: WHITE above the Otsu threshold, BLACK otherwise."""
    grid = _as_intensity_grid(gray)
    threshold = otsu_threshold(luminosity_histogram(grid))
    logger.debug("Otsu threshold selected at gray level %d", threshold)
    return np.where(grid.astype(np.int64) > threshold, WHITE, BLACK).astype(np.uint8)


def _as_intensity_grid(gray: NDArray[np.integer]) -> NDArray[np.integer]:
    grid = np.asarray(gray)
    if grid.ndim != 2:
        raise ValueError("Intensity grids must be two-dimensional (height, width)")
    if grid.size and (grid.min() < 0 or grid.max() > RANGE_VALUES):
        raise ValueError("Luminosity values must lie within [0, 255]")
    return grid
