"""Removal of small blobs and thin artefacts from binary key silhouettes."""

from __future__ import annotations

import logging
from typing import List, Sequence

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

MAX_CLEANING_DISTANCE = 5
MAX_SMOOTHING_PASSES = 100
MAX_BOX_WIDTH = 10
MAX_BOX_HEIGHT = 10


def clean_silhouette(
    binary: NDArray[np.integer], fix_box_fill: bool = False
) -> NDArray[np.uint8]:
    """Return a cleaned copy of *binary*; the input grid is left untouched.

    Contagion smoothing runs first, then short runs are filled vertically
    and horizontally. With *fix_box_fill* the run filling covers every
    column and never wraps across rows.
    """
    grid = np.asarray(binary)
    if grid.ndim != 2:
        raise ValueError("Binary grids must be two-dimensional (height, width)")
    height, width = grid.shape

    pixels: List[int] = grid.astype(np.uint8).ravel().tolist()
    if pixels:
        contagion_smooth(pixels, width)
        box_fill(pixels, width, fix_box_fill=fix_box_fill)

    return np.asarray(pixels, dtype=np.uint8).reshape(height, width)


def contagion_smooth(
    pixels: List[int], width: int, max_distance: int = MAX_CLEANING_DISTANCE
) -> int:
    """Smooth the flattened grid *pixels* in place; return the number of passes.

    For each distance a cell takes the value of its two vertical partners
    when they agree with each other but not with the cell. Cells within
    *dist* rows of the top or bottom have no vertical partners and compare
    their two horizontal partners on the same row instead. Scans repeat
    until one makes no change.
    """
    total = len(pixels)
    passes = 0
    for dist in range(1, max_distance):
        step = width * dist
        for _ in range(MAX_SMOOTHING_PASSES):
            passes += 1
            altered = False
            for i in range(total):
                center = pixels[i]

                above = i - step
                below = i + step
                left = i - dist
                right = i + dist
                if above >= 0 and below < total:
                    neighbour = pixels[above]
                    if neighbour == pixels[below] and neighbour != center:
                        pixels[i] = neighbour
                        altered = True
                elif left >= 0 and right < total and left // width == right // width:
                    neighbour = pixels[left]
                    if neighbour == pixels[right] and neighbour != center:
                        pixels[i] = neighbour
                        altered = True
            if not altered:
                break
        else:
            logger.warning(
                "Contagion smoothing did not settle at distance %d after %d passes",
                dist,
                MAX_SMOOTHING_PASSES,
            )
    logger.debug("Contagion smoothing finished after %d passes", passes)
    return passes


def box_fill(pixels: List[int], width: int, fix_box_fill: bool = False) -> None:
    """Fill runs shorter than the minimum box size with the preceding value.

    The default scan checks vertical runs along the first column only and
    horizontal runs along the flattened grid, so a fill may continue over a
    row boundary. *fix_box_fill* checks every column and clips to rows.
    """
    total = len(pixels)
    if fix_box_fill:
        for x in range(width):
            _fill_short_runs(pixels, range(x, total, width), MAX_BOX_HEIGHT)
        for row_start in range(0, total, width):
            _fill_short_runs(
                pixels, range(row_start, row_start + width), MAX_BOX_WIDTH
            )
    else:
        _fill_short_runs(pixels, range(0, total, width), MAX_BOX_HEIGHT)
        _fill_short_runs(pixels, range(total), MAX_BOX_WIDTH)


def _fill_short_runs(pixels: List[int], indices: Sequence[int], min_length: int) -> None:
    # A run with nothing before it has no colour to take; the trailing run is
    # never closed and so never filled.
    start = 0
    for k in range(1, len(indices)):
        if pixels[indices[k]] == pixels[indices[k - 1]]:
            continue
        if k - start < min_length and start > 0:
            colour = pixels[indices[start - 1]]
            for m in range(start, k):
                pixels[indices[m]] = colour
        start = k
