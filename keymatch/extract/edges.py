"""Boundary extraction from cleaned binary key silhouettes."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

import numpy as np
from numpy.typing import NDArray

from .binarize import BACKGROUND, FOREGROUND
from ..io.models import Point

logger = logging.getLogger(__name__)


def find_edges(binary: NDArray[np.integer]) -> List[Point]:
    """Return silhouette pixels touching the background, in row-major order.

    Only pixels whose four axis-aligned neighbours all lie inside the grid
    are considered, so the outermost rows and columns never contribute.
    """
    grid = np.asarray(binary)
    if grid.ndim != 2:
        raise ValueError("Binary grids must be two-dimensional (height, width)")
    height, width = grid.shape
    if height < 3 or width < 3:
        return []

    inner = grid[1:-1, 1:-1] == FOREGROUND
    touches_background = (
        (grid[:-2, 1:-1] == BACKGROUND)
        | (grid[2:, 1:-1] == BACKGROUND)
        | (grid[1:-1, :-2] == BACKGROUND)
        | (grid[1:-1, 2:] == BACKGROUND)
    )
    rows, cols = np.nonzero(inner & touches_background)

    edges = [Point(int(col) + 1, int(row) + 1) for row, col in zip(rows, cols)]
    logger.debug("Found %d boundary points", len(edges))
    return edges


def select_right_edge(edges: Iterable[Point]) -> List[Point]:
    """Return the rightmost point of every row, rows kept in scan order."""
    rightmost: Dict[int, Point] = {}
    for point in edges:
        current = rightmost.get(point.y)
        if current is None or point.x > current.x:
            rightmost[point.y] = point
    return list(rightmost.values())
