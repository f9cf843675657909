"""Minimum-cost assignment between the sample points of two descriptors."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy.optimize import linear_sum_assignment


def solve_assignment(cost: NDArray[np.floating]) -> NDArray[np.int64]:
    """Return the row-to-column bijection of minimum total cost.

    ``result[row]`` is the column assigned to *row*. The solver is the
    Hungarian method in its shortest augmenting path form, cubic in the
    matrix size and deterministic for a given matrix.
    """
    matrix = np.asarray(cost, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise ValueError(f"Cost matrix must be square, got shape {matrix.shape}")
    if not np.all(np.isfinite(matrix)):
        raise ValueError("Cost matrix contains NaN or infinite entries")
    if matrix.size and matrix.min() < 0:
        raise ValueError("Cost matrix entries must be non-negative")

    rows, columns = linear_sum_assignment(matrix)
    assignment = np.empty(matrix.shape[0], dtype=np.int64)
    assignment[rows] = columns
    return assignment


def assignment_cost(cost: NDArray[np.floating], assignment: NDArray[np.integer]) -> float:
    """Return the summed cost of the entries selected by *assignment*."""
    matrix = np.asarray(cost, dtype=np.float64)
    rows = np.arange(len(assignment))
    return float(matrix[rows, np.asarray(assignment)].sum())
