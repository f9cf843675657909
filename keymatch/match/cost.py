"""Chi-squared cost matrices between shape context descriptors."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


def chi_squared_cost_matrix(
    descriptor_a: NDArray[np.integer], descriptor_b: NDArray[np.integer]
) -> NDArray[np.float64]:
    """Return the matrix of chi-squared distances between every pair of points.

    Entry ``[i, j]`` compares the histogram of point *i* in *descriptor_a*
    with that of point *j* in *descriptor_b*. Bins empty in both contribute
    nothing.
    """
    a = np.asarray(descriptor_a, dtype=np.float64)
    b = np.asarray(descriptor_b, dtype=np.float64)
    if a.ndim < 2 or b.ndim < 2:
        raise ValueError("Descriptors need at least a point axis and a bin axis")
    if a.shape[1:] != b.shape[1:]:
        raise ValueError(
            f"Descriptor bin layouts differ: {a.shape[1:]} vs {b.shape[1:]}"
        )

    flat_a = a.reshape(a.shape[0], -1)[:, np.newaxis, :]
    flat_b = b.reshape(b.shape[0], -1)[np.newaxis, :, :]

    numerator = (flat_a - flat_b) ** 2
    denominator = flat_a + flat_b
    ratios = np.divide(
        numerator,
        denominator,
        out=np.zeros_like(numerator),
        where=denominator != 0,
    )
    return 0.5 * ratios.sum(axis=2)
