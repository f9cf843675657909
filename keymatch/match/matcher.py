"""Selection of the reference key whose shape context best matches a query."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from numpy.typing import NDArray
from tqdm import tqdm

from .assignment import assignment_cost, solve_assignment
from .cost import chi_squared_cost_matrix
from ..io.models import MatchResult

logger = logging.getLogger(__name__)

Descriptor = NDArray[np.integer]


def match_cost(query: Descriptor, candidate: Descriptor) -> float:
    """Return the minimum total chi-squared cost of pairing *query* with *candidate*."""
    cost = chi_squared_cost_matrix(query, candidate)
    assignment = solve_assignment(cost)
    return assignment_cost(cost, assignment)


def match_key(
    query: Descriptor,
    reference_set: Sequence[Descriptor],
    progress: bool = False,
) -> MatchResult:
    """Return the index of the cheapest reference descriptor and all costs.

    Ties go to the earliest index.
    """
    if len(reference_set) == 0:
        raise ValueError("Reference set is empty; nothing to match against")

    query_shape = np.shape(query)
    costs: list[float] = []
    for index, candidate in enumerate(
        tqdm(reference_set, desc="Matching keys", unit="key", leave=False, disable=not progress)
    ):
        if np.shape(candidate) != query_shape:
            raise ValueError(
                f"Reference descriptor {index} has shape {np.shape(candidate)}, "
                f"expected {query_shape}"
            )
        cost = match_cost(query, candidate)
        logger.info("Key %d: cost %.4f", index, cost)
        costs.append(cost)

    best_index = 0
    for index, cost in enumerate(costs):
        if cost < costs[best_index]:
            best_index = index

    return MatchResult(best_index=best_index, costs=costs)
