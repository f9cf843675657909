"""Data models shared across the key matching pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, NamedTuple


class Point(NamedTuple):
    """Integer pixel coordinate of a boundary point."""

    x: int
    y: int


@dataclass(slots=True)
class KeyEdges:
    """Edge points of a key silhouette and the geometry derived from them."""

    edges: List[Point]
    right_edge: List[Point]
    angle_offset: float
    blade_beginning: Point
    key_center: Point
    cleaned_edges: List[Point] = field(default_factory=list)


@dataclass(slots=True)
class MatchResult:
    """Outcome of comparing a query descriptor against a reference set."""

    best_index: int
    costs: List[float] = field(default_factory=list)

    @property
    def best_cost(self) -> float:
        return self.costs[self.best_index]
