"""Geometric normalization of key edges: tilt, blade start and tooth removal."""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

from .edges import select_right_edge
from ..errors import InsufficientEdgePointsError
from ..io.models import KeyEdges, Point

logger = logging.getLogger(__name__)

ANGLE_OFFSET_THRESHOLD = 0.001
BLADE_LENGTH_PROJECTION = 200
BLADE_DISTANCE_THRESHOLD = 5


def key_angle_offset(edges: Sequence[Point]) -> float:
    """Return the key's slant from the horizontal, in radians.

    The line through the topmost and bottommost boundary points stands in
    for the key's centre line; a vertical key yields exactly pi / 2.
    """
    if not edges:
        raise InsufficientEdgePointsError(0, 1)
    top = edges[0]
    bottom = edges[-1]

    delta_x = float(top.x - bottom.x)
    delta_y = float(top.y - bottom.y)
    if delta_x == 0.0:
        return math.pi / 2.0
    return math.atan(delta_y / delta_x)


def find_blade_beginning(
    right_edge: Sequence[Point],
    angle_offset: float,
    angle_threshold: float = ANGLE_OFFSET_THRESHOLD,
    projection_length: int = BLADE_LENGTH_PROJECTION,
    distance_threshold: float = BLADE_DISTANCE_THRESHOLD,
) -> Point:
    """Return the right-edge point where the straight side of the blade starts.

    Walking down the right edge, the line through each pair of consecutive
    points is projected over the following points. The first pair whose
    line keeps all of them within *distance_threshold* marks the blade.
    The angle check is signed: only lines at or below the key's overall
    angle (plus *angle_threshold*) are projected.
    """
    if not right_edge:
        raise InsufficientEdgePointsError(0, 1)

    for i in range(1, len(right_edge)):
        p0 = right_edge[i - 1]
        p1 = right_edge[i]

        delta_x = float(p1.x - p0.x)
        delta_y = float(p1.y - p0.y)
        if delta_x == 0.0:
            slope = None
            projected_angle = math.pi / 2.0
        else:
            slope = delta_y / delta_x
            projected_angle = math.atan(slope)

        if angle_offset - projected_angle > angle_threshold:
            continue

        stop = min(i + projection_length, len(right_edge))
        if all(
            _distance_to_line(p0, slope, right_edge[j]) <= distance_threshold
            for j in range(i + 1, stop)
        ):
            logger.debug("Blade begins at %s", p0)
            return p0

    logger.debug("No straight blade side found; using %s", right_edge[0])
    return right_edge[0]


def find_key_center(blade_beginning: Point, edges: Sequence[Point]) -> Point:
    """Return the centre point below which the teeth lie.

    The lowest boundary point, the blade tip, gives the centre line's x;
    the blade beginning gives its y.
    """
    if not edges:
        raise InsufficientEdgePointsError(0, 1)
    lowest = edges[0]
    for point in edges:
        if point.y > lowest.y:
            lowest = point
    return Point(lowest.x, blade_beginning.y)


def clean_edges(key_center: Point, edges: Sequence[Point]) -> List[Point]:
    """Drop the edge points in the lower-left quadrant around *key_center*."""
    return [p for p in edges if p.x > key_center.x or p.y < key_center.y]


def normalize_edges(edges: Sequence[Point]) -> KeyEdges:
    """Run the full normalization over a row-major boundary point set."""
    if not edges:
        raise InsufficientEdgePointsError(0, 1)

    all_edges = list(edges)
    right_edge = select_right_edge(all_edges)
    angle_offset = key_angle_offset(all_edges)
    blade_beginning = find_blade_beginning(right_edge, angle_offset)
    key_center = find_key_center(blade_beginning, all_edges)
    cleaned = clean_edges(key_center, all_edges)

    logger.info(
        "Key angle %.4f rad, blade begins at (%d, %d), centre at (%d, %d); kept %d of %d edge points",
        angle_offset,
        blade_beginning.x,
        blade_beginning.y,
        key_center.x,
        key_center.y,
        len(cleaned),
        len(all_edges),
    )
    return KeyEdges(
        edges=all_edges,
        right_edge=right_edge,
        angle_offset=angle_offset,
        blade_beginning=blade_beginning,
        key_center=key_center,
        cleaned_edges=cleaned,
    )


def _distance_to_line(origin: Point, slope: float | None, test: Point) -> float:
    # Distance from *test* to the foot of its perpendicular on the line
    # through *origin*; slope None is a vertical line, 0 a horizontal one.
    if slope is None:
        intersect_x = float(origin.x)
        intersect_y = float(test.y)
    elif slope == 0.0:
        intersect_x = float(test.x)
        intersect_y = float(origin.y)
    else:
        intercept = origin.y - slope * origin.x
        perpendicular = -1.0 / slope
        perpendicular_intercept = test.y - perpendicular * test.x
        intersect_x = (perpendicular_intercept - intercept) / (slope - perpendicular)
        intersect_y = slope * intersect_x + intercept

    return math.hypot(intersect_x - test.x, intersect_y - test.y)
