"""End-to-end key identification: grayscale grid to descriptor to best match."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from .errors import InsufficientEdgePointsError
from .extract.binarize import binarize
from .extract.clean import clean_silhouette
from .extract.edges import find_edges
from .extract.normalize import normalize_edges
from .features.shape_context import NUM_POINTS, compute_shape_context
from .io.models import KeyEdges, MatchResult
from .match.matcher import match_key

logger = logging.getLogger(__name__)

StageObserver = Callable[[str, Any], None]


def extract_key_edges(
    gray: NDArray[np.integer],
    observer: Optional[StageObserver] = None,
    fix_box_fill: bool = False,
) -> KeyEdges:
    """Binarize, clean and trace *gray*, returning the normalized key edges.

    *observer* is called with ``("grayscale" | "binary" | "cleaned" |
    "normalized", output)`` after each stage.
    """
    notify = observer or _ignore

    notify("grayscale", gray)
    binary = binarize(gray)
    notify("binary", binary)
    cleaned = clean_silhouette(binary, fix_box_fill=fix_box_fill)
    notify("cleaned", cleaned)

    edges = find_edges(cleaned)
    if not edges:
        raise InsufficientEdgePointsError(0, NUM_POINTS)
    key_edges = normalize_edges(edges)
    notify("normalized", key_edges)
    return key_edges


def describe_image(
    gray: NDArray[np.integer],
    observer: Optional[StageObserver] = None,
    fix_box_fill: bool = False,
) -> NDArray[np.int64]:
    """Return the shape context descriptor of the key photographed in *gray*."""
    key_edges = extract_key_edges(gray, observer=observer, fix_box_fill=fix_box_fill)
    return compute_shape_context(key_edges.cleaned_edges)


def identify_key(
    gray: NDArray[np.integer],
    reference_set: Sequence[NDArray[np.integer]],
    observer: Optional[StageObserver] = None,
    fix_box_fill: bool = False,
    progress: bool = False,
) -> MatchResult:
    """Return the reference descriptor that best matches the key in *gray*."""
    descriptor = describe_image(gray, observer=observer, fix_box_fill=fix_box_fill)
    result = match_key(descriptor, reference_set, progress=progress)
    logger.info("Most similar key: %d (cost %.4f)", result.best_index, result.best_cost)
    return result


def _ignore(stage: str, payload: Any) -> None:
    return None
