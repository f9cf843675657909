"""Shared test fixtures: synthetic key photographs and silhouettes."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
import pytest

KEY_GRAY = 30
PAPER_GRAY = 255


def make_key_image(
    head_width: int = 100,
    head_height: int = 60,
    blade_width: int = 40,
    blade_length: int = 220,
    notches: Sequence[Tuple[int, int]] = ((70, 20), (120, 20)),
    height: int = 330,
    width: int = 200,
) -> np.ndarray:
    """Return a grayscale photo of a dark key on white paper.

    The head sits at the top, the blade hangs below it aligned with the
    head's centre, and each notch ``(offset, length)`` is cut ten pixels
    deep into the blade's left side, *offset* rows below the head.
    """
    image = np.full((height, width), PAPER_GRAY, dtype=np.uint8)
    top = 20
    head_left = (width - head_width) // 2
    image[top : top + head_height, head_left : head_left + head_width] = KEY_GRAY

    blade_top = top + head_height
    blade_left = (width - blade_width) // 2
    image[blade_top : blade_top + blade_length, blade_left : blade_left + blade_width] = KEY_GRAY

    for offset, length in notches:
        row = blade_top + offset
        image[row : row + length, blade_left : blade_left + 10] = PAPER_GRAY
    return image


def make_rectangle_grid(
    height: int, width: int, rows: Tuple[int, int], cols: Tuple[int, int]
) -> np.ndarray:
    """Return a WHITE (1) grid with a BLACK (0) rectangle over *rows* x *cols*."""
    grid = np.ones((height, width), dtype=np.uint8)
    grid[rows[0] : rows[1], cols[0] : cols[1]] = 0
    return grid


@pytest.fixture
def key_image() -> np.ndarray:
    return make_key_image()


@pytest.fixture
def rectangle_grid() -> np.ndarray:
    return make_rectangle_grid(80, 120, (10, 70), (10, 110))
