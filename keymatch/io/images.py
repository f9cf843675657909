"""Loading key photographs and writing intermediate debug images."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import cv2
import numpy as np
from numpy.typing import NDArray
from PIL import Image, UnidentifiedImageError
from PIL.Image import DecompressionBombError

from ..errors import ImageLoadError
from .models import KeyEdges

logger = logging.getLogger(__name__)

_OVERLAY_INK = 0


def load_grayscale(path: str | Path) -> NDArray[np.uint8]:
    """Return the photograph at *path* as a ``(height, width)`` luminance grid."""
    image_path = Path(path)
    if not image_path.is_file():
        raise ImageLoadError(image_path, "file does not exist")
    try:
        with Image.open(image_path) as image:
            image.load()
            gray = image.convert("L")
    except (UnidentifiedImageError, DecompressionBombError) as exc:
        raise ImageLoadError(image_path, "unrecognised image format") from exc
    except OSError as exc:
        raise ImageLoadError(image_path, str(exc)) from exc

    pixels = np.asarray(gray, dtype=np.uint8)
    if pixels.size == 0:
        raise ImageLoadError(image_path, "image has no pixels")
    logger.debug("Loaded %s (%dx%d)", image_path, pixels.shape[1], pixels.shape[0])
    return pixels


def save_gray_image(path: Path, pixels: NDArray[np.integer]) -> Path:
    """Write an 8-bit grayscale grid to *path* as PNG and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(np.asarray(pixels, dtype=np.uint8)).save(path, format="PNG")
    return path


def save_binary_image(path: Path, binary: NDArray[np.integer]) -> Path:
    """Write a BLACK/WHITE grid to *path* as a black and white PNG."""
    return save_gray_image(path, np.asarray(binary, dtype=np.uint8) * 255)


def draw_key_overlay(gray: NDArray[np.integer], key_edges: KeyEdges) -> NDArray[np.uint8]:
    """Return a copy of *gray* marked with the blade start, centre line and kept edges."""
    canvas = np.array(gray, dtype=np.uint8, copy=True)
    height, width = canvas.shape
    blade = key_edges.blade_beginning
    center = key_edges.key_center

    cv2.line(canvas, (blade.x, 0), (blade.x, height - 1), _OVERLAY_INK, 1)
    cv2.line(canvas, (0, blade.y), (width - 1, blade.y), _OVERLAY_INK, 1)
    cv2.line(canvas, (center.x, 0), (center.x, height - 1), _OVERLAY_INK, 1)

    if key_edges.cleaned_edges:
        xs = np.fromiter((p.x for p in key_edges.cleaned_edges), dtype=np.intp)
        ys = np.fromiter((p.y for p in key_edges.cleaned_edges), dtype=np.intp)
        canvas[ys, xs] = _OVERLAY_INK
    return canvas


class DebugImageWriter:
    """Pipeline observer that saves each stage's output under *out_dir*."""

    def __init__(self, out_dir: str | Path) -> None:
        self.out_dir = Path(out_dir)
        self._gray: NDArray[np.uint8] | None = None

    def __call__(self, stage: str, payload: Any) -> None:
        try:
            path = self._write(stage, payload)
        except OSError as exc:
            logger.warning("Failed to write debug image for %s: %s", stage, exc)
            return
        if path is not None:
            logger.debug("Wrote %s debug image to %s", stage, path)

    def _write(self, stage: str, payload: Any) -> Path | None:
        if stage == "grayscale":
            self._gray = np.asarray(payload, dtype=np.uint8)
            return save_gray_image(self.out_dir / "grayscale.png", self._gray)
        if stage == "binary":
            return save_binary_image(self.out_dir / "binary.png", payload)
        if stage == "cleaned":
            return save_binary_image(self.out_dir / "cleaned_binary.png", payload)
        if stage == "normalized" and self._gray is not None:
            overlay = draw_key_overlay(self._gray, payload)
            return save_gray_image(self.out_dir / "key_overlay.png", overlay)
        return None
