"""Tests for image loading, debug output and match reports."""

from __future__ import annotations

import json

import numpy as np
import pytest
from PIL import Image

from keymatch.errors import ImageLoadError
from keymatch.io.images import DebugImageWriter, draw_key_overlay, load_grayscale
from keymatch.io.models import KeyEdges, MatchResult, Point
from keymatch.io.outputs import write_match_report


class TestLoadGrayscale:
    def test_reads_rgb_as_luminance(self, tmp_path):
        rgb = np.zeros((12, 8, 3), dtype=np.uint8)
        rgb[:, 4:] = 255
        path = tmp_path / "key.png"
        Image.fromarray(rgb).save(path)

        gray = load_grayscale(path)

        assert gray.shape == (12, 8)
        assert gray.dtype == np.uint8
        assert gray[0, 0] == 0
        assert gray[0, 7] == 255

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageLoadError) as excinfo:
            load_grayscale(tmp_path / "nope.jpg")
        assert excinfo.value.path == tmp_path / "nope.jpg"

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.jpg"
        path.write_bytes(b"definitely not an image")
        with pytest.raises(ImageLoadError):
            load_grayscale(path)


class TestDebugImages:
    def _key_edges(self) -> KeyEdges:
        return KeyEdges(
            edges=[Point(2, 2), Point(5, 5)],
            right_edge=[Point(2, 2), Point(5, 5)],
            angle_offset=0.5,
            blade_beginning=Point(3, 4),
            key_center=Point(6, 4),
            cleaned_edges=[Point(8, 1)],
        )

    def test_overlay_marks_lines_and_edges(self):
        gray = np.full((10, 10), 200, dtype=np.uint8)
        overlay = draw_key_overlay(gray, self._key_edges())

        assert np.all(overlay[:, 3] == 0)
        assert np.all(overlay[4, :] == 0)
        assert np.all(overlay[:, 6] == 0)
        assert overlay[1, 8] == 0
        assert overlay[0, 0] == 200
        assert np.all(gray == 200)

    def test_writer_saves_each_stage(self, tmp_path):
        writer = DebugImageWriter(tmp_path / "debug")
        gray = np.full((10, 10), 200, dtype=np.uint8)
        binary = np.ones((10, 10), dtype=np.uint8)

        writer("grayscale", gray)
        writer("binary", binary)
        writer("cleaned", binary)
        writer("normalized", self._key_edges())
        writer("unknown", None)

        names = sorted(p.name for p in (tmp_path / "debug").iterdir())
        assert names == ["binary.png", "cleaned_binary.png", "grayscale.png", "key_overlay.png"]
        with Image.open(tmp_path / "debug" / "binary.png") as saved:
            assert np.asarray(saved).max() == 255


class TestMatchReport:
    def test_report_contents(self, tmp_path):
        result = MatchResult(best_index=1, costs=[4.0, 0.5, 3.0])
        path = write_match_report(tmp_path / "out" / "report.json", result)

        payload = json.loads(path.read_text(encoding="utf-8"))

        assert payload == {"best_index": 1, "costs": [4.0, 0.5, 3.0], "best_cost": 0.5}
