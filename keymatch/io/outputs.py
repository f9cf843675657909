"""Output helpers for persisting match results."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

from .models import MatchResult


def write_match_report(path: Path, result: MatchResult, image_path: Path | None = None) -> Path:
    """Write *result* to *path* as JSON and return the path."""
    payload = asdict(result)
    payload["best_cost"] = result.best_cost
    if image_path is not None:
        payload["image"] = str(image_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path
