"""Exceptions raised by the key matching pipeline."""

from __future__ import annotations

from pathlib import Path


class KeyMatchError(Exception):
    """Base class for failures the command line reports to the user."""


class ImageLoadError(KeyMatchError):
    """Raised when a key photograph cannot be read or decoded."""

    def __init__(self, path: str | Path, reason: str) -> None:
        super().__init__(f"Unable to load image {path}: {reason}")
        self.path = Path(path)
        self.reason = reason


class InsufficientEdgePointsError(KeyMatchError, ValueError):
    """Raised when a silhouette has too few boundary points to describe."""

    def __init__(self, found: int, required: int) -> None:
        super().__init__(
            f"Found {found} boundary points but at least {required} are required"
        )
        self.found = found
        self.required = required


class DescriptorDatabaseError(KeyMatchError, ValueError):
    """Raised for malformed descriptor database files."""
