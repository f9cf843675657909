"""Reading and writing the plain-text shape context database.

The first line holds ``numKeys,pointsPerKey,numRadialBins,numLogBins``.
Every following line is ``keyIndex,pointIndex,radialBin,logBin,frequency``
for one histogram cell, zero cells included, grouped by key.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import List, Sequence

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from ..errors import DescriptorDatabaseError
from ..features.shape_context import DESCRIPTOR_SHAPE

logger = logging.getLogger(__name__)

_COLUMNS = ["key", "point", "radial", "log", "frequency"]


def read_descriptor_database(path: str | Path) -> List[NDArray[np.int64]]:
    """Return the descriptors stored at *path*, in file order."""
    db_path = Path(path)
    if not db_path.exists():
        raise FileNotFoundError(f"Descriptor database does not exist: {db_path}")

    with db_path.open("r", encoding="utf-8") as handle:
        header_line = handle.readline()
    if not header_line.strip():
        return []
    num_keys, dims = _parse_header(header_line)

    try:
        frame = pd.read_csv(db_path, skiprows=1, header=None, names=_COLUMNS)
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, ValueError) as exc:
        raise DescriptorDatabaseError(f"Malformed records in {db_path}: {exc}") from exc

    if frame.empty:
        return []

    # Missing fields read as NaN and turn the column into floats.
    if any(frame[column].dtype.kind not in "iu" for column in _COLUMNS):
        raise DescriptorDatabaseError(f"Incomplete or non-integer records in {db_path}")
    frame = frame.astype(np.int64)

    _check_ranges(frame, dims, db_path)

    descriptors: List[NDArray[np.int64]] = []
    seen: set[int] = set()
    key_runs = (frame["key"] != frame["key"].shift()).cumsum()
    for _, group in frame.groupby(key_runs, sort=False):
        key_index = int(group["key"].iloc[0])
        if key_index in seen:
            raise DescriptorDatabaseError(
                f"Records for key {key_index} are not contiguous in {db_path}"
            )
        seen.add(key_index)
        descriptor = np.zeros(dims, dtype=np.int64)
        descriptor[
            group["point"].to_numpy(),
            group["radial"].to_numpy(),
            group["log"].to_numpy(),
        ] = group["frequency"].to_numpy()
        descriptors.append(descriptor)

    if len(descriptors) != num_keys:
        logger.warning(
            "Header of %s declares %d keys but %d were found",
            db_path,
            num_keys,
            len(descriptors),
        )
    logger.debug("Loaded %d descriptors from %s", len(descriptors), db_path)
    return descriptors


def write_descriptor_database(
    path: str | Path, descriptors: Sequence[NDArray[np.integer]]
) -> Path:
    """Write *descriptors* to *path*, replacing any existing file; return the path."""
    db_path = Path(path)
    dims = tuple(np.shape(descriptors[0])) if descriptors else DESCRIPTOR_SHAPE
    if len(dims) != 3:
        raise ValueError("Descriptors must be three-dimensional histograms")
    for index, descriptor in enumerate(descriptors):
        if tuple(np.shape(descriptor)) != dims:
            raise ValueError(
                f"Descriptor {index} has shape {np.shape(descriptor)}, expected {dims}"
            )

    db_path.parent.mkdir(parents=True, exist_ok=True)
    with db_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, lineterminator="\n")
        writer.writerow([len(descriptors), *dims])
        for key_index, descriptor in enumerate(descriptors):
            values = np.asarray(descriptor, dtype=np.int64)
            for (point, radial, log_bin), frequency in np.ndenumerate(values):
                writer.writerow([key_index, point, radial, log_bin, int(frequency)])
    return db_path


def append_descriptor(path: str | Path, descriptor: NDArray[np.integer]) -> int:
    """Add *descriptor* to the database at *path* and return its key index.

    The file is created when missing; otherwise the descriptor dimensions
    must match those already stored.
    """
    db_path = Path(path)
    existing = read_descriptor_database(db_path) if db_path.exists() else []
    if existing and np.shape(existing[0]) != np.shape(descriptor):
        raise DescriptorDatabaseError(
            f"Descriptor shape {np.shape(descriptor)} does not match "
            f"{np.shape(existing[0])} stored in {db_path}"
        )
    existing.append(np.asarray(descriptor, dtype=np.int64))
    write_descriptor_database(db_path, existing)
    return len(existing) - 1


def _parse_header(line: str) -> tuple[int, tuple[int, int, int]]:
    values = [value.strip() for value in line.strip().split(",")]
    if len(values) != 4:
        raise DescriptorDatabaseError(
            f"Database header needs four values, got {len(values)}: {line.strip()!r}"
        )
    try:
        num_keys, num_points, num_radial, num_log = (int(value) for value in values)
    except ValueError as exc:
        raise DescriptorDatabaseError(f"Non-integer database header: {line.strip()!r}") from exc
    if min(num_keys, num_points, num_radial, num_log) < 0:
        raise DescriptorDatabaseError(f"Negative database header value: {line.strip()!r}")
    return num_keys, (num_points, num_radial, num_log)


def _check_ranges(frame: pd.DataFrame, dims: tuple[int, int, int], db_path: Path) -> None:
    for column, limit in zip(("point", "radial", "log"), dims):
        values = frame[column]
        if len(values) and (values.min() < 0 or values.max() >= limit):
            raise DescriptorDatabaseError(
                f"{column} index outside [0, {limit}) in {db_path}"
            )
    if len(frame) and frame["frequency"].min() < 0:
        raise DescriptorDatabaseError(f"Negative frequency in {db_path}")
