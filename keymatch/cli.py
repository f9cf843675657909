"""Command-line interface for the keymatch project."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable

import numpy as np
from numpy.typing import NDArray

from .errors import KeyMatchError
from .io.database import append_descriptor, read_descriptor_database
from .io.images import DebugImageWriter, load_grayscale
from .io.models import MatchResult
from .io.outputs import write_match_report
from .match.matcher import match_key
from .pipeline import StageObserver, describe_image

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the key matching pipeline."""
    parser = argparse.ArgumentParser(
        description="Describe key photographs and match them against a shape context database."
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug details for every pipeline stage.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    describe = subparsers.add_parser(
        "describe", help="Compute a key's descriptor and optionally store it."
    )
    _add_image_arguments(describe)
    describe.add_argument(
        "--database",
        default=None,
        help="Descriptor database to append the new descriptor to.",
    )

    match = subparsers.add_parser(
        "match", help="Find the most similar key in a descriptor database."
    )
    _add_image_arguments(match)
    match.add_argument(
        "--database",
        required=True,
        help="Descriptor database holding the reference keys.",
    )
    match.add_argument(
        "--report",
        default=None,
        help="Path of a JSON file receiving the per-key costs.",
    )
    match.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar while comparing against the database.",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def _add_image_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("image", help="Photograph of a key, teeth left and blade down.")
    parser.add_argument(
        "--debug-dir",
        default=None,
        help="Directory where intermediate stage images will be written.",
    )
    parser.add_argument(
        "--fix-box-fill",
        action="store_true",
        help="Fill short runs in every column and stop horizontal fills at row ends.",
    )


def _describe(image_path: Path, debug_dir: str | None, fix_box_fill: bool) -> NDArray[np.int64]:
    gray = load_grayscale(image_path)
    observer: StageObserver | None = DebugImageWriter(debug_dir) if debug_dir else None
    return describe_image(gray, observer=observer, fix_box_fill=fix_box_fill)


def _print_costs(result: MatchResult) -> None:
    for index, cost in enumerate(result.costs):
        marker = " *" if index == result.best_index else ""
        print(f"  key {index}: cost={cost:.4f}{marker}")


def run_describe(args: argparse.Namespace) -> int:
    image_path = Path(args.image)
    descriptor = _describe(image_path, args.debug_dir, args.fix_box_fill)
    print(f"[describe] {image_path}: {descriptor.shape[0]} sample points")
    if args.database:
        key_index = append_descriptor(Path(args.database), descriptor)
        print(f"[saved] key {key_index} -> {args.database}")
    return 0


def run_match(args: argparse.Namespace) -> int:
    image_path = Path(args.image)
    reference_set = read_descriptor_database(Path(args.database))
    if not reference_set:
        print(f"[error] database {args.database} holds no keys")
        return 1

    descriptor = _describe(image_path, args.debug_dir, args.fix_box_fill)
    result = match_key(descriptor, reference_set, progress=args.progress)
    print(f"[match] {image_path}: most similar key is {result.best_index}")
    _print_costs(result)
    if args.report:
        report_path = write_match_report(Path(args.report), result, image_path)
        print(f"[saved] report -> {report_path}")
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )
    handlers = {"describe": run_describe, "match": run_match}
    try:
        return handlers[args.command](args)
    except (FileNotFoundError, KeyMatchError) as exc:
        print(f"[error] {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
