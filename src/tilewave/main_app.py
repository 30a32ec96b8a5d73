"""Serves as the command line entry point of the tile map generator."""

from __future__ import annotations

import argparse
import logging
import multiprocessing
from pathlib import Path
import sys

from tilewave import constants
from tilewave.enums import UnobservedAdjacencyPolicy
from tilewave.exceptions import TileWaveError
from tilewave.logging_config import get_logger, setup_logging
from tilewave.model.sample_model import SampleModel
from tilewave.model.string_map import StringMap
from tilewave.model.tileset_manager import TilesetManager
from tilewave.model.wfc import WFC
from tilewave.model.wfc_manager import WFCManager


logger = get_logger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {number}")
    return number


def _non_negative_int(value: str) -> int:
    """argparse type for integers >= 0."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tilewave",
        description="Generate tile maps that resemble a sample map, using Wave Function Collapse.",
    )
    parser.add_argument("sample", type=Path, help="Sample map file (one row per line, tiles separated by ';')")
    parser.add_argument("width", type=_positive_int, help="Width of the generated map (in tiles)")
    parser.add_argument("height", type=_positive_int, help="Height of the generated map (in tiles)")
    parser.add_argument(
        "--seed", type=_non_negative_int, help="Non-negative random seed for reproducible output (default: wall clock)"
    )
    parser.add_argument("--count", type=_positive_int, default=1, help="Number of maps to generate (default: 1)")
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the map to this file instead of stdout. Further maps go to NAME_1.EXT, NAME_2.EXT, ...",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        help="Maximum number of worker processes when generating several maps (default: physical CPU count)",
    )
    parser.add_argument(
        "--ignore-unobserved",
        action="store_true",
        help="Treat tile neighborships never seen in the sample as unconstrained instead of impossible",
    )
    parser.add_argument("--tileset", type=Path, help="Tileset image used to render the first map")
    parser.add_argument(
        "--tile-size",
        type=_positive_int,
        default=constants.TILE_SIZE_DEFAULT,
        help=f"Size of a square tile in the tileset, in pixels (default: {constants.TILE_SIZE_DEFAULT})",
    )
    parser.add_argument("--image", type=Path, help="Write the rendered first map to this image file")
    parser.add_argument("--log-file", type=Path, help="Also write a debug log to this file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging on the console")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Runs the command line interface and returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if (args.tileset is None) != (args.image is None):
        parser.error("--tileset and --image must be given together")
    if args.tile_size > constants.TILE_SIZE_MAX_LIMIT:
        parser.error(f"--tile-size must be at most {constants.TILE_SIZE_MAX_LIMIT}")

    console_level = logging.DEBUG if args.debug else logging.WARNING
    setup_logging(console_level=console_level, log_file=args.log_file)

    policy = UnobservedAdjacencyPolicy.IGNORE if args.ignore_unobserved else UnobservedAdjacencyPolicy.FORBID
    try:
        sample_model = SampleModel(StringMap.from_file(args.sample))
        wfc = WFC(sample_model, policy)

        if args.count == 1:
            string_maps = [wfc.generate(args.width, args.height, args.seed)]
        else:
            wfc_manager = WFCManager(wfc, args.workers)
            string_maps = wfc_manager.generate_maps(args.width, args.height, args.count, args.seed)
    except OSError as e:
        print(f"Error: cannot read sample map: {e}", file=sys.stderr)
        return 1
    except TileWaveError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _write_maps(string_maps, args.output)

    if args.image is not None:
        tile_indices = {tile_type: i for i, tile_type in enumerate(sample_model.tile_types)}
        try:
            tileset_manager = TilesetManager(args.tileset, (args.tile_size, args.tile_size), tile_indices)
        except (OSError, ValueError) as e:
            print(f"Error: cannot use tileset: {e}", file=sys.stderr)
            return 1
        tileset_manager.save_tilemap_img(tileset_manager.get_tilemap_img(string_maps[0]), args.image)

    return 0


def _write_maps(string_maps: list[StringMap], output: Path | None) -> None:
    """Writes the maps to numbered files next to 'output', or to stdout separated by blank lines."""
    for i, string_map in enumerate(string_maps):
        if output is None:
            if i > 0:
                print()
            print(string_map.to_text(), end="")
        elif i == 0:
            string_map.write_to_file(output)
        else:
            string_map.write_to_file(output.with_name(f"{output.stem}_{i}{output.suffix}"))


if __name__ == "__main__":
    multiprocessing.freeze_support()
    sys.exit(main())
