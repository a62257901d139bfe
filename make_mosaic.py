#!/usr/bin/env python3
"""
make_mosaic.py
Rebuild an image out of emoticon tiles chosen by perceptual colour histograms.

Usage:
  python make_mosaic.py INPUT [--out OUTPUT] --tiles DIR --cell-size N
                        --method [maxima|angular|correlation] --text --debug

Methods:
  maxima      : compare dominant colour clusters (linear hue distance).
  angular     : compare dominant colour clusters on the hue circle.
  correlation : correlate the full smoothed colour histograms.

Input:
  Any Pillow-readable image. Each N x N block becomes one tile; partial blocks
  at the right and bottom edges are dropped.

Output:
  PNG. If OUTPUT is omitted, writes <stem>_mosaic.png next to INPUT.
  --text also prints the mosaic as characters, one line per row.

Notes:
  Tile files are named by their code points: "<hex>.png" or "<hex>-<hex>.png".
  CPU bound. ThreadPoolExecutor is used for tile loading and cell matching.
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path
from typing import Optional

from emotim.constants import (
    DEFAULT_CELL_SIZE,
    DEFAULT_METHOD,
    DEFAULT_TILE_DIR,
    MAX_MAXIMA,
    MIN_MAXIMUM_MASS,
)
from emotim.histogram import format_smoothed_field, histogram_from_rgba
from emotim.image_io import load_image_rgba, save_image_rgba
from emotim.matching import NoCandidatesError
from emotim.mosaic import build_mosaic, mosaic_to_text, render_mosaic, tile_usage
from emotim.similarity import SIMILARITY_METHODS
from emotim.tiles import TileSet, load_tile_library
from emotim.utils import (
    default_workers,
    enable_line_buffered_stdout,
    error,
    format_seconds_compact,
    format_total_duration_compact,
    key_value_pairs_to_string,
    log,
    debug_log,
    print_banner,
    print_config_line,
)

# CLI args


def parse_cli_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """
    Parse CLI arguments for mosaic building.

    Returns:
      argparse.Namespace with:
        src: Path to the source image
        out: optional output Path
        tiles: Path to the tile folder
        cell_size: source pixels per cell edge
        method: similarity method name
        max_maxima / min_mass: maxima selection
        workers: threads for tile loading and matching
        text: print the text mosaic
        coarse_dir: optional folder for reduced depth tile previews
        histogram: print the source histogram and exit
        debug: verbose output
    """
    parser = argparse.ArgumentParser(
        prog="make_mosaic",
        description="Rebuild an image out of emoticon tiles.",
    )
    parser.add_argument("src", type=Path, help="Input image")
    parser.add_argument("--out", type=Path, default=None, help="Output PNG (optional)")
    parser.add_argument(
        "--tiles", type=Path, default=Path(DEFAULT_TILE_DIR), help="Tile folder"
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=DEFAULT_CELL_SIZE,
        help="Source pixels per cell edge.",
    )
    parser.add_argument(
        "--method",
        choices=sorted(SIMILARITY_METHODS),
        default=DEFAULT_METHOD,
        help="Histogram similarity method.",
    )
    parser.add_argument(
        "--max-maxima",
        type=int,
        default=MAX_MAXIMA,
        help="Keep at most this many colour clusters per histogram.",
    )
    parser.add_argument(
        "--min-mass",
        type=float,
        default=MIN_MAXIMUM_MASS,
        help="Drop colour clusters lighter than this.",
    )
    parser.add_argument(
        "--workers", type=int, default=default_workers(), help="Internal workers"
    )
    parser.add_argument("--text", action="store_true", help="Print the text mosaic")
    parser.add_argument(
        "--coarse-dir",
        type=Path,
        default=None,
        help="Write reduced depth previews of the tiles here.",
    )
    parser.add_argument(
        "--histogram",
        action="store_true",
        help="Print the smoothed histogram of INPUT and exit.",
    )
    parser.add_argument("--debug", action="store_true", help="Verbose details")
    return parser.parse_args(argv)


def _print_histogram(src: Path, max_maxima: int, min_mass: float) -> None:
    rgba = load_image_rgba(src)
    hist = histogram_from_rgba(rgba, max_maxima=max_maxima, min_mass=min_mass)
    print_banner(f"{src.name} histogram")
    log(format_smoothed_field(hist))
    log(f"Visible pixels: {hist.total:,}")


def _report_usage(tiles: TileSet, usage: list[tuple[int, int]], top_k: int = 10) -> None:
    debug_log(f"tile usage (top {top_k}):")
    for tile_id, count in usage[:top_k]:
        tile = tiles[tile_id]
        code = "-".join(f"{cp:x}" for cp in tile.identifier)
        debug_log(f"  -> {code}  {tile.text}: cells={count:,}")


def run(args: argparse.Namespace) -> int:
    """Run one mosaic build. Returns a process exit status."""
    t_start = time.perf_counter()
    src: Path = args.src
    if not src.exists():
        error(f"not found: {src}")
        return 2

    if args.histogram:
        _print_histogram(src, args.max_maxima, args.min_mass)
        return 0

    print_config_line(
        "mosaic",
        [
            ("Cell size", args.cell_size),
            ("Method", args.method),
            ("Workers", args.workers),
        ],
        debug=False,
    )
    if args.debug:
        debug_log(
            key_value_pairs_to_string(
                [
                    ("Max maxima", args.max_maxima),
                    ("Min mass", args.min_mass),
                    ("Tiles", str(args.tiles)),
                    ("Coarse previews", str(args.coarse_dir or "-")),
                ]
            )
        )

    print_banner("tiles")
    try:
        tiles = load_tile_library(
            args.tiles,
            workers=args.workers,
            max_maxima=args.max_maxima,
            min_mass=args.min_mass,
            coarse_dir=args.coarse_dir,
            debug=args.debug,
        )
    except NotADirectoryError as exc:
        error(str(exc))
        return 2
    log(f"Loaded {len(tiles):,} tiles")
    t_tiles = time.perf_counter()

    print_banner(src.name)
    rgba = load_image_rgba(src)
    height, width = rgba.shape[0], rgba.shape[1]
    try:
        mosaic = build_mosaic(
            rgba,
            tiles,
            args.cell_size,
            args.method,
            workers=args.workers,
            max_maxima=args.max_maxima,
            min_mass=args.min_mass,
            progress=True,
        )
    except NoCandidatesError as exc:
        error(f"{exc} in {args.tiles}")
        return 1
    except ValueError as exc:
        error(str(exc))
        return 1
    t_match = time.perf_counter()

    out_path = args.out or src.with_name(f"{src.stem}_mosaic.png")
    out_path = save_image_rgba(out_path, render_mosaic(mosaic, tiles))
    t_save = time.perf_counter()

    log(
        f"Wrote {out_path.name} | source={width}x{height} | "
        f"cells={mosaic.columns}x{mosaic.rows}"
    )
    usage = tile_usage(mosaic)
    log(f"Distinct tiles used: {len(usage):,}")
    if args.debug:
        _report_usage(tiles, usage)
    if args.text:
        sys.stdout.write(mosaic_to_text(mosaic, tiles))
        sys.stdout.flush()

    if args.debug:
        debug_log(
            f"Total {format_total_duration_compact(t_save - t_start)}  "
            f"(tiles={format_seconds_compact(t_tiles - t_start)}, "
            f"match={format_seconds_compact(t_match - t_tiles)}, "
            f"save={format_seconds_compact(t_save - t_match)})"
        )
    else:
        log(f"Total time {format_total_duration_compact(t_save - t_start)}")
    return 0


# Entry point


def main() -> None:
    """CLI entry point."""
    enable_line_buffered_stdout()
    args = parse_cli_args()
    if args.debug:
        debug_log(f"CPU cores: {os.cpu_count() or 1}")
    sys.exit(run(args))


if __name__ == "__main__":
    main()
