# emotim/tiles.py
from __future__ import annotations

"""
Tile library: identifiers, per-tile descriptors and the read-only tile arena.

Tile files are named after the code points they show, in hex:
  "1f600.png"        -> (0x1f600,)
  "1f1e9-1f1ea.png"  -> (0x1f1e9, 0x1f1ea)

Every tile is converted, reduced and histogrammed once at load time. The
resulting TileSet is indexed by integer tile id and never mutated, so any
number of worker threads may read it at the same time.
"""

import re
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .constants import MAX_MAXIMA, MIN_MAXIMUM_MASS, TILE_EXTENSIONS
from .core_types import CodePoints, TileId, U8Image, assert_u8_image_rgba
from .depth import PerceptualImage
from .histogram import Histogram
from .image_io import is_image_file, load_image_rgba, save_image_rgba
from .utils import debug_log, format_seconds_compact, warn

_IDENTIFIER_RE = re.compile(r"^(?:([0-9a-fA-F]+)-)?([0-9a-fA-F]+)$")
_MAX_CODE_POINT = 0x10FFFF


def parse_tile_identifier(name: str) -> CodePoints:
    """Parse '[<hex>-]<hex>' (file extension optional) into code points."""
    stem = Path(name).stem if Path(name).suffix else name
    match = _IDENTIFIER_RE.match(stem)
    if match is None:
        raise ValueError(f"tile name {name!r} is not '[<hex>-]<hex>'")
    points = tuple(int(g, 16) for g in match.groups() if g is not None)
    for cp in points:
        if cp > _MAX_CODE_POINT:
            raise ValueError(f"tile name {name!r}: {cp:#x} is not a code point")
    return points


def _as_code_points(identifier: Union[str, CodePoints]) -> CodePoints:
    if isinstance(identifier, str):
        return parse_tile_identifier(identifier)
    return tuple(int(cp) for cp in identifier)


@dataclass(frozen=True)
class Tile:
    """Reference image with its identifier and precomputed histogram."""

    tile_id: TileId
    identifier: CodePoints
    rgba: U8Image
    perceptual: PerceptualImage
    histogram: Histogram

    @property
    def text(self) -> str:
        return "".join(chr(cp) for cp in self.identifier)

    @property
    def width(self) -> int:
        return int(self.rgba.shape[1])

    @property
    def height(self) -> int:
        return int(self.rgba.shape[0])


def build_tile(
    tile_id: TileId,
    identifier: Union[str, CodePoints],
    rgba: U8Image,
    *,
    max_maxima: int = MAX_MAXIMA,
    min_mass: float = MIN_MAXIMUM_MASS,
) -> Tile:
    assert_u8_image_rgba(rgba)
    raster = rgba.copy()
    raster.flags.writeable = False
    perceptual = PerceptualImage.from_rgba(raster)
    hist = Histogram.from_coarse_image(
        perceptual.reduce_depth(), max_maxima=max_maxima, min_mass=min_mass
    )
    return Tile(tile_id, _as_code_points(identifier), raster, perceptual, hist)


class TileSet:
    """Arena of tiles indexed by tile id (position in load order)."""

    def __init__(self, tiles: Sequence[Tile]) -> None:
        for index, tile in enumerate(tiles):
            if tile.tile_id != index:
                raise ValueError(
                    f"tile id {tile.tile_id} does not match arena slot {index}"
                )
        self._tiles: Tuple[Tile, ...] = tuple(tiles)

    @classmethod
    def from_rasters(
        cls,
        rasters: Iterable[Tuple[Union[str, CodePoints], U8Image]],
        *,
        workers: int = 1,
        max_maxima: int = MAX_MAXIMA,
        min_mass: float = MIN_MAXIMUM_MASS,
    ) -> "TileSet":
        """Build descriptors for (identifier, RGBA) pairs, in parallel when workers > 1."""
        items = list(rasters)

        def _build(job: Tuple[int, Tuple[Union[str, CodePoints], U8Image]]) -> Tile:
            index, (identifier, rgba) = job
            return build_tile(
                index, identifier, rgba, max_maxima=max_maxima, min_mass=min_mass
            )

        jobs = list(enumerate(items))
        if workers <= 1 or len(jobs) < 2:
            return cls([_build(job) for job in jobs])
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return cls(list(pool.map(_build, jobs)))

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[Tile]:
        return iter(self._tiles)

    def __getitem__(self, tile_id: TileId) -> Tile:
        return self._tiles[tile_id]

    @property
    def histograms(self) -> Tuple[Histogram, ...]:
        return tuple(t.histogram for t in self._tiles)

    def identifier(self, tile_id: TileId) -> CodePoints:
        return self._tiles[tile_id].identifier


def list_tile_files(folder: Path) -> List[Tuple[Path, CodePoints]]:
    """Tile files in folder sorted by name, with parsed identifiers."""
    found: List[Tuple[Path, CodePoints]] = []
    for path in sorted(folder.iterdir(), key=lambda p: p.name.lower()):
        if not path.is_file() or path.suffix.lower() not in TILE_EXTENSIONS:
            continue
        try:
            identifier = parse_tile_identifier(path.name)
        except ValueError as exc:
            warn(f"skipping tile {path.name}: {exc}")
            continue
        if not is_image_file(path):
            warn(f"skipping tile {path.name}: not a readable image")
            continue
        found.append((path, identifier))
    return found


def load_tile_library(
    folder: Path,
    *,
    workers: int = 1,
    max_maxima: int = MAX_MAXIMA,
    min_mass: float = MIN_MAXIMUM_MASS,
    coarse_dir: Optional[Path] = None,
    debug: bool = False,
) -> TileSet:
    """
    Read every tile in folder and precompute its histogram.

    coarse_dir, when given, receives a reduced depth preview PNG per tile.
    """
    if not folder.is_dir():
        raise NotADirectoryError(f"tile folder not found: {folder}")
    t0 = time.perf_counter()
    entries = list_tile_files(folder)

    if workers <= 1:
        rasters = [load_image_rgba(p) for p, _ in entries]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            rasters = list(pool.map(load_image_rgba, [p for p, _ in entries]))

    tiles = TileSet.from_rasters(
        [(ident, rgba) for (_, ident), rgba in zip(entries, rasters)],
        workers=workers,
        max_maxima=max_maxima,
        min_mass=min_mass,
    )

    if coarse_dir is not None:
        for (path, _), tile in zip(entries, tiles):
            preview = tile.perceptual.reduce_depth().to_rgba()
            save_image_rgba(coarse_dir / f"{path.stem}.png", preview)

    if debug:
        empty = sum(1 for t in tiles if not t.histogram.maxima)
        debug_log(
            f"loaded {len(tiles):,} tiles from {folder} in "
            f"{format_seconds_compact(time.perf_counter() - t0)} "
            f"({empty:,} without significant maxima)"
        )
    return tiles


__all__ = [
    "parse_tile_identifier",
    "Tile",
    "build_tile",
    "TileSet",
    "list_tile_files",
    "load_tile_library",
]
