# emotim/mosaic.py
from __future__ import annotations

"""
Mosaic assembly.

The source is cut into square cells of cell_size pixels (partial cells at the
right and bottom edges are dropped). Each cell is matched against the tile
set independently; rows are spread over a thread pool. The result can be
rendered as an RGBA raster made of tile bitmaps, or as text with one line per
mosaic row.
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, List, Tuple

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from .constants import DEFAULT_CELL_SIZE, DEFAULT_METHOD, MAX_MAXIMA, MIN_MAXIMUM_MASS
from .core_types import TileId, U8Image, assert_u8_image_rgba
from .histogram import histogram_from_rgba
from .matching import NoCandidatesError, best_match_for_histogram
from .similarity import SimilarityMethod, resolve_method
from .tiles import TileSet
from .utils import format_seconds_compact, print_progress_line, split_rows_into_parts


@dataclass(frozen=True)
class TileMosaic:
    """Grid of chosen tile ids, shape (rows, columns)."""

    tile_ids: NDArray[np.int32]
    cell_size: int
    method: str

    @property
    def rows(self) -> int:
        return int(self.tile_ids.shape[0])

    @property
    def columns(self) -> int:
        return int(self.tile_ids.shape[1])


def cell_grid(height: int, width: int, cell_size: int) -> Tuple[int, int]:
    """Number of whole (rows, columns) cells that fit."""
    if cell_size <= 0:
        raise ValueError("cell_size must be positive")
    return height // cell_size, width // cell_size


def build_mosaic(
    source: U8Image,
    tiles: TileSet,
    cell_size: int = DEFAULT_CELL_SIZE,
    method: SimilarityMethod = DEFAULT_METHOD,
    *,
    workers: int = 1,
    max_maxima: int = MAX_MAXIMA,
    min_mass: float = MIN_MAXIMUM_MASS,
    progress: bool = False,
) -> TileMosaic:
    """
    Pick the best tile for every cell of source.

    Raises:
      NoCandidatesError: tiles is empty
      ValueError: source smaller than one cell, or unknown method
    """
    assert_u8_image_rgba(source)
    resolve_method(method)
    if len(tiles) == 0:
        raise NoCandidatesError("no candidate tiles to build a mosaic from")
    rows, columns = cell_grid(source.shape[0], source.shape[1], cell_size)
    if rows == 0 or columns == 0:
        raise ValueError(
            f"image {source.shape[1]}x{source.shape[0]} is smaller than one "
            f"{cell_size}px cell"
        )

    def _match_rows(span: Tuple[int, int]) -> NDArray[np.int32]:
        start, end = span
        out = np.empty((end - start, columns), dtype=np.int32)
        for r in range(start, end):
            y0 = r * cell_size
            for c in range(columns):
                x0 = c * cell_size
                region = source[y0 : y0 + cell_size, x0 : x0 + cell_size]
                hist = histogram_from_rgba(
                    region, max_maxima=max_maxima, min_mass=min_mass
                )
                out[r - start, c] = best_match_for_histogram(hist, tiles, method)[0]
        return out

    spans = split_rows_into_parts(rows, max(1, workers) * 4)
    parts: Dict[int, NDArray[np.int32]] = {}
    t0 = time.perf_counter()
    done_rows = 0

    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        futures = {pool.submit(_match_rows, span): span for span in spans}
        for fut in as_completed(futures):
            span = futures[fut]
            parts[span[0]] = fut.result()
            done_rows += span[1] - span[0]
            if progress:
                elapsed = time.perf_counter() - t0
                print_progress_line(
                    f"Matching cells: row {done_rows}/{rows}  "
                    f"({format_seconds_compact(elapsed)})",
                    final=done_rows == rows,
                )

    grid = np.vstack([parts[start] for start, _ in spans])
    grid.flags.writeable = False
    return TileMosaic(tile_ids=grid, cell_size=cell_size, method=str(method))


def render_mosaic(mosaic: TileMosaic, tiles: TileSet) -> U8Image:
    """
    Paste the chosen tile bitmaps onto a transparent canvas. The first tile of
    the mosaic sets the cell size of the canvas; tiles of another size are
    resized to it.
    """
    first = tiles[int(mosaic.tile_ids[0, 0])]
    tile_w, tile_h = first.width, first.height
    canvas = np.zeros((mosaic.rows * tile_h, mosaic.columns * tile_w, 4), dtype=np.uint8)

    fitted: Dict[TileId, U8Image] = {}
    for r in range(mosaic.rows):
        for c in range(mosaic.columns):
            tile_id = int(mosaic.tile_ids[r, c])
            bitmap = fitted.get(tile_id)
            if bitmap is None:
                tile = tiles[tile_id]
                bitmap = tile.rgba
                if (tile.width, tile.height) != (tile_w, tile_h):
                    bitmap = np.array(
                        Image.fromarray(tile.rgba).resize(
                            (tile_w, tile_h), Image.Resampling.LANCZOS
                        ),
                        dtype=np.uint8,
                    )
                fitted[tile_id] = bitmap
            canvas[r * tile_h : (r + 1) * tile_h, c * tile_w : (c + 1) * tile_w] = bitmap
    return canvas


def mosaic_to_text(mosaic: TileMosaic, tiles: TileSet) -> str:
    """One line per mosaic row, each cell written as its tile's characters."""
    lines: List[str] = []
    for r in range(mosaic.rows):
        lines.append("".join(tiles[int(t)].text for t in mosaic.tile_ids[r]))
    return "\n".join(lines) + "\n"


def tile_usage(mosaic: TileMosaic) -> List[Tuple[TileId, int]]:
    """(tile id, cell count) sorted by count descending, then tile id."""
    ids, counts = np.unique(mosaic.tile_ids, return_counts=True)
    pairs = [(int(i), int(n)) for i, n in zip(ids.tolist(), counts.tolist())]
    return sorted(pairs, key=lambda p: (-p[1], p[0]))


__all__ = [
    "TileMosaic",
    "cell_grid",
    "build_mosaic",
    "render_mosaic",
    "mosaic_to_text",
    "tile_usage",
]
