"""Tests for mosaic assembly, rendering and text output."""
from __future__ import annotations

import numpy as np
import pytest

from emotim.matching import NoCandidatesError
from emotim.mosaic import (
    TileMosaic,
    build_mosaic,
    cell_grid,
    mosaic_to_text,
    render_mosaic,
    tile_usage,
)
from emotim.tiles import TileSet

RED = (255, 0, 0, 255)
BLUE = (0, 0, 255, 255)


def _solid(rgba: tuple[int, int, int, int], size: int = 10) -> np.ndarray:
    return np.full((size, size, 4), rgba, dtype=np.uint8)


def _red_blue_source() -> np.ndarray:
    source = np.zeros((20, 40, 4), dtype=np.uint8)
    source[:, :20] = RED
    source[:, 20:] = BLUE
    return source


def _red_blue_tiles(blue_size: int = 10) -> TileSet:
    return TileSet.from_rasters(
        [("41", _solid(RED)), ("42", _solid(BLUE, size=blue_size))]
    )


def test_cell_grid() -> None:
    assert cell_grid(25, 47, 10) == (2, 4)
    with pytest.raises(ValueError):
        cell_grid(10, 10, 0)


@pytest.mark.parametrize("workers", [1, 3])
def test_build_mosaic_grid(workers: int) -> None:
    mosaic = build_mosaic(_red_blue_source(), _red_blue_tiles(), 10, workers=workers)
    assert (mosaic.rows, mosaic.columns) == (2, 4)
    np.testing.assert_array_equal(mosaic.tile_ids, [[0, 0, 1, 1], [0, 0, 1, 1]])
    assert mosaic.method == "correlation"


def test_partial_cells_are_dropped() -> None:
    source = np.zeros((25, 25, 4), dtype=np.uint8)
    source[...] = RED
    mosaic = build_mosaic(source, _red_blue_tiles(), 10, "maxima")
    assert mosaic.tile_ids.shape == (2, 2)
    assert mosaic.method == "maxima"


def test_build_mosaic_errors() -> None:
    with pytest.raises(ValueError):
        build_mosaic(_solid(RED, size=5), _red_blue_tiles(), 10)
    with pytest.raises(NoCandidatesError):
        build_mosaic(_red_blue_source(), TileSet([]), 10)
    with pytest.raises(ValueError):
        build_mosaic(_red_blue_source(), _red_blue_tiles(), 10, "nearest")


def test_render_mosaic() -> None:
    tiles = _red_blue_tiles()
    mosaic = build_mosaic(_red_blue_source(), tiles, 10)
    canvas = render_mosaic(mosaic, tiles)
    assert canvas.shape == (20, 40, 4)
    np.testing.assert_array_equal(canvas[0, 0], RED)
    np.testing.assert_array_equal(canvas[19, 39], BLUE)


def test_render_resizes_odd_tiles() -> None:
    tiles = _red_blue_tiles(blue_size=20)
    mosaic = TileMosaic(np.array([[0, 1]], dtype=np.int32), 10, "correlation")
    canvas = render_mosaic(mosaic, tiles)
    assert canvas.shape == (10, 20, 4)
    np.testing.assert_allclose(canvas[5, 15].astype(int), BLUE, atol=1)


def test_mosaic_to_text() -> None:
    tiles = _red_blue_tiles()
    mosaic = build_mosaic(_red_blue_source(), tiles, 10)
    assert mosaic_to_text(mosaic, tiles) == "AABB\nAABB\n"


def test_tile_usage() -> None:
    mosaic = TileMosaic(np.array([[1, 0, 1], [2, 1, 0]], dtype=np.int32), 10, "maxima")
    assert tile_usage(mosaic) == [(1, 3), (0, 2), (2, 1)]
