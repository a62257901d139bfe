# emotim/matching.py
from __future__ import annotations

"""
Best tile selection for one region of a source image.
"""

from typing import Sequence, Tuple

from .constants import DEFAULT_METHOD, MAX_MAXIMA, MIN_MAXIMUM_MASS
from .core_types import TileId, U8Image
from .histogram import Histogram, histogram_from_rgba
from .similarity import SimilarityMethod, resolve_method
from .tiles import TileSet


class NoCandidatesError(LookupError):
    """Raised when a best match is requested from an empty tile set."""


def score_tiles(
    hist: Histogram, tiles: TileSet, method: SimilarityMethod = DEFAULT_METHOD
) -> Sequence[float]:
    """Similarity of hist against every tile, in tile id order."""
    scorer = resolve_method(method)
    return [scorer(tile.histogram, hist) for tile in tiles]


def best_match_for_histogram(
    hist: Histogram, tiles: TileSet, method: SimilarityMethod = DEFAULT_METHOD
) -> Tuple[TileId, float]:
    """
    Highest scoring tile id and its score. Ties keep the first tile seen.
    Raises NoCandidatesError if tiles is empty.
    """
    if len(tiles) == 0:
        raise NoCandidatesError("no candidate tiles to match against")
    scorer = resolve_method(method)
    best_id = 0
    best_score = scorer(tiles[0].histogram, hist)
    for tile in tiles:
        if tile.tile_id == 0:
            continue
        score = scorer(tile.histogram, hist)
        if score > best_score:
            best_id, best_score = tile.tile_id, score
    return best_id, best_score


def best_match(
    region_rgba: U8Image,
    tiles: TileSet,
    method: SimilarityMethod = DEFAULT_METHOD,
    *,
    max_maxima: int = MAX_MAXIMA,
    min_mass: float = MIN_MAXIMUM_MASS,
) -> TileId:
    """Tile id whose histogram is most similar to the region's."""
    if len(tiles) == 0:
        raise NoCandidatesError("no candidate tiles to match against")
    hist = histogram_from_rgba(region_rgba, max_maxima=max_maxima, min_mass=min_mass)
    return best_match_for_histogram(hist, tiles, method)[0]


__all__ = [
    "NoCandidatesError",
    "score_tiles",
    "best_match_for_histogram",
    "best_match",
]
