# emotim/__init__.py
"""
emotim package.

Purpose:
  Turn images into mosaics of small tiles (emoticons) picked by perceptual
  colour histograms. See make_mosaic.py for the CLI.

Public API:
  colour_convert : RGBA <-> perceptual (h, c, l, a) transforms.
  depth          : PerceptualImage / CoarseImage and depth reduction.
  histogram      : Histogram (distribution, smoothed field, maxima).
  similarity     : histogram similarity methods (maxima, angular, correlation).
  tiles          : tile identifiers, Tile, TileSet, load_tile_library.
  matching       : best_match, NoCandidatesError.
  mosaic         : build_mosaic, render_mosaic, mosaic_to_text.
  image_io       : decode/encode/load/save RGBA.
  utils          : shared helpers (formatting, logging).

Quick start:
  from emotim import load_tile_library, build_mosaic, render_mosaic
  tiles = load_tile_library(Path("assets/emoticons"))
  mosaic = build_mosaic(rgba, tiles, cell_size=20, method="maxima")
"""

__version__ = "0.2.0"

# Re-export namespaces for convenience.
from . import colour_convert
from . import core_types
from . import depth
from . import histogram
from . import similarity
from . import tiles
from . import matching
from . import mosaic
from . import image_io
from . import utils

from .depth import CoarseImage, PerceptualImage  # noqa: E402
from .histogram import Histogram, histogram_from_rgba  # noqa: E402
from .similarity import SimilarityMethod, similarity as histogram_similarity  # noqa: E402
from .tiles import Tile, TileSet, load_tile_library  # noqa: E402
from .matching import NoCandidatesError, best_match  # noqa: E402
from .mosaic import TileMosaic, build_mosaic, mosaic_to_text, render_mosaic  # noqa: E402

__all__ = [
    "__version__",
    "colour_convert",
    "core_types",
    "depth",
    "histogram",
    "similarity",
    "tiles",
    "matching",
    "mosaic",
    "image_io",
    "utils",
    "PerceptualImage",
    "CoarseImage",
    "Histogram",
    "histogram_from_rgba",
    "SimilarityMethod",
    "histogram_similarity",
    "Tile",
    "TileSet",
    "load_tile_library",
    "NoCandidatesError",
    "best_match",
    "TileMosaic",
    "build_mosaic",
    "render_mosaic",
    "mosaic_to_text",
]
