# emotim/constants.py
"""
Tunables used across the project.

- Colour space (luma weights, hue scale)
- Depth reduction (levels, alpha cutoff)
- Histogram smoothing and maxima selection
- Similarity scoring
- Mosaic / CLI defaults
"""
from __future__ import annotations

import math
from typing import Tuple

import numpy as np

# ===========
# Colour space
# ===========

# Lightness is a luma-weighted sum of R, G, B.
LUMA_WEIGHTS: Tuple[float, float, float] = (0.3, 0.59, 0.11)

# Hue codes per half turn. A full turn is 256 codes.
HUE_CODES_PER_PI: float = 128.0
HUE_CODES: int = 256

# Projection constant for the beta axis.
SQRT3_HALF: float = math.sqrt(3.0) / 2.0

# ===============
# Depth reduction
# ===============

# Levels per channel in the coarse space. The histogram cube is DEPTH_LEVELS^3.
DEPTH_LEVELS: int = 16

# Width of one coarse bucket on the 0..255 scale.
DEPTH_STEP: int = 256 // DEPTH_LEVELS

# Alpha above this counts as visible (~80% of 255).
ALPHA_CUTOFF: int = 204

# ==========================
# Smoothing and maxima (peaks)
# ==========================

# 3x3x3 outer product of (1, 2, 1): corners 1, edges 2, faces 4, centre 8.
KERNEL_1D = np.array([1, 2, 1], dtype=np.int64)
SMOOTH_KERNEL = (
    KERNEL_1D[:, None, None] * KERNEL_1D[None, :, None] * KERNEL_1D[None, None, :]
)

# Sum of all kernel weights; used to normalise maxima mass.
KERNEL_WEIGHT: float = float(SMOOTH_KERNEL.sum())

# Keep at most this many maxima per histogram.
MAX_MAXIMA: int = 5

# Drop maxima whose mass is below this.
MIN_MAXIMUM_MASS: float = 1.0

# ==========
# Similarity
# ==========

# Numerator of the pairwise closeness term.
CLOSENESS_SCALE: float = 5.0

# Distance used when two maxima coincide, keeps closeness finite.
MIN_PAIR_DISTANCE: float = 0.5

DEFAULT_METHOD: str = "correlation"

# ==============
# Mosaic and CLI
# ==============

# Edge length in source pixels of one mosaic cell.
DEFAULT_CELL_SIZE: int = 20

# Default tile folder, relative to the working directory.
DEFAULT_TILE_DIR: str = "assets/emoticons"

TILE_EXTENSIONS = (".png", ".gif", ".webp", ".jpg", ".jpeg")

__all__ = [
    "LUMA_WEIGHTS",
    "HUE_CODES_PER_PI",
    "HUE_CODES",
    "SQRT3_HALF",
    "DEPTH_LEVELS",
    "DEPTH_STEP",
    "ALPHA_CUTOFF",
    "KERNEL_1D",
    "SMOOTH_KERNEL",
    "KERNEL_WEIGHT",
    "MAX_MAXIMA",
    "MIN_MAXIMUM_MASS",
    "CLOSENESS_SCALE",
    "MIN_PAIR_DISTANCE",
    "DEFAULT_METHOD",
    "DEFAULT_CELL_SIZE",
    "DEFAULT_TILE_DIR",
    "TILE_EXTENSIONS",
]
