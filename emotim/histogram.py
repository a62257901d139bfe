# emotim/histogram.py
from __future__ import annotations

"""
Histogram over all colours of a reduced depth perceptual image.

Exports:
  build_distribution(coarse_image) -> (16,16,16) counts
  Histogram.from_coarse_image(coarse_image, max_maxima=5, min_mass=1.0)
  histogram_from_rgba(rgba, ...)
  format_smoothed_field(histogram)
"""

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .constants import DEPTH_LEVELS, MAX_MAXIMA, MIN_MAXIMUM_MASS
from .core_types import CountCube, Maximum, U8Image
from .depth import CoarseImage, PerceptualImage
from .maxima import find_maxima
from .smoothing import smooth


def build_distribution(image: CoarseImage) -> CountCube:
    """
    Count visible pixels per (h, c, l) cell. Pixels with alpha 0 are
    background and contribute no colour.
    """
    px = image.pixels
    visible = px[:, 3] == 1
    h = px[visible, 0].astype(np.int64)
    c = px[visible, 1].astype(np.int64)
    l = px[visible, 2].astype(np.int64)
    flat = (h * DEPTH_LEVELS + c) * DEPTH_LEVELS + l
    counts = np.bincount(flat, minlength=DEPTH_LEVELS**3)
    return counts.astype(np.int64).reshape((DEPTH_LEVELS,) * 3)


def _read_only(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True)
class Histogram:
    """
    distribution : colour counts, index [h][c][l]
    smoothed     : 1-2-1 kernel smoothed counts, same indexing, border 0
    maxima       : significant local maxima of smoothed, smallest mass first
    """

    distribution: CountCube
    smoothed: CountCube
    maxima: Tuple[Maximum, ...]

    @classmethod
    def from_distribution(
        cls,
        distribution: np.ndarray,
        *,
        max_maxima: int = MAX_MAXIMA,
        min_mass: float = MIN_MAXIMUM_MASS,
    ) -> "Histogram":
        counts = np.array(distribution, dtype=np.int64, copy=True)
        if counts.shape != (DEPTH_LEVELS,) * 3:
            raise ValueError(f"expected a {DEPTH_LEVELS}^3 cube, got {counts.shape}")
        if counts.size and int(counts.min()) < 0:
            raise ValueError("histogram counts must be non-negative")
        smoothed = smooth(counts)
        maxima = find_maxima(smoothed, max_maxima=max_maxima, min_mass=min_mass)
        return cls(_read_only(counts), _read_only(smoothed), tuple(maxima))

    @classmethod
    def from_coarse_image(
        cls,
        image: CoarseImage,
        *,
        max_maxima: int = MAX_MAXIMA,
        min_mass: float = MIN_MAXIMUM_MASS,
    ) -> "Histogram":
        """Calculate a histogram, smooth it and find local maxima."""
        return cls.from_distribution(
            build_distribution(image), max_maxima=max_maxima, min_mass=min_mass
        )

    @property
    def total(self) -> int:
        return int(self.distribution.sum())

    def is_empty(self) -> bool:
        return not self.maxima and not self.smoothed.any()


def histogram_from_rgba(
    rgba: U8Image,
    *,
    max_maxima: int = MAX_MAXIMA,
    min_mass: float = MIN_MAXIMUM_MASS,
) -> Histogram:
    """RGBA raster -> perceptual -> reduced depth -> histogram."""
    coarse = PerceptualImage.from_rgba(rgba).reduce_depth()
    return Histogram.from_coarse_image(
        coarse, max_maxima=max_maxima, min_mass=min_mass
    )


def format_smoothed_field(hist: Histogram) -> str:
    """
    Text dump of the smoothed field: one block per hue, rows are chroma,
    columns are lightness.
    """
    lines: List[str] = []
    header = "".join(f"{il:4}" for il in range(DEPTH_LEVELS))
    for ih in range(DEPTH_LEVELS):
        lines.append("")
        lines.append(f"h:{ih}")
        lines.append(f"      l:    {header}")
        for ic in range(DEPTH_LEVELS):
            row = "".join(f"{int(v):4}" for v in hist.smoothed[ih, ic])
            lines.append(f" c:{ic:4}  # {row} #")
    for m in reversed(hist.maxima):
        p = m.position
        lines.append(f"max h={p.h} c={p.c} l={p.l} mass={m.mass:.2f}")
    return "\n".join(lines)


__all__ = [
    "build_distribution",
    "Histogram",
    "histogram_from_rgba",
    "format_smoothed_field",
]
