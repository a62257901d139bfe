# emotim/depth.py
from __future__ import annotations

"""
Full depth and reduced depth perceptual images.

Reduced depth keeps 16 steps for each of h, c and l (4096 colours in total)
and a single on/off bit for alpha (on above ~80% opacity). Reduction and
extension are explicit, lossy, and never happen implicitly.

Exports:
  reduce_pixel(p) / extend_pixel(p)
  reduce_pixels(arr) / extend_pixels(arr)
  PerceptualImage, CoarseImage
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from .colour_convert import perceptual_to_rgba, rgba_to_perceptual_threaded
from .constants import ALPHA_CUTOFF, DEPTH_LEVELS, DEPTH_STEP
from .core_types import (
    CoarsePixel,
    PerceptualPixel,
    PixelRows,
    U8Image,
    assert_pixel_rows,
    assert_u8_image_rgba,
)

if TYPE_CHECKING:
    from .histogram import Histogram


# Pixel transforms


def reduce_pixels(pixels: np.ndarray) -> np.ndarray:
    """Full depth (...,4) -> reduced depth (...,4): h,c,l // 16, alpha -> 0/1."""
    arr = np.asarray(pixels, dtype=np.uint8)
    out = np.empty_like(arr)
    out[..., :3] = arr[..., :3] // DEPTH_STEP
    out[..., 3] = (arr[..., 3] > ALPHA_CUTOFF).astype(np.uint8)
    return out


def extend_pixels(pixels: np.ndarray) -> np.ndarray:
    """Reduced depth (...,4) -> full depth (...,4): h,c,l * 16, alpha * 255."""
    arr = np.asarray(pixels, dtype=np.uint8)
    out = np.empty_like(arr)
    out[..., :3] = arr[..., :3] * DEPTH_STEP
    out[..., 3] = arr[..., 3] * 255
    return out


def reduce_pixel(pixel: PerceptualPixel) -> CoarsePixel:
    h, c, l, a = (int(v) for v in pixel)
    return CoarsePixel(
        h // DEPTH_STEP,
        c // DEPTH_STEP,
        l // DEPTH_STEP,
        1 if a > ALPHA_CUTOFF else 0,
    )


def extend_pixel(pixel: CoarsePixel) -> PerceptualPixel:
    h, c, l, a = (int(v) for v in pixel)
    return PerceptualPixel(h * DEPTH_STEP, c * DEPTH_STEP, l * DEPTH_STEP, a * 255)


def _frozen_rows(pixels: np.ndarray) -> PixelRows:
    rows = np.array(pixels, dtype=np.uint8, copy=True)
    rows.flags.writeable = False
    return rows


# Images


@dataclass(frozen=True)
class PerceptualImage:
    """Full depth perceptual image. pixels is row-major (width*height, 4)."""

    pixels: PixelRows
    width: int
    height: int

    def __post_init__(self) -> None:
        assert_pixel_rows(self.pixels, self.width, self.height)
        object.__setattr__(self, "pixels", _frozen_rows(self.pixels))

    @classmethod
    def from_rgba(cls, rgba: U8Image, workers: int = 1) -> "PerceptualImage":
        """Convert an RGBA raster (H,W,4) into perceptual colour space."""
        assert_u8_image_rgba(rgba)
        height, width = int(rgba.shape[0]), int(rgba.shape[1])
        converted = rgba_to_perceptual_threaded(rgba, workers)
        return cls(converted.reshape(-1, 4), width, height)

    def get(self, x: int, y: int) -> PerceptualPixel:
        h, c, l, a = (int(v) for v in self.pixels[y * self.width + x])
        return PerceptualPixel(h, c, l, a)

    def to_rgba(self) -> U8Image:
        """Back to an RGBA raster (H,W,4). Lossy."""
        return perceptual_to_rgba(self.pixels).reshape(self.height, self.width, 4)

    def reduce_depth(self) -> "CoarseImage":
        return CoarseImage(reduce_pixels(self.pixels), self.width, self.height)


@dataclass(frozen=True)
class CoarseImage:
    """
    Reduced depth perceptual image.

    * h: 16 steps
    * c: 16 steps
    * l: 16 steps
    * a: on (>80%) / off
    """

    pixels: PixelRows
    width: int
    height: int

    def __post_init__(self) -> None:
        assert_pixel_rows(self.pixels, self.width, self.height)
        if self.pixels.size:
            if int(self.pixels[:, :3].max()) >= DEPTH_LEVELS:
                raise ValueError("reduced depth h/c/l must be below 16")
            if int(self.pixels[:, 3].max()) > 1:
                raise ValueError("reduced depth alpha must be 0 or 1")
        object.__setattr__(self, "pixels", _frozen_rows(self.pixels))

    def get(self, x: int, y: int) -> CoarsePixel:
        h, c, l, a = (int(v) for v in self.pixels[y * self.width + x])
        return CoarsePixel(h, c, l, a)

    def extend_depth(self) -> PerceptualImage:
        return PerceptualImage(extend_pixels(self.pixels), self.width, self.height)

    def visible_count(self) -> int:
        return int(np.count_nonzero(self.pixels[:, 3]))

    def to_rgba(self) -> U8Image:
        """Preview raster of the coarse colours (extend, then convert)."""
        return self.extend_depth().to_rgba()

    def histogram(self, **kwargs) -> "Histogram":
        """Calculate a histogram, smooth it and find local maxima."""
        from .histogram import Histogram

        return Histogram.from_coarse_image(self, **kwargs)


__all__ = [
    "reduce_pixels",
    "extend_pixels",
    "reduce_pixel",
    "extend_pixel",
    "PerceptualImage",
    "CoarseImage",
]
