# emotim/core_types.py
from __future__ import annotations

"""
Core type aliases, small value objects, and lightweight helpers.
"""

from dataclasses import dataclass
from typing import NamedTuple, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

# Basic aliases

RGBATuple = Tuple[int, int, int, int]
TileId = int
CodePoints = Tuple[int, ...]

U8Image = NDArray[np.uint8]  # (H, W, 4) RGBA
PixelRows = NDArray[np.uint8]  # (N, 4) row-major h,c,l,a
CountCube = NDArray[np.int64]  # (16, 16, 16) indexed [h, c, l]

# Value objects


class PerceptualPixel(NamedTuple):
    """Full depth pixel: hue code, chroma, lightness and alpha, each 0..255."""

    h: int
    c: int
    l: int
    a: int


class CoarsePixel(NamedTuple):
    """Reduced depth pixel: h, c, l in 0..15, alpha 0 or 1."""

    h: int
    c: int
    l: int
    a: int

    def distance(self, other: "CoarsePixel") -> int:
        """Manhattan distance over h, c, l, a. Hue is treated as linear."""
        return (
            abs(self.h - other.h)
            + abs(self.c - other.c)
            + abs(self.l - other.l)
            + abs(self.a - other.a)
        )


@dataclass(frozen=True)
class Maximum:
    """Local peak of a smoothed histogram with its estimated mass."""

    position: CoarsePixel
    mass: float


# Small helpers


def coerce_to_rgba_tuple(
    value: Union[Sequence[int], NDArray[np.generic]]
) -> RGBATuple:
    """
    Coerce a 3 or 4 length sequence or array to an (r, g, b, a) tuple.
    Missing alpha is treated as fully opaque.
    """
    if isinstance(value, np.ndarray):
        value = value.reshape(-1).tolist()
    if len(value) not in (3, 4):
        raise ValueError("expected 3 or 4 channels for RGBA")
    r, g, b = int(value[0]), int(value[1]), int(value[2])
    a = int(value[3]) if len(value) == 4 else 255
    return (r, g, b, a)


def assert_u8_image_rgba(image: np.ndarray) -> U8Image:
    """Validate a uint8 (H,W,4) image and return it typed as U8Image."""
    if image.dtype != np.uint8 or image.ndim != 3 or image.shape[-1] != 4:
        raise TypeError("expected uint8 (H,W,4) RGBA image")
    return image  # type: ignore[return-value]


def assert_pixel_rows(pixels: np.ndarray, width: int, height: int) -> PixelRows:
    """
    Validate a row-major (N,4) uint8 pixel buffer against its declared size.
    Never truncates: a length mismatch is a hard error.
    """
    if pixels.dtype != np.uint8 or pixels.ndim != 2 or pixels.shape[1] != 4:
        raise TypeError("expected uint8 (N,4) pixel buffer")
    if width < 0 or height < 0:
        raise ValueError(f"invalid image size {width}x{height}")
    if pixels.shape[0] != width * height:
        raise ValueError(
            f"pixel buffer has {pixels.shape[0]} entries, expected {width}x{height}"
            f" = {width * height}"
        )
    return pixels  # type: ignore[return-value]


__all__ = [
    # aliases / types
    "RGBATuple",
    "TileId",
    "CodePoints",
    "U8Image",
    "PixelRows",
    "CountCube",
    # value objects
    "PerceptualPixel",
    "CoarsePixel",
    "Maximum",
    # helpers
    "coerce_to_rgba_tuple",
    "assert_u8_image_rgba",
    "assert_pixel_rows",
]
