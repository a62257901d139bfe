# emotim/colour_convert.py
from __future__ import annotations

"""
RGBA <-> perceptual (hue, chroma, lightness, alpha) conversions.

Exports:
  rgba_to_perceptual(rgba)
  perceptual_to_rgba(pixels)
  to_perceptual(rgba)        single pixel
  to_rgba(pixel)             single pixel
  rgba_to_perceptual_threaded(rgba, workers)

The forward transform skips the hexagon to circle correction and uses the
simplified projection:

  alpha = r - (g + b) / 2
  beta  = sqrt(3) / 2 * (g - b)
  h     = atan2(beta, alpha)       (128 codes per pi, wrapped to 0..255)
  c     = hypot(alpha, beta)
  l     = 0.3 r + 0.59 g + 0.11 b

Hue has no meaning when c is 0 (greys) or l sits at 0 or 255.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

import numpy as np

from .constants import HUE_CODES, HUE_CODES_PER_PI, LUMA_WEIGHTS, SQRT3_HALF
from .core_types import PerceptualPixel, RGBATuple, coerce_to_rgba_tuple
from .utils import split_rows_into_parts

_LUMA = np.array(LUMA_WEIGHTS, dtype=np.float64)
_INV_SQRT3 = 1.0 / math.sqrt(3.0)

# Channel order per hue sector; 0 -> C, 1 -> X, 2 -> zero.
_SECTOR_ORDER = np.array(
    [
        [0, 1, 2],  # red..yellow      (C, X, 0)
        [1, 0, 2],  # yellow..green    (X, C, 0)
        [2, 0, 1],  # green..cyan      (0, C, X)
        [2, 1, 0],  # cyan..blue       (0, X, C)
        [1, 2, 0],  # blue..magenta    (X, 0, C)
        [0, 2, 1],  # magenta..red     (C, 0, X)
    ],
    dtype=np.intp,
)


def _with_alpha(rgba: np.ndarray) -> np.ndarray:
    arr = np.asarray(rgba)
    if arr.shape[-1] == 4:
        return arr
    if arr.shape[-1] != 3:
        raise ValueError(f"expected 3 or 4 channels, got shape {arr.shape}")
    alpha = np.full(arr.shape[:-1] + (1,), 255, dtype=arr.dtype)
    return np.concatenate([arr, alpha], axis=-1)


# RGBA -> perceptual


def rgba_to_perceptual(rgba: np.ndarray) -> np.ndarray:
    """
    RGBA[...,4] (or RGB[...,3], treated as opaque) in 0..255 to perceptual
    h, c, l, a bytes. Vectorised, shape preserved. Returns uint8.
    """
    arr = _with_alpha(rgba)
    rgb = arr[..., :3].astype(np.float64)
    r = rgb[..., 0]
    g = rgb[..., 1]
    b = rgb[..., 2]

    alpha_axis = r - 0.5 * (g + b)
    beta_axis = SQRT3_HALF * (g - b)

    # Negative angles wrap by a full turn; 256 folds back to 0.
    hue = np.rint(np.arctan2(beta_axis, alpha_axis) * (HUE_CODES_PER_PI / math.pi))
    hue = np.mod(hue, HUE_CODES)
    chroma = np.clip(np.rint(np.hypot(alpha_axis, beta_axis)), 0.0, 255.0)
    lightness = np.clip(np.rint(rgb @ _LUMA), 0.0, 255.0)

    out = np.empty(arr.shape, dtype=np.uint8)
    out[..., 0] = hue.astype(np.uint8)
    out[..., 1] = chroma.astype(np.uint8)
    out[..., 2] = lightness.astype(np.uint8)
    out[..., 3] = np.clip(arr[..., 3], 0, 255).astype(np.uint8)
    return out


# Perceptual -> RGBA


def perceptual_to_rgba(pixels: np.ndarray) -> np.ndarray:
    """
    Perceptual h, c, l, a [...,4] back to RGBA uint8. Lossy.

    Six-sector decomposition: the chroma vector is folded onto the nearest
    primary axis, split into the largest channel C and intermediate X, and
    permuted per sector. A lightness offset m restores the luma. Results that
    leave 0..255 are shifted as a whole so the hue is not skewed; only a
    triple wider than 255 gets clipped.
    """
    arr = np.asarray(pixels)
    if arr.shape[-1] != 4:
        raise ValueError(f"expected (...,4) perceptual pixels, got shape {arr.shape}")
    hue = arr[..., 0].astype(np.float64)
    chroma = arr[..., 1].astype(np.float64)
    lightness = arr[..., 2].astype(np.float64)

    hue_deg = hue * (360.0 / HUE_CODES)
    sector = np.floor(hue_deg / 60.0).astype(np.intp) % 6

    # Angle to the nearest primary (0, 120, 240 degrees), in [0, 60].
    local = np.mod(hue_deg, 120.0)
    phi = np.radians(np.where(local <= 60.0, local, 120.0 - local))
    cos_phi = np.cos(phi)
    sin_phi = np.sin(phi)

    top = chroma * (cos_phi + sin_phi * _INV_SQRT3)
    mid = chroma * (2.0 * sin_phi * _INV_SQRT3)
    values = np.stack([top, mid, np.zeros_like(top)], axis=-1)
    rgb = np.take_along_axis(values, _SECTOR_ORDER[sector], axis=-1)

    m = lightness - rgb @ _LUMA
    rgb = rgb + m[..., None]

    low = rgb.min(axis=-1)
    rgb = rgb + np.where(low < 0.0, -low, 0.0)[..., None]
    high = rgb.max(axis=-1)
    rgb = rgb - np.where(high > 255.0, high - 255.0, 0.0)[..., None]

    out = np.empty(arr.shape, dtype=np.uint8)
    out[..., :3] = np.clip(np.rint(rgb), 0.0, 255.0).astype(np.uint8)
    out[..., 3] = arr[..., 3]
    return out


# Single pixel helpers


def to_perceptual(rgba: Sequence[int] | np.ndarray) -> PerceptualPixel:
    """Convert one RGBA (or RGB) pixel to a full depth PerceptualPixel."""
    px = np.array([coerce_to_rgba_tuple(rgba)], dtype=np.int64)
    h, c, l, a = (int(v) for v in rgba_to_perceptual(px)[0])
    return PerceptualPixel(h, c, l, a)


def to_rgba(pixel: Sequence[int]) -> RGBATuple:
    """Convert one full depth perceptual pixel back to an RGBA tuple."""
    px = np.array([tuple(pixel)], dtype=np.uint8)
    r, g, b, a = (int(v) for v in perceptual_to_rgba(px)[0])
    return (r, g, b, a)


# Threaded helpers


def rgba_to_perceptual_threaded(rgba: np.ndarray, workers: int) -> np.ndarray:
    """
    Threaded RGBA->perceptual conversion by splitting rows.

    Args:
      rgba: uint8 array [H,W,4]
      workers: number of threads; if <=1 or H<256, runs single-threaded
    Returns:
      uint8 array [H,W,4]
    """
    height = int(rgba.shape[0])
    if workers <= 1 or height < 256:
        return rgba_to_perceptual(rgba)

    chunks = split_rows_into_parts(height, workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(rgba_to_perceptual, rgba[s:e]) for s, e in chunks]
        parts = [f.result() for f in futures]
    return np.vstack(parts)


__all__ = [
    "rgba_to_perceptual",
    "perceptual_to_rgba",
    "to_perceptual",
    "to_rgba",
    "rgba_to_perceptual_threaded",
]
