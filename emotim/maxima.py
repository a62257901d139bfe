# emotim/maxima.py
from __future__ import annotations

"""
Local maxima ("dominant colour clusters") of a smoothed histogram.

Strategy:
  Look at the 26 neighbours of every non-border cell with a positive value.
  The cell is a maximum if no neighbour is greater. Neighbours that come
  before the cell in (h, c, l) order also win ties, so a plateau of equal
  adjacent values yields exactly one maximum: its lowest position.

  The mass of a maximum is the sum of its 3x3x3 block divided by the kernel
  weight (64), an estimate of how many pixels share this or a similar colour.

  Maxima are sorted smallest first; small ones are dropped until at most
  max_maxima remain and none is below min_mass.
"""

from typing import List, Sequence, Tuple

import numpy as np

from .constants import DEPTH_LEVELS, KERNEL_WEIGHT, MAX_MAXIMA, MIN_MAXIMUM_MASS
from .core_types import CoarsePixel, Maximum
from .smoothing import interior_view, neighbour_offsets


def _wins_ties(offset: Tuple[int, int, int]) -> bool:
    """True for neighbours lexicographically before the centre."""
    return offset < (0, 0, 0)


def peak_mask(smoothed: np.ndarray) -> np.ndarray:
    """
    Boolean (16,16,16) mask of local maxima with the asymmetric tie rule.
    Border cells are never maxima.
    """
    field = np.asarray(smoothed, dtype=np.int64)
    if field.shape != (DEPTH_LEVELS,) * 3:
        raise ValueError(f"expected a {DEPTH_LEVELS}^3 field, got {field.shape}")

    centre = interior_view(field)
    keep = centre > 0
    for offset in neighbour_offsets(include_centre=False):
        neighbour = interior_view(field, offset)
        if _wins_ties(offset):
            keep &= neighbour < centre
        else:
            keep &= neighbour <= centre

    mask = np.zeros(field.shape, dtype=bool)
    interior_view(mask)[...] = keep
    return mask


def block_mass(smoothed: np.ndarray, h: int, c: int, l: int) -> float:
    """Sum of the 3x3x3 block around an interior cell, normalised by 64."""
    block = np.asarray(smoothed)[h - 1 : h + 2, c - 1 : c + 2, l - 1 : l + 2]
    return float(block.sum()) / KERNEL_WEIGHT


def prune_maxima(
    maxima: Sequence[Maximum],
    *,
    max_maxima: int = MAX_MAXIMA,
    min_mass: float = MIN_MAXIMUM_MASS,
) -> List[Maximum]:
    """Sort ascending by mass, then drop from the small end."""
    if max_maxima < 0:
        raise ValueError("max_maxima must be >= 0")
    kept = sorted(maxima, key=lambda m: m.mass)
    start = 0
    while start < len(kept) and (
        len(kept) - start > max_maxima or kept[start].mass < min_mass
    ):
        start += 1
    return kept[start:]


def find_maxima(
    smoothed: np.ndarray,
    *,
    max_maxima: int = MAX_MAXIMA,
    min_mass: float = MIN_MAXIMUM_MASS,
) -> List[Maximum]:
    """
    Significant local maxima of a smoothed field, ascending by mass.
    An all-zero field yields an empty list.
    """
    mask = peak_mask(smoothed)
    found: List[Maximum] = []
    for h, c, l in np.argwhere(mask).tolist():
        found.append(
            Maximum(
                position=CoarsePixel(h, c, l, 1),
                mass=block_mass(smoothed, h, c, l),
            )
        )
    return prune_maxima(found, max_maxima=max_maxima, min_mass=min_mass)


__all__ = ["peak_mask", "block_mass", "prune_maxima", "find_maxima"]
