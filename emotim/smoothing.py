# emotim/smoothing.py
from __future__ import annotations

"""
3D smoothing of a reduced depth colour histogram.

Kernel (outer product of 1-2-1 along h, c and l):

             1-----2------1
        2    | 4     2    |
   1------2------1        |
   |         |   |        |
   |         2   | 4      2
   |    4    | 8 |    4   |
   2      4  |   2        |
   |         |   |        |
   |         1---|-2------1
   |    2      4 |   2
   1------2------1

   ^ h    > c     / l

   sum = 8*1 + 12*2 + 6*4 + 8 = 64

Only interior cells (index 1..14 on every axis) are computed; the outer shell
of the result stays 0 so no lookup ever leaves the cube.
"""

from typing import Iterator, Tuple

import numpy as np

from .constants import DEPTH_LEVELS, SMOOTH_KERNEL
from .core_types import CountCube

Offset = Tuple[int, int, int]


def neighbour_offsets(include_centre: bool = True) -> Iterator[Offset]:
    """All (dh, dc, dl) offsets of the 3x3x3 block in h, c, l scan order."""
    for dh in (-1, 0, 1):
        for dc in (-1, 0, 1):
            for dl in (-1, 0, 1):
                if not include_centre and dh == dc == dl == 0:
                    continue
                yield (dh, dc, dl)


def interior_view(cube: np.ndarray, offset: Offset = (0, 0, 0)) -> np.ndarray:
    """
    View of the 14x14x14 interior shifted by offset.
    interior_view(cube, (dh, dc, dl))[i, j, k] == cube[1+i+dh, 1+j+dc, 1+k+dl]
    """
    dh, dc, dl = offset
    hi = DEPTH_LEVELS - 1
    return cube[1 + dh : hi + dh, 1 + dc : hi + dc, 1 + dl : hi + dl]


def smooth(distribution: np.ndarray) -> CountCube:
    """Convolve a (16,16,16) count cube with the 1-2-1 kernel; border stays 0."""
    counts = np.asarray(distribution, dtype=np.int64)
    if counts.shape != (DEPTH_LEVELS,) * 3:
        raise ValueError(f"expected a {DEPTH_LEVELS}^3 cube, got {counts.shape}")

    smoothed = np.zeros_like(counts)
    acc = interior_view(smoothed)
    for dh, dc, dl in neighbour_offsets():
        weight = int(SMOOTH_KERNEL[dh + 1, dc + 1, dl + 1])
        acc += weight * interior_view(counts, (dh, dc, dl))
    return smoothed


__all__ = ["neighbour_offsets", "interior_view", "smooth"]
