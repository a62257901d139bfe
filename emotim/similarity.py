# emotim/similarity.py
from __future__ import annotations

"""
Similarity between two histograms.

Methods:
  maxima      : every maximum against every other; 5 / Manhattan distance,
                scaled by the product of both masses / 2. Hue is linear here,
                so hue 0 and hue 15 (both red) count as far apart.
  angular     : like maxima, but chroma and hue form a polar plane (hue wraps
                around its 16 steps, its influence grows with chroma) and the
                mass product is square-root damped.
  correlation : dot product of the two smoothed fields.

All methods are commutative and give 0 when either side has no colour.
"""

import math
from typing import Callable, Dict, List, Literal

import numpy as np

from .constants import CLOSENESS_SCALE, DEPTH_LEVELS, MIN_PAIR_DISTANCE
from .core_types import CoarsePixel
from .histogram import Histogram

SimilarityMethod = Literal["maxima", "angular", "correlation"]
Scorer = Callable[[Histogram, Histogram], float]


def angular_distance(p: CoarsePixel, q: CoarsePixel) -> float:
    """
    Euclidean distance in a cylinder: chroma is the radius, hue the angle
    (16 steps per turn), lightness the axis.
    """
    dh = abs(p.h - q.h) % DEPTH_LEVELS
    dh = min(dh, DEPTH_LEVELS - dh)
    angle = 2.0 * math.pi * dh / DEPTH_LEVELS
    planar = p.c * p.c + q.c * q.c - 2.0 * (p.c * q.c) * math.cos(angle)
    dl = p.l - q.l
    return math.sqrt(max(planar, 0.0) + dl * dl)


def similarity_by_maxima(first: Histogram, second: Histogram) -> float:
    """Compare each maximum with every other one, weighted by both masses."""
    terms: List[float] = []
    for mine in first.maxima:
        for other in second.maxima:
            dist = max(float(mine.position.distance(other.position)), MIN_PAIR_DISTANCE)
            terms.append(CLOSENESS_SCALE / dist * (mine.mass * other.mass) / 2.0)
    return math.fsum(terms)


def similarity_by_angular_maxima(first: Histogram, second: Histogram) -> float:
    """Pairwise maxima with circular hue and root-damped masses."""
    terms: List[float] = []
    for mine in first.maxima:
        for other in second.maxima:
            dist = max(angular_distance(mine.position, other.position), MIN_PAIR_DISTANCE)
            terms.append(CLOSENESS_SCALE / dist * math.sqrt(mine.mass * other.mass))
    return math.fsum(terms)


def similarity_by_correlation(first: Histogram, second: Histogram) -> float:
    """Correlate the smoothed fields cell by cell."""
    a = first.smoothed.reshape(-1).astype(np.int64, copy=False)
    b = second.smoothed.reshape(-1).astype(np.int64, copy=False)
    return float(np.dot(a, b))


SIMILARITY_METHODS: Dict[str, Scorer] = {
    "maxima": similarity_by_maxima,
    "angular": similarity_by_angular_maxima,
    "correlation": similarity_by_correlation,
}


def resolve_method(method: str) -> Scorer:
    """Look up a scorer by name."""
    try:
        return SIMILARITY_METHODS[method]
    except KeyError:
        known = ", ".join(sorted(SIMILARITY_METHODS))
        raise ValueError(f"unknown similarity method {method!r} (known: {known})") from None


def similarity(
    first: Histogram, second: Histogram, method: SimilarityMethod = "correlation"
) -> float:
    return resolve_method(method)(first, second)


__all__ = [
    "SimilarityMethod",
    "Scorer",
    "angular_distance",
    "similarity_by_maxima",
    "similarity_by_angular_maxima",
    "similarity_by_correlation",
    "SIMILARITY_METHODS",
    "resolve_method",
    "similarity",
]
