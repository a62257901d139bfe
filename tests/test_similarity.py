"""Tests for histogram similarity methods."""
from __future__ import annotations

import math

import numpy as np
import pytest

from emotim.core_types import CoarsePixel
from emotim.histogram import Histogram, histogram_from_rgba
from emotim.similarity import (
    SIMILARITY_METHODS,
    angular_distance,
    resolve_method,
    similarity,
    similarity_by_angular_maxima,
    similarity_by_correlation,
    similarity_by_maxima,
)

METHODS = sorted(SIMILARITY_METHODS)


def _solid(rgba: tuple[int, int, int, int], size: int = 10) -> np.ndarray:
    return np.full((size, size, 4), rgba, dtype=np.uint8)


def _peak(h: int, c: int, l: int, count: int) -> Histogram:
    counts = np.zeros((16, 16, 16), dtype=np.int64)
    counts[h, c, l] = count
    return Histogram.from_distribution(counts)


def _samples() -> list[Histogram]:
    rng = np.random.default_rng(5)
    mixed = rng.integers(0, 256, size=(12, 12, 4), dtype=np.uint8)
    mixed[..., 3] = 255
    return [
        histogram_from_rgba(_solid((255, 0, 0, 255))),
        histogram_from_rgba(_solid((255, 165, 0, 255))),
        histogram_from_rgba(_solid((0, 0, 255, 255))),
        histogram_from_rgba(mixed),
        histogram_from_rgba(_solid((0, 0, 0, 0))),
    ]


@pytest.mark.parametrize("method", METHODS)
def test_every_method_is_symmetric(method: str) -> None:
    hists = _samples()
    for a in hists:
        for b in hists:
            assert similarity(a, b, method) == similarity(b, a, method)


@pytest.mark.parametrize("method", METHODS)
def test_empty_side_scores_zero(method: str) -> None:
    empty = histogram_from_rgba(_solid((0, 0, 0, 0)))
    red = histogram_from_rgba(_solid((255, 0, 0, 255)))
    assert similarity(empty, red, method) == 0.0
    assert similarity(red, empty, method) == 0.0
    assert similarity(empty, empty, method) == 0.0


def test_red_correlates_with_itself_more_than_with_orange() -> None:
    red = histogram_from_rgba(_solid((255, 0, 0, 255)))
    orange = histogram_from_rgba(_solid((255, 165, 0, 255)))
    assert similarity_by_correlation(red, red) == 60000.0
    assert similarity_by_correlation(red, orange) == 0.0


def test_maxima_pair_formula() -> None:
    a = _peak(5, 5, 5, 10)
    b = _peak(5, 5, 8, 20)
    assert similarity_by_maxima(a, b) == pytest.approx(5.0 / 3.0 * 200.0 / 2.0)


def test_coincident_maxima_are_finite() -> None:
    a = _peak(5, 5, 5, 10)
    assert similarity_by_maxima(a, a) == pytest.approx(500.0)
    assert similarity_by_angular_maxima(a, a) == pytest.approx(100.0)
    assert math.isfinite(similarity_by_angular_maxima(a, a))


def test_angular_distance_wraps_hue() -> None:
    near = angular_distance(CoarsePixel(0, 8, 5, 1), CoarsePixel(15, 8, 5, 1))
    far = angular_distance(CoarsePixel(0, 8, 5, 1), CoarsePixel(8, 8, 5, 1))
    assert near < far
    assert far == pytest.approx(16.0)
    assert angular_distance(CoarsePixel(0, 0, 5, 1), CoarsePixel(8, 0, 5, 1)) == 0.0


def test_hue_wrap_only_in_angular_method() -> None:
    low = _peak(1, 5, 5, 30)
    high = _peak(14, 5, 5, 30)
    middle = _peak(8, 5, 5, 30)
    # Manhattan hue is linear: 1 vs 14 is further than 1 vs 8.
    assert similarity_by_maxima(low, high) < similarity_by_maxima(low, middle)
    # On the hue circle 1 and 14 are three steps apart.
    assert similarity_by_angular_maxima(low, high) > similarity_by_angular_maxima(
        low, middle
    )


def test_coarse_pixel_distance_is_manhattan() -> None:
    assert CoarsePixel(0, 8, 5, 1).distance(CoarsePixel(15, 8, 5, 1)) == 15
    assert CoarsePixel(1, 2, 3, 1).distance(CoarsePixel(2, 4, 6, 0)) == 7


def test_resolve_method() -> None:
    assert resolve_method("maxima") is similarity_by_maxima
    assert resolve_method("angular") is similarity_by_angular_maxima
    assert resolve_method("correlation") is similarity_by_correlation
    with pytest.raises(ValueError):
        resolve_method("nearest")


def test_default_method_is_correlation() -> None:
    red = histogram_from_rgba(_solid((255, 0, 0, 255)))
    assert similarity(red, red) == similarity_by_correlation(red, red)
