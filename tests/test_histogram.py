"""Tests for colour histograms: counting, smoothing and local maxima."""
from __future__ import annotations

import numpy as np
import pytest

from emotim.core_types import CoarsePixel, Maximum
from emotim.depth import PerceptualImage
from emotim.histogram import (
    Histogram,
    build_distribution,
    format_smoothed_field,
    histogram_from_rgba,
)
from emotim.maxima import find_maxima, peak_mask, prune_maxima
from emotim.smoothing import neighbour_offsets, smooth

RED = (255, 0, 0, 255)
ORANGE = (255, 165, 0, 255)


def _solid(rgba: tuple[int, int, int, int], size: int = 10) -> np.ndarray:
    return np.full((size, size, 4), rgba, dtype=np.uint8)


def _cube(*cells: tuple[tuple[int, int, int], int]) -> np.ndarray:
    counts = np.zeros((16, 16, 16), dtype=np.int64)
    for (h, c, l), n in cells:
        counts[h, c, l] = n
    return counts


def test_distribution_counts_visible_pixels_only() -> None:
    rng = np.random.default_rng(3)
    rgba = rng.integers(0, 256, size=(20, 17, 4), dtype=np.uint8)
    coarse = PerceptualImage.from_rgba(rgba).reduce_depth()
    dist = build_distribution(coarse)
    assert dist.shape == (16, 16, 16)
    assert int(dist.sum()) == int(np.count_nonzero(rgba[..., 3] > 204))


def test_transparent_image_has_empty_histogram() -> None:
    hist = histogram_from_rgba(_solid((255, 0, 0, 0), size=5))
    assert hist.total == 0
    assert hist.maxima == ()
    assert not hist.smoothed.any()
    assert hist.is_empty()


def test_neighbour_offsets() -> None:
    assert len(list(neighbour_offsets())) == 27
    offsets = list(neighbour_offsets(include_centre=False))
    assert len(offsets) == 26
    assert (0, 0, 0) not in offsets
    assert offsets == sorted(offsets)


def test_kernel_around_single_count() -> None:
    smoothed = smooth(_cube(((5, 5, 5), 1)))
    assert smoothed[5, 5, 5] == 8
    assert smoothed[6, 5, 5] == 4
    assert smoothed[5, 4, 5] == 4
    assert smoothed[6, 6, 5] == 2
    assert smoothed[6, 6, 6] == 1
    assert smoothed[4, 4, 4] == 1
    assert smoothed[7, 5, 5] == 0
    assert int(smoothed.sum()) == 64


def test_border_stays_zero() -> None:
    rng = np.random.default_rng(4)
    smoothed = smooth(rng.integers(0, 50, size=(16, 16, 16)))
    for axis in range(3):
        assert not np.take(smoothed, 0, axis=axis).any()
        assert not np.take(smoothed, 15, axis=axis).any()
    assert smoothed.dtype == np.int64


def test_smooth_rejects_wrong_shape() -> None:
    with pytest.raises(ValueError):
        smooth(np.zeros((8, 8, 8), dtype=np.int64))


def test_interior_peak_mass_is_its_count() -> None:
    maxima = find_maxima(smooth(_cube(((5, 5, 5), 100))))
    assert maxima == [Maximum(CoarsePixel(5, 5, 5, 1), 100.0)]


def test_plateau_yields_lowest_position() -> None:
    smoothed = smooth(_cube(((5, 5, 5), 1), ((5, 5, 6), 1)))
    assert smoothed[5, 5, 5] == smoothed[5, 5, 6] == 12
    mask = peak_mask(smoothed)
    assert mask[5, 5, 5]
    assert int(mask.sum()) == 1
    maxima = find_maxima(smoothed)
    assert [m.position for m in maxima] == [CoarsePixel(5, 5, 5, 1)]
    assert maxima[0].mass == pytest.approx(112 / 64)


_SEPARATED_PEAKS = [
    ((2, 2, 2), 10),
    ((2, 2, 5), 20),
    ((2, 2, 8), 30),
    ((2, 2, 11), 40),
    ((2, 5, 2), 50),
    ((2, 5, 5), 60),
    ((2, 5, 8), 70),
]


def test_maxima_are_capped_smallest_first() -> None:
    smoothed = smooth(_cube(*_SEPARATED_PEAKS))
    masses = [m.mass for m in find_maxima(smoothed)]
    assert masses == [30.0, 40.0, 50.0, 60.0, 70.0]
    assert len(find_maxima(smoothed, max_maxima=3)) == 3
    assert find_maxima(smoothed, max_maxima=0) == []


def test_light_maxima_are_dropped() -> None:
    smoothed = smooth(_cube(*_SEPARATED_PEAKS))
    masses = [m.mass for m in find_maxima(smoothed, max_maxima=10, min_mass=35.0)]
    assert masses == [40.0, 50.0, 60.0, 70.0]


def test_prune_rejects_negative_cap() -> None:
    with pytest.raises(ValueError):
        prune_maxima([], max_maxima=-1)


def test_solid_red_has_one_maximum() -> None:
    hist = histogram_from_rgba(_solid(RED))
    assert hist.total == 100
    assert hist.distribution[0, 15, 4] == 100
    assert hist.smoothed[1, 14, 4] == 200
    assert hist.smoothed[1, 14, 3] == hist.smoothed[1, 14, 5] == 100
    assert hist.maxima == (Maximum(CoarsePixel(1, 14, 4, 1), 6.25),)


def test_solid_orange_has_one_maximum() -> None:
    hist = histogram_from_rgba(_solid(ORANGE))
    assert len(hist.maxima) == 1
    assert hist.maxima[0].position == CoarsePixel(1, 14, 10, 1)
    assert hist.maxima[0].mass == pytest.approx(56.25)


def test_histogram_arrays_are_read_only() -> None:
    hist = histogram_from_rgba(_solid(RED))
    with pytest.raises(ValueError):
        hist.smoothed[1, 1, 1] = 5
    with pytest.raises(ValueError):
        hist.distribution[1, 1, 1] = 5


def test_from_distribution_validates() -> None:
    with pytest.raises(ValueError):
        Histogram.from_distribution(np.zeros((4, 4, 4)))
    bad = np.zeros((16, 16, 16), dtype=np.int64)
    bad[3, 3, 3] = -1
    with pytest.raises(ValueError):
        Histogram.from_distribution(bad)


def test_coarse_image_histogram_shortcut() -> None:
    coarse = PerceptualImage.from_rgba(_solid(ORANGE)).reduce_depth()
    via_image = coarse.histogram(max_maxima=2)
    direct = Histogram.from_coarse_image(coarse, max_maxima=2)
    np.testing.assert_array_equal(via_image.smoothed, direct.smoothed)
    assert via_image.maxima == direct.maxima


def test_format_smoothed_field() -> None:
    text = format_smoothed_field(histogram_from_rgba(_solid(RED)))
    assert "h:1" in text
    assert "max h=1 c=14 l=4 mass=6.25" in text
    assert text.count("h:") == 16
