"""Tests for image decode/encode and file helpers."""
from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from emotim.image_io import (
    decode_rgba,
    encode_png,
    is_image_file,
    load_image_rgba,
    save_image_rgba,
)


def test_png_bytes_round_trip() -> None:
    rng = np.random.default_rng(6)
    rgba = rng.integers(0, 256, size=(7, 9, 4), dtype=np.uint8)
    np.testing.assert_array_equal(decode_rgba(encode_png(rgba)), rgba)


def test_encode_rejects_non_rgba() -> None:
    with pytest.raises(TypeError):
        encode_png(np.zeros((2, 2, 3), dtype=np.uint8))


def test_rgb_files_load_opaque(tmp_path: Path) -> None:
    path = tmp_path / "rgb.jpg"
    Image.new("RGB", (4, 3), (10, 200, 30)).save(path)
    rgba = load_image_rgba(path)
    assert rgba.shape == (3, 4, 4)
    assert np.all(rgba[..., 3] == 255)


def test_save_forces_png(tmp_path: Path) -> None:
    rgba = np.zeros((2, 2, 4), dtype=np.uint8)
    out = save_image_rgba(tmp_path / "nested" / "out.jpg", rgba)
    assert out == tmp_path / "nested" / "out.png"
    assert out.exists()
    assert is_image_file(out)
    np.testing.assert_array_equal(load_image_rgba(out), rgba)


def test_is_image_file(tmp_path: Path) -> None:
    junk = tmp_path / "junk.png"
    junk.write_bytes(b"nope")
    assert not is_image_file(junk)
