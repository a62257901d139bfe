# emotim/image_io.py
from __future__ import annotations

import io
from pathlib import Path

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .core_types import U8Image, assert_u8_image_rgba

"""
Image I/O helpers (RGBA in sRGB): decode/encode bytes, load/save files.
"""

try:
    from PIL import ImageCms  # ICC conversion if profile present
except ImportError:  # pragma: no cover
    ImageCms = None  # type: ignore[assignment]


def _convert_to_srgb_rgba(im: Image.Image) -> Image.Image:
    im = ImageOps.exif_transpose(im)
    icc_bytes = im.info.get("icc_profile")

    if icc_bytes and ImageCms is not None:
        try:
            src_prof = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
            dst_prof = ImageCms.createProfile("sRGB")
            im2 = ImageCms.profileToProfile(
                im,
                src_prof,
                dst_prof,
                renderingIntent=ImageCms.Intent.PERCEPTUAL,
                outputMode="RGBA",
            )
            if im2 is None:
                return im.convert("RGBA")
            return im2
        except (ImageCms.PyCMSError, OSError, ValueError):
            return im.convert("RGBA")

    return im.convert("RGBA")


def image_to_rgba(im: Image.Image) -> U8Image:
    """Pillow image -> uint8 (H,W,4) array in sRGB."""
    return np.array(_convert_to_srgb_rgba(im), dtype=np.uint8)


def decode_rgba(data: bytes) -> U8Image:
    """Decode encoded image bytes into a uint8 (H,W,4) array."""
    with Image.open(io.BytesIO(data)) as im0:
        return image_to_rgba(im0)


def encode_png(rgba: U8Image) -> bytes:
    """Encode a uint8 (H,W,4) array as PNG bytes."""
    assert_u8_image_rgba(rgba)
    buf = io.BytesIO()
    Image.fromarray(rgba).save(buf, format="PNG")
    return buf.getvalue()


def load_image_rgba(path: Path) -> U8Image:
    with Image.open(path) as im0:
        return image_to_rgba(im0)


def save_image_rgba(path: Path, rgba: U8Image) -> Path:
    if path.suffix.lower() != ".png":
        path = path.with_suffix(".png")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_png(rgba))
    return path


def is_image_file(path: Path) -> bool:
    try:
        with Image.open(path) as im:
            im.seek(0)
            im.load()
        return True
    except (UnidentifiedImageError, OSError):
        return False


__all__ = [
    "image_to_rgba",
    "decode_rgba",
    "encode_png",
    "load_image_rgba",
    "save_image_rgba",
    "is_image_file",
]
