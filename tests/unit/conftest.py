"""Shared helpers for unit tests."""

from __future__ import annotations

import io
import struct
import zlib
from collections.abc import Mapping

import numpy as np
from PIL import Image

from shotdiff.codec import RasterImage

Pixel = tuple[int, int, int, int]


def make_image(
    size: tuple[int, int],
    color: Pixel,
    patches: Mapping[tuple[int, int], Pixel] | None = None,
) -> Image.Image:
    """Solid RGBA image with optional per-pixel overrides keyed by (x, y)."""
    img = Image.new("RGBA", size, color)
    for xy, px in (patches or {}).items():
        img.putpixel(xy, px)
    return img


def make_png(
    size: tuple[int, int],
    color: Pixel,
    patches: Mapping[tuple[int, int], Pixel] | None = None,
) -> bytes:
    """PNG bytes of make_image(...)."""
    buf = io.BytesIO()
    make_image(size, color, patches).save(buf, format="PNG")
    return buf.getvalue()


def make_raster(
    size: tuple[int, int],
    color: Pixel,
    patches: Mapping[tuple[int, int], Pixel] | None = None,
) -> RasterImage:
    """RasterImage built directly from numpy, bypassing the codec."""
    width, height = size
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[...] = color
    for (x, y), px in (patches or {}).items():
        arr[y, x] = px
    return RasterImage(width, height, arr)


def square_patch(x0: int, y0: int, side: int, color: Pixel) -> dict[tuple[int, int], Pixel]:
    return {(x, y): color for x in range(x0, x0 + side) for y in range(y0, y0 + side)}


def pixel_at(png: bytes, xy: tuple[int, int]) -> Pixel:
    with Image.open(io.BytesIO(png)) as img:
        return img.convert("RGBA").getpixel(xy)  # type: ignore[return-value]


def short_ihdr_png() -> bytes:
    """PNG signature followed by an IHDR chunk too short to hold a header."""
    body = b"IHDR" + b"\x00" * 5
    return (
        b"\x89PNG\r\n\x1a\n"
        + struct.pack(">I", 5)
        + body
        + struct.pack(">I", zlib.crc32(body))
    )
