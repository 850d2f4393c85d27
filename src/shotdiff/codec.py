"""PNG decode/encode to and from raw RGBA pixel buffers."""

from __future__ import annotations

import io
from dataclasses import dataclass

import numpy as np
from PIL import Image, UnidentifiedImageError

from shotdiff.errors import CodecError

MAX_DIMENSION = 16384


@dataclass(frozen=True, eq=False)
class RasterImage:
    """Decoded 8-bit RGBA image.

    ``pixels`` has shape ``(height, width, 4)`` and dtype ``uint8``; its
    flattened bytes are the R,G,B,A row-major buffer.
    """

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.dtype != np.uint8 or self.pixels.shape != (self.height, self.width, 4):
            raise ValueError(
                f"pixel buffer shape {self.pixels.shape} does not match"
                f" {self.width}x{self.height} RGBA"
            )
        self.pixels.setflags(write=False)

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def total_pixels(self) -> int:
        return self.width * self.height


class DiffMask(RasterImage):
    """RGBA buffer where a nonzero alpha marks a mismatched pixel."""

    @property
    def mismatched(self) -> np.ndarray:
        """Boolean ``(height, width)`` array of flagged positions."""
        return self.pixels[..., 3] > 0


def decode(png_bytes: bytes) -> RasterImage:
    """Decode PNG bytes into an RGBA RasterImage.

    Raises:
        CodecError: If the bytes are not a PNG, are corrupt, or either
            dimension exceeds MAX_DIMENSION.
    """
    try:
        img = Image.open(io.BytesIO(png_bytes))
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
        SyntaxError,
        EOFError,
    ) as exc:
        raise CodecError(f"invalid image: {exc}") from exc
    try:
        if img.format != "PNG":
            raise CodecError(f"invalid image: expected PNG, got {img.format}")
        width, height = img.size
        if width > MAX_DIMENSION or height > MAX_DIMENSION:
            raise CodecError(
                f"image too large: {width}x{height} exceeds {MAX_DIMENSION}px per side"
            )
        try:
            rgba = img.convert("RGBA")
        except (OSError, SyntaxError, ValueError, EOFError) as exc:
            raise CodecError(f"corrupt PNG: {exc}") from exc
        arr = np.array(rgba, dtype=np.uint8)
        rgba.close()
    finally:
        img.close()
    return RasterImage(width, height, arr)


def encode(image: RasterImage) -> bytes:
    """Encode a RasterImage as PNG bytes.

    Output is deterministic: no metadata chunks, fixed compression.
    """
    buf = io.BytesIO()
    try:
        Image.fromarray(np.ascontiguousarray(image.pixels)).save(
            buf, format="PNG", compress_level=6
        )
    except (OSError, ValueError) as exc:
        raise CodecError(f"cannot encode PNG: {exc}") from exc
    return buf.getvalue()
