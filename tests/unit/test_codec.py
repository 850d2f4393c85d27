"""Tests for shotdiff.codec module."""

from __future__ import annotations

import io

import numpy as np
import pytest
from conftest import make_png, make_raster, short_ihdr_png
from PIL import Image

from shotdiff import codec
from shotdiff.codec import DiffMask, RasterImage
from shotdiff.errors import CodecError


class TestDecode:
    def test_rgba_png(self) -> None:
        img = codec.decode(make_png((3, 2), (10, 20, 30, 255), {(2, 1): (1, 2, 3, 4)}))
        assert img.size == (3, 2)
        assert img.pixels.shape == (2, 3, 4)
        assert img.pixels.dtype == np.uint8
        assert tuple(img.pixels[1, 2]) == (1, 2, 3, 4)

    def test_rgb_png_gets_opaque_alpha(self) -> None:
        buf = io.BytesIO()
        Image.new("RGB", (2, 2), (9, 8, 7)).save(buf, format="PNG")
        img = codec.decode(buf.getvalue())
        assert tuple(img.pixels[0, 0]) == (9, 8, 7, 255)

    def test_grayscale_png(self) -> None:
        buf = io.BytesIO()
        Image.new("L", (2, 2), 128).save(buf, format="PNG")
        img = codec.decode(buf.getvalue())
        assert tuple(img.pixels[1, 1]) == (128, 128, 128, 255)

    def test_decoded_buffer_is_read_only(self) -> None:
        img = codec.decode(make_png((2, 2), (0, 0, 0, 255)))
        with pytest.raises(ValueError):
            img.pixels[0, 0, 0] = 1


class TestDecodeErrors:
    def test_garbage_bytes(self) -> None:
        with pytest.raises(CodecError, match="invalid image"):
            codec.decode(b"not an image")

    def test_empty_bytes(self) -> None:
        with pytest.raises(CodecError):
            codec.decode(b"")

    def test_truncated_png(self) -> None:
        data = make_png((64, 64), (1, 2, 3, 255), {(5, 5): (200, 0, 0, 255)})
        with pytest.raises(CodecError):
            codec.decode(data[: len(data) // 2])

    def test_short_ihdr_chunk(self) -> None:
        with pytest.raises(CodecError, match="invalid image"):
            codec.decode(short_ihdr_png())

    def test_cut_inside_header(self) -> None:
        data = make_png((4, 4), (0, 0, 0, 255))
        with pytest.raises(CodecError):
            codec.decode(data[:20])

    def test_non_png_format_rejected(self) -> None:
        buf = io.BytesIO()
        Image.new("RGB", (2, 2), (0, 0, 0)).save(buf, format="BMP")
        with pytest.raises(CodecError, match="expected PNG"):
            codec.decode(buf.getvalue())

    def test_too_large(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(codec, "MAX_DIMENSION", 8)
        with pytest.raises(CodecError, match="too large"):
            codec.decode(make_png((9, 2), (0, 0, 0, 255)))


class TestEncode:
    def test_deterministic(self) -> None:
        img = make_raster((5, 4), (0, 0, 0, 0), {(1, 1): (255, 0, 0, 255)})
        assert codec.encode(img) == codec.encode(img)

    def test_decode_recovers_pixels(self) -> None:
        img = make_raster((4, 3), (10, 20, 30, 40), {(3, 2): (0, 255, 0, 255)})
        back = codec.decode(codec.encode(img))
        assert back.size == img.size
        assert np.array_equal(back.pixels, img.pixels)

    def test_png_signature(self) -> None:
        data = codec.encode(make_raster((1, 1), (0, 0, 0, 0)))
        assert data.startswith(b"\x89PNG\r\n\x1a\n")


class TestRasterImage:
    def test_shape_must_match_dimensions(self) -> None:
        with pytest.raises(ValueError, match="does not match"):
            RasterImage(3, 3, np.zeros((2, 3, 4), dtype=np.uint8))

    def test_dtype_must_be_uint8(self) -> None:
        with pytest.raises(ValueError):
            RasterImage(1, 1, np.zeros((1, 1, 4), dtype=np.int32))

    def test_diff_mask_counts_alpha(self) -> None:
        arr = np.zeros((2, 2, 4), dtype=np.uint8)
        arr[0, 1, 3] = 1
        arr[1, 1, 3] = 255
        mask = DiffMask(2, 2, arr)
        assert np.count_nonzero(mask.mismatched) == 2
        assert mask.mismatched.tolist() == [[False, True], [False, True]]
