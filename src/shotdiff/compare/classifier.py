"""Perceptual per-pixel mismatch classification.

Colours are compared in YIQ space after blending translucent pixels onto
white, so that sub-perceptual rendering noise stays below the tolerance.
Optionally, pixels that look like anti-aliasing on shape edges (a pixel
sitting between a darker and a brighter neighbour whose own region is
flat in both images) are excluded from the mismatch count.
"""

from __future__ import annotations

import logging

import numpy as np

from shotdiff.codec import DiffMask, RasterImage
from shotdiff.compare.options import CompareOptions
from shotdiff.errors import DimensionMismatchError

log = logging.getLogger(__name__)

# Largest possible YIQ delta between two 8-bit colours (black vs white).
MAX_YIQ_DELTA = 35215.0

# Placeholder colour of a flagged pixel before the renderer recolours it.
MASK_COLOR = (255, 0, 0, 255)

# Neighbour offsets as (dx, dy), x-major. Ties between equally dark or
# bright neighbours resolve to the first offset in this order.
_NEIGHBOURS = [(dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)]


def blend_white(pixels: np.ndarray) -> np.ndarray:
    """Blend RGBA pixels onto a white background, returning float RGB."""
    rgb = pixels[..., :3].astype(np.float32)
    alpha = pixels[..., 3:4].astype(np.float32) / 255.0
    return 255.0 + (rgb - 255.0) * alpha


def luma(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.29889531 + rgb[..., 1] * 0.58662247 + rgb[..., 2] * 0.11448223


def _in_phase(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.59597799 - rgb[..., 1] * 0.27417610 - rgb[..., 2] * 0.32180189


def _quadrature(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.21147017 - rgb[..., 1] * 0.52261711 + rgb[..., 2] * 0.31114694


def color_delta(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Weighted squared YIQ distance between two arrays of RGBA pixels."""
    rgb_a = blend_white(a)
    rgb_b = blend_white(b)
    dy = luma(rgb_a) - luma(rgb_b)
    di = _in_phase(rgb_a) - _in_phase(rgb_b)
    dq = _quadrature(rgb_a) - _quadrature(rgb_b)
    return 0.5053 * dy * dy + 0.299 * di * di + 0.1957 * dq * dq


def _alpha_only(a: np.ndarray, b: np.ndarray, tolerance: float) -> np.ndarray:
    """True where RGB bytes match and alpha differs within tolerance."""
    same_rgb = np.all(a[..., :3] == b[..., :3], axis=-1)
    alpha_delta = np.abs(a[..., 3].astype(np.int16) - b[..., 3].astype(np.int16))
    return same_rgb & (alpha_delta <= tolerance * 255.0)


def _packed(pixels: np.ndarray) -> np.ndarray:
    """View RGBA pixels as one uint32 per position for equality checks."""
    return np.ascontiguousarray(pixels).view(np.uint32)[..., 0]


def _edge(xs: np.ndarray, ys: np.ndarray, width: int, height: int) -> np.ndarray:
    on_edge = (xs == 0) | (xs == width - 1) | (ys == 0) | (ys == height - 1)
    return on_edge.astype(np.int32)


def _has_many_siblings(packed: np.ndarray, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """True where at least three neighbours share the exact pixel value."""
    height, width = packed.shape
    centre = packed[ys, xs]
    count = _edge(xs, ys, width, height)
    for dx, dy in _NEIGHBOURS:
        nx = xs + dx
        ny = ys + dy
        ok = (nx >= 0) & (nx < width) & (ny >= 0) & (ny < height)
        same = packed[np.clip(ny, 0, height - 1), np.clip(nx, 0, width - 1)] == centre
        count += ok & same
    return count > 2


def _antialiased(
    brightness: np.ndarray,
    packed_self: np.ndarray,
    packed_other: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
) -> np.ndarray:
    """Detect anti-aliased pixels at the given positions of one image."""
    height, width = brightness.shape
    n = xs.size
    centre = brightness[ys, xs]
    deltas = np.zeros((len(_NEIGHBOURS), n), dtype=np.float32)
    zeroes = _edge(xs, ys, width, height)
    for k, (dx, dy) in enumerate(_NEIGHBOURS):
        nx = xs + dx
        ny = ys + dy
        ok = (nx >= 0) & (nx < width) & (ny >= 0) & (ny < height)
        d = centre - brightness[np.clip(ny, 0, height - 1), np.clip(nx, 0, width - 1)]
        d = np.where(ok, d, 0.0)
        deltas[k] = d
        zeroes += ok & (d == 0.0)

    cols = np.arange(n)
    k_min = np.argmin(deltas, axis=0)
    k_max = np.argmax(deltas, axis=0)
    d_min = deltas[k_min, cols]
    d_max = deltas[k_max, cols]
    candidate = (zeroes <= 2) & (d_min < 0.0) & (d_max > 0.0)

    offsets = np.array(_NEIGHBOURS, dtype=np.intp)
    min_x = np.clip(xs + offsets[k_min, 0], 0, width - 1)
    min_y = np.clip(ys + offsets[k_min, 1], 0, height - 1)
    max_x = np.clip(xs + offsets[k_max, 0], 0, width - 1)
    max_y = np.clip(ys + offsets[k_max, 1], 0, height - 1)

    flat_darkest = _has_many_siblings(packed_self, min_x, min_y) & _has_many_siblings(
        packed_other, min_x, min_y
    )
    flat_brightest = _has_many_siblings(packed_self, max_x, max_y) & _has_many_siblings(
        packed_other, max_x, max_y
    )
    return candidate & (flat_darkest | flat_brightest)


def classify(
    baseline: RasterImage,
    current: RasterImage,
    options: CompareOptions | None = None,
) -> tuple[int, DiffMask]:
    """Classify every pixel position as matching or mismatched.

    Args:
        baseline: Reference image.
        current: Image under test; must share the baseline's dimensions.
        options: Tolerances; defaults to CompareOptions().

    Returns:
        (mismatched pixel count, mask). The mask's alpha channel is 255
        at mismatched positions and 0 elsewhere.

    Raises:
        DimensionMismatchError: If the two images differ in size.
    """
    if baseline.size != current.size:
        raise DimensionMismatchError(
            baseline.width, baseline.height, current.width, current.height
        )
    opts = options or CompareOptions()
    width, height = baseline.size
    a = baseline.pixels
    b = current.pixels
    out = np.zeros((height, width, 4), dtype=np.uint8)

    ys, xs = np.nonzero(np.any(a != b, axis=-1))
    if ys.size:
        pa = a[ys, xs]
        pb = b[ys, xs]
        over = color_delta(pa, pb) > MAX_YIQ_DELTA * opts.threshold * opts.threshold
        over &= ~_alpha_only(pa, pb, opts.alpha)
        ys, xs = ys[over], xs[over]

    if ys.size and not opts.include_aa:
        packed_a = _packed(a)
        packed_b = _packed(b)
        aa = _antialiased(luma(blend_white(a)), packed_a, packed_b, xs, ys)
        aa |= _antialiased(luma(blend_white(b)), packed_b, packed_a, xs, ys)
        log.debug("anti-aliasing excluded %d of %d pixels", int(aa.sum()), ys.size)
        ys, xs = ys[~aa], xs[~aa]

    out[ys, xs] = MASK_COLOR
    count = int(ys.size)
    log.debug("classified %dx%d: %d mismatched", width, height, count)
    return count, DiffMask(width, height, out)
