"""Diff visualization: recolour a mismatch mask into a legible overlay."""

from __future__ import annotations

import numpy as np

from shotdiff.codec import DiffMask, RasterImage
from shotdiff.compare.classifier import blend_white, luma
from shotdiff.compare.options import ColorScheme

REMOVED_COLOR = (0, 255, 0, 255)
ADDED_COLOR = (255, 0, 0, 255)
NOISE_COLOR = (255, 255, 0, 255)

# Sum of absolute RGB differences (0..765) below which a flagged pixel is noise.
NOISE_LIMIT = 30


def render(
    baseline: RasterImage,
    current: RasterImage,
    mask: DiffMask,
    scheme: ColorScheme = ColorScheme.TWO_TONE,
) -> DiffMask:
    """Paint each mismatched pixel of ``mask``; everything else is transparent.

    Two-tone attribution compares the brightness of the source pixels:
    baseline darker means content was removed (green), current darker or
    equally bright means content was added or changed (red). Flagged pixels
    whose colours are nearly equal are painted as noise (yellow).

    The brightness rule assumes dark content on a light background and
    inverts on dark-themed pages.
    """
    out = np.zeros((mask.height, mask.width, 4), dtype=np.uint8)
    ys, xs = np.nonzero(mask.mismatched)
    if not ys.size:
        return DiffMask(mask.width, mask.height, out)

    if scheme is ColorScheme.RED:
        out[ys, xs] = ADDED_COLOR
        return DiffMask(mask.width, mask.height, out)

    rgb_a = blend_white(baseline.pixels[ys, xs])
    rgb_b = blend_white(current.pixels[ys, xs])
    spread = np.abs(np.rint(rgb_a) - np.rint(rgb_b)).sum(axis=-1)
    noise = spread < NOISE_LIMIT
    removed = ~noise & (luma(rgb_a) < luma(rgb_b))
    added = ~noise & ~removed

    out[ys[noise], xs[noise]] = NOISE_COLOR
    out[ys[removed], xs[removed]] = REMOVED_COLOR
    out[ys[added], xs[added]] = ADDED_COLOR
    return DiffMask(mask.width, mask.height, out)
