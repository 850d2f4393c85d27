"""Screenshot comparison: PNG bytes in, metrics and diff PNG out."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from shotdiff import codec
from shotdiff.compare import (
    ColorScheme,
    CompareOptions,
    ComparisonMetrics,
    aggregate,
    classify,
    render,
)
from shotdiff.errors import DimensionMismatchError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComparisonResult:
    """Result of comparing a baseline screenshot with a current one."""

    metrics: ComparisonMetrics
    diff_image: bytes | None
    color_scheme: ColorScheme = ColorScheme.TWO_TONE

    def to_dict(self) -> dict[str, Any]:
        data = self.metrics.to_dict()
        data["has_diff"] = self.diff_image is not None
        data["color_scheme"] = self.color_scheme.value
        return data


def compare_images(
    baseline_png: bytes,
    current_png: bytes,
    options: CompareOptions | None = None,
) -> ComparisonResult:
    """Compare two PNG screenshots of the same page.

    Args:
        baseline_png: PNG bytes of the accepted reference capture.
        current_png: PNG bytes of the capture under test.
        options: Tolerances and colour scheme; defaults to CompareOptions().

    Returns:
        ComparisonResult. ``diff_image`` is None when nothing mismatched.

    Raises:
        CodecError: If either buffer is not a decodable PNG.
        DimensionMismatchError: If the two images differ in size.
    """
    opts = options or CompareOptions()
    baseline = codec.decode(baseline_png)
    current = codec.decode(current_png)
    if baseline.size != current.size:
        raise DimensionMismatchError(
            baseline.width, baseline.height, current.width, current.height
        )

    count, mask = classify(baseline, current, opts)
    diff_image: bytes | None = None
    if count > 0:
        diff_image = codec.encode(render(baseline, current, mask, opts.color_scheme))

    metrics = aggregate(count, baseline.total_pixels)
    log.debug(
        "compared %dx%d: %d/%d mismatched (%.4f%%)",
        baseline.width,
        baseline.height,
        metrics.mismatched_pixel_count,
        metrics.total_pixel_count,
        metrics.mismatch_percent,
    )
    return ComparisonResult(metrics=metrics, diff_image=diff_image, color_scheme=opts.color_scheme)
