"""Prompt assembly for the semantic change classifier."""

from __future__ import annotations

from typing import Any

from shotdiff.compare.options import ColorScheme
from shotdiff.image_compare import ComparisonResult
from shotdiff.insight.schema import response_format
from shotdiff.insight.types import InsightContext, InsightRequest

TEMPERATURE = 0.3
MAX_TOKENS = 1500

_LEGENDS = {
    ColorScheme.TWO_TONE: (
        "GREEN = content present in baseline and gone in current, "
        "RED = content new or changed in current, "
        "YELLOW = flagged but likely imperceptible"
    ),
    ColorScheme.RED: "RED = changed pixels",
}

SYSTEM_PROMPT = """\
You are a visual QA engineer reviewing a visual regression test.

You receive two screenshots of the same web page captured at different times:
- BASELINE: the approved state, what the page should look like.
- CURRENT: the state now.
- DIFF (when present): a map of the pixels that changed.

Report what regressed from baseline to current.

The diff only locates changed areas. When an element moves, the diff shows it
twice (old and new position). Always confirm in the CURRENT image: it is the
source of truth for what is actually on the page. Doubled content in the diff
with single content in current is a layout shift, not duplication. Highlighted
pixels with no visible difference between baseline and current are sub-pixel
noise and are not issues.

Mismatch percentage is a prior, not a rule:
- below 0.1%: rendering noise (anti-aliasing, font smoothing), usually "pass"
- 0.1% to 1%: minor styling changes, small shifts of a few pixels
- 1% to 5%: noticeable changes in spacing, font weight or element size
- above 5%: major changes such as layout shifts or missing or added elements
Override the prior with what you actually see.

Severity:
- critical: broken layout, unreadable or overlapping text, missing key
  components such as navigation or calls to action
- major: regressions users will notice (wrong colours, spacing, fonts,
  misalignment beyond 5px)
- minor: subtle changes users may not notice (1-5px shifts, small padding changes)
- pass: no meaningful regression, or only imperceptible noise

Issue categories: layout (position or size), spacing (margins, padding),
typography (font family, size, weight, line height), color (fills, text,
borders), content (text or images changed, elements added or removed),
missing_element (a component from baseline is gone), other.

Be specific about what moved or changed and by roughly how much, cite evidence
as "baseline shows X, current shows Y", and give a concrete fix. An empty issues
list is correct when the mismatch is only noise.

If the two screenshots show unrelated pages (a different site or product), set
severity to "critical", say so in the summary, and do not list per-element
issues."""


def severity_prior(mismatch_percent: float) -> str:
    """Band a mismatch percentage into the prior given to the classifier."""
    if mismatch_percent < 0.1:
        return "noise"
    if mismatch_percent < 1.0:
        return "minor"
    if mismatch_percent <= 5.0:
        return "noticeable"
    return "major"


def build_request(comparison: ComparisonResult, context: InsightContext) -> InsightRequest:
    """Combine comparison stats with caller-supplied image references.

    The diff reference is dropped when the comparison produced no diff image.
    """
    metrics = comparison.metrics
    diff_ref = context.diff_image_ref if comparison.diff_image is not None else None
    return InsightRequest(
        baseline_image_ref=context.baseline_image_ref,
        current_image_ref=context.current_image_ref,
        mismatch_percent=metrics.mismatch_percent,
        mismatched_pixel_count=metrics.mismatched_pixel_count,
        diff_image_ref=diff_ref,
        baseline_source_label=context.baseline_source_label,
        current_source_label=context.current_source_label,
        color_scheme=comparison.color_scheme,
    )


def _image(url: str) -> dict[str, Any]:
    return {"type": "image_url", "image_url": {"url": url, "detail": "high"}}


def _text(text: str) -> dict[str, Any]:
    return {"type": "text", "text": text}


def build_messages(request: InsightRequest) -> list[dict[str, Any]]:
    """Chat messages with each image preceded by a caption naming it."""
    header = (
        "## Visual regression test\n\n"
        f"Pixel mismatch: {request.mismatch_percent:.2f}%"
        f" ({request.mismatched_pixel_count:,} pixels differ)\n"
        f"Mismatch prior: {severity_prior(request.mismatch_percent)}\n"
        f"Page: {request.page_label}\n"
    )
    if (
        request.baseline_source_label
        and request.current_source_label
        and request.baseline_source_label != request.current_source_label
    ):
        header += (
            f"Baseline source: {request.baseline_source_label}\n"
            f"Current source: {request.current_source_label}\n"
        )
    header += "\nThe images follow in order."

    content: list[dict[str, Any]] = [
        _text(header),
        _text("IMAGE 1 - BASELINE (approved state):"),
        _image(request.baseline_image_ref),
        _text("IMAGE 2 - CURRENT (state now):"),
        _image(request.current_image_ref),
    ]
    if request.diff_image_ref:
        content.append(_text(f"IMAGE 3 - DIFF ({_LEGENDS[request.color_scheme]}):"))
        content.append(_image(request.diff_image_ref))
    content.append(
        _text(
            "Report only genuine visual regressions between baseline and current."
            " Return JSON."
        )
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": content},
    ]


def build_payload(request: InsightRequest, model: str) -> dict[str, Any]:
    """Chat-completions request body for ``request``."""
    return {
        "model": model,
        "messages": build_messages(request),
        "temperature": TEMPERATURE,
        "max_tokens": MAX_TOKENS,
        "response_format": response_format(),
    }
