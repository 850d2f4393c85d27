"""shotdiff insight / review commands -- semantic change classification."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from shotdiff.commands._helpers import compare_options, fail
from shotdiff.commands.compare import comparison_json, comparison_line, run_compare, write_diff
from shotdiff.compare.options import ColorScheme
from shotdiff.config import load_settings
from shotdiff.errors import InsightUnavailableError
from shotdiff.formatters.json_fmt import write_json
from shotdiff.formatters.kv import format_insight
from shotdiff.insight import InsightClient, InsightContext, InsightRequest, build_and_interpret


def _client() -> InsightClient:
    """Client from the environment; bad settings raise InsightUnavailableError."""
    try:
        settings = load_settings()
    except ValueError as exc:
        raise InsightUnavailableError(f"insights unavailable: {exc}") from exc
    return InsightClient.from_settings(settings)


@click.command("insight")
@click.option("--baseline-url", required=True, help="URL of the baseline screenshot.")
@click.option("--current-url", required=True, help="URL of the current screenshot.")
@click.option("--diff-url", default=None, help="URL of the diff image, if any.")
@click.option("--baseline-label", default=None, help="Page the baseline was captured from.")
@click.option("--current-label", default=None, help="Page the current capture came from.")
@click.option("--mismatch-percent", required=True, type=click.FloatRange(0.0, 100.0))
@click.option("--mismatched-pixels", required=True, type=click.IntRange(min=0))
@click.option(
    "--color-scheme",
    type=click.Choice([s.value for s in ColorScheme]),
    default=ColorScheme.TWO_TONE.value,
    help="Colour scheme the diff image was rendered with.",
)
@click.option("--json", "use_json", is_flag=True, help="JSON output.")
def insight_cmd(
    baseline_url: str,
    current_url: str,
    diff_url: str | None,
    baseline_label: str | None,
    current_label: str | None,
    mismatch_percent: float,
    mismatched_pixels: int,
    color_scheme: str,
    use_json: bool,
) -> None:
    """Classify an already-computed comparison from hosted images.

    Exit 0 on success, exit 2 when the classifier is unavailable or its
    reply fails validation.
    """
    request = InsightRequest(
        baseline_image_ref=baseline_url,
        current_image_ref=current_url,
        mismatch_percent=mismatch_percent,
        mismatched_pixel_count=mismatched_pixels,
        diff_image_ref=diff_url,
        baseline_source_label=baseline_label,
        current_source_label=current_label,
        color_scheme=ColorScheme(color_scheme),
    )
    try:
        result = _client().interpret(request)
    except InsightUnavailableError as exc:
        fail(exc)

    if use_json:
        write_json(result.to_dict())
    else:
        click.echo(format_insight(result))


@click.command("review")
@click.argument("baseline", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("current", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@compare_options
@click.option("--baseline-url", required=True, help="URL of the baseline screenshot.")
@click.option("--current-url", required=True, help="URL of the current screenshot.")
@click.option("--diff-url", default=None, help="URL the diff image is hosted at.")
@click.option("--baseline-label", default=None, help="Page the baseline was captured from.")
@click.option("--current-label", default=None, help="Page the current capture came from.")
@click.option(
    "--diff-output",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write diff visualization PNG (only when pixels differ).",
)
@click.option("--json", "use_json", is_flag=True, help="JSON output.")
def review_cmd(
    baseline: Path,
    current: Path,
    threshold: float,
    alpha: float,
    include_aa: bool,
    color_scheme: str,
    baseline_url: str,
    current_url: str,
    diff_url: str | None,
    baseline_label: str | None,
    current_label: str | None,
    diff_output: Path | None,
    use_json: bool,
) -> None:
    """Compare two screenshots, then ask the classifier to judge the change.

    The pixel result is always printed. Exit 0 when the classifier rates
    the change "pass", 1 for any other severity, 2 on comparison errors
    or when the insight is unavailable.
    """
    result = run_compare(baseline, current, threshold, alpha, include_aa, color_scheme)
    try:
        diff_path = write_diff(result, diff_output)
    except OSError as exc:
        fail(f"cannot write diff image: {exc}")

    context = InsightContext(
        baseline_image_ref=baseline_url,
        current_image_ref=current_url,
        diff_image_ref=diff_url,
        baseline_source_label=baseline_label,
        current_source_label=current_label,
    )
    pixels = comparison_json(result, diff_path, threshold)
    try:
        insight = build_and_interpret(result, context, _client())
    except InsightUnavailableError as exc:
        if use_json:
            write_json({"comparison": pixels, "insight": None}, indent=None)
        else:
            click.echo(comparison_line(result))
        fail(exc)

    if use_json:
        write_json({"comparison": pixels, "insight": insight.to_dict()}, indent=None)
    else:
        click.echo(comparison_line(result))
        click.echo(format_insight(insight))
    sys.exit(0 if insight.severity == "pass" else 1)
