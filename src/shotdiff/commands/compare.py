"""shotdiff compare command -- perceptual screenshot comparison."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click

from shotdiff.commands._helpers import build_options, compare_options, fail
from shotdiff.errors import ShotdiffError
from shotdiff.formatters.json_fmt import write_json
from shotdiff.image_compare import ComparisonResult, compare_images


def write_diff(result: ComparisonResult, diff_output: Path | None) -> Path | None:
    """Write the diff PNG if one was produced and a destination was given."""
    if diff_output is None or result.diff_image is None:
        return None
    diff_output.parent.mkdir(parents=True, exist_ok=True)
    diff_output.write_bytes(result.diff_image)
    return diff_output


def run_compare(
    baseline: Path,
    current: Path,
    threshold: float,
    alpha: float,
    include_aa: bool,
    color_scheme: str,
) -> ComparisonResult:
    """Read both PNGs and compare them, exiting 2 on any error."""
    options = build_options(threshold, alpha, include_aa, color_scheme)
    try:
        return compare_images(baseline.read_bytes(), current.read_bytes(), options)
    except (ShotdiffError, OSError) as exc:
        fail(exc)


def comparison_json(
    result: ComparisonResult, diff_path: Path | None, threshold: float
) -> dict[str, Any]:
    data = result.to_dict()
    data["diff_image"] = str(diff_path) if diff_path else None
    data["threshold"] = threshold
    return data


def comparison_line(result: ComparisonResult) -> str:
    m = result.metrics
    if m.passed:
        return "match"
    return f"diff: {m.mismatched_pixel_count}/{m.total_pixel_count} pixels ({m.mismatch_percent:.2f}%)"


@click.command("compare")
@click.argument("baseline", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("current", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@compare_options
@click.option(
    "--diff-output",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write diff visualization PNG (only when pixels differ).",
)
@click.option("--json", "use_json", is_flag=True, help="JSON output.")
def compare_cmd(
    baseline: Path,
    current: Path,
    threshold: float,
    alpha: float,
    include_aa: bool,
    color_scheme: str,
    diff_output: Path | None,
    use_json: bool,
) -> None:
    """Compare two PNG screenshots of the same page.

    Exit 0 if no pixel differs beyond tolerance, exit 1 if any does,
    exit 2 on error (size mismatch, invalid PNG).
    """
    result = run_compare(baseline, current, threshold, alpha, include_aa, color_scheme)
    try:
        diff_path = write_diff(result, diff_output)
    except OSError as exc:
        fail(f"cannot write diff image: {exc}")

    if use_json:
        write_json(comparison_json(result, diff_path, threshold), indent=None)
    else:
        click.echo(comparison_line(result))

    sys.exit(0 if result.metrics.passed else 1)
