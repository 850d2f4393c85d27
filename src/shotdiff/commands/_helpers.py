"""Shared CLI helpers: error reporting and option decorators."""

from __future__ import annotations

import functools
import sys
from collections.abc import Callable
from typing import Any, NoReturn

import click

from shotdiff.compare.options import ColorScheme, CompareOptions
from shotdiff.errors import ShotdiffError
from shotdiff.formatters.json_fmt import dumps

EXIT_ERROR = 2


def _json_mode() -> bool:
    """Return True if the current Click context has the JSON output flag set."""
    ctx = click.get_current_context(silent=True)
    if ctx is None:
        return False
    return bool(ctx.params.get("use_json"))


def fail(exc: Exception | str, code: int = EXIT_ERROR) -> NoReturn:
    """Report an error on stderr (JSON-shaped in --json mode) and exit."""
    if isinstance(exc, ShotdiffError):
        payload = exc.to_dict()
    else:
        payload = {"message": str(exc)}
    if _json_mode():
        click.echo(dumps({"error": payload}), err=True)
    else:
        click.echo(f"error: {payload['message']}", err=True)
        detail = payload.get("detail")
        if detail:
            click.echo(f"  detail: {detail}", err=True)
    sys.exit(code)


def compare_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the comparison tolerance options to a Click command."""

    @click.option(
        "--threshold",
        default=0.1,
        show_default=True,
        type=click.FloatRange(0.0, 1.0),
        help="Perceptual colour tolerance (0-1, higher is more tolerant).",
    )
    @click.option(
        "--alpha",
        default=0.1,
        show_default=True,
        type=click.FloatRange(0.0, 1.0),
        help="Tolerated alpha-only difference (0-1).",
    )
    @click.option(
        "--include-aa/--no-include-aa",
        default=True,
        show_default=True,
        help="Count anti-aliased edge pixels as mismatches.",
    )
    @click.option(
        "--color-scheme",
        type=click.Choice([s.value for s in ColorScheme]),
        default=ColorScheme.TWO_TONE.value,
        show_default=True,
        help="Diff colouring: directional two-tone or single red.",
    )
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return fn(*args, **kwargs)

    return wrapper


def build_options(threshold: float, alpha: float, include_aa: bool, color_scheme: str) -> CompareOptions:
    return CompareOptions(
        threshold=threshold,
        alpha=alpha,
        include_aa=include_aa,
        color_scheme=ColorScheme(color_scheme),
    )
