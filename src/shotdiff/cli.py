from __future__ import annotations

import logging

import click

from shotdiff import __version__
from shotdiff.commands.compare import compare_cmd
from shotdiff.commands.insight import insight_cmd, review_cmd


def _configure_logging(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Send shotdiff debug logging to stderr when --verbose is given."""
    if not value:
        return
    logger = logging.getLogger("shotdiff")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="shotdiff")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_configure_logging,
    help="Debug logging on stderr.",
)
def main() -> None:
    """shotdiff: perceptual screenshot diffing with semantic change review."""


main.add_command(compare_cmd, name="compare")
main.add_command(insight_cmd, name="insight")
main.add_command(review_cmd, name="review")


if __name__ == "__main__":
    main()
