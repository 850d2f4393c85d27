"""JSON output for shotdiff commands."""

from __future__ import annotations

import json
import sys
from typing import Any, TextIO


def dumps(data: Any, *, indent: int | None = None) -> str:
    return json.dumps(data, default=str, indent=indent, sort_keys=False)


def write_json(data: Any, *, out: TextIO | None = None, indent: int | None = 2) -> None:
    """Write data as JSON followed by a newline."""
    dest = out or sys.stdout
    dest.write(dumps(data, indent=indent) + "\n")
