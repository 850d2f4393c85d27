"""Environment-driven settings for the insight step."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_API_BASE = "https://api.openai.com/v1"
DEFAULT_TIMEOUT_S = 30.0

_FALSEY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class InsightSettings:
    enabled: bool
    api_key: str | None
    model: str
    api_base: str
    timeout_s: float


def load_settings(env: Mapping[str, str] | None = None) -> InsightSettings:
    """Read insight settings from the environment.

    Variables: SHOTDIFF_AI_ENABLED, OPENAI_API_KEY, OPENAI_MODEL,
    SHOTDIFF_API_BASE, SHOTDIFF_INSIGHT_TIMEOUT.

    Raises:
        ValueError: If SHOTDIFF_INSIGHT_TIMEOUT is not a positive number.
    """
    source = os.environ if env is None else env
    enabled = source.get("SHOTDIFF_AI_ENABLED", "true").strip().lower() not in _FALSEY
    raw_timeout = source.get("SHOTDIFF_INSIGHT_TIMEOUT") or str(DEFAULT_TIMEOUT_S)
    try:
        timeout_s = float(raw_timeout)
    except ValueError:
        raise ValueError(f"SHOTDIFF_INSIGHT_TIMEOUT must be a number, got {raw_timeout!r}") from None
    if timeout_s <= 0:
        raise ValueError(f"SHOTDIFF_INSIGHT_TIMEOUT must be positive, got {raw_timeout!r}")
    return InsightSettings(
        enabled=enabled,
        api_key=source.get("OPENAI_API_KEY") or None,
        model=source.get("OPENAI_MODEL") or DEFAULT_MODEL,
        api_base=(source.get("SHOTDIFF_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
        timeout_s=timeout_s,
    )
