"""Aligned key/value text output."""

from __future__ import annotations

from typing import Any

from shotdiff.insight.types import InsightResult


def format_kv(data: dict[str, Any]) -> str:
    """Render a flat dict as ``key: value`` lines with aligned values.

    None and empty strings render as ``-``; booleans as ``yes``/``no``.
    """
    if not data:
        return ""
    width = max(len(str(k)) for k in data) + 2
    lines = []
    for key, value in data.items():
        if value is None or value == "":
            value = "-"
        elif isinstance(value, bool):
            value = "yes" if value else "no"
        lines.append(f"{str(key) + ':':<{width}}{value}")
    return "\n".join(lines)


def format_insight(result: InsightResult) -> str:
    """Human-readable insight: header block, numbered issues, quick wins."""
    parts = [
        format_kv(
            {
                "severity": result.severity,
                "summary": result.summary,
                "verdict": result.verdict,
                "issues": len(result.issues),
            }
        )
    ]
    for n, issue in enumerate(result.issues, 1):
        parts.append(
            f"\n{n}. [{issue.severity}] {issue.title} ({issue.category}, {issue.location})\n"
            f"   evidence: {issue.evidence}\n"
            f"   fix: {issue.recommendation}"
        )
    if result.quick_wins:
        parts.append("\nquick wins:")
        parts.extend(f"  - {win}" for win in result.quick_wins)
    return "\n".join(parts)
