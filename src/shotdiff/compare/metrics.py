"""Mismatch metrics and pass/fail verdict."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ComparisonMetrics:
    """Counts and verdict for one comparison.

    ``passed`` is True only when no pixel mismatches after tolerance;
    judging whether a small mismatch matters is left to the insight step.
    """

    mismatched_pixel_count: int
    total_pixel_count: int
    mismatch_percent: float
    passed: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "mismatched_pixel_count": self.mismatched_pixel_count,
            "total_pixel_count": self.total_pixel_count,
            "mismatch_percent": self.mismatch_percent,
            "pass": self.passed,
        }


def aggregate(mismatched_pixel_count: int, total_pixel_count: int) -> ComparisonMetrics:
    """Build metrics; an empty image yields 0% rather than dividing by zero."""
    if mismatched_pixel_count < 0 or total_pixel_count < 0:
        raise ValueError("pixel counts must be non-negative")
    if mismatched_pixel_count > total_pixel_count:
        raise ValueError(
            f"mismatched pixels ({mismatched_pixel_count}) exceed total ({total_pixel_count})"
        )
    percent = 0.0
    if total_pixel_count:
        percent = round(mismatched_pixel_count / total_pixel_count * 100.0, 4)
    return ComparisonMetrics(
        mismatched_pixel_count=mismatched_pixel_count,
        total_pixel_count=total_pixel_count,
        mismatch_percent=percent,
        passed=mismatched_pixel_count == 0,
    )
