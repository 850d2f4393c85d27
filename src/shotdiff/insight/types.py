"""Insight request/response types.

The response models mirror the JSON schema the classifier is asked to
follow. Validation is strict: unknown keys, missing fields and values
outside the enums are rejected rather than coerced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from shotdiff.compare.options import ColorScheme

Severity = Literal["pass", "minor", "major", "critical"]
IssueSeverity = Literal["minor", "major", "critical"]
IssueCategory = Literal[
    "layout",
    "spacing",
    "typography",
    "color",
    "content",
    "missing_element",
    "other",
]

SEVERITIES: tuple[str, ...] = ("pass", "minor", "major", "critical")
ISSUE_SEVERITIES: tuple[str, ...] = ("minor", "major", "critical")
ISSUE_CATEGORIES: tuple[str, ...] = (
    "layout",
    "spacing",
    "typography",
    "color",
    "content",
    "missing_element",
    "other",
)


class InsightIssue(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    title: StrictStr
    location: StrictStr
    category: IssueCategory
    severity: IssueSeverity
    evidence: StrictStr
    recommendation: StrictStr


class InsightResult(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    summary: StrictStr
    severity: Severity
    issues: list[InsightIssue]
    quick_wins: list[StrictStr] = Field(alias="quickWins")
    verdict: StrictStr | None = None

    def to_dict(self) -> dict[str, Any]:
        """Wire form: camelCase ``quickWins``, ``issues`` always a list."""
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class InsightContext:
    """Image references and labels supplied by the calling collaborator.

    References are URLs the classifier can resolve (public or signed);
    labels are human-readable origins such as the captured page URL.
    """

    baseline_image_ref: str
    current_image_ref: str
    diff_image_ref: str | None = None
    baseline_source_label: str | None = None
    current_source_label: str | None = None


@dataclass(frozen=True)
class InsightRequest:
    """Everything the classifier is told about one comparison."""

    baseline_image_ref: str
    current_image_ref: str
    mismatch_percent: float
    mismatched_pixel_count: int
    diff_image_ref: str | None = None
    baseline_source_label: str | None = None
    current_source_label: str | None = None
    color_scheme: ColorScheme = ColorScheme.TWO_TONE

    @property
    def page_label(self) -> str:
        return self.baseline_source_label or self.current_source_label or "unknown"
