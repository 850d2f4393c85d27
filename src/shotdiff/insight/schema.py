"""Response schema sent to the classifier and strict parsing of its reply."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from shotdiff.errors import InsightUnavailableError
from shotdiff.insight.types import (
    ISSUE_CATEGORIES,
    ISSUE_SEVERITIES,
    SEVERITIES,
    InsightResult,
)

log = logging.getLogger(__name__)

SCHEMA_NAME = "visual_qa_report"

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "summary": {
            "type": "string",
            "description": "One sentence on what regressed, or that nothing did.",
        },
        "severity": {
            "type": "string",
            "enum": list(SEVERITIES),
            "description": "Overall severity, driven by the worst issue found.",
        },
        "issues": {
            "type": "array",
            "description": "Visual regressions from baseline to current. Empty when none.",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "What changed."},
                    "location": {"type": "string", "description": "Where on the page."},
                    "category": {"type": "string", "enum": list(ISSUE_CATEGORIES)},
                    "severity": {"type": "string", "enum": list(ISSUE_SEVERITIES)},
                    "evidence": {
                        "type": "string",
                        "description": "Baseline shows X, current shows Y.",
                    },
                    "recommendation": {
                        "type": "string",
                        "description": "How to restore the baseline appearance.",
                    },
                },
                "required": [
                    "title",
                    "location",
                    "category",
                    "severity",
                    "evidence",
                    "recommendation",
                ],
                "additionalProperties": False,
            },
        },
        "quickWins": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Simple fixes. Empty when there are no issues.",
        },
        "verdict": {
            "type": ["string", "null"],
            "description": "Optional one-line ship/no-ship verdict.",
        },
    },
    "required": ["summary", "severity", "issues", "quickWins", "verdict"],
    "additionalProperties": False,
}


def response_format() -> dict[str, Any]:
    """The ``response_format`` block enforcing RESPONSE_SCHEMA."""
    return {
        "type": "json_schema",
        "json_schema": {"name": SCHEMA_NAME, "strict": True, "schema": RESPONSE_SCHEMA},
    }


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def parse_insight(content: str | bytes | dict[str, Any]) -> InsightResult:
    """Validate classifier output into an InsightResult.

    Raises:
        InsightUnavailableError: If the content is not JSON or does not
            match the schema. ``detail`` lists the offending fields.
    """
    data: Any = content
    if isinstance(content, (str, bytes)):
        try:
            data = json.loads(content)
        except ValueError as exc:
            log.warning("classifier returned non-JSON content")
            raise InsightUnavailableError(
                "classifier returned invalid JSON", detail=str(exc)
            ) from exc
    if not isinstance(data, dict):
        raise InsightUnavailableError(
            "classifier returned invalid insight",
            detail=f"expected object, got {type(data).__name__}",
        )
    try:
        return InsightResult.model_validate(data)
    except ValidationError as exc:
        detail = _describe(exc)
        log.warning("classifier output rejected: %s", detail)
        raise InsightUnavailableError("classifier returned invalid insight", detail=detail) from exc
