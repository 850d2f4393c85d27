"""Semantic insight step: prompt assembly, classifier call, strict parsing."""

from shotdiff.insight.client import InsightClient, build_and_interpret
from shotdiff.insight.prompt import build_messages, build_payload, build_request, severity_prior
from shotdiff.insight.schema import RESPONSE_SCHEMA, parse_insight
from shotdiff.insight.types import (
    InsightContext,
    InsightIssue,
    InsightRequest,
    InsightResult,
)

__all__ = [
    "RESPONSE_SCHEMA",
    "InsightClient",
    "InsightContext",
    "InsightIssue",
    "InsightRequest",
    "InsightResult",
    "build_and_interpret",
    "build_messages",
    "build_payload",
    "build_request",
    "parse_insight",
    "severity_prior",
]
