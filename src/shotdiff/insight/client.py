"""HTTP client for a chat-completions compatible semantic classifier."""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import httpx

from shotdiff.config import DEFAULT_API_BASE, DEFAULT_MODEL, DEFAULT_TIMEOUT_S, InsightSettings
from shotdiff.errors import InsightUnavailableError
from shotdiff.image_compare import ComparisonResult
from shotdiff.insight.prompt import build_payload, build_request
from shotdiff.insight.schema import parse_insight
from shotdiff.insight.types import InsightContext, InsightRequest, InsightResult

log = logging.getLogger(__name__)


def _message_content(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) and content else None


class InsightClient:
    """Send one insight request per call; never retries.

    Every failure (timeout, transport error, non-2xx status, empty or
    invalid content) is raised as InsightUnavailableError.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_API_BASE,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: InsightSettings,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> InsightClient:
        """Build a client from settings.

        Raises:
            InsightUnavailableError: If insights are disabled or no API key is set.
        """
        if not settings.enabled:
            raise InsightUnavailableError("insights disabled (SHOTDIFF_AI_ENABLED is off)")
        if not settings.api_key:
            raise InsightUnavailableError("insights unavailable: OPENAI_API_KEY is not set")
        return cls(
            settings.api_key,
            model=settings.model,
            base_url=settings.api_base,
            timeout_s=settings.timeout_s,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

    def _read_body(self, resp: httpx.Response, deadline: float) -> bytes:
        body = bytearray()
        for chunk in resp.iter_bytes():
            body.extend(chunk)
            if time.monotonic() > deadline:
                raise InsightUnavailableError(
                    f"classifier timed out after {self.timeout_s:g}s",
                    status=resp.status_code,
                    detail="response body still streaming at deadline",
                )
        return bytes(body)

    def complete(self, payload: dict[str, Any]) -> str:
        """POST a chat-completions payload and return the first message content.

        ``timeout_s`` bounds each network phase and also the whole call:
        the body is streamed and abandoned once the deadline passes.
        """
        url = f"{self.base_url}/chat/completions"
        deadline = time.monotonic() + self.timeout_s
        try:
            with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
                with client.stream("POST", url, headers=self._headers(), json=payload) as resp:
                    status = resp.status_code
                    body = self._read_body(resp, deadline)
        except httpx.TimeoutException as exc:
            raise InsightUnavailableError(
                f"classifier timed out after {self.timeout_s:g}s", detail=str(exc)
            ) from exc
        except httpx.HTTPError as exc:
            raise InsightUnavailableError(
                f"classifier unreachable: {exc}", detail=type(exc).__name__
            ) from exc

        if not 200 <= status < 300:
            raise InsightUnavailableError(
                f"classifier returned HTTP {status}",
                status=status,
                detail=body.decode("utf-8", errors="replace")[:500],
            )
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise InsightUnavailableError(
                "classifier response is not JSON", status=status, detail=str(exc)
            ) from exc

        content = _message_content(data)
        if content is None:
            raise InsightUnavailableError(
                "classifier response has no message content", status=status
            )
        log.debug(
            "classifier replied: model=%s usage=%s",
            data.get("model"),
            data.get("usage"),
        )
        return content

    def interpret(self, request: InsightRequest) -> InsightResult:
        log.debug(
            "requesting insight: mismatch=%.4f%% pixels=%d diff=%s",
            request.mismatch_percent,
            request.mismatched_pixel_count,
            request.diff_image_ref is not None,
        )
        result = parse_insight(self.complete(build_payload(request, self.model)))
        log.debug("insight: severity=%s issues=%d", result.severity, len(result.issues))
        return result


def build_and_interpret(
    comparison: ComparisonResult,
    context: InsightContext,
    client: InsightClient,
) -> InsightResult:
    """Ask the classifier to judge one comparison.

    The pixel comparison stays valid when this raises; callers treat the
    two stages as independently failable.

    Raises:
        InsightUnavailableError: On any classifier or validation failure.
    """
    return client.interpret(build_request(comparison, context))
