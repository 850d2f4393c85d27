"""Tests for the classifier HTTP client."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from shotdiff.compare import aggregate
from shotdiff.config import InsightSettings
from shotdiff.errors import InsightUnavailableError
from shotdiff.image_compare import ComparisonResult
from shotdiff.insight import InsightClient, InsightContext, InsightRequest, build_and_interpret
from shotdiff.insight import client as client_mod

VALID = {
    "summary": "No visual regressions detected",
    "severity": "pass",
    "issues": [],
    "quickWins": [],
    "verdict": None,
}


def _completion(content: Any) -> dict[str, Any]:
    return {
        "model": "test-model",
        "usage": {"total_tokens": 10},
        "choices": [{"message": {"role": "assistant", "content": content}}],
    }


def _client(handler: Any, **kwargs: Any) -> InsightClient:
    return InsightClient(
        "sk-test",
        model="test-model",
        base_url="https://llm.example/v1/",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _request() -> InsightRequest:
    return InsightRequest(
        baseline_image_ref="https://cdn.example/b.png",
        current_image_ref="https://cdn.example/c.png",
        mismatch_percent=0.05,
        mismatched_pixel_count=12,
    )


class TestInterpret:
    def test_success(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_completion(json.dumps(VALID)))

        result = _client(handler).interpret(_request())
        assert result.severity == "pass"
        assert result.issues == []
        req = seen[0]
        assert req.method == "POST"
        assert str(req.url) == "https://llm.example/v1/chat/completions"
        assert req.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(req.content)
        assert body["model"] == "test-model"
        assert body["response_format"]["json_schema"]["strict"] is True

    def test_http_error_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, text="rate limited")

        with pytest.raises(InsightUnavailableError, match="HTTP 429") as exc_info:
            _client(handler).interpret(_request())
        assert exc_info.value.status == 429
        assert exc_info.value.detail == "rate limited"

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(InsightUnavailableError, match="timed out after 5s"):
            _client(handler, timeout_s=5.0).interpret(_request())

    def test_overall_deadline(self, monkeypatch: pytest.MonkeyPatch) -> None:
        class SlowClock:
            """First reading sets the deadline; later ones are past it."""

            def __init__(self) -> None:
                self.calls = 0

            def monotonic(self) -> float:
                self.calls += 1
                return 0.0 if self.calls == 1 else 100.0

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_completion(json.dumps(VALID)))

        monkeypatch.setattr(client_mod, "time", SlowClock())
        with pytest.raises(InsightUnavailableError, match="timed out after 5s") as exc_info:
            _client(handler, timeout_s=5.0).interpret(_request())
        assert exc_info.value.status == 200

    def test_unreachable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(InsightUnavailableError, match="unreachable"):
            _client(handler).interpret(_request())

    def test_non_json_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(InsightUnavailableError, match="not JSON"):
            _client(handler).interpret(_request())

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"choices": []},
            {"choices": [{"message": {"content": None, "refusal": "no"}}]},
            {"choices": [{"message": {"content": ""}}]},
        ],
    )
    def test_missing_content(self, body: dict[str, Any]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=body)

        with pytest.raises(InsightUnavailableError, match="no message content"):
            _client(handler).interpret(_request())

    def test_schema_violation_propagates(self) -> None:
        bad = dict(VALID, severity="fail")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=_completion(json.dumps(bad)))

        with pytest.raises(InsightUnavailableError, match="invalid insight"):
            _client(handler).interpret(_request())

    def test_single_attempt(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        with pytest.raises(InsightUnavailableError):
            _client(handler).interpret(_request())
        assert len(calls) == 1


class TestBuildAndInterpret:
    def test_diff_ref_sent_only_with_diff(self) -> None:
        bodies: list[dict[str, Any]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=_completion(json.dumps(VALID)))

        context = InsightContext("b", "c", diff_image_ref="d")
        client = _client(handler)
        build_and_interpret(ComparisonResult(aggregate(1, 4), b"png"), context, client)
        build_and_interpret(ComparisonResult(aggregate(0, 4), None), context, client)

        def urls(body: dict[str, Any]) -> list[str]:
            return [
                p["image_url"]["url"]
                for p in body["messages"][1]["content"]
                if p["type"] == "image_url"
            ]

        assert urls(bodies[0]) == ["b", "c", "d"]
        assert urls(bodies[1]) == ["b", "c"]


class TestFromSettings:
    def _settings(self, **overrides: Any) -> InsightSettings:
        fields: dict[str, Any] = {
            "enabled": True,
            "api_key": "sk",
            "model": "m",
            "api_base": "https://x/v1",
            "timeout_s": 12.0,
        }
        fields.update(overrides)
        return InsightSettings(**fields)

    def test_builds_client(self) -> None:
        client = InsightClient.from_settings(self._settings())
        assert client.model == "m"
        assert client.base_url == "https://x/v1"
        assert client.timeout_s == 12.0

    def test_disabled(self) -> None:
        with pytest.raises(InsightUnavailableError, match="disabled"):
            InsightClient.from_settings(self._settings(enabled=False))

    def test_missing_key(self) -> None:
        with pytest.raises(InsightUnavailableError, match="OPENAI_API_KEY"):
            InsightClient.from_settings(self._settings(api_key=None))
