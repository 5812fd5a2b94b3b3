from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import aiohttp
import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from chat_memory_bot.errors import ExternalServiceError, TransportError  # noqa: E402
from chat_memory_bot.services.gemini_client import GeminiClient  # noqa: E402


class _FakeResponse:
    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self._body = body

    async def text(self) -> str:
        return self._body

    async def __aenter__(self) -> "_FakeResponse":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None


class _FakeSession:
    def __init__(self, *, status: int = 200, body: object = None, raises: Exception | None = None) -> None:
        self.closed = False
        self.calls: list[tuple[str, object]] = []
        self._status = status
        self._body = body if isinstance(body, str) else json.dumps(body)
        self._raises = raises

    def post(self, url: str, json: object = None) -> _FakeResponse:  # noqa: A002
        self.calls.append((url, json))
        if self._raises is not None:
            raise self._raises
        return _FakeResponse(self._status, self._body)


def _client(session: _FakeSession) -> GeminiClient:
    client = GeminiClient(api_key="secret", model="gemini-2.0-flash", timeout_seconds=30)
    client._session = session  # type: ignore[assignment]
    return client


def test_extract_text_joins_parts_in_order() -> None:
    data = {"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]}
    assert GeminiClient._extract_text(data) == "ab"


def test_extract_text_accepts_plain_string_content() -> None:
    assert GeminiClient._extract_text({"candidates": [{"content": "hello"}]}) == "hello"
    assert GeminiClient._extract_text({"candidates": [{"content": "  padded \n"}]}) == "padded"


def test_extract_text_falls_back_to_serialized_content() -> None:
    assert GeminiClient._extract_text({"candidates": [{"content": {"role": "model"}}]}) == '{"role": "model"}'
    assert GeminiClient._extract_text({"candidates": [{"content": 42}]}) == "42"
    assert GeminiClient._extract_text({"candidates": [{"content": {"parts": "oops"}}]}) == '{"parts": "oops"}'


def test_extract_text_tolerates_missing_content() -> None:
    assert GeminiClient._extract_text({}) == ""
    assert GeminiClient._extract_text({"candidates": []}) == ""
    assert GeminiClient._extract_text(["not", "a", "dict"]) == ""


def test_extract_text_skips_parts_without_text() -> None:
    data = {"candidates": [{"content": {"parts": [{"inlineData": {}}, {"text": "only"}, "junk"]}}]}
    assert GeminiClient._extract_text(data) == "only"


def test_complete_posts_prompt_once_and_returns_text() -> None:
    session = _FakeSession(body={"candidates": [{"content": {"parts": [{"text": "Hi!"}]}}]})
    client = _client(session)

    assert asyncio.run(client.complete("\nUser: hello")) == "Hi!"

    assert len(session.calls) == 1
    url, payload = session.calls[0]
    assert url.endswith("/v1beta/models/gemini-2.0-flash:generateContent?key=secret")
    assert payload == {"contents": [{"parts": [{"text": "\nUser: hello"}]}]}


def test_non_success_status_raises_external_service_error_without_retry() -> None:
    session = _FakeSession(status=503, body="unavailable")
    client = _client(session)

    with pytest.raises(ExternalServiceError) as exc_info:
        asyncio.run(client.complete("hi"))

    assert exc_info.value.status == 503
    assert len(session.calls) == 1


def test_network_failure_raises_transport_error() -> None:
    session = _FakeSession(raises=aiohttp.ClientConnectionError("connection reset"))
    client = _client(session)

    with pytest.raises(TransportError):
        asyncio.run(client.complete("hi"))
    assert len(session.calls) == 1


def test_timeout_raises_transport_error() -> None:
    client = _client(_FakeSession(raises=asyncio.TimeoutError()))

    with pytest.raises(TransportError):
        asyncio.run(client.complete("hi"))


def test_non_json_body_raises_transport_error() -> None:
    client = _client(_FakeSession(status=200, body="<html>"))

    with pytest.raises(TransportError):
        asyncio.run(client.complete("hi"))
