from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, List

import aiohttp

from ..errors import ExternalServiceError, TransportError

logger = logging.getLogger("chat_memory_bot")


class GeminiClient:
    """Single-shot client for the Gemini ``generateContent`` REST endpoint.

    Failures are never retried: a non-200 status raises
    ``ExternalServiceError`` and a network failure raises ``TransportError``.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str = "https://generativelanguage.googleapis.com",
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: aiohttp.ClientSession | None = None

    async def start(self) -> None:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    def _endpoint(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model}:generateContent?key={self.api_key}"

    @staticmethod
    def _build_payload(prompt: str) -> Dict[str, Any]:
        return {"contents": [{"parts": [{"text": prompt}]}]}

    async def _request(self, payload: Dict[str, Any]) -> Any:
        if self._session is None or self._session.closed:
            await self.start()
        assert self._session is not None

        try:
            async with self._session.post(self._endpoint(), json=payload) as response:
                text = await response.text()
                status = response.status
        except asyncio.CancelledError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise TransportError(f"Gemini request failed: {exc!r}") from exc

        if status != 200:
            logger.error("Gemini returned HTTP %s for model=%s", status, self.model)
            raise ExternalServiceError(status, text)

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise TransportError("Gemini returned a body that is not JSON") from exc

    @staticmethod
    def _first_candidate_content(data: Any) -> Any:
        if not isinstance(data, dict):
            return None
        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            return None
        first = candidates[0]
        if not isinstance(first, dict):
            return None
        return first.get("content")

    @staticmethod
    def _serialize_fallback(content: Any) -> str:
        if content is None:
            return ""
        try:
            return json.dumps(content, ensure_ascii=False, default=str).strip()
        except (TypeError, ValueError):
            return str(content).strip()

    @classmethod
    def _extract_text(cls, data: Any) -> str:
        content = cls._first_candidate_content(data)

        # 1. content is already text
        if isinstance(content, str):
            return content.strip()

        # 2. content carries a sequence of parts
        parts = content.get("parts") if isinstance(content, dict) else None
        if isinstance(parts, list):
            chunks: List[str] = []
            for part in parts:
                text = part.get("text") if isinstance(part, dict) else None
                if text is not None:
                    chunks.append(str(text))
            return "".join(chunks).strip()

        # 3. anything else
        return cls._serialize_fallback(content)

    async def complete(self, prompt: str) -> str:
        data = await self._request(self._build_payload(prompt))
        return self._extract_text(data)
