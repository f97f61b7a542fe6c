"""HTTP client for the external chat-completion service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence

import httpx

logger = logging.getLogger(__name__)


class CompletionServiceError(RuntimeError):
    """Raised when the completion service fails or returns an unusable body."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        prefix = f"[{self.status_code}] " if self.status_code is not None else ""
        return f"{prefix}{super().__str__()}"


class CompletionClient(Protocol):
    async def complete(self, *, system: str, messages: Sequence[Mapping[str, str]]) -> str:
        ...


def _extract_error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text or "Unknown completion service error"

    if isinstance(data, Mapping):
        error = data.get("error")
        if isinstance(error, Mapping) and "message" in error:
            return str(error["message"])
        if isinstance(error, str):
            return error
    return "Completion service returned an error"


def join_text_blocks(data: Any) -> str:
    """Concatenate the ``text`` content blocks of a Messages API response."""

    if not isinstance(data, Mapping):
        raise CompletionServiceError("Completion response is not a JSON object")
    content = data.get("content")
    if not isinstance(content, list):
        raise CompletionServiceError("Completion response has no content list")

    texts = [
        str(block.get("text", ""))
        for block in content
        if isinstance(block, Mapping) and block.get("type") == "text"
    ]
    if not texts:
        raise CompletionServiceError("Completion response contains no text blocks")
    if not any(text.strip() for text in texts):
        raise CompletionServiceError("Completion response text is empty")
    return "\n".join(texts)


@dataclass(slots=True)
class AnthropicCompletionClient:
    """Small async client for the Anthropic Messages API."""

    api_key: str | None
    model: str
    base_url: str = "https://api.anthropic.com"
    version: str = "2023-06-01"
    max_tokens: int = 4000
    timeout: float = 60.0
    transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.AsyncClient | None = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
            )
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "anthropic-version": self.version,
        }
        if self.api_key:
            headers["x-api-key"] = self.api_key
        return headers

    async def complete(self, *, system: str, messages: Sequence[Mapping[str, str]]) -> str:
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": system,
            "messages": [{"role": message["role"], "content": message["content"]} for message in messages],
        }
        client = self._ensure_client()

        try:
            response = await client.post("/v1/messages", json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            raise CompletionServiceError(f"Completion request failed: {exc}") from exc

        if response.status_code >= 400:
            raise CompletionServiceError(_extract_error_message(response), status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise CompletionServiceError("Completion response is not valid JSON") from exc

        text = join_text_blocks(data)
        logger.debug("Completion returned %d characters", len(text))
        return text

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
