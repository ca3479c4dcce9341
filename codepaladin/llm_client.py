"""Async chat client for an Ollama-compatible server.

Page content is requested through ``/api/chat`` as a short conversation: an
optional system message (the CodePaladin meta prompt) followed by one user
message describing the page.  ``/api/tags`` doubles as the availability
probe.  Transport failures never raise; they come back as an unsuccessful
:class:`LLMResponse` so the content filler can fall back to a placeholder.

Typical usage::

    client = OllamaClient(model="qwen2.5-coder:14b")
    if await client.is_available():
        resp = await client.generate("Write a pricing page", system=meta_prompt)
        print(resp.text)
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, Field

CONNECT_TIMEOUT = 10.0


class LLMResponse(BaseModel):
    """Structured result of one chat call."""

    text: str = Field(default="", description="Assistant message content")
    model: str = Field(default="", description="Model that answered")
    duration_ms: float = Field(default=0.0, description="Server-side generation time in ms")
    success: bool = Field(default=True)
    error: str | None = Field(default=None, description="Why the call failed")


class OllamaClient:
    """Minimal async client for the Ollama REST API.

    Args:
        base_url: Server root, e.g. ``http://localhost:11434``.
        timeout: Read timeout in seconds for a whole chat call.
        model: Model tag used when ``generate`` is not given one.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        timeout: int = 120,
        model: str = "qwen2.5-coder:14b",
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.model = model

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=CONNECT_TIMEOUT),
        )

    @staticmethod
    def build_messages(prompt: str, system: str = "") -> list[dict[str, str]]:
        """Return the chat transcript for a single request."""
        messages = [{"role": "system", "content": system}] if system else []
        messages.append({"role": "user", "content": prompt})
        return messages

    @staticmethod
    def parse_chat_response(data: dict[str, Any], model: str) -> LLMResponse:
        """Convert a non-streaming ``/api/chat`` body into an :class:`LLMResponse`.

        ``total_duration`` is reported by the server in nanoseconds.
        """
        message = data.get("message") or {}
        return LLMResponse(
            text=message.get("content", ""),
            model=data.get("model") or model,
            duration_ms=data.get("total_duration", 0) / 1_000_000.0,
        )

    def _failure(self, model: str, exc: Exception) -> LLMResponse:
        if isinstance(exc, httpx.ConnectError):
            error = f"Cannot connect to Ollama at {self.base_url}. Is the server running?"
        elif isinstance(exc, httpx.TimeoutException):
            error = f"Request to Ollama timed out after {self.timeout}s."
        elif isinstance(exc, httpx.HTTPStatusError):
            error = f"Ollama returned HTTP {exc.response.status_code}: {exc.response.text[:500]}"
        else:
            error = f"Unexpected error during Ollama chat: {exc}"
        return LLMResponse(model=model, success=False, error=error)

    async def generate(self, prompt: str, model: str | None = None, system: str = "") -> LLMResponse:
        """Send *prompt* (and an optional system message) and return the reply."""
        model = model or self.model
        payload = {
            "model": model,
            "messages": self.build_messages(prompt, system),
            "stream": False,
        }
        try:
            async with self._client() as client:
                response = await client.post("/api/chat", json=payload)
                response.raise_for_status()
                return self.parse_chat_response(response.json(), model)
        except Exception as exc:  # noqa: BLE001
            return self._failure(model, exc)

    async def _tags(self) -> dict[str, Any] | None:
        try:
            async with self._client() as client:
                response = await client.get("/api/tags")
                if response.status_code != 200:
                    return None
                return response.json()
        except Exception:  # noqa: BLE001
            return None

    async def is_available(self) -> bool:
        """Return ``True`` if the server answers ``/api/tags`` with HTTP 200."""
        return await self._tags() is not None

    async def list_models(self) -> list[str]:
        """Sorted names of the locally available models; empty when unreachable."""
        data = await self._tags() or {}
        return sorted(m["name"] for m in data.get("models", []) if m.get("name"))
