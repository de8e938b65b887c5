"""
safe_assistant/llm/providers/local.py - Local provider (Ollama)

Runs explanation and proposal prompts against a local Ollama server, for
development without an API key.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..protocol import LLMResponse, LLMOptions
from ..exceptions import TransientError
from .base import BaseProvider

logger = logging.getLogger("llm.local")

DEFAULT_BASE_URL = "http://localhost:11434"
DEFAULT_MODEL = "llama3"


class LocalProvider(BaseProvider):
    """
    Local provider using Ollama's ``/api/generate`` endpoint.

    Requires Ollama to be running locally (``ollama serve``) with the
    model pulled.
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        client: Optional[httpx.AsyncClient] = None,
        **kwargs: Any,
    ):
        super().__init__(model=model, **kwargs)
        self.base_url = base_url.rstrip("/")
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
            )
        return self._client

    async def _raw_complete(
        self,
        prompt: str,
        system_prompt: Optional[str],
        options: LLMOptions,
    ) -> LLMResponse:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "num_predict": options.max_tokens or self.default_max_tokens,
                "temperature": options.temperature,
            },
        }
        if system_prompt:
            payload["system"] = system_prompt

        try:
            response = await self._get_client().post("/api/generate", json=payload)
        except httpx.HTTPError as e:
            self._available = False
            raise TransientError(f"Ollama unreachable: {e}", e)

        if response.status_code != 200:
            raise TransientError(f"Ollama returned status {response.status_code}")

        self._available = True
        data = response.json()
        content = data.get("response", "")

        # Ollama reports eval counts instead of token usage
        usage = {
            "prompt_tokens": int(data.get("prompt_eval_count", 0)),
            "completion_tokens": int(data.get("eval_count", 0)),
        }
        return LLMResponse(
            content=content,
            model=data.get("model", self.model),
            usage=usage,
            finish_reason=data.get("done_reason", "stop"),
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
