"""
safe_assistant/llm/providers/anthropic.py - Anthropic Claude provider
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from ..protocol import LLMResponse, LLMOptions
from ..exceptions import (
    ProviderUnavailableError,
    TransientError,
)
from .base import BaseProvider

logger = logging.getLogger("llm.anthropic")

DEFAULT_MODEL = "claude-sonnet-4-20250514"

TRANSIENT_STATUS_CODES = {408, 429, 500, 502, 503, 504, 529}

TRANSIENT_PATTERNS = (
    "rate limit",
    "overloaded",
    "timeout",
    "connection",
    "temporarily unavailable",
)


class AnthropicProvider(BaseProvider):
    """
    Claude provider using the Anthropic API.

    Configuration via environment or LLMConfig:
        - ANTHROPIC_API_KEY or config.api_key
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(model=model, **kwargs)
        self._api_key = api_key
        self._client: Optional[Any] = None

    def _get_client(self) -> Any:
        """Lazily create the async Anthropic client."""
        if self._client is not None:
            return self._client

        try:
            import anthropic

            # Client falls back to ANTHROPIC_API_KEY when api_key is None
            self._client = anthropic.AsyncAnthropic(
                api_key=self._api_key or None,
                timeout=self.timeout_seconds,
            )
        except Exception as e:
            self._available = False
            raise ProviderUnavailableError(
                "anthropic",
                f"Failed to initialize Anthropic client: {e}",
            ) from e

        self._available = True
        return self._client

    async def _raw_complete(
        self,
        prompt: str,
        system_prompt: Optional[str],
        options: LLMOptions,
    ) -> LLMResponse:
        client = self._get_client()

        try:
            response = await client.messages.create(
                model=self.model,
                max_tokens=options.max_tokens or self.default_max_tokens,
                temperature=options.temperature,
                system=system_prompt or "",
                messages=[{"role": "user", "content": prompt}],
            )
        except Exception as e:
            if self._is_transient_error(e):
                raise TransientError(str(e), e)
            raise

        content = "".join(
            block.text for block in response.content or [] if hasattr(block, "text")
        )
        usage = {
            "prompt_tokens": response.usage.input_tokens,
            "completion_tokens": response.usage.output_tokens,
        }
        return LLMResponse(
            content=content,
            model=response.model,
            usage=usage,
            finish_reason=response.stop_reason or "stop",
        )

    def _is_transient_error(self, error: Exception) -> bool:
        error_str = str(error).lower()
        if any(pattern in error_str for pattern in TRANSIENT_PATTERNS):
            return True
        return getattr(error, "status_code", None) in TRANSIENT_STATUS_CODES

    def is_available(self) -> bool:
        if not (self._api_key or os.getenv("ANTHROPIC_API_KEY")):
            return False
        if self._client is None:
            try:
                self._get_client()
            except ProviderUnavailableError:
                return False
        return self._available
