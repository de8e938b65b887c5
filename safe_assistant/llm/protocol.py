"""
safe_assistant/llm/protocol.py - Generation provider protocol

The generation service is an untrusted text source. Providers only move
text; admitting it is the narration layer's job.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    Dict,
    Optional,
    Protocol,
    runtime_checkable,
)
import uuid


@dataclass
class LLMResponse:
    """Response from a completion request."""

    content: str
    model: str
    usage: Dict[str, int] = field(default_factory=dict)
    finish_reason: str = "stop"
    latency_ms: int = 0
    request_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])

    @property
    def total_tokens(self) -> int:
        return self.usage.get("prompt_tokens", 0) + self.usage.get("completion_tokens", 0)


@dataclass
class LLMOptions:
    """Options for completion requests."""

    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    timeout_seconds: Optional[float] = None

    def merge_with_defaults(
        self,
        default_max_tokens: int = 1024,
        default_temperature: float = 0.4,
        default_timeout_seconds: float = 30.0,
    ) -> "LLMOptions":
        """Return new options with defaults filled in."""
        return LLMOptions(
            max_tokens=self.max_tokens or default_max_tokens,
            temperature=self.temperature if self.temperature is not None else default_temperature,
            timeout_seconds=self.timeout_seconds or default_timeout_seconds,
        )


@runtime_checkable
class LLMProviderProtocol(Protocol):
    """
    Protocol for generation providers.

    Services depend on this protocol only, so tests can pass a Mock with
    AsyncMock methods.
    """

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        options: Optional[LLMOptions] = None,
    ) -> LLMResponse:
        """
        Generate a completion for the given prompt.

        Raises:
            LLMError: On any failure after retries
        """
        ...

    def is_available(self) -> bool:
        """True if the provider is configured and can accept requests."""
        ...
