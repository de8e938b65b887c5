"""
safe_assistant/llm - Generation boundary

Protocol-based abstraction over generation providers (Claude, Ollama) plus
the explanation and proposal services built on it.

Usage:
    from safe_assistant.llm import create_llm_provider

    llm = create_llm_provider(provider="anthropic")
    response = await llm.complete(prompt="...", system_prompt="...")
"""

from .protocol import (
    LLMProviderProtocol,
    LLMResponse,
    LLMOptions,
)
from .provider_factory import create_llm_provider
from .exceptions import (
    LLMError,
    ProviderUnavailableError,
    TransientError,
)

__all__ = [
    # Protocol
    "LLMProviderProtocol",
    "LLMResponse",
    "LLMOptions",
    # Factory
    "create_llm_provider",
    # Exceptions
    "LLMError",
    "ProviderUnavailableError",
    "TransientError",
]
