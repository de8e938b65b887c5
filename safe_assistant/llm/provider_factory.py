"""
safe_assistant/llm/provider_factory.py - Provider factory

Creates the generation provider named by configuration. Supports Anthropic
(Claude) and local (Ollama) providers.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from .protocol import LLMProviderProtocol
from .providers.anthropic import AnthropicProvider, DEFAULT_MODEL as ANTHROPIC_DEFAULT_MODEL
from .providers.local import LocalProvider, DEFAULT_MODEL as LOCAL_DEFAULT_MODEL, DEFAULT_BASE_URL

logger = logging.getLogger("llm.factory")

PROVIDER_ANTHROPIC = "anthropic"
PROVIDER_LOCAL = "local"
PROVIDER_OLLAMA = "ollama"  # Alias for local

ENV_PROVIDER = "ASSISTANT_LLM_PROVIDER"
ENV_ANTHROPIC_API_KEY = "ANTHROPIC_API_KEY"


def create_llm_provider(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    **kwargs: Any,
) -> LLMProviderProtocol:
    """
    Create a generation provider.

    Args:
        provider: "anthropic" or "local"/"ollama" (env ASSISTANT_LLM_PROVIDER)
        model: Model identifier; provider default when empty
        api_key: Anthropic API key (env ANTHROPIC_API_KEY when empty)
        base_url: Ollama server URL
        **kwargs: BaseProvider options (max_tokens, timeout_seconds, ...)

    Returns:
        Configured provider

    Raises:
        ValueError: If the provider type is unknown
    """
    resolved = (provider or os.getenv(ENV_PROVIDER, PROVIDER_ANTHROPIC)).lower()
    if resolved == PROVIDER_OLLAMA:
        resolved = PROVIDER_LOCAL

    if resolved == PROVIDER_ANTHROPIC:
        resolved_key = api_key or os.getenv(ENV_ANTHROPIC_API_KEY)
        if not resolved_key:
            logger.warning("No Anthropic API key found. Set ANTHROPIC_API_KEY")
        resolved_model = model or ANTHROPIC_DEFAULT_MODEL
        logger.info(f"Creating Anthropic provider with model: {resolved_model}")
        return AnthropicProvider(model=resolved_model, api_key=resolved_key, **kwargs)

    if resolved == PROVIDER_LOCAL:
        resolved_model = model or LOCAL_DEFAULT_MODEL
        resolved_url = base_url or DEFAULT_BASE_URL
        logger.info(f"Creating local provider with model: {resolved_model} at {resolved_url}")
        return LocalProvider(model=resolved_model, base_url=resolved_url, **kwargs)

    raise ValueError(
        f"Unknown provider: {resolved}. "
        f"Supported: {PROVIDER_ANTHROPIC}, {PROVIDER_LOCAL}"
    )
