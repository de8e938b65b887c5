"""
safe_assistant/llm/providers - Generation provider implementations
"""

from .base import BaseProvider
from .anthropic import AnthropicProvider
from .local import LocalProvider

__all__ = [
    "BaseProvider",
    "AnthropicProvider",
    "LocalProvider",
]
