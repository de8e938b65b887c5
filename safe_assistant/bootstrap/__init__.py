"""
safe_assistant/bootstrap - Configuration, composition root, and entry points
"""

from .config import (
    AppConfig,
    LLMConfig,
    GatewayConfig,
    CacheConfig,
    TTSConfig,
    APIConfig,
    LoggingConfig,
    load_config,
)
from .app import AssistantApp, AppState, UnknownScenarioError, create_app
from .entrypoints import setup_logging, cli_main, api_main, main

__all__ = [
    # Config
    "AppConfig",
    "LLMConfig",
    "GatewayConfig",
    "CacheConfig",
    "TTSConfig",
    "APIConfig",
    "LoggingConfig",
    "load_config",
    # App
    "AssistantApp",
    "AppState",
    "UnknownScenarioError",
    "create_app",
    # Entry points
    "setup_logging",
    "cli_main",
    "api_main",
    "main",
]
