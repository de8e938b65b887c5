"""
safe_assistant/bootstrap/config.py - Application configuration

Provides configuration loading from files, environment variables, and defaults.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from pathlib import Path
import os
import json
import logging

logger = logging.getLogger("bootstrap.config")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class LLMConfig:
    """Generation provider configuration."""

    enabled: bool = True
    provider: str = "anthropic"
    model: str = ""  # Provider default when empty
    api_key: str = ""
    base_url: Optional[str] = None  # For local LLM (Ollama)
    max_tokens: int = 1024
    temperature: float = 0.4
    timeout_seconds: int = 30
    retry_attempts: int = 2
    retry_delay_ms: int = 1000

    @classmethod
    def from_env(cls) -> "LLMConfig":
        return cls(
            enabled=_env_bool("ASSISTANT_LLM_ENABLED", "true"),
            provider=os.getenv("ASSISTANT_LLM_PROVIDER", "anthropic"),
            model=os.getenv("ASSISTANT_LLM_MODEL", ""),
            api_key=os.getenv("ASSISTANT_LLM_API_KEY", os.getenv("ANTHROPIC_API_KEY", "")),
            base_url=os.getenv("ASSISTANT_LLM_BASE_URL"),
            max_tokens=int(os.getenv("ASSISTANT_LLM_MAX_TOKENS", "1024")),
            temperature=float(os.getenv("ASSISTANT_LLM_TEMPERATURE", "0.4")),
            timeout_seconds=int(os.getenv("ASSISTANT_LLM_TIMEOUT", "30")),
            retry_attempts=int(os.getenv("ASSISTANT_LLM_RETRY_ATTEMPTS", "2")),
            retry_delay_ms=int(os.getenv("ASSISTANT_LLM_RETRY_DELAY_MS", "1000")),
        )


@dataclass
class GatewayConfig:
    """Authorization service configuration."""

    url: str = "http://localhost:8787"
    timeout_seconds: int = 30
    agent_id: str = "safe-assistant"

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        return cls(
            url=os.getenv("ASSISTANT_GATEWAY_URL", "http://localhost:8787"),
            timeout_seconds=int(os.getenv("ASSISTANT_GATEWAY_TIMEOUT", "30")),
            agent_id=os.getenv("ASSISTANT_AGENT_ID", "safe-assistant"),
        )


@dataclass
class CacheConfig:
    """Explanation and narration cache configuration."""

    explain_enabled: bool = True
    explain_ttl_seconds: int = 86400
    tts_enabled: bool = True
    tts_dir: str = "./tts-cache"

    @classmethod
    def from_env(cls) -> "CacheConfig":
        return cls(
            explain_enabled=_env_bool("ASSISTANT_EXPLAIN_CACHE_ENABLED", "true"),
            explain_ttl_seconds=int(os.getenv("ASSISTANT_EXPLAIN_CACHE_TTL_SECONDS", "86400")),
            tts_enabled=_env_bool("ASSISTANT_TTS_CACHE_ENABLED", "true"),
            tts_dir=os.getenv("ASSISTANT_TTS_CACHE_DIR", "./tts-cache"),
        )


@dataclass
class TTSConfig:
    """Speech synthesis configuration."""

    enabled: bool = False
    model: str = "gemini-2.5-flash-preview-tts"
    voice: str = "Kore"
    api_key: str = ""
    timeout_seconds: int = 60

    @classmethod
    def from_env(cls) -> "TTSConfig":
        return cls(
            enabled=_env_bool("ASSISTANT_TTS_ENABLED", "false"),
            model=os.getenv("ASSISTANT_TTS_MODEL", "gemini-2.5-flash-preview-tts"),
            voice=os.getenv("ASSISTANT_TTS_VOICE", "Kore"),
            api_key=os.getenv("GEMINI_API_KEY", ""),
            timeout_seconds=int(os.getenv("ASSISTANT_TTS_TIMEOUT", "60")),
        )


@dataclass
class APIConfig:
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 8788
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "APIConfig":
        cors = os.getenv("ASSISTANT_API_CORS_ORIGINS", "*")
        return cls(
            host=os.getenv("ASSISTANT_API_HOST", "0.0.0.0"),
            port=int(os.getenv("ASSISTANT_API_PORT", "8788")),
            cors_origins=cors.split(",") if cors else ["*"],
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    log_file: Optional[str] = None
    json_logs: bool = False

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        return cls(
            level=os.getenv("ASSISTANT_LOG_LEVEL", "INFO"),
            log_file=os.getenv("ASSISTANT_LOG_FILE"),
            json_logs=_env_bool("ASSISTANT_JSON_LOGS", "false"),
        )


SECTIONS = ("llm", "gateway", "cache", "tts", "api", "logging")


@dataclass
class AppConfig:
    """Root configuration for the assistant."""

    environment: str = "development"

    llm: LLMConfig = field(default_factory=LLMConfig)
    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    tts: TTSConfig = field(default_factory=TTSConfig)
    api: APIConfig = field(default_factory=APIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls(
            environment=os.getenv("ASSISTANT_ENVIRONMENT", "development"),
            llm=LLMConfig.from_env(),
            gateway=GatewayConfig.from_env(),
            cache=CacheConfig.from_env(),
            tts=TTSConfig.from_env(),
            api=APIConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_file(cls, filepath: str) -> "AppConfig":
        """Load configuration from JSON file."""
        path = Path(filepath)
        if not path.exists():
            logger.warning(f"Config file not found: {filepath}, using environment")
            return cls.from_env()

        with open(path) as f:
            data = json.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """Create config from dictionary, overlaying the environment."""
        config = cls.from_env()

        if "environment" in data:
            config.environment = data["environment"]

        for section in SECTIONS:
            values = data.get(section)
            if not isinstance(values, dict):
                continue
            target = getattr(config, section)
            for key, value in values.items():
                if hasattr(target, key):
                    setattr(target, key, value)
                else:
                    logger.warning(f"Ignoring unknown config key: {section}.{key}")

        return config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize config to dictionary. Secrets are omitted."""
        return {
            "environment": self.environment,
            "llm": {
                "enabled": self.llm.enabled,
                "provider": self.llm.provider,
                "model": self.llm.model,
                "max_tokens": self.llm.max_tokens,
                "temperature": self.llm.temperature,
            },
            "gateway": {
                "url": self.gateway.url,
                "agent_id": self.gateway.agent_id,
            },
            "cache": {
                "explain_enabled": self.cache.explain_enabled,
                "explain_ttl_seconds": self.cache.explain_ttl_seconds,
                "tts_enabled": self.cache.tts_enabled,
                "tts_dir": self.cache.tts_dir,
            },
            "tts": {
                "enabled": self.tts.enabled,
                "model": self.tts.model,
                "voice": self.tts.voice,
            },
            "api": {
                "host": self.api.host,
                "port": self.api.port,
            },
        }


DEFAULT_CONFIG_PATHS = (
    "./safe_assistant.json",
    "./config/safe_assistant.json",
)


def load_config(filepath: Optional[str] = None) -> AppConfig:
    """
    Load configuration from file or environment.

    Args:
        filepath: Optional path to JSON config file

    Returns:
        AppConfig instance
    """
    if filepath:
        config = AppConfig.from_file(filepath)
    else:
        config = None
        for path in DEFAULT_CONFIG_PATHS:
            if Path(path).exists():
                logger.info(f"Loading config from: {path}")
                config = AppConfig.from_file(path)
                break
        if config is None:
            config = AppConfig.from_env()

    logger.info(f"Configuration loaded: environment={config.environment}")
    return config
