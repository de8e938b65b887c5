"""
tests/unit/test_config.py - Configuration loading tests
"""

import json

from safe_assistant.bootstrap.config import AppConfig, load_config


class TestFromEnv:
    """Tests for environment configuration."""

    def test_defaults(self, monkeypatch):
        for name in ("ASSISTANT_GATEWAY_URL", "ASSISTANT_TTS_ENABLED", "ASSISTANT_API_PORT", "ASSISTANT_TTS_CACHE_DIR"):
            monkeypatch.delenv(name, raising=False)

        config = AppConfig.from_env()

        assert config.gateway.url == "http://localhost:8787"
        assert config.tts.enabled is False
        assert config.tts.model == "gemini-2.5-flash-preview-tts"
        assert config.tts.voice == "Kore"
        assert config.cache.explain_ttl_seconds == 86400
        assert config.cache.tts_dir == "./tts-cache"
        assert config.api.port == 8788

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("ASSISTANT_GATEWAY_URL", "http://gw:9000")
        monkeypatch.setenv("ASSISTANT_TTS_ENABLED", "TRUE")
        monkeypatch.setenv("ASSISTANT_EXPLAIN_CACHE_TTL_SECONDS", "60")
        monkeypatch.setenv("ASSISTANT_LLM_PROVIDER", "local")
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")

        config = AppConfig.from_env()

        assert config.gateway.url == "http://gw:9000"
        assert config.tts.enabled is True
        assert config.tts.api_key == "g-key"
        assert config.cache.explain_ttl_seconds == 60
        assert config.llm.provider == "local"

    def test_anthropic_key_fallback(self, monkeypatch):
        monkeypatch.delenv("ASSISTANT_LLM_API_KEY", raising=False)
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-env")

        assert AppConfig.from_env().llm.api_key == "sk-env"


class TestFromFile:
    """Tests for JSON file overlay."""

    def test_file_overrides_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ASSISTANT_GATEWAY_URL", "http://from-env")
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "environment": "test",
            "gateway": {"url": "http://from-file", "agent_id": "file-agent"},
            "cache": {"explain_enabled": False},
        }))

        config = AppConfig.from_file(str(path))

        assert config.environment == "test"
        assert config.gateway.url == "http://from-file"
        assert config.gateway.agent_id == "file-agent"
        assert config.cache.explain_enabled is False

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"tts": {"not_a_field": 1}, "unknown_section": {}}))

        config = AppConfig.from_file(str(path))

        assert not hasattr(config.tts, "not_a_field")

    def test_missing_file_uses_environment(self, tmp_path):
        config = AppConfig.from_file(str(tmp_path / "missing.json"))

        assert isinstance(config, AppConfig)

    def test_load_config_default_location(self, tmp_path, monkeypatch):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "safe_assistant.json").write_text(json.dumps({"environment": "located"}))
        monkeypatch.chdir(tmp_path)

        assert load_config().environment == "located"

    def test_to_dict_has_no_secrets(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-secret")
        monkeypatch.setenv("GEMINI_API_KEY", "g-secret")

        text = json.dumps(AppConfig.from_env().to_dict())

        assert "sk-secret" not in text
        assert "g-secret" not in text
