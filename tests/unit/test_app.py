"""
tests/unit/test_app.py - Application builder tests
"""

import pytest

from safe_assistant.bootstrap.app import AppState, AssistantApp, UnknownScenarioError
from safe_assistant.bootstrap.config import AppConfig
from safe_assistant.gateway.models import DecisionKind
from safe_assistant.narration.fallback import fallback_for


@pytest.fixture
def config(tmp_path, monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    config = AppConfig()
    config.llm.provider = "anthropic"
    config.llm.api_key = ""
    config.cache.tts_dir = str(tmp_path / "tts")
    return config


class TestBuild:
    """Tests for AssistantApp.build."""

    def test_unconfigured_provider_is_dropped(self, config):
        app = AssistantApp(config=config).build()

        assert app.state is AppState.RUNNING
        assert app.llm is None
        assert app.explainer.llm is None

    def test_configured_provider_is_kept(self, config):
        config.llm.api_key = "sk-test"

        app = AssistantApp(config=config).build()

        assert app.llm is not None

    def test_unknown_provider_is_dropped(self, config):
        config.llm.provider = "nonexistent"

        assert AssistantApp(config=config).build().llm is None

    def test_injected_provider_is_used(self, config, scripted_llm_factory):
        llm = scripted_llm_factory()

        app = AssistantApp(config=config, llm=llm).build()

        assert app.llm is llm
        assert app.proposer.llm is llm


class TestRun:
    """Tests for running scenarios through the app."""

    @pytest.mark.asyncio
    async def test_no_provider_falls_back(self, config, gateway_client):
        app = AssistantApp(config=config, gateway=gateway_client)

        result = await app.run_scenario("b")

        assert result.kind is DecisionKind.DENY
        assert result.explanation.text == fallback_for(DecisionKind.DENY)
        await app.close()
        assert app.state is AppState.STOPPED

    @pytest.mark.asyncio
    async def test_unknown_scenario(self, config):
        with pytest.raises(UnknownScenarioError):
            await AssistantApp(config=config).run_scenario("zz")
