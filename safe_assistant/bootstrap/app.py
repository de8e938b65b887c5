"""
safe_assistant/bootstrap/app.py - Application builder and lifecycle

Composition root. Owns every long-lived object (caches, clients, services)
and hands them to the decision cycle and the HTTP surface explicitly.
"""

from __future__ import annotations
from typing import Optional
from enum import Enum
import logging

from safe_assistant.assistant.scenarios import get_scenario
from safe_assistant.assistant.turn import TurnResult, run_scenario, run_turn
from safe_assistant.gateway.client import GatewayClient
from safe_assistant.llm.protocol import LLMProviderProtocol
from safe_assistant.llm.provider_factory import create_llm_provider
from safe_assistant.llm.services.explanation_service import ExplanationService
from safe_assistant.llm.services.proposal_service import ProposalService
from safe_assistant.narration.audio_cache import NarrationCache
from safe_assistant.narration.cache import ExplanationCache
from safe_assistant.narration.tts import SpeechResult, SpeechSynthesizer

from .config import AppConfig, load_config

logger = logging.getLogger("bootstrap.app")


class AppState(Enum):
    """Application lifecycle states."""
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"


class UnknownScenarioError(KeyError):
    """Raised when a scenario id is not in the catalogue."""


class AssistantApp:
    """
    Main application class.

    Build order:
        caches -> generation provider -> gateway client -> synthesizer -> services
    """

    def __init__(
        self,
        config_file: Optional[str] = None,
        config: Optional[AppConfig] = None,
        llm: Optional[LLMProviderProtocol] = None,
        gateway: Optional[GatewayClient] = None,
        synthesizer: Optional[SpeechSynthesizer] = None,
    ):
        """
        Initialize the application.

        Args:
            config_file: Optional path to JSON config file
            config: Pre-built configuration (skips loading)
            llm: Pre-built generation provider (tests)
            gateway: Pre-built gateway client (tests)
            synthesizer: Pre-built speech synthesizer (tests)
        """
        self._config_file = config_file
        self._config = config
        self.state = AppState.CREATED

        self.llm = llm
        self.gateway = gateway
        self.synthesizer = synthesizer
        self.explanation_cache: Optional[ExplanationCache] = None
        self.narration_cache: Optional[NarrationCache] = None
        self.explainer: Optional[ExplanationService] = None
        self.proposer: Optional[ProposalService] = None

    @property
    def config(self) -> AppConfig:
        if self._config is None:
            self._config = load_config(self._config_file)
        return self._config

    def build(self) -> "AssistantApp":
        """Build caches, clients, and services."""
        if self.state is AppState.RUNNING:
            return self

        config = self.config

        self.explanation_cache = ExplanationCache(
            ttl_seconds=config.cache.explain_ttl_seconds,
            enabled=config.cache.explain_enabled,
        )
        self.narration_cache = NarrationCache(
            directory=config.cache.tts_dir,
            enabled=config.cache.tts_enabled,
        )

        if self.llm is None and config.llm.enabled:
            self.llm = self._create_llm()

        if self.gateway is None:
            self.gateway = GatewayClient(
                base_url=config.gateway.url,
                timeout_seconds=config.gateway.timeout_seconds,
            )

        if self.synthesizer is None:
            self.synthesizer = SpeechSynthesizer(
                cache=self.narration_cache,
                api_key=config.tts.api_key,
                model=config.tts.model,
                voice=config.tts.voice,
                enabled=config.tts.enabled,
                timeout_seconds=config.tts.timeout_seconds,
            )

        self.explainer = ExplanationService(llm=self.llm, cache=self.explanation_cache)
        self.proposer = ProposalService(llm=self.llm)

        self.state = AppState.RUNNING
        logger.info(
            f"Application built (llm={'on' if self.llm else 'off'}, "
            f"tts={'on' if config.tts.enabled else 'off'})"
        )
        return self

    def _create_llm(self) -> Optional[LLMProviderProtocol]:
        llm_config = self.config.llm
        try:
            llm = create_llm_provider(
                provider=llm_config.provider,
                model=llm_config.model or None,
                api_key=llm_config.api_key or None,
                base_url=llm_config.base_url,
                max_tokens=llm_config.max_tokens,
                temperature=llm_config.temperature,
                timeout_seconds=llm_config.timeout_seconds,
                retry_attempts=llm_config.retry_attempts,
                retry_delay_ms=llm_config.retry_delay_ms,
            )
        except ValueError as e:
            logger.warning(f"Generation provider not available: {e}")
            return None

        if not llm.is_available():
            logger.warning(f"Generation provider '{llm_config.provider}' is not configured, using fallbacks")
            return None
        return llm

    async def run_text(self, user_text: str) -> TurnResult:
        """Run one uncached decision cycle for free-form user text."""
        self.build()
        return await run_turn(
            user_text,
            self.proposer,
            self.gateway,
            self.explainer,
            self.config.gateway.agent_id,
        )

    async def run_scenario(self, scenario_id: str) -> TurnResult:
        """
        Run a catalogued scenario.

        Raises:
            UnknownScenarioError: If the id is not in the catalogue
        """
        scenario = get_scenario(scenario_id)
        if scenario is None:
            raise UnknownScenarioError(scenario_id)

        self.build()
        logger.info(f"Running {scenario.label}")
        return await run_scenario(
            scenario,
            self.proposer,
            self.gateway,
            self.explainer,
            self.config.gateway.agent_id,
        )

    async def synthesize(
        self,
        text: str,
        voice: Optional[str] = None,
        want_alignment: bool = True,
    ) -> SpeechResult:
        """Synthesize narration audio for already-admitted text."""
        self.build()
        return await self.synthesizer.synthesize(
            text,
            voice=voice,
            want_alignment=want_alignment,
        )

    async def close(self) -> None:
        """Release network clients."""
        for resource in (self.gateway, self.synthesizer, self.llm):
            close = getattr(resource, "close", None)
            if close is not None:
                await close()
        self.state = AppState.STOPPED
        logger.info("Application stopped")

    def run_api(self) -> None:
        """Run API server."""
        import uvicorn

        from safe_assistant.deployment.api import create_fastapi_app

        self.build()
        uvicorn.run(
            create_fastapi_app(self),
            host=self.config.api.host,
            port=self.config.api.port,
        )


def create_app(config_file: Optional[str] = None) -> AssistantApp:
    """Create and build the application."""
    return AssistantApp(config_file).build()
