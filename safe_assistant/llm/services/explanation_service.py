"""
safe_assistant/llm/services/explanation_service.py - Explanation Service

Produces the user-facing explanation of an authorization decision:

    cache lookup -> generate -> validate -> contradiction check -> cache write

Generated text is admitted only if it passes every check. Every other path
ends in a fixed fallback sentence, which is cached exactly like a success.
"""

from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

from safe_assistant.narration.cache import ExplanationCache
from safe_assistant.narration.fallback import DRIFT_FALLBACK, fallback_for
from safe_assistant.narration.schemas import (
    ExplanationRequest,
    ExplanationResult,
    ExplanationSource,
)
from safe_assistant.narration.validator import has_contradiction, validate_explanation

from ..prompts.explanation import EXPLANATION_SYSTEM_PROMPT, create_explanation_prompt

if TYPE_CHECKING:
    from ..protocol import LLMProviderProtocol

logger = logging.getLogger("llm.services.explanation")

MAX_EXPLANATION_CHARS = 800
PREVIEW_CHARS = 120


class ExplanationService:
    """
    Service for explaining authorization decisions.

    Features:
    - Fingerprint-keyed caching of admitted explanations
    - Post-generation domain validation and contradiction guard
    - Deterministic fallbacks on failure, timeout, or rejection
    """

    def __init__(
        self,
        llm: Optional["LLMProviderProtocol"] = None,
        cache: Optional[ExplanationCache] = None,
        max_chars: int = MAX_EXPLANATION_CHARS,
    ):
        """
        Initialize the explanation service.

        Args:
            llm: Generation provider (None means always fall back)
            cache: Explanation cache shared across decision cycles
            max_chars: Ceiling above which generated text is discarded
        """
        self.llm = llm
        self.cache = cache
        self.max_chars = max_chars

    async def explain(
        self,
        request: ExplanationRequest,
        cache_key: Optional[str] = None,
    ) -> ExplanationResult:
        """
        Explain a decision.

        Args:
            request: Facts the explanation may draw from
            cache_key: Fingerprint from ``explanation_cache_key``; no caching
                when omitted

        Returns:
            ExplanationResult that is safe to show and speak
        """
        if cache_key and self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                return ExplanationResult(
                    text=cached.text,
                    source=cached.source,
                    rejected=cached.rejected,
                    cached=True,
                )

        result = await self._resolve(request)

        if cache_key and self.cache is not None:
            self.cache.set(cache_key, result)
        return result

    async def _resolve(self, request: ExplanationRequest) -> ExplanationResult:
        candidate = await self._generate(request)
        if candidate is None:
            return self._decision_fallback(request)

        if not validate_explanation(candidate):
            logger.warning(
                f"Validator rejected output, using drift fallback. "
                f"Preview: {candidate[:PREVIEW_CHARS]}"
            )
            return ExplanationResult(
                text=DRIFT_FALLBACK,
                source=ExplanationSource.FALLBACK,
                rejected=True,
            )

        if has_contradiction(candidate, request.kind):
            logger.warning(
                f"Contradiction detected (decision={request.kind.value}), "
                f"using decision fallback"
            )
            return self._decision_fallback(request, rejected=True)

        return ExplanationResult(text=candidate, source=ExplanationSource.GENERATED)

    async def _generate(self, request: ExplanationRequest) -> Optional[str]:
        """Return stripped candidate text, or None when generation failed."""
        if self.llm is None:
            logger.debug("No LLM available, using fallback")
            return None

        try:
            response = await self.llm.complete(
                prompt=create_explanation_prompt(request),
                system_prompt=EXPLANATION_SYSTEM_PROMPT,
            )
        except Exception as e:
            logger.error(f"LLM explanation failed: {e}, using fallback")
            return None

        text = (response.content or "").strip()
        if not text:
            logger.warning("LLM returned empty explanation, using fallback")
            return None
        if len(text) > self.max_chars:
            logger.warning(f"LLM explanation too long ({len(text)} chars), using fallback")
            return None
        return text

    def _decision_fallback(
        self,
        request: ExplanationRequest,
        rejected: bool = False,
    ) -> ExplanationResult:
        return ExplanationResult(
            text=fallback_for(request.kind),
            source=ExplanationSource.FALLBACK,
            rejected=rejected,
        )
