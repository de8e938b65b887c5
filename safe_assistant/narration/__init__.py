"""
safe_assistant/narration - Governed narration

Validation, fallback, caching, and speech for explanations of authorization
decisions. Nothing generated reaches the user without passing through here.
"""

from .schemas import ExplanationRequest, ExplanationResult, ExplanationSource
from .validator import validate_explanation, has_contradiction
from .fallback import DRIFT_FALLBACK, fallback_for
from .cache import ExplanationCache, explanation_cache_key
from .audio_cache import NarrationCache, narration_cache_key
from .alignment import AlignmentData, estimate_alignment
from .tts import SpeechResult, SpeechSynthesizer

__all__ = [
    # Schemas
    "ExplanationRequest",
    "ExplanationResult",
    "ExplanationSource",
    # Validation
    "validate_explanation",
    "has_contradiction",
    # Fallback
    "DRIFT_FALLBACK",
    "fallback_for",
    # Caches
    "ExplanationCache",
    "explanation_cache_key",
    "NarrationCache",
    "narration_cache_key",
    # Speech
    "AlignmentData",
    "estimate_alignment",
    "SpeechResult",
    "SpeechSynthesizer",
]
