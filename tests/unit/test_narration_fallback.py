"""
tests/unit/test_narration_fallback.py - Fallback Selector tests
"""

import time

import pytest

from safe_assistant.gateway.models import DecisionKind
from safe_assistant.narration.fallback import DECISION_FALLBACKS, DRIFT_FALLBACK, fallback_for
from safe_assistant.narration.validator import has_contradiction, validate_explanation


class TestFallbackFor:
    """Tests for deterministic fallback selection."""

    @pytest.mark.parametrize("kind", list(DecisionKind))
    def test_every_kind_has_a_sentence(self, kind):
        text = fallback_for(kind)

        assert text
        assert text == DECISION_FALLBACKS[kind]

    @pytest.mark.parametrize("kind", list(DecisionKind))
    def test_fallbacks_pass_their_own_guards(self, kind):
        """Fallback sentences are admissible explanations for their kind."""
        text = fallback_for(kind)

        assert validate_explanation(text)
        assert not has_contradiction(text, kind)

    def test_drift_fallback_is_admissible_for_deny(self):
        assert validate_explanation(DRIFT_FALLBACK)
        assert not has_contradiction(DRIFT_FALLBACK, DecisionKind.DENY)

    def test_selection_is_fast(self):
        """Selection is a table lookup, well under a millisecond."""
        start = time.perf_counter()
        for _ in range(1000):
            for kind in DecisionKind:
                fallback_for(kind)
        elapsed = time.perf_counter() - start

        assert elapsed / 3000 < 0.001

    def test_deterministic(self):
        assert fallback_for(DecisionKind.DENY) == fallback_for(DecisionKind.DENY)
