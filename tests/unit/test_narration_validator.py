"""
tests/unit/test_narration_validator.py - Explanation Validator and Contradiction Guard tests
"""

import pytest

from safe_assistant.gateway.models import DecisionKind
from safe_assistant.narration.validator import (
    FORBIDDEN_TERMS,
    has_contradiction,
    validate_explanation,
)


GOOD_EXPLANATIONS = [
    "I completed that payment for you. The transfer of $20 was approved.",
    "I didn't complete that request because it exceeds the allowed limit. Nothing was sent.",
    "That action was already used earlier, so the replay was denied.",
]


class TestValidateExplanation:
    """Tests for domain validation of generated text."""

    @pytest.mark.parametrize("text", GOOD_EXPLANATIONS)
    def test_accepts_in_domain_text(self, text):
        assert validate_explanation(text)

    @pytest.mark.parametrize("term", FORBIDDEN_TERMS)
    def test_rejects_forbidden_terms(self, term):
        """Any forbidden term rejects, whatever else is present."""
        text = f"The payment was approved. Also, {term}."

        assert not validate_explanation(text)

    def test_forbidden_terms_are_case_insensitive(self):
        assert not validate_explanation("The Weather is nice and the payment was sent.")

    def test_rejects_weather_answer(self):
        """An off-domain answer is drift."""
        assert not validate_explanation(
            "I can't check the weather, but I can help with a payment."
        )

    @pytest.mark.parametrize("identifier", ["amount_limit", "deny_reason", "stripe_sim", "payment_create_v_two"])
    def test_rejects_internal_identifiers(self, identifier):
        """lowercase_with_underscores tokens look like leaked field names."""
        text = f"The payment was denied because of {identifier}."

        assert not validate_explanation(text)

    def test_rejects_text_without_domain_anchor(self):
        assert not validate_explanation("Hello there! How can I help you today?")

    def test_adding_forbidden_term_never_rescues(self):
        """Appending a forbidden term to a rejected text keeps it rejected."""
        text = "Hello there!"
        assert not validate_explanation(text)
        assert not validate_explanation(text + " weather")


class TestHasContradiction:
    """Tests for the contradiction guard."""

    @pytest.mark.parametrize("text", [
        "The payment was completed.",
        "I processed your transfer. Nothing was sent.",
        "Your payment went through, it was denied.",
        "The request was approved but blocked.",
    ])
    def test_deny_with_completion_claim(self, text):
        """A DENY explanation claiming completion contradicts."""
        assert has_contradiction(text, DecisionKind.DENY)

    def test_deny_without_denial_phrase(self):
        """A DENY explanation must state the denial."""
        assert has_contradiction("The payment of $5000 is large.", DecisionKind.DENY)

    @pytest.mark.parametrize("text", [
        "I didn't complete that request. Nothing was sent.",
        "That transfer was blocked because it exceeds the limit.",
        "Your payment was denied.",
    ])
    def test_consistent_deny(self, text):
        assert not has_contradiction(text, DecisionKind.DENY)

    @pytest.mark.parametrize("kind", [DecisionKind.ALLOW, DecisionKind.REPLAY_DENIED])
    def test_other_kinds_are_not_guarded(self, kind):
        assert not has_contradiction("The payment was completed.", kind)
        assert not has_contradiction("It was denied.", kind)
