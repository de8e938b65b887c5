"""
safe_assistant/narration/fallback.py - Deterministic fallback sentences

Pre-approved replacement text used whenever a generated explanation is
missing, fails, or is rejected.
"""

from __future__ import annotations

from typing import Dict

from safe_assistant.gateway.models import DecisionKind

DRIFT_FALLBACK = (
    "I can only help with payment-related actions here, so I didn't proceed. "
    "Nothing was sent."
)

DECISION_FALLBACKS: Dict[DecisionKind, str] = {
    DecisionKind.REPLAY_DENIED: (
        "That action was already completed earlier, so it can't be used again."
    ),
    DecisionKind.DENY: (
        "I didn't complete that request because it exceeds the allowed limit. "
        "Nothing was sent."
    ),
    DecisionKind.ALLOW: (
        "I completed that payment for you. "
        "The action was approved and finished successfully."
    ),
}

_missing = set(DecisionKind) - set(DECISION_FALLBACKS)
if _missing:
    raise RuntimeError(
        f"No fallback sentence for decision kinds: {sorted(k.value for k in _missing)}"
    )


def fallback_for(kind: DecisionKind) -> str:
    """Return the fixed fallback sentence for a decision kind."""
    return DECISION_FALLBACKS[kind]
