"""
safe_assistant/narration/validator.py - Explanation validation

Post-generation checks applied to every generated explanation before it may
reach the user:

- validate_explanation: domain drift, jargon leaks, missing domain reference
- has_contradiction: DENY explanations that claim completion or fail to
  state the denial

Both are pure and make no network calls.
"""

from __future__ import annotations

import re

from safe_assistant.gateway.models import DecisionKind

# Internal jargon and known off-domain topics
FORBIDDEN_TERMS = (
    "weather",
    "browse",
    "search",
    "unsupported",
    "feature",
    "api",
    "gateway",
    "policy_hash",
    "payload_hash",
    "receipt id",
    "receipt_id",
    "deny_code",
    "security_rules",
)

# Leaked internal field names look like lowercase_with_underscores
INTERNAL_IDENTIFIER_RE = re.compile(r"\b[a-z]+_[a-z_]+\b")

DOMAIN_ANCHOR_RE = re.compile(
    r"transfer|payment|sent|complete|denied|denial|replay|limit|approved|finished",
    re.IGNORECASE,
)

COMPLETION_PHRASES = (
    "completed",
    "processed",
    "finished",
    "approved",
    "executed",
    "succeeded",
    "went through",
)

DENIAL_PHRASES = (
    "didn't complete",
    "did not complete",
    "refused",
    "blocked",
    "denied",
    "stopped",
    "prevented",
    "wasn't sent",
    "was not sent",
    "nothing was sent",
)


def contains_forbidden_term(text: str) -> bool:
    lower = text.lower()
    return any(term in lower for term in FORBIDDEN_TERMS)


def validate_explanation(text: str) -> bool:
    """
    Accept or reject a generated explanation.

    Args:
        text: Candidate explanation

    Returns:
        True only if no forbidden term, no internal identifier, and at
        least one domain anchor is present
    """
    if contains_forbidden_term(text):
        return False
    if INTERNAL_IDENTIFIER_RE.search(text):
        return False
    if not DOMAIN_ANCHOR_RE.search(text):
        return False
    return True


def has_contradiction(text: str, kind: DecisionKind) -> bool:
    """
    Check whether an explanation contradicts its decision.

    Only DENY is guarded. A DENY explanation is contradictory when it
    contains any completion phrase, or when it contains no denial phrase.
    """
    if kind is not DecisionKind.DENY:
        return False

    lower = text.lower()
    if any(phrase in lower for phrase in COMPLETION_PHRASES):
        return True
    return not any(phrase in lower for phrase in DENIAL_PHRASES)
