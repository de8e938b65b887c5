"""
safe_assistant/narration/schemas.py - Explanation request/result shapes
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, TYPE_CHECKING

from safe_assistant.gateway.models import (
    AuditSnapshot,
    AuthorizationOutcome,
    DecisionKind,
)

from .fallback import DRIFT_FALLBACK

if TYPE_CHECKING:
    from safe_assistant.llm.prompts.schemas import ProposedAction


class ExplanationSource(Enum):
    """Where an explanation's text came from."""
    GENERATED = "generated"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ExplanationRequest:
    """
    The facts an explanation may draw from. Built fresh per turn.

    ``kind`` is the narrated decision; it differs from the outcome's
    decision only for replays (outcome ALLOW, kind REPLAY_DENIED).
    """

    user_text: str
    action: "ProposedAction"
    outcome: AuthorizationOutcome
    kind: DecisionKind
    audit: Optional[AuditSnapshot] = None


@dataclass(frozen=True)
class ExplanationResult:
    """Explanation admitted to the user."""

    text: str
    source: ExplanationSource
    rejected: bool = False
    cached: bool = False

    @property
    def drift_rejected(self) -> bool:
        """True when the drift fallback replaced a rejected candidate."""
        return self.rejected and self.text == DRIFT_FALLBACK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "source": self.source.value,
            "rejected": self.rejected,
            "cached": self.cached,
        }
