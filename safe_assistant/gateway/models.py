"""
safe_assistant/gateway/models.py - Authorization data model

Normalized shapes produced at the authorization boundary. Everything here is
immutable once built; one instance lives for one decision cycle.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .exceptions import ReceiptIntegrityError


class Decision(Enum):
    """Trusted decision states the normalizer may emit."""
    ALLOW = "ALLOW"
    DENY = "DENY"


class DecisionKind(Enum):
    """Decision kinds that narration is produced for."""
    ALLOW = "ALLOW"
    DENY = "DENY"
    REPLAY_DENIED = "REPLAY_DENIED"

    @classmethod
    def from_outcome(cls, outcome: "AuthorizationOutcome") -> "DecisionKind":
        return cls.ALLOW if outcome.is_allowed else cls.DENY


DEFAULT_DENY_CODE = "POLICY_DENY"
DEFAULT_DENY_REASON = "Request denied by policy"


@dataclass(frozen=True)
class AuthorizationOutcome:
    """
    Normalized result of one authorization attempt.

    Exactly one of ``receipt_id`` (ALLOW) or ``deny_code`` (DENY) is
    populated. A receipt id may be the empty string when the upstream
    service omitted it; callers must go through ``require_receipt()``
    before acting on an ALLOW.
    """

    decision: Decision
    receipt_id: Optional[str] = None
    deny_code: Optional[str] = None
    deny_reason: Optional[str] = None
    policy_fingerprint: Optional[str] = None
    payload_fingerprint: Optional[str] = None

    def __post_init__(self):
        if self.decision is Decision.ALLOW:
            if self.receipt_id is None or self.deny_code is not None:
                raise ValueError("ALLOW outcome must carry a receipt id and no deny code")
        else:
            if self.deny_code is None or self.receipt_id is not None:
                raise ValueError("DENY outcome must carry a deny code and no receipt id")

    @classmethod
    def allow(
        cls,
        receipt_id: str,
        policy_fingerprint: Optional[str] = None,
        payload_fingerprint: Optional[str] = None,
    ) -> "AuthorizationOutcome":
        return cls(
            decision=Decision.ALLOW,
            receipt_id=receipt_id,
            policy_fingerprint=policy_fingerprint,
            payload_fingerprint=payload_fingerprint,
        )

    @classmethod
    def deny(
        cls,
        deny_code: str = DEFAULT_DENY_CODE,
        deny_reason: str = DEFAULT_DENY_REASON,
        policy_fingerprint: Optional[str] = None,
        payload_fingerprint: Optional[str] = None,
    ) -> "AuthorizationOutcome":
        return cls(
            decision=Decision.DENY,
            deny_code=deny_code,
            deny_reason=deny_reason,
            policy_fingerprint=policy_fingerprint,
            payload_fingerprint=payload_fingerprint,
        )

    @property
    def is_allowed(self) -> bool:
        return self.decision is Decision.ALLOW

    def require_receipt(self) -> str:
        """
        Return the receipt id of an ALLOW outcome.

        Raises:
            ReceiptIntegrityError: If the outcome is not an ALLOW or the
                upstream service returned an empty receipt id.
        """
        if not self.is_allowed or not self.receipt_id:
            raise ReceiptIntegrityError(self.receipt_id)
        return self.receipt_id

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"decision": self.decision.value}
        for name in (
            "receipt_id",
            "deny_code",
            "deny_reason",
            "policy_fingerprint",
            "payload_fingerprint",
        ):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data


@dataclass(frozen=True)
class ExecutionOutcome:
    """Classified response of an execute-with-receipt call."""

    executed: bool
    status_code: int
    body: Dict[str, Any]


@dataclass(frozen=True)
class AuditSnapshot:
    """Receipt state fetched for audit display only."""

    state: str = "unknown"
    signature_valid: str = "N/A"
    executed_at: str = "N/A"

    @classmethod
    def from_receipt(cls, data: Mapping[str, Any]) -> "AuditSnapshot":
        state = data.get("state")
        if state is None:
            state = data.get("status", "unknown")
        signature = data.get("signature_valid")
        executed_at = data.get("executed_at")
        return cls(
            state=str(state),
            signature_valid="N/A" if signature is None else str(signature),
            executed_at="N/A" if executed_at is None else str(executed_at),
        )

    @property
    def was_executed(self) -> bool:
        return (
            self.state.lower() == "executed"
            and bool(self.executed_at)
            and self.executed_at != "N/A"
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "state": self.state,
            "signature_valid": self.signature_valid,
            "executed_at": self.executed_at,
        }
