"""
safe_assistant/gateway/normalizer.py - Decision Normalizer

Converts a raw authorization response (HTTP status + parsed body) into a
trusted AuthorizationOutcome under fail-closed rules:

1. Any non-2xx status is DENY.
2. A 2xx body is inspected for a decision field at top level or inside a
   nested ``receipt`` object, case-normalized.
3. ``DENY`` is DENY.
4. ``ALLOW`` is ALLOW; receipt id and fingerprints are extracted.
5. Anything else (missing, unrecognized, unparsed) is DENY.

Pure classification. Transport failures never reach this module.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

from .models import (
    AuthorizationOutcome,
    DEFAULT_DENY_CODE,
    DEFAULT_DENY_REASON,
    ExecutionOutcome,
)

# =============================================================================
# Field resolution order
# =============================================================================

# (source, field) pairs, consulted in order. The decision stops at the first
# present field; every other lookup takes the first non-empty value.
DECISION_FIELDS = (("top", "decision"), ("receipt", "decision"), ("top", "status"))
DENY_CODE_FIELDS = (
    ("top", "deny_code"),
    ("top", "code"),
    ("receipt", "deny_code"),
    ("receipt", "code"),
)
DENY_REASON_FIELDS = (
    ("top", "deny_reason"),
    ("top", "reason"),
    ("top", "message"),
    ("receipt", "deny_reason"),
    ("receipt", "reason"),
    ("receipt", "message"),
)
RECEIPT_ID_FIELDS = (("top", "receipt_id"), ("receipt", "receipt_id"))
POLICY_HASH_FIELDS = (("top", "policy_hash"), ("receipt", "policy_hash"))
PAYLOAD_HASH_FIELDS = (("top", "payload_hash"), ("receipt", "payload_hash"))

ALLOW_VALUE = "ALLOW"
DENY_VALUE = "DENY"


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _resolve(
    sources: Dict[str, Mapping[str, Any]],
    fields: Sequence[tuple],
) -> Optional[str]:
    """Return the first present, non-empty field value as a string."""
    for source, name in fields:
        value = sources[source].get(name)
        if value is None:
            continue
        text = str(value)
        if text:
            return text
    return None


def _first_present(
    sources: Dict[str, Mapping[str, Any]],
    fields: Sequence[tuple],
) -> Optional[str]:
    """Return the first field that is present at all, even if blank."""
    for source, name in fields:
        value = sources[source].get(name)
        if value is not None:
            return str(value)
    return None


def _sources(body: Any) -> Dict[str, Mapping[str, Any]]:
    top = _as_mapping(body)
    return {"top": top, "receipt": _as_mapping(top.get("receipt"))}


def _is_success(status_code: Any) -> bool:
    return isinstance(status_code, int) and 200 <= status_code < 300


def _deny(sources: Dict[str, Mapping[str, Any]]) -> AuthorizationOutcome:
    return AuthorizationOutcome.deny(
        deny_code=_resolve(sources, DENY_CODE_FIELDS) or DEFAULT_DENY_CODE,
        deny_reason=_resolve(sources, DENY_REASON_FIELDS) or DEFAULT_DENY_REASON,
        policy_fingerprint=_resolve(sources, POLICY_HASH_FIELDS),
        payload_fingerprint=_resolve(sources, PAYLOAD_HASH_FIELDS),
    )


def normalize_authorization(status_code: Any, body: Any) -> AuthorizationOutcome:
    """
    Classify an authorization response as ALLOW or DENY.

    Never raises for any body shape. Only an explicit, exact ``ALLOW``
    (after upper-casing) on a 2xx response yields ALLOW.

    Args:
        status_code: HTTP status code of the response
        body: Parsed JSON body (any type; non-mappings are treated as empty)

    Returns:
        AuthorizationOutcome
    """
    sources = _sources(body)

    if not _is_success(status_code):
        return _deny(sources)

    # A blank decision is ambiguous and must not fall through to a later field
    decision = _first_present(sources, DECISION_FIELDS)
    normalized = decision.upper() if decision is not None else ""

    if normalized != ALLOW_VALUE:
        # DENY, missing and unrecognized values all land here
        return _deny(sources)

    return AuthorizationOutcome.allow(
        receipt_id=_resolve(sources, RECEIPT_ID_FIELDS) or "",
        policy_fingerprint=_resolve(sources, POLICY_HASH_FIELDS) or "",
        payload_fingerprint=_resolve(sources, PAYLOAD_HASH_FIELDS) or "",
    )


def normalize_execution(status_code: Any, body: Any) -> ExecutionOutcome:
    """
    Classify an execute-with-receipt response.

    Only a 2xx response with no error marker counts as executed; a refused
    execution of an already-used receipt is how replays surface.
    """
    data = dict(_as_mapping(body))
    refused = (
        not _is_success(status_code)
        or bool(data.get("error"))
        or bool(data.get("deny_code"))
        or str(data.get("status", "")).lower() == "error"
        or str(data.get("decision", "")).upper() == DENY_VALUE
    )
    code = status_code if isinstance(status_code, int) else 0
    return ExecutionOutcome(executed=not refused, status_code=code, body=data)
