"""
safe_assistant/llm/prompts/explanation.py - Explanation prompt templates

Domain-locked instructions plus a fact block built only from the
ExplanationRequest. The output is still untrusted and is validated after
generation.
"""

from __future__ import annotations

from typing import List, TYPE_CHECKING

from safe_assistant.gateway.models import DecisionKind

from ..sanitizer import sanitize_user_input

if TYPE_CHECKING:
    from safe_assistant.narration.schemas import ExplanationRequest

# =============================================================================
# System Prompt
# =============================================================================

EXPLANATION_SYSTEM_PROMPT = """You are a governed action explainer. You describe the outcome of a payment or transaction action to the end user. You do NOT answer questions, suggest features, or discuss capabilities.

This explanation will be spoken aloud.

Domain:
- Only describe actions related to payments and transaction safety.
- Do not mention weather, search, browsing, unsupported features, or capability limits.
- Do not invent tools, actions, or system behaviors that are not in the provided facts.

Facts:
- Only use the facts provided. If a fact is not present, do not infer it.
- Do not speculate about why something happened beyond what the facts state.

Outcome - the explanation must clearly match exactly one case:
- ALLOWED: the action was completed successfully.
- DENIED: the action was stopped due to a policy limit or safety rule.
- REPLAY_DENIED: the action was already used and cannot be repeated.

Always include at least one of these phrases (exact or near-exact):
"nothing was sent", "I didn't complete that", "this was completed", "can't be used again".

Tone: use "I" for the assistant and "you" for the user. Calm, clear, protective. No blame.

Never output: "gateway", "policy hash", "payload hash", "signature", "receipt ID", "security rules", "API", "unsupported", "feature", "browse", "weather", "search", or any identifier written with underscores.

Length: 2-3 sentences. Plain text only. No markdown, no bullet points."""

DECISION_LABELS = {
    DecisionKind.ALLOW: "ALLOWED",
    DecisionKind.DENY: "DENIED",
    DecisionKind.REPLAY_DENIED: "REPLAY_DENIED",
}


# =============================================================================
# Prompt Templates
# =============================================================================

def build_fact_block(request: "ExplanationRequest") -> str:
    """
    Build the fact block for an explanation request.

    Only request fields are used; fingerprints and receipt identifiers are
    reduced to yes/no facts.
    """
    outcome = request.outcome
    action = request.action

    lines: List[str] = [
        f'User request: "{sanitize_user_input(request.user_text)}"',
        f"Proposed action: {action.summary()}",
    ]
    if action.plan:
        lines.append(f"Agent reasoning: {'; '.join(action.plan)}")

    lines.append(f"Decision: {DECISION_LABELS[request.kind]}")

    if outcome.deny_code:
        lines.append(f"Denial category: {outcome.deny_code}")
    if outcome.deny_reason:
        lines.append(f"Denial detail: {outcome.deny_reason}")
    if outcome.receipt_id:
        lines.append("Receipt was issued: yes")

    audit = request.audit
    if audit is not None:
        lines.append(f"Audit state: {audit.state}")
        if audit.was_executed:
            lines.append("Execution confirmed: yes")

    return "\n".join(lines)


def create_explanation_prompt(request: "ExplanationRequest") -> str:
    return f"Given these facts, explain what happened:\n\n{build_fact_block(request)}"
