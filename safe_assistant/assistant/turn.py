"""
safe_assistant/assistant/turn.py - Decision cycle

One turn of the assistant:

    propose -> authorize -> (execute -> audit) -> explain

Authorization is the only thing that decides whether an action runs. The
proposer and the explainer are both untrusted; the first is checked by the
authorization service, the second by the narration guards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from safe_assistant.gateway.client import GatewayClient
from safe_assistant.gateway.exceptions import GatewayError, GatewayUnavailableError
from safe_assistant.gateway.models import (
    AuditSnapshot,
    AuthorizationOutcome,
    DecisionKind,
    ExecutionOutcome,
)
from safe_assistant.llm.exceptions import LLMError
from safe_assistant.llm.prompts.schemas import ProposedAction
from safe_assistant.llm.services.explanation_service import ExplanationService
from safe_assistant.llm.services.proposal_service import ProposalService
from safe_assistant.narration.cache import explanation_cache_key
from safe_assistant.narration.schemas import ExplanationRequest, ExplanationResult

from .scenarios import Scenario

logger = logging.getLogger("assistant.turn")

GATEWAY_UNAVAILABLE_CODE = "GATEWAY_UNAVAILABLE"
GATEWAY_UNAVAILABLE_REASON = "Authorization service unavailable"
EXECUTION_REFUSED_CODE = "EXECUTION_REFUSED"
EXECUTION_REFUSED_REASON = "The authorized action was not carried out"


@dataclass
class TurnResult:
    """Everything one decision cycle produced."""

    user_text: str
    action: ProposedAction
    outcome: AuthorizationOutcome
    kind: DecisionKind
    explanation: ExplanationResult
    execution: Optional[ExecutionOutcome] = None
    replay: Optional[ExecutionOutcome] = None
    audit: Optional[AuditSnapshot] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "user_text": self.user_text,
            "proposed": self.action.model_dump(),
            "kind": self.kind.value,
            "explanation": self.explanation.text,
            "explanation_source": self.explanation.source.value,
            "drift_rejected": self.explanation.drift_rejected,
        }
        data.update(self.outcome.to_dict())
        if self.execution is not None:
            data["execution"] = {
                "executed": self.execution.executed,
                "status_code": self.execution.status_code,
            }
        if self.replay is not None:
            data["replay"] = {
                "executed": self.replay.executed,
                "status_code": self.replay.status_code,
            }
        if self.audit is not None:
            data["audit"] = self.audit.to_dict()
        return data


async def _propose(proposer: ProposalService, user_text: str) -> ProposedAction:
    try:
        return await proposer.propose(user_text)
    except LLMError as e:
        logger.warning(f"Proposal failed ({e}), proposing echo")
        return ProposedAction.echo(user_text)


async def _authorize(
    gateway: GatewayClient,
    action: ProposedAction,
    agent_id: str,
) -> AuthorizationOutcome:
    try:
        return await gateway.request_receipt(
            agent_id=agent_id,
            action_type=action.action_type,
            target_system=action.target_system,
            payload=action.payload,
        )
    except GatewayUnavailableError as e:
        logger.error(f"Authorization unavailable, denying: {e}")
        return AuthorizationOutcome.deny(
            deny_code=GATEWAY_UNAVAILABLE_CODE,
            deny_reason=GATEWAY_UNAVAILABLE_REASON,
        )


async def _execute(
    gateway: GatewayClient,
    receipt_id: str,
    action: ProposedAction,
    agent_id: str,
) -> ExecutionOutcome:
    try:
        return await gateway.execute_with_receipt(
            receipt_id=receipt_id,
            agent_id=agent_id,
            payload=action.payload,
        )
    except GatewayUnavailableError as e:
        logger.error(f"Execution unavailable: {e}")
        return ExecutionOutcome(executed=False, status_code=0, body={})


async def _audit(gateway: GatewayClient, receipt_id: str) -> Optional[AuditSnapshot]:
    try:
        return await gateway.fetch_receipt(receipt_id)
    except GatewayError as e:
        logger.warning(f"Could not fetch receipt for audit: {e}")
        return None


async def _explain(
    explainer: ExplanationService,
    user_text: str,
    action: ProposedAction,
    outcome: AuthorizationOutcome,
    kind: DecisionKind,
    audit: Optional[AuditSnapshot],
    scenario_id: Optional[str],
) -> ExplanationResult:
    cache_key = None
    if scenario_id:
        cache_key = explanation_cache_key(
            scenario_id=scenario_id,
            kind=kind,
            deny_code=outcome.deny_code,
            action_type=action.action_type,
            target_system=action.target_system,
            # Drift is only known after generation; a drifted explanation is
            # cached under this same key, so later turns reuse it unchanged
            drift_rejected=False,
        )
    request = ExplanationRequest(
        user_text=user_text,
        action=action,
        outcome=outcome,
        kind=kind,
        audit=audit,
    )
    return await explainer.explain(request, cache_key=cache_key)


async def _narrate_refusal(
    explainer: ExplanationService,
    user_text: str,
    action: ProposedAction,
    outcome: AuthorizationOutcome,
    execution: ExecutionOutcome,
    scenario_id: Optional[str],
) -> TurnResult:
    """Narrate an authorized action that the service then refused to run."""
    logger.warning(f"Authorized action was not executed (status={execution.status_code})")
    refusal = AuthorizationOutcome.deny(
        deny_code=EXECUTION_REFUSED_CODE,
        deny_reason=EXECUTION_REFUSED_REASON,
    )
    explanation = await _explain(
        explainer, user_text, action, refusal, DecisionKind.DENY, None, scenario_id
    )
    return TurnResult(
        user_text=user_text,
        action=action,
        outcome=outcome,
        kind=DecisionKind.DENY,
        explanation=explanation,
        execution=execution,
    )


async def run_turn(
    user_text: str,
    proposer: ProposalService,
    gateway: GatewayClient,
    explainer: ExplanationService,
    agent_id: str,
    scenario_id: Optional[str] = None,
) -> TurnResult:
    """
    Run one decision cycle.

    Args:
        user_text: Raw user request
        proposer: Action proposal service
        gateway: Authorization service client
        explainer: Explanation service
        agent_id: Agent identity presented to the authorization service
        scenario_id: Enables explanation caching when given

    Returns:
        TurnResult

    Raises:
        ReceiptIntegrityError: If an ALLOW arrived without a usable receipt
    """
    action = await _propose(proposer, user_text)
    logger.info(f"Proposed {action.summary()}")

    outcome = await _authorize(gateway, action, agent_id)

    if not outcome.is_allowed:
        logger.info(f"DECISION: DENIED (code={outcome.deny_code})")
        explanation = await _explain(
            explainer, user_text, action, outcome, DecisionKind.DENY, None, scenario_id
        )
        return TurnResult(
            user_text=user_text,
            action=action,
            outcome=outcome,
            kind=DecisionKind.DENY,
            explanation=explanation,
        )

    receipt_id = outcome.require_receipt()
    logger.info(f"DECISION: ALLOWED (receipt={receipt_id})")

    execution = await _execute(gateway, receipt_id, action, agent_id)
    if not execution.executed:
        return await _narrate_refusal(explainer, user_text, action, outcome, execution, scenario_id)

    audit = await _audit(gateway, receipt_id)
    explanation = await _explain(
        explainer, user_text, action, outcome, DecisionKind.ALLOW, audit, scenario_id
    )
    return TurnResult(
        user_text=user_text,
        action=action,
        outcome=outcome,
        kind=DecisionKind.ALLOW,
        explanation=explanation,
        execution=execution,
        audit=audit,
    )


async def run_replay(
    user_text: str,
    proposer: ProposalService,
    gateway: GatewayClient,
    explainer: ExplanationService,
    agent_id: str,
    scenario_id: Optional[str] = None,
) -> TurnResult:
    """
    Execute an authorized action, then try to execute the same receipt again.

    A refused second execution is narrated as REPLAY_DENIED, but only after
    the first execution actually ran. A denied request, or an authorized one
    the service refused to run, is narrated as DENY with nothing replayed.

    Raises:
        ReceiptIntegrityError: If an ALLOW arrived without a usable receipt
    """
    action = await _propose(proposer, user_text)
    outcome = await _authorize(gateway, action, agent_id)

    if not outcome.is_allowed:
        logger.info(f"First request denied ({outcome.deny_code}), nothing to replay")
        explanation = await _explain(
            explainer, user_text, action, outcome, DecisionKind.DENY, None, scenario_id
        )
        return TurnResult(
            user_text=user_text,
            action=action,
            outcome=outcome,
            kind=DecisionKind.DENY,
            explanation=explanation,
        )

    receipt_id = outcome.require_receipt()
    execution = await _execute(gateway, receipt_id, action, agent_id)
    if not execution.executed:
        # Nothing ran, so a refused replay would prove nothing
        return await _narrate_refusal(explainer, user_text, action, outcome, execution, scenario_id)

    logger.info(f"Replaying receipt {receipt_id}")
    replay = await _execute(gateway, receipt_id, action, agent_id)

    if replay.executed:
        logger.warning("Replay was not refused by the authorization service")
        kind = DecisionKind.ALLOW
    else:
        logger.info("REPLAY DENIED")
        kind = DecisionKind.REPLAY_DENIED

    audit = await _audit(gateway, receipt_id)
    explanation = await _explain(
        explainer, user_text, action, outcome, kind, audit, scenario_id
    )
    return TurnResult(
        user_text=user_text,
        action=action,
        outcome=outcome,
        kind=kind,
        explanation=explanation,
        execution=execution,
        replay=replay,
        audit=audit,
    )


async def run_scenario(
    scenario: Scenario,
    proposer: ProposalService,
    gateway: GatewayClient,
    explainer: ExplanationService,
    agent_id: str,
) -> TurnResult:
    """Run a catalogued scenario with explanation caching keyed on its id."""
    runner = run_replay if scenario.replay else run_turn
    return await runner(
        scenario.user_text,
        proposer,
        gateway,
        explainer,
        agent_id,
        scenario_id=scenario.id,
    )
