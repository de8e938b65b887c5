"""
safe_assistant/llm/services/proposal_service.py - Action proposal service

Asks the generation provider for a structured action. The proposer is not
trusted either: whatever it returns still goes through authorization.
"""

from __future__ import annotations

import json
import logging
from typing import Optional, TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from ..prompts.proposal import PROPOSAL_SYSTEM_PROMPT
from ..prompts.schemas import ActionProposal, ProposedAction
from ..providers.base import strip_code_fences

if TYPE_CHECKING:
    from ..protocol import LLMProviderProtocol

logger = logging.getLogger("llm.services.proposal")


class ProposalService:
    """Turns user text into a ProposedAction."""

    def __init__(self, llm: Optional["LLMProviderProtocol"] = None):
        self.llm = llm

    async def propose(self, user_text: str) -> ProposedAction:
        """
        Propose an action for ``user_text``.

        Unparseable output is wrapped as an ``echo`` action rather than
        dropped, so the authorization service still sees it.

        Raises:
            LLMError: If the provider call itself fails
        """
        if self.llm is None:
            logger.debug("No LLM available, proposing echo")
            return ProposedAction.echo(user_text)

        response = await self.llm.complete(
            prompt=user_text,
            system_prompt=PROPOSAL_SYSTEM_PROMPT,
        )
        cleaned = strip_code_fences(response.content)

        try:
            proposal = ActionProposal.model_validate(json.loads(cleaned))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning(f"Proposer returned non-conforming output: {e}")
            return ProposedAction.echo(f"Model returned non-JSON: {cleaned[:200]}")

        action = proposal.to_action()
        logger.info(f"Proposed {action.summary()}")
        return action
