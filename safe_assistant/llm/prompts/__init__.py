"""
safe_assistant/llm/prompts - Prompt templates and response schemas
"""

from .schemas import ActionProposal, ProposedAction
from .explanation import (
    EXPLANATION_SYSTEM_PROMPT,
    build_fact_block,
    create_explanation_prompt,
)
from .proposal import PROPOSAL_SYSTEM_PROMPT

__all__ = [
    "ActionProposal",
    "ProposedAction",
    "EXPLANATION_SYSTEM_PROMPT",
    "build_fact_block",
    "create_explanation_prompt",
    "PROPOSAL_SYSTEM_PROMPT",
]
