"""
safe_assistant/llm/services - High-level generation services
"""

from .explanation_service import ExplanationService
from .proposal_service import ProposalService

__all__ = [
    "ExplanationService",
    "ProposalService",
]
