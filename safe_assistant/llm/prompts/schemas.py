"""
safe_assistant/llm/prompts/schemas.py - Structured generation shapes

Pydantic models for JSON the generation service is asked to produce.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field, model_validator


ECHO_ACTION = "echo"
ECHO_TARGET = "echo"


class ProposedAction(BaseModel):
    """An action proposed for authorization."""

    plan: List[str] = Field(default_factory=list)
    action_type: str = ECHO_ACTION
    target_system: str = ECHO_TARGET
    payload: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def echo(cls, message: str) -> "ProposedAction":
        return cls(
            action_type=ECHO_ACTION,
            target_system=ECHO_TARGET,
            payload={"message": message},
        )

    def summary(self) -> str:
        return f"{self.action_type} on {self.target_system}"


class ActionBody(BaseModel):
    action_type: str
    target_system: str
    payload: Dict[str, Any] = Field(default_factory=dict)


class ActionProposal(BaseModel):
    """
    Proposer response: ``{"plan": [...], "action": {...}}``.

    The legacy flat shape (action fields at top level) is also accepted.
    """

    plan: List[str] = Field(default_factory=list)
    action: ActionBody

    @model_validator(mode="before")
    @classmethod
    def accept_flat_shape(cls, data: Any) -> Any:
        if isinstance(data, dict) and "action" not in data and "action_type" in data:
            data = {
                "plan": data.get("plan", []),
                "action": {
                    "action_type": data.get("action_type"),
                    "target_system": data.get("target_system", ECHO_TARGET),
                    "payload": data.get("payload", {}),
                },
            }
        if isinstance(data, dict) and not isinstance(data.get("plan", []), list):
            data = {**data, "plan": []}
        return data

    def to_action(self) -> ProposedAction:
        return ProposedAction(
            plan=[str(step) for step in self.plan],
            action_type=self.action.action_type,
            target_system=self.action.target_system,
            payload=self.action.payload,
        )
