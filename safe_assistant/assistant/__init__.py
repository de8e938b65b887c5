"""
safe_assistant/assistant - Decision cycle and scenarios
"""

from .scenarios import SCENARIOS, Scenario, get_scenario
from .turn import TurnResult, run_replay, run_scenario, run_turn

__all__ = [
    "SCENARIOS",
    "Scenario",
    "get_scenario",
    "TurnResult",
    "run_replay",
    "run_scenario",
    "run_turn",
]
