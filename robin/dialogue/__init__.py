"""Dialogue state machine."""

from robin.dialogue.base import (
    DialogueError,
    DialogueState,
    Outcome,
    OutcomeKind,
    RedirectLoopError,
    Rule,
    TurnAccumulator,
    TurnInput,
)
from robin.dialogue.context import (
    Action,
    AddExpenseAction,
    RobinContext,
    Session,
    TurnResult,
    default_context,
)
from robin.dialogue.machine import DialogueEngine
from robin.dialogue.rules import RULES, format_money

__all__ = [
    # Base
    "DialogueError",
    "DialogueState",
    "Outcome",
    "OutcomeKind",
    "RedirectLoopError",
    "Rule",
    "TurnAccumulator",
    "TurnInput",
    # Context
    "Action",
    "AddExpenseAction",
    "RobinContext",
    "Session",
    "TurnResult",
    "default_context",
    # Engine
    "DialogueEngine",
    "RULES",
    "format_money",
]
