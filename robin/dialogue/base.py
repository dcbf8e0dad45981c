"""
Dialogue Base Types

States, rule outcomes and the per-turn values threaded through the rules.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Optional

from robin.dialogue.context import Action, RobinContext
from robin.messages import MessageCatalog
from robin.nlu import EphemeralFacts


class DialogueState(str, Enum):
    """States of the conversation."""

    INIT = "init"
    MAIN = "main"
    DELETE_ACCOUNT = "delete_account"
    ADD_EXPENSE = "add_expense"
    SPECIFY_EXPENSE_ITEM = "specify_expense_item"
    SPECIFY_EXPENSE_MOMENT = "specify_expense_moment"
    SPECIFY_EXPENSE_VALUE = "specify_expense_value"


class OutcomeKind(str, Enum):
    """How a rule wants evaluation to continue."""

    NO_MATCH = "no_match"  # Rule does not apply, try the next one
    REDIRECT = "redirect"  # Re-evaluate in another state within the same turn
    SETTLE = "settle"  # End the turn in a state


@dataclass(frozen=True)
class Outcome:
    """Result signal of a rule."""

    kind: OutcomeKind
    state: Optional[DialogueState] = None
    reason: str = ""

    @classmethod
    def no_match(cls) -> "Outcome":
        return cls(OutcomeKind.NO_MATCH)

    @classmethod
    def redirect(cls, state: DialogueState, reason: str = "") -> "Outcome":
        return cls(OutcomeKind.REDIRECT, state, reason)

    @classmethod
    def settle(cls, state: DialogueState, reason: str = "") -> "Outcome":
        return cls(OutcomeKind.SETTLE, state, reason)


@dataclass(frozen=True)
class TurnInput:
    """Read-only inputs shared by every rule of a turn."""

    facts: EphemeralFacts
    timestamp: datetime
    messages: MessageCatalog
    delete_account_timeout: timedelta = timedelta(minutes=3)
    currency_symbol: str = "$"


@dataclass(frozen=True)
class TurnAccumulator:
    """
    Context, messages and actions accumulated during a turn.

    Rules never mutate an accumulator; every helper returns a new one.
    """

    context: RobinContext
    messages: tuple[str, ...] = ()
    actions: tuple[Action, ...] = ()

    def say(self, text: str) -> "TurnAccumulator":
        """Append a message."""
        return replace(self, messages=self.messages + (text,))

    def act(self, action: Action) -> "TurnAccumulator":
        """Append an action."""
        return replace(self, actions=self.actions + (action,))

    def update(self, **changes: Any) -> "TurnAccumulator":
        """Return an accumulator whose context has the given fields changed."""
        return replace(self, context=replace(self.context, **changes))

    def clear_draft(self) -> "TurnAccumulator":
        return self.update(
            current_expense_item=None,
            current_expense_value=None,
            current_expense_incurred_on=None,
        )


RuleHandler = Callable[[TurnInput, TurnAccumulator], tuple[Outcome, TurnAccumulator]]


@dataclass(frozen=True)
class Rule:
    """A named rule of a state."""

    name: str
    handler: RuleHandler

    def __call__(
        self, turn: TurnInput, acc: TurnAccumulator
    ) -> tuple[Outcome, TurnAccumulator]:
        return self.handler(turn, acc)


class DialogueError(Exception):
    """Base class for dialogue engine errors."""


class RedirectLoopError(DialogueError):
    """Rules keep redirecting without ever settling."""

    def __init__(self, path: list[str]) -> None:
        self.path = path
        super().__init__(f"Redirect loop detected: {' -> '.join(path)}")
