"""
Dialogue data model

Persisted per-user context, the per-turn session input, the actions the
engine emits and the result of a processed turn.
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, ClassVar, Optional

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)
INITIAL_STATE = "init"

_DATETIME_FIELDS = (
    "last_message_on",
    "last_greeting_on",
    "last_joke_on",
    "current_expense_incurred_on",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass
class RobinContext:
    """
    Conversation context persisted per user.

    The three ``current_expense_*`` fields form the expense draft; they are
    all None unless a draft is being filled in.
    """

    state: str = INITIAL_STATE
    is_active: bool = True
    user_name: str = ""

    # Engagement
    last_message_on: datetime = field(default_factory=_utcnow)
    message_counter: int = 0
    last_greeting_on: datetime = EPOCH
    joke_counter: int = 0
    last_joke_on: datetime = EPOCH

    # Expense draft
    current_expense_item: Optional[str] = None
    current_expense_value: Optional[float] = None
    current_expense_incurred_on: Optional[datetime] = None

    @property
    def has_draft(self) -> bool:
        """Check if any draft field is set."""
        return any(
            value is not None
            for value in (
                self.current_expense_item,
                self.current_expense_value,
                self.current_expense_incurred_on,
            )
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON friendly dictionary."""
        data = asdict(self)
        for name in _DATETIME_FIELDS:
            if data[name] is not None:
                data[name] = data[name].isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RobinContext":
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        for name in _DATETIME_FIELDS:
            if name in values:
                values[name] = _to_datetime(values[name])
        return cls(**values)


def default_context(now: Optional[datetime] = None) -> RobinContext:
    """Fresh context for a user seen for the first time."""
    return RobinContext(last_message_on=now or _utcnow())


@dataclass(frozen=True)
class AddExpenseAction:
    """Record an expense."""

    type: ClassVar[str] = "add_expense"

    item: str
    value: float
    incurred_on: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "item": self.item,
            "value": self.value,
            "incurred_on": self.incurred_on.isoformat(),
        }


Action = AddExpenseAction


@dataclass(frozen=True)
class Session:
    """
    Input for one turn.

    Exactly one of ``text`` or ``voice`` is expected; ``timestamp`` should be
    timezone aware.
    """

    timestamp: datetime
    context: RobinContext
    text: Optional[str] = None
    voice: Optional[bytes] = None


@dataclass
class TurnResult:
    """Outcome of one processed turn."""

    context: RobinContext
    messages: list[str] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    nlu: dict[str, Any] = field(default_factory=dict)
