"""Per-turn facts extracted from an NLU result."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any


class Sentiment(str, Enum):
    """Sentiment labels."""
    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    POSITIVE = "positive"


class Grain(str, Enum):
    """Granularity of a date/time value."""
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


@dataclass(frozen=True)
class Money:
    """A monetary amount and the text span it was read from."""
    body: str
    value: float


@dataclass(frozen=True)
class Moment:
    """A single point in time."""
    grain: Grain
    value: datetime


@dataclass(frozen=True)
class TimeInterval:
    """A time range. ``end`` is None for open intervals ("since monday")."""
    grain: Grain
    start: datetime
    end: datetime | None = None

    @classmethod
    def week_of(cls, moment: datetime) -> "TimeInterval":
        """The Monday-to-Monday week containing ``moment``."""
        midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
        start = midnight - timedelta(days=midnight.weekday())
        return cls(grain=Grain.WEEK, start=start, end=start + timedelta(days=7))

    def contains(self, moment: datetime) -> bool:
        """Check if ``moment`` lies in [start, end)."""
        if moment < self.start:
            return False
        return self.end is None or moment < self.end


@dataclass(frozen=True)
class EphemeralFacts:
    """
    Normalized facts for one turn.

    Computed fresh from the NLU result and discarded once the turn is over.
    ``greetings`` and ``bye`` are never both set.
    """
    intent: str = ""
    greetings: bool = False
    bye: bool = False
    thanks: bool = False
    sentiment: Sentiment = Sentiment.NEUTRAL
    item: str | None = None
    money: Money | None = None
    moment: Moment | None = None
    interval: TimeInterval | None = None

    @property
    def incurred_on(self) -> datetime | None:
        """The best point in time for an expense: the moment, else the interval start."""
        if self.moment is not None:
            return self.moment.value
        if self.interval is not None:
            return self.interval.start
        return None

    def has_expense_details(self) -> bool:
        """True if any item, money or date entity was extracted."""
        return any(
            value is not None
            for value in (self.item, self.money, self.moment, self.interval)
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "intent": self.intent,
            "greetings": self.greetings,
            "bye": self.bye,
            "thanks": self.thanks,
            "sentiment": self.sentiment.value,
            "item": self.item,
            "money": (
                {"body": self.money.body, "value": self.money.value}
                if self.money else None
            ),
            "moment": (
                {"grain": self.moment.grain.value, "value": self.moment.value.isoformat()}
                if self.moment else None
            ),
            "interval": (
                {
                    "grain": self.interval.grain.value,
                    "start": self.interval.start.isoformat(),
                    "end": self.interval.end.isoformat() if self.interval.end else None,
                }
                if self.interval else None
            ),
        }
