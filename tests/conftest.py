"""Shared pytest fixtures for testing."""

import os
import random
from datetime import datetime, timezone

import pytest

# Set test environment before settings are read
os.environ["ENVIRONMENT"] = "test"
os.environ["NLU_PROVIDER"] = "mock"

from robin.config import Settings
from robin.dialogue import DialogueEngine, RobinContext, Session
from robin.logging import null_logger
from robin.messages import MessageCatalog
from robin.nlu import EphemeralFacts, Grain, Moment, Money, TimeInterval


TEST_MESSAGES = {
    "message_type_not_supported": ["Unsupported."],
    "account_is_inactive": ["Account pending deletion."],
    "delete_account_confirmation": ["Delete your account?"],
    "account_deletion_confirmed": ["Account deleted."],
    "account_deletion_canceled": ["Deletion canceled."],
    "confused": ["Huh?"],
    "personal_greeting": ["Hey {{ name }}!"],
    "generic_greeting": ["Hi there!"],
    "introduction": ["I'm Robin."],
    "bye": ["Bye {{name}}!"],
    "welcome": ["Welcome!"],
    "done_joking": ["No more jokes."],
    "joke": ["Joke one.", "Joke two.", "Joke three."],
    "add_expense": ["Adding an expense."],
    "specify_expense_item": ["What did you buy?"],
    "specify_expense_moment": ["When was that?"],
    "specify_expense_value": ["How much was it?"],
    "expense_completed": ["Added '{{item}}' for {{value}} on {{moment}}."],
}

NOW = datetime(2023, 9, 3, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    """Reference time of the test turns."""
    return NOW


@pytest.fixture
def catalog():
    """Message catalog with deterministic single-variant wording."""
    return MessageCatalog.from_dict(TEST_MESSAGES, rng=random.Random(7))


@pytest.fixture
def engine(catalog):
    """Dialogue engine with a silent logger."""
    return DialogueEngine(catalog, logger=null_logger())


@pytest.fixture
def settings():
    """Settings isolated from the environment."""
    return Settings(
        _env_file=None,
        environment="test",
        nlu_provider="mock",
        wit_access_token="",
    )


@pytest.fixture
def make_context():
    """Factory for contexts, defaulting to the main state."""
    def factory(**kwargs) -> RobinContext:
        kwargs.setdefault("state", "main")
        kwargs.setdefault("user_name", "Dana")
        kwargs.setdefault("last_message_on", NOW)
        return RobinContext(**kwargs)
    return factory


@pytest.fixture
def make_facts():
    """Factory for facts with shorthand entity arguments."""
    def factory(
        intent: str = "",
        item: str | None = None,
        money: float | None = None,
        moment: datetime | None = None,
        interval: tuple[datetime, datetime] | None = None,
        **kwargs,
    ) -> EphemeralFacts:
        return EphemeralFacts(
            intent=intent,
            item=item,
            money=Money(body=f"${money}", value=money) if money is not None else None,
            moment=Moment(grain=Grain.DAY, value=moment) if moment is not None else None,
            interval=(
                TimeInterval(grain=Grain.WEEK, start=interval[0], end=interval[1])
                if interval is not None else None
            ),
            **kwargs,
        )
    return factory


@pytest.fixture
def run_turn(engine):
    """Process a turn on the engine: run_turn(context, facts, timestamp=NOW)."""
    def run(context, facts, timestamp=NOW):
        return engine.process(Session(timestamp=timestamp, context=context, text="..."), facts)
    return run
