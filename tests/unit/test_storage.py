"""Unit tests for storage and delivery adapters."""

from datetime import datetime, timezone

import pytest

from robin.adapters import InMemoryActionSink, InMemoryContextStore, InMemoryDelivery
from robin.dialogue import AddExpenseAction, RobinContext
from robin.nlu import Grain, TimeInterval


def day(n: int) -> datetime:
    return datetime(2023, 9, n, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_unknown_user_has_no_context():
    store = InMemoryContextStore()
    assert await store.load("nobody") is None


@pytest.mark.asyncio
async def test_save_and_load():
    store = InMemoryContextStore()
    context = RobinContext(state="main", user_name="Dana", last_message_on=day(3))

    await store.save("user-1", context)
    loaded = await store.load("user-1")

    assert loaded == context
    assert loaded is not context


@pytest.mark.asyncio
async def test_save_merges_into_stored_fields():
    store = InMemoryContextStore()
    store._contexts["user-1"] = {"locale": "en-AU", "state": "init"}

    await store.save("user-1", RobinContext(state="main", last_message_on=day(3)))

    assert store._contexts["user-1"]["locale"] == "en-AU"
    assert store._contexts["user-1"]["state"] == "main"


@pytest.mark.asyncio
async def test_purge_inactive_context():
    store = InMemoryContextStore()
    await store.save("user-1", RobinContext(state="main", is_active=False, last_message_on=day(3)))

    assert store.delete("user-1") is True
    assert store.delete("user-1") is False


@pytest.mark.asyncio
async def test_action_sink_queries_expenses():
    sink = InMemoryActionSink()
    await sink.record("user-1", AddExpenseAction("rent", 900, day(5)))
    await sink.record("user-1", AddExpenseAction("coffee", 4.5, day(1)))
    await sink.record("user-1", AddExpenseAction("lunch", 12, day(3)))
    await sink.record("user-2", AddExpenseAction("tea", 3, day(2)))

    expenses = sink.expenses_between("user-1", TimeInterval(Grain.DAY, day(1), day(5)))

    assert [e.item for e in expenses] == ["coffee", "lunch"]
    assert len(sink.actions("user-1")) == 3

    since = TimeInterval(Grain.DAY, day(2))
    assert [e.item for e in sink.expenses_between("user-1", since)] == ["lunch", "rent"]


@pytest.mark.asyncio
async def test_action_sink_queries_week():
    sink = InMemoryActionSink()
    await sink.record("user-1", AddExpenseAction("books", 30, datetime(2023, 9, 3, 23, 59, tzinfo=timezone.utc)))
    await sink.record("user-1", AddExpenseAction("rent", 900, day(4)))
    await sink.record("user-1", AddExpenseAction("coffee", 4.5, day(10)))
    await sink.record("user-1", AddExpenseAction("lunch", 12, day(11)))

    week = TimeInterval.week_of(datetime(2023, 9, 6, 15, 30, tzinfo=timezone.utc))

    assert [e.item for e in sink.expenses_between("user-1", week)] == ["rent", "coffee"]


@pytest.mark.asyncio
async def test_delivery_preserves_order():
    delivery = InMemoryDelivery()

    await delivery.deliver("chat-1", "Hi there!")
    await delivery.deliver("chat-2", "Elsewhere")
    await delivery.deliver("chat-1", "What did you buy?")

    assert delivery.messages_for("chat-1") == ["Hi there!", "What did you buy?"]
