"""Unit tests for NLU result normalization."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from robin.nlu import (
    EphemeralFacts,
    Grain,
    NLUNormalizer,
    Sentiment,
    TimeInterval,
    normalize,
    parse_datetime,
)


def entity(name: str, kind: str = "value", **fields) -> dict:
    return {"name": name, "type": kind, **fields}


def response(intents=None, entities=None, traits=None) -> dict:
    data = {}
    if intents is not None:
        data["intents"] = intents
    if entities is not None:
        data["entities"] = entities
    if traits is not None:
        data["traits"] = traits
    return data


class TestSections:
    """Tests for missing and partial sections."""

    @pytest.mark.parametrize("raw", [None, {}, {"intents": None, "entities": None, "traits": None}])
    def test_missing_sections_yield_defaults(self, raw):
        assert normalize(raw) == EphemeralFacts()

    def test_defaults(self):
        facts = normalize({})

        assert facts.intent == ""
        assert facts.sentiment is Sentiment.NEUTRAL
        assert not facts.greetings and not facts.bye and not facts.thanks
        assert facts.item is None and facts.money is None
        assert facts.moment is None and facts.interval is None


class TestIntents:
    """Tests for intent selection."""

    def test_first_intent_wins(self):
        facts = normalize(response(intents=[
            {"name": "tell_joke", "confidence": 0.7},
            {"name": "who_are_you", "confidence": 0.9},
        ]))
        assert facts.intent == "tell_joke"

    def test_empty_intents(self):
        assert normalize(response(intents=[])).intent == ""


class TestTraits:
    """Tests for trait flags."""

    def test_presence_sets_flags(self):
        facts = normalize(response(traits={
            "wit$greetings": [{"value": "true", "confidence": 0.9}],
            "wit$thanks": [{"value": "true", "confidence": 0.8}],
        }))

        assert facts.greetings
        assert facts.thanks
        assert not facts.bye

    def test_greetings_beat_less_confident_bye(self):
        facts = normalize(response(traits={
            "wit$greetings": [{"value": "true", "confidence": 0.9}],
            "wit$bye": [{"value": "true", "confidence": 0.4}],
        }))

        assert facts.greetings
        assert not facts.bye

    def test_bye_beats_less_confident_greetings(self):
        facts = normalize(response(traits={
            "wit$greetings": [{"value": "true", "confidence": 0.3}],
            "wit$bye": [{"value": "true", "confidence": 0.8}],
        }))

        assert facts.bye
        assert not facts.greetings

    def test_tie_keeps_bye(self):
        facts = normalize(response(traits={
            "wit$greetings": [{"value": "true", "confidence": 0.5}],
            "wit$bye": [{"value": "true", "confidence": 0.5}],
        }))

        assert facts.bye
        assert not facts.greetings

    def test_sentiment(self):
        facts = normalize(response(traits={
            "wit$sentiment": [{"value": "positive", "confidence": 0.7}],
        }))
        assert facts.sentiment is Sentiment.POSITIVE

    def test_unknown_sentiment_stays_neutral(self):
        facts = normalize(response(traits={
            "wit$sentiment": [{"value": "ecstatic", "confidence": 0.7}],
        }))
        assert facts.sentiment is Sentiment.NEUTRAL


class TestEntities:
    """Tests for entity mapping."""

    def test_item(self):
        facts = normalize(response(entities={
            "item:item": [entity("item", value="coffee", body="coffee")],
        }))
        assert facts.item == "coffee"

    def test_amount_of_money(self):
        facts = normalize(response(entities={
            "wit$amount_of_money:amount_of_money": [
                entity("wit$amount_of_money", value=42, unit="$", body="$42"),
            ],
        }))

        assert facts.money.value == 42
        assert facts.money.body == "$42"

    def test_number_serves_as_money(self):
        facts = normalize(response(entities={
            "wit$number:number": [entity("wit$number", value=7, body="seven")],
        }))
        assert facts.money.value == 7

    @pytest.mark.parametrize("order", [
        ["wit$amount_of_money:amount_of_money", "wit$number:number"],
        ["wit$number:number", "wit$amount_of_money:amount_of_money"],
    ])
    def test_money_takes_precedence_over_number(self, order):
        groups = {
            "wit$amount_of_money:amount_of_money": [
                entity("wit$amount_of_money", value=42, body="$42"),
            ],
            "wit$number:number": [entity("wit$number", value=7, body="7")],
        }

        facts = normalize(response(entities={key: groups[key] for key in order}))

        assert facts.money.value == 42

    def test_datetime_value_is_moment(self):
        facts = normalize(response(entities={
            "wit$datetime:datetime": [entity(
                "wit$datetime",
                grain="day",
                value="2023-09-02T00:00:00.000-07:00",
                body="yesterday",
            )],
        }))

        assert facts.moment.grain is Grain.DAY
        assert facts.moment.value == datetime(2023, 9, 2, tzinfo=timezone(timedelta(hours=-7)))

    def test_datetime_interval(self):
        facts = normalize(response(entities={
            "wit$datetime:datetime": [entity(
                "wit$datetime",
                kind="interval",
                body="last week",
                **{
                    "from": {"grain": "week", "value": "2023-08-21T00:00:00.000+00:00"},
                    "to": {"grain": "week", "value": "2023-08-28T00:00:00.000+00:00"},
                },
            )],
        }))

        assert facts.interval.grain is Grain.WEEK
        assert facts.interval.start == datetime(2023, 8, 21, tzinfo=timezone.utc)
        assert facts.interval.end == datetime(2023, 8, 28, tzinfo=timezone.utc)
        assert facts.moment is None
        assert facts.incurred_on == facts.interval.start

    def test_open_interval_with_string_bounds(self):
        facts = normalize(response(entities={
            "wit$datetime:datetime": [entity(
                "wit$datetime",
                kind="interval",
                grain="day",
                **{"from": "2023-08-21T00:00:00Z"},
            )],
        }))

        assert facts.interval.start == datetime(2023, 8, 21, tzinfo=timezone.utc)
        assert facts.interval.end is None

    def test_moment_and_interval_both_kept(self):
        facts = normalize(response(entities={
            "wit$datetime:datetime": [
                entity("wit$datetime", grain="day", value="2023-09-01T00:00:00+00:00"),
                entity(
                    "wit$datetime",
                    kind="interval",
                    **{
                        "from": {"grain": "week", "value": "2023-08-21T00:00:00+00:00"},
                        "to": {"grain": "week", "value": "2023-08-28T00:00:00+00:00"},
                    },
                ),
            ],
        }))

        assert facts.moment is not None
        assert facts.interval is not None
        assert facts.incurred_on == datetime(2023, 9, 1, tzinfo=timezone.utc)

    def test_unknown_grain_falls_back_to_day(self):
        facts = normalize(response(entities={
            "wit$datetime:datetime": [
                entity("wit$datetime", grain="fortnight", value="2023-09-01T00:00:00+00:00"),
            ],
        }))
        assert facts.moment.grain is Grain.DAY

    def test_unknown_entities_ignored(self):
        facts = normalize(response(entities={
            "wit$location:location": [entity("wit$location", value="Perth")],
            "wit$email:email": [entity("wit$email", value="dana@example.com")],
        }))
        assert facts == EphemeralFacts()

    def test_malformed_entity_is_logged_not_raised(self):
        logger = MagicMock()
        normalizer = NLUNormalizer(logger=logger)

        facts = normalizer.normalize(response(entities={
            "wit$datetime:datetime": [entity("wit$datetime", grain="day", value="not a date")],
            "item:item": [entity("item", value="coffee")],
        }))

        assert facts.moment is None
        assert facts.item == "coffee"
        assert logger.warning.call_args[0][0] == "nlu_entity_malformed"


def test_parse_datetime_accepts_zulu():
    assert parse_datetime("2023-09-03T10:00:00Z") == datetime(2023, 9, 3, 10, tzinfo=timezone.utc)


class TestTimeInterval:
    """Interval membership and week boundaries."""

    def test_contains_is_half_open(self):
        start = datetime(2023, 9, 4, tzinfo=timezone.utc)
        interval = TimeInterval(Grain.WEEK, start, start + timedelta(days=7))

        assert interval.contains(start)
        assert interval.contains(start + timedelta(days=6, hours=23))
        assert not interval.contains(start + timedelta(days=7))
        assert not interval.contains(start - timedelta(seconds=1))

    def test_open_interval_has_no_end(self):
        interval = TimeInterval(Grain.DAY, datetime(2023, 9, 4, tzinfo=timezone.utc))

        assert interval.contains(datetime(2030, 1, 1, tzinfo=timezone.utc))

    @pytest.mark.parametrize("day", [4, 6, 10])
    def test_week_of_starts_on_monday(self, day):
        week = TimeInterval.week_of(datetime(2023, 9, day, 18, 45, tzinfo=timezone.utc))

        assert week.grain == Grain.WEEK
        assert week.start == datetime(2023, 9, 4, tzinfo=timezone.utc)
        assert week.end == datetime(2023, 9, 11, tzinfo=timezone.utc)
