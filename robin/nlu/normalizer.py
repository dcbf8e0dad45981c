"""
NLU result normalization.

Turns a raw, loosely structured NLU response (Wit.ai wire shape) into
``EphemeralFacts``. Missing sections are treated as empty and unknown
entities are ignored, so a partial response never raises.
"""
from datetime import datetime
from typing import Any, Iterator

import structlog

from robin.nlu.facts import (
    EphemeralFacts,
    Grain,
    Moment,
    Money,
    Sentiment,
    TimeInterval,
)


TRAIT_GREETINGS = "wit$greetings"
TRAIT_BYE = "wit$bye"
TRAIT_THANKS = "wit$thanks"
TRAIT_SENTIMENT = "wit$sentiment"

ENTITY_ITEM = "item"
ENTITY_AMOUNT_OF_MONEY = "wit$amount_of_money"
ENTITY_NUMBER = "wit$number"
ENTITY_DATETIME = "wit$datetime"


def parse_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp as produced by the NLU provider."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _parse_grain(value: Any) -> Grain:
    try:
        return Grain(value)
    except ValueError:
        return Grain.DAY


def _trait_confidence(evidence: Any) -> float:
    """Confidence of a trait, taken from its first (best) value."""
    if isinstance(evidence, list):
        evidence = evidence[0] if evidence else {}
    if isinstance(evidence, dict):
        try:
            return float(evidence.get("confidence", 0.0))
        except (TypeError, ValueError):
            return 0.0
    return 0.0


class NLUNormalizer:
    """
    Normalizes raw NLU responses into per-turn facts.

    Usage:
        facts = NLUNormalizer().normalize(wit_response)
        facts.intent      # "add_expense"
        facts.money       # Money(body="$42", value=42.0)
    """

    def __init__(self, logger: Any = None) -> None:
        self.logger = logger or structlog.get_logger()

    def normalize(self, raw: dict[str, Any] | None) -> EphemeralFacts:
        """Build the facts for one turn from a raw NLU result."""
        raw = raw or {}
        intents = raw.get("intents") or []
        entities = raw.get("entities") or {}
        traits = raw.get("traits") or {}

        fields: dict[str, Any] = {}
        fields.update(self._process_traits(traits))
        fields["intent"] = self._process_intents(intents)
        fields.update(self._process_entities(entities))

        facts = EphemeralFacts(**fields)
        self.logger.debug("nlu_normalized", **facts.to_dict())
        return facts

    def _process_intents(self, intents: list[dict[str, Any]]) -> str:
        # Intents arrive ranked by confidence
        if intents and isinstance(intents[0], dict):
            return intents[0].get("name") or ""
        return ""

    def _process_traits(self, traits: dict[str, Any]) -> dict[str, Any]:
        greetings = TRAIT_GREETINGS in traits
        bye = TRAIT_BYE in traits

        if greetings and bye:
            greetings_confidence = _trait_confidence(traits[TRAIT_GREETINGS])
            bye_confidence = _trait_confidence(traits[TRAIT_BYE])
            if greetings_confidence > bye_confidence:
                bye = False
            else:
                greetings = False
            self.logger.debug(
                "nlu_trait_conflict_resolved",
                greetings_confidence=greetings_confidence,
                bye_confidence=bye_confidence,
                kept="greetings" if greetings else "bye",
            )

        result = {
            "greetings": greetings,
            "bye": bye,
            "thanks": TRAIT_THANKS in traits,
        }

        sentiment = traits.get(TRAIT_SENTIMENT)
        if isinstance(sentiment, list) and sentiment:
            value = sentiment[0].get("value") if isinstance(sentiment[0], dict) else None
            try:
                result["sentiment"] = Sentiment(value)
            except ValueError:
                self.logger.debug("nlu_unknown_sentiment", value=value)

        return result

    def _iter_entities(self, entities: dict[str, Any]) -> Iterator[dict[str, Any]]:
        for group in entities.values():
            for entity in group or []:
                if isinstance(entity, dict):
                    yield entity

    def _process_entities(self, entities: dict[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}

        for entity in self._iter_entities(entities):
            name = entity.get("name")
            kind = entity.get("type")

            try:
                if name == ENTITY_ITEM:
                    if kind == "value" and entity.get("value"):
                        result["item"] = str(entity["value"])

                elif name == ENTITY_AMOUNT_OF_MONEY:
                    if kind == "value":
                        result["money"] = self._money(entity)

                elif name == ENTITY_NUMBER:
                    if kind == "value" and "money" not in result:
                        result["money"] = self._money(entity)

                elif name == ENTITY_DATETIME:
                    if kind == "value":
                        result["moment"] = Moment(
                            grain=_parse_grain(entity.get("grain")),
                            value=parse_datetime(entity["value"]),
                        )
                    elif kind == "interval":
                        interval = self._interval(entity)
                        if interval is not None:
                            result["interval"] = interval

                else:
                    self.logger.debug("nlu_entity_ignored", name=name)

            except (KeyError, TypeError, ValueError) as e:
                self.logger.warning("nlu_entity_malformed", name=name, error=str(e))

        return result

    def _money(self, entity: dict[str, Any]) -> Money:
        return Money(body=str(entity.get("body", "")), value=float(entity["value"]))

    def _interval(self, entity: dict[str, Any]) -> TimeInterval | None:
        start = entity.get("from")
        end = entity.get("to")
        if not start:
            return None

        # Bounds are either bare ISO strings or {"value": ..., "grain": ...}
        grain = entity.get("grain")
        if isinstance(start, dict):
            grain = grain or start.get("grain")
            start = start["value"]
        if isinstance(end, dict):
            end = end.get("value")

        return TimeInterval(
            grain=_parse_grain(grain),
            start=parse_datetime(start),
            end=parse_datetime(end) if end else None,
        )


def normalize(raw: dict[str, Any] | None) -> EphemeralFacts:
    """Normalize a raw NLU result with a default normalizer."""
    return NLUNormalizer().normalize(raw)
