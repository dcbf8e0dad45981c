"""Natural Language Understanding result handling."""

from robin.nlu.facts import (
    EphemeralFacts,
    Grain,
    Moment,
    Money,
    Sentiment,
    TimeInterval,
)
from robin.nlu.normalizer import NLUNormalizer, normalize, parse_datetime

__all__ = [
    # Facts
    "EphemeralFacts",
    "Grain",
    "Moment",
    "Money",
    "Sentiment",
    "TimeInterval",
    # Normalizer
    "NLUNormalizer",
    "normalize",
    "parse_datetime",
]
