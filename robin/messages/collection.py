"""Message variant collections with ``{{placeholder}}`` substitution."""

import random
import re
from typing import Any, Mapping

_PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z0-9_]+)\s*\}\}")


def render(text: str, placeholders: Mapping[str, Any] | None = None) -> str:
    """
    Substitute ``{{name}}`` placeholders in text.

    Unknown placeholders and ``None`` values render as an empty string.
    """
    placeholders = placeholders or {}

    def replace(match: re.Match) -> str:
        value = placeholders.get(match.group(1))
        return "" if value is None else str(value)

    return _PLACEHOLDER_PATTERN.sub(replace, text)


class MessageCollection:
    """
    A named set of interchangeable message variants.

    Usage:
        greeting = MessageCollection("greeting", ["Hi {{name}}!", "Hey {{name}}!"])
        greeting.any({"name": "Dana"})      # one variant, picked at random
        greeting.get(5, "No more.")         # "No more."
    """

    def __init__(
        self,
        key: str,
        variants: list[str],
        rng: random.Random | None = None,
    ) -> None:
        self.key = key
        self.variants = list(variants)
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self.variants)

    def __repr__(self) -> str:
        return f"MessageCollection({self.key!r}, variants={len(self.variants)})"

    def any(self, placeholders: Mapping[str, Any] | None = None) -> str:
        """Render a uniformly random variant, or "" for an empty collection."""
        if not self.variants:
            return ""
        return render(self._rng.choice(self.variants), placeholders)

    def get(
        self,
        index: int,
        fallback: str = "",
        placeholders: Mapping[str, Any] | None = None,
    ) -> str:
        """Render the variant at index, or the fallback when out of range."""
        if 0 <= index < len(self.variants):
            text = self.variants[index]
        else:
            text = fallback
        return render(text, placeholders)
