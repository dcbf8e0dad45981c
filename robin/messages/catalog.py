"""Message catalog loaded from YAML."""

import random
from pathlib import Path
from typing import Iterator

import structlog
import yaml

from robin.messages.collection import MessageCollection

logger = structlog.get_logger()

DEFAULT_MESSAGES_PATH = Path(__file__).parent / "messages.yaml"


class MessageCatalog:
    """
    Maps message keys to their variant collections.

    Usage:
        catalog = MessageCatalog.load()
        catalog["personal_greeting"].any({"name": "Dana"})
    """

    def __init__(self, collections: dict[str, MessageCollection]) -> None:
        self._collections = dict(collections)

    @classmethod
    def from_dict(
        cls,
        raw: dict[str, list[str] | str],
        rng: random.Random | None = None,
    ) -> "MessageCatalog":
        """Build a catalog from a key -> variants mapping."""
        rng = rng or random.Random()
        collections = {}
        for key, variants in raw.items():
            if isinstance(variants, str):
                variants = [variants]
            collections[key] = MessageCollection(
                key, [str(v).strip() for v in variants or []], rng=rng
            )
        return cls(collections)

    @classmethod
    def load(
        cls,
        path: str | Path | None = None,
        rng: random.Random | None = None,
    ) -> "MessageCatalog":
        """Load a catalog from a YAML file (the bundled one by default)."""
        path = Path(path) if path else DEFAULT_MESSAGES_PATH
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

        if not isinstance(raw, dict):
            raise ValueError(f"Message catalog must be a mapping: {path}")

        catalog = cls.from_dict(raw, rng=rng)
        logger.debug("message_catalog_loaded", path=str(path), keys=len(raw))
        return catalog

    def __getitem__(self, key: str) -> MessageCollection:
        return self._collections[key]

    def __contains__(self, key: object) -> bool:
        return key in self._collections

    def __iter__(self) -> Iterator[str]:
        return iter(self._collections)

    def __len__(self) -> int:
        return len(self._collections)

    def keys(self) -> list[str]:
        return list(self._collections)
