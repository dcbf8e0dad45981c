"""Message templating."""

from robin.messages.catalog import DEFAULT_MESSAGES_PATH, MessageCatalog
from robin.messages.collection import MessageCollection, render

__all__ = [
    "DEFAULT_MESSAGES_PATH",
    "MessageCatalog",
    "MessageCollection",
    "render",
]
