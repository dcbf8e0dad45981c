"""Adapters for external services (NLU provider, storage, delivery)."""
from .delivery import InMemoryDelivery, MessageDelivery
from .nlu_adapter import (
    MockNLUAdapter,
    NLUAdapter,
    NLUError,
    WitAdapter,
    create_nlu_adapter,
)
from .storage import (
    ActionSink,
    ContextStore,
    InMemoryActionSink,
    InMemoryContextStore,
)

__all__ = [
    "NLUAdapter",
    "NLUError",
    "WitAdapter",
    "MockNLUAdapter",
    "create_nlu_adapter",
    "ContextStore",
    "InMemoryContextStore",
    "ActionSink",
    "InMemoryActionSink",
    "MessageDelivery",
    "InMemoryDelivery",
]
