"""
Storage adapters - context persistence and the action sink.

The dialogue engine never touches storage itself; the turn orchestrator
loads the context before a turn and persists the context and actions after.
"""
from abc import ABC, abstractmethod

import structlog

from robin.dialogue.context import Action, AddExpenseAction, RobinContext
from robin.nlu import TimeInterval

logger = structlog.get_logger()


class ContextStore(ABC):
    """Persists one conversation context per user."""

    @abstractmethod
    async def load(self, user_id: str) -> RobinContext | None:
        """Load a user's context, or None if the user is unknown."""
        pass

    @abstractmethod
    async def save(self, user_id: str, context: RobinContext) -> None:
        """Save a user's context, leaving stored fields the update lacks untouched."""
        pass


class InMemoryContextStore(ContextStore):
    """Dict backed context store, keeps contexts in their serialized form."""

    def __init__(self) -> None:
        self._contexts: dict[str, dict] = {}

    async def load(self, user_id: str) -> RobinContext | None:
        data = self._contexts.get(user_id)
        if data is None:
            return None
        return RobinContext.from_dict(data)

    async def save(self, user_id: str, context: RobinContext) -> None:
        self._contexts.setdefault(user_id, {}).update(context.to_dict())
        logger.debug("context_saved", user_id=user_id, state=context.state)

    def delete(self, user_id: str) -> bool:
        """
        Delete a user's context.

        Purge hook for accounts pending deletion: the dialogue only marks an
        account inactive, removing its data is left to the store's owner.
        """
        if user_id in self._contexts:
            del self._contexts[user_id]
            logger.info("context_deleted", user_id=user_id)
            return True
        return False


class ActionSink(ABC):
    """Receives the durable actions emitted by the dialogue engine."""

    @abstractmethod
    async def record(self, user_id: str, action: Action) -> None:
        pass


class InMemoryActionSink(ActionSink):
    """Keeps recorded actions in memory, per user."""

    def __init__(self) -> None:
        self._actions: dict[str, list[Action]] = {}

    async def record(self, user_id: str, action: Action) -> None:
        self._actions.setdefault(user_id, []).append(action)
        logger.info("action_recorded", user_id=user_id, type=action.type)

    def actions(self, user_id: str) -> list[Action]:
        return list(self._actions.get(user_id, []))

    def expenses_between(
        self,
        user_id: str,
        interval: TimeInterval,
    ) -> list[AddExpenseAction]:
        """Expenses incurred within the interval, oldest first."""
        expenses = [
            action
            for action in self._actions.get(user_id, [])
            if isinstance(action, AddExpenseAction)
            and interval.contains(action.incurred_on)
        ]
        return sorted(expenses, key=lambda e: e.incurred_on)
