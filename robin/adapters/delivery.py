"""Outbound message delivery."""
from abc import ABC, abstractmethod

import structlog

logger = structlog.get_logger()


class MessageDelivery(ABC):
    """Delivers reply messages to a chat destination."""

    @abstractmethod
    async def deliver(self, destination: str, text: str) -> None:
        """Deliver one message. Callers deliver a turn's messages in order."""
        pass


class InMemoryDelivery(MessageDelivery):
    """Collects delivered messages, preserving order."""

    def __init__(self) -> None:
        self.delivered: list[tuple[str, str]] = []

    async def deliver(self, destination: str, text: str) -> None:
        self.delivered.append((destination, text))
        logger.debug("message_delivered", destination=destination, length=len(text))

    def messages_for(self, destination: str) -> list[str]:
        return [text for dest, text in self.delivered if dest == destination]
