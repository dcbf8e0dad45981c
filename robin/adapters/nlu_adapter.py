"""
NLU Adapter - Abstract interface and implementations for NLU providers.

This module provides:
- Abstract NLUAdapter interface
- WitAdapter talking to the Wit.ai HTTP API
- MockNLUAdapter for tests and offline use (rule-based responses)

Every adapter returns the provider's raw response in Wit.ai wire shape;
``robin.nlu.NLUNormalizer`` turns it into per-turn facts.
"""
import json
import re
from abc import ABC, abstractmethod
from collections import deque
from datetime import datetime, timedelta
from typing import Any

import httpx
import structlog

from robin.config import Settings, get_settings
from robin.nlu import TimeInterval

logger = structlog.get_logger()


class NLUError(Exception):
    """The NLU provider could not be reached or returned garbage."""


class NLUAdapter(ABC):
    """Abstract base class for NLU adapters."""

    @abstractmethod
    async def query_text(self, text: str, reference_time: datetime) -> dict[str, Any]:
        """
        Analyze a text utterance.

        Args:
            text: User utterance
            reference_time: Time relative expressions ("yesterday") resolve against

        Returns:
            Raw NLU response with ``intents``, ``entities`` and ``traits``
        """
        pass

    @abstractmethod
    async def query_voice(
        self,
        audio: bytes,
        reference_time: datetime,
        content_type: str = "audio/mpeg",
    ) -> dict[str, Any]:
        """Transcribe and analyze a voice utterance."""
        pass

    async def aclose(self) -> None:
        """Release held resources."""


class WitAdapter(NLUAdapter):
    """
    Wit.ai adapter.

    Text is sent to ``GET /message``, audio to ``POST /speech``. Utterances
    are truncated to the provider's maximum length.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = "https://api.wit.ai",
        version: str = "20200612",
        timeout: float = 10.0,
        max_utterance_length: int = 280,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.version = version
        self.max_utterance_length = max_utterance_length
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def _params(self, reference_time: datetime) -> dict[str, str]:
        return {
            "v": self.version,
            "context": json.dumps({"reference_time": reference_time.isoformat()}),
        }

    async def query_text(self, text: str, reference_time: datetime) -> dict[str, Any]:
        params = self._params(reference_time)
        params["q"] = text[: self.max_utterance_length]

        logger.debug("wit_query_text", length=len(params["q"]))
        return await self._request("GET", "/message", params=params)

    async def query_voice(
        self,
        audio: bytes,
        reference_time: datetime,
        content_type: str = "audio/mpeg",
    ) -> dict[str, Any]:
        logger.debug("wit_query_voice", size=len(audio), content_type=content_type)
        return await self._request(
            "POST",
            "/speech",
            params=self._params(reference_time),
            content=audio,
            headers={"Content-Type": content_type},
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "wit_request_failed",
                url=url,
                status_code=e.response.status_code,
            )
            raise NLUError(f"Wit.ai returned {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("wit_request_failed", url=url, error=str(e))
            raise NLUError(f"Wit.ai request failed: {e}") from e

        if not isinstance(data, dict):
            raise NLUError("Wit.ai returned an unexpected payload")

        logger.debug("wit_response", response=data)
        return data

    async def aclose(self) -> None:
        await self._client.aclose()


class MockNLUAdapter(NLUAdapter):
    """
    Mock NLU adapter for testing.

    Scripted responses, when queued, are returned in order. Otherwise a
    handful of regex rules produce a response in Wit.ai shape, which is
    enough to talk to Robin without an API token.
    """

    def __init__(self, responses: list[dict[str, Any]] | None = None) -> None:
        self.responses: deque[dict[str, Any]] = deque(responses or [])
        self.call_count = 0
        self.last_query: str | None = None

        # Pattern: (regex, intent)
        self.intent_patterns: list[tuple[str, str]] = [
            (r"\bjokes?\b|\bfunny\b", "tell_joke"),
            (r"who are you|your name", "who_are_you"),
            (r"delete (my )?account", "delete_account"),
            (r"\b(add|spent|bought|paid)\b|\bexpense\b", "add_expense"),
            (r"^(yes|yeah|yep|sure|correct|do it)\b", "feedback_positive"),
            (r"^(no|nope|cancel|never ?mind|don'?t)\b", "feedback_negative"),
        ]

        # Pattern: (regex, trait)
        self.trait_patterns: list[tuple[str, str]] = [
            (r"\b(hi|hello|hey)\b", "wit$greetings"),
            (r"\b(bye|goodbye|see you)\b", "wit$bye"),
            (r"\bthank", "wit$thanks"),
        ]

        self.item_pattern = re.compile(
            r"\b(?:bought|buy|add|for)\s+(?:an?\s+|the\s+|some\s+)?"
            r"([a-z][a-z ]*?)(?=\s+(?:for|on|yesterday|today|last)\b|[.,!?]|$)"
        )
        self.money_pattern = re.compile(r"\$\s?(\d+(?:\.\d+)?)")
        self.number_pattern = re.compile(r"(?<![\w$.])(\d+(?:\.\d+)?)\b")

    def queue(self, response: dict[str, Any]) -> None:
        """Queue a scripted response."""
        self.responses.append(response)

    async def query_text(self, text: str, reference_time: datetime) -> dict[str, Any]:
        self.call_count += 1
        self.last_query = text

        if self.responses:
            return self.responses.popleft()

        response = self._analyze(text.strip().lower(), reference_time)
        logger.debug(
            "mock_nlu_response",
            text=text[:50],
            intents=[i["name"] for i in response["intents"]],
        )
        return response

    async def query_voice(
        self,
        audio: bytes,
        reference_time: datetime,
        content_type: str = "audio/mpeg",
    ) -> dict[str, Any]:
        self.call_count += 1
        if self.responses:
            return self.responses.popleft()
        return {"text": "", "intents": [], "entities": {}, "traits": {}}

    def _analyze(self, text: str, reference_time: datetime) -> dict[str, Any]:
        intents = [
            {"name": intent, "confidence": 0.9}
            for pattern, intent in self.intent_patterns
            if re.search(pattern, text)
        ][:1]

        traits = {
            trait: [{"value": "true", "confidence": 0.9}]
            for pattern, trait in self.trait_patterns
            if re.search(pattern, text)
        }

        entities: dict[str, list[dict[str, Any]]] = {}

        item = self.item_pattern.search(text)
        if item and item.group(1) not in ("expense", "new expense", "an expense"):
            entities["item:item"] = [{
                "name": "item",
                "type": "value",
                "value": item.group(1),
                "body": item.group(1),
            }]

        money = self.money_pattern.search(text)
        if money:
            entities["wit$amount_of_money:amount_of_money"] = [{
                "name": "wit$amount_of_money",
                "type": "value",
                "value": float(money.group(1)),
                "unit": "$",
                "body": money.group(0),
            }]

        number = self.number_pattern.search(text)
        if number:
            entities["wit$number:number"] = [{
                "name": "wit$number",
                "type": "value",
                "value": float(number.group(1)),
                "body": number.group(1),
            }]

        moment = self._datetime_entity(text, reference_time)
        if moment:
            entities["wit$datetime:datetime"] = [moment]

        return {"text": text, "intents": intents, "entities": entities, "traits": traits}

    def _datetime_entity(self, text: str, reference_time: datetime) -> dict[str, Any] | None:
        midnight = reference_time.replace(hour=0, minute=0, second=0, microsecond=0)

        if re.search(r"\blast week\b", text):
            week = TimeInterval.week_of(midnight - timedelta(days=7))
            return {
                "name": "wit$datetime",
                "type": "interval",
                "body": "last week",
                "from": {"grain": "week", "value": week.start.isoformat()},
                "to": {"grain": "week", "value": week.end.isoformat()},
            }

        for word, offset in (("today", 0), ("yesterday", -1)):
            if re.search(rf"\b{word}\b", text):
                return {
                    "name": "wit$datetime",
                    "type": "value",
                    "grain": "day",
                    "body": word,
                    "value": (midnight + timedelta(days=offset)).isoformat(),
                }

        return None


def create_nlu_adapter(
    provider: str | None = None,
    settings: Settings | None = None,
) -> NLUAdapter:
    """
    Factory function to create the appropriate NLU adapter.

    Args:
        provider: Provider name ("mock", "wit"); defaults to settings
        settings: Settings to read credentials from

    Returns:
        NLUAdapter instance
    """
    settings = settings or get_settings()
    provider = provider or settings.nlu_provider

    if provider == "mock":
        return MockNLUAdapter()

    if provider == "wit":
        if not settings.wit_access_token:
            logger.warning("wit_access_token_missing", fallback="mock")
            return MockNLUAdapter()
        return WitAdapter(
            access_token=settings.wit_access_token,
            base_url=settings.wit_api_url,
            version=settings.wit_api_version,
            timeout=settings.wit_timeout_seconds,
            max_utterance_length=settings.max_utterance_length,
        )

    logger.warning("unknown_nlu_provider", provider=provider, fallback="mock")
    return MockNLUAdapter()
