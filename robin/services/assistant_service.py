"""
Assistant Service - turn orchestration around the dialogue engine.

This is the service that:
1. Loads the user's context (a fresh one for unknown users)
2. Short-circuits accounts pending deletion and unsupported payloads
3. Queries the NLU provider and normalizes its response
4. Runs the dialogue engine
5. Persists the context and actions, then delivers the messages in order
"""
from datetime import datetime, timedelta, timezone

import structlog

from robin.adapters.delivery import MessageDelivery
from robin.adapters.nlu_adapter import NLUAdapter
from robin.adapters.storage import ActionSink, ContextStore
from robin.config import Settings, get_settings
from robin.dialogue import DialogueEngine, Session, TurnResult, default_context
from robin.messages import MessageCatalog
from robin.nlu import NLUNormalizer

logger = structlog.get_logger()


class AssistantService:
    """
    Main turn orchestration service.

    The dialogue engine itself is pure; every network and storage call of a
    turn happens here, strictly before or after the engine runs. Turns for
    the same user must not run concurrently.
    """

    def __init__(
        self,
        nlu_adapter: NLUAdapter,
        context_store: ContextStore,
        action_sink: ActionSink,
        delivery: MessageDelivery,
        messages: MessageCatalog | None = None,
        engine: DialogueEngine | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.nlu = nlu_adapter
        self.contexts = context_store
        self.actions = action_sink
        self.delivery = delivery
        self._settings = settings or get_settings()
        self.messages = messages or MessageCatalog.load(self._settings.messages_path)
        self.normalizer = NLUNormalizer()
        self.engine = engine or DialogueEngine(
            self.messages,
            delete_account_timeout=timedelta(
                minutes=self._settings.delete_account_timeout_minutes
            ),
            currency_symbol=self._settings.currency_symbol,
        )

    async def process(self, session: Session) -> TurnResult:
        """
        Run one turn without touching storage.

        Raises:
            ValueError: If the session carries neither text nor voice
            NLUError: If the NLU provider fails
        """
        if session.text:
            raw = await self.nlu.query_text(session.text, session.timestamp)
        elif session.voice:
            raw = await self.nlu.query_voice(session.voice, session.timestamp)
        else:
            raise ValueError("Either text or voice must be given")

        facts = self.normalizer.normalize(raw)
        result = self.engine.process(session, facts)
        result.nlu = raw
        return result

    async def process_turn(
        self,
        user_id: str,
        text: str | None = None,
        voice: bytes | None = None,
        timestamp: datetime | None = None,
        destination: str | None = None,
    ) -> TurnResult:
        """
        Process a turn for a user end to end.

        Args:
            user_id: User identifier
            text: Utterance text
            voice: Voice payload (used when no text is given); a turn with
                neither is answered with message_type_not_supported
            timestamp: Time of the turn, defaults to now
            destination: Delivery destination, defaults to the user id

        Returns:
            TurnResult with the saved context, delivered messages and actions
        """
        timestamp = timestamp or datetime.now(timezone.utc)
        destination = destination or user_id

        logger.info(
            "processing_turn",
            user_id=user_id,
            has_text=bool(text),
            has_voice=bool(voice),
        )

        context = await self.contexts.load(user_id)
        if context is None:
            context = default_context(timestamp)
            logger.info("context_created", user_id=user_id)

        if not context.is_active:
            logger.info("account_inactive", user_id=user_id)
            result = TurnResult(
                context=context,
                messages=[self.messages["account_is_inactive"].any()],
            )
        elif not (text or voice):
            logger.info("message_type_not_supported", user_id=user_id)
            result = TurnResult(
                context=context,
                messages=[self.messages["message_type_not_supported"].any()],
            )
        else:
            session = Session(timestamp=timestamp, context=context, text=text, voice=voice)
            result = await self.process(session)

            await self.contexts.save(user_id, result.context)
            for action in result.actions:
                await self.actions.record(user_id, action)

        for message in result.messages:
            await self.delivery.deliver(destination, message)

        logger.info(
            "turn_processed",
            user_id=user_id,
            state=result.context.state,
            messages=len(result.messages),
            actions=len(result.actions),
        )

        return result
