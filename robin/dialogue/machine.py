"""Conversation state machine driving a single turn."""

from dataclasses import replace
from datetime import timedelta
from typing import Any, Optional

import structlog

from robin.dialogue.base import (
    DialogueState,
    OutcomeKind,
    RedirectLoopError,
    Rule,
    TurnAccumulator,
    TurnInput,
)
from robin.dialogue.context import Session, TurnResult
from robin.dialogue.rules import RULES
from robin.messages import MessageCatalog
from robin.nlu import EphemeralFacts


class DialogueEngine:
    """
    Rule-driven conversation state machine.

    Starting from the persisted state, the rules of that state are tried in
    order. A rule may redirect to another state, which is then evaluated
    within the same turn, or settle the turn in a state. Redirect chains are
    bounded by the number of states; a longer chain is a loop in the rule
    table and raises ``RedirectLoopError``.

    The engine performs no I/O. It never mutates the session's context.

    Usage:
        engine = DialogueEngine(MessageCatalog.load())
        result = engine.process(session, facts)
        result.messages   # ["Hey Dana, how's it going?", "I'm Robin, ..."]
    """

    def __init__(
        self,
        messages: MessageCatalog,
        logger: Any = None,
        rules: Optional[dict[DialogueState, list[Rule]]] = None,
        delete_account_timeout: timedelta = timedelta(minutes=3),
        currency_symbol: str = "$",
    ) -> None:
        self.messages = messages
        self.logger = logger or structlog.get_logger()
        self.rules = rules if rules is not None else RULES
        self.delete_account_timeout = delete_account_timeout
        self.currency_symbol = currency_symbol

    def process(self, session: Session, facts: EphemeralFacts) -> TurnResult:
        """Process one turn and return the updated context, messages and actions."""
        turn = TurnInput(
            facts=facts,
            timestamp=session.timestamp,
            messages=self.messages,
            delete_account_timeout=self.delete_account_timeout,
            currency_symbol=self.currency_symbol,
        )
        acc = TurnAccumulator(context=replace(session.context))

        start = session.context.state
        self.logger.info("turn_started", state=start, intent=facts.intent)

        state, acc = self._run(self._resolve_state(start), turn, acc)

        context = replace(
            acc.context,
            state=state.value,
            message_counter=acc.context.message_counter + 1,
            last_message_on=session.timestamp,
        )

        self.logger.info(
            "turn_completed",
            from_state=start,
            to_state=state.value,
            messages=len(acc.messages),
            actions=len(acc.actions),
        )

        return TurnResult(
            context=context,
            messages=list(acc.messages),
            actions=list(acc.actions),
        )

    def _resolve_state(self, name: str) -> DialogueState:
        try:
            state = DialogueState(name)
        except ValueError:
            state = None

        if state is None or state not in self.rules:
            self.logger.warning(
                "unknown_state",
                state=name,
                fallback=DialogueState.INIT.value,
            )
            return DialogueState.INIT
        return state

    def _run(
        self,
        state: DialogueState,
        turn: TurnInput,
        acc: TurnAccumulator,
    ) -> tuple[DialogueState, TurnAccumulator]:
        path = [state.value]

        while True:
            for rule in self.rules[state]:
                self.logger.debug("rule_trying", state=state.value, rule=rule.name)
                outcome, acc = rule(turn, acc)

                if outcome.kind is OutcomeKind.NO_MATCH:
                    continue

                self.logger.info(
                    "state_transition",
                    from_state=state.value,
                    to_state=outcome.state.value,
                    rule=rule.name,
                    reason=outcome.reason or rule.name,
                    redirect=outcome.kind is OutcomeKind.REDIRECT,
                )

                if outcome.kind is OutcomeKind.SETTLE:
                    return outcome.state, acc

                path.append(outcome.state.value)
                if len(path) > len(self.rules) + 1:
                    raise RedirectLoopError(path)

                state = self._resolve_state(outcome.state.value)
                break
            else:
                self.logger.warning("no_rule_applied", state=state.value)
                return state, acc
