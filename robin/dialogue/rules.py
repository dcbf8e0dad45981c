"""
Conversation rules

Each state owns an ordered list of rules. A rule inspects the turn's facts
and the accumulated context and returns an ``Outcome`` together with the
(possibly extended) accumulator.
"""

from robin.dialogue.base import (
    DialogueState,
    Outcome,
    Rule,
    TurnAccumulator,
    TurnInput,
)
from robin.dialogue.context import AddExpenseAction

DATE_FORMAT = "%B %d, %Y"

INTENT_TELL_JOKE = "tell_joke"
INTENT_WHO_ARE_YOU = "who_are_you"
INTENT_DELETE_ACCOUNT = "delete_account"
INTENT_ADD_EXPENSE = "add_expense"
INTENT_FEEDBACK_POSITIVE = "feedback_positive"
INTENT_FEEDBACK_NEGATIVE = "feedback_negative"


def format_money(value: float, symbol: str = "$") -> str:
    return f"{symbol}{value:,.2f}"


# =============================================================================
# init
# =============================================================================


def first_interaction(turn: TurnInput, acc: TurnAccumulator):
    name = acc.context.user_name
    if name:
        acc = acc.say(turn.messages["personal_greeting"].any({"name": name}))
    else:
        acc = acc.say(turn.messages["generic_greeting"].any())

    acc = acc.update(last_greeting_on=turn.timestamp)
    acc = acc.say(turn.messages["welcome"].any())
    return Outcome.redirect(DialogueState.MAIN, "greeted"), acc


# =============================================================================
# main
# =============================================================================


def tell_joke(turn: TurnInput, acc: TurnAccumulator):
    if turn.facts.intent != INTENT_TELL_JOKE:
        return Outcome.no_match(), acc

    jokes = turn.messages["joke"]
    counter = acc.context.joke_counter
    acc = acc.say(jokes.get(counter, turn.messages["done_joking"].any()))
    acc = acc.update(
        joke_counter=min(counter + 1, len(jokes)),
        last_joke_on=turn.timestamp,
    )
    return Outcome.settle(DialogueState.MAIN), acc


def who_are_you(turn: TurnInput, acc: TurnAccumulator):
    if turn.facts.intent != INTENT_WHO_ARE_YOU:
        return Outcome.no_match(), acc

    acc = acc.say(turn.messages["introduction"].any())
    return Outcome.settle(DialogueState.MAIN), acc


def delete_account(turn: TurnInput, acc: TurnAccumulator):
    if turn.facts.intent != INTENT_DELETE_ACCOUNT:
        return Outcome.no_match(), acc

    acc = acc.say(turn.messages["delete_account_confirmation"].any())
    return Outcome.settle(DialogueState.DELETE_ACCOUNT), acc


def start_expense(turn: TurnInput, acc: TurnAccumulator):
    if turn.facts.intent != INTENT_ADD_EXPENSE:
        return Outcome.no_match(), acc

    # A re-fired add_expense intent starts over, even mid-draft
    acc = acc.clear_draft()
    if not turn.facts.has_expense_details():
        acc = acc.say(turn.messages["add_expense"].any())

    return Outcome.redirect(DialogueState.ADD_EXPENSE, "expense_started"), acc


def bye(turn: TurnInput, acc: TurnAccumulator):
    if acc.messages or not turn.facts.bye:
        return Outcome.no_match(), acc

    acc = acc.say(turn.messages["bye"].any({"name": acc.context.user_name}))
    return Outcome.settle(DialogueState.MAIN), acc


def confused(turn: TurnInput, acc: TurnAccumulator):
    if not acc.messages:
        acc = acc.say(turn.messages["confused"].any())
    return Outcome.settle(DialogueState.MAIN), acc


# =============================================================================
# delete_account
# =============================================================================


def deletion_confirmation(turn: TurnInput, acc: TurnAccumulator):
    if turn.timestamp - acc.context.last_message_on > turn.delete_account_timeout:
        return Outcome.settle(DialogueState.MAIN, "timeout"), acc

    intent = turn.facts.intent
    if intent == INTENT_FEEDBACK_POSITIVE:
        acc = acc.update(is_active=False)
        acc = acc.say(turn.messages["account_deletion_confirmed"].any())
        return Outcome.settle(DialogueState.MAIN, "positive"), acc

    if intent == INTENT_FEEDBACK_NEGATIVE:
        acc = acc.say(turn.messages["account_deletion_canceled"].any())
        return Outcome.settle(DialogueState.MAIN, "negative"), acc

    acc = acc.say(turn.messages["confused"].any())
    return Outcome.settle(DialogueState.DELETE_ACCOUNT, "confused"), acc


# =============================================================================
# add_expense
# =============================================================================


def _merge_draft(turn: TurnInput, acc: TurnAccumulator) -> TurnAccumulator:
    """Copy extracted facts into draft fields that are still unset."""
    context = acc.context
    facts = turn.facts
    changes = {}

    if facts.item is not None and context.current_expense_item is None:
        changes["current_expense_item"] = facts.item
    if facts.incurred_on is not None and context.current_expense_incurred_on is None:
        changes["current_expense_incurred_on"] = facts.incurred_on
    if facts.money is not None and context.current_expense_value is None:
        changes["current_expense_value"] = facts.money.value

    return acc.update(**changes) if changes else acc


def _fills_draft(turn: TurnInput, acc: TurnAccumulator) -> bool:
    """Check if this turn's facts would fill any unset draft field."""
    return _merge_draft(turn, acc) is not acc


def add_expense(turn: TurnInput, acc: TurnAccumulator):
    acc = _merge_draft(turn, acc)
    context = acc.context

    if context.current_expense_item is None:
        return Outcome.redirect(DialogueState.SPECIFY_EXPENSE_ITEM), acc
    if context.current_expense_incurred_on is None:
        return Outcome.redirect(DialogueState.SPECIFY_EXPENSE_MOMENT), acc
    if context.current_expense_value is None:
        return Outcome.redirect(DialogueState.SPECIFY_EXPENSE_VALUE), acc

    action = AddExpenseAction(
        item=context.current_expense_item,
        value=context.current_expense_value,
        incurred_on=context.current_expense_incurred_on,
    )
    acc = acc.act(action)
    acc = acc.say(turn.messages["expense_completed"].any({
        "item": action.item,
        "value": format_money(action.value, turn.currency_symbol),
        "moment": action.incurred_on.strftime(DATE_FORMAT),
    }))
    acc = acc.clear_draft()
    return Outcome.settle(DialogueState.MAIN, "expense_added"), acc


# =============================================================================
# specify_expense_*
# =============================================================================


def specify_expense_item(turn: TurnInput, acc: TurnAccumulator):
    if turn.facts.item is not None:
        acc = acc.update(current_expense_item=turn.facts.item)
        return Outcome.redirect(DialogueState.ADD_EXPENSE, "item_specified"), acc

    if _fills_draft(turn, acc):
        return Outcome.redirect(DialogueState.ADD_EXPENSE, "draft_extended"), acc

    acc = acc.say(turn.messages["specify_expense_item"].any())
    return Outcome.settle(DialogueState.SPECIFY_EXPENSE_ITEM), acc


def specify_expense_moment(turn: TurnInput, acc: TurnAccumulator):
    incurred_on = turn.facts.incurred_on
    if incurred_on is not None:
        acc = acc.update(current_expense_incurred_on=incurred_on)
        return Outcome.redirect(DialogueState.ADD_EXPENSE, "moment_specified"), acc

    if _fills_draft(turn, acc):
        return Outcome.redirect(DialogueState.ADD_EXPENSE, "draft_extended"), acc

    acc = acc.say(turn.messages["specify_expense_moment"].any())
    return Outcome.settle(DialogueState.SPECIFY_EXPENSE_MOMENT), acc


def specify_expense_value(turn: TurnInput, acc: TurnAccumulator):
    if turn.facts.money is not None:
        acc = acc.update(current_expense_value=turn.facts.money.value)
        return Outcome.redirect(DialogueState.ADD_EXPENSE, "value_specified"), acc

    if _fills_draft(turn, acc):
        return Outcome.redirect(DialogueState.ADD_EXPENSE, "draft_extended"), acc

    acc = acc.say(turn.messages["specify_expense_value"].any())
    return Outcome.settle(DialogueState.SPECIFY_EXPENSE_VALUE), acc


RULES: dict[DialogueState, list[Rule]] = {
    DialogueState.INIT: [
        Rule("first_interaction", first_interaction),
    ],
    DialogueState.MAIN: [
        Rule("tell_joke", tell_joke),
        Rule("who_are_you", who_are_you),
        Rule("delete_account", delete_account),
        Rule("add_expense", start_expense),
        Rule("bye", bye),
        Rule("confused", confused),
    ],
    DialogueState.DELETE_ACCOUNT: [
        Rule("confirmation", deletion_confirmation),
    ],
    DialogueState.ADD_EXPENSE: [
        Rule("add_expense", add_expense),
    ],
    DialogueState.SPECIFY_EXPENSE_ITEM: [
        Rule("specify_expense_item", specify_expense_item),
    ],
    DialogueState.SPECIFY_EXPENSE_MOMENT: [
        Rule("specify_expense_moment", specify_expense_moment),
    ],
    DialogueState.SPECIFY_EXPENSE_VALUE: [
        Rule("specify_expense_value", specify_expense_value),
    ],
}
