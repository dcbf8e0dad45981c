"""Output formatting utilities."""

from typing import Any

import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from robin.dialogue import Action, AddExpenseAction, RobinContext, format_money
from robin.dialogue.rules import DATE_FORMAT
from robin.nlu import TimeInterval

console = Console()


def print_yaml(data: Any) -> None:
    """Print data as formatted YAML."""
    yaml_str = yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    syntax = Syntax(yaml_str, "yaml", theme="monokai", line_numbers=False)
    console.print(syntax)


def print_messages(messages: list[str]) -> None:
    """Print a turn's messages, numbered in delivery order."""
    console.print()
    for i, message in enumerate(messages, start=1):
        console.print(f"[bold cyan]{i})[/bold cyan] {message}")
        console.print()


def print_context_diff(previous: RobinContext, current: RobinContext) -> None:
    """Print context fields side by side, highlighting the ones that changed."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("State")
    table.add_column("Previous")
    table.add_column("Next")

    before = previous.to_dict()
    after = current.to_dict()
    for key in after:
        old = "null" if before.get(key) is None else str(before.get(key))
        new = "null" if after[key] is None else str(after[key])
        if old != new:
            table.add_row(f"[yellow bold]{key}[/yellow bold]", old, f"[yellow bold]{new}[/yellow bold]")
        else:
            table.add_row(key, old, new)

    console.print(table)
    console.print()


def print_actions(actions: list[Action]) -> None:
    if actions:
        print_yaml([action.to_dict() for action in actions])


def print_expense_summary(
    expenses: list[AddExpenseAction],
    week: TimeInterval,
    currency_symbol: str = "$",
) -> None:
    """Print the expenses recorded for a week and their total."""
    table = Table(
        title=f"Week of {week.start.strftime(DATE_FORMAT)}",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Date")
    table.add_column("Item")
    table.add_column("Value", justify="right")

    for expense in expenses:
        table.add_row(
            expense.incurred_on.strftime(DATE_FORMAT),
            expense.item,
            format_money(expense.value, currency_symbol),
        )

    console.print(table)
    total = sum(expense.value for expense in expenses)
    console.print(
        f"This week: {len(expenses)} expense(s), "
        f"{format_money(total, currency_symbol)} in total."
    )
