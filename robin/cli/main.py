"""Robin CLI - Main entry point."""

import asyncio
from datetime import datetime

import click
from rich.table import Table

from robin import __version__
from robin.adapters import (
    InMemoryActionSink,
    InMemoryContextStore,
    InMemoryDelivery,
    NLUError,
    create_nlu_adapter,
)
from robin.cli.output import (
    console,
    print_actions,
    print_context_diff,
    print_expense_summary,
    print_messages,
    print_yaml,
)
from robin.config import get_settings
from robin.dialogue import default_context
from robin.logging import configure_logging
from robin.messages import MessageCatalog
from robin.nlu import TimeInterval
from robin.services import AssistantService

REPL_USER_ID = "repl"


@click.group()
@click.version_option(version=__version__, prog_name="robin")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool):
    """Robin - your friendly accountant, on the command line.

    \b
    Examples:
      robin chat --user-name Dana
      robin messages
    """
    ctx.ensure_object(dict)
    settings = get_settings()
    configure_logging("debug" if debug else "warning", settings.log_format)
    ctx.obj["settings"] = settings


@cli.command("chat")
@click.option("--user-name", "-n", default="", help="Name Robin greets you with")
@click.option("--provider", "-p", type=click.Choice(["mock", "wit"]), default=None,
              help="NLU provider (defaults to NLU_PROVIDER)")
@click.option("--messages", "messages_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="Alternative message catalog (YAML)")
@click.pass_context
def chat(ctx: click.Context, user_name: str, provider: str | None, messages_path: str | None):
    """Talk to Robin interactively.

    Type 'exit' to quit and 'nlu' to show the last raw NLU response.
    On exit, the expenses recorded for the current week are summarised.
    """
    settings = ctx.obj["settings"]
    asyncio.run(_chat(settings, user_name, provider, messages_path))


async def _chat(settings, user_name: str, provider: str | None, messages_path: str | None):
    contexts = InMemoryContextStore()
    actions = InMemoryActionSink()
    nlu = create_nlu_adapter(provider, settings)
    service = AssistantService(
        nlu_adapter=nlu,
        context_store=contexts,
        action_sink=actions,
        delivery=InMemoryDelivery(),
        messages=MessageCatalog.load(messages_path or settings.messages_path),
        settings=settings,
    )

    context = default_context()
    context.user_name = user_name
    await contexts.save(REPL_USER_ID, context)
    last_nlu = None

    try:
        while True:
            try:
                text = click.prompt("robin", prompt_suffix="> ", default="", show_default=False)
            except click.Abort:
                break

            text = text.strip()
            if not text:
                continue
            if text == "exit":
                break
            if text == "nlu":
                print_yaml(last_nlu)
                continue

            try:
                result = await service.process_turn(
                    REPL_USER_ID,
                    text=text,
                    timestamp=datetime.now().astimezone(),
                )
            except NLUError as e:
                console.print(f"[red]✗[/red] {e}")
                continue

            last_nlu = result.nlu
            print_messages(result.messages)
            print_context_diff(context, result.context)
            print_actions(result.actions)
            context = result.context
    finally:
        await nlu.aclose()

    week = TimeInterval.week_of(datetime.now().astimezone())
    expenses = actions.expenses_between(REPL_USER_ID, week)
    if expenses:
        print_expense_summary(expenses, week, settings.currency_symbol)


@cli.command("messages")
@click.option("--messages", "messages_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="Alternative message catalog (YAML)")
@click.pass_context
def list_messages(ctx: click.Context, messages_path: str | None):
    """List message catalog keys and their variant counts."""
    settings = ctx.obj["settings"]
    catalog = MessageCatalog.load(messages_path or settings.messages_path)

    table = Table(title="Messages", show_header=True, header_style="bold cyan")
    table.add_column("Key")
    table.add_column("Variants", justify="right")
    for key in catalog:
        table.add_row(key, str(len(catalog[key])))

    console.print(table)


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
