"""Rich display helpers for CLI output."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from dicelang.dice.types import FATE, DiceResult, DieRoll


# Shared console instance
console = Console()


def display_error(message: str) -> None:
    """Display error message.

    Args:
        message: Error message.
    """
    console.print(f"[bold red]Error:[/bold red] {message}")


def display_success(message: str) -> None:
    """Display success message.

    Args:
        message: Success message.
    """
    console.print(f"[bold green]{message}[/bold green]")


def display_info(message: str) -> None:
    """Display info message.

    Args:
        message: Info message.
    """
    console.print(f"[dim]{message}[/dim]")


def _die_label(roll: DieRoll) -> str:
    if roll.role:
        return roll.role.title()
    return "dF" if roll.sides == FATE else f"d{roll.sides}"


def _die_text(roll: DieRoll) -> Text:
    """Render one die with styling for its flags.

    Dropped and rerolled dice are struck through, exploded dice are yellow
    and successes green.
    """
    text = Text(str(roll.result))
    if roll.dropped or roll.rerolled:
        text.stylize("dim strike")
    elif roll.success:
        text.stylize("bold green")
    elif roll.exploded:
        text.stylize("bold yellow")
    if roll.exploded:
        text.append("!")
    if roll.success:
        text.append("✓")
    return text


def _status(roll: DieRoll) -> str:
    flags = [
        name
        for name, flag in (
            ("exploded", roll.exploded),
            ("dropped", roll.dropped),
            ("rerolled", roll.rerolled),
            ("success", roll.success),
        )
        if flag
    ]
    return ", ".join(flags)


def _headline(result: DiceResult) -> Text:
    headline = Text()
    if result.successes is not None:
        headline.append(f"{result.successes} successes", style="bold cyan")
        headline.append(f"  (total {result.total})", style="dim")
    else:
        headline.append(str(result.total), style="bold cyan")

    if result.tag:
        tag_style = {"Hope": "bold blue", "Fear": "bold magenta", "Critical": "bold yellow"}
        headline.append(f"  [{result.tag}]", style=tag_style.get(result.tag, "bold"))

    if result.target is not None:
        verdict = "PASS" if result.target.passed else "FAIL"
        headline.append(
            f"  vs {result.target.operator.value}{result.target.threshold} → {verdict}",
            style="bold green" if result.target.passed else "bold red",
        )
    return headline


def display_roll_result(result: DiceResult, show_dice: bool = True) -> None:
    """Display a dice result.

    Args:
        result: Result from ``evaluate``.
        show_dice: Include the per-die table.
    """
    if result.is_error:
        display_error(result.error or result.breakdown)
        return

    body = Text()
    body.append_text(_headline(result))
    body.append("\n")
    body.append(result.breakdown, style="dim")
    if result.variables:
        names = ", ".join(f"@{name}={value}" for name, value in result.variables.items())
        body.append(f"\n{names}", style="cyan")

    console.print(Panel(body, title=f"[bold]{result.expression}[/bold]", border_style="cyan"))

    if show_dice and result.rolls:
        table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Die")
        table.add_column("Result", justify="right")
        table.add_column("Status", style="dim")
        for index, roll in enumerate(result.rolls, start=1):
            table.add_row(str(index), _die_label(roll), _die_text(roll), _status(roll))
        console.print(table)


def display_examples(examples: dict[str, list[str]]) -> None:
    """Display example expressions grouped by category."""
    table = Table(title="Example Expressions", box=box.ROUNDED)
    table.add_column("Category", style="bold cyan")
    table.add_column("Expressions")
    for category, expressions in examples.items():
        table.add_row(category.replace("_", "/").title(), "\n".join(expressions))
    console.print(table)


def display_help(text: str) -> None:
    """Display notation help text."""
    console.print(Panel(text, title="[bold]Dice Notation[/bold]", border_style="dim"))
