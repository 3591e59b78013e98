"""Main CLI application for the dice roller."""

import json
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from dicelang.cli.display import (
    console,
    display_error,
    display_examples,
    display_help,
    display_info,
    display_roll_result,
    display_success,
)
from dicelang.config import get_settings
from dicelang.dice import (
    DICE_EXAMPLES,
    evaluate,
    extract_variables,
    notation_help,
    validate_expression,
)

# Create main app
app = typer.Typer(
    name="dicelang",
    help="Roll tabletop dice notation from the command line",
    add_completion=True,
)


def parse_variable_options(items: list[str] | None) -> dict[str, int]:
    """Parse ``NAME=VALUE`` options into a variable table.

    Raises:
        typer.BadParameter: If an item is malformed or the value is not an integer.
    """
    variables: dict[str, int] = {}
    for item in items or []:
        name, sep, raw_value = item.partition("=")
        name = name.strip().lstrip("@")
        if not sep or not name:
            raise typer.BadParameter(f"Invalid variable '{item}', expected NAME=VALUE")
        try:
            variables[name.upper()] = int(raw_value.strip())
        except ValueError:
            raise typer.BadParameter(
                f"Variable {name.upper()} must be an integer, got '{raw_value}'"
            ) from None
    return variables


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@app.command()
def roll(
    expression: str = typer.Argument(..., help="Dice expression, e.g. '4d6kh3+@STR'"),
    var: Optional[list[str]] = typer.Option(
        None, "--var", "-v", help="Variable as NAME=VALUE (repeatable)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide the per-die table"),
) -> None:
    """Roll a dice expression."""
    variables = parse_variable_options(var)
    result = evaluate(expression, variables)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), ensure_ascii=False))
    else:
        display_roll_result(result, show_dice=not quiet)

    if result.is_error:
        raise typer.Exit(code=1)


@app.command()
def validate(
    expression: str = typer.Argument(..., help="Dice expression to check"),
    var: Optional[list[str]] = typer.Option(
        None, "--var", "-v", help="Require these variables to cover the expression"
    ),
) -> None:
    """Check an expression without rolling."""
    variables = parse_variable_options(var) if var else None
    outcome = validate_expression(expression, variables)
    if not outcome.valid:
        display_error(outcome.error or "Invalid expression")
        raise typer.Exit(code=1)
    display_success(f"Valid expression: {expression}")


@app.command("vars")
def list_variables(
    expression: str = typer.Argument(..., help="Dice expression to inspect"),
) -> None:
    """List the variables an expression references."""
    names = extract_variables(expression)
    if not names:
        display_info("No variables referenced")
        return
    for name in names:
        console.print(f"@{name}")


@app.command()
def notation() -> None:
    """Show the dice notation reference."""
    display_help(notation_help())


@app.command()
def examples() -> None:
    """Show example expressions."""
    display_examples(DICE_EXAMPLES)


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Log pipeline details to stderr"),
) -> None:
    """dicelang - tabletop dice notation roller.

    Use 'dicelang roll "4d6kh3"' to roll, or 'dicelang notation' for the syntax.
    """
    if debug or get_settings().debug:
        _configure_logging()


if __name__ == "__main__":
    app()
