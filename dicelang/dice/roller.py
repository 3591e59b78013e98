"""Dice expression entry point.

Expands aliases, parses and evaluates an expression. Failures never escape
``evaluate``: they come back as a result with total 0 and an
``"Error: ..."`` breakdown.

Usage:
    >>> result = evaluate("4d6kh3+@STR", {"STR": 2})
    >>> result.variables
    {'STR': 2}
    >>> evaluate("1d20+@DEX").breakdown
    'Error: Variable @DEX is not defined'
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass

from dicelang.config import Settings, get_settings
from dicelang.dice.errors import DiceError, UndefinedVariable
from dicelang.dice.evaluator import DiceEvaluator
from dicelang.dice.parser import parse_expression
from dicelang.dice.random_source import RandomSource
from dicelang.dice.types import DiceResult


logger = logging.getLogger(__name__)

# Applied in order; "adv d20" must be replaced before bare "adv".
ALIASES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(?<![@\w])adv\s+d20\b"), "2d20kh1"),
    (re.compile(r"(?<![@\w])dis\s+d20\b"), "2d20kl1"),
    (re.compile(r"(?<![@\w])adv\b"), "2d20kh1"),
    (re.compile(r"(?<![@\w])dis\b"), "2d20kl1"),
)

_VARIABLE_PATTERN = re.compile(r"@([a-z0-9_]+)", re.IGNORECASE)
_SPACES = re.compile(r"\s+")

DICE_EXAMPLES: dict[str, list[str]] = {
    "basic": ["1d20", "2d6+3", "4d6kh3", "1d20+5", "3d8"],
    "advanced": [
        "2d20kh1",  # Advantage
        "2d20kl1",  # Disadvantage
        "4d6!",  # Exploding dice
        "6d6>=4",  # Count successes
        "3d6r1",  # Reroll 1s once
        "10d10!>=8",  # Explode on 8+
        "4d6kh3+@STR+@PROF",
        "1d20+@DEX t>=15",
    ],
    "hope_fear": [
        "dh",
        "dh a2",
        "dh d1",
        "dh a@ADV d@DIS",
        "dh a2 d1 + @STR",
        "dh a@ADV d@DIS + @BONUS t>=@TN",
    ],
    "special": ["4dF", "4dF+@SKILL", "adv", "dis", "adv + @DEX", "6d6kl1"],
}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of checking an expression without rolling it."""

    valid: bool
    error: str | None = None


def expand_aliases(expression: str) -> str:
    """Lowercase the expression and expand ``adv``/``dis`` shortcuts.

    Examples:
        >>> expand_aliases("adv + @DEX")
        '2d20kh1 + @dex'
    """
    expanded = expression.lower()
    for pattern, replacement in ALIASES:
        expanded = pattern.sub(replacement, expanded)
    return _SPACES.sub(" ", expanded).strip()


def error_result(expression: str, message: str) -> DiceResult:
    """Build the error-shaped result returned for a failed expression."""
    return DiceResult(
        expression=expression,
        total=0,
        breakdown=f"Error: {message}",
        rolls=[],
        error=message,
    )


def evaluate(
    expression: str,
    variables: Mapping[str, int] | None = None,
    *,
    rng: RandomSource | None = None,
    settings: Settings | None = None,
) -> DiceResult:
    """Roll a dice expression.

    Args:
        expression: Dice notation, e.g. ``"4d6kh3+@STR"`` or ``"dh a2 t>=12"``.
        variables: Variable values by name (case-insensitive).
        rng: Random source for draws. Defaults to an OS-backed source.
        settings: Limits and lexing mode. Defaults to ``get_settings()``.

    Returns:
        DiceResult. On failure, total is 0, rolls are empty and the breakdown
        starts with ``"Error: "``.

    Raises:
        pydantic.ValidationError: Only when ``settings`` is omitted and the
            ``DICELANG_*`` environment is malformed. That is a configuration
            error, not an expression error, so it is not turned into a result.
    """
    settings = settings or get_settings()
    try:
        expanded = expand_aliases(expression)
        if expanded != expression.strip().lower():
            logger.debug("Expanded %r to %r", expression, expanded)

        ast = parse_expression(
            expanded, strict=settings.strict_lexing, max_depth=settings.max_depth
        )
        evaluator = DiceEvaluator(
            variables,
            rng,
            explode_limit=settings.explode_limit,
            reroll_limit=settings.reroll_limit,
            max_dice=settings.max_dice,
            max_sides=settings.max_sides,
        )
        return evaluator.evaluate(ast, expression)
    except DiceError as exc:
        logger.info("Failed to evaluate %r: %s: %s", expression, type(exc).__name__, exc)
        return error_result(expression, str(exc))


def extract_variables(expression: str) -> list[str]:
    """List the variables referenced by an expression.

    Returns:
        Unique uppercase names in order of first appearance.

    Examples:
        >>> extract_variables("1d20+@str+@Prof+@STR")
        ['STR', 'PROF']
    """
    names: list[str] = []
    for match in _VARIABLE_PATTERN.finditer(expression):
        name = match.group(1).upper()
        if name not in names:
            names.append(name)
    return names


def validate_expression(
    expression: str,
    variables: Mapping[str, int] | None = None,
    *,
    settings: Settings | None = None,
) -> ValidationResult:
    """Check that an expression parses, without rolling any dice.

    Args:
        expression: Dice notation.
        variables: When given, every referenced variable must be defined.
        settings: Lexing mode. Defaults to ``get_settings()``.

    Returns:
        ValidationResult with the error message when invalid.
    """
    settings = settings or get_settings()
    try:
        expanded = expand_aliases(expression)
        parse_expression(
            expanded, strict=settings.strict_lexing, max_depth=settings.max_depth
        )
        if variables is not None:
            defined = {name.upper() for name in variables}
            for name in extract_variables(expanded):
                if name not in defined:
                    raise UndefinedVariable(name)
    except DiceError as exc:
        return ValidationResult(valid=False, error=str(exc))
    return ValidationResult(valid=True)


def notation_help() -> str:
    """Get help text for the dice notation."""
    return """
Dice Notation Help:

Basic Dice:
  NdS        Roll N dice with S sides (2d6, 1d20, d20)
  + - * /    Arithmetic; division rounds down (2d6+3, (2d6+1)*2)

Modifiers:
  khN / klN  Keep highest/lowest N dice (4d6kh3)
  dhN / dlN  Drop highest/lowest N dice (6d6dl1)
  !          Exploding dice on the max face (3d6!)
  !>=N       Explode on N or higher (2d10!>=8)
  r<=N       Reroll N or lower, once (3d6r1)
  ro<=N      Keep rerolling while N or lower (3d6ro<=2)

Success Counting:
  >=N        Count dice >= N as successes (6d6>=5)
  >N =N <=N <N

Target Numbers:
  t>=N       Check the total against N (1d20+5 t>=15)

Special Dice:
  adv / dis  Advantage/disadvantage (2d20kh1 / 2d20kl1)
  NdF        N Fate/Fudge dice (-1, 0, +1)
  dh aN dN   Hope/Fear roll with N advantage / disadvantage d6

Variables:
  @NAME      Reference a variable (@STR, @DEX, @PROF)
             Names are case-insensitive and shown in UPPERCASE

Examples:
  1d20+@STR+@PROF t>=15
  dh a@ADV d@DIS + @BONUS t>=@TN
  4dF+@SKILL
""".strip()
