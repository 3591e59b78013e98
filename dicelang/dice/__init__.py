"""Dice notation engine.

Lexes, parses and evaluates tabletop dice notation with keep/drop,
exploding, reroll and success-counting modifiers, target checks, variables,
Hope/Fear rolls and Fate dice.

Usage:
    >>> from dicelang.dice import evaluate
    >>> result = evaluate("4d6kh3+@STR", {"STR": 2})
    >>> check = evaluate("dh a1 + @AGI t>=12", {"AGI": 1})
    >>> check.tag in ("Hope", "Fear", "Critical")
    True
"""

# Types
from dicelang.dice.types import (
    FATE,
    BinaryOp,
    Comparison,
    DiceResult,
    DiceTerm,
    DieRoll,
    Drop,
    Explode,
    Keep,
    Modifier,
    Node,
    NumberLiteral,
    Reroll,
    SpecialTerm,
    SuccessCount,
    TargetCheck,
    TargetOutcome,
    Token,
    TokenType,
    VariableRef,
)

# Errors
from dicelang.dice.errors import (
    ArithmeticHazard,
    DiceError,
    LexAnomaly,
    ParseFailure,
    UndefinedVariable,
)

# Pipeline
from dicelang.dice.lexer import tokenize
from dicelang.dice.parser import DiceParser, parse_expression
from dicelang.dice.evaluator import DiceEvaluator
from dicelang.dice.breakdown import format_breakdown
from dicelang.dice.random_source import RandomSource, system_random

# Entry point
from dicelang.dice.roller import (
    DICE_EXAMPLES,
    ValidationResult,
    evaluate,
    expand_aliases,
    extract_variables,
    notation_help,
    validate_expression,
)

__all__ = [
    # Types
    "FATE",
    "BinaryOp",
    "Comparison",
    "DiceResult",
    "DiceTerm",
    "DieRoll",
    "Drop",
    "Explode",
    "Keep",
    "Modifier",
    "Node",
    "NumberLiteral",
    "Reroll",
    "SpecialTerm",
    "SuccessCount",
    "TargetCheck",
    "TargetOutcome",
    "Token",
    "TokenType",
    "VariableRef",
    # Errors
    "ArithmeticHazard",
    "DiceError",
    "LexAnomaly",
    "ParseFailure",
    "UndefinedVariable",
    # Pipeline
    "tokenize",
    "DiceParser",
    "parse_expression",
    "DiceEvaluator",
    "format_breakdown",
    "RandomSource",
    "system_random",
    # Entry point
    "DICE_EXAMPLES",
    "ValidationResult",
    "evaluate",
    "expand_aliases",
    "extract_variables",
    "notation_help",
    "validate_expression",
]
