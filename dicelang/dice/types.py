"""Dice language type definitions.

Tokens, AST nodes, modifiers, and roll results. AST nodes and modifiers are
immutable; ``DieRoll`` is mutable because modifiers flag dice in place while a
term is being resolved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final, Literal


# Sentinel used as the "sides" of a Fate/Fudge die.
FATE: Final = "F"

Sides = int | Literal["F"]


class TokenType(str, Enum):
    """Kind of a lexer token."""

    NUMBER = "NUMBER"
    VARIABLE = "VARIABLE"  # @NAME
    DICE = "DICE"  # d
    HOPE_FEAR = "HOPE_FEAR"  # dh (term position)
    FATE = "FATE"  # df
    ADVANTAGE = "ADVANTAGE"  # a, only before a digit or @
    OPERATOR = "OPERATOR"  # + - * /
    MODIFIER = "MODIFIER"  # kh kl k dh dl ! r ro
    COMPARISON = "COMPARISON"  # >= > = <= <
    TARGET = "TARGET"  # t, only before a comparison
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexed token.

    Attributes:
        type: Token kind.
        value: Literal source text (lowercased).
        position: Offset into the normalized input.
    """

    type: TokenType
    value: str
    position: int


class Comparison(str, Enum):
    """Comparison operator shared by modifiers and target checks."""

    GE = ">="
    GT = ">"
    EQ = "="
    LE = "<="
    LT = "<"

    def test(self, left: int, right: int) -> bool:
        """Return whether ``left <op> right`` holds."""
        match self:
            case Comparison.GE:
                return left >= right
            case Comparison.GT:
                return left > right
            case Comparison.EQ:
                return left == right
            case Comparison.LE:
                return left <= right
            case Comparison.LT:
                return left < right
        return False


# =============================================================================
# AST
# =============================================================================


@dataclass(frozen=True)
class NumberLiteral:
    value: int


@dataclass(frozen=True)
class VariableRef:
    """Reference to a caller-supplied variable.

    Attributes:
        name: Uppercase variable name without the leading ``@``.
    """

    name: str


Operand = int | VariableRef


@dataclass(frozen=True)
class Keep:
    """Keep the highest/lowest ``count`` active dice, drop the rest."""

    variant: Literal["high", "low"]
    count: Operand


@dataclass(frozen=True)
class Drop:
    """Drop the highest/lowest ``count`` active dice, keep the rest."""

    variant: Literal["high", "low"]
    count: Operand


@dataclass(frozen=True)
class Explode:
    """Add a die for every die meeting the condition.

    Attributes:
        operator: Comparison against the threshold.
        threshold: Face to compare against; None means the die's max face.
        limit: Explosion cap for the term; None means the configured default.
    """

    operator: Comparison = Comparison.GE
    threshold: Operand | None = None
    limit: int | None = None


@dataclass(frozen=True)
class Reroll:
    """Reroll dice meeting the condition, once or until they stop matching."""

    mode: Literal["once", "continuous"]
    operator: Comparison
    threshold: Operand


@dataclass(frozen=True)
class SuccessCount:
    """Count dice meeting the condition instead of summing them."""

    operator: Comparison
    threshold: Operand


Modifier = Keep | Drop | Explode | Reroll | SuccessCount


@dataclass(frozen=True)
class DiceTerm:
    """An ``NdS`` or ``NdF`` term.

    Attributes:
        count: Number of dice.
        sides: Die size, or ``FATE`` for Fate dice.
        modifiers: Modifiers in source order.
    """

    count: Operand
    sides: Operand | Literal["F"]
    modifiers: tuple[Modifier, ...] = ()


@dataclass(frozen=True)
class SpecialTerm:
    """A Hope/Fear roll: 2d12 plus advantage/disadvantage d6 pools."""

    advantage_count: Operand = 0
    disadvantage_count: Operand = 0
    modifiers: tuple[Modifier, ...] = ()


@dataclass(frozen=True)
class BinaryOp:
    operator: Literal["+", "-", "*", "/"]
    left: Node
    right: Node


@dataclass(frozen=True)
class TargetCheck:
    """Comparison of the whole expression total against a threshold."""

    expression: Node
    operator: Comparison
    threshold: Operand


Node = NumberLiteral | VariableRef | DiceTerm | SpecialTerm | BinaryOp | TargetCheck


# =============================================================================
# Results
# =============================================================================


@dataclass
class DieRoll:
    """A single die draw, kept for auditing even when it does not count.

    Attributes:
        sides: Die size, or ``FATE``.
        result: Face rolled.
        exploded: This die triggered an extra die.
        dropped: Removed by keep/drop.
        rerolled: Replaced by a reroll.
        success: Counted as a success.
        role: Hope/Fear role ("hope", "fear", "advantage", "disadvantage").
    """

    sides: Sides
    result: int
    exploded: bool = False
    dropped: bool = False
    rerolled: bool = False
    success: bool = False
    role: str | None = None

    @property
    def is_active(self) -> bool:
        """Whether the die still counts toward the sum or successes."""
        return not self.dropped and not self.rerolled

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"sides": self.sides, "result": self.result}
        for flag in ("exploded", "dropped", "rerolled", "success"):
            if getattr(self, flag):
                data[flag] = True
        if self.role:
            data["role"] = self.role
        return data


@dataclass(frozen=True)
class TargetOutcome:
    """Result of a target-number check."""

    operator: Comparison
    threshold: int
    passed: bool

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.operator.value, "value": self.threshold, "pass": self.passed}


@dataclass(frozen=True)
class DiceResult:
    """Complete outcome of evaluating a dice expression.

    Attributes:
        expression: The expression text as the caller supplied it.
        total: Numeric total (0 on error).
        breakdown: Human-readable roll breakdown, or ``"Error: ..."``.
        rolls: Every die drawn, including dropped and rerolled dice.
        successes: Success count when a success modifier was used.
        target: Target-check outcome, if the expression had one.
        hope: Hope die of a Hope/Fear roll.
        fear: Fear die of a Hope/Fear roll.
        tag: "Hope", "Fear" or "Critical" for a Hope/Fear roll.
        variables: Variables actually consulted, by uppercase name.
        error: Error message when evaluation failed.
    """

    expression: str
    total: int
    breakdown: str
    rolls: list[DieRoll] = field(default_factory=list)
    successes: int | None = None
    target: TargetOutcome | None = None
    hope: int | None = None
    fear: int | None = None
    tag: str | None = None
    variables: dict[str, int] = field(default_factory=dict)
    error: str | None = None

    @property
    def is_error(self) -> bool:
        """Whether this result represents a failed evaluation."""
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible primitives, omitting unset optionals."""
        data: dict[str, Any] = {
            "expression": self.expression,
            "total": self.total,
            "breakdown": self.breakdown,
            "rolls": [r.to_dict() for r in self.rolls],
            "variables": dict(self.variables),
        }
        if self.successes is not None:
            data["successes"] = self.successes
        if self.target is not None:
            data["target"] = self.target.to_dict()
        for key in ("hope", "fear", "tag", "error"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data
