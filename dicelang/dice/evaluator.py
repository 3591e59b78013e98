"""AST evaluator.

Walks a parsed expression, draws dice from an injected random source and
produces a ``DiceResult``.

Each dice term resolves in a fixed order, whatever order its modifiers were
written in:

1. Roll the initial dice
2. Reroll (``r``, ``ro``)
3. Explode (``!``)
4. Keep/drop (``kh``, ``kl``, ``dh``, ``dl``), in source order
5. Count successes, or sum the active dice
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from dicelang.dice.breakdown import format_breakdown
from dicelang.dice.errors import ArithmeticHazard, UndefinedVariable
from dicelang.dice.random_source import RandomSource, system_random
from dicelang.dice.types import (
    FATE,
    BinaryOp,
    DiceResult,
    DiceTerm,
    DieRoll,
    Drop,
    Explode,
    Keep,
    Node,
    NumberLiteral,
    Operand,
    Reroll,
    Sides,
    SpecialTerm,
    SuccessCount,
    TargetCheck,
    TargetOutcome,
    VariableRef,
)


logger = logging.getLogger(__name__)

DEFAULT_EXPLODE_LIMIT = 100
DEFAULT_REROLL_LIMIT = 100
DEFAULT_MAX_DICE = 1000
DEFAULT_MAX_SIDES = 10000

HOPE_FEAR_SIDES = 12
POOL_SIDES = 6


@dataclass
class _Outcome:
    """Intermediate result of evaluating one node."""

    value: int
    rolls: list[DieRoll] = field(default_factory=list)
    successes: int | None = None
    hope: int | None = None
    fear: int | None = None
    tag: str | None = None
    target: TargetOutcome | None = None


class DiceEvaluator:
    """Evaluates dice ASTs against a variable table.

    Args:
        variables: Variable values; names are matched case-insensitively.
        rng: Source of die draws. Defaults to a fresh OS-backed source.
        explode_limit: Max explosions per dice term (unless the modifier sets one).
        reroll_limit: Max continuous-reroll draws per dice term.
        max_dice: Largest dice count allowed in one term.
        max_sides: Largest die size allowed.
    """

    def __init__(
        self,
        variables: Mapping[str, int] | None = None,
        rng: RandomSource | None = None,
        *,
        explode_limit: int = DEFAULT_EXPLODE_LIMIT,
        reroll_limit: int = DEFAULT_REROLL_LIMIT,
        max_dice: int = DEFAULT_MAX_DICE,
        max_sides: int = DEFAULT_MAX_SIDES,
    ) -> None:
        self._variables = {name.upper(): value for name, value in (variables or {}).items()}
        self._rng = rng if rng is not None else system_random()
        self._explode_limit = explode_limit
        self._reroll_limit = reroll_limit
        self._max_dice = max_dice
        self._max_sides = max_sides
        self._used_variables: dict[str, int] = {}

    def evaluate(self, ast: Node, expression: str) -> DiceResult:
        """Evaluate an AST.

        Args:
            ast: Root node from the parser.
            expression: Original expression text, copied into the result.

        Returns:
            DiceResult with total, rolls, breakdown and extras.

        Raises:
            UndefinedVariable: A referenced variable has no value.
            ArithmeticHazard: Division by zero, an out-of-range dice term, or
                an operator chain too long to walk.
        """
        self._used_variables = {}
        try:
            outcome = self._evaluate_node(ast)
        except RecursionError:
            raise ArithmeticHazard("Expression is too long to evaluate") from None

        breakdown = format_breakdown(
            outcome.rolls,
            outcome.value,
            successes=outcome.successes,
            tag=outcome.tag,
            target=outcome.target,
        )

        return DiceResult(
            expression=expression,
            total=outcome.value,
            breakdown=breakdown,
            rolls=outcome.rolls,
            successes=outcome.successes,
            target=outcome.target,
            hope=outcome.hope,
            fear=outcome.fear,
            tag=outcome.tag,
            variables=dict(self._used_variables),
        )

    # -------------------------------------------------------------------------
    # Primitives
    # -------------------------------------------------------------------------

    def _resolve(self, value: Operand) -> int:
        if isinstance(value, VariableRef):
            if value.name not in self._variables:
                raise UndefinedVariable(value.name)
            resolved = self._variables[value.name]
            self._used_variables[value.name] = resolved
            return resolved
        return value

    def _draw(self, sides: Sides) -> int:
        if sides == FATE:
            # One uniform 3-way draw mapped to -1, 0, +1
            return self._rng.randint(1, 3) - 2
        return self._rng.randint(1, sides)

    def _resolve_count(self, value: Operand, what: str, minimum: int = 1) -> int:
        count = self._resolve(value)
        if count < minimum or count > self._max_dice:
            raise ArithmeticHazard(
                f"{what} must be between {minimum} and {self._max_dice}, got {count}"
            )
        return count

    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------

    def _evaluate_node(self, node: Node) -> _Outcome:
        match node:
            case NumberLiteral(value=value):
                return _Outcome(value=value)
            case VariableRef():
                return _Outcome(value=self._resolve(node))
            case DiceTerm():
                return self._evaluate_dice(node)
            case SpecialTerm():
                return self._evaluate_special(node)
            case BinaryOp():
                return self._evaluate_binary(node)
            case TargetCheck():
                return self._evaluate_target(node)
        raise TypeError(f"Unknown node type: {type(node).__name__}")

    def _evaluate_binary(self, node: BinaryOp) -> _Outcome:
        left = self._evaluate_node(node.left)
        right = self._evaluate_node(node.right)

        match node.operator:
            case "+":
                value = left.value + right.value
            case "-":
                value = left.value - right.value
            case "*":
                value = left.value * right.value
            case "/":
                if right.value == 0:
                    raise ArithmeticHazard("Division by zero")
                value = left.value // right.value
            case _:
                raise ArithmeticHazard(f"Unknown operator '{node.operator}'")

        successes = None
        if left.successes is not None or right.successes is not None:
            successes = (left.successes or 0) + (right.successes or 0)

        # Hope/Fear extras come from the last such term
        special = right if right.tag is not None else left
        return _Outcome(
            value=value,
            rolls=left.rolls + right.rolls,
            successes=successes,
            hope=special.hope,
            fear=special.fear,
            tag=special.tag,
            target=right.target or left.target,
        )

    def _evaluate_target(self, node: TargetCheck) -> _Outcome:
        inner = self._evaluate_node(node.expression)
        threshold = self._resolve(node.threshold)
        inner.target = TargetOutcome(
            operator=node.operator,
            threshold=threshold,
            passed=node.operator.test(inner.value, threshold),
        )
        return inner

    def _evaluate_special(self, node: SpecialTerm) -> _Outcome:
        advantages = self._resolve_count(node.advantage_count, "Advantage dice", minimum=0)
        disadvantages = self._resolve_count(
            node.disadvantage_count, "Disadvantage dice", minimum=0
        )
        if node.modifiers:
            logger.warning("Ignoring %d modifier(s) on Hope/Fear roll", len(node.modifiers))

        hope = self._draw(HOPE_FEAR_SIDES)
        fear = self._draw(HOPE_FEAR_SIDES)
        rolls = [
            DieRoll(sides=HOPE_FEAR_SIDES, result=hope, role="hope"),
            DieRoll(sides=HOPE_FEAR_SIDES, result=fear, role="fear"),
        ]

        advantage_rolls = [
            DieRoll(sides=POOL_SIDES, result=self._draw(POOL_SIDES), role="advantage")
            for _ in range(advantages)
        ]
        disadvantage_rolls = [
            DieRoll(sides=POOL_SIDES, result=self._draw(POOL_SIDES), role="disadvantage")
            for _ in range(disadvantages)
        ]
        best_advantage = max((r.result for r in advantage_rolls), default=0)
        best_disadvantage = max((r.result for r in disadvantage_rolls), default=0)

        if hope == fear:
            tag = "Critical"
        elif hope > fear:
            tag = "Hope"
        else:
            tag = "Fear"

        return _Outcome(
            value=hope + fear + best_advantage - best_disadvantage,
            rolls=rolls + advantage_rolls + disadvantage_rolls,
            hope=hope,
            fear=fear,
            tag=tag,
        )

    def _evaluate_dice(self, node: DiceTerm) -> _Outcome:
        count = self._resolve_count(node.count, "Dice count")
        if node.sides == FATE:
            sides: Sides = FATE
        else:
            sides = self._resolve(node.sides)
            if sides < 1 or sides > self._max_sides:
                raise ArithmeticHazard(
                    f"Dice sides must be between 1 and {self._max_sides}, got {sides}"
                )

        rolls = [DieRoll(sides=sides, result=self._draw(sides)) for _ in range(count)]

        rerolls: list[Reroll] = []
        explodes: list[Explode] = []
        selections: list[Keep | Drop] = []
        success_checks: list[SuccessCount] = []
        for modifier in node.modifiers:
            match modifier:
                case Reroll():
                    rerolls.append(modifier)
                case Explode():
                    explodes.append(modifier)
                case Keep() | Drop():
                    selections.append(modifier)
                case SuccessCount():
                    success_checks.append(modifier)

        self._apply_rerolls(rolls, rerolls, sides)
        self._apply_explosions(rolls, explodes, sides)
        for selection in selections:
            self._apply_selection(rolls, selection)

        successes = None
        if success_checks:
            successes = self._count_successes(rolls, success_checks)
            value = successes
        else:
            value = sum(r.result for r in rolls if r.is_active)

        logger.debug(
            "Resolved %sd%s with %d modifier(s): %s -> %d",
            count,
            sides,
            len(node.modifiers),
            [r.result for r in rolls],
            value,
        )
        return _Outcome(value=value, rolls=rolls, successes=successes)

    # -------------------------------------------------------------------------
    # Modifier steps
    # -------------------------------------------------------------------------

    def _apply_rerolls(self, rolls: list[DieRoll], modifiers: list[Reroll], sides: Sides) -> None:
        draws = 0
        for modifier in modifiers:
            threshold = self._resolve(modifier.threshold)
            # Replacement dice are not rerolled again by the same modifier
            for roll in list(rolls):
                if not roll.is_active or not modifier.operator.test(roll.result, threshold):
                    continue
                roll.rerolled = True
                new_result = self._draw(sides)

                if modifier.mode == "continuous":
                    while modifier.operator.test(new_result, threshold):
                        if draws >= self._reroll_limit:
                            logger.warning("Reroll limit of %d reached", self._reroll_limit)
                            break
                        rolls.append(DieRoll(sides=sides, result=new_result, rerolled=True))
                        new_result = self._draw(sides)
                        draws += 1

                rolls.append(DieRoll(sides=sides, result=new_result))

    def _apply_explosions(
        self, rolls: list[DieRoll], modifiers: list[Explode], sides: Sides
    ) -> None:
        explosions = 0
        max_face = 1 if sides == FATE else sides
        for modifier in modifiers:
            threshold = (
                max_face if modifier.threshold is None else self._resolve(modifier.threshold)
            )
            limit = self._explode_limit if modifier.limit is None else modifier.limit

            # New dice are appended to the list being scanned, so chains continue
            index = 0
            while index < len(rolls) and explosions < limit:
                roll = rolls[index]
                if (
                    roll.is_active
                    and not roll.exploded
                    and modifier.operator.test(roll.result, threshold)
                ):
                    roll.exploded = True
                    rolls.append(DieRoll(sides=sides, result=self._draw(sides)))
                    explosions += 1
                index += 1

            if explosions >= limit and index < len(rolls):
                logger.warning("Explosion limit of %d reached", limit)

    def _apply_selection(self, rolls: list[DieRoll], modifier: Keep | Drop) -> None:
        count = self._resolve(modifier.count)
        if count < 0:
            raise ArithmeticHazard(f"Keep/drop count cannot be negative, got {count}")

        active = [r for r in rolls if r.is_active]
        ordered = sorted(active, key=lambda r: r.result, reverse=modifier.variant == "high")

        match modifier:
            case Keep():
                excluded = ordered[count:]
            case Drop():
                excluded = ordered[:count]
        for roll in excluded:
            roll.dropped = True

    def _count_successes(self, rolls: list[DieRoll], modifiers: list[SuccessCount]) -> int:
        checks = [(m.operator, self._resolve(m.threshold)) for m in modifiers]
        successes = 0
        for roll in rolls:
            if roll.is_active and any(op.test(roll.result, target) for op, target in checks):
                roll.success = True
                successes += 1
        return successes
