"""Human-readable roll breakdowns.

The breakdown depends only on the roll list and the result extras, so the
same rolls always produce the same text.

Examples:
    ``2d6 (3, 4) = 7``
    ``3d6 (4, 5, 6) drop(1) = 15``
    ``4d6 (5✓, 2, 6✓, 3) = 2 successes``
    ``4d6 (6!, 2, 4, 3) = 15``
    ``2d12: Hope(7) + Fear(7) = 14 [Critical]``
    ``1d20 (10) = 15 vs >=15 → PASS``
"""

from dicelang.dice.types import FATE, DieRoll, TargetOutcome


_HOPE_FEAR_ROLES = ("hope", "fear")
_FATE_FACES = {-1: "-", 0: "0", 1: "+"}


def _group_key(roll: DieRoll) -> str:
    if roll.role in _HOPE_FEAR_ROLES:
        return "hope_fear"
    if roll.role:
        return roll.role
    return f"d{roll.sides}"


def _face(roll: DieRoll) -> str:
    if roll.sides == FATE:
        return _FATE_FACES.get(roll.result, str(roll.result))
    return str(roll.result)


def _annotated_face(roll: DieRoll) -> str:
    text = _face(roll)
    if roll.exploded:
        text += "!"
    if roll.success:
        text += "✓"
    return text


def _format_dice_group(key: str, rolls: list[DieRoll]) -> str:
    active = [r for r in rolls if r.is_active]
    dropped = [r for r in rolls if r.dropped]
    rerolled = [r for r in rolls if r.rerolled]

    part = f"{len(active)}{key}"
    if active:
        part += f" ({', '.join(_annotated_face(r) for r in active)})"
    if dropped:
        part += f" drop({', '.join(_face(r) for r in dropped)})"
    if rerolled:
        part += f" reroll({', '.join(_face(r) for r in rerolled)})"
    return part


def _format_hope_fear(rolls: list[DieRoll]) -> list[str]:
    hopes = [r.result for r in rolls if r.role == "hope"]
    fears = [r.result for r in rolls if r.role == "fear"]
    return [f"2d12: Hope({hope}) + Fear({fear})" for hope, fear in zip(hopes, fears)]


def _format_pool(role: str, rolls: list[DieRoll]) -> str:
    faces = ", ".join(str(r.result) for r in rolls)
    highest = max(r.result for r in rolls)
    sign = "-" if role == "disadvantage" else "+"
    return f"{len(rolls)}d6 {role} ({faces}) → {sign}{highest}"


def format_breakdown(
    rolls: list[DieRoll],
    total: int,
    *,
    successes: int | None = None,
    tag: str | None = None,
    target: TargetOutcome | None = None,
) -> str:
    """Format a roll set and its outcome.

    Dice are grouped by type in first-seen order. Active faces are listed
    with ``!`` for exploded and ``✓`` for success dice; dropped and rerolled
    dice follow in ``drop(...)`` and ``reroll(...)`` suffixes.

    Args:
        rolls: Every die drawn.
        total: Numeric total of the expression.
        successes: Success count, shown instead of the total when set.
        tag: Hope/Fear classification.
        target: Target-check outcome.

    Returns:
        The breakdown string.
    """
    groups: dict[str, list[DieRoll]] = {}
    for roll in rolls:
        groups.setdefault(_group_key(roll), []).append(roll)

    parts: list[str] = []
    for key, group in groups.items():
        if key == "hope_fear":
            parts.extend(_format_hope_fear(group))
        elif key in ("advantage", "disadvantage"):
            parts.append(_format_pool(key, group))
        else:
            parts.append(_format_dice_group(key, group))

    text = " + ".join(parts)
    if successes is not None:
        text += f" = {successes} successes"
    else:
        text += f" = {total}"
    text = text.lstrip()

    if tag:
        text += f" [{tag}]"
    if target is not None:
        text += f" vs {target.operator.value}{target.threshold} → {'PASS' if target.passed else 'FAIL'}"
    return text
