"""Tests for CLI display functions."""

from unittest.mock import patch

import pytest
from rich.console import Console
from rich.text import Text

from dicelang.cli.display import (
    _die_label,
    _die_text,
    _headline,
    _status,
    display_examples,
    display_roll_result,
)
from dicelang.dice.roller import error_result
from dicelang.dice.types import FATE, Comparison, DiceResult, DieRoll, TargetOutcome


@pytest.fixture
def recorded_console():
    """Replace the shared console with one that records output."""
    console = Console(record=True, width=100)
    with patch("dicelang.cli.display.console", console):
        yield console


class TestDieText:
    """Tests for _die_text."""

    def test_returns_text_object(self):
        """Verify function returns Rich Text object."""
        assert isinstance(_die_text(DieRoll(sides=6, result=3)), Text)

    def test_plain_face(self):
        """Verify an unflagged die shows just its face."""
        assert _die_text(DieRoll(sides=6, result=3)).plain == "3"

    def test_exploded_marker(self):
        """Verify exploded dice get a ! marker."""
        assert _die_text(DieRoll(sides=6, result=6, exploded=True)).plain == "6!"

    def test_success_marker(self):
        """Verify success dice get a check mark."""
        assert _die_text(DieRoll(sides=6, result=5, success=True)).plain == "5✓"

    def test_dropped_is_struck(self):
        """Verify dropped dice are styled as struck through."""
        text = _die_text(DieRoll(sides=6, result=1, dropped=True))
        assert any("strike" in str(span.style) for span in text.spans)


class TestDieLabelAndStatus:
    """Tests for _die_label and _status."""

    def test_label_for_sides(self):
        """Verify regular and Fate labels."""
        assert _die_label(DieRoll(sides=20, result=1)) == "d20"
        assert _die_label(DieRoll(sides=FATE, result=0)) == "dF"

    def test_label_for_role(self):
        """Verify Hope/Fear dice are labelled by role."""
        assert _die_label(DieRoll(sides=12, result=7, role="hope")) == "Hope"

    def test_status_lists_flags(self):
        """Verify status joins set flags."""
        roll = DieRoll(sides=6, result=6, exploded=True, dropped=True)
        assert _status(roll) == "exploded, dropped"
        assert _status(DieRoll(sides=6, result=2)) == ""


class TestHeadline:
    """Tests for _headline."""

    def test_total(self):
        """Verify a plain total."""
        result = DiceResult(expression="2d6", total=7, breakdown="2d6 (3, 4) = 7")
        assert _headline(result).plain == "7"

    def test_successes(self):
        """Verify success counts are shown first."""
        result = DiceResult(expression="6d6>=5", total=3, breakdown="", successes=3)
        assert _headline(result).plain == "3 successes  (total 3)"

    def test_tag_and_target(self):
        """Verify tag and target verdict."""
        result = DiceResult(
            expression="dh t>=15",
            total=12,
            breakdown="",
            tag="Fear",
            target=TargetOutcome(operator=Comparison.GE, threshold=15, passed=False),
        )
        assert _headline(result).plain == "12  [Fear]  vs >=15 → FAIL"


class TestDisplayRollResult:
    """Tests for display_roll_result."""

    def test_shows_breakdown_and_table(self, recorded_console):
        """Verify the panel and dice table are printed."""
        result = DiceResult(
            expression="4d6kh3",
            total=14,
            breakdown="3d6 (5, 3, 6) drop(1) = 14",
            rolls=[
                DieRoll(sides=6, result=5),
                DieRoll(sides=6, result=3),
                DieRoll(sides=6, result=6),
                DieRoll(sides=6, result=1, dropped=True),
            ],
        )
        display_roll_result(result)
        output = recorded_console.export_text()
        assert "3d6 (5, 3, 6) drop(1) = 14" in output
        assert "dropped" in output

    def test_quiet_hides_table(self, recorded_console):
        """Verify show_dice=False omits the table."""
        result = DiceResult(
            expression="1d20",
            total=12,
            breakdown="1d20 (12) = 12",
            rolls=[DieRoll(sides=20, result=12)],
        )
        display_roll_result(result, show_dice=False)
        assert "Status" not in recorded_console.export_text()

    def test_variables_listed(self, recorded_console):
        """Verify consulted variables are shown."""
        result = DiceResult(expression="@STR", total=3, breakdown="= 3", variables={"STR": 3})
        display_roll_result(result)
        assert "@STR=3" in recorded_console.export_text()

    def test_error(self, recorded_console):
        """Verify error results print the message."""
        display_roll_result(error_result("1/0", "Division by zero"))
        assert "Error: Division by zero" in recorded_console.export_text()


class TestDisplayExamples:
    """Tests for display_examples."""

    def test_categories(self, recorded_console):
        """Verify category names are title-cased."""
        display_examples({"hope_fear": ["dh a2"], "basic": ["2d6"]})
        output = recorded_console.export_text()
        assert "Hope/Fear" in output
        assert "dh a2" in output
