"""Tests for dice CLI commands."""

import json
from unittest.mock import patch

import pytest
import typer
from typer.testing import CliRunner

from dicelang.cli.main import app, parse_variable_options
from tests.factories import ScriptedRandom


runner = CliRunner()


@pytest.fixture
def scripted_dice():
    """Patch the default random source with scripted draws.

    Usage:
        scripted_dice(3, 4)
    """
    patchers = []

    def _patch(*values: int) -> None:
        patcher = patch(
            "dicelang.dice.evaluator.system_random",
            return_value=ScriptedRandom(values),
        )
        patcher.start()
        patchers.append(patcher)

    yield _patch

    for patcher in patchers:
        patcher.stop()


class TestParseVariableOptions:
    """Tests for parse_variable_options."""

    def test_parses_pairs(self):
        """Test NAME=VALUE pairs are uppercased."""
        assert parse_variable_options(["str=3", "@Dex=-1"]) == {"STR": 3, "DEX": -1}

    def test_none(self):
        """Test no options gives an empty table."""
        assert parse_variable_options(None) == {}

    def test_missing_value(self):
        """Test an item without = is rejected."""
        with pytest.raises(typer.BadParameter, match="expected NAME=VALUE"):
            parse_variable_options(["STR"])

    def test_non_integer(self):
        """Test a non-integer value is rejected."""
        with pytest.raises(typer.BadParameter, match="must be an integer"):
            parse_variable_options(["STR=high"])


class TestRollCommand:
    """Tests for 'dicelang roll'."""

    def test_roll_json(self, scripted_dice):
        """Test JSON output of a roll."""
        scripted_dice(3, 4)
        result = runner.invoke(app, ["roll", "2d6", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["total"] == 7
        assert data["breakdown"] == "2d6 (3, 4) = 7"
        assert data["rolls"] == [{"sides": 6, "result": 3}, {"sides": 6, "result": 4}]

    def test_roll_with_variables(self, scripted_dice):
        """Test --var values reach the evaluator."""
        scripted_dice(2)
        result = runner.invoke(app, ["roll", "@STR+1d4", "--var", "STR=3", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["total"] == 5
        assert data["variables"] == {"STR": 3}

    def test_roll_panel(self, scripted_dice):
        """Test the default rich output."""
        scripted_dice(3, 4)
        result = runner.invoke(app, ["roll", "2d6"])
        assert result.exit_code == 0
        assert "2d6 (3, 4) = 7" in result.output

    def test_roll_hope_fear(self, scripted_dice):
        """Test a Hope/Fear roll shows its tag."""
        scripted_dice(9, 3)
        result = runner.invoke(app, ["roll", "dh", "--quiet"])
        assert result.exit_code == 0
        assert "[Hope]" in result.output

    def test_roll_error_exit_code(self):
        """Test a failing expression exits with 1."""
        result = runner.invoke(app, ["roll", "1d20+@DEX"])
        assert result.exit_code == 1
        assert "Variable @DEX is not defined" in result.output

    def test_roll_error_json(self):
        """Test a failing expression as JSON."""
        result = runner.invoke(app, ["roll", "1/0", "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["error"] == "Division by zero"
        assert data["total"] == 0

    def test_bad_variable_option(self):
        """Test a malformed --var is a usage error."""
        result = runner.invoke(app, ["roll", "2d6", "--var", "STR"])
        assert result.exit_code == 2


class TestValidateCommand:
    """Tests for 'dicelang validate'."""

    def test_valid(self):
        """Test a valid expression."""
        result = runner.invoke(app, ["validate", "4d6kh3"])
        assert result.exit_code == 0
        assert "Valid expression: 4d6kh3" in result.output

    def test_invalid(self):
        """Test a malformed expression."""
        result = runner.invoke(app, ["validate", "(1+2"])
        assert result.exit_code == 1
        assert "Expected RPAREN" in result.output

    def test_missing_variable(self):
        """Test variables are checked when given."""
        result = runner.invoke(app, ["validate", "1d20+@DEX", "--var", "STR=1"])
        assert result.exit_code == 1
        assert "@DEX" in result.output


class TestInfoCommands:
    """Tests for vars, notation and examples."""

    def test_vars(self):
        """Test referenced variables are listed."""
        result = runner.invoke(app, ["vars", "1d20+@str+@PROF"])
        assert result.exit_code == 0
        assert "@STR" in result.output
        assert "@PROF" in result.output

    def test_vars_none(self):
        """Test an expression without variables."""
        result = runner.invoke(app, ["vars", "2d6"])
        assert "No variables referenced" in result.output

    def test_notation(self):
        """Test the notation reference is shown."""
        result = runner.invoke(app, ["notation"])
        assert result.exit_code == 0
        assert "Dice Notation Help:" in result.output

    def test_examples(self):
        """Test example expressions are shown."""
        result = runner.invoke(app, ["examples"])
        assert result.exit_code == 0
        assert "4d6kh3" in result.output
