"""Tests for dice notation lexer."""

import pytest

from dicelang.dice.errors import LexAnomaly
from dicelang.dice.lexer import normalize, tokenize
from dicelang.dice.types import TokenType as T


def types(text: str) -> list[T]:
    return [token.type for token in tokenize(text)]


def values(text: str) -> list[str]:
    return [token.value for token in tokenize(text)]


class TestNormalize:
    """Tests for input normalization."""

    def test_lowercases_and_strips_whitespace(self):
        """Test that case and whitespace are removed."""
        assert normalize(" 1D20 + 5\tT>=15 ") == "1d20+5t>=15"


class TestTokenizeBasic:
    """Tests for basic dice tokens."""

    def test_simple_dice(self):
        """Test NdS tokenizes to number, dice, number."""
        assert types("2d6") == [T.NUMBER, T.DICE, T.NUMBER, T.EOF]
        assert values("2d6") == ["2", "d", "6", ""]

    def test_multi_digit_numbers(self):
        """Test that digit runs form one token."""
        assert values("10d100") == ["10", "d", "100", ""]

    def test_operators_and_parens(self):
        """Test arithmetic tokens."""
        assert types("(2d6+1)*2/3-1") == [
            T.LPAREN,
            T.NUMBER,
            T.DICE,
            T.NUMBER,
            T.OPERATOR,
            T.NUMBER,
            T.RPAREN,
            T.OPERATOR,
            T.NUMBER,
            T.OPERATOR,
            T.NUMBER,
            T.OPERATOR,
            T.NUMBER,
            T.EOF,
        ]

    def test_eof_position_is_normalized_length(self):
        """Test EOF sits at the end of the normalized input."""
        tokens = tokenize("1d20 + 5")
        assert tokens[-1].type == T.EOF
        assert tokens[-1].position == len("1d20+5")

    def test_positions_are_offsets_into_normalized_text(self):
        """Test token positions ignore removed whitespace."""
        tokens = tokenize("1d20 + 5")
        assert [t.position for t in tokens] == [0, 1, 2, 4, 5, 6]

    def test_empty_input(self):
        """Test empty input yields only EOF."""
        assert types("") == [T.EOF]


class TestTokenizeModifiers:
    """Tests for modifier and comparison tokens."""

    def test_keep_highest(self):
        """Test kh is one modifier token."""
        assert values("4d6kh3") == ["4", "d", "6", "kh", "3", ""]
        assert types("4d6kh3")[3] == T.MODIFIER

    def test_keep_lowest(self):
        """Test kl is one modifier token."""
        assert values("2d20kl1")[3] == "kl"

    def test_bare_keep(self):
        """Test bare k is a modifier token."""
        assert values("4d6k3")[3] == "k"

    def test_drop_after_sides_is_modifier(self):
        """Test dh/dl after a number are drop modifiers."""
        assert types("6d6dh1") == [T.NUMBER, T.DICE, T.NUMBER, T.MODIFIER, T.NUMBER, T.EOF]
        assert values("4d6dl1")[3] == "dl"

    def test_drop_after_variable_sides_is_modifier(self):
        """Test dh after variable sides is a drop modifier."""
        tokens = tokenize("4d@size dh1")
        assert tokens[3].type == T.MODIFIER
        assert tokens[3].value == "dh"

    def test_drop_after_bare_explode_is_modifier(self):
        """Test dl/dh following a bare ! are drop modifiers."""
        assert types("4d6!dl1") == [
            T.NUMBER,
            T.DICE,
            T.NUMBER,
            T.MODIFIER,
            T.MODIFIER,
            T.NUMBER,
            T.EOF,
        ]
        assert values("4d6!dh1")[4] == "dh"

    def test_explode(self):
        """Test ! is a modifier token."""
        assert values("3d6!") == ["3", "d", "6", "!", ""]

    def test_explode_with_comparison(self):
        """Test !>=N yields modifier, comparison, number."""
        assert types("2d10!>=8")[3:] == [T.MODIFIER, T.COMPARISON, T.NUMBER, T.EOF]

    def test_reroll_once_and_continuous(self):
        """Test r and ro are distinct modifier tokens."""
        assert values("3d6r1")[3] == "r"
        assert values("3d6ro<=2")[3:6] == ["ro", "<=", "2"]

    @pytest.mark.parametrize("comparison", [">=", ">", "=", "<=", "<"])
    def test_comparisons(self, comparison):
        """Test every comparison operator is read as one token."""
        tokens = tokenize(f"6d6{comparison}4")
        assert tokens[3].type == T.COMPARISON
        assert tokens[3].value == comparison

    def test_comparison_read_two_chars_at_most(self):
        """Test == splits into two comparison tokens."""
        assert values("6d6==4")[3:5] == ["=", "="]


class TestTokenizeSpecial:
    """Tests for Hope/Fear, Fate, target and variable tokens."""

    def test_hope_fear_marker(self):
        """Test dh at the start opens a Hope/Fear roll."""
        assert types("dh") == [T.HOPE_FEAR, T.EOF]

    def test_hope_fear_with_pools(self):
        """Test advantage and disadvantage counts."""
        tokens = tokenize("dh a2 d1")
        assert [t.type for t in tokens] == [
            T.HOPE_FEAR,
            T.ADVANTAGE,
            T.NUMBER,
            T.DICE,
            T.NUMBER,
            T.EOF,
        ]
        assert [t.position for t in tokens] == [0, 2, 3, 4, 5, 6]

    def test_hope_fear_after_operator(self):
        """Test dh after an operator is the Hope/Fear marker."""
        assert types("2+dh") == [T.NUMBER, T.OPERATOR, T.HOPE_FEAR, T.EOF]

    def test_advantage_needs_digit_or_variable(self):
        """Test a is only a keyword before a digit or @."""
        assert types("dha@adv")[1:3] == [T.ADVANTAGE, T.VARIABLE]
        assert types("abc") == [T.EOF]

    def test_fate_marker(self):
        """Test dF is the Fate marker, case-insensitively."""
        assert types("4dF") == [T.NUMBER, T.FATE, T.EOF]
        assert values("4DF")[1] == "df"

    def test_target(self):
        """Test t before a comparison opens a target clause."""
        assert types("1d20+5 t>=15") == [
            T.NUMBER,
            T.DICE,
            T.NUMBER,
            T.OPERATOR,
            T.NUMBER,
            T.TARGET,
            T.COMPARISON,
            T.NUMBER,
            T.EOF,
        ]

    def test_t_without_comparison_is_skipped(self):
        """Test a lone t is not a keyword."""
        assert types("t5") == [T.NUMBER, T.EOF]

    def test_variable(self):
        """Test @ plus identifier is one variable token."""
        tokens = tokenize("@Str_2+1")
        assert tokens[0].type == T.VARIABLE
        assert tokens[0].value == "@str_2"

    def test_whitespace_ends_variable_name(self):
        """Test variables separated by spaces stay separate."""
        tokens = tokenize("dh a@ADV d@DIS")
        assert [(t.type, t.value) for t in tokens] == [
            (T.HOPE_FEAR, "dh"),
            (T.ADVANTAGE, "a"),
            (T.VARIABLE, "@adv"),
            (T.DICE, "d"),
            (T.VARIABLE, "@dis"),
            (T.EOF, ""),
        ]

    def test_variable_without_whitespace_runs_on(self):
        """Test that without a separator the identifier keeps going."""
        assert values("@advd6")[0] == "@advd6"


class TestTokenizeUnknownCharacters:
    """Tests for unrecognized input."""

    def test_unknown_characters_skipped(self):
        """Test unrecognized characters are dropped silently."""
        tokens = tokenize("2d6$3")
        assert [t.value for t in tokens] == ["2", "d", "6", "3", ""]
        assert tokens[3].position == 4

    def test_strict_mode_raises(self):
        """Test strict mode reports the offending character."""
        with pytest.raises(LexAnomaly) as exc_info:
            tokenize("2d6 $ 3", strict=True)
        assert exc_info.value.char == "$"
        assert exc_info.value.position == 3
