"""Dice notation lexer.

Turns notation such as ``4d6kh3+@STR`` or ``dh a2 d1 t>=@TN`` into tokens.
Input is lowercased and stripped of all whitespace first, so token positions
are offsets into that normalized string. The only lasting effect of
whitespace is that it ends a variable name.

The letter ``d`` is context-sensitive:
- ``dh``/``dl`` right after a number, variable or bare ``!`` are drop
  modifiers (``4d6dl1``, ``4d6!dl1``)
- otherwise ``dh`` opens a Hope/Fear roll
- ``df`` is the Fate marker
- any other ``d`` separates dice count from sides
"""

import logging
import re

from dicelang.dice.errors import LexAnomaly
from dicelang.dice.types import Token, TokenType


logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_NUMBER = re.compile(r"[0-9]+")
_IDENTIFIER = re.compile(r"[a-z0-9_]*")

_DIGITS = "0123456789"
_COMPARISON_CHARS = "<>="
_OPERATORS = "+-*/"

# Token types after which "dh"/"dl" are read as drop modifiers.
_OPERAND_TYPES = (TokenType.NUMBER, TokenType.VARIABLE)

# Modifiers that may end without an operand ("4d6!dl1").
_BARE_MODIFIERS = ("!",)


def normalize(text: str) -> str:
    """Lowercase the text and remove all whitespace."""
    return _WHITESPACE.sub("", text.lower())


def _word_breaks(text: str) -> set[int]:
    """Offsets in the normalized text where whitespace was removed."""
    breaks: set[int] = set()
    removed = 0
    for match in _WHITESPACE.finditer(text.strip()):
        removed += match.end() - match.start()
        breaks.add(match.end() - removed)
    return breaks


def tokenize(text: str, strict: bool = False) -> list[Token]:
    """Tokenize dice notation.

    Args:
        text: Raw notation; normalized before scanning.
        strict: Raise on unrecognized characters instead of skipping them.

    Returns:
        Tokens in source order, always terminated by an EOF token.

    Raises:
        LexAnomaly: Only in strict mode, for an unrecognized character.

    Examples:
        >>> [t.value for t in tokenize("4d6kh3")]
        ['4', 'd', '6', 'kh', '3', '']
    """
    source = normalize(text)
    breaks = _word_breaks(text)
    tokens: list[Token] = []
    pos = 0
    length = len(source)

    def emit(token_type: TokenType, value: str, start: int) -> None:
        tokens.append(Token(type=token_type, value=value, position=start))

    while pos < length:
        char = source[pos]
        following = source[pos + 1] if pos + 1 < length else ""
        start = pos

        if char in _DIGITS:
            match = _NUMBER.match(source, pos)
            emit(TokenType.NUMBER, match.group(), start)
            pos = match.end()

        elif char == "@":
            # Whitespace in the raw text ends a name: "dh a@adv d@dis"
            end = _IDENTIFIER.match(source, pos + 1).end()
            end = min((b for b in breaks if pos < b < end), default=end)
            emit(TokenType.VARIABLE, "@" + source[pos + 1 : end], start)
            pos = end

        elif char == "d":
            previous = tokens[-1] if tokens else None
            after_operand = previous is not None and (
                previous.type in _OPERAND_TYPES
                or (previous.type == TokenType.MODIFIER and previous.value in _BARE_MODIFIERS)
            )
            if following in ("h", "l") and after_operand:
                emit(TokenType.MODIFIER, char + following, start)
                pos += 2
            elif following == "h":
                emit(TokenType.HOPE_FEAR, "dh", start)
                pos += 2
            elif following == "f":
                emit(TokenType.FATE, "df", start)
                pos += 2
            else:
                emit(TokenType.DICE, "d", start)
                pos += 1

        elif char == "a" and following and following in _DIGITS + "@":
            emit(TokenType.ADVANTAGE, "a", start)
            pos += 1

        elif char == "t" and following and following in _COMPARISON_CHARS:
            emit(TokenType.TARGET, "t", start)
            pos += 1

        elif char in _OPERATORS:
            emit(TokenType.OPERATOR, char, start)
            pos += 1

        elif char == "(":
            emit(TokenType.LPAREN, char, start)
            pos += 1

        elif char == ")":
            emit(TokenType.RPAREN, char, start)
            pos += 1

        elif char in _COMPARISON_CHARS:
            if char in "<>" and following == "=":
                emit(TokenType.COMPARISON, char + following, start)
                pos += 2
            else:
                emit(TokenType.COMPARISON, char, start)
                pos += 1

        elif char == "k":
            if following in ("h", "l"):
                emit(TokenType.MODIFIER, char + following, start)
                pos += 2
            else:
                emit(TokenType.MODIFIER, "k", start)
                pos += 1

        elif char == "r":
            if following == "o":
                emit(TokenType.MODIFIER, "ro", start)
                pos += 2
            else:
                emit(TokenType.MODIFIER, "r", start)
                pos += 1

        elif char == "!":
            emit(TokenType.MODIFIER, "!", start)
            pos += 1

        else:
            if strict:
                raise LexAnomaly(char, start)
            logger.debug("Skipping unrecognized character %r at position %d", char, start)
            pos += 1

    emit(TokenType.EOF, "", length)
    return tokens
