"""Dice notation parser.

Recursive descent over the lexer's tokens::

    target     := expression ( 't' comparison operand )?
    expression := term ( ('+'|'-') term )*
    term       := factor ( ('*'|'/') factor )*
    factor     := dice | atom
    dice       := 'dh' ('a' operand | 'd' operand)* modifiers
                | operand? 'd' operand modifiers
                | operand? 'df' modifiers
    atom       := number | variable | '(' expression ')'

A leading number is ambiguous between a constant and a dice count, so
``factor`` tries the dice production first and rewinds to ``atom`` when no
dice marker follows.
"""

import logging

from dicelang.dice.errors import ParseFailure
from dicelang.dice.lexer import tokenize
from dicelang.dice.types import (
    FATE,
    BinaryOp,
    Comparison,
    DiceTerm,
    Drop,
    Explode,
    Keep,
    Modifier,
    Node,
    NumberLiteral,
    Operand,
    Reroll,
    SpecialTerm,
    SuccessCount,
    TargetCheck,
    Token,
    TokenType,
    VariableRef,
)


logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 50
MAX_NUMBER_DIGITS = 100


class DiceParser:
    """Builds an AST from a token list.

    Args:
        tokens: Lexer output; an EOF token is appended if missing.
        max_depth: Deepest parenthesis nesting accepted.
    """

    def __init__(self, tokens: list[Token], max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if not tokens or tokens[-1].type != TokenType.EOF:
            end = tokens[-1].position + len(tokens[-1].value) if tokens else 0
            tokens = [*tokens, Token(TokenType.EOF, "", end)]
        self._tokens = tokens
        self._pos = 0
        self._depth = 0
        self._max_depth = max_depth

    # -------------------------------------------------------------------------
    # Cursor helpers
    # -------------------------------------------------------------------------

    def _current(self) -> Token:
        return self._tokens[min(self._pos, len(self._tokens) - 1)]

    def _advance(self) -> Token:
        token = self._current()
        if self._pos < len(self._tokens) - 1:
            self._pos += 1
        return token

    def _check(self, token_type: TokenType) -> bool:
        return self._current().type == token_type

    def _expect(self, token_type: TokenType) -> Token:
        token = self._current()
        if token.type != token_type:
            raise ParseFailure(
                f"Expected {token_type.value}, got {token.type.value} at position {token.position}",
                token.type.value,
                token.position,
            )
        return self._advance()

    def _number(self) -> int:
        token = self._expect(TokenType.NUMBER)
        if len(token.value) > MAX_NUMBER_DIGITS:
            raise ParseFailure(
                f"Number longer than {MAX_NUMBER_DIGITS} digits at position {token.position}",
                token.type.value,
                token.position,
            )
        return int(token.value)

    def _unexpected(self, token: Token) -> ParseFailure:
        return ParseFailure(
            f"Unexpected token {token.type.value} at position {token.position}",
            token.type.value,
            token.position,
        )

    # -------------------------------------------------------------------------
    # Grammar
    # -------------------------------------------------------------------------

    def parse(self) -> Node:
        """Parse the whole token list.

        Raises:
            ParseFailure: On any token that does not fit the grammar,
                including trailing tokens after a complete expression.
        """
        node = self._parse_target()
        if not self._check(TokenType.EOF):
            raise self._unexpected(self._current())
        return node

    def _parse_target(self) -> Node:
        expression = self._parse_expression()
        if self._check(TokenType.TARGET):
            self._advance()
            operator = Comparison(self._expect(TokenType.COMPARISON).value)
            threshold = self._parse_operand()
            return TargetCheck(expression=expression, operator=operator, threshold=threshold)
        return expression

    def _parse_expression(self) -> Node:
        left = self._parse_term()
        while self._check(TokenType.OPERATOR) and self._current().value in ("+", "-"):
            operator = self._advance().value
            right = self._parse_term()
            left = BinaryOp(operator=operator, left=left, right=right)
        return left

    def _parse_term(self) -> Node:
        left = self._parse_factor()
        while self._check(TokenType.OPERATOR) and self._current().value in ("*", "/"):
            operator = self._advance().value
            right = self._parse_factor()
            left = BinaryOp(operator=operator, left=left, right=right)
        return left

    def _parse_factor(self) -> Node:
        checkpoint = self._pos
        try:
            return self._parse_dice()
        except ParseFailure as exc:
            logger.debug("Not a dice term at token %d (%s), parsing as atom", checkpoint, exc)
            self._pos = checkpoint
            return self._parse_atom()

    def _parse_dice(self) -> Node:
        if self._check(TokenType.HOPE_FEAR):
            return self._parse_special()

        count: Operand = 1
        if self._check(TokenType.NUMBER) or self._check(TokenType.VARIABLE):
            count = self._parse_operand()

        if self._check(TokenType.DICE):
            self._advance()
            token = self._current()
            if token.type not in (TokenType.NUMBER, TokenType.VARIABLE):
                raise ParseFailure(
                    f"Expected number or variable for dice sides at position {token.position}",
                    token.type.value,
                    token.position,
                )
            sides = self._parse_operand()
            return DiceTerm(count=count, sides=sides, modifiers=self._parse_modifiers())

        if self._check(TokenType.FATE):
            self._advance()
            return DiceTerm(count=count, sides=FATE, modifiers=self._parse_modifiers())

        raise self._unexpected(self._current())

    def _parse_special(self) -> SpecialTerm:
        self._expect(TokenType.HOPE_FEAR)
        advantage: Operand = 0
        disadvantage: Operand = 0

        # a<N> and d<N> may come in any order
        while self._check(TokenType.ADVANTAGE) or self._check(TokenType.DICE):
            if self._advance().type == TokenType.ADVANTAGE:
                advantage = self._parse_operand()
            else:
                disadvantage = self._parse_operand()

        return SpecialTerm(
            advantage_count=advantage,
            disadvantage_count=disadvantage,
            modifiers=self._parse_modifiers(),
        )

    def _parse_modifiers(self) -> tuple[Modifier, ...]:
        modifiers: list[Modifier] = []

        while self._check(TokenType.MODIFIER) or self._check(TokenType.COMPARISON):
            token = self._advance()

            if token.type == TokenType.COMPARISON:
                # A bare comparison after a dice term counts successes
                modifiers.append(
                    SuccessCount(operator=Comparison(token.value), threshold=self._parse_operand())
                )
                continue

            match token.value:
                case "kh" | "k":
                    modifiers.append(Keep(variant="high", count=self._parse_operand()))
                case "kl":
                    modifiers.append(Keep(variant="low", count=self._parse_operand()))
                case "dh":
                    modifiers.append(Drop(variant="high", count=self._parse_operand()))
                case "dl":
                    modifiers.append(Drop(variant="low", count=self._parse_operand()))
                case "!":
                    if self._check(TokenType.COMPARISON):
                        operator = Comparison(self._advance().value)
                        modifiers.append(
                            Explode(operator=operator, threshold=self._parse_operand())
                        )
                    else:
                        modifiers.append(Explode())
                case "r" | "ro":
                    operator = Comparison.LE
                    if self._check(TokenType.COMPARISON):
                        operator = Comparison(self._advance().value)
                    modifiers.append(
                        Reroll(
                            mode="once" if token.value == "r" else "continuous",
                            operator=operator,
                            threshold=self._parse_operand(),
                        )
                    )
                case _:
                    raise self._unexpected(token)

        return tuple(modifiers)

    def _parse_operand(self) -> Operand:
        token = self._current()
        if token.type == TokenType.NUMBER:
            return self._number()
        if token.type == TokenType.VARIABLE:
            return self._parse_variable()
        raise ParseFailure(
            f"Expected number or variable, got {token.type.value} at position {token.position}",
            token.type.value,
            token.position,
        )

    def _parse_variable(self) -> VariableRef:
        token = self._expect(TokenType.VARIABLE)
        name = token.value[1:].upper()
        if not name:
            raise ParseFailure(
                f"Expected variable name after '@' at position {token.position}",
                token.type.value,
                token.position,
            )
        return VariableRef(name=name)

    def _parse_atom(self) -> Node:
        token = self._current()
        match token.type:
            case TokenType.NUMBER:
                return NumberLiteral(value=self._number())
            case TokenType.VARIABLE:
                return self._parse_variable()
            case TokenType.LPAREN:
                self._depth += 1
                if self._depth > self._max_depth:
                    raise ParseFailure(
                        f"Parentheses nested deeper than {self._max_depth} "
                        f"at position {token.position}",
                        token.type.value,
                        token.position,
                    )
                self._advance()
                expression = self._parse_expression()
                self._expect(TokenType.RPAREN)
                self._depth -= 1
                return expression
        raise self._unexpected(token)


def parse_expression(
    text: str, strict: bool = False, max_depth: int = DEFAULT_MAX_DEPTH
) -> Node:
    """Tokenize and parse dice notation.

    Args:
        text: Notation with aliases already expanded.
        strict: Passed to the lexer; raise on unrecognized characters.
        max_depth: Deepest parenthesis nesting accepted.

    Returns:
        Root AST node.

    Raises:
        ParseFailure: If the notation does not fit the grammar.
        LexAnomaly: In strict mode, for unrecognized characters.

    Examples:
        >>> parse_expression("2d6+3")
        BinaryOp(operator='+', left=DiceTerm(count=2, sides=6, modifiers=()), right=NumberLiteral(value=3))
    """
    return DiceParser(tokenize(text, strict=strict), max_depth=max_depth).parse()
