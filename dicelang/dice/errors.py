"""Dice engine exception definitions.

Every failure inside the pipeline is a ``DiceError``; the public
``evaluate`` entry point converts them into error-shaped results.
"""


class DiceError(ValueError):
    """Base exception for dice expression failures."""

    pass


class LexAnomaly(DiceError):
    """Unrecognized character in the input (strict lexing only).

    Attributes:
        char: The offending character.
        position: Offset into the normalized input.
    """

    def __init__(self, char: str, position: int) -> None:
        super().__init__(f"Unrecognized character '{char}' at position {position}")
        self.char = char
        self.position = position


class ParseFailure(DiceError):
    """Token sequence does not match the grammar.

    Attributes:
        token_type: Kind of the offending token.
        position: Offset of the offending token.
    """

    def __init__(self, message: str, token_type: str, position: int) -> None:
        super().__init__(message)
        self.token_type = token_type
        self.position = position


class UndefinedVariable(DiceError):
    """A referenced variable has no binding.

    Attributes:
        name: Uppercase variable name.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"Variable @{name} is not defined")
        self.name = name


class ArithmeticHazard(DiceError):
    """Division by zero or a degenerate dice count/size."""

    pass
