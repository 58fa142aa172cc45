# errors.py
"""Exception hierarchy for the interpreter pipeline.

Lexer and parser errors abort the whole line. Evaluation errors raised here are
structural only: arithmetic edge cases never raise, they produce NaN.
"""

from __future__ import annotations

from typing import Optional


class CalculatorError(Exception):
    """Base class for calculator errors."""
    pass


# --------------------------
# Lexer errors
# --------------------------

class LexerError(CalculatorError):
    """Raised for errors during tokenization."""

    def __init__(self, message: str, position: Optional[int] = None):
        self.position = position
        if position is not None:
            message = f"{message} at pos {position}"
        super().__init__(message)


class TooLongError(LexerError):
    """A number or identifier exceeds the lexeme length limit."""
    pass


class UnrecognizedCharError(LexerError):
    """A character that starts no token."""
    pass


# --------------------------
# Parser errors
# --------------------------

class ParseError(CalculatorError):
    """Raised for parsing errors with optional position information."""

    def __init__(self, message: str, position: Optional[int] = None):
        self.position = position
        if position is not None:
            message = f"{message} at pos {position}"
        super().__init__(message)


class UnexpectedTokenError(ParseError):
    """A production found a different token kind than it needed."""

    def __init__(self, expected: str, actual: str, position: Optional[int] = None,
                 lexeme: str = "", context: str = ""):
        self.expected = expected
        self.actual = actual
        detail = f"Expected {expected}, got {actual}"
        if lexeme:
            detail += f" [{lexeme}]"
        if context:
            detail = f"{context}: {detail}"
        super().__init__(detail, position)


class MissingCloseParenError(UnexpectedTokenError):
    """A parenthesized or sqrt(...) form is not closed."""

    def __init__(self, construct: str, actual: str, position: Optional[int] = None, lexeme: str = ""):
        self.construct = construct
        super().__init__("RPAREN", actual, position, lexeme,
                         context=f"Missing closing parenthesis for {construct}")


class NodeBufferOverflowError(ParseError):
    """The AST arena ran out of slots. Signals a sizing bug, not bad input."""
    pass


# --------------------------
# Evaluation errors (structural)
# --------------------------

class EvalError(CalculatorError):
    """Raised when evaluation cannot produce a value at all."""
    pass


class UnsupportedNodeError(EvalError):
    """The evaluator met a node kind the grammar should never produce."""
    pass


class ScratchPoolError(EvalError):
    """The scratch value pool could not grow."""
    pass


class StaleTreeError(EvalError):
    """A node from an earlier parse was handed to the evaluator."""
    pass
