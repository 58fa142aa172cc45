"""Arbitrary-precision arithmetic interpreter: tokenize -> parse -> evaluate."""

__version__ = "1.0.0"

from .errors import (  # noqa: E402
    CalculatorError,
    EvalError,
    LexerError,
    MissingCloseParenError,
    NodeBufferOverflowError,
    ParseError,
    ScratchPoolError,
    StaleTreeError,
    TooLongError,
    UnexpectedTokenError,
    UnrecognizedCharError,
    UnsupportedNodeError,
)
from .lexer import Lexer, Token, TokenBuffer, TokenKind  # noqa: E402
from .numeric import PRECISION_BITS, format_value, is_infinite, is_nan  # noqa: E402
from .parser import ASTNode, NodeArena, Parser  # noqa: E402
from .symbol_table import SymbolTable  # noqa: E402
