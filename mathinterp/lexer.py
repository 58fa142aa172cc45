# lexer.py
"""
Tokenizer for interpreter input lines.

A line is scanned left to right into a reusable ``TokenBuffer``. Tokens carry
the exact slice of the line they came from; the buffer is cleared (not
reallocated) at the start of every ``tokenize`` call, so tokens and everything
built from them only live until the next line is tokenized.
"""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from .errors import TooLongError, UnrecognizedCharError

logger = logging.getLogger(__name__)

LEXEME_LENGTH_LIMIT = 255


class TokenKind:
    """Enumeration of token kinds."""
    NUMBER = 'NUMBER'
    VARIABLE = 'VARIABLE'
    ASSIGN = 'ASSIGN'
    ADD = 'ADD'
    SUB = 'SUB'
    DIVIDE = 'DIVIDE'
    MODULO = 'MODULO'
    MULTIPLY = 'MULTIPLY'
    POWER = 'POWER'
    SQUARE_ROOT = 'SQUARE_ROOT'
    LPAREN = 'LPAREN'
    RPAREN = 'RPAREN'
    COMMA = 'COMMA'
    LBRACKET = 'LBRACKET'
    RBRACKET = 'RBRACKET'


# Character classes are fixed; ASCII only.
_DIGITS = frozenset(string.digits)
_IDENT_CHARS = frozenset(string.ascii_letters + '_')
_WHITESPACE = frozenset(string.whitespace)
_DECIMAL_POINTS = frozenset('.,')

_SINGLE_CHAR_KINDS: Dict[str, str] = {
    '=': TokenKind.ASSIGN,
    '+': TokenKind.ADD,
    '/': TokenKind.DIVIDE,
    '%': TokenKind.MODULO,
    '*': TokenKind.MULTIPLY,
    '^': TokenKind.POWER,
    '(': TokenKind.LPAREN,
    ')': TokenKind.RPAREN,
    ',': TokenKind.COMMA,
    '[': TokenKind.LBRACKET,
    ']': TokenKind.RBRACKET,
}

# After one of these a '-' is binary subtraction; otherwise it is a sign.
_OPERAND_END_KINDS = frozenset({TokenKind.NUMBER, TokenKind.VARIABLE, TokenKind.RPAREN})


@dataclass(frozen=True)
class Token:
    """A token with kind, source slice, position, and the fused-sign flag."""
    kind: str
    text: str
    pos: int
    negative: bool = False

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def lexeme(self) -> str:
        """Source text with the fused sign applied to negative literals."""
        return f"-{self.text}" if self.negative else self.text

    def __repr__(self) -> str:
        flag = ", negative" if self.negative else ""
        return f"Token({self.kind}, {self.text!r}, pos={self.pos}{flag})"


class TokenBuffer:
    """Ordered, reusable token storage for one line at a time.

    ``capacity`` grows in fixed chunks and never shrinks; the parser sizes its
    node arena from it. ``generation`` increases on every ``clear`` so that
    consumers can tell which line a structure was built from.
    """

    CHUNK_SIZE = 128

    def __init__(self):
        self.tokens: List[Token] = []
        self.capacity = self.CHUNK_SIZE
        self.generation = 0

    def clear(self) -> None:
        self.tokens.clear()
        self.generation += 1

    def add(self, kind: str, text: str, pos: int, negative: bool = False) -> Token:
        if len(self.tokens) >= self.capacity:
            new_capacity = self.capacity + self.CHUNK_SIZE
            logger.debug("Token buffer resized: %d -> %d", self.capacity, new_capacity)
            self.capacity = new_capacity
        token = Token(kind, text, pos, negative)
        self.tokens.append(token)
        logger.debug("Token %s [%s]", kind, token.lexeme)
        return token

    def last(self) -> Optional[Token]:
        return self.tokens[-1] if self.tokens else None

    def __len__(self) -> int:
        return len(self.tokens)

    def __getitem__(self, index: int) -> Token:
        return self.tokens[index]

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens)

    def dump(self) -> str:
        lines = [f"Tokens ({len(self.tokens)}):"]
        for i, tok in enumerate(self.tokens):
            flag = ", negative" if tok.negative else ""
            lines.append(f"  {i:2d}: {tok.kind:<12} [{tok.lexeme}] (len: {tok.length}{flag})")
        return "\n".join(lines)


class Lexer:
    """Tokenizer for interpreter expressions.

    Produces NUMBER, VARIABLE, SQUARE_ROOT and single-character operator and
    punctuation tokens. A '-' that cannot be binary subtraction is fused into
    the number that follows it.
    """

    def __init__(self, buffer: Optional[TokenBuffer] = None):
        self.buffer = buffer if buffer is not None else TokenBuffer()
        self.text = ''
        self.pos = 0
        self.len = 0

    def _peek(self, n: int = 0) -> str:
        i = self.pos + n
        return self.text[i] if i < self.len else ''

    def _advance(self, n: int = 1) -> None:
        self.pos += n

    def _skip_whitespace(self) -> None:
        while self._peek() and self._peek() in _WHITESPACE:
            self._advance()

    def _read_digits(self) -> str:
        """Consume a digit run with at most one decimal point and return it."""
        start = self.pos
        has_point = False
        while True:
            ch = self._peek()
            if ch and ch in _DIGITS:
                self._advance()
            elif ch and ch in _DECIMAL_POINTS and not has_point:
                has_point = True
                self._advance()
            else:
                break
        raw = self.text[start:self.pos]
        if len(raw) > LEXEME_LENGTH_LIMIT:
            raise TooLongError(
                f"Number too long: '{raw[:16]}...' (max {LEXEME_LENGTH_LIMIT})", start)
        return raw

    def _read_number(self) -> None:
        start = self.pos
        self.buffer.add(TokenKind.NUMBER, self._read_digits(), start)

    def _read_signed_number(self) -> None:
        start = self.pos
        self._advance()  # '-'
        while self._peek() in (' ', '\t'):
            self._advance()
        self.buffer.add(TokenKind.NUMBER, self._read_digits(), start, negative=True)

    def _read_ident(self) -> None:
        start = self.pos
        while self._peek() and self._peek() in _IDENT_CHARS:
            self._advance()
        raw = self.text[start:self.pos]
        if len(raw) > LEXEME_LENGTH_LIMIT:
            raise TooLongError(
                f"Identifier too long: '{raw[:16]}...' (max {LEXEME_LENGTH_LIMIT})", start)
        if raw == 'sqrt':
            self.buffer.add(TokenKind.SQUARE_ROOT, 'sqrt', start)
        else:
            self.buffer.add(TokenKind.VARIABLE, raw, start)

    def _minus_is_sign(self) -> bool:
        last = self.buffer.last()
        return last is None or last.kind not in _OPERAND_END_KINDS

    def tokenize(self, line: str) -> TokenBuffer:
        """Scan ``line`` into the token buffer and return it.

        On failure the buffer holds whatever was scanned before the error and
        must not be parsed.
        """
        self.buffer.clear()
        self.text = line
        self.pos = 0
        self.len = len(line)
        while True:
            self._skip_whitespace()
            ch = self._peek()
            if ch == '':
                break
            if ch in _DIGITS:
                self._read_number()
            elif ch in _IDENT_CHARS:
                self._read_ident()
            elif ch == '-':
                if self._minus_is_sign():
                    self._read_signed_number()
                else:
                    self.buffer.add(TokenKind.SUB, '-', self.pos)
                    self._advance()
            elif ch in _SINGLE_CHAR_KINDS:
                self.buffer.add(_SINGLE_CHAR_KINDS[ch], ch, self.pos)
                self._advance()
            else:
                raise UnrecognizedCharError(
                    f"Unrecognized character: {ch!r} (0x{ord(ch):02x})", self.pos)
        return self.buffer


def tokenize(line: str) -> List[Token]:
    """Convenience wrapper returning a fresh token list for ``line``."""
    return list(Lexer().tokenize(line))
