# parser.py
"""
Recursive-descent parser producing an arena-allocated AST.

Grammar (one statement per line):

    statement  := VARIABLE '=' expression      (only when the first two tokens are VARIABLE '=')
                | expression
    expression := term (('+' | '-') term)*
    term       := power (('*' | '/' | '%') power)*
    power      := primary ('^' power)?          -- right-associative
    primary    := NUMBER | VARIABLE
                | '(' expression ')'
                | 'sqrt' '(' expression ')'

Nodes live in a ``NodeArena`` sized before each parse to at least the token
count plus one and never grown during it. Children are arena indices. The
``Parser`` also owns the symbol table, the scratch pool and the evaluator, so
one instance holds all the state a session needs.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator, List, Optional

from .errors import (
    EvalError,
    MissingCloseParenError,
    NodeBufferOverflowError,
    ParseError,
    StaleTreeError,
    UnexpectedTokenError,
)
from .evaluator import Evaluator
from .lexer import Token, TokenBuffer, TokenKind
from .numeric import ScratchPool
from .symbol_table import SymbolTable

logger = logging.getLogger(__name__)

# Deepest Python recursion per token: a paren or sqrt level costs four parser
# frames, and each tree level costs two evaluator frames.
FRAMES_PER_TOKEN = 5
# Extra headroom is granted for at most one full input line of tokens.
HEADROOM_TOKEN_LIMIT = 512
RECURSION_MARGIN = 100


@contextmanager
def recursion_headroom(token_count: int) -> Iterator[None]:
    """Raise the interpreter recursion limit enough to walk ``token_count`` tokens."""
    previous = sys.getrecursionlimit()
    extra = min(token_count, HEADROOM_TOKEN_LIMIT) * FRAMES_PER_TOKEN + RECURSION_MARGIN
    sys.setrecursionlimit(previous + extra)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


# --------------------------
# AST arena
# --------------------------

@dataclass
class ASTNode:
    """One arena slot. ``left``/``right`` are arena indices or None."""
    index: int
    token: Optional[Token] = None
    left: Optional[int] = None
    right: Optional[int] = None
    generation: int = 0

    @property
    def kind(self) -> Optional[str]:
        return self.token.kind if self.token is not None else None


class NodeArena:
    """Preallocated node store; node identity is the slot index."""

    def __init__(self, size: int):
        self.nodes: List[ASTNode] = [ASTNode(i) for i in range(size)]
        self.size = size
        self.count = 0
        self.generation = 0

    def reserve(self, required: int) -> None:
        """Grow to at least ``required`` slots. Only called between parses."""
        if self.size >= required:
            return
        logger.debug("AST node arena resized: %d -> %d", self.size, required)
        self.nodes.extend(ASTNode(i) for i in range(self.size, required))
        self.size = required

    def reset(self) -> None:
        """Start a new parse: all previous nodes become stale."""
        self.count = 0
        self.generation += 1

    def allocate(self, token: Token, left: Optional[int] = None,
                 right: Optional[int] = None) -> ASTNode:
        if self.count >= self.size:
            raise NodeBufferOverflowError(f"AST node buffer overflow (size: {self.size})")
        node = self.nodes[self.count]
        node.token = token
        node.left = left
        node.right = right
        node.generation = self.generation
        self.count += 1
        logger.debug("Node %d: %s [%s]", node.index, token.kind, token.lexeme)
        return node

    def __getitem__(self, index: int) -> ASTNode:
        return self.nodes[index]

    def __len__(self) -> int:
        return self.count

    def release(self) -> None:
        self.nodes = []
        self.size = 0
        self.count = 0


# --------------------------
# Parser
# --------------------------

class Parser:
    """Parses the current contents of a token buffer and evaluates the result.

    The token buffer is shared with the ``Lexer`` that fills it. Symbol table,
    node arena and scratch pool are created here, reused for every statement,
    and released by ``destroy``.
    """

    def __init__(self, tokens: Optional[TokenBuffer] = None):
        self.tokens: Optional[TokenBuffer] = None
        self.arena: Optional[NodeArena] = None
        self.symbols: Optional[SymbolTable] = None
        self.pool: Optional[ScratchPool] = None
        self.evaluator: Optional[Evaluator] = None
        self.pos = 0
        self._token_generation = -1
        try:
            self.tokens = tokens if tokens is not None else TokenBuffer()
            self.arena = NodeArena(self.tokens.capacity)
            self.symbols = SymbolTable()
            self.pool = ScratchPool()
            self.evaluator = Evaluator(self.arena, self.pool)
        except Exception:
            self.destroy()
            raise

    # ---- token cursor ----

    def _current(self) -> Optional[Token]:
        if self.pos >= len(self.tokens):
            return None
        return self.tokens[self.pos]

    def _next(self) -> Optional[Token]:
        if self.pos + 1 >= len(self.tokens):
            return None
        return self.tokens[self.pos + 1]

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def _match(self, *kinds: str) -> bool:
        tok = self._current()
        return tok is not None and tok.kind in kinds

    def _end_position(self) -> int:
        last = self.tokens.last()
        return last.pos + last.length if last is not None else 0

    def _unexpected(self, expected: str, context: str = "") -> UnexpectedTokenError:
        tok = self._current()
        if tok is None:
            return UnexpectedTokenError(expected, "EOF", self._end_position(), context=context)
        return UnexpectedTokenError(expected, tok.kind, tok.pos, tok.lexeme, context=context)

    def _expect_close(self, construct: str) -> Token:
        if self._match(TokenKind.RPAREN):
            return self._advance()
        tok = self._current()
        if tok is None:
            raise MissingCloseParenError(construct, "EOF", self._end_position())
        raise MissingCloseParenError(construct, tok.kind, tok.pos, tok.lexeme)

    # ---- entry points ----

    def parse(self) -> ASTNode:
        """Parse the buffered tokens as one statement and return its root node."""
        self.arena.reserve(max(self.tokens.capacity, len(self.tokens) + 1))
        self.arena.reset()
        self.pos = 0
        self._token_generation = self.tokens.generation
        try:
            with recursion_headroom(len(self.tokens)):
                root = self.parse_statement()
        except RecursionError:
            raise ParseError("Expression nested too deeply", self._end_position()) from None
        if self._current() is not None:
            raise self._unexpected("end of input")
        logger.debug("Parsed %d tokens into %d nodes, root %s",
                     len(self.tokens), len(self.arena), root.kind)
        return root

    def evaluate(self, root: ASTNode) -> Decimal:
        """Evaluate a tree from the latest parse against this parser's symbol table."""
        if self.tokens.generation != self._token_generation:
            raise StaleTreeError("Token buffer was refilled after this tree was parsed")
        try:
            with recursion_headroom(len(self.tokens)):
                return self.evaluator.evaluate(root, self.symbols)
        except RecursionError:
            raise EvalError("Expression nested too deeply") from None

    # ---- grammar ----

    def parse_statement(self) -> ASTNode:
        if self._match(TokenKind.VARIABLE) and self._next() is not None \
                and self._next().kind == TokenKind.ASSIGN:
            var = self.arena.allocate(self._advance())
            op = self._advance()
            value = self.parse_expression()
            return self.arena.allocate(op, var.index, value.index)
        return self.parse_expression()

    def parse_expression(self) -> ASTNode:
        """expression := term (('+' | '-') term)*"""
        left = self.parse_term()
        while self._match(TokenKind.ADD, TokenKind.SUB):
            op = self._advance()
            right = self.parse_term()
            left = self.arena.allocate(op, left.index, right.index)
        return left

    def parse_term(self) -> ASTNode:
        """term := power (('*' | '/' | '%') power)*"""
        left = self.parse_power()
        while self._match(TokenKind.MULTIPLY, TokenKind.DIVIDE, TokenKind.MODULO):
            op = self._advance()
            right = self.parse_power()
            left = self.arena.allocate(op, left.index, right.index)
        return left

    def parse_power(self) -> ASTNode:
        """power := primary ('^' power)?"""
        left = self.parse_primary()
        if self._match(TokenKind.POWER):
            op = self._advance()
            right = self.parse_power()
            return self.arena.allocate(op, left.index, right.index)
        return left

    def parse_primary(self) -> ASTNode:
        tok = self._current()
        if tok is None:
            raise self._unexpected("primary expression")
        if tok.kind in (TokenKind.NUMBER, TokenKind.VARIABLE):
            return self.arena.allocate(self._advance())
        if tok.kind == TokenKind.LPAREN:
            self._advance()
            expr = self.parse_expression()
            self._expect_close("parenthesized expression")
            return expr
        if tok.kind == TokenKind.SQUARE_ROOT:
            node = self.arena.allocate(self._advance())
            if not self._match(TokenKind.LPAREN):
                raise self._unexpected(TokenKind.LPAREN, context="Expected '(' after sqrt")
            self._advance()
            node.left = self.parse_expression().index
            self._expect_close("sqrt")
            return node
        raise self._unexpected("primary expression")

    # ---- diagnostics / teardown ----

    def dump_tree(self) -> str:
        """Describe every node created by the last parse."""
        if not len(self.arena):
            return "Empty AST"
        lines = []
        for i in range(len(self.arena)):
            node = self.arena[i]
            left = node.left if node.left is not None else -1
            right = node.right if node.right is not None else -1
            lines.append(f"Node {i:3d}: {node.kind:<12} [{node.token.lexeme:<15}] "
                         f"left:{left:<3d} right:{right:<3d}")
        return "\n".join(lines)

    def destroy(self) -> None:
        """Release every owned structure. Safe on a partially built parser."""
        if self.symbols is not None:
            self.symbols.destroy()
        if self.pool is not None:
            self.pool.release()
        if self.arena is not None:
            self.arena.release()
        if self.tokens is not None:
            self.tokens.clear()
        self.evaluator = None
