# evaluator.py
"""
Post-order evaluation of arena ASTs.

Every visited node claims one slot in the scratch pool and writes its result
there. Arithmetic edge cases (division or modulo by zero, negative square root,
malformed literal, undefined variable) are soft failures: the node's value is
NaN, a diagnostic is recorded, and evaluation continues. Only structural
problems raise ``EvalError``.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from . import numeric
from .errors import StaleTreeError, UnsupportedNodeError
from .lexer import TokenKind
from .numeric import NAN, ScratchPool
from .symbol_table import SymbolTable

if TYPE_CHECKING:
    from .parser import ASTNode, NodeArena

logger = logging.getLogger(__name__)

# Binary operators with no soft-failure case of their own.
_PLAIN_BINARY: Dict[str, Callable[[Decimal, Decimal], Decimal]] = {
    TokenKind.ADD: numeric.add,
    TokenKind.SUB: numeric.subtract,
    TokenKind.MULTIPLY: numeric.multiply,
    TokenKind.POWER: numeric.power,
}

# Operators that yield NaN for an exactly zero right operand.
_ZERO_GUARDED: Dict[str, Callable[[Decimal, Decimal], Decimal]] = {
    TokenKind.DIVIDE: numeric.divide,
    TokenKind.MODULO: numeric.fmod,
}
_ZERO_MESSAGES = {
    TokenKind.DIVIDE: "Division by zero",
    TokenKind.MODULO: "Modulo by zero",
}


class Evaluator:
    """Evaluates AST nodes from one arena using a shared scratch pool."""

    def __init__(self, arena: 'NodeArena', pool: ScratchPool):
        self.arena = arena
        self.pool = pool
        self.diagnostics: List[str] = []

    def evaluate(self, root: 'ASTNode', symbols: SymbolTable) -> Decimal:
        """Evaluate the tree under ``root`` and return its value.

        The pool is reset first, so values from a previous call are gone. The
        returned ``Decimal`` is immutable and stays valid after the next call.
        """
        self.pool.reset()
        self.diagnostics = []
        slot = self._evaluate_node(root, symbols)
        return self.pool[slot]

    def _soft_failure(self, message: str, log: bool = True) -> Decimal:
        if log:
            logger.warning(message)
        self.diagnostics.append(message)
        return NAN

    def _child(self, index: Optional[int], parent: 'ASTNode') -> 'ASTNode':
        if index is None:
            raise UnsupportedNodeError(f"Missing operand for {parent.kind} node {parent.index}")
        return self.arena[index]

    def _value_of(self, index: Optional[int], parent: 'ASTNode', symbols: SymbolTable) -> Decimal:
        return self.pool[self._evaluate_node(self._child(index, parent), symbols)]

    def _evaluate_node(self, node: 'ASTNode', symbols: SymbolTable) -> int:
        if node.generation != self.arena.generation or node.token is None:
            raise StaleTreeError(f"Node {node.index} does not belong to the current parse")

        slot = self.pool.allocate()
        kind = node.kind
        logger.debug("Evaluating node %d: %s [%s]", node.index, kind, node.token.lexeme)

        if kind == TokenKind.NUMBER:
            value = numeric.parse_literal(node.token.lexeme)
            result = value if value is not None else \
                self._soft_failure(f"Failed to convert number: '{node.token.lexeme}'")

        elif kind == TokenKind.VARIABLE:
            value = symbols.get(node.token.text)
            result = value if value is not None else \
                self._soft_failure(f"Undefined variable: '{node.token.text}'", log=False)

        elif kind in _PLAIN_BINARY:
            left = self._value_of(node.left, node, symbols)
            right = self._value_of(node.right, node, symbols)
            result = _PLAIN_BINARY[kind](left, right)

        elif kind in _ZERO_GUARDED:
            left = self._value_of(node.left, node, symbols)
            right = self._value_of(node.right, node, symbols)
            if numeric.is_zero(right):
                result = self._soft_failure(_ZERO_MESSAGES[kind])
            else:
                result = _ZERO_GUARDED[kind](left, right)

        elif kind == TokenKind.SQUARE_ROOT:
            arg = self._value_of(node.left, node, symbols)
            if numeric.is_negative(arg):
                result = self._soft_failure("Square root of negative number")
            else:
                result = numeric.square_root(arg)

        elif kind == TokenKind.ASSIGN:
            value = self._value_of(node.right, node, symbols)
            target = self._child(node.left, node)
            if target.kind != TokenKind.VARIABLE:
                raise UnsupportedNodeError(f"Cannot assign to {target.kind} node {target.index}")
            result = symbols.insert_or_update(target.token.text, value)

        else:
            raise UnsupportedNodeError(f"Unsupported token type in evaluation: {kind}")

        self.pool[slot] = result
        return slot
