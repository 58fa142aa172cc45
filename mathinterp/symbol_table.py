# symbol_table.py
"""
Variable storage: a chained hash map from name to fixed-precision value.

Buckets are indexed by a 32-bit FNV-1a hash of the name. Collisions are chained
through ``Symbol.next`` with new symbols prepended to their bucket. The table
doubles and rehashes every entry when a new name would push the load factor
past ``LOAD_FACTOR_THRESHOLD``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator, List, Optional, Tuple

from .errors import CalculatorError
from .numeric import fix_precision

logger = logging.getLogger(__name__)

BASE_CAPACITY = 64
LOAD_FACTOR_THRESHOLD = 0.6

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619


def fnv1a_hash(name: str) -> int:
    """32-bit FNV-1a hash of the name's bytes."""
    h = FNV_OFFSET_BASIS
    for byte in name.encode('utf-8'):
        h ^= byte
        h = (h * FNV_PRIME) & 0xFFFFFFFF
    return h


@dataclass
class Symbol:
    """One variable binding, linked to the next symbol in its bucket."""
    name: str
    value: Decimal
    next: Optional['Symbol'] = None


class SymbolTable:
    """Resizable hash map of variable names to values."""

    def __init__(self, capacity: int = BASE_CAPACITY):
        self.capacity = capacity
        self.count = 0
        self.buckets: Optional[List[Optional[Symbol]]] = [None] * capacity

    def _check_alive(self) -> List[Optional[Symbol]]:
        if self.buckets is None:
            raise CalculatorError("Symbol table has been destroyed")
        return self.buckets

    def _index(self, name: str) -> int:
        return fnv1a_hash(name) % self.capacity

    def _find(self, name: str) -> Optional[Symbol]:
        current = self._check_alive()[self._index(name)]
        while current is not None:
            if len(current.name) == len(name) and current.name == name:
                return current
            current = current.next
        return None

    def _resize(self, new_capacity: int) -> None:
        logger.debug("Resizing symbol table %d -> %d (count %d)",
                     self.capacity, new_capacity, self.count)
        new_buckets: List[Optional[Symbol]] = [None] * new_capacity
        for head in self._check_alive():
            current = head
            while current is not None:
                following = current.next
                index = fnv1a_hash(current.name) % new_capacity
                current.next = new_buckets[index]
                new_buckets[index] = current
                current = following
        self.buckets = new_buckets
        self.capacity = new_capacity

    def insert_or_update(self, name: str, value: Decimal) -> Decimal:
        """Bind ``name`` to a copy of ``value`` and return the stored value.

        An existing binding is overwritten in place. A new name is prepended to
        its bucket, after resizing if the extra entry would exceed the load
        factor threshold.
        """
        existing = self._find(name)
        if existing is not None:
            logger.debug("Updating variable '%s'", name)
            existing.value = fix_precision(value)
            return existing.value

        if self.count + 1 > self.capacity * LOAD_FACTOR_THRESHOLD:
            self._resize(self.capacity * 2)

        buckets = self._check_alive()
        index = self._index(name)
        symbol = Symbol(name=name, value=fix_precision(value), next=buckets[index])
        buckets[index] = symbol
        self.count += 1
        logger.debug("Inserted variable '%s' into bucket %d", name, index)
        return symbol.value

    def get(self, name: str) -> Optional[Decimal]:
        """Return the value bound to ``name``, or None (with a warning) if unbound."""
        symbol = self._find(name)
        if symbol is None:
            logger.warning("Undefined variable: '%s'", name)
            return None
        return symbol.value

    def __contains__(self, name: str) -> bool:
        return self._find(name) is not None

    def __len__(self) -> int:
        return self.count

    def items(self) -> Iterator[Tuple[str, Decimal]]:
        """Yield bindings in bucket order, most recent first within a bucket."""
        for head in self._check_alive():
            current = head
            while current is not None:
                yield current.name, current.value
                current = current.next

    def names(self) -> List[str]:
        return [name for name, _ in self.items()]

    def clear(self) -> None:
        """Drop every binding; capacity and the bucket list itself are kept."""
        buckets = self._check_alive()
        logger.debug("Clearing symbol table (capacity %d, count %d)", self.capacity, self.count)
        for i in range(len(buckets)):
            buckets[i] = None
        self.count = 0

    def destroy(self) -> None:
        """Release every binding and the bucket list. The table is unusable afterwards."""
        if self.buckets is None:
            return
        self.clear()
        self.buckets = None
