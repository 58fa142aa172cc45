# numeric.py
"""
Fixed-precision decimal arithmetic for the interpreter.

Every value the interpreter stores or computes is a ``decimal.Decimal`` produced
through ``CONTEXT``: 77 significant digits (the decimal equivalent of a 256-bit
significand), round-half-even, and no traps. With traps disabled, invalid
operations yield NaN and overflows yield Infinity instead of raising, so special
values flow through arithmetic the same way IEEE NaN does.

Also holds the scratch pool used by the evaluator and the display formatter used
by the REPL.
"""

from __future__ import annotations

import logging
import math
import re
from decimal import MAX_EMAX, MIN_EMIN, Context, Decimal, ROUND_HALF_EVEN
from typing import List, Optional

from .errors import ScratchPoolError

logger = logging.getLogger(__name__)

PRECISION_BITS = 256
# floor(256 * log10(2))
PRECISION_DIGITS = int(PRECISION_BITS * math.log10(2))

# Widest exponent range the decimal module allows, so only truly huge or tiny
# results overflow to Infinity or underflow to zero.
CONTEXT = Context(prec=PRECISION_DIGITS, rounding=ROUND_HALF_EVEN,
                  Emax=MAX_EMAX, Emin=MIN_EMIN, traps=[])

ZERO = Decimal(0)
ONE = Decimal(1)
NAN = Decimal("NaN")

# Literal text as the lexer produces it: digits with at most one '.' or ','.
_LITERAL_RE = re.compile(r"-?(?=[.,]?\d)\d*[.,]?\d*")


# --------------------------
# Conversion and classification
# --------------------------

def parse_literal(text: str) -> Optional[Decimal]:
    """Convert a numeric lexeme to a fixed-precision value.

    Both '.' and ',' act as the decimal point. Returns None when the text is not
    a plain decimal literal (e.g. a lone '-').
    """
    if not _LITERAL_RE.fullmatch(text):
        return None
    return CONTEXT.create_decimal(text.replace(",", "."))


def fix_precision(value: Decimal) -> Decimal:
    """Return ``value`` rounded to the system precision (signed zeros kept)."""
    return CONTEXT.create_decimal(value)


def is_nan(value: Decimal) -> bool:
    return value.is_nan()


def is_infinite(value: Decimal) -> bool:
    return value.is_infinite()


def is_zero(value: Decimal) -> bool:
    """Exactly zero, either sign. NaN is not zero."""
    return value.is_zero()


def is_negative(value: Decimal) -> bool:
    """Strictly below zero. NaN and -0 are not negative."""
    return not value.is_nan() and value.is_signed() and not value.is_zero()


# --------------------------
# Operations
# --------------------------

def add(left: Decimal, right: Decimal) -> Decimal:
    return CONTEXT.add(left, right)


def subtract(left: Decimal, right: Decimal) -> Decimal:
    return CONTEXT.subtract(left, right)


def multiply(left: Decimal, right: Decimal) -> Decimal:
    return CONTEXT.multiply(left, right)


def divide(left: Decimal, right: Decimal) -> Decimal:
    return CONTEXT.divide(left, right)


def fmod(left: Decimal, right: Decimal) -> Decimal:
    """Remainder of ``left / right`` truncated toward zero; sign follows ``left``.

    ``Context.remainder`` refuses when the integer quotient needs more digits
    than the precision allows. That case is computed exactly on integers and
    then rounded to the precision once.
    """
    result = CONTEXT.remainder(left, right)
    if result.is_nan() and left.is_finite() and right.is_finite() and not right.is_zero():
        result = _exact_fmod(left, right)
    return result


def _exact_fmod(left: Decimal, right: Decimal) -> Decimal:
    l_sign, l_digits, l_exp = left.as_tuple()
    _, r_digits, r_exp = right.as_tuple()
    exponent = min(l_exp, r_exp)
    l_coeff = int("".join(map(str, l_digits)) or "0")
    r_int = int("".join(map(str, r_digits)) or "0") * 10 ** (r_exp - exponent)
    # The shifted left operand can have billions of digits; reduce the power first.
    remainder = l_coeff * pow(10, l_exp - exponent, r_int) % r_int
    sign = "-" if l_sign else ""
    return CONTEXT.create_decimal(f"{sign}{remainder}E{exponent}")


def power(base: Decimal, exponent: Decimal) -> Decimal:
    """``base ** exponent``; any base raised to zero is 1, NaN included."""
    if exponent.is_zero():
        return ONE
    return CONTEXT.power(base, exponent)


def square_root(value: Decimal) -> Decimal:
    return CONTEXT.sqrt(value)


# --------------------------
# Display
# --------------------------

def format_value(value: Decimal) -> str:
    """Human-friendly rendering used for results and variable listings.

    Values whose decimal exponent falls outside [-3, 6] are shown in scientific
    notation with ten fractional digits; the rest in fixed notation with up to
    ten fractional digits, fewer as the integer part grows.
    """
    if value.is_nan():
        return "NaN"
    if value.is_infinite():
        return "-Infinity" if value.is_signed() else "Infinity"

    # Exponent of the form 0.d1d2... x 10^exponent
    exponent = 0 if value.is_zero() else value.adjusted() + 1
    if exponent < -3 or exponent > 6:
        mantissa, _, exp_part = format(value, ".10e").partition("e")
        sign, digits = exp_part[0], exp_part[1:]
        return f"{mantissa}e{sign}{digits.zfill(2)}"

    digits_after = min(max(10 - exponent, 0), 10)
    return format(value, f".{digits_after}f")


# --------------------------
# Scratch pool
# --------------------------

class ScratchPool:
    """Bump allocator of value slots for intermediate results.

    Slots are handed out by a cursor that only moves forward during one
    evaluation and is reset at the start of the next one. Nothing is freed
    individually; a reset invalidates every slot at once.
    """

    INITIAL_SIZE = 128

    def __init__(self, size: int = INITIAL_SIZE):
        self.slots: List[Decimal] = [ZERO] * size
        self.size = size
        self.count = 0

    def reset(self) -> None:
        self.count = 0

    def allocate(self) -> int:
        """Claim the next slot, doubling the pool when it is exhausted."""
        if self.count >= self.size:
            self._grow(max(self.size * 2, 1))
        index = self.count
        self.count += 1
        self.slots[index] = ZERO
        return index

    def _grow(self, new_size: int) -> None:
        try:
            self.slots.extend([ZERO] * (new_size - self.size))
        except MemoryError as e:
            raise ScratchPoolError(f"Failed to grow scratch pool to {new_size} slots") from e
        logger.debug("Scratch pool resized: %d -> %d", self.size, new_size)
        self.size = new_size

    def __getitem__(self, index: int) -> Decimal:
        return self.slots[index]

    def __setitem__(self, index: int, value: Decimal) -> None:
        self.slots[index] = value

    def release(self) -> None:
        self.slots = []
        self.size = 0
        self.count = 0
