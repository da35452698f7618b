"""
Values -- Decimal arithmetic helpers for farm money, rates and quantities.

Responsibility:
    Centralizes conversion to ``Decimal`` and the rounding rules used by
    every engine: 2-decimal ROUND_HALF_UP for money, whole-unit rounding for
    bushel yields, and nearest-increment rounding for price scenarios.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - No floats: ``to_decimal`` converts floats through ``str`` so binary
      representation noise never reaches the arithmetic.
    - ``round_money`` is the ONLY sanctioned rounding function for monetary
      outputs; engines never call ``quantize`` directly.

Failure modes:
    - ValueError from ``to_decimal`` on non-numeric input.
    - ValueError from ``round_to_increment`` on a non-positive increment.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
ONE = Decimal("1")
CENT = Decimal("0.01")

MONEY_DECIMAL_PLACES = 2


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """
    Convert a numeric value (or None) to Decimal.

    Postconditions:
        - None -> ``default``.
        - float is converted via ``str()`` (never ``Decimal(float)``).

    Raises:
        ValueError: If ``value`` is not numeric.
    """
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert bool to Decimal: {value!r}")
    if isinstance(value, (int, str)):
        try:
            return Decimal(value)
        except InvalidOperation as exc:
            raise ValueError(f"Not a number: {value!r}") from exc
    if isinstance(value, float):
        return Decimal(str(value))
    raise ValueError(f"Cannot convert {type(value).__name__} to Decimal")


def round_money(value: Decimal, decimal_places: int = MONEY_DECIMAL_PLACES) -> Decimal:
    """Round a monetary value half-up to ``decimal_places`` (default 2)."""
    quantum = Decimal(1).scaleb(-decimal_places)
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def round_whole(value: Decimal) -> Decimal:
    """Round half-up to a whole unit (bushels per acre)."""
    return value.quantize(ONE, rounding=ROUND_HALF_UP)


def round_to_increment(value: Decimal, increment: Decimal) -> Decimal:
    """
    Round half-up to the nearest multiple of ``increment``.

    The result carries the increment's exponent, so
    ``round_to_increment(Decimal("2.7975"), Decimal("0.05")) == Decimal("2.80")``.
    """
    if increment <= ZERO:
        raise ValueError(f"Increment must be positive: {increment}")
    units = (value / increment).quantize(ONE, rounding=ROUND_HALF_UP)
    return (units * increment).quantize(increment)


def safe_divide(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Divide, returning zero when the denominator is not positive."""
    if denominator <= ZERO:
        return ZERO
    return numerator / denominator
