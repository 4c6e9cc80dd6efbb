"""
Fixed-point money helpers.

All ledger amounts are ``Decimal`` values with exactly two fractional
digits, rounded half-up.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Union

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

MoneyLike = Union[Decimal, int, float, str]


def to_money(value: MoneyLike) -> Decimal:
    """
    Convert a value to a two-decimal ``Decimal``.

    Floats go through ``str`` first so ``0.1`` becomes ``0.10`` and not
    the binary expansion.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Not a monetary amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[MoneyLike]) -> Decimal:
    """Round each value, add them up, and round the total."""
    return to_money(sum((to_money(v) for v in values), ZERO))
