"""Currency rounding.

Amounts are stored as floats on the aggregates; every computed amount passes
through `to_money` so that totals are rounded the same way everywhere.
"""

from decimal import ROUND_HALF_UP, Decimal

from storefront.config import MONEY_PRECISION

_QUANTUM = Decimal(1).scaleb(-MONEY_PRECISION)


def to_money(value: float | int | str | Decimal) -> float:
    """Round an amount half-up to the configured currency precision."""
    return float(Decimal(str(value)).quantize(_QUANTUM, rounding=ROUND_HALF_UP))


def line_total(unit_price: float, quantity: int) -> float:
    return to_money(Decimal(str(unit_price)) * quantity)


def sum_money(*amounts: float) -> float:
    return to_money(sum((Decimal(str(amount)) for amount in amounts), Decimal(0)))
