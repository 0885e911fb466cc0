from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

CENTS = Decimal("0.01")


def round_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_amount(value) -> Optional[Decimal]:
    """Non-negative amount rounded to cents, or None when `value` isn't one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return round_money(amount)


def prorated_price(minutes: int, hourly_price) -> Decimal:
    """Price of `minutes` at `hourly_price` per hour, rounded to cents."""
    return round_money(Decimal(minutes) * Decimal(str(hourly_price)) / Decimal(60))
