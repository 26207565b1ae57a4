"""Decimal parsing and formatting for currency amounts"""

from decimal import Decimal, InvalidOperation
from typing import Any

CENTS = Decimal("0.01")


def parse_decimal(value: Any) -> Decimal:
    """
    Convert a wire value ("75.00", 75, 75.5) to Decimal.

    Floats go through str() so 0.1 stays 0.1 rather than its binary expansion.

    Raises:
        ValueError: If the value is missing, not numeric, or not finite
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Not a decimal value: {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        result = Decimal(value.strip() if isinstance(value, str) else value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValueError(f"Not a decimal value: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Not a finite decimal value: {value!r}")
    return result


def parse_payment_amount(text: str) -> Decimal | None:
    """Parse user input into a positive finite amount, or None if it isn't one"""
    try:
        amount = parse_decimal(text)
    except ValueError:
        return None
    return amount if amount > 0 else None


def format_money(amount: Decimal) -> str:
    """75 -> '75.00'"""
    return str(amount.quantize(CENTS))


def to_json_number(amount: Decimal) -> int | float:
    """Wire representation for request bodies that expect a JSON number"""
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)
