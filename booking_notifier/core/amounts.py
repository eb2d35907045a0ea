"""
Helpers for the loosely typed monetary values found in request payloads
and upstream booking records (numbers, numeric strings, blanks, None).
"""
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def parse_amount(value: Any) -> Optional[float]:
    """Return `value` as a float, or None when it is missing or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)
    text = str(value).strip().replace(",", "")
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return None if math.isnan(number) else number


def format_amount(value: Any) -> str:
    """Render an amount the way it is shown to customers: `11399`, `99.5`."""
    number = parse_amount(value)
    if number is None:
        return "" if value is None else str(value)
    if number.is_integer():
        return str(int(number))
    return format(Decimal(repr(number)).normalize(), "f")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True
