"""
Shared numeric helpers for the sizing and costing calculators.

Engines compute at full float precision. Rounding happens only at output,
through round_half_up(), so chained computations never see display values.
"""

import math
from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, places: int = 2) -> float:
    """Round half away from zero (0.125 -> 0.13), unlike Python's banker's round()."""
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def ceil_at_least(value: float, minimum: int) -> int:
    """Round UP to the next whole unit, never below minimum. You can't buy half a cylinder."""
    return max(minimum, math.ceil(value))


def is_number(value) -> bool:
    """True for real, finite numbers. Booleans are not numbers here."""
    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_number(value, default: float = None):
    """
    Parse a numeric value from form input.

    Handles strings like '10', ' 10.5 ', '54.4 kg'. Blank or None returns default.
    Returns None when the value is present but not a number, so the caller
    can report it instead of silently defaulting.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return default
    for suffix in ("kg", "m", "°c", "%"):
        if text.lower().endswith(suffix):
            text = text[: -len(suffix)].strip()
            break
    try:
        return float(text)
    except ValueError:
        return None
