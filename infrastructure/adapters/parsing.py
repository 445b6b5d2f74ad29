import math
from typing import Any


def to_float(value: Any) -> float | None:
    """Parse a price field; None for anything that is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip().replace(',', ''))
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number
