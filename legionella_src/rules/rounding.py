"""Significant-figure rounding of reported concentrations.

Concentrations are reported with two significant digits: the value is put in
scientific form ``mantissa x 10^exponent`` (``1 <= |mantissa| < 10``), the
mantissa is rounded to one decimal place and the value is rebuilt.

Decimal arithmetic is used on the shortest round-trip representation of the
float so that the mantissa is exactly the one a reader sees (``454.5454...``
is ``4.545454...e2``, never ``4.5454...e2 - epsilon``).
"""

import math
from decimal import ROUND_HALF_UP, Decimal

from .schemas import ValidationError
from .ufc_criteria import SIGNIFICANT_DIGITS

_MANTISSA_QUANTUM = Decimal(1).scaleb(1 - SIGNIFICANT_DIGITS)


def round_significant(value: float) -> float:
    """Round a concentration to two significant digits.

    Args:
        value: Concentration in UFC/L (any finite real number)

    Returns:
        The rounded value. ``0`` maps to ``0.0``; the sign is preserved and
        halves are rounded away from zero (``4.55e3`` -> ``4.6e3``).

    Raises:
        ValidationError: If the value is NaN or infinite
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"Cannot round non-numeric value {value!r}")
    if not math.isfinite(value):
        raise ValidationError(f"Cannot round non-finite value {value!r}")
    if value == 0:
        return 0.0

    scientific = Decimal(repr(float(value)))
    exponent = scientific.adjusted()
    mantissa = scientific.scaleb(-exponent)
    rounded = mantissa.quantize(_MANTISSA_QUANTUM, rounding=ROUND_HALF_UP)

    # 9.96 -> 10.0 carries into the exponent; scaleb keeps it exact
    return float(rounded.scaleb(exponent))


def format_ufc(value: float) -> str:
    """Render a UFC/L value the way the calculator prints numbers.

    Integral values print without a decimal part (``450.0`` -> ``"450"``),
    other values use the shortest representation (``4.5`` -> ``"4.5"``).
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)
