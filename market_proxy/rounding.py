from __future__ import annotations
import math
from decimal import ROUND_HALF_UP, Context, Decimal

# wide enough for any finite double at two decimals
_CONTEXT = Context(prec=400)


def to_fixed(value: float, digits: int = 2) -> str:
    """Fixed-point text with exact ties rounded away from zero.

    ``Decimal(value)`` is the exact binary value, so only true ties
    (1.125, 0.375, ...) differ from ``format(value, ".2f")``.
    """
    if not math.isfinite(value):
        return format(value, f".{digits}f")
    exp = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(exp, rounding=ROUND_HALF_UP, context=_CONTEXT))


def round_price(value: float, digits: int = 2) -> float:
    return float(to_fixed(value, digits))
