from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

Number = Union[Decimal, str, int]

# Wide enough that normalize() never rounds a ledger amount.
_PRECISION = 100


def to_decimal(value: Number) -> Decimal:
    """
    Exact conversion to Decimal. Floats are rejected on purpose: the API
    hands amounts over as strings and they must stay exact.
    """
    if isinstance(value, float):
        raise TypeError(f"float amounts are not accepted (got {value!r})")
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid decimal amount: {value!r}") from e
    if not d.is_finite():
        raise ValueError(f"Non-finite decimal amount: {value!r}")
    return d


def to_fixed(value: Number) -> str:
    """
    Fixed-point rendering with trailing zeros stripped and no exponent,
    whatever the magnitude:
      Decimal("1E-8")   -> "0.00000001"
      Decimal("2E+6")   -> "2000000"
      Decimal("100.50") -> "100.5"
    """
    d = to_decimal(value)
    with localcontext() as ctx:
        ctx.prec = max(_PRECISION, len(d.as_tuple().digits))
        d = d.normalize()
    if d.is_zero():
        return "0"
    return format(d, "f")


def abs_fixed(value: Number) -> str:
    return to_fixed(to_decimal(value).copy_abs())
