# storefront/utils/money.py

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

Money = Decimal
ZERO = Decimal("0.00")


def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))


def round_money(x: Money) -> Money:
    return D(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def to_string_money(x) -> str:
    return str(round_money(x))


def opt_money(x) -> str | None:
    return None if x is None else to_string_money(x)


def parse_money(value, field: str) -> Money:
    """Client-supplied amount as a rounded Decimal; non-numeric and non-finite values are rejected."""
    from ..errors import BadRequest

    try:
        m = D(value)
    except (InvalidOperation, ValueError, TypeError):
        raise BadRequest(f"{field} must be numeric")
    if not m.is_finite():
        raise BadRequest(f"{field} must be a finite number")
    return round_money(m)
