# storefront/services/coupon_service.py
"""Coupon Resolver: code lookup plus discount arithmetic, nothing else."""
from dataclasses import dataclass
from decimal import Decimal

from loguru import logger
from sqlalchemy import func

from ..errors import BadRequest, Conflict, NotFound
from ..extensions import db
from ..model import Coupon
from ..model.coupon import COUPON_TYPES
from ..utils.money import D, ZERO, parse_money, round_money, to_string_money


@dataclass(frozen=True)
class CouponQuote:
    code: str
    type: str
    value: Decimal
    discount: Decimal
    free_shipping: bool

    def as_api(self):
        return {
            "code": self.code,
            "type": self.type,
            "value": to_string_money(self.value),
            "discount": to_string_money(self.discount),
            "free_shipping": self.free_shipping,
        }


def find_coupon(code: str) -> Coupon:
    code = (code or "").strip()
    if not code:
        raise BadRequest("code is required")
    coupon = Coupon.query.filter(func.upper(Coupon.code) == code.upper()).first()
    if not coupon:
        raise NotFound("Coupon not found")
    return coupon


def discount_for(coupon_type: str, value, subtotal) -> Decimal:
    value, subtotal = D(value), D(subtotal)
    if coupon_type == "percentage":
        return round_money(subtotal * value / Decimal(100))
    if coupon_type == "fixed":
        # a fixed amount never takes the order below zero
        return round_money(max(ZERO, min(value, subtotal)))
    return ZERO


def resolve(code: str, subtotal) -> CouponQuote:
    subtotal = parse_money(subtotal, "subtotal")
    if subtotal < 0:
        raise BadRequest("subtotal must be >= 0")

    coupon = find_coupon(code)
    quote = CouponQuote(
        code=coupon.code,
        type=coupon.type,
        value=D(coupon.value),
        discount=discount_for(coupon.type, coupon.value, subtotal),
        free_shipping=coupon.type == "free_shipping",
    )
    logger.debug("coupon {} resolved against {}: {}", quote.code, subtotal, quote.discount)
    return quote


def create_coupon(code: str, ctype: str, value, name: str | None = None, description: str | None = None) -> Coupon:
    code = (code or "").strip().upper()
    ctype = (ctype or "").strip().lower()
    if not code:
        raise BadRequest("code is required")
    if ctype not in COUPON_TYPES:
        raise BadRequest("type must be one of: " + ", ".join(COUPON_TYPES))
    value = parse_money(value, "value")
    if value < 0 or (ctype == "percentage" and value > 100):
        raise BadRequest("value out of range")
    if Coupon.query.filter(func.upper(Coupon.code) == code).first():
        raise Conflict("Coupon code already exists")

    c = Coupon(code=code, type=ctype, value=value, name=name or code, description=description)
    db.session.add(c)
    db.session.commit()
    return c
