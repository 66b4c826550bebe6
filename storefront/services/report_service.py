# storefront/services/report_service.py
"""Read-only admin rollups, recomputed on every call."""
from sqlalchemy import func

from ..errors import BadRequest
from ..extensions import db
from ..model import Order, Product
from ..utils.money import D, ZERO, round_money, to_string_money


def low_stock(threshold=None) -> list[Product]:
    """Active, quantity-tracked products at or below the threshold, lowest stock first.

    Without an explicit threshold each product is compared with its own
    ``low_stock_threshold``.
    """
    q = Product.query.filter(Product.active.is_(True), Product.track_quantity.is_(True))
    if threshold is None:
        q = q.filter(Product.stock <= Product.low_stock_threshold)
    else:
        try:
            threshold = int(threshold)
        except (TypeError, ValueError):
            raise BadRequest("threshold must be an integer")
        q = q.filter(Product.stock <= threshold)
    return q.order_by(Product.stock.asc(), Product.name.asc()).all()


def order_stats() -> dict:
    rows = (
        db.session.query(Order.status, func.count(Order.id), func.sum(Order.total_amount))
        .group_by(Order.status)
        .order_by(Order.status)
        .all()
    )
    breakdown = []
    total_orders, total_revenue = 0, ZERO
    for status, count, total in rows:
        total = round_money(D(total))
        breakdown.append({"status": status, "count": count, "total": to_string_money(total)})
        total_orders += count
        total_revenue += total
    return {
        "total_orders": total_orders,
        "total_revenue": to_string_money(total_revenue),
        "status_breakdown": breakdown,
    }
