# storefront/services/order_status.py
"""
Order status lifecycle.

TRANSITIONS is the only authority on which status changes are allowed; the
customer cancel path and the admin status update both go through
``transition()``. Every change appends one OrderStatusHistory row and
``Order.status`` is kept as a cache of the latest entry.
"""
from loguru import logger
from sqlalchemy import update

from ..errors import BadRequest, InvalidTransition
from ..extensions import db
from ..model import Order, OrderStatusHistory, Product
from ..model.order import ORDER_STATUSES
from ..model.types import utcnow

TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"shipped", "cancelled"},
    "shipped": {"delivered"},
    "delivered": {"refunded"},
    "cancelled": set(),
    "refunded": set(),
}

CANCELLABLE = frozenset(s for s, targets in TRANSITIONS.items() if "cancelled" in targets)


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, set())


def record(order: Order, status: str, comment: str | None, notify_customer: bool, actor_id) -> OrderStatusHistory:
    entry = OrderStatusHistory(
        order_id=order.id,
        status=status,
        comment=comment,
        notify_customer=notify_customer,
        created_by=actor_id,
    )
    db.session.add(entry)
    return entry


def _restore_stock(order: Order):
    for item in order.items:
        if not item.stock_deducted or item.product_id is None:
            continue
        db.session.execute(
            update(Product)
            .where(Product.id == item.product_id)
            .values(stock=Product.stock + item.quantity, updated_at=utcnow())
        )
        logger.info("order {}: restored {} x {}", order.order_number, item.quantity, item.product_id)


def transition(order: Order, target: str, *, actor_id, comment: str | None = None,
               notify_customer: bool = True, tracking_number: str | None = None) -> Order:
    """Move ``order`` to ``target`` and apply the side effects; commits."""
    if target not in ORDER_STATUSES:
        raise BadRequest("Invalid status")
    if not can_transition(order.status, target):
        raise InvalidTransition(f"Order cannot move from {order.status} to {target}",
                                {"from": order.status, "to": target})

    previous = order.status
    try:
        # compare-and-set: a concurrent transition that got here first leaves rowcount at 0
        result = db.session.execute(
            update(Order)
            .where(Order.id == order.id, Order.status == previous)
            .values(status=target, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidTransition(f"Order {order.order_number} was changed concurrently",
                                    {"from": previous, "to": target})

        if target == "cancelled":
            _restore_stock(order)
        elif target == "shipped" and tracking_number:
            order.tracking_number = tracking_number
        elif target == "delivered":
            order.delivered_at = utcnow()
        elif target == "refunded":
            order.payment_status = "refunded"

        order.status = target
        record(order, target, comment, notify_customer, actor_id)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("order {}: {} -> {}", order.order_number, previous, target)
    return order
