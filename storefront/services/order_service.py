# storefront/services/order_service.py
"""
Order placement and order reads.

``create_order`` validates every line against the current catalog before
writing anything, prices lines from ``Product.price`` (never from the
caller) and performs the order insert, item inserts, initial history entry
and stock decrements in one transaction.
"""
from __future__ import annotations

import secrets
import string
import time

from loguru import logger
from sqlalchemy import update

from ..errors import ApiError, BadRequest, InsufficientStock, NotFound, Unavailable, wrap_unexpected
from ..extensions import db
from ..model import CartItem, Order, OrderItem, Product
from ..model.order import ORDER_STATUSES, PAYMENT_METHODS
from ..model.types import utcnow
from ..utils.money import D, ZERO, round_money
from ..utils.params import as_quantity
from . import order_status
from .catalog_service import parse_id

ADDRESS_REQUIRED = ("first_name", "last_name", "address_line1", "city", "state", "postal_code", "country")
ADDRESS_OPTIONAL = ("company", "phone", "address_line2")

_BASE36 = string.digits + string.ascii_uppercase


def generate_order_number() -> str:
    suffix = "".join(secrets.choice(_BASE36) for _ in range(5))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


def clean_address(raw, label: str) -> dict:
    """Validated copy of an address payload; the copy is what gets stored."""
    if not isinstance(raw, dict):
        raise BadRequest(f"{label} is required")
    missing = [f for f in ADDRESS_REQUIRED if not str(raw.get(f) or "").strip()]
    if missing:
        raise BadRequest(f"{label} is missing: {', '.join(missing)}", {"fields": missing})
    snapshot = {f: str(raw[f]).strip() for f in ADDRESS_REQUIRED}
    for f in ADDRESS_OPTIONAL:
        snapshot[f] = (str(raw[f]).strip() or None) if raw.get(f) is not None else None
    return snapshot


def _merge_lines(items) -> dict:
    """{product_id: quantity}, preserving first-seen order."""
    if not isinstance(items, list) or not items:
        raise BadRequest("At least one item is required")
    lines: dict = {}
    for raw in items:
        if not isinstance(raw, dict):
            raise BadRequest("Invalid item")
        pid = parse_id(raw.get("product_id"), "product_id")
        qty = as_quantity(raw.get("quantity"))
        if qty < 1:
            raise BadRequest("quantity must be >= 1")
        lines[pid] = lines.get(pid, 0) + qty
    return lines


def _validate(lines: dict, products: dict):
    for pid, qty in lines.items():
        product = products.get(pid)
        if product is None:
            raise NotFound(f"Product {pid} not found", {"product_id": str(pid)})
        if not product.active:
            raise Unavailable(f"Product {product.name} is not available", {"product_id": str(pid)})
        if product.track_quantity and product.stock < qty:
            raise InsufficientStock(f"Insufficient stock for {product.name}",
                                    {"product_id": str(pid), "available": product.stock})


def create_order(user_id, items=None, payment_method=None, shipping_address=None,
                 billing_address=None, customer_notes=None) -> Order:
    if payment_method not in PAYMENT_METHODS:
        raise BadRequest("payment_method must be one of: " + ", ".join(PAYMENT_METHODS))
    shipping = clean_address(shipping_address, "shipping_address")
    billing = clean_address(billing_address, "billing_address") if billing_address else dict(shipping)

    from_cart = items is None
    if from_cart:
        cart_lines = CartItem.query.filter_by(user_id=user_id).all()
        if not cart_lines:
            raise BadRequest("cart is empty")
        items = [{"product_id": str(c.product_id), "quantity": c.quantity} for c in cart_lines]
    lines = _merge_lines(items)

    try:
        products = {
            p.id: p
            for p in Product.query.filter(Product.id.in_(list(lines))).with_for_update().all()
        }
        _validate(lines, products)

        subtotal = round_money(sum((D(products[pid].price) * qty for pid, qty in lines.items()), ZERO))
        order = Order(
            order_number=generate_order_number(),
            user_id=user_id,
            status="pending",
            payment_status="pending",
            payment_method=payment_method,
            subtotal=subtotal,
            tax_amount=ZERO,
            shipping_amount=ZERO,
            discount_amount=ZERO,
            total_amount=subtotal,
            shipping_address=shipping,
            billing_address=billing,
            customer_notes=customer_notes,
        )
        db.session.add(order)
        db.session.flush()

        for pid, qty in lines.items():
            p = products[pid]
            unit_price = round_money(D(p.price))
            order.items.append(OrderItem(
                product_id=pid,
                product_name=p.name,
                product_sku=p.sku,
                product_image=p.primary_image,
                quantity=qty,
                unit_price=unit_price,
                total_price=round_money(unit_price * qty),
                stock_deducted=p.track_quantity,
            ))

        order_status.record(order, "pending", "Order created", True, user_id)

        for pid, qty in lines.items():
            if not products[pid].track_quantity:
                continue
            result = db.session.execute(
                update(Product)
                .where(Product.id == pid, Product.stock >= qty)
                .values(stock=Product.stock - qty, updated_at=utcnow())
            )
            if result.rowcount != 1:
                raise InsufficientStock(f"{products[pid].name} just sold out", {"product_id": str(pid)})

        if from_cart:
            CartItem.query.filter_by(user_id=user_id).delete(synchronize_session=False)

        db.session.commit()
    except ApiError:
        db.session.rollback()
        raise
    except Exception as e:
        db.session.rollback()
        raise wrap_unexpected("Failed to create order", e)

    logger.info("order {} created for user {}: {} lines, total {}",
                order.order_number, user_id, len(lines), order.total_amount)
    return order


# ---------- customer reads / cancel ----------

def list_user_orders(user_id, limit=10, offset=0, status=None) -> list[Order]:
    if not 1 <= limit <= 50:
        raise BadRequest("limit must be between 1 and 50")
    if offset < 0:
        raise BadRequest("offset must be >= 0")
    q = Order.query.filter(Order.user_id == user_id)
    if status:
        if status not in ORDER_STATUSES:
            raise BadRequest("Invalid status")
        q = q.filter(Order.status == status)
    return q.order_by(Order.created_at.desc()).limit(limit).offset(offset).all()


def get_user_order(user_id, order_id) -> Order:
    order = db.session.get(Order, parse_id(order_id, "order id"))
    if not order or order.user_id != user_id:
        raise NotFound("Order not found")
    return order


def cancel_order(user_id, order_id, reason: str | None = None) -> Order:
    order = get_user_order(user_id, order_id)
    if order.status not in order_status.CANCELLABLE:
        raise BadRequest("Order cannot be cancelled", {"status": order.status})
    return order_status.transition(
        order, "cancelled",
        actor_id=user_id,
        comment=reason or "Cancelled by customer",
        notify_customer=True,
    )


# ---------- admin ----------

def list_all_orders(status=None, search=None, limit=20, offset=0) -> tuple[list[Order], int]:
    if not 1 <= limit <= 100:
        raise BadRequest("limit must be between 1 and 100")
    if offset < 0:
        raise BadRequest("offset must be >= 0")
    q = Order.query
    if status:
        if status not in ORDER_STATUSES:
            raise BadRequest("Invalid status")
        q = q.filter(Order.status == status)
    if search:
        q = q.filter(Order.order_number.ilike(f"%{search}%"))
    total = q.count()
    return q.order_by(Order.created_at.desc()).limit(limit).offset(offset).all(), total


def get_order(order_id) -> Order:
    order = db.session.get(Order, parse_id(order_id, "order id"))
    if not order:
        raise NotFound("Order not found")
    return order


def update_status(admin_id, order_id, status, comment=None, notify_customer=True,
                  tracking_number=None) -> Order:
    order = get_order(order_id)
    return order_status.transition(
        order, status,
        actor_id=admin_id,
        comment=comment,
        notify_customer=bool(notify_customer),
        tracking_number=tracking_number,
    )
