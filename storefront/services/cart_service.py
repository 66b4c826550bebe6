# storefront/services/cart_service.py
"""Cart Aggregate: one persisted set of (product, quantity) lines per user."""
from flask import current_app
from loguru import logger

from ..errors import BadRequest, InsufficientStock, NotFound, OutOfStock
from ..extensions import db
from ..model import CartItem, Product
from ..model.cart import MAX_LINE_QUANTITY
from ..utils.money import D, ZERO, round_money, to_string_money
from ..utils.params import as_quantity
from .catalog_service import parse_id
from .coupon_service import resolve


def _check_line(product: Product, quantity: int, error=OutOfStock):
    if quantity > MAX_LINE_QUANTITY:
        raise BadRequest(f"quantity cannot exceed {MAX_LINE_QUANTITY}")
    if product.track_quantity and product.stock < quantity:
        raise error("Insufficient stock for requested quantity",
                    {"product_id": str(product.id), "available": product.stock})


def _owned_item(user_id, item_id) -> CartItem:
    item = CartItem.query.filter_by(id=parse_id(item_id, "item id"), user_id=user_id).first()
    if not item:
        raise NotFound("Cart item not found")
    return item


def _lines(user_id):
    return CartItem.query.filter_by(user_id=user_id).order_by(CartItem.created_at.asc()).all()


def get_items(user_id) -> list[CartItem]:
    items, dangling = [], []
    for it in _lines(user_id):
        (items if it.product is not None else dangling).append(it)
    if dangling:
        for it in dangling:
            db.session.delete(it)
        db.session.commit()
        logger.info("dropped {} cart lines with deleted products for user {}", len(dangling), user_id)
    return items


def add_item(user_id, product_id, quantity=1) -> CartItem:
    quantity = as_quantity(quantity)
    if quantity < 1:
        raise BadRequest("quantity must be >= 1")

    product = db.session.get(Product, parse_id(product_id, "product id"))
    if not product or not product.active:
        raise NotFound("Product not found or inactive")

    item = CartItem.query.filter_by(user_id=user_id, product_id=product.id).first()
    new_qty = quantity + (item.quantity if item else 0)
    _check_line(product, new_qty)

    if item:
        item.quantity = new_qty
    else:
        item = CartItem(user_id=user_id, product_id=product.id, quantity=new_qty)
        db.session.add(item)
    db.session.commit()
    return item


def update_quantity(user_id, item_id, quantity) -> CartItem | None:
    """Set a line's quantity; zero or less removes the line and returns None."""
    quantity = as_quantity(quantity)
    item = _owned_item(user_id, item_id)
    if quantity <= 0:
        db.session.delete(item)
        db.session.commit()
        return None
    if item.product is None:
        raise NotFound("Product not found")
    _check_line(item.product, quantity, error=InsufficientStock)
    item.quantity = quantity
    db.session.commit()
    return item


def remove_item(user_id, item_id) -> CartItem:
    item = _owned_item(user_id, item_id)
    db.session.delete(item)
    db.session.commit()
    return item


def clear(user_id) -> None:
    CartItem.query.filter_by(user_id=user_id).delete(synchronize_session=False)
    db.session.commit()


def summary(user_id) -> dict:
    item_count, subtotal, savings = 0, D(0), D(0)
    for it in _lines(user_id):
        if it.product is None:
            continue
        item_count += it.quantity
        subtotal += it.line_subtotal_dec()
        savings += it.line_savings_dec()
    return {
        "item_count": item_count,
        "subtotal": to_string_money(subtotal),
        "savings": to_string_money(savings),
    }


def quote(user_id, coupon_code: str | None = None) -> dict:
    """Checkout preview: coupon, shipping and tax on top of the cart subtotal."""
    cfg = current_app.config
    subtotal = D(summary(user_id)["subtotal"])

    coupon = resolve(coupon_code, subtotal) if coupon_code else None
    discount = coupon.discount if coupon else ZERO

    if (coupon and coupon.free_shipping) or subtotal >= D(cfg["FREE_SHIPPING_THRESHOLD"]) or subtotal == 0:
        shipping = ZERO
    else:
        shipping = round_money(D(cfg["SHIPPING_FEE"]))

    taxable = max(ZERO, subtotal - discount)
    tax = round_money(taxable * D(cfg["TAX_RATE"]))
    total = max(ZERO, round_money(subtotal - discount + shipping + tax))

    return {
        "subtotal": to_string_money(subtotal),
        "discount": to_string_money(discount),
        "shipping": to_string_money(shipping),
        "tax": to_string_money(tax),
        "total": to_string_money(total),
        "coupon": coupon.as_api() if coupon else None,
    }
