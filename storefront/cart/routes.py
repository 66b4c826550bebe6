# storefront/cart/routes.py
from flask import request

from . import bp
from ..services import cart_service
from ..utils.api import ok
from ..utils.decorators import current_user, login_required
from ..utils.params import json_body


@bp.get("")
@login_required
def get_cart():
    uid = current_user().id
    items = cart_service.get_items(uid)
    return ok("Cart", {"items": [it.as_api() for it in items], "summary": cart_service.summary(uid)})


@bp.post("/items")
@login_required
def add_item():
    data = json_body()
    item = cart_service.add_item(current_user().id, data.get("product_id"), data.get("quantity", 1))
    return ok("Item added to cart", {"item": item.as_api()}, status=201)


@bp.patch("/items/<item_id>")
@login_required
def update_item(item_id):
    item = cart_service.update_quantity(current_user().id, item_id, json_body().get("quantity"))
    if item is None:
        return ok("Item removed from cart", {"item": None})
    return ok("Cart updated", {"item": item.as_api()})


@bp.delete("/items/<item_id>")
@login_required
def remove_item(item_id):
    item = cart_service.remove_item(current_user().id, item_id)
    return ok("Item removed from cart", {"id": str(item.id)})


@bp.delete("")
@login_required
def clear_cart():
    cart_service.clear(current_user().id)
    return ok("Cart cleared")


@bp.get("/summary")
@login_required
def cart_summary():
    return ok("Cart summary", cart_service.summary(current_user().id))


@bp.get("/quote")
@login_required
def cart_quote():
    code = (request.args.get("coupon") or "").strip() or None
    return ok("Checkout quote", {"quote": cart_service.quote(current_user().id, code)})
