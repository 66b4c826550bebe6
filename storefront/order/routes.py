# storefront/order/routes.py
from flask import request

from . import bp
from ..services import order_service
from ..utils.api import ok
from ..utils.decorators import admin_required, current_user, login_required
from ..utils.params import arg_int, json_body


# ---------- customer ----------

@bp.post("")
@login_required
def create_order():
    data = json_body()
    order = order_service.create_order(
        current_user().id,
        items=data.get("items"),
        payment_method=data.get("payment_method"),
        shipping_address=data.get("shipping_address"),
        billing_address=data.get("billing_address"),
        customer_notes=data.get("customer_notes"),
    )
    return ok("Order placed", {"order": order.as_api()}, status=201)


@bp.get("/mine")
@login_required
def my_orders():
    orders = order_service.list_user_orders(
        current_user().id,
        limit=arg_int("limit", 10),
        offset=arg_int("offset", 0),
        status=request.args.get("status") or None,
    )
    return ok("Orders", {"orders": [o.as_summary() for o in orders]})


@bp.get("/<order_id>")
@login_required
def get_my_order(order_id):
    order = order_service.get_user_order(current_user().id, order_id)
    return ok("Order", {"order": order.as_api()})


@bp.post("/<order_id>/cancel")
@login_required
def cancel_order(order_id):
    order = order_service.cancel_order(current_user().id, order_id, json_body().get("reason"))
    return ok("Order cancelled", {"order": order.as_api()})


# ---------- admin ----------

@bp.get("/admin")
@admin_required
def all_orders():
    orders, total = order_service.list_all_orders(
        status=request.args.get("status") or None,
        search=(request.args.get("search") or "").strip() or None,
        limit=arg_int("limit", 20),
        offset=arg_int("offset", 0),
    )
    return ok("Orders", {"orders": [o.as_summary() for o in orders], "total": total})


@bp.get("/admin/<order_id>")
@admin_required
def get_any_order(order_id):
    return ok("Order", {"order": order_service.get_order(order_id).as_api()})


@bp.patch("/admin/<order_id>/status")
@admin_required
def update_status(order_id):
    data = json_body()
    order = order_service.update_status(
        current_user().id,
        order_id,
        data.get("status"),
        comment=data.get("comment"),
        notify_customer=data.get("notify_customer", True),
        tracking_number=data.get("tracking_number"),
    )
    return ok("Order status updated", {"order": order.as_api()})
