from flask import request

from . import bp
from ..services import report_service
from ..utils.api import ok
from ..utils.decorators import admin_required


@bp.get("/low-stock")
@admin_required
def low_stock():
    threshold = request.args.get("threshold")
    products = report_service.low_stock(threshold if threshold not in (None, "") else None)
    return ok("Low stock products", {"products": [p.as_api() for p in products], "count": len(products)})


@bp.get("/order-stats")
@admin_required
def order_stats():
    return ok("Order statistics", report_service.order_stats())
