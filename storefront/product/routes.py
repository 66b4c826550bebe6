from flask import request, send_file

from . import bp
from ..services import catalog_service
from ..utils.api import ok
from ..utils.decorators import admin_required
from ..utils.params import arg_bool, arg_int, json_body


# ---------- public ----------

@bp.get("")
def list_products():
    products = catalog_service.list_products(
        category_id=request.args.get("category_id"),
        featured=arg_bool("featured"),
        search=(request.args.get("search") or "").strip() or None,
        sort_by=request.args.get("sort_by", "created_at"),
        sort_order=request.args.get("sort_order", "desc"),
        limit=arg_int("limit", 24),
        offset=arg_int("offset", 0),
    )
    return ok("Products", {"products": [p.as_api() for p in products], "count": len(products)})


@bp.get("/<pid>")
def get_product(pid):
    return ok("Product", {"product": catalog_service.get_product(pid).as_api()})


@bp.get("/slug/<slug>")
def get_product_by_slug(slug):
    return ok("Product", {"product": catalog_service.get_product_by_slug(slug).as_api()})


# ---------- admin ----------

@bp.post("")
@admin_required
def create_product():
    product = catalog_service.create_product(json_body())
    return ok("Product created", {"product": product.as_api()}, status=201)


@bp.put("/<pid>")
@admin_required
def update_product(pid):
    product = catalog_service.update_product(pid, json_body())
    return ok("Product updated", {"product": product.as_api()})


@bp.delete("/<pid>")
@admin_required
def delete_product(pid):
    product = catalog_service.delete_product(pid)
    return ok("Product deleted", {"id": str(product.id)})


@bp.patch("/<pid>/toggle-active")
@admin_required
def toggle_active(pid):
    product = catalog_service.toggle_product_active(pid)
    return ok("Product status updated", {"product": product.as_api()})


@bp.patch("/<pid>/stock")
@admin_required
def update_stock(pid):
    product = catalog_service.update_stock(pid, json_body().get("stock"))
    return ok("Stock updated", {"product": product.as_api()})


@bp.post("/assign-category")
@admin_required
def assign_category():
    data = json_body()
    products = catalog_service.assign_to_category(data.get("product_ids"), data.get("category_id"))
    return ok("Products assigned", {"products": [p.as_api() for p in products]})


@bp.get("/export")
@admin_required
def export_products():
    """
    Export all products as an Excel file.
    """
    return send_file(
        catalog_service.export_products(),
        as_attachment=True,
        download_name="products_export.xlsx",
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
