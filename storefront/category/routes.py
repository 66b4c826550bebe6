from . import bp
from ..errors import BadRequest
from ..services import catalog_service
from ..utils.api import ok
from ..utils.decorators import admin_required
from ..utils.params import json_body


@bp.get("")
def list_categories():
    categories = catalog_service.list_categories()
    return ok("Categories", {"categories": [c.as_dict() for c in categories]})


@bp.get("/featured")
def featured_categories():
    categories = catalog_service.list_categories(featured_only=True)
    return ok("Featured categories", {"categories": [c.as_dict() for c in categories]})


@bp.get("/<cid>")
def get_category(cid):
    return ok("Category", {"category": catalog_service.get_category(cid).as_dict()})


@bp.get("/slug/<slug>")
def get_category_by_slug(slug):
    return ok("Category", {"category": catalog_service.get_category_by_slug(slug).as_dict()})


@bp.post("")
@admin_required
def create_category():
    category = catalog_service.create_category(json_body())
    return ok("Category created", {"category": category.as_dict()}, status=201)


@bp.put("/<cid>")
@admin_required
def update_category(cid):
    category = catalog_service.update_category(cid, json_body())
    return ok("Category updated", {"category": category.as_dict()})


@bp.delete("/<cid>")
@admin_required
def delete_category(cid):
    category = catalog_service.delete_category(cid)
    return ok("Category deleted", {"id": str(category.id)})


@bp.patch("/<cid>/featured")
@admin_required
def toggle_featured(cid):
    data = json_body()
    if "featured" not in data:
        raise BadRequest("featured is required")
    category = catalog_service.toggle_category_featured(cid, data["featured"])
    return ok("Category updated", {"category": category.as_dict()})


@bp.put("/sort-order")
@admin_required
def update_sort_order():
    updates = json_body().get("updates")
    if not isinstance(updates, list):
        raise BadRequest("updates must be a list")
    catalog_service.update_category_sort_order(updates)
    return ok("Sort order updated")
