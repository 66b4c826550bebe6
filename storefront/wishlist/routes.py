from . import bp
from ..services import wishlist_service
from ..utils.api import ok
from ..utils.decorators import current_user, login_required
from ..utils.params import json_body


@bp.get("")
@login_required
def get_wishlist():
    items = wishlist_service.get_items(current_user().id)
    return ok("Wishlist", {"items": [w.as_api() for w in items]})


@bp.get("/count")
@login_required
def wishlist_count():
    return ok("Wishlist count", {"count": wishlist_service.count(current_user().id)})


@bp.get("/contains/<product_id>")
@login_required
def in_wishlist(product_id):
    return ok("Wishlist lookup", {"in_wishlist": wishlist_service.contains(current_user().id, product_id)})


@bp.post("")
@login_required
def add_item():
    item = wishlist_service.add_item(current_user().id, json_body().get("product_id"))
    return ok("Added to wishlist", {"item": item.as_api()}, status=201)


@bp.delete("/items/<item_id>")
@login_required
def remove_item(item_id):
    item = wishlist_service.remove_item(current_user().id, item_id)
    return ok("Removed from wishlist", {"id": str(item.id)})


@bp.delete("/products/<product_id>")
@login_required
def remove_by_product(product_id):
    item = wishlist_service.remove_by_product(current_user().id, product_id)
    return ok("Removed from wishlist", {"id": str(item.id)})


@bp.delete("")
@login_required
def clear_wishlist():
    wishlist_service.clear(current_user().id)
    return ok("Wishlist cleared")
