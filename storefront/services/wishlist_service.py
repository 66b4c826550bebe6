# storefront/services/wishlist_service.py
from ..errors import Conflict, NotFound
from ..extensions import db
from ..model import Product, WishlistItem
from .catalog_service import parse_id


def get_items(user_id) -> list[WishlistItem]:
    rows = WishlistItem.query.filter_by(user_id=user_id).order_by(WishlistItem.created_at.desc()).all()
    dangling = [w for w in rows if w.product is None]
    for w in dangling:
        db.session.delete(w)
    if dangling:
        db.session.commit()
    return [w for w in rows if w.product is not None]


def count(user_id) -> int:
    return WishlistItem.query.filter_by(user_id=user_id).count()


def contains(user_id, product_id) -> bool:
    pid = parse_id(product_id, "product id")
    return WishlistItem.query.filter_by(user_id=user_id, product_id=pid).first() is not None


def add_item(user_id, product_id) -> WishlistItem:
    product = db.session.get(Product, parse_id(product_id, "product id"))
    if not product or not product.active:
        raise NotFound("Product not found or inactive")
    if WishlistItem.query.filter_by(user_id=user_id, product_id=product.id).first():
        raise Conflict("Item already in wishlist")
    item = WishlistItem(user_id=user_id, product_id=product.id)
    db.session.add(item)
    db.session.commit()
    return item


def remove_item(user_id, item_id) -> WishlistItem:
    item = WishlistItem.query.filter_by(id=parse_id(item_id, "item id"), user_id=user_id).first()
    if not item:
        raise NotFound("Wishlist item not found")
    db.session.delete(item)
    db.session.commit()
    return item


def remove_by_product(user_id, product_id) -> WishlistItem:
    item = WishlistItem.query.filter_by(user_id=user_id, product_id=parse_id(product_id, "product id")).first()
    if not item:
        raise NotFound("Item not found in wishlist")
    db.session.delete(item)
    db.session.commit()
    return item


def clear(user_id) -> None:
    WishlistItem.query.filter_by(user_id=user_id).delete(synchronize_session=False)
    db.session.commit()
