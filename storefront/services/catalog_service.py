# storefront/services/catalog_service.py
"""Catalog Store: products, categories and their images."""
from __future__ import annotations

from io import BytesIO

import pandas as pd
from loguru import logger
from sqlalchemy import asc, desc, or_, update
from sqlalchemy.exc import IntegrityError

from ..errors import BadRequest, Conflict, NotFound
from ..extensions import db
from ..model import Category, Product, ProductImage
from ..model.types import as_uuid
from ..utils.money import parse_money


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


PRODUCT_SORTS = {"name": Product.name, "price": Product.price, "created_at": Product.created_at}

# (field, caster) pairs accepted on create/update; price-like fields go through _money_field
_PRODUCT_FIELDS = [
    ("name", str), ("slug", str), ("description", str), ("short_description", str),
    ("sku", str), ("stock", int), ("low_stock_threshold", int), ("tags", list),
    ("featured", _flag), ("active", _flag), ("digital", _flag), ("track_quantity", _flag),
    ("allow_backorder", _flag), ("meta_title", str), ("meta_description", str),
]
_MONEY_FIELDS = ("price", "original_price", "cost_price")

_CATEGORY_FIELDS = [
    ("name", str), ("slug", str), ("description", str), ("icon", str), ("image", str),
    ("featured", _flag), ("active", _flag), ("sort_order", int),
    ("meta_title", str), ("meta_description", str),
]


# ---------- helpers ----------

def parse_id(value, what: str = "id"):
    try:
        return as_uuid(value)
    except (TypeError, ValueError, AttributeError):
        raise BadRequest(f"Invalid {what}")


def _money_field(field: str, value):
    if value is None or value == "":
        if field == "price":
            raise BadRequest("price is required")
        return None
    m = parse_money(value, field)
    if m < 0:
        raise BadRequest(f"{field} must be >= 0")
    return m


def _assign(obj, data: dict, fields):
    for field, caster in fields:
        if field not in data:
            continue
        value = data[field]
        if value is None:
            setattr(obj, field, None)
            continue
        try:
            value = caster(value)
        except (TypeError, ValueError):
            raise BadRequest(f"Invalid value for {field}")
        setattr(obj, field, value)


def _commit_unique(what: str):
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise Conflict(f"{what} with this slug or sku already exists") from e


def _replace_images(product: Product, urls):
    product.images.clear()
    for index, url in enumerate(urls or []):
        product.images.append(ProductImage(url=url, sort_order=index, is_primary=index == 0))


# ---------- products ----------

def list_products(category_id=None, featured=None, search=None, sort_by="created_at",
                  sort_order="desc", limit=24, offset=0):
    if sort_by not in PRODUCT_SORTS:
        raise BadRequest("sort_by must be one of: " + ", ".join(PRODUCT_SORTS))
    if sort_order not in ("asc", "desc"):
        raise BadRequest("sort_order must be 'asc' or 'desc'")
    if not 1 <= limit <= 100:
        raise BadRequest("limit must be between 1 and 100")
    if offset < 0:
        raise BadRequest("offset must be >= 0")

    q = Product.query.filter(Product.active.is_(True))
    if category_id:
        q = q.filter(Product.category_id == parse_id(category_id, "category_id"))
    if featured:
        q = q.filter(Product.featured.is_(True))
    if search:
        q = q.filter(Product.name.ilike(f"%{search}%"))

    direction = asc if sort_order == "asc" else desc
    return q.order_by(direction(PRODUCT_SORTS[sort_by])).limit(limit).offset(offset).all()


def get_product(product_id) -> Product:
    product = db.session.get(Product, parse_id(product_id, "product id"))
    if not product:
        raise NotFound("Product not found")
    return product


def get_product_by_slug(slug: str) -> Product:
    product = Product.query.filter_by(slug=slug).first()
    if not product:
        raise NotFound("Product not found")
    return product


def _check_category(category_id):
    if category_id is None:
        return None
    cid = parse_id(category_id, "category_id")
    if not db.session.get(Category, cid):
        raise NotFound("Category not found")
    return cid


def create_product(data: dict) -> Product:
    for required in ("name", "slug", "price"):
        if data.get(required) in (None, ""):
            raise BadRequest(f"{required} is required")

    product = Product()
    _assign(product, data, _PRODUCT_FIELDS)
    for field in _MONEY_FIELDS:
        setattr(product, field, _money_field(field, data.get(field)))
    if product.stock is None:
        product.stock = 0
    if product.stock < 0:
        raise BadRequest("stock must be >= 0")
    product.category_id = _check_category(data.get("category_id"))
    _replace_images(product, data.get("images"))

    db.session.add(product)
    _commit_unique("Product")
    logger.info("product {} created ({})", product.id, product.slug)
    return product


def update_product(product_id, data: dict) -> Product:
    product = get_product(product_id)
    _assign(product, data, _PRODUCT_FIELDS)
    for field in _MONEY_FIELDS:
        if field in data:
            setattr(product, field, _money_field(field, data.get(field)))
    if not product.name or not product.slug:
        raise BadRequest("name and slug cannot be empty")
    if product.stock is None or product.stock < 0:
        raise BadRequest("stock must be >= 0")
    if "category_id" in data:
        product.category_id = _check_category(data.get("category_id"))
    if "images" in data:
        _replace_images(product, data["images"])

    _commit_unique("Product")
    return product


def delete_product(product_id) -> Product:
    product = get_product(product_id)
    db.session.delete(product)
    db.session.commit()
    logger.info("product {} deleted", product.id)
    return product


def toggle_product_active(product_id) -> Product:
    product = get_product(product_id)
    product.active = not product.active
    db.session.commit()
    return product


def update_stock(product_id, stock) -> Product:
    try:
        stock = int(stock)
    except (TypeError, ValueError):
        raise BadRequest("stock must be an integer")
    if stock < 0:
        raise BadRequest("stock must be >= 0")
    product = get_product(product_id)
    product.stock = stock
    db.session.commit()
    return product


def assign_to_category(product_ids, category_id) -> list[Product]:
    if not product_ids:
        raise BadRequest("product_ids must not be empty")
    cid = _check_category(category_id)
    if cid is None:
        raise BadRequest("category_id is required")
    ids = [parse_id(pid, "product id") for pid in product_ids]
    db.session.execute(
        update(Product).where(Product.id.in_(ids)).values(category_id=cid)
    )
    db.session.commit()
    return Product.query.filter(Product.id.in_(ids)).all()


def export_products() -> BytesIO:
    """Whole catalog as an in-memory .xlsx workbook."""
    rows = [{
        "ID": str(p.id),
        "Name": p.name,
        "Slug": p.slug,
        "SKU": p.sku,
        "Price": float(p.price),
        "Original Price": float(p.original_price) if p.original_price is not None else None,
        "Stock": p.stock,
        "Low Stock Threshold": p.low_stock_threshold,
        "Track Quantity": p.track_quantity,
        "Active": p.active,
        "Featured": p.featured,
        "Category": p.category.name if p.category else None,
    } for p in Product.query.order_by(Product.name).all()]
    df = pd.DataFrame(rows)

    output = BytesIO()
    df.to_excel(output, index=False)
    output.seek(0)
    return output


# ---------- categories ----------

def list_categories(featured_only: bool = False):
    q = Category.query.filter(Category.active.is_(True))
    if featured_only:
        q = q.filter(Category.featured.is_(True))
    return q.order_by(Category.sort_order.asc(), Category.name.asc()).all()


def get_category(category_id) -> Category:
    category = db.session.get(Category, parse_id(category_id, "category id"))
    if not category:
        raise NotFound("Category not found")
    return category


def get_category_by_slug(slug: str) -> Category:
    category = Category.query.filter_by(slug=slug).first()
    if not category:
        raise NotFound("Category not found")
    return category


def create_category(data: dict) -> Category:
    if not (data.get("name") or "").strip():
        raise BadRequest("Name is required")
    if not (data.get("slug") or "").strip():
        raise BadRequest("Slug is required")
    category = Category()
    _assign(category, data, _CATEGORY_FIELDS)
    db.session.add(category)
    _commit_unique("Category")
    return category


def update_category(category_id, data: dict) -> Category:
    category = get_category(category_id)
    _assign(category, data, _CATEGORY_FIELDS)
    if not category.name or not category.slug:
        raise BadRequest("name and slug cannot be empty")
    _commit_unique("Category")
    return category


def delete_category(category_id) -> Category:
    category = get_category(category_id)
    if Product.query.filter_by(category_id=category.id).first():
        raise Conflict("cannot delete: category has products")
    db.session.delete(category)
    db.session.commit()
    return category


def toggle_category_featured(category_id, featured: bool) -> Category:
    category = get_category(category_id)
    category.featured = _flag(featured)
    db.session.commit()
    return category


def update_category_sort_order(updates) -> None:
    for u in updates or []:
        category = get_category(u.get("id"))
        try:
            category.sort_order = int(u.get("sort_order"))
        except (TypeError, ValueError):
            raise BadRequest("sort_order must be an integer")
    db.session.commit()
