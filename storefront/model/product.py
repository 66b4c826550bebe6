# storefront/model/product.py
import uuid

from ..extensions import db
from ..utils.money import opt_money, to_string_money
from .types import GUID, iso, utcnow


class Product(db.Model):
    __tablename__ = "product"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(255), nullable=False, index=True)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=False, default="")
    short_description = db.Column(db.String(500))
    sku = db.Column(db.String(100), unique=True)

    price = db.Column(db.Numeric(10, 2), nullable=False)
    original_price = db.Column(db.Numeric(10, 2))
    cost_price = db.Column(db.Numeric(10, 2))

    category_id = db.Column(GUID(), db.ForeignKey("category.id"), nullable=True, index=True)

    stock = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=10)

    tags = db.Column(db.JSON, nullable=False, default=list)
    featured = db.Column(db.Boolean, nullable=False, default=False)
    active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    digital = db.Column(db.Boolean, nullable=False, default=False)
    track_quantity = db.Column(db.Boolean, nullable=False, default=True)
    allow_backorder = db.Column(db.Boolean, nullable=False, default=False)

    meta_title = db.Column(db.String(255))
    meta_description = db.Column(db.Text)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_product_stock_nonnegative"),
    )

    images = db.relationship(
        "ProductImage",
        backref="product",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="[ProductImage.sort_order.asc(), ProductImage.is_primary.desc()]",
    )

    @property
    def primary_image(self) -> str | None:
        for img in self.images:
            if img.is_primary:
                return img.url
        return self.images[0].url if self.images else None

    def as_api(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "short_description": self.short_description,
            "sku": self.sku,
            "price": to_string_money(self.price),
            "original_price": opt_money(self.original_price),
            "cost_price": opt_money(self.cost_price),
            "category_id": str(self.category_id) if self.category_id else None,
            "category": self.category.as_brief() if self.category else None,
            "stock": self.stock,
            "low_stock_threshold": self.low_stock_threshold,
            "tags": self.tags or [],
            "featured": self.featured,
            "active": self.active,
            "digital": self.digital,
            "track_quantity": self.track_quantity,
            "allow_backorder": self.allow_backorder,
            "meta_title": self.meta_title,
            "meta_description": self.meta_description,
            "primary_image": self.primary_image,
            "images": [img.as_api() for img in self.images],
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


class ProductImage(db.Model):
    __tablename__ = "product_image"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    product_id = db.Column(GUID(), db.ForeignKey("product.id", ondelete="CASCADE"), nullable=False, index=True)
    url = db.Column(db.String(500), nullable=False)
    alt_text = db.Column(db.String(255))
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_primary = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def as_api(self):
        return {
            "id": str(self.id),
            "url": self.url,
            "alt_text": self.alt_text,
            "sort_order": self.sort_order,
            "is_primary": self.is_primary,
        }
