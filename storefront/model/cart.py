# storefront/model/cart.py
from __future__ import annotations
import uuid

from ..extensions import db
from ..utils.money import D, round_money, to_string_money, opt_money
from .types import GUID, iso, utcnow

MAX_LINE_QUANTITY = 99


class CartItem(db.Model):
    __tablename__ = "cart_item"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = db.Column(GUID(), db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(GUID(), db.ForeignKey("product.id", ondelete="CASCADE"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.UniqueConstraint("user_id", "product_id", name="uq_cart_item_user_product"),
    )

    product = db.relationship("Product", lazy="joined")

    # ---- price helpers ----
    def line_subtotal_dec(self):
        return round_money(D(self.product.price) * self.quantity)

    def line_savings_dec(self):
        if self.product.original_price is None:
            return D(0)
        return round_money((D(self.product.original_price) - D(self.product.price)) * self.quantity)

    def as_api(self):
        p = self.product
        return {
            "id": str(self.id),
            "product_id": str(self.product_id),
            "quantity": self.quantity,
            "product": {
                "id": str(p.id),
                "name": p.name,
                "slug": p.slug,
                "price": to_string_money(p.price),
                "original_price": opt_money(p.original_price),
                "image": p.primary_image,
                "stock": p.stock,
                "category_id": str(p.category_id) if p.category_id else None,
            },
            "subtotal": to_string_money(self.line_subtotal_dec()),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


class WishlistItem(db.Model):
    __tablename__ = "wishlist_item"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = db.Column(GUID(), db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(GUID(), db.ForeignKey("product.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint("user_id", "product_id", name="uq_wishlist_item_user_product"),
    )

    product = db.relationship("Product", lazy="joined")

    def as_api(self):
        p = self.product
        return {
            "id": str(self.id),
            "created_at": iso(self.created_at),
            "product": {
                "id": str(p.id),
                "name": p.name,
                "slug": p.slug,
                "price": to_string_money(p.price),
                "original_price": opt_money(p.original_price),
                "stock": p.stock,
                "active": p.active,
                "image": p.primary_image,
                "category": p.category.as_brief() if p.category else None,
            },
        }
