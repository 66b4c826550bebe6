# storefront/model/order.py
import uuid

from ..extensions import db
from ..utils.money import to_string_money
from .types import GUID, iso, utcnow

ORDER_STATUSES = ("pending", "confirmed", "shipped", "delivered", "cancelled", "refunded")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")
PAYMENT_METHODS = ("cod", "card", "upi", "wallet")


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    order_number = db.Column(db.String(50), unique=True, nullable=False, index=True)  # e.g. "ORD-1729332000000-7QX2K"
    user_id = db.Column(GUID(), db.ForeignKey("user.id"), nullable=False, index=True)

    status = db.Column(db.String(50), nullable=False, default="pending", index=True)
    payment_status = db.Column(db.String(50), nullable=False, default="pending")
    payment_method = db.Column(db.String(50), nullable=False)
    payment_id = db.Column(db.String(255))

    # Money snapshot
    subtotal = db.Column(db.Numeric(10, 2), nullable=False)
    tax_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    shipping_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    discount_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(10, 2), nullable=False)

    # Address snapshots (copies, never live references)
    shipping_address = db.Column(db.JSON, nullable=False)
    billing_address = db.Column(db.JSON)

    tracking_number = db.Column(db.String(255))
    estimated_delivery = db.Column(db.DateTime)
    delivered_at = db.Column(db.DateTime)

    customer_notes = db.Column(db.Text)
    admin_notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    items = db.relationship(
        "OrderItem",
        backref="order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    status_history = db.relationship(
        "OrderStatusHistory",
        backref="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderStatusHistory.seq.desc()",
    )

    def as_summary(self):
        return {
            "id": str(self.id),
            "order_number": self.order_number,
            "user_id": str(self.user_id),
            "status": self.status,
            "payment_status": self.payment_status,
            "payment_method": self.payment_method,
            "subtotal": to_string_money(self.subtotal),
            "tax_amount": to_string_money(self.tax_amount),
            "shipping_amount": to_string_money(self.shipping_amount),
            "discount_amount": to_string_money(self.discount_amount),
            "total_amount": to_string_money(self.total_amount),
            "shipping_address": self.shipping_address,
            "tracking_number": self.tracking_number,
            "estimated_delivery": iso(self.estimated_delivery),
            "delivered_at": iso(self.delivered_at),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }

    def as_api(self):
        return {
            **self.as_summary(),
            "billing_address": self.billing_address,
            "customer_notes": self.customer_notes,
            "admin_notes": self.admin_notes,
            "items": [i.as_api() for i in self.items],
            "status_history": [h.as_api() for h in self.status_history],
        }


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    order_id = db.Column(GUID(), db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(GUID(), db.ForeignKey("product.id", ondelete="SET NULL"), nullable=True, index=True)

    # Product snapshot
    product_name = db.Column(db.String(255), nullable=False)
    product_sku = db.Column(db.String(100))
    product_image = db.Column(db.String(500))

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(10, 2), nullable=False)
    total_price = db.Column(db.Numeric(10, 2), nullable=False)

    # whether creating the order took this quantity out of product.stock
    stock_deducted = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def as_api(self):
        return {
            "id": str(self.id),
            "product_id": str(self.product_id) if self.product_id else None,
            "product_name": self.product_name,
            "product_sku": self.product_sku,
            "product_image": self.product_image,
            "quantity": self.quantity,
            "unit_price": to_string_money(self.unit_price),
            "total_price": to_string_money(self.total_price),
        }


class OrderStatusHistory(db.Model):
    """Append-only audit log of status changes."""
    __tablename__ = "order_status_history"

    # integer key gives a stable insertion order even within one clock tick
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(GUID(), unique=True, nullable=False, default=uuid.uuid4)
    order_id = db.Column(GUID(), db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    status = db.Column(db.String(50), nullable=False)
    comment = db.Column(db.Text)
    notify_customer = db.Column(db.Boolean, nullable=False, default=False)
    created_by = db.Column(GUID(), db.ForeignKey("user.id"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    author = db.relationship("User", lazy="joined")

    def as_api(self):
        return {
            "id": str(self.id),
            "status": self.status,
            "comment": self.comment,
            "notify_customer": self.notify_customer,
            "created_at": iso(self.created_at),
            "created_by": {"id": str(self.author.id), "name": self.author.name} if self.author else None,
        }
