# --- storefront/model/coupon.py ---
import uuid

from ..extensions import db
from ..utils.money import to_string_money
from .types import GUID, iso, utcnow

COUPON_TYPES = ("percentage", "fixed", "free_shipping")


class Coupon(db.Model):
    __tablename__ = "coupon"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)

    # percentage | fixed | free_shipping
    type = db.Column(db.String(50), nullable=False)
    value = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def as_api(self):
        return {
            "id": str(self.id),
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "value": to_string_money(self.value),
            "created_at": iso(self.created_at),
        }
