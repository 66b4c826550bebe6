# --- storefront/model/user.py ---
import uuid

from ..extensions import db
from .types import GUID, iso, utcnow


class User(db.Model):
    __tablename__ = "user"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(255), nullable=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False, default="")
    phone = db.Column(db.String(20), nullable=True)
    role = db.Column(db.String(50), nullable=False, default="user", index=True)  # user, admin
    blocked = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    addresses = db.relationship(
        "Address",
        backref="user",
        cascade="all, delete-orphan",
        lazy=True,
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def as_dict(self):
        return {
            "id": str(self.id),
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "role": self.role,
            "blocked": self.blocked,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


class RefreshToken(db.Model):
    __tablename__ = "refresh_token"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(GUID(), db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    expires_at = db.Column(db.DateTime, nullable=False)


class Address(db.Model):
    __tablename__ = "address"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = db.Column(GUID(), db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    type = db.Column(db.String(50), nullable=False, default="shipping")  # shipping, billing
    first_name = db.Column(db.String(255), nullable=False)
    last_name = db.Column(db.String(255), nullable=False)
    company = db.Column(db.String(255))
    phone = db.Column(db.String(20))
    address_line1 = db.Column(db.String(255), nullable=False)
    address_line2 = db.Column(db.String(255))
    city = db.Column(db.String(255), nullable=False)
    state = db.Column(db.String(255), nullable=False)
    postal_code = db.Column(db.String(20), nullable=False)
    country = db.Column(db.String(255), nullable=False, default="India")
    is_default = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    # fields copied into an order snapshot
    SNAPSHOT_FIELDS = (
        "first_name", "last_name", "company", "phone",
        "address_line1", "address_line2", "city", "state", "postal_code", "country",
    )

    def snapshot(self) -> dict:
        return {f: getattr(self, f) for f in self.SNAPSHOT_FIELDS}

    def as_dict(self):
        return {
            "id": str(self.id),
            "type": self.type,
            **self.snapshot(),
            "is_default": self.is_default,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
