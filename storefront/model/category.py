# --- storefront/model/category.py ---
import uuid

from ..extensions import db
from .types import GUID, iso, utcnow


class Category(db.Model):
    __tablename__ = "category"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False, unique=True, index=True)
    description = db.Column(db.Text)
    icon = db.Column(db.String(10))        # emoji
    image = db.Column(db.String(500))
    featured = db.Column(db.Boolean, nullable=False, default=False)
    active = db.Column(db.Boolean, nullable=False, default=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    meta_title = db.Column(db.String(255))
    meta_description = db.Column(db.Text)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    products = db.relationship("Product", backref="category", lazy=True)

    def as_brief(self):
        return {"id": str(self.id), "name": self.name, "slug": self.slug}

    def as_dict(self):
        return {
            **self.as_brief(),
            "description": self.description,
            "icon": self.icon,
            "image": self.image,
            "featured": self.featured,
            "active": self.active,
            "sort_order": self.sort_order,
            "meta_title": self.meta_title,
            "meta_description": self.meta_description,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
