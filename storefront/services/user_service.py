# storefront/services/user_service.py
import re

from loguru import logger
from sqlalchemy import or_
from werkzeug.security import check_password_hash, generate_password_hash

from ..errors import BadRequest, Conflict, Forbidden, NotFound, Unauthorized
from ..extensions import db
from ..model import Address, User
from .catalog_service import parse_id

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
ADDRESS_TYPES = ("shipping", "billing")
_ADDRESS_REQUIRED = ("first_name", "last_name", "address_line1", "city", "state", "postal_code", "country")
_ADDRESS_FIELDS = _ADDRESS_REQUIRED + ("company", "phone", "address_line2")


# ---------- accounts ----------

def signup(name, email, password, phone=None, role="user") -> User:
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name:
        raise BadRequest("Name is required")
    if not EMAIL_RE.match(email):
        raise BadRequest("Invalid email address")
    if not password or len(password) < 6:
        raise BadRequest("Password must be at least 6 characters")
    if User.query.filter_by(email=email).first():
        raise Conflict("User with this email already exists")

    user = User(
        name=name,
        email=email,
        password_hash=generate_password_hash(password),
        phone=phone or None,
        role=role,
    )
    db.session.add(user)
    db.session.commit()
    logger.info("user {} signed up ({})", user.id, role)
    return user


def authenticate(email, password) -> User:
    email = (email or "").strip().lower()
    if not email or not password:
        raise BadRequest("Email and password are required")
    user = User.query.filter_by(email=email).first()
    if not user or not check_password_hash(user.password_hash, password):
        raise Unauthorized("Invalid email or password")
    if user.blocked:
        raise Forbidden("Account is blocked")
    return user


def get_user(user_id) -> User:
    user = db.session.get(User, parse_id(user_id, "user id"))
    if not user:
        raise NotFound("User not found")
    return user


def update_profile(user: User, name, phone=None) -> User:
    name = (name or "").strip()
    if not name:
        raise BadRequest("Name is required")
    user.name = name
    user.phone = phone or None
    db.session.commit()
    return user


# ---------- addresses ----------

def _unset_defaults(user_id, address_type):
    Address.query.filter_by(user_id=user_id, type=address_type).update(
        {"is_default": False}, synchronize_session="fetch"
    )


def _owned_address(user_id, address_id) -> Address:
    address = db.session.get(Address, parse_id(address_id, "address id"))
    if not address or address.user_id != user_id:
        raise NotFound("Address not found")
    return address


def _apply_address(address: Address, data: dict, partial: bool):
    if "type" in data or not partial:
        address_type = data.get("type") or "shipping"
        if address_type not in ADDRESS_TYPES:
            raise BadRequest("type must be 'shipping' or 'billing'")
        address.type = address_type
    for field in _ADDRESS_FIELDS:
        if field not in data:
            continue
        value = data.get(field)
        value = str(value).strip() if value is not None else None
        if field in _ADDRESS_REQUIRED and not value:
            raise BadRequest(f"{field} is required")
        setattr(address, field, value or None)
    if not partial:
        missing = [f for f in _ADDRESS_REQUIRED if not getattr(address, f)]
        if missing:
            raise BadRequest(f"Missing address fields: {', '.join(missing)}", {"fields": missing})


def list_addresses(user_id, address_type=None) -> list[Address]:
    q = Address.query.filter_by(user_id=user_id)
    if address_type:
        if address_type not in ADDRESS_TYPES:
            raise BadRequest("type must be 'shipping' or 'billing'")
        q = q.filter_by(type=address_type)
    return q.order_by(Address.is_default.desc(), Address.updated_at.desc()).all()


def get_address(user_id, address_id) -> Address:
    return _owned_address(user_id, address_id)


def create_address(user_id, data: dict) -> Address:
    address = Address(user_id=user_id)
    _apply_address(address, data, partial=False)
    if data.get("is_default"):
        _unset_defaults(user_id, address.type)
        address.is_default = True
    db.session.add(address)
    db.session.commit()
    return address


def update_address(user_id, address_id, data: dict) -> Address:
    address = _owned_address(user_id, address_id)
    _apply_address(address, data, partial=True)
    if data.get("is_default"):
        _unset_defaults(user_id, address.type)
        address.is_default = True
    elif "is_default" in data:
        address.is_default = False
    db.session.commit()
    return address


def delete_address(user_id, address_id) -> Address:
    address = _owned_address(user_id, address_id)
    db.session.delete(address)
    db.session.commit()
    return address


def set_default_address(user_id, address_id) -> Address:
    address = _owned_address(user_id, address_id)
    _unset_defaults(user_id, address.type)
    address.is_default = True
    db.session.commit()
    return address


# ---------- admin ----------

def list_users(search=None, role=None, blocked=None, limit=20, offset=0) -> list[User]:
    if not 1 <= limit <= 100:
        raise BadRequest("limit must be between 1 and 100")
    q = User.query
    if search:
        like = f"%{search}%"
        q = q.filter(or_(User.name.ilike(like), User.email.ilike(like)))
    if role is not None:
        q = q.filter(User.role == role)
    if blocked is not None:
        q = q.filter(User.blocked.is_(bool(blocked)))
    return q.order_by(User.created_at.desc()).limit(limit).offset(max(offset, 0)).all()


def set_blocked(actor: User, user_id, blocked: bool) -> User:
    target = get_user(user_id)
    if target.id == actor.id:
        raise BadRequest("Cannot block yourself")
    target.blocked = bool(blocked)
    db.session.commit()
    logger.info("user {} blocked={} by {}", target.id, target.blocked, actor.id)
    return target


def set_role(actor: User, user_id, role: str) -> User:
    target = get_user(user_id)
    if target.id == actor.id and role != "admin":
        raise BadRequest("Cannot demote yourself")
    target.role = role
    db.session.commit()
    logger.info("user {} role={} by {}", target.id, role, actor.id)
    return target
