# ------- storefront/utils/decorators.py -------
import uuid
from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from ..errors import Forbidden, Unauthorized
from ..extensions import db
from ..model.user import User


def _load_user():
    try:
        verify_jwt_in_request()
    except (JWTExtendedException, PyJWTError) as e:
        raise Unauthorized("Unauthorized") from e
    try:
        uid = uuid.UUID(str(get_jwt_identity()))
    except (TypeError, ValueError):
        uid = None
    return db.session.get(User, uid) if uid else None


def current_user() -> User:
    """The user resolved by ``login_required`` for this request."""
    return g.current_user


def role_required(*roles, message: str | None = None):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            u = _load_user()
            if not u:
                raise Unauthorized("Unauthorized")
            if u.blocked:
                raise Forbidden("Account is blocked")
            if roles and u.role not in roles:
                raise Forbidden(message or "Forbidden")
            g.current_user = u
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def login_required(fn):
    return role_required()(fn)


def admin_required(fn):
    return role_required("admin", message="Admin access required")(fn)
