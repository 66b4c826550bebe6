# storefront/utils/params.py
from flask import request

from ..errors import BadRequest


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def arg_int(name, default):
    raw = request.args.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise BadRequest(f"{name} must be an integer")


def arg_bool(name, default=None):
    raw = request.args.get(name)
    if raw in (None, ""):
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def as_quantity(value, name="quantity") -> int:
    """Whole-number quantity; floats with a fractional part and booleans are rejected."""
    if isinstance(value, bool):
        raise BadRequest(f"{name} must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise BadRequest(f"{name} must be a whole number")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"{name} must be an integer")
