from flask import Blueprint

bp = Blueprint("wishlist", __name__, url_prefix="/api/wishlist")

from . import routes  # noqa: E402,F401
