from flask import request

from . import bp
from ..services import coupon_service
from ..utils.api import ok
from ..utils.decorators import login_required


@bp.get("/<code>")
@login_required
def resolve_coupon(code):
    quote = coupon_service.resolve(code, request.args.get("subtotal", "0"))
    return ok("Coupon applied", {"coupon": quote.as_api()})
