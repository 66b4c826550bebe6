from flask import request

from . import bp
from ..errors import BadRequest
from ..services import user_service
from ..utils.api import ok
from ..utils.decorators import admin_required, current_user, login_required
from ..utils.params import arg_bool, arg_int, json_body


# ---------- profile ----------

@bp.get("/me")
@login_required
def get_profile():
    return ok("Profile", {"user": current_user().as_dict()})


@bp.put("/me")
@login_required
def update_profile():
    data = json_body()
    user = user_service.update_profile(current_user(), data.get("name"), data.get("phone"))
    return ok("Profile updated", {"user": user.as_dict()})


# ---------- addresses ----------

@bp.get("/me/addresses")
@login_required
def list_addresses():
    addresses = user_service.list_addresses(current_user().id, request.args.get("type") or None)
    return ok("Addresses", {"addresses": [a.as_dict() for a in addresses]})


@bp.get("/me/addresses/<address_id>")
@login_required
def get_address(address_id):
    return ok("Address", {"address": user_service.get_address(current_user().id, address_id).as_dict()})


@bp.post("/me/addresses")
@login_required
def create_address():
    address = user_service.create_address(current_user().id, json_body())
    return ok("Address created", {"address": address.as_dict()}, status=201)


@bp.put("/me/addresses/<address_id>")
@login_required
def update_address(address_id):
    address = user_service.update_address(current_user().id, address_id, json_body())
    return ok("Address updated", {"address": address.as_dict()})


@bp.delete("/me/addresses/<address_id>")
@login_required
def delete_address(address_id):
    address = user_service.delete_address(current_user().id, address_id)
    return ok("Address deleted", {"id": str(address.id)})


@bp.post("/me/addresses/<address_id>/default")
@login_required
def set_default_address(address_id):
    address = user_service.set_default_address(current_user().id, address_id)
    return ok("Default address updated", {"address": address.as_dict()})


# ---------- admin ----------

@bp.get("")
@admin_required
def list_users():
    users = user_service.list_users(
        search=(request.args.get("search") or "").strip() or None,
        role=request.args.get("role") or None,
        blocked=arg_bool("blocked"),
        limit=arg_int("limit", 20),
        offset=arg_int("offset", 0),
    )
    return ok("Users", {"users": [u.as_dict() for u in users]})


@bp.get("/<user_id>")
@admin_required
def get_user(user_id):
    return ok("User", {"user": user_service.get_user(user_id).as_dict()})


@bp.patch("/<user_id>/block")
@admin_required
def toggle_block(user_id):
    data = json_body()
    if not isinstance(data.get("blocked"), bool):
        raise BadRequest("blocked must be a boolean")
    user = user_service.set_blocked(current_user(), user_id, data["blocked"])
    return ok("User updated", {"user": user.as_dict()})


@bp.post("/<user_id>/promote")
@admin_required
def promote(user_id):
    user = user_service.set_role(current_user(), user_id, "admin")
    return ok("User promoted to admin", {"user": user.as_dict()})


@bp.post("/<user_id>/demote")
@admin_required
def demote(user_id):
    user = user_service.set_role(current_user(), user_id, "user")
    return ok("User demoted", {"user": user.as_dict()})
