from datetime import timedelta
import uuid

from flask import current_app
from flask_jwt_extended import create_access_token

from . import bp
from ..errors import Forbidden, Unauthorized
from ..extensions import db
from ..model import RefreshToken, User
from ..model.types import utcnow
from ..services import user_service
from ..utils.api import ok
from ..utils.decorators import current_user, login_required
from ..utils.params import json_body


# --- helper: create & persist a token pair ---
def _issue_tokens(user_id):
    RefreshToken.query.filter(
        RefreshToken.user_id == user_id, RefreshToken.expires_at < utcnow()
    ).delete(synchronize_session=False)

    access_token = create_access_token(identity=str(user_id))
    refresh_token_str = uuid.uuid4().hex
    db.session.add(RefreshToken(
        user_id=user_id,
        token=refresh_token_str,
        expires_at=utcnow() + timedelta(days=current_app.config["REFRESH_TOKEN_TTL_DAYS"]),
    ))
    return access_token, refresh_token_str


@bp.post("/register")
def register():
    data = json_body()
    user = user_service.signup(data.get("name"), data.get("email"), data.get("password"), data.get("phone"))
    return ok("Account created successfully", {"user": user.as_dict()}, status=201)


@bp.post("/login")
def login():
    data = json_body()
    user = user_service.authenticate(data.get("email"), data.get("password"))

    access_token, token_str = _issue_tokens(user.id)
    db.session.commit()

    return ok("You've logged in successfully", {
        "user": user.as_dict(),
        "user_logged_in": True,
        "token": access_token,
        "refresh_token": token_str,
    })


@bp.post("/refresh")
def refresh():
    token_str = json_body().get("refresh_token")
    if not token_str:
        raise Unauthorized("refresh_token is required")

    refresh_row = RefreshToken.query.filter_by(token=token_str).first()
    if not refresh_row or refresh_row.expires_at < utcnow():
        raise Unauthorized("Invalid or expired refresh token")

    user = db.session.get(User, refresh_row.user_id)
    if user is None:
        raise Unauthorized("Invalid or expired refresh token")
    if user.blocked:
        raise Forbidden("Account is blocked")

    # single-use: the presented token is gone before the new pair exists
    db.session.delete(refresh_row)
    db.session.flush()
    new_access, new_refresh = _issue_tokens(user.id)
    db.session.commit()

    return ok("Token refreshed", {"token": new_access, "refresh_token": new_refresh})


@bp.get("/me")
@login_required
def me():
    return ok("Current user", {"user": current_user().as_dict()})
