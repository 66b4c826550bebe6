# storefront/upload/routes.py
import os

from flask import current_app, request, send_from_directory
from loguru import logger
from werkzeug.utils import secure_filename

from . import bp
from ..errors import BadRequest
from ..utils.api import ok
from ..utils.decorators import admin_required

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}


def _allowed(filename: str) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS


def save_blob(filename: str, payload: bytes) -> tuple[str, str]:
    """Write ``payload`` under UPLOAD_FOLDER; returns (public url, stored name)."""
    name = secure_filename(filename or "")
    if not name:
        raise BadRequest("filename is required")
    if not _allowed(name):
        raise BadRequest("Unsupported file type", {"allowed": sorted(ALLOWED_EXTENSIONS)})
    if not payload:
        raise BadRequest("Request body is empty")

    upload_dir = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(upload_dir, exist_ok=True)

    base, ext = os.path.splitext(name)
    abs_path = os.path.join(upload_dir, name)
    counter = 1
    while os.path.exists(abs_path):
        name = f"{base}-{counter}{ext}"
        abs_path = os.path.join(upload_dir, name)
        counter += 1

    with open(abs_path, "wb") as fh:
        fh.write(payload)
    logger.info("stored upload {} ({} bytes)", name, len(payload))

    prefix = current_app.config["UPLOAD_URL_PREFIX"].rstrip("/")
    return f"{prefix}/{name}", name


@bp.post("")
@admin_required
def upload():
    url, pathname = save_blob(request.args.get("filename"), request.get_data())
    return ok("File uploaded", {"url": url, "pathname": pathname}, status=201)


def serve_upload(filename):
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)
