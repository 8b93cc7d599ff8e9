"""Storage endpoints: signed object download (local backend) and bucket probe."""
from __future__ import annotations

import mimetypes
from typing import Any

from flask import Blueprint, abort, jsonify, send_file

from lingocomics.errors import NotFoundError
from lingocomics.routes.errors import attach_error_handler
from lingocomics.storage.local import LocalStorageGateway
from lingocomics.startup.container import get_services
from lingocomics.utils.logging import get_logger

bp = Blueprint("lingocomics_storage", __name__)
attach_error_handler(bp)
LOG = get_logger("lingocomics.routes.storage")


@bp.route("/storage/signed/<path:token>", methods=["GET"])
def get_signed_object(token: str):
    storage = get_services().storage
    if not isinstance(storage, LocalStorageGateway):
        abort(404)
    try:
        target, object_path = storage.resolve_signed(token)
    except NotFoundError as exc:
        LOG.debug("Signed URL rejected: %s", exc)
        abort(404)
    mimetype, _ = mimetypes.guess_type(target.name)
    return send_file(
        str(target),
        mimetype=mimetype or "application/octet-stream",
        conditional=True,
        download_name=object_path.rsplit("/", 1)[-1],
    )


@bp.route("/api/storage-setup", methods=["GET"])
def storage_setup():
    services = get_services()
    buckets = services.storage.list_buckets()
    return jsonify({"message": "Successfully listed buckets", "bucket": services.bucket, "buckets": buckets})


def register_storage_blueprint(app: Any) -> None:
    if not getattr(app, "_lingocomics_storage_bp", None):
        app.register_blueprint(bp)
        setattr(app, "_lingocomics_storage_bp", bp)


__all__ = ["bp", "register_storage_blueprint"]
