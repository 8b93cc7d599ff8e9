"""Reading history API (GET list / POST upsert)."""
from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from lingocomics.errors import ValidationError
from lingocomics.routes.errors import attach_error_handler
from lingocomics.startup.container import get_services

bp = Blueprint("lingocomics_history", __name__, url_prefix="/api")
attach_error_handler(bp)


@bp.route("/reading-history", methods=["GET"])
def list_history():
    user_id = (request.args.get("userId") or "").strip()
    return jsonify(get_services().catalog.reading_history(user_id))


@bp.route("/reading-history", methods=["POST"])
def upsert_history():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("body", "JSON body is required")
    record = get_services().catalog.record_progress(
        payload.get("userId"),
        payload.get("comicId"),
        chapter_number=payload.get("chapterNumber", 1),
        page_number=payload.get("pageNumber", 1),
    )
    return jsonify(record)


def register_history_blueprint(app: Any) -> None:
    if not getattr(app, "_lingocomics_history_bp", None):
        app.register_blueprint(bp)
        setattr(app, "_lingocomics_history_bp", bp)


__all__ = ["bp", "register_history_blueprint"]
