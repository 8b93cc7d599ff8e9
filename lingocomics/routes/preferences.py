"""Server-side preferences API (GET by user / PUT upsert)."""
from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from lingocomics.errors import NotFoundError, ValidationError
from lingocomics.routes.errors import attach_error_handler
from lingocomics.services.preferences_store import validate_changes
from lingocomics.startup.container import get_services

bp = Blueprint("lingocomics_preferences", __name__, url_prefix="/api")
attach_error_handler(bp)


@bp.route("/preferences", methods=["GET"])
def get_preferences():
    user_id = (request.args.get("userId") or "").strip()
    if not user_id:
        raise ValidationError("userId", "User ID is required")
    record = get_services().persistence.preferences.get(user_id)
    if record is None:
        raise NotFoundError("preferences", "Preferences not found")
    return jsonify(record.as_dict())


@bp.route("/preferences", methods=["PUT"])
def put_preferences():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("body", "JSON body is required")
    changes = dict(payload)
    user_id = str(changes.pop("userId", "") or "").strip()
    if not user_id:
        raise ValidationError("userId", "User ID is required")
    record = get_services().persistence.preferences.upsert(user_id, validate_changes(changes))
    return jsonify(record.as_dict())


def register_preferences_blueprint(app: Any) -> None:
    if not getattr(app, "_lingocomics_preferences_bp", None):
        app.register_blueprint(bp)
        setattr(app, "_lingocomics_preferences_bp", bp)


__all__ = ["bp", "register_preferences_blueprint"]
