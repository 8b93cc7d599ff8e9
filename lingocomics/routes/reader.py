"""Reader overlay layout endpoint."""
from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from lingocomics.errors import ValidationError
from lingocomics.routes.errors import attach_error_handler
from lingocomics.services import reader_overlay

bp = Blueprint("lingocomics_reader", __name__, url_prefix="/reader")
attach_error_handler(bp)


@bp.route("/layout", methods=["POST"])
def page_layout():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict) or not isinstance(payload.get("page"), dict):
        raise ValidationError("page", "page object is required")
    try:
        page = reader_overlay.page_from_dict(payload["page"])
    except ValueError as exc:
        raise ValidationError("page", f"invalid page payload: {exc}") from exc
    raw_settings = payload.get("settings")
    try:
        settings = reader_overlay.settings_from_dict({} if raw_settings is None else raw_settings)
    except ValueError as exc:
        raise ValidationError("settings", f"invalid settings payload: {exc}") from exc
    hovered = payload.get("hoveredBubbleId")
    layout = reader_overlay.render_page(page, settings, str(hovered) if hovered is not None else None)
    return jsonify(layout.as_dict())


def register_reader_blueprint(app: Any) -> None:
    if not getattr(app, "_lingocomics_reader_bp", None):
        app.register_blueprint(bp)
        setattr(app, "_lingocomics_reader_bp", bp)


__all__ = ["bp", "register_reader_blueprint"]
