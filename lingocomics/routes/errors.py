"""JSON error translation for the API blueprints."""
from __future__ import annotations

from typing import Any

from flask import jsonify

from lingocomics.errors import LingocomicsError
from lingocomics.utils.logging import get_logger

LOG = get_logger("lingocomics.routes")


def handle_app_error(exc: LingocomicsError):
    if exc.status_code >= 500:
        LOG.error("Request failed: %s", exc)
    return jsonify(exc.to_dict()), exc.status_code


def attach_error_handler(bp: Any) -> None:
    bp.register_error_handler(LingocomicsError, handle_app_error)


__all__ = ["handle_app_error", "attach_error_handler"]
