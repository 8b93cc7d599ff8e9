"""Comic catalog API.

Routes:
    POST /api/comics  -> multipart ingestion (cover + chapter images)
    GET  /api/comics  -> published comics with signed cover URLs
"""
from __future__ import annotations

import json
from typing import Any, List, Optional

from flask import Blueprint, jsonify, request
from werkzeug.datastructures import FileStorage

from lingocomics.errors import ValidationError
from lingocomics.routes.errors import attach_error_handler
from lingocomics.services.ingestion_service import ChapterSubmission, ComicSubmission, UploadedFile
from lingocomics.startup.container import get_services
from lingocomics.utils.logging import get_logger

bp = Blueprint("lingocomics_comics", __name__, url_prefix="/api")
attach_error_handler(bp)
LOG = get_logger("lingocomics.routes.comics")


def _json_list(field: str) -> List[Any]:
    raw = request.form.get(field)
    if raw is None or not raw.strip():
        return []
    try:
        value = json.loads(raw)
    except ValueError as exc:
        raise ValidationError(field, f"{field} must be a JSON array") from exc
    if not isinstance(value, list):
        raise ValidationError(field, f"{field} must be a JSON array")
    return value


def _uploaded(storage: Optional[FileStorage]) -> Optional[UploadedFile]:
    if storage is None or not storage.filename:
        return None
    return UploadedFile(
        filename=storage.filename,
        content=storage.read(),
        content_type=storage.mimetype or "application/octet-stream",
    )


def submission_from_request() -> ComicSubmission:
    chapters = []
    for index, entry in enumerate(_json_list("chapters")):
        title = entry.get("title") if isinstance(entry, dict) else None
        chapters.append(ChapterSubmission(
            title=title if isinstance(title, str) else "",
            file=_uploaded(request.files.get(f"chapter-{index}")),
        ))
    return ComicSubmission(
        title=request.form.get("title", ""),
        description=request.form.get("description", ""),
        author=request.form.get("author", ""),
        artist=request.form.get("artist", ""),
        genres=_json_list("genres"),
        languages=_json_list("languages"),
        cover_image=_uploaded(request.files.get("coverImage")),
        chapters=chapters,
    )


@bp.route("/comics", methods=["POST"])
def create_comic():
    submission = submission_from_request()
    result = get_services().pipeline.ingest(submission)
    LOG.info("Comic created id=%s chapters=%s", result.comic.id, len(result.chapters))
    return jsonify({"success": True, "comic": result.as_dict()}), 201


@bp.route("/comics", methods=["GET"])
def list_comics():
    return jsonify(get_services().catalog.list_published())


def register_comics_blueprint(app: Any) -> None:
    if not getattr(app, "_lingocomics_comics_bp", None):
        app.register_blueprint(bp)
        setattr(app, "_lingocomics_comics_bp", bp)


__all__ = ["bp", "register_comics_blueprint", "submission_from_request"]
