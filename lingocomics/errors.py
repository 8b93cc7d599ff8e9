"""Error taxonomy shared by gateways, services and routes."""
from __future__ import annotations

from typing import Optional


class LingocomicsError(RuntimeError):
    """Base error for failures surfaced to API callers."""

    status_code = 500

    def to_dict(self) -> dict:
        return {"error": str(self)}


class ValidationError(LingocomicsError, ValueError):
    """Client-correctable input problem identifying the offending field."""

    status_code = 400

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"{field} is required")

    def to_dict(self) -> dict:
        return {"error": str(self), "field": self.field}


class _StageError(LingocomicsError):
    def __init__(self, stage: str, cause: object, message: Optional[str] = None):
        self.stage = stage
        self.cause = cause
        super().__init__(message or f"{stage}: {cause}")

    def to_dict(self) -> dict:
        return {"error": str(self), "stage": self.stage}


class UploadError(_StageError):
    """Object storage failure; triggers rollback when raised mid-pipeline."""


class PersistenceError(_StageError):
    """Database failure; triggers rollback when raised mid-pipeline."""


class NotFoundError(LingocomicsError, LookupError):
    status_code = 404

    def __init__(self, resource: str, message: Optional[str] = None):
        self.resource = resource
        super().__init__(message or f"{resource} not found")


__all__ = [
    "LingocomicsError",
    "ValidationError",
    "UploadError",
    "PersistenceError",
    "NotFoundError",
]
