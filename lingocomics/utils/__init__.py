"""Utility helpers."""
from .languages import normalize_language_tag, normalize_language_tags
from .logging import get_logger, log_event

__all__ = [
    "normalize_language_tag",
    "normalize_language_tags",
    "get_logger",
    "log_event",
]
