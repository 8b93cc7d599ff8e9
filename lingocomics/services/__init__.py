"""Service exports."""

from .ingestion_service import (
    ChapterSubmission,
    ComicSubmission,
    IngestionPipeline,
    IngestionResult,
    UploadedFile,
    validate_submission,
)
from .catalog_service import CatalogService
from .preferences_store import (
    DEFAULT_PREFERENCES,
    LocalPreferencesFile,
    Preferences,
    PreferencesStore,
    validate_changes,
)
from . import reader_overlay

__all__ = [
    "ChapterSubmission",
    "ComicSubmission",
    "IngestionPipeline",
    "IngestionResult",
    "UploadedFile",
    "validate_submission",
    "CatalogService",
    "DEFAULT_PREFERENCES",
    "LocalPreferencesFile",
    "Preferences",
    "PreferencesStore",
    "validate_changes",
    "reader_overlay",
]
