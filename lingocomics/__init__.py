"""lingocomics: multilingual graphic-novel reading platform backend.

Layout:
    config/     environment accessors
    db/         SQLAlchemy engine, models, repositories (persistence gateway)
    storage/    object storage gateways (local filesystem, Supabase)
    services/   ingestion pipeline, catalog, reader overlay, preferences
    routes/     Flask blueprints
    startup/    wiring and application factory
"""

__all__ = [
]
