"""Flask blueprints for the public and admin HTTP API."""

from .inject import register_all

__all__ = ["register_all"]
