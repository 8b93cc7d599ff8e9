"""Application logging helpers.

Every module logger lives under the ``lingocomics`` namespace and hands its
records to one stream handler installed on that namespace root, at the level
from `lingocomics.config.log_level_name()`. Pipeline events go through
`log_event`: the record message is the event name and the formatter appends
the event fields as one compact JSON object.
"""
from __future__ import annotations

import json
import logging
import threading
from typing import Any, Dict, Optional

from lingocomics import config as app_config

ROOT_NAME = "lingocomics"
LINE_FORMAT = "[lingocomics] %(asctime)s %(levelname)s %(name)s %(message)s"

_LOCK = threading.Lock()
_ROOT: Optional[logging.Logger] = None


class EventFormatter(logging.Formatter):
    """Formats plain records as usual; records carrying `event_fields` get them appended as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields: Optional[Dict[str, Any]] = getattr(record, "event_fields", None)
        if fields:
            line = f"{line} {json.dumps(fields, default=str, ensure_ascii=True, sort_keys=True)}"
        return line


def _root_logger() -> logging.Logger:
    global _ROOT
    if _ROOT is not None:
        return _ROOT
    with _LOCK:
        if _ROOT is not None:
            return _ROOT
        root = logging.getLogger(ROOT_NAME)
        root.setLevel(getattr(logging, app_config.log_level_name(), logging.INFO))
        if not any(isinstance(h.formatter, EventFormatter) for h in root.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(EventFormatter(LINE_FORMAT))
            root.addHandler(handler)
        root.propagate = False
        _ROOT = root
        return root


def get_logger(name: str = ROOT_NAME) -> logging.Logger:
    """Return a logger inside the ``lingocomics`` namespace (foreign names are nested under it)."""
    root = _root_logger()
    if name == ROOT_NAME:
        return root
    if not name.startswith(ROOT_NAME + "."):
        name = f"{ROOT_NAME}.{name}"
    return logging.getLogger(name)


def log_event(logger: logging.Logger, event: str, **fields: Any) -> None:
    payload = {k: v for k, v in fields.items() if v is not None}
    logger.info(event, extra={"event_fields": payload})


__all__ = ["get_logger", "log_event", "EventFormatter", "ROOT_NAME"]
