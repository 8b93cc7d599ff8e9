"""Language tag normalization backed by Babel/CLDR data."""
from __future__ import annotations

from typing import Iterable, List, Optional

from babel import Locale, UnknownLocaleError


def normalize_language_tag(raw: object) -> Optional[str]:
    """Return a canonical tag ("en", "pt-BR", "zh-Hant") or None when unknown."""
    candidate = str(raw or "").strip().replace("-", "_")
    if not candidate:
        return None
    try:
        locale = Locale.parse(candidate)
    except (UnknownLocaleError, ValueError, TypeError):
        return None
    parts = [locale.language]
    if locale.script:
        parts.append(locale.script)
    if locale.territory:
        parts.append(locale.territory)
    return "-".join(parts)


def normalize_language_tags(values: Iterable[object]) -> List[str]:
    """Normalize and de-duplicate tags, preserving order. Raises ValueError on the first unknown tag."""
    result: List[str] = []
    for value in values:
        tag = normalize_language_tag(value)
        if tag is None:
            raise ValueError(str(value))
        if tag not in result:
            result.append(tag)
    return result


__all__ = ["normalize_language_tag", "normalize_language_tags"]
