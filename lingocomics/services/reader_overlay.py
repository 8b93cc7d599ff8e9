"""Translation overlay layout for a comic page.

`render_page` is a pure function of (page, settings, hovered bubble id): it
decides, per text bubble, which target-language text sits inside the bubble
box and whether the native-language popup (with optional grammar notes) is
visible. Bubble geometry is expressed in percent of the page size.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass
class Translation:
    language_code: str
    text: str
    grammar_notes: Optional[str] = None


@dataclass
class TextBubble:
    id: str
    x: float
    y: float
    width: float
    height: float
    translations: List[Translation] = field(default_factory=list)

    def translation_for(self, language_code: str) -> Optional[Translation]:
        for translation in self.translations:
            if translation.language_code == language_code:
                return translation
        return None


@dataclass
class Page:
    image_url: str
    bubbles: List[TextBubble] = field(default_factory=list)


@dataclass
class OverlaySettings:
    native_language: str = "en"
    target_language: str = "en"
    show_translations: bool = True
    show_grammar_notes: bool = True
    auto_play_translations: bool = False


@dataclass
class Popup:
    native_text: Optional[str]
    grammar_notes: Optional[str]


@dataclass
class BubbleOverlay:
    bubble_id: str
    left: float
    top: float
    width: float
    height: float
    target_text: Optional[str]
    popup: Optional[Popup]

    @property
    def popup_visible(self) -> bool:
        return self.popup is not None


@dataclass
class PageLayout:
    image_url: str
    bubbles: List[BubbleOverlay]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "imageUrl": self.image_url,
            "bubbles": [
                {
                    "id": b.bubble_id,
                    "box": {"left": b.left, "top": b.top, "width": b.width, "height": b.height},
                    "targetText": b.target_text,
                    "popupVisible": b.popup_visible,
                    "popup": asdict(b.popup) if b.popup else None,
                }
                for b in self.bubbles
            ],
        }


def _clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def popup_visible(bubble_id: str, settings: OverlaySettings, hovered_bubble_id: Optional[str]) -> bool:
    if not settings.show_translations:
        return False
    return settings.auto_play_translations or hovered_bubble_id == bubble_id


def render_bubble(bubble: TextBubble, settings: OverlaySettings, hovered_bubble_id: Optional[str] = None) -> BubbleOverlay:
    target = bubble.translation_for(settings.target_language)
    native = bubble.translation_for(settings.native_language)
    popup = None
    if popup_visible(bubble.id, settings, hovered_bubble_id):
        notes = target.grammar_notes if (settings.show_grammar_notes and target) else None
        popup = Popup(native_text=native.text if native else None, grammar_notes=notes or None)
    return BubbleOverlay(
        bubble_id=bubble.id,
        left=_clamp_percent(bubble.x),
        top=_clamp_percent(bubble.y),
        width=_clamp_percent(bubble.width),
        height=_clamp_percent(bubble.height),
        target_text=target.text if target else None,
        popup=popup,
    )


def render_page(page: Page, settings: OverlaySettings, hovered_bubble_id: Optional[str] = None) -> PageLayout:
    return PageLayout(
        image_url=page.image_url,
        bubbles=[render_bubble(b, settings, hovered_bubble_id) for b in page.bubbles],
    )


# ----------------------------------------------------------- JSON parsing
def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{what} must be an object")
    return value


def _require(mapping: Mapping[str, Any], key: str, alt: Optional[str] = None) -> Any:
    if key in mapping:
        return mapping[key]
    if alt and alt in mapping:
        return mapping[alt]
    raise ValueError(f"{key}_required")


def _number(mapping: Mapping[str, Any], key: str) -> float:
    value = _require(mapping, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _translation_from_dict(raw: Any) -> Translation:
    data = _mapping(raw, "translation")
    notes = data.get("grammarNotes", data.get("grammar_notes"))
    return Translation(
        language_code=str(_require(data, "languageCode", "language_code")),
        text=str(data.get("text") or ""),
        grammar_notes=str(notes) if notes is not None else None,
    )


def _bubble_from_dict(raw: Any) -> TextBubble:
    data = _mapping(raw, "bubble")
    translations = data.get("translations") or []
    if not isinstance(translations, list):
        raise ValueError("translations must be a list")
    return TextBubble(
        id=str(_require(data, "id")),
        x=_number(data, "x"),
        y=_number(data, "y"),
        width=_number(data, "width"),
        height=_number(data, "height"),
        translations=[_translation_from_dict(t) for t in translations],
    )


def page_from_dict(raw: Any) -> Page:
    """Build a Page from its JSON form; raises ValueError on any misshapen entry."""
    data = _mapping(raw, "page")
    bubbles = data.get("bubbles") or []
    if not isinstance(bubbles, list):
        raise ValueError("bubbles must be a list")
    return Page(
        image_url=str(_require(data, "imageUrl", "image_url")),
        bubbles=[_bubble_from_dict(b) for b in bubbles],
    )


def settings_from_dict(raw: Any) -> OverlaySettings:
    """Accepts camelCase or snake_case keys. Toggles must be JSON booleans."""
    data = _mapping(raw, "settings")
    defaults = OverlaySettings()

    def pick(camel: str, snake: str, default: Any) -> Any:
        return data.get(camel, data.get(snake, default))

    def toggle(camel: str, snake: str, default: bool) -> bool:
        value = pick(camel, snake, default)
        if not isinstance(value, bool):
            raise ValueError(f"{camel} must be a boolean")
        return value

    return OverlaySettings(
        native_language=str(pick("nativeLanguage", "native_language", defaults.native_language)),
        target_language=str(pick("targetLanguage", "target_language", defaults.target_language)),
        show_translations=toggle("showTranslations", "show_translations", defaults.show_translations),
        show_grammar_notes=toggle("showGrammarNotes", "show_grammar_notes", defaults.show_grammar_notes),
        auto_play_translations=toggle(
            "autoPlayTranslations", "auto_play_translations", defaults.auto_play_translations
        ),
    )


__all__ = [
    "Translation",
    "TextBubble",
    "Page",
    "OverlaySettings",
    "Popup",
    "BubbleOverlay",
    "PageLayout",
    "popup_visible",
    "render_bubble",
    "render_page",
    "page_from_dict",
    "settings_from_dict",
]
