"""Chat language configuration.

The bot speaks three registers: English, Hindi (Devanagari) and Hinglish
(Romanised Hindi mixed with English).  Citizens pick one from the welcome
menu by typing its menu digit or its name; the choice is kept for the rest
of the session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

__all__ = [
    "ChatLanguageConfig",
    "CHAT_LANGUAGES",
    "DEFAULT_LANGUAGE",
    "get_chat_language",
    "match_language_selection",
]


@dataclass(frozen=True, slots=True)
class ChatLanguageConfig:
    """Immutable descriptor for a language offered in the welcome menu."""

    code: str
    """Value stored in the conversation context (``en``, ``hi``, ``hinglish``)."""

    name_english: str

    name_native: str

    menu_digit: str
    """Digit the citizen types in the welcome menu to pick this language."""

    selection_keywords: tuple[str, ...]
    """Lower-case words that also select this language when typed."""

    script: str


CHAT_LANGUAGES: Final[dict[str, ChatLanguageConfig]] = {
    "en": ChatLanguageConfig(
        code="en",
        name_english="English",
        name_native="English",
        menu_digit="1",
        selection_keywords=("english",),
        script="Latin",
    ),
    "hi": ChatLanguageConfig(
        code="hi",
        name_english="Hindi",
        name_native="हिंदी",
        menu_digit="2",
        selection_keywords=("hindi", "हिंदी", "हिन्दी"),
        script="Devanagari",
    ),
    "hinglish": ChatLanguageConfig(
        code="hinglish",
        name_english="Hinglish",
        name_native="Hinglish",
        menu_digit="3",
        selection_keywords=("hinglish",),
        script="Latin",
    ),
}

DEFAULT_LANGUAGE: Final[str] = "en"


def get_chat_language(code: str | None) -> ChatLanguageConfig:
    """Return the config for *code*, falling back to English."""
    if code and code in CHAT_LANGUAGES:
        return CHAT_LANGUAGES[code]
    return CHAT_LANGUAGES[DEFAULT_LANGUAGE]


def match_language_selection(text: str) -> ChatLanguageConfig | None:
    """Return the language a welcome-menu reply selects, if any.

    A bare menu digit wins; otherwise the first language whose name appears
    in the text.  ``hinglish`` is checked before ``hindi`` and ``english``
    so that the longer name is not shadowed by its substring.
    """
    msg = text.strip().lower()
    for lang in CHAT_LANGUAGES.values():
        if msg == lang.menu_digit:
            return lang
    for code in ("hinglish", "hi", "en"):
        lang = CHAT_LANGUAGES[code]
        if any(keyword in msg for keyword in lang.selection_keywords):
            return lang
    return None
