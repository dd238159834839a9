"""Hinglish (Hindi-English code-mixing) processor.

Detects which of the bot's three registers a citizen is writing in and
extracts civic intent keywords from Romanised Hindi text.  The result is
passed to the language model as a hint; the keyword fallback keys its copy
off the language the citizen explicitly selected instead.

All processing is **O(n)** where *n* = ``len(text)`` -- no nested loops.
"""

from __future__ import annotations

import re
from typing import Final

from src.models.enums import ChatLanguage

_WORD_SPLIT_RE: Final[re.Pattern[str]] = re.compile(r"[^\w]+", flags=re.UNICODE)

# ---------------------------------------------------------------------------
# Romanised Hindi / civic word -> intent mapping
# ---------------------------------------------------------------------------

COMMON_HINDI_ROMAN_WORDS: Final[dict[str, str]] = {
    # -- bill --
    "bill": "bill",
    "bijli": "bill",
    "vera": "bill",
    "kar": "bill",
    "tax": "bill",
    "bhugtan": "bill",
    "paisa": "bill",
    "paise": "bill",
    "rupaye": "bill",
    "payment": "bill",
    # -- complaint --
    "shikayat": "complaint",
    "complaint": "complaint",
    "samasya": "complaint",
    "samasyaa": "complaint",
    "pareshani": "complaint",
    "problem": "complaint",
    "kharab": "complaint",
    "tuta": "complaint",
    "tooti": "complaint",
    "gadda": "complaint",
    "gaddha": "complaint",
    "sadak": "complaint",
    "paani": "complaint",
    "pani": "complaint",
    "kachra": "complaint",
    "kooda": "complaint",
    "gandagi": "complaint",
    "batti": "complaint",
    "naali": "complaint",
    "nali": "complaint",
    "gutter": "complaint",
    # -- certificate --
    "certificate": "certificate",
    "praman": "certificate",
    "pramaan": "certificate",
    "janm": "certificate",
    "janam": "certificate",
    "mrityu": "certificate",
    # -- license --
    "license": "license",
    "licence": "license",
    "dukaan": "license",
    "dukan": "license",
    "vyapar": "license",
    # -- status --
    "status": "status",
    "sthiti": "status",
    "track": "status",
    "kahan": "status",
    "kab": "status",
    # -- info --
    "daftar": "info",
    "office": "info",
    "samay": "info",
    "timing": "info",
    "helpline": "info",
    "sampark": "info",
}

_HINDI_ROMAN_WORDS_SET: Final[frozenset[str]] = frozenset(COMMON_HINDI_ROMAN_WORDS)

# Words that alone indicate Romanised Hindi rather than English.
_HIGH_SIGNAL: Final[frozenset[str]] = frozenset({
    "bijli", "vera", "bhugtan", "paisa", "paise", "rupaye",
    "shikayat", "samasya", "samasyaa", "pareshani", "kharab",
    "tuta", "tooti", "gadda", "gaddha", "sadak", "paani", "pani",
    "kachra", "kooda", "gandagi", "batti", "naali", "nali",
    "praman", "pramaan", "janm", "janam", "mrityu",
    "dukaan", "dukan", "vyapar", "sthiti", "kahan", "daftar",
    "sampark", "mera", "meri", "mujhe", "hai", "nahi", "kya",
    "kaise", "chahiye", "karna", "karo", "hua", "raha", "rahi",
})

# Vocabulary entries that are also plain English words.
_ENGLISH_OVERLAP: Final[frozenset[str]] = frozenset({
    "bill", "tax", "payment", "complaint", "problem", "gutter",
    "certificate", "license", "licence", "status", "track",
    "office", "timing", "helpline",
})

# Function words that count towards the two-word threshold.
_FUNCTION_WORDS: Final[frozenset[str]] = frozenset({
    "ka", "ki", "ke", "ko", "se", "mein", "par", "aur", "bhi",
    "hai", "hain", "tha", "nahi", "kya", "mera", "meri", "mujhe",
})


# ---------------------------------------------------------------------------
# HinglishProcessor
# ---------------------------------------------------------------------------


class HinglishProcessor:
    """Detects register and extracts civic intent keywords.

    All public methods run in **O(n)** time where *n* = ``len(text)``.
    """

    __slots__ = ()

    # ------------------------------------------------------------------ #
    # Detection
    # ------------------------------------------------------------------ #

    @staticmethod
    def is_hinglish(text: str) -> bool:
        """Return ``True`` if *text* appears to be Hinglish (code-mixed).

        1. Both Latin and Devanagari characters present: code-mixed.
        2. Latin-only text containing known Romanised Hindi words.
        """
        has_devanagari = False
        has_latin = False

        for ch in text:
            if "ऀ" <= ch <= "ॿ":
                has_devanagari = True
            elif ("A" <= ch <= "Z") or ("a" <= ch <= "z"):
                has_latin = True
            if has_devanagari and has_latin:
                return True

        if has_latin and not has_devanagari:
            return _has_roman_hindi_words(text)

        return False

    @staticmethod
    def detect_language(text: str) -> ChatLanguage:
        """Guess the register of *text*.

        Devanagari-only text is Hindi, code-mixed or Romanised Hindi text is
        Hinglish, everything else English.
        """
        if HinglishProcessor.is_hinglish(text):
            return ChatLanguage.HINGLISH
        if any("ऀ" <= ch <= "ॿ" for ch in text):
            return ChatLanguage.HI
        return ChatLanguage.EN

    # ------------------------------------------------------------------ #
    # Keyword extraction
    # ------------------------------------------------------------------ #

    @staticmethod
    def extract_intent_keywords(text: str) -> list[str]:
        """Extract civic intent keywords from *text*.

        Returns a deduplicated list of intents (e.g. ``["complaint",
        "status"]``) preserving first-seen order.
        """
        seen: set[str] = set()
        result: list[str] = []

        for token in _WORD_SPLIT_RE.split(text):
            intent = COMMON_HINDI_ROMAN_WORDS.get(token.lower())
            if intent is not None and intent not in seen:
                seen.add(intent)
                result.append(intent)

        return result


# ---------------------------------------------------------------------------
# Module-private helpers
# ---------------------------------------------------------------------------


def _has_roman_hindi_words(text: str) -> bool:
    """Check whether *text* (assumed all-Latin) contains Romanised Hindi words.

    Returns ``True`` if a single high-signal word is present, or if at
    least **two** weaker Hindi words (vocabulary or function words) are
    found.  Avoids false positives on English text containing a word like
    "bill" or "status".
    """
    count = 0
    for token in _WORD_SPLIT_RE.split(text):
        lower = token.lower()
        if lower in _HIGH_SIGNAL:
            return True
        if lower in _FUNCTION_WORDS or (lower in _HINDI_ROMAN_WORDS_SET and lower not in _ENGLISH_OVERLAP):
            count += 1
            if count >= 2:
                return True
    return False
