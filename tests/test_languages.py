"""Tests for chat language configuration."""

from __future__ import annotations

import pytest

from config.languages import (
    CHAT_LANGUAGES,
    DEFAULT_LANGUAGE,
    ChatLanguageConfig,
    get_chat_language,
    match_language_selection,
)
from src.models.enums import ChatLanguage


# -----------------------------------------------------------------------
# CHAT_LANGUAGES registry tests
# -----------------------------------------------------------------------


class TestChatLanguagesRegistry:
    def test_three_registers(self) -> None:
        assert set(CHAT_LANGUAGES) == {"en", "hi", "hinglish"}, (
            f"the bot speaks English, Hindi and Hinglish, got {sorted(CHAT_LANGUAGES)}"
        )

    def test_codes_match_chat_language_enum(self) -> None:
        for code, config in CHAT_LANGUAGES.items():
            assert isinstance(config, ChatLanguageConfig)
            assert config.code == code
            assert ChatLanguage(code).value == code, (
                f"'{code}' must also be a valid ChatLanguage value"
            )

    def test_menu_digits_are_unique(self) -> None:
        digits = [c.menu_digit for c in CHAT_LANGUAGES.values()]
        assert sorted(digits) == ["1", "2", "3"]

    def test_hindi_config(self) -> None:
        hi = CHAT_LANGUAGES["hi"]
        assert hi.name_english == "Hindi"
        assert hi.name_native == "हिंदी"
        assert hi.script == "Devanagari"

    def test_default_is_english(self) -> None:
        assert DEFAULT_LANGUAGE == "en"


# -----------------------------------------------------------------------
# get_chat_language tests
# -----------------------------------------------------------------------


class TestGetChatLanguage:
    def test_known_code(self) -> None:
        assert get_chat_language("hinglish").name_english == "Hinglish"

    @pytest.mark.parametrize("code", [None, "", "xx"])
    def test_unknown_code_falls_back_to_english(self, code: str | None) -> None:
        assert get_chat_language(code).code == "en", (
            f"get_chat_language({code!r}) should fall back to English"
        )


# -----------------------------------------------------------------------
# match_language_selection tests
# -----------------------------------------------------------------------


class TestMatchLanguageSelection:
    """Welcome-menu replies that pick a language."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1", "en"),
            (" 2 ", "hi"),
            ("3", "hinglish"),
            ("English", "en"),
            ("hindi please", "hi"),
            ("हिंदी", "hi"),
            ("Hinglish", "hinglish"),
        ],
    )
    def test_selects_language(self, text: str, expected: str) -> None:
        selected = match_language_selection(text)
        assert selected is not None, f"{text!r} should select a language"
        assert selected.code == expected, (
            f"{text!r} should select '{expected}', got '{selected.code}'"
        )

    @pytest.mark.parametrize("text", ["road", "12", "4", "my water bill", ""])
    def test_no_selection(self, text: str) -> None:
        assert match_language_selection(text) is None, (
            f"{text!r} should not be treated as a language choice"
        )
