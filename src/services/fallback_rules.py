"""Deterministic keyword/state fallback for reply generation.

Used when the language model is disabled, fails, or returns nothing.  The
fallback is an ordered table of :class:`FallbackRule` entries; the first
rule whose predicate matches the turn produces the reply.  Copy is picked
by the session language (``en`` by default).
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

import structlog

from config.languages import match_language_selection
from src.models.chat import GeneratedReply
from src.models.conversation import ConversationContext, StructuredData
from src.models.enums import ChatLanguage, ConversationFlow, StructuredDataType
from src.pipeline.state_machine import (
    GrievanceField,
    filed_grievance_id,
    next_grievance_field,
    split_location_landmark,
)
from src.services import messages as copy
from src.services.messages import localized

logger = structlog.get_logger(__name__)

_CONSUMER_NUMBER_RE: Final[re.Pattern[str]] = re.compile(r"\b([A-Za-z]*\d{5,})\b")
_GRIEVANCE_ID_RE: Final[re.Pattern[str]] = re.compile(r"\bgr(\d{5})\b", re.IGNORECASE)
_APPLICATION_ID_RE: Final[re.Pattern[str]] = re.compile(r"\bapp(\d{5})\b", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class TurnInput:
    """Everything a fallback rule may look at."""

    text: str
    """User text as displayed (attachment markers already replaced)."""

    context: ConversationContext
    """Context with this turn's attachment (if any) already merged."""

    has_attachment: bool = False

    @property
    def lowered(self) -> str:
        return self.text.strip().lower()

    @property
    def language(self) -> ChatLanguage:
        return self.context.language or ChatLanguage.EN

    def mentions(self, *keywords: str) -> bool:
        msg = self.lowered
        return any(k in msg for k in keywords)


@dataclass(frozen=True, slots=True)
class FallbackRule:
    name: str
    matches: Callable[[TurnInput], bool]
    respond: Callable[[TurnInput], GeneratedReply]


# ---------------------------------------------------------------------------
# Keyword vocabularies
# ---------------------------------------------------------------------------

BILL_KEYWORDS: Final[tuple[str, ...]] = ("bill", "pay", "tax", "bijli", "vera")

GRIEVANCE_KEYWORDS: Final[tuple[str, ...]] = (
    "complaint", "problem", "issue", "grievance", "shikayat", "pothole",
    "road", "sadak", "garbage", "kachra", "light", "drain", "gutar",
    "sewer", "kharab", "nahi aa raha", "nahi aata",
)

GRIEVANCE_CATEGORY_KEYWORDS: Final[tuple[tuple[str, tuple[str, ...]], ...]] = (
    ("roads", ("road", "pothole", "sadak", "gadda", "gaddha")),
    ("water_supply", ("water", "paani", "pani", "supply")),
    ("garbage", ("garbage", "waste", "kachra", "kooda")),
    ("street_lights", ("street light", "streetlight", "light", "batti")),
    ("drainage", ("drain", "gutar", "gutter", "sewer", "overflow", "naali", "nali")),
    ("other", ("other", "anya")),
)

CERTIFICATE_KEYWORDS: Final[tuple[str, ...]] = (
    "certificate", "birth", "death", "income", "caste", "domicile", "praman", "janam",
)

LICENSE_KEYWORDS: Final[tuple[str, ...]] = ("license", "licence", "permit", "shop", "trade", "building", "event")

STATUS_KEYWORDS: Final[tuple[str, ...]] = ("status", "track", "application")

OFFICE_KEYWORDS: Final[tuple[str, ...]] = ("office", "contact", "timing", "time", "help")


def detect_grievance_category(text: str) -> str | None:
    msg = text.lower()
    for category, keywords in GRIEVANCE_CATEGORY_KEYWORDS:
        if any(k in msg for k in keywords):
            return category
    return None


def extract_consumer_number(text: str) -> str | None:
    match = _CONSUMER_NUMBER_RE.search(text)
    return match.group(1).upper() if match else None


# ---------------------------------------------------------------------------
# Rule: language selection
# ---------------------------------------------------------------------------


def _selects_language(turn: TurnInput) -> bool:
    return turn.context.language is None and match_language_selection(turn.text) is not None


def _confirm_language(turn: TurnInput) -> GeneratedReply:
    selected = match_language_selection(turn.text)
    assert selected is not None  # noqa: S101
    language = ChatLanguage(selected.code)
    message = f"{copy.LANGUAGE_SET[language]}\n\n{copy.MAIN_MENU[language]}"
    return GeneratedReply(
        message=message,
        structured_data=StructuredData(type=StructuredDataType.INFO, language=language),
    )


# ---------------------------------------------------------------------------
# Rule: consumer number while paying a bill
# ---------------------------------------------------------------------------


def _gives_consumer_number(turn: TurnInput) -> bool:
    return (
        turn.context.current_flow == ConversationFlow.BILL_PAYMENT
        and extract_consumer_number(turn.text) is not None
    )


def _check_bill(turn: TurnInput) -> GeneratedReply:
    number = extract_consumer_number(turn.text)
    return GeneratedReply(
        message=localized(copy.BILL_CHECKING, turn.language).format(number=number),
        structured_data=StructuredData(type=StructuredDataType.BILL, consumer_number=number),
    )


# ---------------------------------------------------------------------------
# Rule: grievance step sequence
# ---------------------------------------------------------------------------


def _in_grievance_draft(turn: TurnInput) -> bool:
    context = turn.context
    if context.current_flow != ConversationFlow.GRIEVANCE:
        return False
    if filed_grievance_id(context) is not None:
        return False
    if context.collected_data.category:
        return True
    return not turn.has_attachment and detect_grievance_category(turn.text) is not None


def _prompt_for(field: GrievanceField | None, language: ChatLanguage) -> str:
    if field is None:
        return localized(copy.GRIEVANCE_REGISTERING, language)
    if field is GrievanceField.CATEGORY:
        return localized(copy.GRIEVANCE_CATEGORY_MENU, language)
    return localized(copy.GRIEVANCE_STEP_PROMPTS[field.value], language)


def _open_grievance(category: str, language: ChatLanguage) -> GeneratedReply:
    parts = [localized(copy.GRIEVANCE_CATEGORY_TITLES[category], language)]
    if category == "street_lights":
        parts.append(localized(copy.STREET_LIGHT_HINT, language))
    parts.append(_prompt_for(GrievanceField.LOCATION, language))
    return GeneratedReply(
        message="\n\n".join(parts),
        structured_data=StructuredData(type=StructuredDataType.GRIEVANCE, category=category),
    )


def _grievance_step(turn: TurnInput) -> GeneratedReply:
    """Capture the current step's answer and ask for the next missing field."""
    collected = turn.context.collected_data
    language = turn.language
    missing = next_grievance_field(collected)
    captured: dict[str, str] = {}

    if missing is GrievanceField.CATEGORY:
        category = detect_grievance_category(turn.text)
        assert category is not None  # noqa: S101
        return _open_grievance(category, language)

    if turn.has_attachment and missing not in (GrievanceField.PHOTO, None):
        # The attachment is kept but cannot answer a text question.
        message = f"{localized(copy.ATTACHMENT_NOT_TEXT, language)}\n\n{_prompt_for(missing, language)}"
        return GeneratedReply(
            message=message,
            structured_data=StructuredData(type=StructuredDataType.GRIEVANCE),
        )

    text = turn.text.strip()
    if missing is GrievanceField.LOCATION:
        location, landmark = split_location_landmark(text)
        captured["location"] = location
        if landmark:
            captured["landmark"] = landmark
    elif missing is GrievanceField.LANDMARK:
        captured["landmark"] = text
    elif missing is GrievanceField.DESCRIPTION:
        captured["description"] = text

    after = collected.model_copy(update=captured)
    return GeneratedReply(
        message=_prompt_for(next_grievance_field(after), language),
        structured_data=StructuredData(type=StructuredDataType.GRIEVANCE, **captured),
    )


# ---------------------------------------------------------------------------
# Keyword domains
# ---------------------------------------------------------------------------


def _mentions_bill(turn: TurnInput) -> bool:
    if turn.mentions(*BILL_KEYWORDS):
        return True
    return turn.context.current_flow == ConversationFlow.BILL_PAYMENT and turn.mentions(
        "electricity", "water", "property"
    )


def _bill_reply(turn: TurnInput) -> GeneratedReply:
    language = turn.language
    number = extract_consumer_number(turn.text)
    if number:
        return _check_bill(turn)
    if turn.mentions("electricity", "bijli"):
        bill_type = "electricity"
    elif turn.mentions("water", "paani", "pani"):
        bill_type = "water"
    elif turn.mentions("property", "house", "vera", "tax"):
        bill_type = "property_tax"
    else:
        return GeneratedReply(
            message=localized(copy.BILL_MENU, language),
            structured_data=StructuredData(type=StructuredDataType.BILL),
        )
    return GeneratedReply(
        message=localized(copy.BILL_TYPE_PROMPTS[bill_type], language),
        structured_data=StructuredData(type=StructuredDataType.BILL),
    )


def _mentions_grievance(turn: TurnInput) -> bool:
    return turn.mentions(*GRIEVANCE_KEYWORDS)


def _grievance_reply(turn: TurnInput) -> GeneratedReply:
    language = turn.language
    category = detect_grievance_category(turn.text)
    if category is None:
        return GeneratedReply(
            message=localized(copy.GRIEVANCE_CATEGORY_MENU, language),
            structured_data=StructuredData(type=StructuredDataType.GRIEVANCE),
        )
    return _open_grievance(category, language)


def _mentions_certificate(turn: TurnInput) -> bool:
    return turn.mentions(*CERTIFICATE_KEYWORDS)


def _certificate_reply(turn: TurnInput) -> GeneratedReply:
    follow_up = localized(copy.FOLLOW_UP_MENU, turn.language)
    if turn.mentions("birth", "janam"):
        return GeneratedReply(message=copy.CERTIFICATE_INFO["birth"] + follow_up)
    if turn.mentions("death", "mrutyu", "mrityu"):
        return GeneratedReply(message=copy.CERTIFICATE_INFO["death"] + follow_up)
    if turn.mentions("income", "aay"):
        return GeneratedReply(message=copy.CERTIFICATE_INFO["income"] + follow_up)
    if turn.mentions("domicile"):
        return GeneratedReply(message=copy.CERTIFICATE_INFO["domicile"] + follow_up)
    return GeneratedReply(message=copy.CERTIFICATE_MENU)


def _mentions_license(turn: TurnInput) -> bool:
    return turn.mentions(*LICENSE_KEYWORDS)


def _license_reply(turn: TurnInput) -> GeneratedReply:
    follow_up = localized(copy.FOLLOW_UP_MENU, turn.language)
    if turn.mentions("shop", "gumasta"):
        return GeneratedReply(message=copy.LICENSE_INFO["shop"] + follow_up)
    if turn.mentions("event", "party", "plot"):
        return GeneratedReply(message=copy.LICENSE_INFO["event"] + follow_up)
    return GeneratedReply(message=copy.LICENSE_MENU)


def _quotes_tracking_id(turn: TurnInput) -> bool:
    return _GRIEVANCE_ID_RE.search(turn.text) is not None or _APPLICATION_ID_RE.search(turn.text) is not None


def _mentions_status(turn: TurnInput) -> bool:
    return turn.mentions(*STATUS_KEYWORDS)


def _status_reply(turn: TurnInput) -> GeneratedReply:
    language = turn.language
    gr_match = _GRIEVANCE_ID_RE.search(turn.text)
    if gr_match:
        grievance_id = f"GR{gr_match.group(1)}"
        return GeneratedReply(
            message=localized(copy.STATUS_CHECKING_GRIEVANCE, language).format(id=grievance_id),
            structured_data=StructuredData(type=StructuredDataType.STATUS_QUERY, grievance_id=grievance_id),
        )
    app_match = _APPLICATION_ID_RE.search(turn.text)
    if app_match:
        application_id = f"APP{app_match.group(1)}"
        return GeneratedReply(
            message=localized(copy.STATUS_CHECKING_APPLICATION, language).format(id=application_id),
            structured_data=StructuredData(type=StructuredDataType.STATUS_QUERY, application_id=application_id),
        )
    return GeneratedReply(
        message=localized(copy.STATUS_PROMPT, language),
        structured_data=StructuredData(type=StructuredDataType.STATUS_QUERY),
    )


def _mentions_office(turn: TurnInput) -> bool:
    return turn.mentions(*OFFICE_KEYWORDS)


def _office_reply(turn: TurnInput) -> GeneratedReply:
    return GeneratedReply(message=copy.OFFICE_INFO + localized(copy.FOLLOW_UP_MENU, turn.language))


def _always(turn: TurnInput) -> bool:
    return True


def _welcome_menu(turn: TurnInput) -> GeneratedReply:
    language = turn.language
    return GeneratedReply(message=f"{localized(copy.DEFAULT_WELCOME, language)}\n\n{localized(copy.MAIN_MENU, language)}")


# ---------------------------------------------------------------------------
# Rule table (first match wins)
# ---------------------------------------------------------------------------

FALLBACK_RULES: Final[tuple[FallbackRule, ...]] = (
    FallbackRule("language_selection", _selects_language, _confirm_language),
    FallbackRule("bill_number", _gives_consumer_number, _check_bill),
    FallbackRule("grievance_step", _in_grievance_draft, _grievance_step),
    FallbackRule("tracking_id", _quotes_tracking_id, _status_reply),
    FallbackRule("bill_keywords", _mentions_bill, _bill_reply),
    FallbackRule("grievance_keywords", _mentions_grievance, _grievance_reply),
    FallbackRule("certificate_keywords", _mentions_certificate, _certificate_reply),
    FallbackRule("license_keywords", _mentions_license, _license_reply),
    FallbackRule("status_keywords", _mentions_status, _status_reply),
    FallbackRule("office_info", _mentions_office, _office_reply),
    FallbackRule("welcome_menu", _always, _welcome_menu),
)


class FallbackResponder:
    """Runs a rule table against a turn."""

    __slots__ = ("_rules",)

    def __init__(self, rules: tuple[FallbackRule, ...] = FALLBACK_RULES) -> None:
        self._rules = rules

    def respond(self, turn: TurnInput) -> GeneratedReply:
        for rule in self._rules:
            if rule.matches(turn):
                logger.debug("fallback.rule_matched", rule=rule.name)
                return rule.respond(turn)
        # The table always ends with a catch-all.
        raise LookupError("no fallback rule matched")
