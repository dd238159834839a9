"""Tests for the deterministic keyword fallback."""

from __future__ import annotations

import pytest

from src.models.conversation import Attachment, CollectedData, ConversationContext
from src.models.enums import AttachmentType, ChatLanguage, ConversationFlow, StructuredDataType
from src.pipeline.state_machine import draft_fingerprint
from src.services import messages as copy
from src.services.fallback_rules import (
    FallbackResponder,
    TurnInput,
    detect_grievance_category,
    extract_consumer_number,
)


@pytest.fixture(scope="module")
def responder() -> FallbackResponder:
    return FallbackResponder()


def _turn(
    text: str,
    *,
    flow: ConversationFlow = ConversationFlow.IDLE,
    language: ChatLanguage | None = ChatLanguage.EN,
    has_attachment: bool = False,
    **collected: object,
) -> TurnInput:
    context = ConversationContext(
        current_flow=flow,
        language=language,
        collected_data=CollectedData(**collected),
    )
    return TurnInput(text=text, context=context, has_attachment=has_attachment)


# -----------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------


class TestKeywordHelpers:
    @pytest.mark.parametrize(
        ("text", "category"),
        [
            ("big pothole here", "roads"),
            ("paani nahi aa raha", "water_supply"),
            ("kachra not collected", "garbage"),
            ("street light broken", "street_lights"),
            ("gutar overflow", "drainage"),
            ("something else", None),
        ],
    )
    def test_detect_grievance_category(self, text: str, category: str | None) -> None:
        assert detect_grievance_category(text) == category

    def test_extract_consumer_number(self) -> None:
        assert extract_consumer_number("my number is prop123456") == "PROP123456"
        assert extract_consumer_number("1234") is None, "fewer than five digits is not a consumer number"


# -----------------------------------------------------------------------
# Language selection
# -----------------------------------------------------------------------


class TestLanguageSelection:
    def test_digit_selects_language(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("2", language=None))
        assert reply.structured_data is not None
        assert reply.structured_data.language == ChatLanguage.HI
        assert reply.structured_data.type == StructuredDataType.INFO
        assert reply.message.startswith(copy.LANGUAGE_SET[ChatLanguage.HI])

    def test_digit_ignored_once_language_is_set(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("2", language=ChatLanguage.EN))
        assert reply.structured_data is None, (
            "after a language is chosen a bare digit must not switch it again"
        )


# -----------------------------------------------------------------------
# Bills
# -----------------------------------------------------------------------


class TestBillRules:
    def test_bill_keyword_asks_for_number(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("I want to pay my electricity bill"))
        assert reply.structured_data is not None
        assert reply.structured_data.type == StructuredDataType.BILL
        assert reply.structured_data.consumer_number is None
        assert reply.message == copy.BILL_TYPE_PROMPTS["electricity"][ChatLanguage.EN]

    def test_bare_bill_keyword_shows_menu(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("bill"))
        assert reply.message == copy.BILL_MENU[ChatLanguage.EN]

    def test_number_in_bill_flow(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("1234567890", flow=ConversationFlow.BILL_PAYMENT))
        assert reply.structured_data is not None
        assert reply.structured_data.type == StructuredDataType.BILL
        assert reply.structured_data.consumer_number == "1234567890"
        assert "1234567890" in reply.message

    def test_number_outside_bill_flow_is_not_a_lookup(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("1234567890"))
        assert reply.structured_data is None


# -----------------------------------------------------------------------
# Grievances
# -----------------------------------------------------------------------


class TestGrievanceRules:
    def test_keyword_opens_categorised_draft(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("road"))
        assert reply.structured_data is not None
        assert reply.structured_data.type == StructuredDataType.GRIEVANCE
        assert reply.structured_data.category == "roads"
        assert "Road Complaint" in reply.message
        assert reply.message.endswith(copy.GRIEVANCE_STEP_PROMPTS["location"][ChatLanguage.EN])

    def test_street_lights_mention_pole_number(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("street light not working"))
        assert reply.structured_data is not None and reply.structured_data.category == "street_lights"
        assert copy.STREET_LIGHT_HINT[ChatLanguage.EN] in reply.message

    def test_generic_complaint_shows_category_menu(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("I have a complaint"))
        assert reply.structured_data is not None
        assert reply.structured_data.category is None
        assert reply.message == copy.GRIEVANCE_CATEGORY_MENU[ChatLanguage.EN]

    def test_copy_follows_session_language(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("road", language=ChatLanguage.HI))
        assert "सड़क शिकायत" in reply.message

    def test_location_step_splits_landmark(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("Ward 5 near SBI", flow=ConversationFlow.GRIEVANCE, category="roads"))
        data = reply.structured_data
        assert data is not None
        assert (data.location, data.landmark) == ("Ward 5", "SBI")
        assert reply.message == copy.GRIEVANCE_STEP_PROMPTS["description"][ChatLanguage.EN], (
            "with the landmark captured the next question is the description"
        )

    def test_landmark_step(self, responder: FallbackResponder) -> None:
        reply = responder.respond(
            _turn("Opposite the temple", flow=ConversationFlow.GRIEVANCE, category="roads", location="Ward 5")
        )
        assert reply.structured_data is not None
        assert reply.structured_data.landmark == "Opposite the temple"

    def test_text_instead_of_photo_asks_again(self, responder: FallbackResponder) -> None:
        turn = _turn(
            "ok",
            flow=ConversationFlow.GRIEVANCE,
            category="roads",
            location="Ward 5",
            landmark="SBI",
            description="Pothole",
        )
        reply = responder.respond(turn)
        assert reply.message == copy.GRIEVANCE_STEP_PROMPTS["photo"][ChatLanguage.EN]
        assert reply.structured_data is not None
        assert reply.structured_data.present_fields() == {}

    def test_attachment_while_text_is_missing(self, responder: FallbackResponder) -> None:
        reply = responder.respond(
            _turn("📷 Sent image: a.jpg", flow=ConversationFlow.GRIEVANCE, has_attachment=True, category="roads")
        )
        assert reply.message.startswith(copy.ATTACHMENT_NOT_TEXT[ChatLanguage.EN])
        assert reply.message.endswith(copy.GRIEVANCE_STEP_PROMPTS["location"][ChatLanguage.EN])

    def test_photo_completes_draft(self, responder: FallbackResponder) -> None:
        photo = Attachment(id="p", type=AttachmentType.IMAGE, url="data:x", name="a.jpg")
        turn = _turn(
            "📷 Sent image: a.jpg",
            flow=ConversationFlow.GRIEVANCE,
            has_attachment=True,
            category="roads",
            location="Ward 5",
            landmark="SBI",
            description="Pothole",
            attachments=(photo,),
        )
        reply = responder.respond(turn)
        assert reply.message == copy.GRIEVANCE_REGISTERING[ChatLanguage.EN]
        assert reply.structured_data is not None
        assert reply.structured_data.type == StructuredDataType.GRIEVANCE

    def test_filed_draft_does_not_continue(self, responder: FallbackResponder) -> None:
        collected = CollectedData(category="roads", location="Ward 5", description="Pothole")
        context = ConversationContext(
            current_flow=ConversationFlow.GRIEVANCE,
            language=ChatLanguage.EN,
            collected_data=collected,
            filed_requests={draft_fingerprint(collected): "GR12345"},
        )
        reply = responder.respond(TurnInput(text="thanks", context=context))
        assert reply.structured_data is None, "a filed draft no longer collects fields"


# -----------------------------------------------------------------------
# Status, certificates, licenses, office
# -----------------------------------------------------------------------


class TestInformationRules:
    def test_tracking_id(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("where is gr12345"))
        assert reply.structured_data is not None
        assert reply.structured_data.type == StructuredDataType.STATUS_QUERY
        assert reply.structured_data.grievance_id == "GR12345"

    def test_application_id(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("APP54321"))
        assert reply.structured_data is not None
        assert reply.structured_data.application_id == "APP54321"

    def test_status_without_id_prompts(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("track status"))
        assert reply.message == copy.STATUS_PROMPT[ChatLanguage.EN]

    def test_birth_certificate_is_informational(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("birth certificate"))
        assert reply.message.startswith(copy.CERTIFICATE_INFO["birth"])
        assert reply.structured_data is None

    def test_license_menu(self, responder: FallbackResponder) -> None:
        assert responder.respond(_turn("license")).message == copy.LICENSE_MENU

    def test_office_info(self, responder: FallbackResponder) -> None:
        assert responder.respond(_turn("office contact")).message.startswith(copy.OFFICE_INFO)

    def test_anything_else_gets_the_menu(self, responder: FallbackResponder) -> None:
        reply = responder.respond(_turn("hello"))
        assert copy.MAIN_MENU[ChatLanguage.EN] in reply.message
        assert reply.structured_data is None


class TestFallbackResponder:
    def test_empty_table_raises(self) -> None:
        with pytest.raises(LookupError):
            FallbackResponder(rules=()).respond(_turn("hello"))
