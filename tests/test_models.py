"""Tests for data models: enums, conversation context and record rows."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from src.models.chat import MAX_MESSAGE_CHARS, SendMessageRequest
from src.models.conversation import (
    Attachment,
    CollectedData,
    ConversationContext,
    GrievanceDraft,
    StructuredData,
)
from src.models.enums import (
    AttachmentType,
    ChatLanguage,
    ConversationFlow,
    GrievanceStatus,
    RequestStatus,
    StructuredDataType,
)
from src.models.records import Bill, NotificationRead, ServiceRequest


def _photo() -> Attachment:
    return Attachment(id="a1", type=AttachmentType.IMAGE, url="data:image/png;base64,AAAA", name="photo.jpg")


# -----------------------------------------------------------------------
# Enum tests
# -----------------------------------------------------------------------


class TestEnums:
    def test_enums_are_str(self) -> None:
        assert ConversationFlow.BILL_PAYMENT == "bill_payment"
        assert StructuredDataType.STATUS_QUERY == "status_query"
        assert ChatLanguage.HINGLISH == "hinglish"

    def test_storage_and_display_statuses_differ(self) -> None:
        assert RequestStatus.IN_PROGRESS.value == "in_progress"
        assert GrievanceStatus.IN_PROGRESS.value == "In Progress", (
            "citizen-facing grievance statuses are display strings"
        )


# -----------------------------------------------------------------------
# StructuredData tests
# -----------------------------------------------------------------------


class TestStructuredData:
    def test_from_wire_keeps_known_fields(self) -> None:
        data = StructuredData.from_wire({"type": "grievance", "category": "roads", "Location": " Ward 5 "})
        assert data.type == StructuredDataType.GRIEVANCE
        assert data.category == "roads"
        assert data.location == "Ward 5", "keys are case-insensitive and values are trimmed"

    def test_from_wire_drops_unknown_keys(self) -> None:
        data = StructuredData.from_wire({"type": "bill", "mood": "angry"})
        assert data.present_fields() == {}

    def test_from_wire_drops_unknown_type(self) -> None:
        data = StructuredData.from_wire({"type": "escalation", "category": "roads"})
        assert data.type is None, "an unrecognised type must not fail the turn"
        assert data.category == "roads"

    def test_from_wire_language(self) -> None:
        assert StructuredData.from_wire({"language": "HI"}).language == ChatLanguage.HI

    def test_present_fields_skips_empty(self) -> None:
        data = StructuredData(type=StructuredDataType.GRIEVANCE, category="garbage", location="")
        assert data.present_fields() == {"category": "garbage"}


# -----------------------------------------------------------------------
# Conversation context tests
# -----------------------------------------------------------------------


class TestConversationContext:
    def test_defaults(self) -> None:
        context = ConversationContext()
        assert context.current_flow == ConversationFlow.IDLE
        assert context.language is None
        assert context.collected_data == CollectedData()
        assert context.filed_requests == {}

    def test_context_is_frozen(self) -> None:
        context = ConversationContext()
        with pytest.raises(ValidationError):
            context.current_flow = ConversationFlow.GRIEVANCE  # type: ignore[misc]

    def test_effective_location_prefers_location(self) -> None:
        assert CollectedData(area="Raopura", location="Ward 5").effective_location == "Ward 5"
        assert CollectedData(area="Raopura").effective_location == "Raopura"
        assert CollectedData().effective_location is None


# -----------------------------------------------------------------------
# Payload tests
# -----------------------------------------------------------------------


class TestGrievanceDraft:
    def test_complete_draft(self) -> None:
        draft = GrievanceDraft(category="roads", location="Ward 5", description="Pothole", attachments=(_photo(),))
        assert draft.is_complete is True

    @pytest.mark.parametrize("missing", ["category", "location", "description", "attachments"])
    def test_incomplete_without(self, missing: str) -> None:
        values = {"category": "roads", "location": "Ward 5", "description": "Pothole", "attachments": (_photo(),)}
        values[missing] = () if missing == "attachments" else None
        assert GrievanceDraft(**values).is_complete is False, (
            f"a draft without {missing} must not be filed"
        )

    def test_landmark_is_optional(self) -> None:
        draft = GrievanceDraft(category="roads", location="Ward 5", description="Pothole", attachments=(_photo(),))
        assert draft.landmark is None and draft.is_complete


# -----------------------------------------------------------------------
# Record rows
# -----------------------------------------------------------------------


class TestRecords:
    def test_notification_read_key_is_the_pair(self) -> None:
        read = NotificationRead.for_pair("n1", "c1")
        assert read.id == "n1:c1"
        assert NotificationRead.for_pair("n1", "c1").id == read.id

    def test_bill_amount_must_be_non_negative(self) -> None:
        with pytest.raises(ValidationError):
            Bill(consumer_number="1", bill_type="water", amount=-5, due_date=date(2025, 1, 1))

    def test_service_request_round_trips_as_json_row(self) -> None:
        request = ServiceRequest(citizen_id="c1", category="complaint", reference_code="GR00001")
        row = request.model_dump(mode="json")
        assert row["status"] == "new"
        assert ServiceRequest.model_validate(row) == request


class TestSendMessageRequest:
    def test_plain_text_is_capped(self) -> None:
        SendMessageRequest(text="a" * MAX_MESSAGE_CHARS)
        with pytest.raises(ValidationError):
            SendMessageRequest(text="a" * (MAX_MESSAGE_CHARS + 1))

    def test_inline_attachment_may_be_long(self) -> None:
        marker = f"[ATTACHMENT: image] data:image/jpeg;base64,{'A' * 50_000} | photo.jpg"
        assert SendMessageRequest(text=marker).text == marker
