"""Tests for the structured-data block and the attachment marker."""

from __future__ import annotations

from src.models.conversation import StructuredData
from src.models.enums import AttachmentType, ChatLanguage, StructuredDataType
from src.services.structured_data import (
    display_text,
    extract_structured_data,
    format_structured_data,
    parse_attachment_marker,
    parse_block_lines,
)


# -----------------------------------------------------------------------
# Structured-data block
# -----------------------------------------------------------------------


class TestParseBlockLines:
    def test_values_may_contain_colons(self) -> None:
        fields = parse_block_lines("type: info\ndescription: Open 10:00 to 18:00\n")
        assert fields == {"type": "info", "description": "Open 10:00 to 18:00"}

    def test_blank_and_malformed_lines_dropped(self) -> None:
        fields = parse_block_lines("\ncategory:\nnot a pair\n location : Ward 5 \n")
        assert fields == {"location": "Ward 5"}


class TestExtractStructuredData:
    def test_block_is_stripped_and_parsed(self) -> None:
        text = (
            "Please share a nearby landmark.\n"
            "[STRUCTURED_DATA]\ntype: grievance\ncategory: roads\nlocation: Ward 5\n[/STRUCTURED_DATA]"
        )
        message, data = extract_structured_data(text)
        assert message == "Please share a nearby landmark.", (
            "the block must never be shown to the citizen"
        )
        assert data is not None
        assert data.type == StructuredDataType.GRIEVANCE
        assert data.category == "roads"
        assert data.location == "Ward 5"

    def test_no_block(self) -> None:
        message, data = extract_structured_data("  Hello!  ")
        assert message == "Hello!"
        assert data is None

    def test_only_first_block_is_used(self) -> None:
        text = (
            "[STRUCTURED_DATA]\ntype: bill\n[/STRUCTURED_DATA]"
            "Done.[STRUCTURED_DATA]\ntype: grievance\n[/STRUCTURED_DATA]"
        )
        _, data = extract_structured_data(text)
        assert data is not None and data.type == StructuredDataType.BILL

    def test_formatted_block_parses_back(self) -> None:
        original = StructuredData(
            type=StructuredDataType.STATUS_QUERY,
            grievance_id="GR12345",
            language=ChatLanguage.HINGLISH,
        )
        _, parsed = extract_structured_data("Checking.\n" + format_structured_data(original))
        assert parsed == original


# -----------------------------------------------------------------------
# Attachment marker
# -----------------------------------------------------------------------


class TestParseAttachmentMarker:
    def test_image_marker(self) -> None:
        display, attachment = parse_attachment_marker("[ATTACHMENT: image] data:image/png;base64,AAAA | pothole.jpg")
        assert attachment is not None
        assert attachment.type == AttachmentType.IMAGE
        assert attachment.url == "data:image/png;base64,AAAA"
        assert attachment.name == "pothole.jpg"
        assert attachment.size is None
        assert display == "📷 Sent image: pothole.jpg"

    def test_marker_with_size(self) -> None:
        _, attachment = parse_attachment_marker("[ATTACHMENT: document] https://x/bill.pdf | bill.pdf | 20480")
        assert attachment is not None
        assert attachment.type == AttachmentType.DOCUMENT
        assert attachment.name == "bill.pdf"
        assert attachment.size == 20480

    def test_unknown_type_defaults_to_image(self) -> None:
        _, attachment = parse_attachment_marker("[ATTACHMENT: audio] https://x/a.ogg | note.ogg")
        assert attachment is not None and attachment.type == AttachmentType.IMAGE

    def test_plain_text_unchanged(self) -> None:
        assert parse_attachment_marker("Ward 5 near SBI") == ("Ward 5 near SBI", None)

    def test_malformed_marker_left_as_text(self) -> None:
        text = "[ATTACHMENT: image] missing separator"
        assert parse_attachment_marker(text) == (text, None)

    def test_each_attachment_gets_an_id(self) -> None:
        marker = "[ATTACHMENT: image] data:x | a.jpg"
        _, first = parse_attachment_marker(marker)
        _, second = parse_attachment_marker(marker)
        assert first is not None and second is not None
        assert first.id != second.id


class TestDisplayText:
    def test_video(self) -> None:
        _, attachment = parse_attachment_marker("[ATTACHMENT: video] https://x/v.mp4 | clip.mp4")
        assert attachment is not None
        assert display_text(attachment) == "🎥 Sent video: clip.mp4"
