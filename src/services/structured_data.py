"""Wire formats embedded in chat text.

Two formats travel inside plain message text:

* Bot replies may carry a ``[STRUCTURED_DATA] ... [/STRUCTURED_DATA]`` block
  of ``key: value`` lines.  The block is stripped from the text shown to the
  citizen and parsed into :class:`StructuredData`.
* User messages may start with an attachment marker
  ``[ATTACHMENT: <type>] <url> | <name>`` optionally followed by
  `` | <size>``.  The marker is replaced by a short display line.
"""

from __future__ import annotations

import re
from typing import Final
from uuid import uuid4

import structlog

from src.models.conversation import Attachment, StructuredData
from src.models.enums import AttachmentType

logger = structlog.get_logger(__name__)

_BLOCK_RE: Final[re.Pattern[str]] = re.compile(r"\[STRUCTURED_DATA\](.*?)\[/STRUCTURED_DATA\]", re.DOTALL)
_ATTACHMENT_RE: Final[re.Pattern[str]] = re.compile(r"^\[ATTACHMENT: (\w+)\] (.*?) \| (.*?)(?:$| \| (.*))", re.DOTALL)

_ATTACHMENT_ICONS: Final[dict[AttachmentType, str]] = {
    AttachmentType.DOCUMENT: "📄",
    AttachmentType.IMAGE: "📷",
    AttachmentType.VIDEO: "🎥",
}


# ---------------------------------------------------------------------------
# Structured-data block
# ---------------------------------------------------------------------------


def parse_block_lines(body: str) -> dict[str, str]:
    """Parse ``key: value`` lines; values may contain colons, blanks are dropped."""
    fields: dict[str, str] = {}
    for line in body.strip().splitlines():
        key, sep, value = line.partition(":")
        key, value = key.strip(), value.strip()
        if sep and key and value:
            fields[key] = value
    return fields


def extract_structured_data(text: str) -> tuple[str, StructuredData | None]:
    """Strip the first structured-data block from *text* and parse it.

    Returns the cleaned message and the parsed data (``None`` when the text
    carries no block).
    """
    match = _BLOCK_RE.search(text)
    if match is None:
        return text.strip(), None
    cleaned = _BLOCK_RE.sub("", text, count=1).strip()
    return cleaned, StructuredData.from_wire(parse_block_lines(match.group(1)))


def format_structured_data(data: StructuredData) -> str:
    """Render *data* as a block, e.g. for few-shot examples in prompts."""
    lines = []
    if data.type is not None:
        lines.append(f"type: {data.type}")
    lines.extend(f"{key}: {value}" for key, value in data.present_fields().items())
    if data.language is not None:
        lines.append(f"language: {data.language}")
    return "[STRUCTURED_DATA]\n" + "\n".join(lines) + "\n[/STRUCTURED_DATA]"


# ---------------------------------------------------------------------------
# Attachment marker
# ---------------------------------------------------------------------------


def parse_attachment_marker(text: str) -> tuple[str, Attachment | None]:
    """Split an attachment marker off a user message.

    Returns the display text (``📷 Sent image: photo.jpg``) and the parsed
    attachment.  Text without a valid marker is returned unchanged with
    ``None``.
    """
    if not text.startswith("[ATTACHMENT:"):
        return text, None
    match = _ATTACHMENT_RE.match(text)
    if match is None:
        logger.warning("attachment.marker_malformed")
        return text, None

    raw_type, url, name, raw_size = match.groups()
    try:
        kind = AttachmentType(raw_type.lower())
    except ValueError:
        logger.warning("attachment.unknown_type", type=raw_type)
        kind = AttachmentType.IMAGE

    size: int | None = None
    if raw_size:
        try:
            size = int(float(raw_size.strip()))
        except ValueError:
            size = None

    attachment = Attachment(id=uuid4().hex, type=kind, url=url, name=name.strip(), size=size)
    return display_text(attachment), attachment


def display_text(attachment: Attachment) -> str:
    return f"{_ATTACHMENT_ICONS[attachment.type]} Sent {attachment.type}: {attachment.name}"
