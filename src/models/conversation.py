"""Conversation context and per-turn structured data.

The context is threaded through the state machine as an immutable value:
every reducer returns a new :class:`ConversationContext` built with
``model_copy(update=...)`` rather than mutating the one it was given.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

import structlog
from pydantic import BaseModel, Field

from src.models.enums import AttachmentType, ChatLanguage, ConversationFlow, StructuredDataType

logger = structlog.get_logger(__name__)


class Attachment(BaseModel):
    model_config = {"frozen": True}

    id: str
    type: AttachmentType
    url: str  # data-URI or remote URL
    name: str
    size: int | None = None


class CollectedData(BaseModel):
    """Fields accumulated across the turns of a flow."""

    model_config = {"frozen": True}

    category: str | None = None
    subcategory: str | None = None
    citizen_name: str | None = None
    phone: str | None = None
    area: str | None = None
    ward: str | None = None
    location: str | None = None
    landmark: str | None = None
    description: str | None = None
    consumer_number: str | None = None
    grievance_id: str | None = None
    application_id: str | None = None
    attachments: tuple[Attachment, ...] = ()

    @property
    def effective_location(self) -> str | None:
        return self.location or self.area


class ConversationContext(BaseModel):
    model_config = {"frozen": True}

    current_flow: ConversationFlow = ConversationFlow.IDLE
    collected_data: CollectedData = Field(default_factory=CollectedData)
    language: ChatLanguage | None = None
    filed_requests: dict[str, str] = Field(default_factory=dict)
    """Grievance draft fingerprint -> grievance ID already created for it."""


# ---------------------------------------------------------------------------
# Structured data emitted by the response generator
# ---------------------------------------------------------------------------

# Keys that may be merged into ``CollectedData``.
MERGEABLE_FIELDS: tuple[str, ...] = (
    "category",
    "subcategory",
    "citizen_name",
    "phone",
    "area",
    "ward",
    "location",
    "landmark",
    "description",
    "consumer_number",
    "grievance_id",
    "application_id",
)


class StructuredData(BaseModel):
    """Flat, all-optional field set a bot reply declares for the turn."""

    model_config = {"frozen": True}

    type: StructuredDataType | None = None
    category: str | None = None
    subcategory: str | None = None
    citizen_name: str | None = None
    phone: str | None = None
    area: str | None = None
    ward: str | None = None
    location: str | None = None
    landmark: str | None = None
    description: str | None = None
    consumer_number: str | None = None
    grievance_id: str | None = None
    application_id: str | None = None
    language: ChatLanguage | None = None

    @classmethod
    def from_wire(cls, raw: Mapping[str, str]) -> StructuredData:
        """Build from loosely-typed ``key: value`` pairs.

        Unknown keys are dropped.  An unrecognised ``type`` or ``language``
        value is dropped (and logged) rather than failing the turn.
        """
        values: dict[str, object] = {}
        for key, value in raw.items():
            key = key.strip().lower()
            value = value.strip() if isinstance(value, str) else value
            if not value:
                continue
            if key == "type":
                try:
                    values["type"] = StructuredDataType(str(value).lower())
                except ValueError:
                    logger.warning("structured_data.unknown_type", value=value)
            elif key == "language":
                try:
                    values["language"] = ChatLanguage(str(value).lower())
                except ValueError:
                    logger.warning("structured_data.unknown_language", value=value)
            elif key in MERGEABLE_FIELDS:
                values[key] = value
        return cls(**values)

    def present_fields(self) -> dict[str, str]:
        """Return the mergeable fields that carry a value."""
        return {name: getattr(self, name) for name in MERGEABLE_FIELDS if getattr(self, name)}


# ---------------------------------------------------------------------------
# Tagged turn payloads (action dispatch is over these types)
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GrievanceDraft:
    category: str | None = None
    subcategory: str | None = None
    location: str | None = None
    landmark: str | None = None
    description: str | None = None
    ward: str | None = None
    citizen_name: str | None = None
    phone: str | None = None
    attachments: tuple[Attachment, ...] = ()

    @property
    def is_complete(self) -> bool:
        return bool(self.category and self.description and self.location and self.attachments)


@dataclass(frozen=True, slots=True)
class BillQuery:
    consumer_number: str | None = None


@dataclass(frozen=True, slots=True)
class StatusQuery:
    grievance_id: str | None = None
    application_id: str | None = None


@dataclass(frozen=True, slots=True)
class ApplicationDraft:
    category: str | None = None
    subcategory: str | None = None
    citizen_name: str | None = None
    phone: str | None = None
    attachments: tuple[Attachment, ...] = ()


@dataclass(frozen=True, slots=True)
class InfoTurn:
    topic: str | None = None


TurnPayload = GrievanceDraft | BillQuery | StatusQuery | ApplicationDraft | InfoTurn
