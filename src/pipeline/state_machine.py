"""Conversation state machine.

Pure functions over immutable :class:`ConversationContext` values.  The
orchestrator performs all I/O around them:

1. :func:`merge_turn` folds a turn's attachment and structured data into
   the context.
2. :func:`plan_action` decides whether the merged context satisfies an
   action's precondition and, if so, returns the tagged payload to run.
"""

from __future__ import annotations

import hashlib
import re
from enum import StrEnum
from typing import Final

from src.models.conversation import (
    Attachment,
    BillQuery,
    CollectedData,
    ConversationContext,
    GrievanceDraft,
    StatusQuery,
    StructuredData,
    TurnPayload,
)
from src.models.enums import ConversationFlow, StructuredDataType

# ---------------------------------------------------------------------------
# Flow transitions
# ---------------------------------------------------------------------------

_TYPE_TO_FLOW: Final[dict[StructuredDataType, ConversationFlow]] = {
    StructuredDataType.GRIEVANCE: ConversationFlow.GRIEVANCE,
    StructuredDataType.APPLICATION: ConversationFlow.CERTIFICATE,
    StructuredDataType.BILL: ConversationFlow.BILL_PAYMENT,
    StructuredDataType.STATUS_QUERY: ConversationFlow.STATUS_TRACKING,
}

RESTART_COMMANDS: Final[frozenset[str]] = frozenset({"restart", "reset", "clear", "start over"})


def flow_for_type(data_type: StructuredDataType | None) -> ConversationFlow:
    """Map a declared turn type to the flow it puts the conversation in."""
    if data_type is None:
        return ConversationFlow.IDLE
    return _TYPE_TO_FLOW.get(data_type, ConversationFlow.IDLE)


def is_restart_command(text: str) -> bool:
    return text.strip().lower() in RESTART_COMMANDS


def restarted(context: ConversationContext) -> ConversationContext:
    """Fresh context that keeps the chosen language and the filing ledger."""
    return ConversationContext(language=context.language, filed_requests=dict(context.filed_requests))


# ---------------------------------------------------------------------------
# Grievance draft
# ---------------------------------------------------------------------------


class GrievanceField(StrEnum):
    __slots__ = ()

    CATEGORY = "category"
    LOCATION = "location"
    LANDMARK = "landmark"
    DESCRIPTION = "description"
    PHOTO = "photo"


GRIEVANCE_FIELD_ORDER: Final[tuple[GrievanceField, ...]] = (
    GrievanceField.CATEGORY,
    GrievanceField.LOCATION,
    GrievanceField.LANDMARK,
    GrievanceField.DESCRIPTION,
    GrievanceField.PHOTO,
)


def _has_field(data: CollectedData, field: GrievanceField) -> bool:
    if field is GrievanceField.LOCATION:
        return bool(data.effective_location)
    if field is GrievanceField.PHOTO:
        return bool(data.attachments)
    return bool(getattr(data, field.value))


def next_grievance_field(data: CollectedData) -> GrievanceField | None:
    """Return the first missing grievance field, or ``None`` when complete."""
    for field in GRIEVANCE_FIELD_ORDER:
        if not _has_field(data, field):
            return field
    return None


_LANDMARK_SPLIT_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?P<location>.+?)\s+(?:near|opposite|behind|beside|next to)\s+(?P<landmark>.+)$",
    re.IGNORECASE,
)
_LANDMARK_SUFFIX_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?P<location>.+?)[,\s]+(?P<landmark>[^,]+?)\s+ke\s+(?:paas|pass|samne|saamne)$",
    re.IGNORECASE,
)


def split_location_landmark(text: str) -> tuple[str, str | None]:
    """Split ``"Ward 5 near SBI"`` into ``("Ward 5", "SBI")``.

    Also understands the Hinglish postposition form
    ``"Ward 5, SBI ke paas"``.  Text without a landmark marker is returned
    whole as the location.
    """
    text = text.strip()
    for pattern in (_LANDMARK_SPLIT_RE, _LANDMARK_SUFFIX_RE):
        match = pattern.match(text)
        if match:
            return match.group("location").strip(" ,"), match.group("landmark").strip(" ,.")
    return text, None


def draft_fingerprint(data: CollectedData) -> str:
    """Stable hash of a grievance draft's text fields.

    Attachments are excluded so that re-sending a photo for an already
    filed draft maps to the same grievance.
    """
    parts = (
        data.category or "",
        data.effective_location or "",
        data.landmark or "",
        data.description or "",
    )
    normalised = "|".join(" ".join(p.lower().split()) for p in parts)
    return hashlib.sha256(normalised.encode()).hexdigest()[:16]


def filed_grievance_id(context: ConversationContext) -> str | None:
    """Grievance ID already created for the current draft, if any."""
    if not context.collected_data.category:
        return None
    return context.filed_requests.get(draft_fingerprint(context.collected_data))


def record_filed(context: ConversationContext, grievance_id: str) -> ConversationContext:
    ledger = dict(context.filed_requests)
    ledger[draft_fingerprint(context.collected_data)] = grievance_id
    return context.model_copy(update={"filed_requests": ledger})


_DRAFT_TEXT_FIELDS: Final[tuple[str, ...]] = ("location", "area", "landmark", "description")


def _repeats_draft(data: CollectedData, fields: dict[str, str]) -> bool:
    """True when *fields* carry draft text and every value equals the draft's."""
    if not any(fields.get(name) for name in _DRAFT_TEXT_FIELDS):
        return False
    return all(getattr(data, name) == value for name, value in fields.items())


# ---------------------------------------------------------------------------
# Reducers
# ---------------------------------------------------------------------------


def merge_turn(
    context: ConversationContext,
    data: StructuredData | None = None,
    attachment: Attachment | None = None,
) -> ConversationContext:
    """Fold one turn into *context* and return the new context.

    * Present fields overwrite, absent fields never clear.
    * A declared ``type`` overwrites the flow; no type leaves it unchanged.
    * A declared ``language`` overwrites the context language.
    * Attachments are appended and never removed.
    * Once the current draft has been filed, the next turn that declares a
      type starts from an empty draft, unless it only re-sends the filed
      draft's own values.  *attachment* is appended after that, so it
      belongs to the new draft.
    """
    collected = context.collected_data
    update: dict[str, object] = {}

    if data is not None:
        fields = data.present_fields()
        if data.type is not None:
            if filed_grievance_id(context) is not None and not _repeats_draft(collected, fields):
                collected = CollectedData()
            update["current_flow"] = flow_for_type(data.type)
        if data.language is not None:
            update["language"] = data.language
        if fields:
            collected = collected.model_copy(update=fields)

    if attachment is not None:
        collected = collected.model_copy(update={"attachments": (*collected.attachments, attachment)})

    if collected is not context.collected_data:
        update["collected_data"] = collected
    if not update:
        return context
    return context.model_copy(update=update)


# ---------------------------------------------------------------------------
# Action planning
# ---------------------------------------------------------------------------


def grievance_draft(data: CollectedData) -> GrievanceDraft:
    return GrievanceDraft(
        category=data.category,
        subcategory=data.subcategory,
        location=data.effective_location,
        landmark=data.landmark,
        description=data.description,
        ward=data.ward,
        citizen_name=data.citizen_name,
        phone=data.phone,
        attachments=data.attachments,
    )


def plan_action(data: StructuredData | None, context: ConversationContext) -> TurnPayload | None:
    """Return the payload to execute for this turn, or ``None``.

    *context* is the context after :func:`merge_turn`.  Only the turn's
    declared type can trigger an action:

    * ``grievance``: the accumulated draft holds category, description,
      location and at least one attachment.
    * ``bill``: the turn itself carries a consumer number.
    * ``status_query``: the turn itself carries a grievance or
      application ID.

    Applications are never created from chat.
    """
    if data is None or data.type is None:
        return None

    if data.type == StructuredDataType.GRIEVANCE:
        draft = grievance_draft(context.collected_data)
        return draft if draft.is_complete else None

    if data.type == StructuredDataType.BILL:
        if data.consumer_number:
            return BillQuery(consumer_number=data.consumer_number.upper())
        return None

    if data.type == StructuredDataType.STATUS_QUERY:
        if data.grievance_id or data.application_id:
            return StatusQuery(
                grievance_id=data.grievance_id.upper() if data.grievance_id else None,
                application_id=data.application_id.upper() if data.application_id else None,
            )
        return None

    return None
