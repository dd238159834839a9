from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Final
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from src.models.conversation import Attachment, ConversationContext, StructuredData
from src.models.enums import ActionType, MessageSender, MessageStatus, RequestStatus


class ChatMessage(BaseModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    text: str
    sender: MessageSender
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    status: MessageStatus = MessageStatus.SENT
    attachment: Attachment | None = None


class GeneratedReply(BaseModel):
    """What a response generator returns for one turn."""

    message: str
    structured_data: StructuredData | None = None


class ActionResult(BaseModel):
    type: ActionType
    success: bool
    data: dict[str, Any] | None = None
    message: str | None = None


class TurnResult(BaseModel):
    """Outcome of one processed user turn."""

    reply: ChatMessage
    user_message: ChatMessage
    context: ConversationContext
    action: ActionResult | None = None


# ---------------------------------------------------------------------------
# API bodies
# ---------------------------------------------------------------------------


class CreateSessionRequest(BaseModel):
    citizen_id: str | None = Field(default=None, max_length=64)


MAX_MESSAGE_CHARS: Final[int] = 4000
# An inline marker carries the file itself as a base64 data-URI (~10 MB file).
MAX_INLINE_ATTACHMENT_CHARS: Final[int] = 14_000_000
_ATTACHMENT_MARKER_PREFIX: Final[str] = "[ATTACHMENT:"


class SendMessageRequest(BaseModel):
    text: str = ""
    attachment: Attachment | None = None

    @field_validator("text")
    @classmethod
    def check_text_length(cls, value: str) -> str:
        limit = MAX_INLINE_ATTACHMENT_CHARS if value.startswith(_ATTACHMENT_MARKER_PREFIX) else MAX_MESSAGE_CHARS
        if len(value) > limit:
            raise ValueError(f"text must have at most {limit} characters")
        return value


class SessionResponse(BaseModel):
    session_id: str
    citizen_id: str
    context: ConversationContext
    messages: list[ChatMessage]


class TurnResponse(BaseModel):
    session_id: str
    user_message: ChatMessage
    reply: ChatMessage
    context: ConversationContext
    action: ActionResult | None = None


class StatusUpdateRequest(BaseModel):
    status: RequestStatus
    admin_id: str = Field(..., min_length=1, max_length=64)


class AssignRequest(BaseModel):
    admin_id: str = Field(..., min_length=1, max_length=64)


class NoteRequest(BaseModel):
    note: str = Field(..., min_length=1, max_length=2000)
    author_id: str = Field(..., min_length=1, max_length=64)


class SendNotificationRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)
    sent_by: str | None = None


class MarkReadRequest(BaseModel):
    citizen_id: str = Field(..., min_length=1, max_length=64)
