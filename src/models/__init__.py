from src.models.admin import (
    AdminActions,
    CitizenDetails,
    DashboardStats,
    RequestDetails,
    RequestListResponse,
    RequestSummary,
)
from src.models.chat import (
    ActionResult,
    ChatMessage,
    GeneratedReply,
    TurnResult,
)
from src.models.conversation import (
    ApplicationDraft,
    Attachment,
    BillQuery,
    CollectedData,
    ConversationContext,
    GrievanceDraft,
    InfoTurn,
    StatusQuery,
    StructuredData,
    TurnPayload,
)
from src.models.enums import (
    ActionType,
    AdminRole,
    ApplicationStatus,
    AttachmentType,
    BillStatus,
    BillType,
    ChatLanguage,
    ConversationFlow,
    GrievanceStatus,
    RequestCategory,
    RequestPriority,
    RequestStatus,
    StructuredDataType,
)
from src.models.records import (
    Application,
    ApplicationRecord,
    Bill,
    Citizen,
    Grievance,
    InternalNote,
    Notification,
    NotificationRead,
    RequestHistory,
    ServiceRequest,
)

__all__ = [
    "ActionResult",
    "ActionType",
    "AdminActions",
    "AdminRole",
    "Application",
    "ApplicationDraft",
    "ApplicationRecord",
    "ApplicationStatus",
    "Attachment",
    "AttachmentType",
    "Bill",
    "BillQuery",
    "BillStatus",
    "BillType",
    "ChatLanguage",
    "ChatMessage",
    "Citizen",
    "CitizenDetails",
    "CollectedData",
    "ConversationContext",
    "ConversationFlow",
    "DashboardStats",
    "GeneratedReply",
    "Grievance",
    "GrievanceDraft",
    "GrievanceStatus",
    "InfoTurn",
    "InternalNote",
    "Notification",
    "NotificationRead",
    "RequestCategory",
    "RequestDetails",
    "RequestHistory",
    "RequestListResponse",
    "RequestPriority",
    "RequestStatus",
    "RequestSummary",
    "ServiceRequest",
    "StatusQuery",
    "StructuredData",
    "StructuredDataType",
    "TurnPayload",
    "TurnResult",
]
