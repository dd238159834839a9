from __future__ import annotations

from enum import StrEnum


class ConversationFlow(StrEnum):
    __slots__ = ()

    IDLE = "idle"
    BILL_PAYMENT = "bill_payment"
    GRIEVANCE = "grievance"
    CERTIFICATE = "certificate"
    STATUS_TRACKING = "status_tracking"


class StructuredDataType(StrEnum):
    """The ``type`` a bot reply declares for its structured-data block."""

    __slots__ = ()

    GRIEVANCE = "grievance"
    APPLICATION = "application"
    BILL = "bill"
    STATUS_QUERY = "status_query"
    INFO = "info"


class ChatLanguage(StrEnum):
    __slots__ = ()

    EN = "en"
    HI = "hi"
    HINGLISH = "hinglish"


class AttachmentType(StrEnum):
    __slots__ = ()

    DOCUMENT = "document"
    IMAGE = "image"
    VIDEO = "video"


class MessageSender(StrEnum):
    __slots__ = ()

    USER = "user"
    BOT = "bot"


class MessageStatus(StrEnum):
    __slots__ = ()

    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


class ActionType(StrEnum):
    __slots__ = ()

    GRIEVANCE_CREATED = "grievance_created"
    APPLICATION_CREATED = "application_created"
    BILL_FOUND = "bill_found"
    STATUS_FETCHED = "status_fetched"


class GrievanceStatus(StrEnum):
    """Status vocabulary shown to citizens for grievances."""

    __slots__ = ()

    NEW = "New"
    IN_PROGRESS = "In Progress"
    UNDER_REVIEW = "Under Review"
    RESOLVED = "Resolved"
    CLOSED = "Closed"
    REJECTED = "Rejected"


class ApplicationStatus(StrEnum):
    __slots__ = ()

    PENDING = "Pending"
    UNDER_REVIEW = "Under Review"
    DOCUMENT_VERIFICATION = "Document Verification"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    READY_FOR_COLLECTION = "Ready for Collection"


class ApplicationKind(StrEnum):
    __slots__ = ()

    CERTIFICATE = "certificate"
    LICENSE = "license"


class BillType(StrEnum):
    __slots__ = ()

    ELECTRICITY = "electricity"
    WATER = "water"
    PROPERTY_TAX = "property_tax"
    OTHER = "other"


class BillStatus(StrEnum):
    __slots__ = ()

    UNPAID = "unpaid"
    PAID = "paid"
    OVERDUE = "overdue"


class RequestCategory(StrEnum):
    """Category of a row in the ``service_requests`` table."""

    __slots__ = ()

    COMPLAINT = "complaint"
    CERTIFICATE = "certificate"
    LICENSE = "license"
    PAYMENT = "payment"


class RequestStatus(StrEnum):
    """Storage status vocabulary used by the admin triage side."""

    __slots__ = ()

    NEW = "new"
    IN_PROGRESS = "in_progress"
    UNDER_REVIEW = "under_review"
    RESOLVED = "resolved"
    CLOSED = "closed"
    REJECTED = "rejected"


class RequestPriority(StrEnum):
    __slots__ = ()

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ChannelType(StrEnum):
    __slots__ = ()

    WHATSAPP = "whatsapp"
    WEB = "web"
    PHONE = "phone"


class HistoryEventType(StrEnum):
    __slots__ = ()

    CREATED = "created"
    STATUS_CHANGED = "status_changed"
    ASSIGNED = "assigned"
    REASSIGNED = "reassigned"
    NOTE_ADDED = "note_added"
    ESCALATED = "escalated"
    RESOLVED = "resolved"
    CLOSED = "closed"


class AdminRole(StrEnum):
    __slots__ = ()

    VIEWER = "viewer"
    DEPARTMENT_ADMIN = "department_admin"
    SUPER_ADMIN = "super_admin"


class NotificationTarget(StrEnum):
    __slots__ = ()

    ALL = "all"
    DEPARTMENT = "department"
    INDIVIDUAL = "individual"


class SlaBadge(StrEnum):
    __slots__ = ()

    OVERDUE = "Overdue"
    ON_TIME = "On time"
    NO_SLA = "No SLA"
