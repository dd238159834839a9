"""Certificate and license applications.

Applications are not created from the chat flow (certificates and licenses
are informational there); the service backs the status lookup and is
available to other callers.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Final

import structlog

from src.models.enums import (
    ApplicationKind,
    ApplicationStatus,
    ChannelType,
    HistoryEventType,
    RequestCategory,
    RequestPriority,
    RequestStatus,
)
from src.models.records import Application, ApplicationRecord, RequestHistory, ServiceRequest
from src.services.grievances import REQUEST_HISTORY, SERVICE_REQUESTS
from src.services.identifiers import APPLICATION_PREFIX, unique_code
from src.services.store import RecordStore

logger = structlog.get_logger(__name__)

APPLICATIONS: Final[str] = "applications"

_DEFAULT_DOCUMENTS: Final[tuple[str, ...]] = ("Aadhaar Card", "Address proof", "Passport size photos")

_REQUIRED_DOCUMENTS: Final[dict[tuple[str, str], tuple[str, ...]]] = {
    ("certificate", "birth_certificate"): (
        "Hospital discharge summary or birth report",
        "Parents' Aadhaar cards",
        "Parents' marriage certificate",
        "Address proof",
    ),
    ("certificate", "income_certificate"): (
        "Aadhaar Card",
        "Salary slips or income proof",
        "Bank statement (last 6 months)",
        "Ration card (if available)",
        "Self-declaration affidavit",
    ),
    ("certificate", "caste_certificate"): (
        "Aadhaar Card",
        "Father's caste certificate",
        "School leaving certificate",
        "Ration card",
        "Affidavit on stamp paper",
    ),
    ("certificate", "domicile_certificate"): (
        "Aadhaar Card",
        "Address proof (electricity bill/rent agreement)",
        "Proof of residence for 15+ years",
        "School/college certificates",
        "Passport size photos",
    ),
    ("license", "shop_license"): (
        "Identity proof (Aadhaar/PAN)",
        "Address proof of shop",
        "Rent agreement or ownership document",
        "Passport size photos",
        "NOC from landlord (if rented)",
    ),
    ("license", "trade_license"): (
        "Identity proof",
        "Address proof",
        "Business registration certificate",
        "GST registration (if applicable)",
        "Passport size photos",
    ),
    ("license", "parking_permit"): (
        "Vehicle registration certificate (RC)",
        "Driving license",
        "Address proof",
        "Passport size photo",
    ),
    ("license", "event_permission"): (
        "Application letter with event details",
        "Identity proof of organizer",
        "NOC from local police",
        "Venue ownership/rental agreement",
        "List of expected attendees",
    ),
}


def required_documents(application_type: str, subtype: str) -> list[str]:
    """Documents needed for *application_type* / *subtype*."""
    return list(_REQUIRED_DOCUMENTS.get((application_type, subtype), _DEFAULT_DOCUMENTS))


def department_for_application(application_type: str, subtype: str) -> str:
    if "tax" in subtype:
        return "Revenue Dept"
    if "birth" in subtype or "death" in subtype:
        return "Health Dept"
    if "shop" in subtype or "trade" in subtype:
        return "Licensing Dept"
    return "Citizen Services" if application_type == ApplicationKind.CERTIFICATE else "Licensing Dept"


def to_application(record: ApplicationRecord) -> Application:
    return Application(
        id=record.application_id,
        application_type=record.application_type,
        application_subtype=record.application_subtype,
        status=record.status,
        documents_pending=record.documents_pending,
        created_at=record.created_at,
    )


class ApplicationService:
    __slots__ = ("_default_citizen_id", "_sla_days", "_store")

    def __init__(
        self,
        store: RecordStore,
        *,
        sla_days: int = 7,
        default_citizen_id: str = "00000000-0000-0000-0000-000000000000",
    ) -> None:
        self._store = store
        self._sla_days = sla_days
        self._default_citizen_id = default_citizen_id

    async def _code_taken(self, code: str) -> bool:
        return await self._store.count(APPLICATIONS, {"application_id": code}) > 0

    async def create_application(
        self,
        application_type: ApplicationKind,
        subtype: str,
        *,
        citizen_id: str | None = None,
        details: dict[str, Any] | None = None,
        documents: list[str] | None = None,
    ) -> Application | None:
        """Create an application plus its triage row; ``None`` on failure.

        When no documents are supplied, the required documents for the
        type are recorded as pending.
        """
        now = datetime.now(UTC)
        citizen = citizen_id or self._default_citizen_id
        log = logger.bind(application_type=application_type, subtype=subtype)
        log.info("application.create.started")

        try:
            application_id = await unique_code(APPLICATION_PREFIX, self._code_taken)
            pending = [] if documents else required_documents(application_type, subtype)
            request = ServiceRequest(
                citizen_id=citizen,
                category=RequestCategory(application_type.value),
                sub_category=subtype,
                status=RequestStatus.NEW,
                priority=RequestPriority.MEDIUM,
                channel=ChannelType.WHATSAPP,
                reference_code=application_id,
                department=department_for_application(application_type, subtype),
                description=f"Application for {subtype.replace('_', ' ')}",
                metadata={
                    "document_type": subtype,
                    **(details or {}),
                    "reference_id": application_id,
                    "pending_documents": pending,
                },
                sla_due_at=now + timedelta(days=self._sla_days),
                created_at=now,
                updated_at=now,
            )
            record = ApplicationRecord(
                application_id=application_id,
                citizen_id=citizen,
                service_request_id=request.id,
                application_type=application_type,
                application_subtype=subtype,
                documents_submitted=list(documents or []),
                documents_pending=pending,
                form_data=dict(details or {}),
                created_at=now,
                updated_at=now,
            )
            await self._store.insert(APPLICATIONS, record.model_dump(mode="json"))
            await self._store.insert(SERVICE_REQUESTS, request.model_dump(mode="json"))
            await self._store.insert(
                REQUEST_HISTORY,
                RequestHistory(
                    request_id=request.id,
                    event_type=HistoryEventType.CREATED,
                    description=f"Application {application_id} submitted",
                    new_value=RequestStatus.NEW,
                    performed_by=citizen,
                    created_at=now,
                ).model_dump(mode="json"),
            )
        except Exception:
            log.exception("application.create.failed")
            return None

        log.info("application.create.completed", application_id=application_id, pending=len(pending))
        return to_application(record)

    async def _find(self, application_id: str) -> ApplicationRecord | None:
        rows = await self._store.select(APPLICATIONS, {"application_id": application_id.upper()})
        return ApplicationRecord.model_validate(rows[0]) if rows else None

    async def get_application(self, application_id: str) -> Application | None:
        try:
            record = await self._find(application_id)
        except Exception:
            logger.exception("application.fetch.failed", application_id=application_id)
            return None
        if record is None:
            logger.info("application.fetch.not_found", application_id=application_id)
            return None
        return to_application(record)

    async def update_application_status(self, application_id: str, status: ApplicationStatus) -> bool:
        try:
            record = await self._find(application_id)
            if record is None:
                return False
            await self._store.update(
                APPLICATIONS,
                record.id,
                {"status": status.value, "updated_at": datetime.now(UTC).isoformat()},
            )
        except Exception:
            logger.exception("application.update_status.failed", application_id=application_id)
            return False
        logger.info("application.update_status.completed", application_id=application_id, status=status)
        return True

    async def get_citizen_applications(self, citizen_id: str) -> list[Application]:
        """All applications of *citizen_id*, newest first."""
        try:
            rows = await self._store.select(APPLICATIONS, {"citizen_id": citizen_id})
        except Exception:
            logger.exception("application.list.failed", citizen_id=citizen_id)
            return []
        records = sorted(
            (ApplicationRecord.model_validate(r) for r in rows),
            key=lambda r: r.created_at,
            reverse=True,
        )
        return [to_application(r) for r in records]
