"""Side-effecting actions triggered by a completed turn payload.

:class:`ActionExecutor` dispatches on the payload type.  It never raises:
backend failures come back as an unsuccessful :class:`ActionResult`, which
the reply renderer turns into a "not found" or "action failed" card.
"""

from __future__ import annotations

from datetime import UTC, datetime

import structlog

from src.models.chat import ActionResult
from src.models.conversation import ApplicationDraft, BillQuery, GrievanceDraft, StatusQuery, TurnPayload
from src.models.enums import ActionType, ApplicationKind
from src.services.applications import ApplicationService
from src.services.bills import BillService, format_bill_details, generate_payment_link
from src.services.grievances import GrievanceService

logger = structlog.get_logger(__name__)

ACTION_FAILED = "Unable to complete action"


class ActionExecutor:
    """Runs the action for a :data:`TurnPayload`."""

    __slots__ = ("_applications", "_bills", "_grievances", "_payment_base_url")

    def __init__(
        self,
        grievances: GrievanceService,
        applications: ApplicationService,
        bills: BillService,
        *,
        payment_base_url: str = "https://pay.gov.in/citizen",
    ) -> None:
        self._grievances = grievances
        self._applications = applications
        self._bills = bills
        self._payment_base_url = payment_base_url

    async def execute(self, payload: TurnPayload, citizen_id: str | None = None) -> ActionResult | None:
        """Execute *payload*; ``None`` when the payload carries no action."""
        log = logger.bind(payload=type(payload).__name__)
        try:
            if isinstance(payload, GrievanceDraft):
                return await self._create_grievance(payload, citizen_id)
            if isinstance(payload, BillQuery):
                return await self._find_bill(payload)
            if isinstance(payload, StatusQuery):
                return await self._fetch_status(payload)
            if isinstance(payload, ApplicationDraft):
                return await self._create_application(payload, citizen_id)
        except Exception:
            log.exception("action.execute_failed")
            return ActionResult(type=_result_type(payload), success=False, message=ACTION_FAILED)
        return None

    async def _create_grievance(self, draft: GrievanceDraft, citizen_id: str | None) -> ActionResult:
        grievance = await self._grievances.create_grievance(draft, citizen_id)
        if grievance is None:
            return ActionResult(type=ActionType.GRIEVANCE_CREATED, success=False, message=ACTION_FAILED)
        return ActionResult(
            type=ActionType.GRIEVANCE_CREATED,
            success=True,
            data={"grievance_id": grievance.id, "department": grievance.department},
        )

    async def _find_bill(self, query: BillQuery) -> ActionResult:
        bill = await self._bills.get_bill(query.consumer_number or "")
        if bill is None:
            return ActionResult(type=ActionType.BILL_FOUND, success=False, message="Bill not found")
        return ActionResult(
            type=ActionType.BILL_FOUND,
            success=True,
            data={
                "bill": bill.model_dump(mode="json"),
                "details": format_bill_details(bill, datetime.now(UTC).date()),
                "payment_link": generate_payment_link(bill, self._payment_base_url),
            },
        )

    async def _fetch_status(self, query: StatusQuery) -> ActionResult:
        if query.grievance_id:
            grievance = await self._grievances.get_grievance(query.grievance_id)
            if grievance is not None:
                return ActionResult(
                    type=ActionType.STATUS_FETCHED,
                    success=True,
                    data={"grievance": grievance.model_dump(mode="json")},
                )
        elif query.application_id:
            application = await self._applications.get_application(query.application_id)
            if application is not None:
                return ActionResult(
                    type=ActionType.STATUS_FETCHED,
                    success=True,
                    data={"application": application.model_dump(mode="json")},
                )
        return ActionResult(type=ActionType.STATUS_FETCHED, success=False, message="Request not found")

    async def _create_application(self, draft: ApplicationDraft, citizen_id: str | None) -> ActionResult:
        try:
            kind = ApplicationKind(draft.category or ApplicationKind.CERTIFICATE)
        except ValueError:
            kind = ApplicationKind.CERTIFICATE
        application = await self._applications.create_application(
            kind,
            draft.subcategory or "general",
            citizen_id=citizen_id,
            details={"applicant_name": draft.citizen_name, "phone": draft.phone},
            documents=[a.name for a in draft.attachments],
        )
        if application is None:
            return ActionResult(type=ActionType.APPLICATION_CREATED, success=False, message=ACTION_FAILED)
        return ActionResult(
            type=ActionType.APPLICATION_CREATED,
            success=True,
            data={"application_id": application.id, "documents_pending": application.documents_pending},
        )


def _result_type(payload: TurnPayload) -> ActionType:
    if isinstance(payload, GrievanceDraft):
        return ActionType.GRIEVANCE_CREATED
    if isinstance(payload, BillQuery):
        return ActionType.BILL_FOUND
    if isinstance(payload, ApplicationDraft):
        return ActionType.APPLICATION_CREATED
    return ActionType.STATUS_FETCHED
