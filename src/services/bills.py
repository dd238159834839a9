"""Bill lookup, formatting and simulated payment."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Final
from urllib.parse import urlencode

import structlog

from src.models.enums import BillStatus, ChannelType, RequestCategory, RequestPriority, RequestStatus
from src.models.records import Bill, ServiceRequest
from src.services.grievances import SERVICE_REQUESTS
from src.services.identifiers import payment_reference
from src.services.store import RecordStore

logger = structlog.get_logger(__name__)

BILLS: Final[str] = "bills"

LATE_FEE_RATE: Final[float] = 0.10


def format_inr(amount: int) -> str:
    """Format whole rupees with Indian digit grouping: ``₹1,23,456``."""
    sign = "-" if amount < 0 else ""
    digits = str(abs(amount))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join([*groups, tail])
    return f"{sign}₹{digits}"


def late_fee(bill: Bill, today: date) -> int:
    """``floor(10%)`` of the amount once the due date has passed, else 0."""
    if bill.due_date < today:
        return int(bill.amount * LATE_FEE_RATE)
    return 0


def format_bill_details(bill: Bill, today: date | None = None) -> str:
    today = today or datetime.now(UTC).date()
    fee = late_fee(bill, today)
    lines = [
        "📄 *Bill Details*",
        "",
        f"Consumer Number: {bill.consumer_number}",
        f"Bill Type: {bill.bill_type.replace('_', ' ').upper()}",
        f"Amount: {format_inr(bill.amount)}",
        f"Due Date: {bill.due_date.isoformat()}",
    ]
    if bill.status == BillStatus.PAID:
        lines.extend(["", "✅ *This bill is already paid.*"])
    elif fee:
        lines.extend(
            [
                "",
                "⚠️ *Bill is overdue!*",
                f"Late Fee: {format_inr(fee)}",
                f"Total Payable: {format_inr(bill.amount + fee)}",
            ]
        )
    return "\n".join(lines)


def generate_payment_link(bill: Bill, base_url: str = "https://pay.gov.in/citizen") -> str:
    params = {
        "type": bill.bill_type.value,
        "consumer": bill.consumer_number,
        "amount": str(bill.amount),
        "ref": payment_reference(),
    }
    return f"{base_url}?{urlencode(params)}"


class BillService:
    __slots__ = ("_store",)

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def get_bill(self, consumer_number: str) -> Bill | None:
        """Most recent bill for *consumer_number*, or ``None``."""
        number = consumer_number.strip().upper()
        try:
            rows = await self._store.select(BILLS, {"consumer_number": number})
        except Exception:
            logger.exception("bill.fetch.failed", consumer_number=number)
            return None
        if not rows:
            logger.info("bill.fetch.not_found", consumer_number=number)
            return None
        bills = sorted((Bill.model_validate(r) for r in rows), key=lambda b: b.due_date, reverse=True)
        unpaid = [b for b in bills if b.status != BillStatus.PAID]
        return unpaid[0] if unpaid else bills[0]

    async def get_unpaid_bills(self, consumer_number: str) -> list[Bill]:
        number = consumer_number.strip().upper()
        try:
            rows = await self._store.select(BILLS, {"consumer_number": number})
        except Exception:
            logger.exception("bill.list_unpaid.failed", consumer_number=number)
            return []
        return [b for b in (Bill.model_validate(r) for r in rows) if b.status != BillStatus.PAID]

    async def mark_bill_paid(self, consumer_number: str, citizen_id: str | None = None) -> bool:
        """Mark the open bill paid and log a resolved ``payment`` request."""
        bill = await self.get_bill(consumer_number)
        if bill is None or bill.status == BillStatus.PAID:
            return False

        now = datetime.now(UTC)
        reference = payment_reference()
        try:
            await self._store.update(
                BILLS,
                bill.id,
                {"status": BillStatus.PAID.value, "paid_at": now.isoformat(), "payment_ref": reference},
            )
            request = ServiceRequest(
                citizen_id=citizen_id or bill.citizen_id or "anonymous",
                category=RequestCategory.PAYMENT,
                sub_category=bill.bill_type,
                status=RequestStatus.RESOLVED,
                priority=RequestPriority.MEDIUM,
                channel=ChannelType.WHATSAPP,
                reference_code=reference,
                department="Finance",
                description=f"Bill payment for {bill.bill_type} - Consumer: {bill.consumer_number}",
                metadata={
                    "payment_type": bill.bill_type,
                    "reference_id": bill.consumer_number,
                    "amount": bill.amount,
                    "payment_status": "success",
                    "transaction_id": reference,
                },
                created_at=now,
                updated_at=now,
                resolved_at=now,
            )
            await self._store.insert(SERVICE_REQUESTS, request.model_dump(mode="json"))
        except Exception:
            logger.exception("bill.mark_paid.failed", consumer_number=bill.consumer_number)
            return False

        logger.info("bill.mark_paid.completed", consumer_number=bill.consumer_number, reference=reference)
        return True
