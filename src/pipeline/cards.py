"""Render action results into the bot reply.

Successful grievance and bill actions are appended to the generated reply;
status lookups and every "not found" outcome replace it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Final

from src.models.chat import ActionResult
from src.models.conversation import BillQuery, StatusQuery, TurnPayload
from src.models.enums import ActionType, ChatLanguage
from src.services.messages import EN, HI, HINGLISH, LocalizedText, localized

GRIEVANCE_CREATED: Final[LocalizedText] = {
    EN: "✅ Complaint Registered!\nYour Grievance ID is: *{id}*\n\nWe will update you soon.",
    HI: "✅ शिकायत दर्ज हो गई!\nआपकी शिकायत ID है: *{id}*\n\nहम जल्द ही आपको अपडेट करेंगे।",
    HINGLISH: "✅ Complaint register ho gayi!\nAapki Grievance ID hai: *{id}*\n\nHum jaldi update karenge.",
}

GRIEVANCE_ALREADY_FILED: Final[LocalizedText] = {
    EN: "ℹ️ This complaint is already registered.\nYour Grievance ID is: *{id}*",
    HI: "ℹ️ यह शिकायत पहले से दर्ज है।\nआपकी शिकायत ID है: *{id}*",
    HINGLISH: "ℹ️ Yeh complaint pehle se register hai.\nAapki Grievance ID hai: *{id}*",
}

ACTION_FAILED: Final[LocalizedText] = {
    EN: "⚠️ Sorry, we could not register your complaint right now. Please try again in a few minutes.",
    HI: "⚠️ क्षमा करें, अभी आपकी शिकायत दर्ज नहीं हो सकी। कृपया कुछ मिनट बाद फिर से प्रयास करें।",
    HINGLISH: "⚠️ Sorry, abhi complaint register nahi ho payi. Kuch minute baad phir try karein.",
}

REQUEST_NOT_FOUND: Final[str] = """\
❌ *Request Not Found*

We couldn't find any record with ID: *{id}*

Please check:
• The ID is correct (e.g., GR12345 or APP12345)
• You received this ID when filing your request

If you recently filed a complaint, it may take a few minutes to appear in the system."""

BILL_NOT_FOUND: Final[str] = """\
❌ *Bill Not Found*

We couldn't find any bill details for Consumer Number: *{number}*

Please check:
• The Consumer Number is correct
• You have selected the correct service (Property Tax / Water Tax)

Try entering the number again or contact VMC support."""


def status_emoji(status: str | None) -> str:
    lowered = (status or "").lower()
    if "new" in lowered or "pending" in lowered:
        return "🔵"
    if "progress" in lowered or "review" in lowered or "verification" in lowered:
        return "🟡"
    if any(word in lowered for word in ("resolved", "approved", "closed", "ready")):
        return "🟢"
    if "rejected" in lowered:
        return "🔴"
    return "⚪"


def _filed_on(value: Any) -> str:
    if not value:
        return "N/A"
    when = value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
    return f"{when.day} {when:%b %Y}"


def grievance_status_card(grievance: dict[str, Any]) -> str:
    lines = [
        f"🔍 *Grievance Status: {grievance['id']}*",
        "",
        f"📋 *Category:* {grievance.get('category') or 'General'}",
        f"📍 *Location:* {grievance.get('location') or 'Not specified'}",
    ]
    if grievance.get("landmark"):
        lines.append(f"🏷️ *Landmark:* {grievance['landmark']}")
    lines.extend(
        [
            f"📅 *Filed on:* {_filed_on(grievance.get('created_at'))}",
            "",
            f"*Current Status:* {status_emoji(grievance.get('status'))} {grievance.get('status')}",
        ]
    )
    if grievance.get("department"):
        lines.append(f"*Assigned to:* {grievance['department']}")
    lines.extend(["", "_Data from VMC database_"])
    return "\n".join(lines)


def application_status_card(application: dict[str, Any]) -> str:
    kind = (application.get("application_subtype") or application.get("application_type") or "").replace("_", " ")
    lines = [
        f"🔍 *Application Status: {application['id']}*",
        "",
        f"📋 *Type:* {kind}",
        f"📅 *Applied on:* {_filed_on(application.get('created_at'))}",
        "",
        f"*Current Status:* {status_emoji(application.get('status'))} {application.get('status')}",
    ]
    pending = application.get("documents_pending") or []
    if pending:
        lines.extend(["", "*Documents pending:*", *(f"• {doc}" for doc in pending)])
    lines.extend(["", "_Data from VMC database_"])
    return "\n".join(lines)


def grievance_created_card(grievance_id: str, language: ChatLanguage | None) -> str:
    return localized(GRIEVANCE_CREATED, language).format(id=grievance_id)


def duplicate_grievance_card(grievance_id: str, language: ChatLanguage | None) -> str:
    return localized(GRIEVANCE_ALREADY_FILED, language).format(id=grievance_id)


def render_reply(
    message: str,
    payload: TurnPayload,
    result: ActionResult,
    language: ChatLanguage | None = None,
) -> str:
    """Return the final reply text for *message* after *result*."""
    data = result.data or {}

    if result.type == ActionType.GRIEVANCE_CREATED:
        if result.success:
            return f"{message}\n\n{grievance_created_card(data['grievance_id'], language)}"
        return f"{message}\n\n{localized(ACTION_FAILED, language)}"

    if result.type == ActionType.BILL_FOUND:
        if result.success:
            return f"{message}\n\n{data['details']}\n\n💳 [Pay Now]({data['payment_link']})"
        number = payload.consumer_number if isinstance(payload, BillQuery) else ""
        return BILL_NOT_FOUND.format(number=number)

    if result.type == ActionType.STATUS_FETCHED:
        if result.success and "grievance" in data:
            return grievance_status_card(data["grievance"])
        if result.success and "application" in data:
            return application_status_card(data["application"])
        quoted = ""
        if isinstance(payload, StatusQuery):
            quoted = payload.grievance_id or payload.application_id or ""
        return REQUEST_NOT_FOUND.format(id=quoted)

    if result.type == ActionType.APPLICATION_CREATED and result.success:
        return f"{message}\n\n✅ Application submitted! Your Application ID is: *{data['application_id']}*"

    return message
