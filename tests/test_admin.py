"""Tests for the admin triage service."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from src.models.enums import (
    AdminRole,
    HistoryEventType,
    RequestCategory,
    RequestPriority,
    RequestStatus,
    SlaBadge,
)
from src.models.records import Citizen, ServiceRequest
from src.services.admin import (
    CITIZENS,
    AdminService,
    actions_for_role,
    sla_badge,
)
from src.services.grievances import SERVICE_REQUESTS
from src.services.store import InMemoryRecordStore

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


async def _request(store: InMemoryRecordStore, **overrides: object) -> ServiceRequest:
    values: dict[str, object] = {
        "citizen_id": "c1",
        "category": RequestCategory.COMPLAINT,
        "description": "Pothole near SBI",
        "created_at": NOW - timedelta(days=1),
    }
    values.update(overrides)
    request = ServiceRequest(**values)
    await store.insert(SERVICE_REQUESTS, request.model_dump(mode="json"))
    return request


@pytest.fixture()
def admin(store: InMemoryRecordStore) -> AdminService:
    return AdminService(store)


# -----------------------------------------------------------------------
# Pure helpers
# -----------------------------------------------------------------------


class TestSlaBadge:
    def test_badges(self) -> None:
        assert sla_badge(None, NOW) == SlaBadge.NO_SLA
        assert sla_badge(NOW - timedelta(hours=1), NOW) == SlaBadge.OVERDUE
        assert sla_badge(NOW + timedelta(hours=1), NOW) == SlaBadge.ON_TIME


class TestActionsForRole:
    def test_viewer_is_read_only(self) -> None:
        actions = actions_for_role(AdminRole.VIEWER)
        assert not (actions.can_change_status or actions.can_assign or actions.can_add_note)

    def test_department_admin(self) -> None:
        actions = actions_for_role(AdminRole.DEPARTMENT_ADMIN)
        assert actions.can_change_status and actions.can_assign and actions.can_add_note
        assert not actions.can_escalate

    def test_super_admin_can_do_everything(self) -> None:
        actions = actions_for_role(AdminRole.SUPER_ADMIN)
        assert all(
            [
                actions.can_change_status,
                actions.can_assign,
                actions.can_add_note,
                actions.can_escalate,
                actions.can_close,
                actions.can_transfer,
            ]
        )
        assert set(actions.available_statuses) == set(RequestStatus)

    def test_unknown_role_is_viewer(self) -> None:
        assert actions_for_role("janitor") == actions_for_role(AdminRole.VIEWER)


# -----------------------------------------------------------------------
# Listing
# -----------------------------------------------------------------------


class TestListRequests:
    async def test_newest_first_with_badges(self, store: InMemoryRecordStore, admin: AdminService) -> None:
        old = await _request(store, created_at=NOW - timedelta(days=5), sla_due_at=NOW - timedelta(days=2))
        new = await _request(store, created_at=NOW - timedelta(hours=1), sla_due_at=NOW + timedelta(days=2))

        page = await admin.list_requests(now=NOW)
        assert page.total == 2
        assert [r.id for r in page.requests] == [new.id, old.id]
        assert page.requests[1].is_overdue is True
        assert page.requests[1].sla_badge == SlaBadge.OVERDUE
        assert page.requests[0].sla_badge == SlaBadge.ON_TIME

    async def test_filters(self, store: InMemoryRecordStore, admin: AdminService) -> None:
        await _request(store, status=RequestStatus.RESOLVED)
        await _request(store, priority=RequestPriority.HIGH)
        await _request(store, category=RequestCategory.PAYMENT)

        assert (await admin.list_requests(status=RequestStatus.RESOLVED)).total == 1
        assert (await admin.list_requests(priority=RequestPriority.HIGH)).total == 1
        assert (await admin.list_requests(category=RequestCategory.COMPLAINT)).total == 2

    async def test_search_matches_reference_and_description(
        self, store: InMemoryRecordStore, admin: AdminService
    ) -> None:
        await _request(store, reference_code="GR11111", description="Garbage pile")
        await _request(store, reference_code="GR22222", description="Street light out")

        assert (await admin.list_requests(search="gr11111")).total == 1
        assert (await admin.list_requests(search="LIGHT")).total == 1
        assert (await admin.list_requests(search="sewer")).total == 0

    async def test_pagination(self, store: InMemoryRecordStore, admin: AdminService) -> None:
        for i in range(5):
            await _request(store, created_at=NOW - timedelta(minutes=i))
        page = await admin.list_requests(page=2, limit=2)
        assert page.total == 5
        assert len(page.requests) == 2
        assert (page.page, page.limit) == (2, 2)
        assert len((await admin.list_requests(page=3, limit=2)).requests) == 1


# -----------------------------------------------------------------------
# Details and mutations
# -----------------------------------------------------------------------


class TestRequestDetails:
    async def test_details_include_citizen_history_and_notes(
        self, store: InMemoryRecordStore, admin: AdminService
    ) -> None:
        await store.insert(CITIZENS, Citizen(id="c1", name="Asha").model_dump(mode="json"))
        request = await _request(store)
        await _request(store)

        await admin.update_request_status(request.id, RequestStatus.IN_PROGRESS, "admin-1")
        await admin.add_internal_note(request.id, "Called the contractor", "admin-1")
        await admin.add_internal_note(request.id, "Site visit done", "admin-2")

        details = await admin.get_request_details(request.id, now=NOW)
        assert details is not None
        assert details.request.status == RequestStatus.IN_PROGRESS
        assert details.citizen is not None
        assert details.citizen.name == "Asha"
        assert details.citizen.total_requests == 2
        assert [h.event_type for h in details.history] == [
            HistoryEventType.STATUS_CHANGED,
            HistoryEventType.NOTE_ADDED,
            HistoryEventType.NOTE_ADDED,
        ], "history is listed oldest first"
        assert [n.note for n in details.notes] == ["Site visit done", "Called the contractor"], (
            "notes are listed newest first"
        )

    async def test_unknown_request(self, admin: AdminService) -> None:
        assert await admin.get_request_details("missing") is None

    async def test_citizen_is_optional(self, store: InMemoryRecordStore, admin: AdminService) -> None:
        request = await _request(store, citizen_id="unknown")
        details = await admin.get_request_details(request.id)
        assert details is not None and details.citizen is None


class TestMutations:
    async def test_resolving_sets_resolved_at(self, store: InMemoryRecordStore, admin: AdminService) -> None:
        request = await _request(store)
        assert await admin.update_request_status(request.id, RequestStatus.RESOLVED, "admin-1") is True
        row = await store.get(SERVICE_REQUESTS, request.id)
        assert row is not None
        assert row["status"] == "resolved"
        assert row["resolved_at"] is not None

    async def test_assign_then_reassign(self, store: InMemoryRecordStore, admin: AdminService) -> None:
        request = await _request(store)
        assert await admin.assign_request(request.id, "admin-1") is True
        assert await admin.assign_request(request.id, "admin-2") is True

        details = await admin.get_request_details(request.id)
        assert details is not None
        assert details.request.assigned_to == "admin-2"
        assert [h.event_type for h in details.history] == [HistoryEventType.ASSIGNED, HistoryEventType.REASSIGNED]
        assert details.history[1].old_value == "admin-1"

    async def test_mutations_on_unknown_request(self, admin: AdminService) -> None:
        assert await admin.update_request_status("missing", RequestStatus.CLOSED, "a") is False
        assert await admin.assign_request("missing", "a") is False
        assert await admin.add_internal_note("missing", "note", "a") is None


# -----------------------------------------------------------------------
# Dashboard
# -----------------------------------------------------------------------


class TestDashboardStats:
    async def test_counters(self, store: InMemoryRecordStore, admin: AdminService) -> None:
        await _request(store, status=RequestStatus.NEW, sla_due_at=NOW - timedelta(days=1))
        await _request(store, status=RequestStatus.IN_PROGRESS, sla_due_at=NOW + timedelta(days=1))
        await _request(store, status=RequestStatus.RESOLVED, resolved_at=NOW - timedelta(hours=2))
        await _request(store, status=RequestStatus.RESOLVED, resolved_at=NOW - timedelta(days=2))
        await _request(store, status=RequestStatus.CLOSED, sla_due_at=NOW - timedelta(days=9))

        stats = await admin.dashboard_stats(now=NOW)
        assert stats.total == 5
        assert stats.pending == 2
        assert stats.overdue == 1, "only pending requests count as overdue"
        assert stats.resolved_today == 1
