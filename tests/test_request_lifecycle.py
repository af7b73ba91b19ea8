from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from domain.errors import (
    InvalidStatusError,
    InvalidTransitionError,
    RecordNotFoundError,
    ReferralError,
)
from domain.lifecycle import check_request_transition
from domain.models import FoiRequest
from domain.models.foi_request import RequestStatus
from domain.services.activity_logger import Actions
from domain.services.request_lifecycle import RequestLifecycle
from tests.conftest import fetch_logs


@pytest.fixture
async def foi_request(session_maker):
    async with session_maker() as session:
        request = FoiRequest(
            full_name="Maria Santos",
            email="maria@example.com",
            contact_number="09181112222",
            barangay="Poblacion",
            street="Rizal Ave.",
            concern="Service Complaint",
        )
        session.add(request)
        await session.commit()
        await session.refresh(request)
    return request


async def reload(session_maker, request_id):
    async with session_maker() as session:
        return await session.get(FoiRequest, request_id)


async def test_refer_sets_department_note_and_status_together(session, session_maker, audit, staff_members, foi_request):
    staff = staff_members["staff"]

    updated = await RequestLifecycle(session, audit, staff.id).refer(
        foi_request.id, "Finance Department", "urgent"
    )

    assert updated.status == "in_review"
    stored = await reload(session_maker, foi_request.id)
    assert stored.status == "in_review"
    assert stored.referred_to == "Finance Department"
    assert stored.notes == "urgent"
    assert stored.referred_at is not None
    assert stored.updated_at >= foi_request.updated_at

    [entry] = await fetch_logs(session_maker, user_id=staff.id)
    assert entry.action == Actions.UPDATE_FORM
    assert entry.resource_type == "forms"
    assert entry.resource_id == str(foi_request.id)
    assert entry.details["action"] == "referred"
    assert entry.details["referred_to"] == "Finance Department"
    assert entry.details["note"] == "urgent"


async def test_refer_without_note_clears_notes(session, session_maker, audit, staff_members, foi_request):
    await RequestLifecycle(session, audit, staff_members["staff"].id).refer(foi_request.id, "Legal Affairs", "")

    stored = await reload(session_maker, foi_request.id)
    assert stored.notes is None


@pytest.mark.parametrize("department", ["", "   ", None])
async def test_refer_without_department_never_reaches_store(department):
    session = AsyncMock()
    audit = AsyncMock()

    with pytest.raises(ReferralError):
        await RequestLifecycle(session, audit, uuid4()).refer(uuid4(), department, "note")

    session.get.assert_not_called()
    session.commit.assert_not_called()
    audit.log.assert_not_called()


async def test_set_status_last_write_wins_with_one_audit_entry_each(session, session_maker, audit, staff_members, foi_request):
    staff = staff_members["staff"]
    lifecycle = RequestLifecycle(session, audit, staff.id)
    assert foi_request.status == "pending"

    await lifecycle.set_status(foi_request.id, "resolved")
    await lifecycle.set_status(foi_request.id, "rejected")

    stored = await reload(session_maker, foi_request.id)
    assert stored.status == "rejected"
    entries = await fetch_logs(session_maker, user_id=staff.id)
    assert [e.action for e in entries] == [Actions.UPDATE_FORM, Actions.UPDATE_FORM]
    assert [e.details["new_status"] for e in entries] == ["resolved", "rejected"]


async def test_illegal_transition_is_rejected_and_not_persisted(session, session_maker, audit, staff_members, foi_request):
    lifecycle = RequestLifecycle(session, audit, staff_members["admin"].id)
    await lifecycle.set_status(foi_request.id, RequestStatus.IN_REVIEW)
    await lifecycle.set_status(foi_request.id, RequestStatus.RESOLVED)

    with pytest.raises(InvalidTransitionError):
        await lifecycle.set_status(foi_request.id, RequestStatus.PENDING)

    stored = await reload(session_maker, foi_request.id)
    assert stored.status == "resolved"
    assert len(await fetch_logs(session_maker)) == 2


async def test_unknown_status_is_rejected(session, audit, staff_members, foi_request):
    with pytest.raises(InvalidStatusError):
        await RequestLifecycle(session, audit, staff_members["admin"].id).set_status(foi_request.id, "closed")


async def test_missing_request_raises_not_found(session, audit, staff_members):
    lifecycle = RequestLifecycle(session, audit, staff_members["admin"].id)

    with pytest.raises(RecordNotFoundError):
        await lifecycle.set_status(uuid4(), "in_review")
    with pytest.raises(RecordNotFoundError):
        await lifecycle.refer(uuid4(), "Social Services")


async def test_audit_failure_does_not_affect_mutations(session, session_maker, broken_audit, staff_members, foi_request):
    lifecycle = RequestLifecycle(session, broken_audit, staff_members["staff"].id)

    await lifecycle.refer(foi_request.id, "Public Health Office")
    await lifecycle.set_status(foi_request.id, "resolved")

    stored = await reload(session_maker, foi_request.id)
    assert stored.status == "resolved"
    assert stored.referred_to == "Public Health Office"


async def test_list_filters_by_status_and_audits_view(session, session_maker, audit, staff_members, foi_request):
    lifecycle = RequestLifecycle(session, audit, staff_members["viewer"].id)

    assert [r.id for r in await lifecycle.list()] == [foi_request.id]
    assert await lifecycle.list("resolved") == []

    entries = await fetch_logs(session_maker, action=Actions.VIEW_FORM)
    assert [e.details["filter"] for e in entries] == ["all", "resolved"]


@pytest.mark.parametrize(
    "current,requested",
    [
        ("pending", "in_review"),
        ("pending", "resolved"),
        ("pending", "rejected"),
        ("in_review", "resolved"),
        ("in_review", "rejected"),
        ("resolved", "rejected"),
        ("rejected", "in_review"),
        ("resolved", "resolved"),
    ],
)
def test_allowed_request_transitions(current, requested):
    assert check_request_transition(current, requested) == RequestStatus(requested)


@pytest.mark.parametrize(
    "current,requested",
    [
        ("in_review", "pending"),
        ("resolved", "pending"),
        ("rejected", "pending"),
    ],
)
def test_forbidden_request_transitions(current, requested):
    with pytest.raises(InvalidTransitionError):
        check_request_transition(current, requested)
