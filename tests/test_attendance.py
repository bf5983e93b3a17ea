"""Tests for the attendance state machine and status projection."""
from datetime import date, datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from nestflow.db.enums import AttendanceStatus
from nestflow.db.models import Activity, Attendance, Child
from nestflow.services import attendance_service
from nestflow.utils.local_time import center_today


def _today() -> date:
    return center_today("America/Los_Angeles")


@pytest.mark.asyncio
async def test_check_in_marks_child_present(teacher_client: AsyncClient, db, child: Child):
    response = await teacher_client.post(
        "/api/attendance/check-in", json={"childId": child.id, "notes": "Dropped by dad"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["check_out_time"] is None
    assert data["date"] == _today().isoformat()
    assert data["checked_in_by_name"] == "Tess Tester"
    assert data["first_name"] == "Emma"

    db.refresh(child)
    assert child.status == "PRESENT"
    activity = db.query(Activity).filter(Activity.child_id == child.id).one()
    assert activity.type == "CHECK_IN"
    assert activity.description == "Dropped by dad"


@pytest.mark.asyncio
async def test_check_in_requires_child_id(teacher_client: AsyncClient):
    response = await teacher_client.post("/api/attendance/check-in", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "childId is required"}


@pytest.mark.asyncio
async def test_check_in_other_center_child(teacher_client: AsyncClient, other_child: Child):
    response = await teacher_client.post(
        "/api/attendance/check-in", json={"childId": other_child.id}
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Child not found"}


@pytest.mark.asyncio
async def test_double_check_in_opens_two_rows(teacher_client: AsyncClient, db, child: Child):
    await teacher_client.post("/api/attendance/check-in", json={"childId": child.id})
    await teacher_client.post("/api/attendance/check-in", json={"childId": child.id})

    assert db.query(Attendance).filter(Attendance.child_id == child.id).count() == 2
    assert db.query(Activity).filter(Activity.type == "CHECK_IN").count() == 2


@pytest.mark.asyncio
async def test_check_out_closes_open_record(teacher_client: AsyncClient, db, child: Child):
    await teacher_client.post("/api/attendance/check-in", json={"childId": child.id})

    response = await teacher_client.post(
        "/api/attendance/check-out",
        json={"childId": child.id, "signatureUrl": "https://cdn.example.com/sig.png"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["check_out_time"] is not None
    assert data["signature_url"] == "https://cdn.example.com/sig.png"
    assert data["checked_out_by_name"] == "Tess Tester"

    db.refresh(child)
    assert child.status == "CHECKED_OUT"
    checkout = db.query(Activity).filter(Activity.type == "CHECK_OUT").one()
    assert checkout.media_url == "https://cdn.example.com/sig.png"


@pytest.mark.asyncio
async def test_check_out_without_check_in_is_404(teacher_client: AsyncClient, db, child: Child):
    response = await teacher_client.post("/api/attendance/check-out", json={"childId": child.id})
    assert response.status_code == 404
    assert response.json() == {"error": "No active check-in found for today"}

    db.refresh(child)
    assert child.status == "ABSENT"
    assert db.query(Activity).count() == 0


@pytest.mark.asyncio
async def test_second_check_out_is_404(teacher_client: AsyncClient, child: Child):
    await teacher_client.post("/api/attendance/check-in", json={"childId": child.id})
    first = await teacher_client.post("/api/attendance/check-out", json={"childId": child.id})
    second = await teacher_client.post("/api/attendance/check-out", json={"childId": child.id})
    assert first.status_code == 200
    assert second.status_code == 404


@pytest.mark.asyncio
async def test_yesterdays_open_record_cannot_be_checked_out(
    teacher_client: AsyncClient, db, child: Child
):
    db.add(Attendance(
        child_id=child.id,
        date=_today() - timedelta(days=1),
        check_in_time=datetime.now(timezone.utc) - timedelta(days=1),
    ))
    db.commit()

    response = await teacher_client.post("/api/attendance/check-out", json={"childId": child.id})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cached_status_matches_projection(teacher_client: AsyncClient, db, child: Child):
    assert attendance_service.project_child_status(db, child) == AttendanceStatus.ABSENT

    await teacher_client.post("/api/attendance/check-in", json={"childId": child.id})
    db.refresh(child)
    assert attendance_service.project_child_status(db, child).value == child.status

    await teacher_client.post("/api/attendance/check-out", json={"childId": child.id})
    db.refresh(child)
    assert attendance_service.project_child_status(db, child).value == child.status


@pytest.mark.asyncio
async def test_list_filters_by_date_and_range(teacher_client: AsyncClient, db, child: Child):
    today = _today()
    db.add_all([
        Attendance(child_id=child.id, date=today - timedelta(days=5),
                   check_in_time=datetime.now(timezone.utc) - timedelta(days=5)),
        Attendance(child_id=child.id, date=today - timedelta(days=1),
                   check_in_time=datetime.now(timezone.utc) - timedelta(days=1)),
    ])
    db.commit()
    await teacher_client.post("/api/attendance/check-in", json={"childId": child.id})

    all_rows = (await teacher_client.get("/api/attendance", params={"childId": child.id})).json()
    assert [r["date"] for r in all_rows] == [
        today.isoformat(),
        (today - timedelta(days=1)).isoformat(),
        (today - timedelta(days=5)).isoformat(),
    ]

    on_day = (await teacher_client.get("/api/attendance", params={"date": today.isoformat()})).json()
    assert len(on_day) == 1

    in_range = (await teacher_client.get(
        "/api/attendance",
        params={
            "startDate": (today - timedelta(days=2)).isoformat(),
            "endDate": today.isoformat(),
        },
    )).json()
    assert len(in_range) == 2

    # A single bound is ignored
    half_range = (await teacher_client.get(
        "/api/attendance", params={"startDate": today.isoformat()}
    )).json()
    assert len(half_range) == 3


def test_reconcile_resets_stale_status(db, child: Child, other_child: Child):
    child.status = "PRESENT"
    other_child.status = "CHECKED_OUT"
    db.commit()

    changed = attendance_service.reconcile_statuses(db)

    assert changed == 2
    db.refresh(child)
    db.refresh(other_child)
    assert child.status == "ABSENT"
    assert other_child.status == "ABSENT"


def test_reconcile_scoped_to_center(db, child: Child, other_child: Child):
    child.status = "PRESENT"
    other_child.status = "PRESENT"
    db.commit()

    assert attendance_service.reconcile_statuses(db, center_id=child.center_id) == 1
    db.refresh(other_child)
    assert other_child.status == "PRESENT"


def test_center_today_uses_center_timezone():
    # 02:00 UTC is still the previous evening in Los Angeles
    now = datetime(2024, 3, 10, 2, 0, tzinfo=timezone.utc)
    assert center_today("America/Los_Angeles", now) == date(2024, 3, 9)
    assert center_today("Asia/Tokyo", now) == date(2024, 3, 10)


def test_center_today_unknown_timezone_falls_back():
    now = datetime(2024, 3, 10, 2, 0, tzinfo=timezone.utc)
    assert center_today("Not/AZone", now) == center_today(None, now)
