"""Tests for invoices."""
from datetime import date, timedelta

import pytest
from httpx import AsyncClient

from nestflow.db.models import Invoice
from nestflow.services import invoice_service


@pytest.mark.asyncio
async def test_create_and_pay(admin_client: AsyncClient, child):
    created = await admin_client.post(
        "/api/invoices",
        json={"childId": child.id, "title": "March tuition", "amount": "850.00", "dueDate": "2030-03-01"},
    )
    assert created.status_code == 201
    invoice = created.json()
    assert invoice["status"] == "PENDING"
    assert invoice["paid_at"] is None

    paid = await admin_client.post(f"/api/invoices/{invoice['id']}/pay")
    assert paid.status_code == 200
    assert paid.json()["status"] == "PAID"
    assert paid.json()["paid_at"] is not None


@pytest.mark.asyncio
async def test_paying_twice_conflicts(parent_client: AsyncClient, db, child):
    invoice = Invoice(child_id=child.id, title="April", amount=100)
    db.add(invoice)
    db.commit()

    assert (await parent_client.post(f"/api/invoices/{invoice.id}/pay")).status_code == 200
    again = await parent_client.post(f"/api/invoices/{invoice.id}/pay")
    assert again.status_code == 409
    assert again.json() == {"error": "Invoice already paid"}


@pytest.mark.asyncio
async def test_teacher_cannot_pay(teacher_client: AsyncClient, db, child):
    invoice = Invoice(child_id=child.id, title="April", amount=100)
    db.add(invoice)
    db.commit()

    response = await teacher_client.post(f"/api/invoices/{invoice.id}/pay")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_validation(admin_client: AsyncClient, child, other_child):
    missing = await admin_client.post("/api/invoices", json={"childId": child.id, "title": "X"})
    assert missing.json() == {"error": "childId, title and amount are required"}

    negative = await admin_client.post(
        "/api/invoices", json={"childId": child.id, "title": "X", "amount": -5}
    )
    assert negative.json() == {"error": "amount must be >= 0"}

    foreign = await admin_client.post(
        "/api/invoices", json={"childId": other_child.id, "title": "X", "amount": 5}
    )
    assert foreign.status_code == 404


@pytest.mark.asyncio
async def test_list_filters(admin_client: AsyncClient, db, child, other_child):
    db.add_all([
        Invoice(child_id=child.id, title="Paid", amount=10, status="PAID"),
        Invoice(child_id=child.id, title="Open", amount=20),
        Invoice(child_id=other_child.id, title="Foreign", amount=30),
    ])
    db.commit()

    everything = (await admin_client.get("/api/invoices")).json()
    assert {i["title"] for i in everything} == {"Paid", "Open"}

    pending = (await admin_client.get("/api/invoices", params={"status": "PENDING"})).json()
    assert [i["title"] for i in pending] == ["Open"]


def test_mark_overdue_only_touches_past_due_pending(db, child):
    today = date(2030, 5, 1)
    db.add_all([
        Invoice(child_id=child.id, title="late", amount=1, due_date=today - timedelta(days=1)),
        Invoice(child_id=child.id, title="due today", amount=1, due_date=today),
        Invoice(child_id=child.id, title="no date", amount=1),
        Invoice(child_id=child.id, title="paid late", amount=1, status="PAID",
                due_date=today - timedelta(days=3)),
    ])
    db.commit()

    assert invoice_service.mark_overdue(db, today=today) == 1
    statuses = {i.title: i.status for i in db.query(Invoice).all()}
    assert statuses == {
        "late": "OVERDUE",
        "due today": "PENDING",
        "no date": "PENDING",
        "paid late": "PAID",
    }
