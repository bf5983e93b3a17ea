"""Tests for classrooms and staff assignment."""
import pytest
from httpx import AsyncClient

from nestflow.db.models import Child, Classroom


@pytest.mark.asyncio
async def test_create_defaults_capacity(admin_client: AsyncClient):
    response = await admin_client.post("/api/classrooms", json={"name": "Preschool"})
    assert response.status_code == 201
    data = response.json()
    assert data["capacity"] == 15
    assert data["enrolled"] == 0
    assert data["staff_ids"] == []


@pytest.mark.asyncio
async def test_create_validation(admin_client: AsyncClient):
    missing = await admin_client.post("/api/classrooms", json={"capacity": 3})
    assert missing.json() == {"error": "name is required"}

    negative = await admin_client.post("/api/classrooms", json={"name": "X", "capacity": -1})
    assert negative.status_code == 400
    assert negative.json() == {"error": "capacity must be >= 0"}


@pytest.mark.asyncio
async def test_teacher_cannot_create(teacher_client: AsyncClient):
    response = await teacher_client.post("/api/classrooms", json={"name": "X"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_enrolled_is_counted_from_roster(teacher_client: AsyncClient, db, classroom, child):
    db.add(Child(center_id=classroom.center_id, classroom_id=classroom.id, first_name="B", last_name="C"))
    db.commit()

    rooms = (await teacher_client.get("/api/classrooms")).json()
    assert [(r["name"], r["enrolled"]) for r in rooms] == [("Toddlers 1A", 2)]


@pytest.mark.asyncio
async def test_update_keeps_omitted_fields(admin_client: AsyncClient, classroom):
    response = await admin_client.put(f"/api/classrooms/{classroom.id}", json={"capacity": 20})
    assert response.status_code == 200
    assert response.json()["capacity"] == 20
    assert response.json()["name"] == "Toddlers 1A"


@pytest.mark.asyncio
async def test_set_staff(admin_client: AsyncClient, classroom, teacher_user, admin_user):
    response = await admin_client.put(
        f"/api/classrooms/{classroom.id}/staff",
        json={"staffIds": [teacher_user.id, admin_user.id, teacher_user.id]},
    )
    assert response.status_code == 200
    assert response.json()["staff_ids"] == sorted([teacher_user.id, admin_user.id])

    cleared = await admin_client.put(f"/api/classrooms/{classroom.id}/staff", json={"staffIds": []})
    assert cleared.json()["staff_ids"] == []


@pytest.mark.asyncio
async def test_parent_cannot_be_staff(admin_client: AsyncClient, classroom, parent_user):
    response = await admin_client.put(
        f"/api/classrooms/{classroom.id}/staff", json={"staffIds": [parent_user.id]}
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Staff member not found"}


@pytest.mark.asyncio
async def test_delete_unassigns_children(admin_client: AsyncClient, db, classroom, child):
    response = await admin_client.delete(f"/api/classrooms/{classroom.id}")
    assert response.status_code == 200

    db.expire_all()
    assert db.query(Classroom).count() == 0
    assert db.get(Child, child.id).classroom_id is None


@pytest.mark.asyncio
async def test_other_center_classroom_is_404(other_client: AsyncClient, classroom):
    response = await other_client.get(f"/api/classrooms/{classroom.id}")
    assert response.status_code == 404
    assert response.json() == {"error": "Classroom not found"}


@pytest.mark.asyncio
async def test_users_directory_filters_by_role(
    teacher_client: AsyncClient, admin_user, teacher_user, parent_user, other_admin
):
    everyone = (await teacher_client.get("/api/users")).json()
    assert {u["email"] for u in everyone} == {"admin@test.com", "teacher@test.com", "parent@test.com"}

    parents = (await teacher_client.get("/api/users", params={"role": "PARENT"})).json()
    assert [u["email"] for u in parents] == ["parent@test.com"]
