"""Tests for the children roster and guardians."""
import pytest
from httpx import AsyncClient

from nestflow.db.models import Activity, Attendance, Child, Classroom, Guardian, Invoice


@pytest.mark.asyncio
async def test_create_then_get_preserves_fields(teacher_client: AsyncClient, classroom: Classroom):
    payload = {
        "firstName": "Mia",
        "lastName": "Park",
        "dob": "2022-03-14",
        "classroomId": classroom.id,
        "avatarUrl": "https://cdn.example.com/mia.png",
        "allergies": ["dairy", "eggs"],
        "notes": "Naps at 1pm",
        "enrollmentStatus": "WAITLIST",
    }
    created = await teacher_client.post("/api/children", json=payload)
    assert created.status_code == 201
    child_id = created.json()["id"]

    response = await teacher_client.get(f"/api/children/{child_id}")
    assert response.status_code == 200
    data = response.json()
    assert data["first_name"] == "Mia"
    assert data["last_name"] == "Park"
    assert data["dob"] == "2022-03-14"
    assert data["classroom_id"] == classroom.id
    assert data["classroom_name"] == "Toddlers 1A"
    assert data["avatar_url"] == "https://cdn.example.com/mia.png"
    assert data["allergies"] == ["dairy", "eggs"]
    assert data["notes"] == "Naps at 1pm"
    assert data["enrollment_status"] == "WAITLIST"
    assert data["status"] == "ABSENT"
    assert data["status_label"] == "On Waitlist"


@pytest.mark.asyncio
async def test_create_defaults_to_pending(teacher_client: AsyncClient):
    response = await teacher_client.post(
        "/api/children", json={"first_name": "Leo", "last_name": "Ray"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["enrollment_status"] == "PENDING"
    assert data["status_label"] == "Pending Approval"
    assert data["allergies"] == []


@pytest.mark.asyncio
async def test_create_keeps_names_and_urls_verbatim(teacher_client: AsyncClient):
    payload = {
        "firstName": "Mary  Ann",
        "lastName": " de la Cruz",
        "avatarUrl": " https://cdn.example.com/mary.png ",
    }
    created = await teacher_client.post("/api/children", json=payload)
    assert created.status_code == 201

    data = (await teacher_client.get(f"/api/children/{created.json()['id']}")).json()
    assert data["first_name"] == "Mary  Ann"
    assert data["last_name"] == " de la Cruz"
    assert data["avatar_url"] == " https://cdn.example.com/mary.png "


@pytest.mark.asyncio
async def test_create_requires_names(teacher_client: AsyncClient):
    response = await teacher_client.post("/api/children", json={"firstName": "Solo"})
    assert response.status_code == 400
    assert response.json() == {"error": "firstName and lastName are required"}

    blank = await teacher_client.post("/api/children", json={"firstName": "Solo", "lastName": "   "})
    assert blank.status_code == 400


@pytest.mark.asyncio
async def test_create_rejects_other_centers_classroom(teacher_client: AsyncClient, db, other_center):
    foreign = Classroom(center_id=other_center.id, name="Elsewhere", capacity=5)
    db.add(foreign)
    db.commit()

    response = await teacher_client.post(
        "/api/children",
        json={"firstName": "A", "lastName": "B", "classroomId": foreign.id},
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Classroom not found"}


@pytest.mark.asyncio
async def test_list_filters_and_orders(admin_client: AsyncClient, db, test_center, classroom, child):
    db.add_all([
        Child(center_id=test_center.id, first_name="Zed", last_name="Young", enrollment_status="PENDING"),
        Child(center_id=test_center.id, first_name="Abe", last_name="Young", classroom_id=classroom.id,
              enrollment_status="ENROLLED"),
    ])
    db.commit()

    everyone = (await admin_client.get("/api/children")).json()
    assert [c["first_name"] for c in everyone] == ["Abe", "Emma", "Zed"]

    in_room = (await admin_client.get("/api/children", params={"classroomId": classroom.id})).json()
    assert {c["first_name"] for c in in_room} == {"Abe", "Emma"}

    pending = (await admin_client.get("/api/children", params={"enrollmentStatus": "PENDING"})).json()
    assert [c["first_name"] for c in pending] == ["Zed"]


@pytest.mark.asyncio
async def test_get_other_center_child_is_404(admin_client: AsyncClient, other_child: Child):
    response = await admin_client.get(f"/api/children/{other_child.id}")
    assert response.status_code == 404
    assert response.json() == {"error": "Child not found"}


@pytest.mark.asyncio
async def test_list_never_leaks_other_center(admin_client: AsyncClient, child, other_child):
    ids = {c["id"] for c in (await admin_client.get("/api/children")).json()}
    assert child.id in ids
    assert other_child.id not in ids


@pytest.mark.asyncio
async def test_update_keeps_omitted_fields(teacher_client: AsyncClient, child: Child):
    response = await teacher_client.put(
        f"/api/children/{child.id}",
        json={"notes": "Likes blocks", "firstName": None, "enrollmentStatus": "ARCHIVED"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["notes"] == "Likes blocks"
    assert data["first_name"] == "Emma"
    assert data["allergies"] == ["peanuts"]
    assert data["enrollment_status"] == "ARCHIVED"
    assert data["status_label"] == "Archived"


@pytest.mark.asyncio
async def test_update_status_changes_label(teacher_client: AsyncClient, child: Child):
    response = await teacher_client.put(f"/api/children/{child.id}", json={"status": "CHECKED_OUT"})
    assert response.json()["status_label"] == "Gone Home"


@pytest.mark.asyncio
async def test_delete_requires_admin(teacher_client: AsyncClient, child: Child):
    response = await teacher_client.delete(f"/api/children/{child.id}")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_cascades_owned_records(admin_client: AsyncClient, db, child: Child, admin_user):
    db.add_all([
        Guardian(child_id=child.id, name="Ann Stone", relation="Mother"),
        Activity(child_id=child.id, author_id=admin_user.id, type="NOTE", title="Hello"),
        Invoice(child_id=child.id, title="March", amount=100),
    ])
    db.commit()

    response = await admin_client.delete(f"/api/children/{child.id}")
    assert response.status_code == 200
    assert response.json() == {"message": "Child deleted successfully"}

    assert db.query(Child).count() == 0
    assert db.query(Guardian).count() == 0
    assert db.query(Activity).count() == 0
    assert db.query(Invoice).count() == 0
    assert db.query(Attendance).count() == 0


@pytest.mark.asyncio
async def test_guardians_create_and_list(teacher_client: AsyncClient, child: Child):
    created = await teacher_client.post(
        f"/api/children/{child.id}/guardians",
        json={"name": "Ann Stone", "relation": "Mother", "phone": "555-0101"},
    )
    assert created.status_code == 201
    assert created.json()["relation"] == "Mother"

    listed = await teacher_client.get(f"/api/children/{child.id}/guardians")
    assert [g["name"] for g in listed.json()] == ["Ann Stone"]


@pytest.mark.asyncio
async def test_guardian_requires_name_and_relation(teacher_client: AsyncClient, child: Child):
    response = await teacher_client.post(
        f"/api/children/{child.id}/guardians", json={"name": "Ann"}
    )
    assert response.status_code == 400
    assert response.json() == {"error": "name and relation are required"}
