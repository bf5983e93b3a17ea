"""Tests for the Python client SDK (session, cache, realtime, API client)."""
import asyncio
import json
import os
import stat

import pytest
from httpx import ASGITransport

from nestflow.client import (
    ApiError,
    AppSession,
    AuthenticationRequired,
    FileTokenStore,
    MemoryTokenStore,
    NestflowClient,
    QueryCache,
    RealtimeChannel,
)
from nestflow.core.deps import get_db
from nestflow.db.models import Child
from nestflow.main import app

TEST_PASSWORD = "password123"


class RecordingSocket:
    """Stands in for a connected websocket and records every frame sent."""

    def __init__(self, fail: bool = False):
        self.frames: list[dict] = []
        self.fail = fail

    async def send_text(self, text: str) -> None:
        if self.fail:
            raise ConnectionError("socket closed")
        self.frames.append(json.loads(text))

    def events(self, name: str) -> list:
        return [f["data"] for f in self.frames if f["event"] == name]


@pytest.fixture
async def sdk(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    client = NestflowClient("http://test/api", transport=ASGITransport(app=app))
    try:
        yield client
    finally:
        await client.aclose()
        app.dependency_overrides.clear()


# =============================================================================
# NestflowClient
# =============================================================================

@pytest.mark.asyncio
async def test_login_populates_session(sdk: NestflowClient, admin_user):
    user = await sdk.login("admin@test.com", TEST_PASSWORD)

    assert user["id"] == admin_user.id
    assert sdk.session.is_authenticated
    assert sdk.session.user["role"] == "ADMIN"
    assert sdk.session.token_store.load() == sdk.session.token


@pytest.mark.asyncio
async def test_unauthorized_clears_token_and_cache(db, admin_user):
    store = MemoryTokenStore("stale-token")
    cache = QueryCache()
    await cache.get(("children", "list", None, None), _constant([]))

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with NestflowClient(
            "http://test/api",
            session=AppSession(store),
            cache=cache,
            transport=ASGITransport(app=app),
        ) as client:
            with pytest.raises(AuthenticationRequired):
                await client.me()
    finally:
        app.dependency_overrides.clear()

    assert client.session.token is None
    assert store.load() is None
    assert cache.keys() == []


@pytest.mark.asyncio
async def test_error_response_shows_toast(sdk: NestflowClient, teacher_user, child):
    await sdk.login("teacher@test.com", TEST_PASSWORD)

    with pytest.raises(ApiError) as exc:
        await sdk.create_activity(child.id, "DANCE", "Party")

    assert exc.value.status == 400
    assert exc.value.message == "Invalid activity type"
    assert sdk.session.toast.kind == "error"
    assert sdk.session.toast.message == "Invalid activity type"
    # Still logged in after a non-401 failure
    assert sdk.session.is_authenticated


@pytest.mark.asyncio
async def test_mutation_invalidates_cached_reads(sdk: NestflowClient, teacher_user, child):
    await sdk.login("teacher@test.com", TEST_PASSWORD)

    before = await sdk.list_children()
    assert [c["first_name"] for c in before] == ["Emma"]
    assert ("children", "list", None, None) in sdk.cache

    await sdk.create_child("Noah", "Hill")

    assert ("children", "list", None, None) not in sdk.cache
    after = await sdk.list_children()
    assert [c["first_name"] for c in after] == ["Emma", "Noah"]


@pytest.mark.asyncio
async def test_bulk_activity_emits_once_per_record(sdk: NestflowClient, db, test_center, teacher_user, child):
    second = Child(center_id=test_center.id, first_name="Noah", last_name="Hill")
    db.add(second)
    db.commit()
    socket = RecordingSocket()
    sdk.attach_realtime(RealtimeChannel(socket))
    await sdk.login("teacher@test.com", TEST_PASSWORD)

    created = await sdk.create_bulk_activities([child.id, second.id], "NAP", "Nap time")

    emitted = socket.events("activity:created")
    assert len(emitted) == len(created) == 2
    assert {e["childId"] for e in emitted} == {child.id, second.id}
    assert [e["activity"]["id"] for e in emitted] == [a["id"] for a in created]


@pytest.mark.asyncio
async def test_message_emits_to_recipient(sdk: NestflowClient, teacher_user, parent_user):
    socket = RecordingSocket()
    sdk.attach_realtime(RealtimeChannel(socket))
    await sdk.login("teacher@test.com", TEST_PASSWORD)

    message = await sdk.send_message(parent_user.id, "Pickup at 4")

    assert socket.events("message:sent") == [{"recipientId": parent_user.id, "message": message}]


@pytest.mark.asyncio
async def test_check_in_emits_only_with_classroom(sdk: NestflowClient, teacher_user, classroom, child):
    socket = RecordingSocket()
    sdk.attach_realtime(RealtimeChannel(socket))
    await sdk.login("teacher@test.com", TEST_PASSWORD)

    await sdk.check_in(child.id)
    assert socket.frames == []

    await sdk.check_out(child.id, classroom_id=classroom.id)
    assert socket.events("attendance:update") == [
        {"classroomId": classroom.id, "childId": child.id, "status": "CHECKED_OUT"}
    ]


@pytest.mark.asyncio
async def test_dead_socket_does_not_fail_mutation(sdk: NestflowClient, teacher_user, child):
    sdk.attach_realtime(RealtimeChannel(RecordingSocket(fail=True)))
    await sdk.login("teacher@test.com", TEST_PASSWORD)

    activity = await sdk.create_activity(child.id, "NOTE", "Hello")
    assert activity["title"] == "Hello"


# =============================================================================
# QueryCache
# =============================================================================

def _constant(value):
    async def fetch():
        return value
    return fetch


@pytest.mark.asyncio
async def test_concurrent_reads_share_one_fetch():
    cache = QueryCache()
    calls = 0
    release = asyncio.Event()

    async def fetch():
        nonlocal calls
        calls += 1
        await release.wait()
        return ["emma"]

    first = asyncio.create_task(cache.get(("children",), fetch))
    second = asyncio.create_task(cache.get(("children",), fetch))
    await asyncio.sleep(0)
    release.set()

    assert await first == await second == ["emma"]
    assert calls == 1
    assert await cache.get(("children",), fetch) == ["emma"]
    assert calls == 1


@pytest.mark.asyncio
async def test_invalidate_during_fetch_discards_result():
    cache = QueryCache()
    release = asyncio.Event()

    async def fetch():
        await release.wait()
        return "stale"

    task = asyncio.create_task(cache.get(("children",), fetch))
    await asyncio.sleep(0)
    cache.invalidate("children")
    release.set()

    assert await task == "stale"
    assert ("children",) not in cache


@pytest.mark.asyncio
async def test_failed_fetch_is_not_cached():
    cache = QueryCache()

    async def boom():
        raise RuntimeError("offline")

    with pytest.raises(RuntimeError):
        await cache.get(("dashboard",), boom)
    assert ("dashboard",) not in cache
    assert await cache.get(("dashboard",), _constant({"ok": True})) == {"ok": True}


@pytest.mark.asyncio
async def test_invalidate_by_prefix():
    cache = QueryCache()
    await cache.get(("children", "list", None, None), _constant([]))
    await cache.get(("children", "detail", "c1"), _constant({}))
    await cache.get(("activities", "c1", 50), _constant([]))

    assert cache.invalidate("children") == 2
    assert cache.keys() == [("activities", "c1", 50)]

    cache.clear()
    assert cache.keys() == []


# =============================================================================
# AppSession and token stores
# =============================================================================

def test_session_notifies_listeners():
    session = AppSession()
    seen = []
    unsubscribe = session.subscribe(lambda s: seen.append(s.active_section))

    session.set_active_section("BILLING")
    session.toggle_sidebar()
    unsubscribe()
    session.set_active_section("DAILY_OPS")

    assert seen == ["BILLING", "BILLING"]
    assert session.sidebar_open is False


def test_session_toasts():
    session = AppSession()
    session.show_toast("Saved", "success")
    assert session.toast.message == "Saved"
    session.hide_toast()
    assert session.toast is None

    with pytest.raises(ValueError):
        session.show_toast("?", "warning")


def test_session_resumes_from_store():
    session = AppSession(MemoryTokenStore("persisted"))
    assert session.is_authenticated
    session.logout()
    assert session.token_store.load() is None


def test_file_token_store(tmp_path):
    path = tmp_path / "nested" / "token"
    store = FileTokenStore(path)
    assert store.load() is None

    store.save("abc.def.ghi")
    assert store.load() == "abc.def.ghi"
    assert stat.S_IMODE(os.stat(path).st_mode) == 0o600

    store.save(None)
    assert not path.exists()
    assert store.load() is None


# =============================================================================
# RealtimeChannel
# =============================================================================

def test_channel_requires_send():
    with pytest.raises(TypeError):
        RealtimeChannel(object())


@pytest.mark.asyncio
async def test_channel_join_frames():
    socket = RecordingSocket()
    channel = RealtimeChannel(socket)

    await channel.join_child("c1")
    await channel.leave_classroom("r1")

    assert socket.frames == [
        {"event": "join:child", "data": "c1"},
        {"event": "leave:classroom", "data": "r1"},
    ]


@pytest.mark.asyncio
async def test_channel_dispatch():
    channel = RealtimeChannel(RecordingSocket())
    received = []

    async def on_message(data):
        received.append(("message", data))

    channel.on("activity:new", lambda data: received.append(("activity", data)))
    channel.on("message:new", on_message)

    assert await channel.dispatch(json.dumps({"event": "activity:new", "data": {"id": "a1"}}))
    assert await channel.dispatch(json.dumps({"event": "message:new", "data": {"id": "m1"}}))
    assert not await channel.dispatch("pong")
    assert not await channel.dispatch("{broken")
    assert not await channel.dispatch(json.dumps({"event": "attendance:changed", "data": {}}))

    channel.off("activity:new")
    assert not await channel.dispatch(json.dumps({"event": "activity:new", "data": {}}))

    assert received == [("activity", {"id": "a1"}), ("message", {"id": "m1"})]
