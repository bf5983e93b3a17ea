"""Async API client for the NestFlow REST surface.

Reads go through the QueryCache; successful mutations invalidate the keys
they affect and, when a RealtimeChannel is attached, emit the matching
client-originated event so other connected clients refresh.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

import httpx
from pydantic.alias_generators import to_camel

from nestflow.client.cache import QueryCache
from nestflow.client.realtime import RealtimeChannel
from nestflow.client.session import AppSession

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001/api"
DEFAULT_TIMEOUT = 10.0


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status: int, message: str, details: Any = None):
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message
        self.details = details


class AuthenticationRequired(ApiError):
    """401 response; the session token has been cleared and a new login is needed."""


def _clean(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _body(**fields: Any) -> dict[str, Any]:
    """camelCase JSON body without null fields."""
    return {to_camel(k): _clean(v) for k, v in fields.items() if v is not None}


def _params(**fields: Any) -> dict[str, Any]:
    return {to_camel(k): _clean(v) for k, v in fields.items() if v is not None}


class NestflowClient:
    """
    API client bound to one AppSession.

    Usage:
        async with NestflowClient("https://api.example.com/api") as client:
            await client.login("admin@demo.com", "demo123")
            children = await client.list_children()
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        session: AppSession | None = None,
        cache: QueryCache | None = None,
        realtime: RealtimeChannel | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.session = session or AppSession()
        self.cache = cache or QueryCache()
        self.realtime = realtime
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> NestflowClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def attach_realtime(self, channel: RealtimeChannel | None) -> None:
        self.realtime = channel

    # =========================================================================
    # Transport
    # =========================================================================

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """
        Send one request and return the decoded JSON body.

        Raises:
            AuthenticationRequired: 401; the session token is cleared
            ApiError: any other non-2xx; an error toast is shown
        """
        headers = {}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"

        response = await self._http.request(
            method, path, params=params or None, json=json, headers=headers
        )
        if response.status_code == 401:
            message = self._error_message(response)
            self.session.logout()
            self.cache.clear()
            raise AuthenticationRequired(401, message)
        if response.is_error:
            message = self._error_message(response)
            self.session.show_toast(message, "error")
            raise ApiError(response.status_code, message, self._error_details(response))
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_body(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def _error_message(self, response: httpx.Response) -> str:
        return str(self._error_body(response).get("error") or response.reason_phrase or "Request failed")

    def _error_details(self, response: httpx.Response) -> Any:
        return self._error_body(response).get("details")

    async def _cached(self, key: tuple, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.cache.get(key, lambda: self.request("GET", path, params=params))

    def _invalidate(self, *prefixes: str) -> None:
        for prefix in prefixes:
            self.cache.invalidate(prefix)

    async def _broadcast(self, coro) -> None:
        """Realtime emission is best-effort; a dead socket never fails a mutation."""
        try:
            await coro
        except Exception:
            logger.warning("Realtime emit failed", exc_info=True)

    # =========================================================================
    # Auth
    # =========================================================================

    async def login(self, email: str, password: str) -> dict[str, Any]:
        data = await self.request("POST", "/auth/login", json={"email": email, "password": password})
        self.cache.clear()
        self.session.login(data["user"], data["token"])
        return data["user"]

    async def register(self, email: str, password: str, role: str, **fields: Any) -> dict[str, Any]:
        """Register and log in; fields: first_name, last_name, center_id, center_name."""
        data = await self.request(
            "POST", "/auth/register", json=_body(email=email, password=password, role=role, **fields)
        )
        self.cache.clear()
        self.session.login(data["user"], data["token"])
        return data["user"]

    async def me(self) -> dict[str, Any]:
        user = await self.request("GET", "/auth/me")
        self.session.set_user(user)
        return user

    def logout(self) -> None:
        self.session.logout()
        self.cache.clear()

    # =========================================================================
    # Children
    # =========================================================================

    async def list_children(self, classroom_id: str | None = None, enrollment_status: str | None = None) -> list:
        params = _params(classroom_id=classroom_id, enrollment_status=enrollment_status)
        return await self._cached(("children", "list", classroom_id, _clean(enrollment_status)), "/children", params)

    async def get_child(self, child_id: str) -> dict[str, Any]:
        return await self._cached(("children", "detail", child_id), f"/children/{child_id}")

    async def create_child(self, first_name: str, last_name: str, **fields: Any) -> dict[str, Any]:
        child = await self.request(
            "POST", "/children", json=_body(first_name=first_name, last_name=last_name, **fields)
        )
        self._invalidate("children", "classrooms", "dashboard")
        return child

    async def update_child(self, child_id: str, **fields: Any) -> dict[str, Any]:
        child = await self.request("PUT", f"/children/{child_id}", json=_body(**fields))
        self._invalidate("children", "classrooms", "dashboard")
        return child

    async def delete_child(self, child_id: str) -> None:
        await self.request("DELETE", f"/children/{child_id}")
        self._invalidate(
            "children", "classrooms", "activities", "attendance", "guardians", "invoices", "consents", "dashboard"
        )

    async def list_guardians(self, child_id: str) -> list:
        return await self._cached(("guardians", child_id), f"/children/{child_id}/guardians")

    async def add_guardian(self, child_id: str, name: str, relation: str, **fields: Any) -> dict[str, Any]:
        guardian = await self.request(
            "POST", f"/children/{child_id}/guardians", json=_body(name=name, relation=relation, **fields)
        )
        self.cache.invalidate("guardians", child_id)
        return guardian

    # =========================================================================
    # Activities
    # =========================================================================

    async def list_activities(self, child_id: str | None = None, limit: int = 50) -> list:
        return await self._cached(
            ("activities", child_id, limit), "/activities", _params(child_id=child_id, limit=limit)
        )

    async def create_activity(self, child_id: str, type: str, title: str, **fields: Any) -> dict[str, Any]:
        activity = await self.request(
            "POST", "/activities", json=_body(child_id=child_id, type=type, title=title, **fields)
        )
        self._invalidate("activities")
        if self.realtime:
            await self._broadcast(self.realtime.emit_activity_created(child_id, activity))
        return activity

    async def create_bulk_activities(self, child_ids: list[str], type: str, title: str, **fields: Any) -> list:
        """One activity per child; one activity:created emission per created record."""
        activities = await self.request(
            "POST", "/activities/bulk", json=_body(child_ids=child_ids, type=type, title=title, **fields)
        )
        self._invalidate("activities")
        if self.realtime:
            for activity in activities:
                await self._broadcast(self.realtime.emit_activity_created(activity["child_id"], activity))
        return activities

    # =========================================================================
    # Attendance
    # =========================================================================

    async def list_attendance(
        self,
        child_id: str | None = None,
        date: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list:
        params = _params(child_id=child_id, date=date, start_date=start_date, end_date=end_date)
        return await self._cached(("attendance", child_id, date, start_date, end_date), "/attendance", params)

    async def check_in(self, child_id: str, notes: str | None = None, classroom_id: str | None = None) -> dict:
        record = await self.request("POST", "/attendance/check-in", json=_body(child_id=child_id, notes=notes))
        self._invalidate("attendance", "children", "activities", "dashboard")
        if self.realtime and classroom_id:
            await self._broadcast(self.realtime.emit_attendance_update(classroom_id, child_id, "PRESENT"))
        return record

    async def check_out(
        self,
        child_id: str,
        signature_url: str | None = None,
        notes: str | None = None,
        classroom_id: str | None = None,
    ) -> dict:
        record = await self.request(
            "POST",
            "/attendance/check-out",
            json=_body(child_id=child_id, signature_url=signature_url, notes=notes),
        )
        self._invalidate("attendance", "children", "activities", "dashboard")
        if self.realtime and classroom_id:
            await self._broadcast(self.realtime.emit_attendance_update(classroom_id, child_id, "CHECKED_OUT"))
        return record

    # =========================================================================
    # Messages
    # =========================================================================

    async def list_messages(self, conversation_with: str | None = None) -> list:
        return await self._cached(
            ("messages", "list", conversation_with), "/messages", _params(conversation_with=conversation_with)
        )

    async def unread_count(self) -> int:
        data = await self._cached(("messages", "unread"), "/messages/unread-count")
        return data["count"]

    async def send_message(self, recipient_id: str, content: str, child_id: str | None = None) -> dict:
        message = await self.request(
            "POST", "/messages", json=_body(recipient_id=recipient_id, content=content, child_id=child_id)
        )
        self._invalidate("messages")
        if self.realtime:
            await self._broadcast(self.realtime.emit_message_sent(recipient_id, message))
        return message

    async def mark_read(self, message_id: str) -> dict:
        message = await self.request("PATCH", f"/messages/{message_id}/read")
        self._invalidate("messages")
        return message

    # =========================================================================
    # Classrooms, users, billing, consent, dashboard
    # =========================================================================

    async def list_classrooms(self) -> list:
        return await self._cached(("classrooms",), "/classrooms")

    async def create_classroom(self, name: str, capacity: int | None = None, age_group: str | None = None) -> dict:
        classroom = await self.request(
            "POST", "/classrooms", json=_body(name=name, capacity=capacity, age_group=age_group)
        )
        self._invalidate("classrooms", "dashboard")
        return classroom

    async def set_classroom_staff(self, classroom_id: str, staff_ids: list[str]) -> dict:
        classroom = await self.request(
            "PUT", f"/classrooms/{classroom_id}/staff", json={"staffIds": staff_ids}
        )
        self._invalidate("classrooms")
        return classroom

    async def list_users(self, role: str | None = None) -> list:
        return await self._cached(("users", _clean(role)), "/users", _params(role=role))

    async def list_invoices(self, child_id: str | None = None, status: str | None = None) -> list:
        return await self._cached(
            ("invoices", child_id, _clean(status)), "/invoices", _params(child_id=child_id, status=status)
        )

    async def create_invoice(self, child_id: str, title: str, amount: str | float, **fields: Any) -> dict:
        invoice = await self.request(
            "POST", "/invoices", json=_body(child_id=child_id, title=title, amount=str(amount), **fields)
        )
        self._invalidate("invoices", "dashboard")
        return invoice

    async def pay_invoice(self, invoice_id: str) -> dict:
        invoice = await self.request("POST", f"/invoices/{invoice_id}/pay")
        self._invalidate("invoices", "dashboard")
        return invoice

    async def list_consent_templates(self) -> list:
        return await self._cached(("consent-templates",), "/consent-templates")

    async def list_child_consents(self, child_id: str) -> list:
        return await self._cached(("consents", child_id), f"/children/{child_id}/consents")

    async def sign_consent(self, child_id: str, template_id: str, signer_name: str) -> dict:
        form = await self.request(
            "POST",
            f"/children/{child_id}/consents/{template_id}/sign",
            json={"signerName": signer_name},
        )
        self.cache.invalidate("consents", child_id)
        return form

    async def dashboard_metrics(self) -> dict:
        return await self._cached(("dashboard",), "/dashboard/metrics")
