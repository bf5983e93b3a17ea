"""API routers."""

from nestflow.routers.auth import router as auth_router
from nestflow.routers.children import router as children_router
from nestflow.routers.activities import router as activities_router
from nestflow.routers.attendance import router as attendance_router
from nestflow.routers.messages import router as messages_router
from nestflow.routers.classrooms import router as classrooms_router
from nestflow.routers.users import router as users_router
from nestflow.routers.invoices import router as invoices_router
from nestflow.routers.consents import router as consents_router
from nestflow.routers.dashboard import router as dashboard_router
from nestflow.routers.websocket import router as websocket_router

__all__ = [
    "auth_router",
    "children_router",
    "activities_router",
    "attendance_router",
    "messages_router",
    "classrooms_router",
    "users_router",
    "invoices_router",
    "consents_router",
    "dashboard_router",
    "websocket_router",
]
