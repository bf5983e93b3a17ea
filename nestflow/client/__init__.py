"""Python client SDK: session context, query cache, API client, realtime channel."""

from nestflow.client.api import ApiError, AuthenticationRequired, NestflowClient
from nestflow.client.cache import QueryCache
from nestflow.client.realtime import RealtimeChannel
from nestflow.client.session import (
    AppSession,
    FileTokenStore,
    MemoryTokenStore,
    Toast,
    TokenStore,
)
from nestflow.utils.presentation import child_status_label

__all__ = [
    "ApiError",
    "AuthenticationRequired",
    "NestflowClient",
    "QueryCache",
    "RealtimeChannel",
    "AppSession",
    "FileTokenStore",
    "MemoryTokenStore",
    "Toast",
    "TokenStore",
    "child_status_label",
]
