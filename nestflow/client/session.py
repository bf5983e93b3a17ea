"""Client-side session and UI context.

An AppSession is created by the application and passed explicitly to
whatever needs it; there is no module-level store. The token is persisted
through a TokenStore so a restarted client resumes its login.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

DEFAULT_SECTION = "DAILY_OPS"
TOAST_KINDS = ("success", "error", "info")


class TokenStore(Protocol):
    """Side-channel persistence for the bearer token."""

    def load(self) -> str | None: ...

    def save(self, token: str | None) -> None: ...


class MemoryTokenStore:
    """Keeps the token for the lifetime of the process."""

    def __init__(self, token: str | None = None):
        self._token = token

    def load(self) -> str | None:
        return self._token

    def save(self, token: str | None) -> None:
        self._token = token


class FileTokenStore:
    """Persists the token in a file readable only by the owner."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def load(self) -> str | None:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return token or None

    def save(self, token: str | None) -> None:
        if token is None:
            self.path.unlink(missing_ok=True)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")
        self.path.chmod(0o600)


@dataclass(frozen=True)
class Toast:
    message: str
    kind: str = "info"


class AppSession:
    """
    Session and UI state shared by a client's views.

    Listeners registered with subscribe() are called with the session after
    every change.
    """

    def __init__(self, token_store: TokenStore | None = None):
        self.token_store = token_store or MemoryTokenStore()
        self.user: dict[str, Any] | None = None
        self.token: str | None = self.token_store.load()
        self.toast: Toast | None = None
        self.sidebar_open = True
        self.active_section = DEFAULT_SECTION
        self._listeners: list[Callable[[AppSession], None]] = []

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def subscribe(self, listener: Callable[[AppSession], None]) -> Callable[[], None]:
        """Register a change listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # Auth state

    def set_user(self, user: dict[str, Any] | None) -> None:
        self.user = user
        self._changed()

    def set_token(self, token: str | None) -> None:
        self.token = token or None
        self.token_store.save(self.token)
        self._changed()

    def login(self, user: dict[str, Any], token: str) -> None:
        self.user = user
        self.token = token
        self.token_store.save(token)
        self._changed()

    def logout(self) -> None:
        self.user = None
        self.token = None
        self.token_store.save(None)
        self._changed()

    # UI state

    def show_toast(self, message: str, kind: str = "info") -> None:
        if kind not in TOAST_KINDS:
            raise ValueError(f"Unknown toast kind '{kind}'")
        self.toast = Toast(message=message, kind=kind)
        self._changed()

    def hide_toast(self) -> None:
        self.toast = None
        self._changed()

    def toggle_sidebar(self) -> None:
        self.sidebar_open = not self.sidebar_open
        self._changed()

    def set_active_section(self, section: str) -> None:
        self.active_section = section
        self._changed()
