"""Authenticated session state for one running client."""

import threading
from collections.abc import Iterable


class Session:
    """Token, username and group names of the signed-in user.

    One instance lives for as long as the client runs and is handed to
    whatever needs it. The three fields are always replaced together:
    ``login`` sets all of them, ``logout`` clears all of them.

    Readers may run on worker threads (the HTTP backend reads the token while
    building headers), so writes happen under a lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._token: str | None = None
        self._username: str | None = None
        self._groups: frozenset[str] = frozenset()

    def login(self, token: str, username: str, groups: Iterable[str]) -> None:
        """Replace the session with a freshly authenticated one."""
        new_groups = frozenset(groups)
        with self._lock:
            self._token = token
            self._username = username
            self._groups = new_groups

    def logout(self) -> None:
        """Forget the token, the username and every group."""
        with self._lock:
            self._token = None
            self._username = None
            self._groups = frozenset()

    def has_group(self, name: str) -> bool:
        """Exact, case-sensitive membership test. False when signed out."""
        return name in self._groups

    def is_authenticated(self) -> bool:
        return bool(self._token)

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def username(self) -> str | None:
        return self._username

    @property
    def groups(self) -> frozenset[str]:
        return self._groups

    def auth_header(self) -> dict[str, str]:
        """Authorization header for the current token, or nothing."""
        token = self._token
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def __repr__(self) -> str:
        return f"Session(username={self._username!r}, groups={sorted(self._groups)!r})"
