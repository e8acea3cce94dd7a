from collections.abc import Callable
from typing import Any

import httpx
import jwt
import pytest

from anticorruption_client.backends.http import HttpBackend
from anticorruption_client.client import AntiCorruptionClient
from anticorruption_client.dispatch import Dispatcher, ImmediateExecutor
from anticorruption_client.session import Session

SERVER_URL = "https://reports.test"

Handler = Callable[[httpx.Request], httpx.Response]


def make_token(username: str = "alice", groups: list[str] | None = None) -> str:
    """Signed like the server does, with a key the client never sees."""
    payload: dict[str, Any] = {
        "sub": username,
        "groups": [{"authority": g} for g in groups or []],
    }
    return jwt.encode(payload, "server-side-secret-the-client-never-sees", algorithm="HS256")


def envelope(status: str = "OK", data: Any = None, message: str | None = None, code: int = 200):
    return httpx.Response(code, json={"status": status, "message": message, "data": data})


class Recorder:
    """MockTransport handler that answers from a routing table and records requests."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, response: httpx.Response | Handler) -> None:
        if isinstance(response, httpx.Response):
            canned = response
            self.routes[(method, path)] = lambda request: httpx.Response(
                canned.status_code, headers=canned.headers, content=canned.content
            )
        else:
            self.routes[(method, path)] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return envelope("NOT_FOUND", message=f"No route {request.method} {request.url.path}", code=404)
        return handler(request)


class RecordingView:
    """Fake toolkit view that remembers every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def __getattr__(self, name: str) -> Callable[..., None]:
        if name.startswith("_"):
            raise AttributeError(name)

        def record(*args: Any) -> None:
            self.calls.append((name, args))

        return record

    def called(self, name: str) -> list[tuple[Any, ...]]:
        return [args for call, args in self.calls if call == name]


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def backend(session: Session, recorder: Recorder) -> HttpBackend:
    return HttpBackend(SERVER_URL, session, transport=httpx.MockTransport(recorder))


@pytest.fixture
def client(backend: HttpBackend, session: Session) -> AntiCorruptionClient:
    return AntiCorruptionClient(backend, session)


@pytest.fixture
def signed_in(client: AntiCorruptionClient) -> Callable[..., AntiCorruptionClient]:
    """Put a user with the given groups into the session without a login round trip."""

    def sign_in(*groups: str, username: str = "alice") -> AntiCorruptionClient:
        client.session.login(make_token(username, list(groups)), username, groups)
        return client

    return sign_in


@pytest.fixture
def dispatcher() -> Dispatcher:
    return Dispatcher(executor=ImmediateExecutor())


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()
