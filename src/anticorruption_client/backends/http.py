"""HTTP API backend for AntiCorruptionClient (remote reporting server)."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

from anticorruption_client.errors import (
    AuthorizationError,
    BackendError,
    MalformedResponseError,
    TransportError,
)
from anticorruption_client.models import AccessGroup, Report, User
from anticorruption_client.session import Session

logger = logging.getLogger("anticorruption_client.http")

API_PREFIX = "/api"

STATUS_OK = "OK"
STATUS_CREATED = "CREATED"
STATUS_UNAUTHORIZED = "UNAUTHORIZED"

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Envelope:
    """The ``{status, message, data}`` wrapper of every backend response."""

    status: str
    message: str | None = None
    data: Any = None


def parse_envelope(resp: httpx.Response) -> Envelope:
    """Turn a response into an Envelope.

    Bodyless responses are judged by their HTTP status. Raises
    MalformedResponseError when the body is not a JSON object with a string
    ``status``.
    """
    if not resp.content.strip():
        if resp.is_success:
            return Envelope(status=STATUS_OK)
        if resp.status_code in (401, 403):
            return Envelope(status=STATUS_UNAUTHORIZED, message="Access denied.")
        return Envelope(
            status=f"HTTP_{resp.status_code}",
            message=f"Server responded with HTTP {resp.status_code}.",
        )

    try:
        body = resp.json()
    except ValueError as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}") from e

    if not isinstance(body, dict) or not isinstance(body.get("status"), str):
        if resp.status_code in (401, 403):
            return Envelope(status=STATUS_UNAUTHORIZED, message="Access denied.")
        raise MalformedResponseError("Response has no status field")

    message = body.get("message")
    return Envelope(
        status=body["status"],
        message=str(message) if message is not None else None,
        data=body.get("data"),
    )


class HttpBackend:
    """Backend that communicates with the reporting server via its JSON API."""

    def __init__(
        self,
        server_url: str,
        session: Session,
        timeout: float | None = None,
        verify: bool = True,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.session = session
        self.timeout = timeout
        self.verify = verify
        self.transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.server_url + API_PREFIX,
            headers=self.session.auth_header(),
            timeout=self.timeout,
            verify=self.verify,
            transport=self.transport,
        )

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        expect: tuple[str, ...] = (STATUS_OK,),
    ) -> Envelope:
        try:
            with self._client() as client:
                resp = client.request(method, path, json=json, params=params)
        except httpx.ConnectError as e:
            logger.error(f"Failed to connect to backend at {self.server_url}: {e}")
            raise TransportError(f"Could not connect to the server: {e}") from e
        except httpx.TimeoutException as e:
            logger.error(f"Backend request timed out: {method} {path}")
            raise TransportError("The server did not respond in time.") from e
        except httpx.HTTPError as e:
            logger.error(f"Backend request failed: {method} {path}: {e}")
            raise TransportError(f"Request failed: {e}") from e

        try:
            envelope = parse_envelope(resp)
        except MalformedResponseError as e:
            logger.error(f"Malformed response to {method} {path} ({resp.status_code}): {e}")
            raise

        if envelope.status == STATUS_UNAUTHORIZED:
            logger.warning(f"Backend refused {method} {path}: {envelope.message}")
            raise AuthorizationError(envelope.message or "Access denied.")
        if envelope.status not in expect:
            logger.error(
                f"Backend error on {method} {path}: {envelope.status} - {envelope.message}"
            )
            raise BackendError(envelope.message or "Unknown error", status=envelope.status)
        return envelope

    def _parse_list(self, envelope: Envelope, parse: Callable[[Any], T], what: str) -> list[T]:
        if not isinstance(envelope.data, list):
            logger.error(f"Expected a list of {what}, got {type(envelope.data).__name__}")
            raise MalformedResponseError(f"Expected a list of {what}")
        try:
            return [parse(item) for item in envelope.data]
        except (KeyError, TypeError, ValueError) as e:
            logger.exception(f"Could not parse {what} from response")
            raise MalformedResponseError(f"Could not parse {what}: {e}") from e

    # -------------------------------------------------------------------
    # Auth operations
    # -------------------------------------------------------------------

    def login(self, username: str, password: str) -> str:
        envelope = self._request(
            "POST", "/auth/login", json={"username": username, "password": password}
        )
        data = envelope.data
        token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            logger.error("Login response carries no token")
            raise MalformedResponseError("Login response carries no token")
        return token

    def register(self, username: str, password: str) -> None:
        self._request(
            "POST",
            "/auth/register",
            json={"username": username, "password": password},
            expect=(STATUS_OK, STATUS_CREATED),
        )

    def update_password(self, user_id: int, new_password: str) -> None:
        self._request(
            "PUT", f"/auth/update-password/{user_id}", json={"newPassword": new_password}
        )

    # -------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------

    def list_reports(self) -> list[Report]:
        envelope = self._request("GET", "/reports")
        return self._parse_list(envelope, Report.from_api, "reports")

    def filter_reports(self, params: dict[str, str]) -> list[Report]:
        envelope = self._request("GET", "/reports/filter", params=params)
        return self._parse_list(envelope, Report.from_api, "reports")

    def get_report(self, report_id: int) -> Report:
        envelope = self._request("GET", f"/reports/{report_id}")
        if not isinstance(envelope.data, dict):
            raise MalformedResponseError("Expected a report object")
        try:
            return Report.from_api(envelope.data)
        except (KeyError, TypeError, ValueError) as e:
            logger.exception(f"Could not parse report {report_id}")
            raise MalformedResponseError(f"Could not parse report: {e}") from e

    def create_report(self, payload: dict[str, Any]) -> None:
        self._request("POST", "/reports", json=payload, expect=(STATUS_CREATED,))

    def update_report(self, report_id: int, changes: dict[str, Any]) -> None:
        self._request("PUT", f"/reports/{report_id}", json=changes)

    def assign_report(self, report_id: int, agent_id: int) -> None:
        self._request("PATCH", f"/reports/{report_id}/assign", params={"assignedTo": str(agent_id)})

    def set_report_status(self, report_id: int, status: str) -> None:
        self._request("PUT", f"/reports/{report_id}", json={"status": status})

    def save_solution(self, report_id: int, solution: str) -> None:
        self._request("PUT", f"/reports/{report_id}", json={"solution": solution})

    # -------------------------------------------------------------------
    # Users and groups
    # -------------------------------------------------------------------

    def list_users(self) -> list[User]:
        envelope = self._request("GET", "/users")
        return self._parse_list(envelope, User.from_api, "users")

    def update_user(self, user_id: int, changes: dict[str, Any]) -> None:
        self._request("PUT", f"/users/update/{user_id}", json=changes)

    def delete_user(self, user_id: int) -> None:
        self._request("DELETE", f"/users/delete/{user_id}")

    def list_agents(self) -> list[User]:
        envelope = self._request("GET", "/users/get-agents")
        return self._parse_list(envelope, User.from_api, "agents")

    def list_access_groups(self) -> list[AccessGroup]:
        envelope = self._request("GET", "/access-groups")
        return self._parse_list(envelope, AccessGroup.from_api, "access groups")
