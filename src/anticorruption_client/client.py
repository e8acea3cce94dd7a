"""AntiCorruptionClient facade - one method per backend operation."""

import logging
from typing import Any

from anticorruption_client.backends.base import ReportingBackend
from anticorruption_client.changeset import (
    NO_CHANGES_MESSAGE,
    REPORT_FIELDS,
    SOLUTION_FIELDS,
    USER_FIELDS,
    EditableField,
    build_changeset,
)
from anticorruption_client.errors import (
    AuthorizationError,
    MalformedResponseError,
    NoChangesError,
    ValidationError,
)
from anticorruption_client.models import AccessGroup, Report, ReportFilter, User
from anticorruption_client.permissions import (
    ACCESS_REQUEST_MESSAGE,
    SOLVE_REPORT,
    Capability,
    is_allowed,
)
from anticorruption_client.session import Session
from anticorruption_client.token import read_identity
from anticorruption_client.validation import ReportForm, is_valid_time, validate_report_form

logger = logging.getLogger("anticorruption_client.client")


class AntiCorruptionClient:
    """Main client for the reporting backend.

    Holds the session and checks everything that can be checked locally
    (authentication, form rules, empty change-sets) before a request is sent.

    Usage:
        session = Session()
        client = AntiCorruptionClient(HttpBackend("https://reports.example.com", session), session)
        client.login("alice", "secret")
        if client.can(Capability.CREATE_REPORT):
            client.create_report(form)
    """

    def __init__(self, backend: ReportingBackend, session: Session) -> None:
        self.backend = backend
        self.session = session

    def _require_session(self) -> None:
        if not self.session.is_authenticated():
            raise AuthorizationError("You are not signed in.")

    def can(self, capability: Capability) -> bool:
        """Whether the signed-in user holds ``capability``."""
        return is_allowed(self.session.groups, capability)

    # -------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------

    def login(self, username: str, password: str) -> None:
        """Authenticate and populate the session from the returned token."""
        token = self.backend.login(username, password)
        identity = read_identity(token)
        if identity is None:
            logger.error("Login token could not be decoded")
            raise MalformedResponseError("Login token could not be decoded")
        self.session.login(token, identity.username, identity.groups)
        logger.info(f"Signed in as {identity.username} with groups {list(identity.groups)}")

    def logout(self) -> None:
        username = self.session.username
        self.session.logout()
        logger.info(f"Signed out {username}")

    def register_user(self, username: str, password: str) -> None:
        """Create a new user account (administrators only)."""
        self._require_session()
        if not username or not password:
            raise ValidationError("Enter both a username and a password.")
        self.backend.register(username, password)

    def update_password(self, user_id: int, new_password: str) -> None:
        self._require_session()
        if not new_password:
            raise ValidationError("Enter the new password.")
        self.backend.update_password(user_id, new_password)

    # -------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------

    def list_reports(self) -> list[Report]:
        self._require_session()
        return self.backend.list_reports()

    def filter_reports(self, criteria: ReportFilter) -> list[Report]:
        self._require_session()
        return self.backend.filter_reports(criteria.to_params())

    def get_report(self, report_id: int) -> Report:
        self._require_session()
        return self.backend.get_report(report_id)

    def create_report(self, form: ReportForm) -> None:
        """Validate the form and submit it. Nothing is sent if it is invalid."""
        problem = validate_report_form(form)
        if problem is not None:
            raise ValidationError(problem)
        self._require_session()
        self.backend.create_report(form.to_api())

    def editable_report_fields(self) -> tuple[EditableField, ...]:
        """Report fields the signed-in user may change."""
        if self.can(Capability.EDIT_ALL_REPORT_FIELDS):
            return REPORT_FIELDS
        if self.can(Capability.EDIT_SOLUTION_ONLY):
            return SOLUTION_FIELDS
        return ()

    def update_report(self, original: Report, edited: dict[str, Any]) -> dict[str, Any]:
        """Send only the report fields that differ from ``original``.

        Returns the change-set that was sent. Raises NoChangesError when
        nothing differs.
        """
        self._require_session()
        fields = self.editable_report_fields()
        if not fields:
            raise AuthorizationError(ACCESS_REQUEST_MESSAGE)
        changes = build_changeset(original, edited, fields)
        if "incidentTime" in changes and not is_valid_time(changes["incidentTime"]):
            raise ValidationError("Enter a valid incident time in HH:MM format.")
        if not changes:
            raise NoChangesError(NO_CHANGES_MESSAGE)
        self.backend.update_report(original.id, changes)
        return changes

    def assign_report(self, report: Report, agent: User) -> None:
        self._require_session()
        self.backend.assign_report(report.id, agent.id)
        report.assigned_to = str(agent.id)
        report.assigned_to_full_name = agent.full_name

    def set_report_status(self, report: Report, status: str) -> None:
        self._require_session()
        self.backend.set_report_status(report.id, status)
        report.status = status

    def save_solution(self, report: Report, solution: str) -> None:
        """Store the solution text. Needs solution or full edit rights."""
        self._require_session()
        if not (
            self.can(Capability.EDIT_SOLUTION_ONLY) or self.can(Capability.EDIT_ALL_REPORT_FIELDS)
        ):
            raise AuthorizationError(ACCESS_REQUEST_MESSAGE)
        self.backend.save_solution(report.id, solution)
        report.solution = solution

    # -------------------------------------------------------------------
    # Users and groups
    # -------------------------------------------------------------------

    def list_users(self) -> list[User]:
        self._require_session()
        return self.backend.list_users()

    def list_agents(self) -> list[User]:
        """Users a report can be assigned to: those able to solve reports."""
        self._require_session()
        return [u for u in self.backend.list_agents() if u.in_group(SOLVE_REPORT)]

    def list_access_groups(self) -> list[AccessGroup]:
        self._require_session()
        return self.backend.list_access_groups()

    def update_user(
        self,
        original: User,
        edited: dict[str, Any],
        access_groups: list[AccessGroup] | None = None,
    ) -> dict[str, Any]:
        """Send only the user fields that differ from ``original``.

        ``access_groups`` resolves group names in ``edited["groups"]`` to ids.
        Returns the change-set that was sent. Raises NoChangesError when
        nothing differs and ValidationError when a number does not parse.
        """
        self._require_session()
        known = {g.name: g.id for g in [*original.groups, *(access_groups or [])]}
        changes = build_changeset(original, edited, USER_FIELDS, group_ids=known)
        if not changes:
            raise NoChangesError(NO_CHANGES_MESSAGE)
        self.backend.update_user(original.id, changes)
        return changes

    def delete_user(self, user: User) -> None:
        self._require_session()
        self.backend.delete_user(user.id)
