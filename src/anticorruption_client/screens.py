"""Screen controllers, independent of any widget toolkit.

Each controller owns the state and decisions of one screen and talks to the
toolkit through a small View protocol. Backend calls go through the
Dispatcher, so View methods are only ever called on the UI thread.
"""

import dataclasses
import logging
from collections.abc import Callable
from typing import Any, Protocol

from anticorruption_client.client import AntiCorruptionClient
from anticorruption_client.dispatch import Dispatcher
from anticorruption_client.errors import (
    AuthorizationError,
    BackendError,
    ClientError,
    MalformedResponseError,
    NoChangesError,
    TransportError,
    ValidationError,
)
from anticorruption_client.models import AccessGroup, Report, ReportFilter, User
from anticorruption_client.permissions import (
    ACCESS_REQUEST_MESSAGE,
    Capability,
    ReportColumns,
    TabState,
    needs_access_request,
)
from anticorruption_client.validation import (
    ReportForm,
    apply_time_mask,
    check_time_on_blur,
    validate_report_form,
)

logger = logging.getLogger("anticorruption_client.screens")

MALFORMED_RESPONSE_MESSAGE = "Error processing the server response."


class View(Protocol):
    """What every screen needs from the toolkit."""

    def show_info(self, title: str, message: str) -> None: ...

    def show_warning(self, title: str, message: str) -> None: ...

    def show_error(self, title: str, message: str) -> None: ...

    def show_access_request(self, message: str) -> None: ...

    def close(self) -> None: ...


class MainView(View, Protocol):
    def show_tabs(self, tabs: TabState, columns: ReportColumns) -> None: ...

    def set_access_message(self, message: str) -> None: ...

    def show_reports(self, reports: list[Report]) -> None: ...

    def show_users(self, users: list[User]) -> None: ...

    def show_agents(self, agents: list[User]) -> None: ...

    def clear_report_form(self) -> None: ...


class UserDetailsView(View, Protocol):
    def show_available_groups(self, names: list[str]) -> None: ...

    def show_user_groups(self, names: list[str]) -> None: ...


def present_error(view: View, error: BaseException) -> None:
    """Show a failure the way its category calls for."""
    match error:
        case ValidationError():
            view.show_warning("Validation error", error.message)
        case NoChangesError():
            view.show_info("Information", error.message)
        case AuthorizationError():
            logger.info(f"Access refused: {error.message}")
            view.show_access_request(ACCESS_REQUEST_MESSAGE)
        case MalformedResponseError():
            view.show_error("Error", MALFORMED_RESPONSE_MESSAGE)
        case TransportError():
            view.show_error("Connection error", error.message)
        case BackendError():
            view.show_error("Error", error.message)
        case ClientError():
            view.show_error("Error", error.message or "Unknown error")
        case _:
            logger.error("Unexpected error reached the UI", exc_info=error)
            view.show_error("Error", f"Unexpected error: {error}")


class _Screen:
    def __init__(self, client: AntiCorruptionClient, dispatcher: Dispatcher, view: Any) -> None:
        self.client = client
        self.dispatcher = dispatcher
        self.view = view

    def _fail(self, error: BaseException) -> None:
        present_error(self.view, error)

    def _mutate(
        self, key: str, call: Callable[[], Any], on_success: Callable[[Any], None]
    ) -> bool:
        """Submit a state-changing request unless the same one is in flight."""
        future = self.dispatcher.submit(key, call, on_success, self._fail, supersede=False)
        return future is not None


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


class LoginScreen(_Screen):
    def __init__(
        self,
        client: AntiCorruptionClient,
        dispatcher: Dispatcher,
        view: View,
        on_success: Callable[[], None],
    ) -> None:
        super().__init__(client, dispatcher, view)
        self.on_success = on_success

    def submit(self, username: str, password: str) -> None:
        if not username or not password:
            self.view.show_warning("Validation error", "Enter your username and password.")
            return
        self.dispatcher.submit(
            "login",
            lambda: self.client.login(username, password),
            lambda _: self.on_success(),
            self._login_failed,
            supersede=False,
        )

    def _login_failed(self, error: BaseException) -> None:
        if isinstance(error, AuthorizationError | BackendError):
            self.view.show_error("Login failed", error.message)
        else:
            present_error(self.view, error)


# ---------------------------------------------------------------------------
# Main window
# ---------------------------------------------------------------------------


class MainScreen(_Screen):
    """Tabs for report submission, report review and user administration."""

    view: MainView

    def __init__(
        self,
        client: AntiCorruptionClient,
        dispatcher: Dispatcher,
        view: MainView,
        on_logout: Callable[[], None],
    ) -> None:
        super().__init__(client, dispatcher, view)
        self.on_logout = on_logout
        self.reports: list[Report] = []
        self.users: list[User] = []
        self.agents: list[User] = []

    def tabs(self) -> TabState:
        return TabState.for_groups(self.client.session.groups)

    def report_columns(self) -> ReportColumns:
        return ReportColumns.for_groups(self.client.session.groups)

    def open(self) -> None:
        """Lay out the tabs for the current user and load their data."""
        tabs = self.tabs()
        self.view.show_tabs(tabs, self.report_columns())
        self.view.set_access_message(tabs.access_message)
        if tabs.review_reports:
            self.load_reports()
            self.load_agents()
        if tabs.administer_users:
            self.load_users()

    # -- report submission --

    def on_time_edited(self, previous: str, proposed: str) -> str:
        """Input mask for the incident time field."""
        return apply_time_mask(previous, proposed)

    def on_time_blur(self, value: str) -> None:
        warning = check_time_on_blur(value)
        if warning is not None:
            self.view.show_warning("Invalid format", warning)

    def submit_report(self, form: ReportForm) -> None:
        problem = validate_report_form(form)
        if problem is not None:
            self.view.show_warning("Validation error", problem)
            return
        snapshot = dataclasses.replace(form)

        def submitted(_: Any) -> None:
            form.clear()
            self.view.clear_report_form()
            self.view.show_info("Success", "Report submitted.")

        self._mutate("create-report", lambda: self.client.create_report(snapshot), submitted)

    # -- report review --

    def load_reports(self) -> None:
        self.dispatcher.submit(
            "reports", self.client.list_reports, self._reports_loaded, self._reports_failed
        )

    def apply_filter(self, criteria: ReportFilter) -> None:
        def filtered(reports: list[Report]) -> None:
            self._reports_loaded(reports)
            self.view.show_info("Search results", f"Reports found: {len(reports)}")

        self.dispatcher.submit(
            "reports", lambda: self.client.filter_reports(criteria), filtered, self._reports_failed
        )

    def reset_filter(self) -> None:
        self.load_reports()

    def _reports_loaded(self, reports: list[Report]) -> None:
        self.reports = reports
        self.view.show_reports(reports)
        self.view.set_access_message(self.tabs().access_message)

    def _reports_failed(self, error: BaseException) -> None:
        if isinstance(error, AuthorizationError) and needs_access_request(
            self.client.session.groups
        ):
            self.view.set_access_message(ACCESS_REQUEST_MESSAGE)
            return
        present_error(self.view, error)

    def load_agents(self) -> None:
        def loaded(agents: list[User]) -> None:
            self.agents = agents
            self.view.show_agents(agents)

        self.dispatcher.submit("agents", self.client.list_agents, loaded, self._fail)

    def assign_agent(self, report: Report, agent: User) -> None:
        if not self.client.can(Capability.ASSIGN_AGENT):
            self.view.show_access_request(ACCESS_REQUEST_MESSAGE)
            return

        def assigned(_: Any) -> None:
            self.view.show_info("Success", f"{agent.full_name} assigned to report #{report.id}.")
            self.view.show_reports(self.reports)

        self._mutate(
            f"assign-report-{report.id}", lambda: self.client.assign_report(report, agent), assigned
        )

    # -- user administration --

    def load_users(self) -> None:
        def loaded(users: list[User]) -> None:
            self.users = users
            self.view.show_users(users)

        self.dispatcher.submit("users", self.client.list_users, loaded, self._fail)

    def delete_user(self, user: User, confirmed: bool) -> None:
        """Delete ``user`` once the view has asked for confirmation."""
        if not confirmed:
            return

        def deleted(_: Any) -> None:
            self.view.show_info("Success", f"User {user.username} deleted.")
            self.load_users()

        self._mutate(f"delete-user-{user.id}", lambda: self.client.delete_user(user), deleted)

    def update_password(self, user: User, new_password: str) -> None:
        self._mutate(
            f"update-password-{user.id}",
            lambda: self.client.update_password(user.id, new_password),
            lambda _: self.view.show_info("Success", "Password updated."),
        )

    def logout(self) -> None:
        self.client.logout()
        self.reports, self.users, self.agents = [], [], []
        self.on_logout()


# ---------------------------------------------------------------------------
# Report details
# ---------------------------------------------------------------------------


class ReportDetailsScreen(_Screen):
    def __init__(
        self,
        client: AntiCorruptionClient,
        dispatcher: Dispatcher,
        view: View,
        report: Report,
    ) -> None:
        super().__init__(client, dispatcher, view)
        self.report = report

    def editable_fields(self) -> list[str]:
        """Wire names of the fields this user may edit on this screen."""
        return [f.name for f in self.client.editable_report_fields()]

    def take_to_work(self) -> None:
        self._set_status("IN_PROGRESS")

    def close_report(self) -> None:
        self._set_status("CLOSED")

    def _set_status(self, status: str) -> None:
        def updated(_: Any) -> None:
            self.view.show_info("Success", "Report status updated.")
            self.view.close()

        self._mutate(
            f"report-status-{self.report.id}",
            lambda: self.client.set_report_status(self.report, status),
            updated,
        )

    def save_solution(self, solution: str) -> None:
        def saved(_: Any) -> None:
            self.view.show_info("Success", "Solution saved.")
            self.view.close()

        self._mutate(
            f"report-solution-{self.report.id}",
            lambda: self.client.save_solution(self.report, solution),
            saved,
        )

    def save_changes(self, edited: dict[str, Any]) -> None:
        def saved(_: Any) -> None:
            self.view.show_info("Success", "Report updated.")
            self.view.close()

        self._mutate(
            f"report-update-{self.report.id}",
            lambda: self.client.update_report(self.report, edited),
            saved,
        )


# ---------------------------------------------------------------------------
# User details
# ---------------------------------------------------------------------------


class UserDetailsScreen(_Screen):
    view: UserDetailsView

    def __init__(
        self,
        client: AntiCorruptionClient,
        dispatcher: Dispatcher,
        view: UserDetailsView,
        user: User,
    ) -> None:
        super().__init__(client, dispatcher, view)
        self.user = user
        self.groups: list[str] = list(user.group_names)
        self.available: list[AccessGroup] = []

    def load_groups(self) -> None:
        def loaded(groups: list[AccessGroup]) -> None:
            self.available = groups
            self.view.show_available_groups([g.name for g in groups])

        self.dispatcher.submit(
            f"access-groups-{self.user.id}", self.client.list_access_groups, loaded, self._fail
        )

    def add_group(self, name: str | None) -> None:
        if name and name not in self.groups:
            self.groups.append(name)
            self.view.show_user_groups(list(self.groups))

    def remove_group(self, name: str | None) -> None:
        if name in self.groups:
            self.groups.remove(name)
            self.view.show_user_groups(list(self.groups))

    def save(self, edited: dict[str, Any]) -> None:
        values = {**edited, "groups": list(self.groups)}

        def saved(_: Any) -> None:
            self.view.show_info("Success", "User details updated.")
            self.view.close()

        self._mutate(
            f"update-user-{self.user.id}",
            lambda: self.client.update_user(self.user, values, self.available),
            saved,
        )


# ---------------------------------------------------------------------------
# User registration
# ---------------------------------------------------------------------------


class UserRegistrationScreen(_Screen):
    def register(self, username: str, password: str) -> None:
        def registered(_: Any) -> None:
            self.view.show_info("Success", f"User {username} registered.")
            self.view.close()

        self._mutate("register-user", lambda: self.client.register_user(username, password), registered)
