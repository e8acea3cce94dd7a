"""Abstract backend protocol for AntiCorruptionClient."""

from typing import Any, Protocol

from anticorruption_client.models import AccessGroup, Report, User


class ReportingBackend(Protocol):
    """Protocol that all backends must implement.

    Every method either returns its result or raises a
    ``anticorruption_client.errors.ClientError`` subclass.
    """

    def login(self, username: str, password: str) -> str:
        """Authenticate and return the bearer token."""
        ...

    def register(self, username: str, password: str) -> None:
        """Create a new user account."""
        ...

    def update_password(self, user_id: int, new_password: str) -> None:
        """Set a new password for a user."""
        ...

    def list_reports(self) -> list[Report]:
        """All reports visible to the current user."""
        ...

    def filter_reports(self, params: dict[str, str]) -> list[Report]:
        """Reports matching the given query parameters."""
        ...

    def get_report(self, report_id: int) -> Report:
        """Look up a report by id."""
        ...

    def create_report(self, payload: dict[str, Any]) -> None:
        """Submit a new report."""
        ...

    def update_report(self, report_id: int, changes: dict[str, Any]) -> None:
        """Send a partial update for a report."""
        ...

    def assign_report(self, report_id: int, agent_id: int) -> None:
        """Assign a report to an agent."""
        ...

    def set_report_status(self, report_id: int, status: str) -> None:
        """Move a report to another status."""
        ...

    def save_solution(self, report_id: int, solution: str) -> None:
        """Store the solution text of a report."""
        ...

    def list_users(self) -> list[User]:
        """All users."""
        ...

    def update_user(self, user_id: int, changes: dict[str, Any]) -> None:
        """Send a partial update for a user."""
        ...

    def delete_user(self, user_id: int) -> None:
        """Delete a user."""
        ...

    def list_agents(self) -> list[User]:
        """Users that reports can be assigned to."""
        ...

    def list_access_groups(self) -> list[AccessGroup]:
        """All access groups known to the backend."""
        ...
