"""Group-based permission gate.

Groups are flat tags with no hierarchy. A capability is granted when the
user holds ANY of the groups it lists.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

CREATE_REPORT = "CreateReport"
VIEW_REPORT = "ViewReport"
ACCESS_TO_ALL_REPORTS = "AccessToAllReports"
MANAGE_USER_GROUPS = "ManageUserGroups"
ASSIGN_PROCESS_REPORT = "AssignProcessReport"
SOLVE_REPORT = "SolveReport"

ACCESS_REQUEST_MESSAGE = "Ask an administrator to grant you access."


class Capability(Enum):
    CREATE_REPORT = "create-report"
    REVIEW_REPORTS = "review-reports"
    ADMINISTER_USERS = "administer-users"
    ASSIGN_AGENT = "assign-agent-to-report"
    EDIT_ALL_REPORT_FIELDS = "edit-all-report-fields"
    EDIT_SOLUTION_ONLY = "edit-solution-only"


REQUIREMENTS: dict[Capability, frozenset[str]] = {
    Capability.CREATE_REPORT: frozenset({CREATE_REPORT}),
    Capability.REVIEW_REPORTS: frozenset({VIEW_REPORT, ACCESS_TO_ALL_REPORTS}),
    Capability.ADMINISTER_USERS: frozenset({MANAGE_USER_GROUPS}),
    Capability.ASSIGN_AGENT: frozenset({ASSIGN_PROCESS_REPORT}),
    Capability.EDIT_ALL_REPORT_FIELDS: frozenset({ACCESS_TO_ALL_REPORTS}),
    Capability.EDIT_SOLUTION_ONLY: frozenset({SOLVE_REPORT}),
}

# Capabilities that each unlock a whole tab of the main screen.
SCREEN_CAPABILITIES = (
    Capability.CREATE_REPORT,
    Capability.REVIEW_REPORTS,
    Capability.ADMINISTER_USERS,
)


def is_allowed(groups: Iterable[str], capability: Capability) -> bool:
    """True if any of ``groups`` grants ``capability``."""
    return not REQUIREMENTS[capability].isdisjoint(groups)


def allowed_capabilities(groups: Iterable[str]) -> frozenset[Capability]:
    group_set = frozenset(groups)
    return frozenset(c for c in Capability if is_allowed(group_set, c))


def needs_access_request(groups: Iterable[str]) -> bool:
    """True when no tab of the main screen would be available."""
    group_set = frozenset(groups)
    return not any(is_allowed(group_set, c) for c in SCREEN_CAPABILITIES)


@dataclass(frozen=True, slots=True)
class TabState:
    """Which main-screen tabs to show, and the fallback message if none."""

    create_report: bool
    review_reports: bool
    administer_users: bool
    access_message: str = ""

    @staticmethod
    def for_groups(groups: Iterable[str]) -> TabState:
        group_set = frozenset(groups)
        return TabState(
            create_report=is_allowed(group_set, Capability.CREATE_REPORT),
            review_reports=is_allowed(group_set, Capability.REVIEW_REPORTS),
            administer_users=is_allowed(group_set, Capability.ADMINISTER_USERS),
            access_message=ACCESS_REQUEST_MESSAGE if needs_access_request(group_set) else "",
        )


@dataclass(frozen=True, slots=True)
class ReportColumns:
    """Visibility of the assignment controls on the review screen."""

    assigned_to: bool
    assign_button: bool

    @staticmethod
    def for_groups(groups: Iterable[str]) -> ReportColumns:
        allowed = is_allowed(groups, Capability.ASSIGN_AGENT)
        return ReportColumns(assigned_to=allowed, assign_button=allowed)
