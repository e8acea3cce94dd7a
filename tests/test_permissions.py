import pytest

from anticorruption_client.permissions import (
    ACCESS_REQUEST_MESSAGE,
    Capability,
    ReportColumns,
    TabState,
    allowed_capabilities,
    is_allowed,
    needs_access_request,
)


@pytest.mark.parametrize(
    "groups, expected",
    [
        (set(), set()),
        ({"CreateReport"}, {Capability.CREATE_REPORT}),
        ({"ViewReport"}, {Capability.REVIEW_REPORTS}),
        (
            {"AccessToAllReports"},
            {Capability.REVIEW_REPORTS, Capability.EDIT_ALL_REPORT_FIELDS},
        ),
        ({"ManageUserGroups"}, {Capability.ADMINISTER_USERS}),
        ({"AssignProcessReport"}, {Capability.ASSIGN_AGENT}),
        ({"SolveReport"}, {Capability.EDIT_SOLUTION_ONLY}),
        (
            {"ViewReport", "AssignProcessReport", "SolveReport"},
            {Capability.REVIEW_REPORTS, Capability.ASSIGN_AGENT, Capability.EDIT_SOLUTION_ONLY},
        ),
        ({"SomethingElse"}, set()),
    ],
)
def test_capabilities_by_group(groups, expected):
    assert allowed_capabilities(groups) == frozenset(expected)


def test_any_listed_group_is_enough():
    assert is_allowed({"ViewReport"}, Capability.REVIEW_REPORTS)
    assert is_allowed({"AccessToAllReports"}, Capability.REVIEW_REPORTS)


def test_no_groups_means_no_capabilities():
    assert not any(is_allowed(set(), c) for c in Capability)


def test_create_report_only_shows_one_tab():
    tabs = TabState.for_groups({"CreateReport"})
    assert tabs == TabState(create_report=True, review_reports=False, administer_users=False)
    assert tabs.access_message == ""


def test_no_tab_groups_shows_access_message():
    tabs = TabState.for_groups({"SolveReport", "AssignProcessReport"})
    assert not (tabs.create_report or tabs.review_reports or tabs.administer_users)
    assert tabs.access_message == ACCESS_REQUEST_MESSAGE
    assert needs_access_request({"SolveReport"})


def test_access_to_all_reports_unlocks_review_tab():
    assert not needs_access_request({"AccessToAllReports"})
    assert TabState.for_groups({"AccessToAllReports"}).review_reports


def test_report_columns_follow_assign_capability():
    assert ReportColumns.for_groups({"AssignProcessReport"}) == ReportColumns(True, True)
    assert ReportColumns.for_groups({"ViewReport"}) == ReportColumns(False, False)
