from datetime import date

import pytest

from anticorruption_client.validation import (
    TIME_FORMAT_HINT,
    ReportForm,
    apply_time_mask,
    check_time_on_blur,
    is_valid_time,
    validate_report_form,
)


def _valid_form(**overrides) -> ReportForm:
    values = dict(
        incident_date=date(2024, 3, 1),
        incident_time="09:30",
        incident_location="Main office",
        involved_persons="J. Doe",
        description="Cash for a contract",
    )
    values.update(overrides)
    return ReportForm(**values)


@pytest.mark.parametrize("value", ["00:00", "09:30", "14:45", "23:59"])
def test_valid_times(value):
    assert is_valid_time(value)


@pytest.mark.parametrize("value", ["", None, "9:3", "9:30", "25:00", "24:00", "12:60", "123:45", "ab:cd", "09:30\n"])
def test_invalid_times(value):
    assert not is_valid_time(value)


def test_complete_form_passes():
    assert validate_report_form(_valid_form()) is None


def test_optional_fields_are_not_checked():
    assert validate_report_form(_valid_form(evidence_description="", witnesses="")) is None


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"incident_date": None}, "Select the incident date."),
        ({"incident_time": "9:30"}, "Enter a valid incident time in HH:MM format."),
        ({"incident_location": ""}, "Enter the incident location."),
        ({"involved_persons": ""}, "Enter the persons involved."),
        ({"description": ""}, "Enter a description of the incident."),
    ],
)
def test_each_rule_reports_its_message(overrides, message):
    assert validate_report_form(_valid_form(**overrides)) == message


def test_first_failing_rule_wins():
    form = ReportForm()
    assert validate_report_form(form) == "Select the incident date."


def test_form_payload_uses_wire_names():
    payload = _valid_form(witnesses="Clerk").to_api()
    assert payload["incidentDate"] == "2024-03-01"
    assert payload["incidentTime"] == "09:30"
    assert payload["witnesses"] == "Clerk"


def test_clear_resets_every_field():
    form = _valid_form(witnesses="Clerk")
    form.clear()
    assert form == ReportForm()


def test_blur_check_leaves_empty_field_alone():
    assert check_time_on_blur("") is None
    assert check_time_on_blur("14:45") is None
    assert check_time_on_blur("7:5") == TIME_FORMAT_HINT


@pytest.mark.parametrize(
    "previous, proposed, kept",
    [
        ("", "1", "1"),
        ("1", "12", "12:"),
        ("12:", "12:3", "12:3"),
        ("12:3", "12:34", "12:34"),
        ("12:34", "12:345", "12:34"),
        ("1", "1a", "1"),
        ("12:", "12", "12"),
        ("12:3", "", ""),
    ],
)
def test_time_mask(previous, proposed, kept):
    assert apply_time_mask(previous, proposed) == kept
