from datetime import date

from anticorruption_client.models import AccessGroup, ReportFilter, User, parse_date


def test_parse_date_accepts_backend_shapes():
    assert parse_date(None) is None
    assert parse_date("") is None
    assert parse_date("2024-03-01") == date(2024, 3, 1)
    assert parse_date("2024-03-01T10:00:00") == date(2024, 3, 1)
    assert parse_date(1709251200000) == date(2024, 3, 1)


def test_user_from_api():
    user = User.from_api(
        {
            "id": 5,
            "username": "bob",
            "lastName": "Smith",
            "firstName": "Bob",
            "salary": "1200.50",
            "numberOfChildren": 2,
            "hireDate": "2020-01-15",
            "groups": [{"id": 6, "name": "SolveReport"}],
            "password": "never-read",
        }
    )
    assert user.full_name == "Smith Bob"
    assert user.display_name == "Smith Bob (bob)"
    assert user.salary == 1200.5
    assert user.hire_date == date(2020, 1, 15)
    assert user.password is None
    assert user.in_group("SolveReport")
    assert not user.is_fired


def test_group_without_id_omits_it_on_the_wire():
    assert AccessGroup(None, "ViewReport").to_api() == {"name": "ViewReport"}


def test_filter_skips_blank_criteria():
    criteria = ReportFilter(reporter_id="", incident_location="Depot", end_incident_date=date(2024, 2, 1), assigned_to=4)
    assert criteria.to_params() == {
        "incidentLocation": "Depot",
        "endIncidentDate": "2024-02-01",
        "assignedTo": "4",
    }
