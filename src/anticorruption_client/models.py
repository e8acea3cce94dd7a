"""Dataclasses for the entities exchanged with the reporting backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any


def parse_date(value: Any) -> date | None:
    """Parse a backend date: ISO string, epoch milliseconds, or None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value / 1000, UTC).date()
    return date.fromisoformat(str(value)[:10])


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


@dataclass
class AccessGroup:
    id: int | None
    name: str

    @staticmethod
    def from_api(data: dict[str, Any]) -> AccessGroup:
        raw_id = data.get("id")
        return AccessGroup(id=int(raw_id) if raw_id is not None else None, name=str(data["name"]))

    def to_api(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name}
        if self.id is not None:
            payload["id"] = self.id
        return payload


@dataclass
class Report:
    id: int
    date_submitted: str | None = None
    reporter_id: str | None = None
    incident_date: str | None = None
    incident_time: str | None = None
    incident_location: str | None = None
    involved_persons: str | None = None
    description: str | None = None
    evidence_description: str | None = None
    witnesses: str | None = None
    status: str | None = None
    assigned_to: str | None = None
    assigned_to_full_name: str | None = None
    last_updated: str | None = None
    solution: str | None = None

    @staticmethod
    def from_api(data: dict[str, Any]) -> Report:
        return Report(
            id=int(data["id"]),
            date_submitted=_optional_str(data.get("dateSubmitted")),
            reporter_id=_optional_str(data.get("reporterId")),
            incident_date=_optional_str(data.get("incidentDate")),
            incident_time=_optional_str(data.get("incidentTime")),
            incident_location=data.get("incidentLocation"),
            involved_persons=data.get("involvedPersons"),
            description=data.get("description"),
            evidence_description=data.get("evidenceDescription"),
            witnesses=data.get("witnesses"),
            status=data.get("status"),
            assigned_to=_optional_str(data.get("assignedTo")),
            assigned_to_full_name=data.get("assignedToFullName"),
            last_updated=_optional_str(data.get("lastUpdated")),
            solution=data.get("solution"),
        )


# Plain string attributes of User (besides username) and their wire names.
_USER_TEXT_FIELDS: dict[str, str] = {
    "employee_id": "employeeId",
    "last_name": "lastName",
    "first_name": "firstName",
    "middle_name": "middleName",
    "gender": "gender",
    "passport_series": "passportSeries",
    "passport_number": "passportNumber",
    "address": "address",
    "phone_number": "phoneNumber",
    "email": "email",
    "position": "position",
    "department": "department",
    "contract_type": "contractType",
    "education": "education",
    "work_experience": "workExperience",
    "skills": "skills",
    "marital_status": "maritalStatus",
    "military_service_info": "militaryServiceInfo",
    "inn": "inn",
    "snils": "snils",
    "qualification_upgrade": "qualificationUpgrade",
    "awards": "awards",
    "disciplinary_actions": "disciplinaryActions",
    "attestation_results": "attestationResults",
    "medical_exam_results": "medicalExamResults",
    "bank_details": "bankDetails",
    "emergency_contact": "emergencyContact",
    "notes": "notes",
}


@dataclass
class User:
    id: int
    username: str
    # Write-only: never filled from a response.
    password: str | None = None
    groups: list[AccessGroup] = field(default_factory=list)
    employee_id: str | None = None
    last_name: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    passport_series: str | None = None
    passport_number: str | None = None
    address: str | None = None
    phone_number: str | None = None
    email: str | None = None
    position: str | None = None
    department: str | None = None
    hire_date: date | None = None
    contract_type: str | None = None
    salary: float | None = None
    education: str | None = None
    work_experience: str | None = None
    skills: str | None = None
    marital_status: str | None = None
    number_of_children: int | None = None
    military_service_info: str | None = None
    inn: str | None = None
    snils: str | None = None
    qualification_upgrade: str | None = None
    awards: str | None = None
    disciplinary_actions: str | None = None
    attestation_results: str | None = None
    medical_exam_results: str | None = None
    bank_details: str | None = None
    emergency_contact: str | None = None
    notes: str | None = None
    is_fired: bool = False

    @property
    def full_name(self) -> str:
        """Last, first and middle name joined; empty when none is set."""
        return " ".join(p for p in (self.last_name, self.first_name, self.middle_name) if p)

    @property
    def display_name(self) -> str:
        """Label used in agent pickers."""
        return f"{self.full_name} ({self.username})"

    @property
    def group_names(self) -> list[str]:
        return [g.name for g in self.groups]

    def in_group(self, group_name: str) -> bool:
        """Check if user is in a specific access group."""
        return group_name in self.group_names

    @staticmethod
    def from_api(data: dict[str, Any]) -> User:
        text = {attr: data.get(key) for attr, key in _USER_TEXT_FIELDS.items()}
        salary = data.get("salary")
        children = data.get("numberOfChildren")
        return User(
            id=int(data["id"]),
            username=str(data["username"]),
            groups=[AccessGroup.from_api(g) for g in data.get("groups") or []],
            date_of_birth=parse_date(data.get("dateOfBirth")),
            hire_date=parse_date(data.get("hireDate")),
            salary=float(salary) if salary is not None else None,
            number_of_children=int(children) if children is not None else None,
            is_fired=bool(data.get("isFired") or False),
            **text,
        )


@dataclass
class ReportFilter:
    """Search criteria for the report list. Blank criteria are not sent."""

    reporter_id: str | None = None
    start_incident_date: date | None = None
    end_incident_date: date | None = None
    incident_location: str | None = None
    involved_persons: str | None = None
    status: str | None = None
    assigned_to: int | None = None

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        for key, value in (
            ("reporterId", self.reporter_id),
            ("incidentLocation", self.incident_location),
            ("involvedPersons", self.involved_persons),
        ):
            if value is not None and value.strip():
                params[key] = value
        if self.start_incident_date is not None:
            params["startIncidentDate"] = self.start_incident_date.isoformat()
        if self.end_incident_date is not None:
            params["endIncidentDate"] = self.end_incident_date.isoformat()
        if self.status:
            params["status"] = self.status
        if self.assigned_to is not None:
            params["assignedTo"] = str(self.assigned_to)
        return params
