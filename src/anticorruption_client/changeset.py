"""Minimal partial-update payloads.

An edit screen keeps the entity it was opened with as a snapshot. On save we
compare each editable field of the snapshot with the edited value and send
only what differs, so fields the user never touched are not overwritten.

There is no version token: if another client changed the same field in the
meantime, the last writer wins.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from anticorruption_client.errors import ValidationError
from anticorruption_client.models import AccessGroup, parse_date

NO_CHANGES_MESSAGE = "No changes to save."


class FieldKind(Enum):
    TEXT = "text"
    INTEGER = "integer"
    DECIMAL = "decimal"
    DATE = "date"
    BOOLEAN = "boolean"
    GROUPS = "groups"


@dataclass(frozen=True, slots=True)
class EditableField:
    name: str
    attr: str
    kind: FieldKind = FieldKind.TEXT
    label: str = ""

    def read(self, entity: Any) -> Any:
        """Value of this field on a snapshot (dataclass or wire-keyed mapping)."""
        if isinstance(entity, Mapping):
            return entity.get(self.name)
        return getattr(entity, self.attr)

    @property
    def display(self) -> str:
        return self.label or self.name


def _field(name: str, attr: str, kind: FieldKind = FieldKind.TEXT, label: str = "") -> EditableField:
    return EditableField(name=name, attr=attr, kind=kind, label=label)


# ---------------------------------------------------------------------------
# Field tables
# ---------------------------------------------------------------------------

USER_FIELDS: tuple[EditableField, ...] = (
    _field("username", "username"),
    _field("lastName", "last_name"),
    _field("firstName", "first_name"),
    _field("middleName", "middle_name"),
    _field("dateOfBirth", "date_of_birth", FieldKind.DATE, "date of birth"),
    _field("gender", "gender"),
    _field("email", "email"),
    _field("phoneNumber", "phone_number"),
    _field("address", "address"),
    _field("employeeId", "employee_id"),
    _field("position", "position"),
    _field("department", "department"),
    _field("hireDate", "hire_date", FieldKind.DATE, "hire date"),
    _field("contractType", "contract_type"),
    _field("salary", "salary", FieldKind.DECIMAL, "salary"),
    _field("passportSeries", "passport_series"),
    _field("passportNumber", "passport_number"),
    _field("maritalStatus", "marital_status"),
    _field("numberOfChildren", "number_of_children", FieldKind.INTEGER, "number of children"),
    _field("militaryServiceInfo", "military_service_info"),
    _field("isFired", "is_fired", FieldKind.BOOLEAN),
    _field("inn", "inn"),
    _field("snils", "snils"),
    _field("education", "education"),
    _field("workExperience", "work_experience"),
    _field("skills", "skills"),
    _field("qualificationUpgrade", "qualification_upgrade"),
    _field("awards", "awards"),
    _field("disciplinaryActions", "disciplinary_actions"),
    _field("attestationResults", "attestation_results"),
    _field("medicalExamResults", "medical_exam_results"),
    _field("bankDetails", "bank_details"),
    _field("emergencyContact", "emergency_contact"),
    _field("notes", "notes"),
    _field("groups", "groups", FieldKind.GROUPS),
)

SOLUTION_FIELDS: tuple[EditableField, ...] = (_field("solution", "solution"),)

REPORT_FIELDS: tuple[EditableField, ...] = (
    _field("incidentDate", "incident_date", FieldKind.DATE, "incident date"),
    _field("incidentTime", "incident_time"),
    _field("incidentLocation", "incident_location"),
    _field("involvedPersons", "involved_persons"),
    _field("description", "description"),
    _field("evidenceDescription", "evidence_description"),
    _field("witnesses", "witnesses"),
    _field("status", "status"),
    *SOLUTION_FIELDS,
)


# ---------------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------------


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _group_name(item: Any) -> str:
    if isinstance(item, AccessGroup):
        return item.name
    if isinstance(item, Mapping):
        return str(item["name"])
    return str(item)


def _normalize(field: EditableField, value: Any) -> Any:
    """Bring a snapshot or edited value to a comparable form.

    Absent and empty values both become None, except for booleans (absent is
    False) and group lists (absent is an empty list).
    """
    match field.kind:
        case FieldKind.BOOLEAN:
            return bool(value)
        case FieldKind.GROUPS:
            return [_group_name(item) for item in value or []]

    if value is None or (isinstance(value, str) and value == ""):
        return None

    match field.kind:
        case FieldKind.INTEGER:
            if _is_blank(value):
                return None
            try:
                return int(value.strip()) if isinstance(value, str) else int(value)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid value for {field.display}: {value!r}") from None
        case FieldKind.DECIMAL:
            if _is_blank(value):
                return None
            try:
                return float(value.strip()) if isinstance(value, str) else float(value)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid value for {field.display}: {value!r}") from None
        case FieldKind.DATE:
            try:
                return parse_date(value)
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid value for {field.display}: {value!r}") from None
        case _:
            return value


def _serialize(
    field: EditableField, value: Any, group_ids: Mapping[str, int | None]
) -> Any:
    if field.kind is FieldKind.GROUPS:
        return [AccessGroup(id=group_ids.get(name), name=name).to_api() for name in value]
    if value is None:
        return None
    if field.kind is FieldKind.DATE:
        return value.isoformat()
    return value


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------


def text_fields(names: Iterable[str]) -> tuple[EditableField, ...]:
    """Plain text fields whose attribute and wire names are the same."""
    return tuple(_field(name, name) for name in names)


def build_changeset(
    original: Any,
    edited: Mapping[str, Any],
    fields: Iterable[EditableField] | None = None,
    group_ids: Mapping[str, int | None] | None = None,
) -> dict[str, Any]:
    """Return ``{wire_name: new_value}`` for every edited field that changed.

    Only fields named in ``edited`` are considered. A field cleared by the
    user maps to None so the backend clears it too. Group lists compare by
    name, in order. Raises ValidationError if a numeric or date value does not
    parse; in that case nothing is returned.
    """
    if fields is None:
        fields = text_fields(edited)
    group_ids = group_ids or {}

    changes: dict[str, Any] = {}
    for field in fields:
        if field.name not in edited:
            continue
        before = _normalize(field, field.read(original))
        after = _normalize(field, edited[field.name])
        if before == after:
            continue
        changes[field.name] = _serialize(field, after, group_ids)
    return changes
