"""Incident report form validation and the time-field input mask."""

import re
from dataclasses import dataclass
from datetime import date
from typing import Any

# HH:MM, hours 00-23, minutes 00-59, always two-digit hours.
TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")
_TIME_CHARS = re.compile(r"^[0-9:]*$")
TIME_MAX_LENGTH = 5

TIME_FORMAT_HINT = "Enter the time as HH:MM, e.g. 09:30 or 14:45."


@dataclass
class ReportForm:
    """State of the "new report" form."""

    incident_date: date | None = None
    incident_time: str = ""
    incident_location: str = ""
    involved_persons: str = ""
    description: str = ""
    evidence_description: str = ""
    witnesses: str = ""

    def to_api(self) -> dict[str, Any]:
        return {
            "incidentDate": self.incident_date.isoformat() if self.incident_date else None,
            "incidentTime": self.incident_time,
            "incidentLocation": self.incident_location,
            "involvedPersons": self.involved_persons,
            "description": self.description,
            "evidenceDescription": self.evidence_description,
            "witnesses": self.witnesses,
        }

    def clear(self) -> None:
        self.incident_date = None
        self.incident_time = ""
        self.incident_location = ""
        self.involved_persons = ""
        self.description = ""
        self.evidence_description = ""
        self.witnesses = ""


def is_valid_time(value: str | None) -> bool:
    return bool(value) and TIME_PATTERN.fullmatch(value) is not None


def validate_report_form(form: ReportForm) -> str | None:
    """Return the first rule the form breaks, or None if it is valid.

    Evidence description and witnesses are optional and never checked.
    """
    if form.incident_date is None:
        return "Select the incident date."
    if not is_valid_time(form.incident_time):
        return "Enter a valid incident time in HH:MM format."
    if not form.incident_location:
        return "Enter the incident location."
    if not form.involved_persons:
        return "Enter the persons involved."
    if not form.description:
        return "Enter a description of the incident."
    return None


def check_time_on_blur(value: str) -> str | None:
    """Warning to show when the time field loses focus, if any.

    An empty field is left alone until the form is submitted.
    """
    if value and not is_valid_time(value):
        return TIME_FORMAT_HINT
    return None


def apply_time_mask(previous: str, proposed: str) -> str:
    """Shape an edit of the time field and return the text to keep.

    ``previous`` is the field text before the keystroke and ``proposed`` the
    text it would become. Rejected edits return ``previous`` unchanged. When a
    single typed digit brings the text to two characters, a colon is added.
    """
    if proposed == "":
        return proposed
    if not _TIME_CHARS.match(proposed):
        return previous
    if len(proposed) > TIME_MAX_LENGTH:
        return previous
    typed_one_digit = (
        len(proposed) == len(previous) + 1
        and proposed.startswith(previous)
        and proposed[-1].isdigit()
    )
    if len(proposed) == 2 and typed_one_digit:
        return proposed + ":"
    return proposed
