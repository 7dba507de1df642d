"""Form Intake Adapter

Turns the flat field-name -> raw-value mapping of a form submission into a
candidate user record. The adapter never validates and never raises: bad
input is carried forward for the validation gateway to report.

createdAt is always constructed into a timestamp. updatedAt is passed
through raw unless symmetric timestamps are enabled, in which case it is
constructed the same way.
"""
from typing import Any, Mapping

from core.logging import intake_logger
from core.validation.coercion import construct_timestamp

log = intake_logger()

# HTML input name -> record wire key, in page order
FORM_FIELDS: dict[str, str] = {
    "userId": "id",
    "userName": "name",
    "userEmail": "email",
    "userCreatedAt": "createdAt",
    "userUpdatedAt": "updatedAt",
}


def read_field(form: Mapping[str, Any], input_name: str) -> Any:
    """Raw value for one field, by input name first, then by wire key. Absent -> None."""
    if input_name in form:
        return form.get(input_name)
    return form.get(FORM_FIELDS[input_name])


def build_candidate(
    form: Mapping[str, Any],
    *,
    symmetric_timestamps: bool = False,
) -> dict[str, Any]:
    """Assemble the candidate record from a submitted form."""
    raw = {key: read_field(form, name) for name, key in FORM_FIELDS.items()}

    candidate = {
        "id": raw["id"],
        "name": raw["name"],
        "email": raw["email"],
        "createdAt": construct_timestamp(raw["createdAt"]),
        "updatedAt": construct_timestamp(raw["updatedAt"]) if symmetric_timestamps else raw["updatedAt"],
    }

    log.debug(
        "candidate_built",
        missing=[key for key, value in raw.items() if value is None],
        symmetric_timestamps=symmetric_timestamps,
    )
    return candidate
