from intake.form import FORM_FIELDS, build_candidate, read_field
from intake.gateway import ValidationGateway, refinement_issue
from intake.submission import SubmissionOutcome, SubmissionState, UserForm

__all__ = [
    "FORM_FIELDS",
    "build_candidate",
    "read_field",
    "ValidationGateway",
    "refinement_issue",
    "SubmissionOutcome",
    "SubmissionState",
    "UserForm",
]
