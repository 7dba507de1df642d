"""Form submission handling

One UserForm per rendered form. A submission moves PENDING -> VALIDATED
or PENDING -> REJECTED exactly once; there are no retries and no partial
successes. The outcome is logged and kept as the form's latest state so
the page can render it.

Async submissions on the same form are serialized: a second submission
waits for the first to finish before its own outcome is written.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from core.config import settings
from core.errors import Ok, Err, Result
from core.logging import intake_logger, generate_correlation_id, bind_context, unbind_context
from core.validation import ValidationError, ValidationErrorDetail
from schemas.user import UserRecord

from .form import build_candidate
from .gateway import ValidationGateway

log = intake_logger()


class SubmissionState(str, Enum):
    PENDING = "pending"
    VALIDATED = "validated"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class SubmissionOutcome:
    """What one submission produced."""
    submission_id: str
    state: SubmissionState
    record: UserRecord | None = None
    error: ValidationError | None = None
    candidate: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def ok(self) -> bool:
        return self.state is SubmissionState.VALIDATED

    def issues_by_field(self) -> dict[str, list[ValidationErrorDetail]]:
        """Issues keyed by the top-level field they belong to ("$" for record-level)."""
        grouped: dict[str, list[ValidationErrorDetail]] = {}
        if self.error is not None:
            for detail in self.error.details:
                grouped.setdefault(detail.root_field, []).append(detail)
        return grouped

    @classmethod
    def from_result(
        cls,
        submission_id: str,
        result: Result[UserRecord, ValidationError],
        candidate: dict[str, Any],
    ) -> SubmissionOutcome:
        match result:
            case Ok(record):
                return cls(submission_id, SubmissionState.VALIDATED, record=record, candidate=candidate)
            case Err(error):
                return cls(submission_id, SubmissionState.REJECTED, error=error, candidate=candidate)


class UserForm:
    """The page's form instance and its submit handlers."""

    def __init__(
        self,
        gateway: ValidationGateway | None = None,
        *,
        symmetric_timestamps: bool | None = None,
    ):
        self.gateway = gateway or ValidationGateway(UserRecord, max_errors=settings.MAX_VALIDATION_ERRORS)
        self.symmetric_timestamps = (
            settings.SYMMETRIC_TIMESTAMPS if symmetric_timestamps is None else symmetric_timestamps
        )
        self.last_outcome: SubmissionOutcome | None = None
        self._lock = asyncio.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    def _report(self, outcome: SubmissionOutcome) -> SubmissionOutcome:
        if outcome.ok:
            log.info("user_parsed", user=outcome.record.to_dict(mode="json"))
        else:
            log.error(
                "user_validation_failed",
                error_count=len(outcome.error.details),
                errors=[d.to_dict() for d in outcome.error.details],
            )
        self.last_outcome = outcome
        return outcome

    def submit(self, form: Mapping[str, Any]) -> SubmissionOutcome:
        """Synchronous submit handler: build, validate, report."""
        submission_id = generate_correlation_id()
        bind_context(submission_id=submission_id)
        try:
            candidate = build_candidate(form, symmetric_timestamps=self.symmetric_timestamps)
            result = self.gateway.validate(candidate)
            return self._report(SubmissionOutcome.from_result(submission_id, result, candidate))
        finally:
            unbind_context("submission_id")

    async def submit_async(self, form: Mapping[str, Any]) -> SubmissionOutcome:
        """Submit handler that awaits async refinements; one submission at a time per form."""
        submission_id = generate_correlation_id()
        if self.in_flight:
            log.info("submission_queued", submission_id=submission_id)
        async with self._lock:
            bind_context(submission_id=submission_id)
            try:
                candidate = build_candidate(form, symmetric_timestamps=self.symmetric_timestamps)
                result = await self.gateway.validate_async(candidate)
                return self._report(SubmissionOutcome.from_result(submission_id, result, candidate))
            finally:
                unbind_context("submission_id")
