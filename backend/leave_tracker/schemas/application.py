# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field, computed_field

from leave_tracker.models.enums import ApplicationStatus, LeaveCategory, ValidationSeverity

# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------


class ValidationMessage(BaseModel):
    """One finding of the application validator."""

    severity: ValidationSeverity
    code: str
    text: str


class ValidationResult(BaseModel):
    """Outcome of validating a proposed application.

    ``ok`` is False iff at least one BLOCKING message is present; ADVISORY
    messages never block and may be overridden by the caller.
    """

    messages: list[ValidationMessage] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def errors(self) -> list[ValidationMessage]:
        return [m for m in self.messages if m.severity == ValidationSeverity.BLOCKING]

    @property
    def warnings(self) -> list[ValidationMessage]:
        return [m for m in self.messages if m.severity == ValidationSeverity.ADVISORY]


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class SubmitApplicationPayload(BaseModel):
    """Request body for submitting (or previewing) a leave application."""

    employee_id: uuid.UUID
    category: LeaveCategory
    start_date: date
    end_date: date
    reason: str = Field(min_length=1, max_length=2000)


class DecisionPayload(BaseModel):
    """Request body for approve/reject/reopen actions."""

    note: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ApplicationResponse(BaseModel):
    """Response schema for a single leave application."""

    id: uuid.UUID
    employee_id: uuid.UUID
    category: LeaveCategory
    start_date: date
    end_date: date
    days_requested: int
    reason: str
    status: ApplicationStatus
    decided_at: datetime | None
    decided_by: uuid.UUID | None
    decision_note: str | None
    created_at: datetime
    warnings: list[ValidationMessage] = Field(default_factory=list)


class ApplicationListResponse(BaseModel):
    """Paginated list of leave applications."""

    items: list[ApplicationResponse]
    total: int


class ApplicationPreviewResponse(BaseModel):
    """Result of validating a proposed application without submitting it."""

    days_requested: int
    current_remaining: int
    validation: ValidationResult
