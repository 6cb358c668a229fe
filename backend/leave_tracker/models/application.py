# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from leave_tracker.models.base import TimestampMixin, UUIDBase
from leave_tracker.models.enums import ApplicationStatus


class LeaveApplication(UUIDBase, TimestampMixin, table=True):
    """An employee's leave application and its approval state."""

    __tablename__ = "leave_application"
    __table_args__ = (
        sa.Index("ix_application_employee_status", "employee_id", "status"),
        sa.Index("ix_application_dates", "start_date", "end_date"),
    )

    employee_id: uuid.UUID = Field(index=True)
    category: str = Field(max_length=20)
    start_date: date
    end_date: date
    days_requested: int
    reason: str
    status: str = Field(
        default=ApplicationStatus.PENDING, max_length=20, index=True, sa_column_kwargs={"server_default": "PENDING"}
    )
    decided_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    decided_by: uuid.UUID | None = None
    decision_note: str | None = None
