# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from leave_tracker.models.enums import LeaveCategory

# ---------------------------------------------------------------------------
# Balance response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    """Balance of one leave category for an employee."""

    category: LeaveCategory
    name: str
    accounting_year: int | None  # None for career-cumulative categories
    total_allocated: int
    used: int
    remaining: int
    carry_forward: bool
    is_expiring: bool = False
    updated_at: datetime | None


class BalanceListResponse(BaseModel):
    """All category balances for an employee."""

    employee_id: uuid.UUID
    year: int
    items: list[BalanceResponse]
    total: int


class RebuildResponse(BaseModel):
    """Balances written by a full recompute for one employee."""

    employee_id: uuid.UUID
    as_of_date: date
    items: list[BalanceResponse]


class RebuildRunResponse(BaseModel):
    """Summary of a full recompute across every employee."""

    as_of_date: date
    processed: int
    rebuilt: int
    errors: int


# ---------------------------------------------------------------------------
# Manual override request schema
# ---------------------------------------------------------------------------


class BalanceOverrideRequest(BaseModel):
    """Admin edit of a balance row. ``remaining`` always follows ``total_allocated - used``."""

    accounting_year: int | None = Field(
        default=None,
        description="Required for CASUAL; ignored for career-cumulative categories",
    )
    total_allocated: int | None = Field(default=None, ge=0)
    used: int | None = Field(default=None, ge=0)
    reason: str = Field(min_length=1, max_length=1000)

    @model_validator(mode="after")
    def _validate_fields(self) -> Self:
        if self.total_allocated is None and self.used is None:
            msg = "at least one of total_allocated or used must be set"
            raise ValueError(msg)
        return self
