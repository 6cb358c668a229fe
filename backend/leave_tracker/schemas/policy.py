# ruff: noqa: TC003
from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from leave_tracker.models.enums import LeaveCategory, LeavePeriod

# ---------------------------------------------------------------------------
# Static rule definition
# ---------------------------------------------------------------------------


class AccrualStep(BaseModel):
    """Grant ``days`` for every completed block of ``per_months`` months of service."""

    model_config = ConfigDict(frozen=True)

    days: int = Field(gt=0)
    per_months: int = Field(gt=0)


class LeavePolicy(BaseModel):
    """Allocation and depletion rules of one leave category."""

    model_config = ConfigDict(frozen=True)

    category: LeaveCategory
    name: str
    description: str
    period: LeavePeriod
    carry_forward: bool
    fixed_allocation: int | None = Field(default=None, ge=0)
    accrual_step: AccrualStep | None = None
    max_consecutive_days: int = Field(gt=0, description="Recommended, not enforced")
    advisory: str
    restrictions: tuple[str, ...] = ()

    @property
    def is_year_partitioned(self) -> bool:
        return self.period == LeavePeriod.CALENDAR_YEAR


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeavePolicyResponse(BaseModel):
    """A leave category's rules as exposed over the API."""

    category: LeaveCategory
    name: str
    description: str
    period: LeavePeriod
    carry_forward: bool
    fixed_allocation: int | None
    accrual_days: int | None
    accrual_per_months: int | None
    max_consecutive_days: int
    restrictions: list[str]


class LeavePolicyListResponse(BaseModel):
    """All leave categories."""

    items: list[LeavePolicyResponse]
    total: int


class EntitlementResponse(BaseModel):
    """Entitlement of a category for a service start date as of a given date."""

    category: LeaveCategory
    service_start_date: date
    as_of_date: date
    months_of_service: int
    entitlement: int


class WorkingDaysResponse(BaseModel):
    """Working-day count of an inclusive date range."""

    start_date: date
    end_date: date
    working_days: int
