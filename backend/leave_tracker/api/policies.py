# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query

from leave_tracker.models.enums import LeaveCategory
from leave_tracker.schemas.policy import (
    EntitlementResponse,
    LeavePolicy,
    LeavePolicyListResponse,
    LeavePolicyResponse,
    WorkingDaysResponse,
)
from leave_tracker.services.accrual import compute_entitlement
from leave_tracker.services.dates import months_between, working_days_inclusive
from leave_tracker.services.leave_policy import get_policy, list_policies

policies_router = APIRouter(prefix="/leave-policies", tags=["policies"])

calendar_router = APIRouter(prefix="/calendar", tags=["calendar"])


def _build_policy_response(policy: LeavePolicy) -> LeavePolicyResponse:
    """Map a policy rule set to its response schema."""
    step = policy.accrual_step
    return LeavePolicyResponse(
        category=policy.category,
        name=policy.name,
        description=policy.description,
        period=policy.period,
        carry_forward=policy.carry_forward,
        fixed_allocation=policy.fixed_allocation,
        accrual_days=step.days if step else None,
        accrual_per_months=step.per_months if step else None,
        max_consecutive_days=policy.max_consecutive_days,
        restrictions=list(policy.restrictions),
    )


@policies_router.get("", response_model=LeavePolicyListResponse)
async def list_leave_policies() -> LeavePolicyListResponse:
    """List the rules of every leave category."""
    items = [_build_policy_response(p) for p in list_policies()]
    return LeavePolicyListResponse(items=items, total=len(items))


@policies_router.get("/{category}", response_model=LeavePolicyResponse)
async def get_leave_policy(category: LeaveCategory) -> LeavePolicyResponse:
    """Get the rules of one leave category."""
    return _build_policy_response(get_policy(category))


@policies_router.get("/{category}/entitlement", response_model=EntitlementResponse)
async def get_entitlement(
    category: LeaveCategory,
    service_start_date: date = Query(),
    as_of: date | None = Query(default=None),
) -> EntitlementResponse:
    """Compute a category's entitlement for a service start date."""
    as_of_date = as_of or date.today()
    return EntitlementResponse(
        category=category,
        service_start_date=service_start_date,
        as_of_date=as_of_date,
        months_of_service=months_between(service_start_date, as_of_date),
        entitlement=compute_entitlement(category, service_start_date, as_of_date),
    )


@calendar_router.get("/working-days", response_model=WorkingDaysResponse)
async def get_working_days(
    start: date = Query(),
    end: date = Query(),
) -> WorkingDaysResponse:
    """Count Monday-Friday days in an inclusive date range."""
    return WorkingDaysResponse(start_date=start, end_date=end, working_days=working_days_inclusive(start, end))
