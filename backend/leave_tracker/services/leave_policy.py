"""Static leave policy table: one rule set per leave category."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from leave_tracker.models.enums import LeaveCategory, LeavePeriod
from leave_tracker.schemas.policy import AccrualStep, LeavePolicy

if TYPE_CHECKING:
    from datetime import date

_POLICIES: MappingProxyType[LeaveCategory, LeavePolicy] = MappingProxyType(
    {
        LeaveCategory.MEDICAL: LeavePolicy(
            category=LeaveCategory.MEDICAL,
            name="Medical Leave",
            description="365 days for the entire career. Cannot be replenished once used.",
            period=LeavePeriod.CAREER,
            carry_forward=False,
            fixed_allocation=365,
            max_consecutive_days=30,
            advisory="Medical leave: consider splitting long medical leave into multiple applications",
            restrictions=(
                "Cannot exceed 365 days in total career",
                "Requires medical certificate for more than 3 consecutive days",
                "Cannot be replenished once used",
            ),
        ),
        LeaveCategory.CASUAL: LeavePolicy(
            category=LeaveCategory.CASUAL,
            name="Casual Leave",
            description="12 days per calendar year (Jan-Dec). Not carried forward if unused.",
            period=LeavePeriod.CALENDAR_YEAR,
            carry_forward=False,
            fixed_allocation=12,
            max_consecutive_days=5,
            advisory="Casual leave: maximum 5 consecutive days recommended",
            restrictions=(
                "Maximum 12 days per calendar year",
                "Cannot carry forward to next year",
                "Maximum 5 consecutive days recommended",
                "Resets to 12 on January 1st",
            ),
        ),
        LeaveCategory.EARNED: LeavePolicy(
            category=LeaveCategory.EARNED,
            name="Earned Leave",
            description="6 days for every 6 months of service. Carried forward if not used.",
            period=LeavePeriod.ROLLING,
            carry_forward=True,
            accrual_step=AccrualStep(days=6, per_months=6),
            max_consecutive_days=30,
            advisory="Earned leave: maximum 30 consecutive days recommended",
            restrictions=(
                "Earned at rate of 6 days per 6 months of service",
                "Can be carried forward to subsequent years",
                "Maximum 30 consecutive days recommended",
            ),
        ),
    }
)


def get_policy(category: LeaveCategory) -> LeavePolicy:
    """Return the rule set for ``category``."""
    return _POLICIES[LeaveCategory(category)]


def list_policies() -> list[LeavePolicy]:
    """Return every policy in category declaration order."""
    return [_POLICIES[category] for category in LeaveCategory]


def balance_period(category: LeaveCategory, on_date: date) -> int | None:
    """Accounting year that usage on ``on_date`` counts against.

    Only year-partitioned categories have one; career-cumulative
    categories return None.
    """
    if get_policy(category).is_year_partitioned:
        return on_date.year
    return None
