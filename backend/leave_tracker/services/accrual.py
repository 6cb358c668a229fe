"""Accrual calculator: entitlement of each leave category as of a date."""

from __future__ import annotations

from typing import TYPE_CHECKING

from leave_tracker.services.dates import months_between
from leave_tracker.services.leave_policy import get_policy

if TYPE_CHECKING:
    from datetime import date

    from leave_tracker.models.enums import LeaveCategory


def compute_entitlement(category: LeaveCategory, service_start_date: date, as_of_date: date) -> int:
    """Return the total days of ``category`` earned or allocated as of ``as_of_date``.

    Fixed-allocation categories (MEDICAL, CASUAL) return their allocation
    regardless of dates; whether a CASUAL allocation applies to a given year
    is decided by the ledger. Accruing categories (EARNED) grant
    ``step.days`` per completed block of ``step.per_months`` months of
    service, so the result is non-negative and never decreases as
    ``as_of_date`` advances.
    """
    policy = get_policy(category)
    if policy.accrual_step is None:
        return policy.fixed_allocation or 0

    months = months_between(service_start_date, as_of_date)
    step = policy.accrual_step
    return step.days * (months // step.per_months)
