"""Balance ledger: full recompute and incremental status-transition updates.

``rebuild_category`` is the canonical definition of a balance. The
incremental path is derived from it: an application contributes its days to
``used`` exactly when it is APPROVED, so a status change moves ``used`` by the
difference of the two contributions.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from leave_tracker.models.enums import ApplicationStatus, LeaveCategory
from leave_tracker.services.accrual import compute_entitlement
from leave_tracker.services.leave_policy import get_policy

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable
    from datetime import date

logger = logging.getLogger(__name__)


class LedgerApplication(Protocol):
    """What the ledger reads from a leave application."""

    employee_id: uuid.UUID
    category: str
    start_date: date
    days_requested: int
    status: str


@dataclass(frozen=True)
class BalanceFigures:
    """Balance of one category for one accounting period.

    ``accounting_year`` is None for career-cumulative categories.
    """

    category: LeaveCategory
    accounting_year: int | None
    total_allocated: int
    used: int
    remaining: int


# ---------------------------------------------------------------------------
# Usage contribution
# ---------------------------------------------------------------------------


def usage_contribution(status: ApplicationStatus | str, days_requested: int) -> int:
    """Days an application in ``status`` counts towards ``used``."""
    return days_requested if status == ApplicationStatus.APPROVED else 0


def usage_delta(
    days_requested: int,
    old_status: ApplicationStatus | str,
    new_status: ApplicationStatus | str,
) -> int:
    """Change in ``used`` caused by moving an application between statuses."""
    return usage_contribution(new_status, days_requested) - usage_contribution(old_status, days_requested)


def _counts_towards(
    application: LedgerApplication,
    category: LeaveCategory,
    accounting_year: int | None,
    employee_id: uuid.UUID | None,
) -> bool:
    if application.status != ApplicationStatus.APPROVED:
        return False
    if application.category != category:
        return False
    if employee_id is not None and application.employee_id != employee_id:
        return False
    return accounting_year is None or application.start_date.year == accounting_year


# ---------------------------------------------------------------------------
# Full recompute
# ---------------------------------------------------------------------------


def rebuild_category(
    category: LeaveCategory,
    service_start_date: date,
    as_of_date: date,
    applications: Iterable[LedgerApplication],
    *,
    employee_id: uuid.UUID | None = None,
    accounting_year: int | None = None,
) -> BalanceFigures:
    """Recompute one category's balance from approved applications.

    Year-partitioned categories are rebuilt for ``accounting_year``
    (defaulting to the year of ``as_of_date``) and only count applications
    starting in that year. Career-cumulative categories ignore
    ``accounting_year`` and count every approved application.
    """
    category = LeaveCategory(category)
    year: int | None = None
    if get_policy(category).is_year_partitioned:
        year = accounting_year if accounting_year is not None else as_of_date.year

    total = compute_entitlement(category, service_start_date, as_of_date)
    used = sum(
        app.days_requested for app in applications if _counts_towards(app, category, year, employee_id)
    )
    return BalanceFigures(
        category=category,
        accounting_year=year,
        total_allocated=total,
        used=used,
        remaining=max(0, total - used),
    )


def rebuild_balances(
    employee_id: uuid.UUID,
    service_start_date: date,
    as_of_date: date,
    approved_applications: Iterable[LedgerApplication],
) -> dict[LeaveCategory, BalanceFigures]:
    """Recompute every category's balance for the accounting period of ``as_of_date``.

    Idempotent and side-effect free. Applications that are not APPROVED or
    that belong to another employee are ignored.
    """
    applications = list(approved_applications)
    return {
        category: rebuild_category(
            category,
            service_start_date,
            as_of_date,
            applications,
            employee_id=employee_id,
        )
        for category in LeaveCategory
    }


# ---------------------------------------------------------------------------
# Incremental update
# ---------------------------------------------------------------------------


def apply_transition(
    balance: BalanceFigures | None,
    category: LeaveCategory,
    days_requested: int,
    old_status: ApplicationStatus | str,
    new_status: ApplicationStatus | str,
    accounting_year: int | None,
    *,
    service_start_date: date | None = None,
    as_of_date: date | None = None,
) -> BalanceFigures | None:
    """Apply an application status change to a balance.

    Approval adds ``days_requested`` to ``used``; a reversal away from
    APPROVED subtracts it. ``remaining`` moves by the opposite amount and is
    not clamped, so a reversal is the exact inverse of its approval. Other
    transitions return ``balance`` untouched.

    A missing balance (``None``) is created from the category's entitlement
    as of ``as_of_date``; both ``service_start_date`` and ``as_of_date`` are
    then required. A reversal against a missing balance yields the fresh
    balance, since nothing was deducted from it.

    Not safe on stale copies: callers must read, apply and write the balance
    under a row lock.
    """
    category = LeaveCategory(category)
    delta = usage_delta(days_requested, old_status, new_status)
    if delta == 0:
        return balance

    if balance is None:
        if service_start_date is None or as_of_date is None:
            msg = "service_start_date and as_of_date are required to create a missing balance"
            raise ValueError(msg)
        total = compute_entitlement(category, service_start_date, as_of_date)
        if delta < 0:
            logger.warning(
                "Reversal of %d %s days against a missing balance for year %s; creating it unused",
                days_requested,
                category,
                accounting_year,
            )
            delta = 0
        return BalanceFigures(
            category=category,
            accounting_year=accounting_year,
            total_allocated=total,
            used=delta,
            remaining=total - delta,
        )

    if balance.category != category:
        msg = f"balance is for {balance.category}, transition is for {category}"
        raise ValueError(msg)

    return dataclasses.replace(
        balance,
        used=balance.used + delta,
        remaining=balance.remaining - delta,
    )
