"""Tests for the balance ledger: full recompute, incremental transitions, and their agreement."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from itertools import product

import pytest

from leave_tracker.models.enums import ApplicationStatus, LeaveCategory
from leave_tracker.services.ledger import (
    BalanceFigures,
    apply_transition,
    rebuild_balances,
    rebuild_category,
    usage_delta,
)

EMPLOYEE_ID = uuid.uuid4()
OTHER_EMPLOYEE_ID = uuid.uuid4()
SERVICE_START = date(2022, 7, 10)
AS_OF = date(2025, 1, 10)


@dataclass
class _Application:
    category: str
    start_date: date
    days_requested: int
    status: str = ApplicationStatus.APPROVED.value
    employee_id: uuid.UUID = EMPLOYEE_ID


def _casual(total: int = 12, used: int = 0, year: int = 2025) -> BalanceFigures:
    return BalanceFigures(
        category=LeaveCategory.CASUAL,
        accounting_year=year,
        total_allocated=total,
        used=used,
        remaining=total - used,
    )


# ---------------------------------------------------------------------------
# Full recompute
# ---------------------------------------------------------------------------


def test_rebuild_without_history() -> None:
    balances = rebuild_balances(EMPLOYEE_ID, SERVICE_START, AS_OF, [])

    assert balances[LeaveCategory.MEDICAL] == BalanceFigures(LeaveCategory.MEDICAL, None, 365, 0, 365)
    assert balances[LeaveCategory.CASUAL] == BalanceFigures(LeaveCategory.CASUAL, 2025, 12, 0, 12)
    assert balances[LeaveCategory.EARNED] == BalanceFigures(LeaveCategory.EARNED, None, 30, 0, 30)


def test_rebuild_casual_counts_only_target_year() -> None:
    applications = [
        _Application("CASUAL", date(2024, 12, 30), 2),
        _Application("CASUAL", date(2025, 1, 6), 3),
        _Application("CASUAL", date(2025, 3, 3), 1),
    ]
    casual = rebuild_balances(EMPLOYEE_ID, SERVICE_START, AS_OF, applications)[LeaveCategory.CASUAL]

    assert casual.accounting_year == 2025
    assert casual.used == 4
    assert casual.remaining == 8


def test_rebuild_career_categories_count_all_years() -> None:
    applications = [
        _Application("MEDICAL", date(2023, 2, 1), 10),
        _Application("MEDICAL", date(2024, 5, 1), 5),
        _Application("EARNED", date(2023, 8, 1), 6),
        _Application("EARNED", date(2025, 1, 2), 4),
    ]
    balances = rebuild_balances(EMPLOYEE_ID, SERVICE_START, AS_OF, applications)

    assert balances[LeaveCategory.MEDICAL].used == 15
    assert balances[LeaveCategory.MEDICAL].remaining == 350
    assert balances[LeaveCategory.EARNED].used == 10
    assert balances[LeaveCategory.EARNED].remaining == 20


def test_rebuild_ignores_unapproved_and_foreign_applications() -> None:
    applications = [
        _Application("EARNED", date(2024, 1, 1), 3, status=ApplicationStatus.PENDING.value),
        _Application("EARNED", date(2024, 1, 1), 4, status=ApplicationStatus.REJECTED.value),
        _Application("EARNED", date(2024, 1, 1), 5, employee_id=OTHER_EMPLOYEE_ID),
    ]
    earned = rebuild_balances(EMPLOYEE_ID, SERVICE_START, AS_OF, applications)[LeaveCategory.EARNED]

    assert earned.used == 0


def test_rebuild_clamps_remaining_at_zero() -> None:
    applications = [_Application("CASUAL", date(2025, 2, 3), 15)]
    casual = rebuild_balances(EMPLOYEE_ID, SERVICE_START, AS_OF, applications)[LeaveCategory.CASUAL]

    assert casual.used == 15
    assert casual.remaining == 0


def test_rebuild_is_idempotent() -> None:
    applications = [
        _Application("CASUAL", date(2025, 1, 6), 3),
        _Application("EARNED", date(2024, 6, 3), 5),
        _Application("MEDICAL", date(2023, 9, 4), 2),
    ]
    first = rebuild_balances(EMPLOYEE_ID, SERVICE_START, AS_OF, applications)
    second = rebuild_balances(EMPLOYEE_ID, SERVICE_START, AS_OF, applications)

    assert first == second


def test_rebuild_category_explicit_year() -> None:
    applications = [_Application("CASUAL", date(2024, 4, 1), 5)]
    figures = rebuild_category(
        LeaveCategory.CASUAL, SERVICE_START, AS_OF, applications, accounting_year=2024
    )

    assert figures.accounting_year == 2024
    assert figures.used == 5


def test_rebuild_category_ignores_year_for_career_categories() -> None:
    figures = rebuild_category(LeaveCategory.MEDICAL, SERVICE_START, AS_OF, [], accounting_year=2024)
    assert figures.accounting_year is None


# ---------------------------------------------------------------------------
# Incremental transitions
# ---------------------------------------------------------------------------


def test_approval_deducts_days() -> None:
    updated = apply_transition(
        _casual(), LeaveCategory.CASUAL, 3, ApplicationStatus.PENDING, ApplicationStatus.APPROVED, 2025
    )
    assert updated is not None
    assert updated.used == 3
    assert updated.remaining == 9


def test_reversal_restores_days() -> None:
    updated = apply_transition(
        _casual(used=5), LeaveCategory.CASUAL, 5, ApplicationStatus.APPROVED, ApplicationStatus.PENDING, 2025
    )
    assert updated == _casual(used=0)


def test_approve_then_reverse_is_identity() -> None:
    original = _casual(used=2)
    approved = apply_transition(
        original, LeaveCategory.CASUAL, 4, ApplicationStatus.PENDING, ApplicationStatus.APPROVED, 2025
    )
    reversed_ = apply_transition(
        approved, LeaveCategory.CASUAL, 4, ApplicationStatus.APPROVED, ApplicationStatus.REJECTED, 2025
    )
    assert reversed_ == original


def test_approval_is_not_clamped() -> None:
    updated = apply_transition(
        _casual(used=10), LeaveCategory.CASUAL, 5, ApplicationStatus.REJECTED, ApplicationStatus.APPROVED, 2025
    )
    assert updated is not None
    assert updated.used == 15
    assert updated.remaining == -3


@pytest.mark.parametrize(
    ("old", "new"),
    [
        (ApplicationStatus.PENDING, ApplicationStatus.REJECTED),
        (ApplicationStatus.REJECTED, ApplicationStatus.PENDING),
        (ApplicationStatus.APPROVED, ApplicationStatus.APPROVED),
        (ApplicationStatus.PENDING, ApplicationStatus.PENDING),
    ],
)
def test_no_op_transitions_leave_balance_untouched(old: ApplicationStatus, new: ApplicationStatus) -> None:
    balance = _casual(used=4)
    assert apply_transition(balance, LeaveCategory.CASUAL, 3, old, new, 2025) is balance


def test_missing_balance_created_on_approval() -> None:
    created = apply_transition(
        None,
        LeaveCategory.EARNED,
        4,
        ApplicationStatus.PENDING,
        ApplicationStatus.APPROVED,
        None,
        service_start_date=SERVICE_START,
        as_of_date=AS_OF,
    )
    assert created == BalanceFigures(LeaveCategory.EARNED, None, 30, 4, 26)


def test_missing_balance_on_reversal_is_created_unused() -> None:
    created = apply_transition(
        None,
        LeaveCategory.CASUAL,
        2,
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
        2025,
        service_start_date=SERVICE_START,
        as_of_date=AS_OF,
    )
    assert created == _casual()


def test_missing_balance_requires_dates() -> None:
    with pytest.raises(ValueError, match="required"):
        apply_transition(
            None, LeaveCategory.CASUAL, 2, ApplicationStatus.PENDING, ApplicationStatus.APPROVED, 2025
        )


def test_missing_balance_no_op_returns_none() -> None:
    assert (
        apply_transition(None, LeaveCategory.CASUAL, 2, ApplicationStatus.PENDING, ApplicationStatus.REJECTED, 2025)
        is None
    )


def test_category_mismatch_raises() -> None:
    with pytest.raises(ValueError, match="balance is for"):
        apply_transition(
            _casual(), LeaveCategory.EARNED, 2, ApplicationStatus.PENDING, ApplicationStatus.APPROVED, None
        )


def test_usage_delta_table() -> None:
    statuses = list(ApplicationStatus)
    for old, new in product(statuses, statuses):
        expected = 0
        if new == ApplicationStatus.APPROVED and old != ApplicationStatus.APPROVED:
            expected = 7
        elif old == ApplicationStatus.APPROVED and new != ApplicationStatus.APPROVED:
            expected = -7
        assert usage_delta(7, old, new) == expected


# ---------------------------------------------------------------------------
# Incremental path agrees with full recompute
# ---------------------------------------------------------------------------


def test_incremental_matches_rebuild_over_a_history() -> None:
    """Replaying transitions from a fresh rebuild ends where a rebuild of the final history does."""
    applications = [
        _Application("EARNED", date(2024, 2, 5), 3, status=ApplicationStatus.PENDING.value),
        _Application("EARNED", date(2024, 6, 3), 5, status=ApplicationStatus.PENDING.value),
        _Application("EARNED", date(2024, 9, 2), 2, status=ApplicationStatus.PENDING.value),
    ]
    balance: BalanceFigures | None = rebuild_balances(EMPLOYEE_ID, SERVICE_START, AS_OF, applications)[
        LeaveCategory.EARNED
    ]

    steps = [
        (0, ApplicationStatus.APPROVED),
        (1, ApplicationStatus.APPROVED),
        (2, ApplicationStatus.REJECTED),
        (1, ApplicationStatus.REJECTED),
        (2, ApplicationStatus.APPROVED),
        (1, ApplicationStatus.APPROVED),
    ]
    for index, new_status in steps:
        app = applications[index]
        balance = apply_transition(
            balance, LeaveCategory.EARNED, app.days_requested, app.status, new_status, None
        )
        app.status = new_status.value

    assert balance == rebuild_balances(EMPLOYEE_ID, SERVICE_START, AS_OF, applications)[LeaveCategory.EARNED]
