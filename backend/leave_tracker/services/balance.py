# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leave_tracker.config import get_settings
from leave_tracker.exceptions import AppError, NotFoundError
from leave_tracker.models.application import LeaveApplication
from leave_tracker.models.balance import CAREER_YEAR, LeaveBalance
from leave_tracker.models.enums import ApplicationStatus, AuditAction, AuditEntityType, LeaveCategory
from leave_tracker.schemas.balance import (
    BalanceListResponse,
    BalanceResponse,
    RebuildResponse,
)
from leave_tracker.services.audit import SYSTEM_ACTOR_ID, to_audit_dict, write_audit_log
from leave_tracker.services.dates import is_casual_leave_expiring
from leave_tracker.services.employee import get_employee_service
from leave_tracker.services.leave_policy import balance_period, get_policy
from leave_tracker.services.ledger import BalanceFigures, rebuild_balances, rebuild_category

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_tracker.schemas.auth import AuthContext
    from leave_tracker.schemas.balance import BalanceOverrideRequest
    from leave_tracker.services.employee import EmployeeInfo

logger = logging.getLogger(__name__)


@dataclass
class RebuildRunResult:
    """Summary of a full recompute across every employee."""

    as_of_date: date
    processed: int = 0
    rebuilt: int = 0
    errors: int = 0


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _stored_year(accounting_year: int | None) -> int:
    return CAREER_YEAR if accounting_year is None else accounting_year


def _balance_key(employee_id: uuid.UUID, category: LeaveCategory, accounting_year: int | None) -> str:
    """Audit entity key of a balance row."""
    return f"{employee_id}:{category}:{_stored_year(accounting_year)}"


def figures_from_row(row: LeaveBalance) -> BalanceFigures:
    """Read a stored balance row into the ledger's value type."""
    category = LeaveCategory(row.category)
    return BalanceFigures(
        category=category,
        accounting_year=None if row.accounting_year == CAREER_YEAR else row.accounting_year,
        total_allocated=row.total_allocated,
        used=row.used,
        remaining=row.remaining,
    )


def row_from_figures(employee_id: uuid.UUID, figures: BalanceFigures) -> LeaveBalance:
    """Build a new balance row from ledger figures."""
    return LeaveBalance(
        employee_id=employee_id,
        category=figures.category.value,
        accounting_year=_stored_year(figures.accounting_year),
        total_allocated=figures.total_allocated,
        used=figures.used,
        remaining=figures.remaining,
    )


def _build_balance_response(
    figures: BalanceFigures,
    today: date,
    updated_at: datetime | None = None,
) -> BalanceResponse:
    """Map ledger figures to the API shape. ``remaining`` is never exposed below zero."""
    policy = get_policy(figures.category)
    is_expiring = (
        figures.category == LeaveCategory.CASUAL
        and figures.accounting_year == today.year
        and figures.remaining > 0
        and is_casual_leave_expiring(today, get_settings().casual_expiry_alert_days)
    )
    return BalanceResponse(
        category=figures.category,
        name=policy.name,
        accounting_year=figures.accounting_year,
        total_allocated=figures.total_allocated,
        used=figures.used,
        remaining=max(0, figures.remaining),
        carry_forward=policy.carry_forward,
        is_expiring=is_expiring,
        updated_at=updated_at,
    )


async def get_employee_or_404(employee_id: uuid.UUID) -> EmployeeInfo:
    """Resolve an employee through the employee directory. Raises 404 if unknown."""
    employee = await get_employee_service().get_employee(employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


async def fetch_approved_applications(
    session: AsyncSession,
    employee_id: uuid.UUID,
) -> list[LeaveApplication]:
    """All APPROVED applications of an employee: the source of truth for balances."""
    result = await session.execute(
        select(LeaveApplication).where(
            col(LeaveApplication.employee_id) == employee_id,
            col(LeaveApplication.status) == ApplicationStatus.APPROVED.value,
        )
    )
    return list(result.scalars().all())


async def get_balance_row(
    session: AsyncSession,
    employee_id: uuid.UUID,
    category: LeaveCategory,
    accounting_year: int | None,
    *,
    for_update: bool = False,
) -> LeaveBalance | None:
    """Fetch one balance row, optionally with a FOR UPDATE lock."""
    query = select(LeaveBalance).where(
        col(LeaveBalance.employee_id) == employee_id,
        col(LeaveBalance.category) == category.value,
        col(LeaveBalance.accounting_year) == _stored_year(accounting_year),
    )
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def get_or_create_balance_for_update(
    session: AsyncSession,
    employee: EmployeeInfo,
    category: LeaveCategory,
    accounting_year: int | None,
    as_of: date,
) -> LeaveBalance:
    """Get a balance row with a FOR UPDATE lock, creating it from approved history if absent.

    The insert runs in a savepoint; if a concurrent transaction created the
    row first, the duplicate key is caught and that row is locked instead.
    """
    row = await get_balance_row(session, employee.id, category, accounting_year, for_update=True)
    if row is not None:
        return row

    approved = await fetch_approved_applications(session, employee.id)
    figures = rebuild_category(
        category,
        employee.service_start_date,
        as_of,
        approved,
        employee_id=employee.id,
        accounting_year=accounting_year,
    )
    logger.info(
        "Creating %s balance for employee=%s year=%s: total=%d used=%d",
        category,
        employee.id,
        accounting_year,
        figures.total_allocated,
        figures.used,
    )
    row = row_from_figures(employee.id, figures)
    try:
        async with session.begin_nested():
            session.add(row)
            await session.flush()
    except IntegrityError:
        logger.info("%s balance for employee=%s year=%s created concurrently", category, employee.id, accounting_year)
        existing = await get_balance_row(session, employee.id, category, accounting_year, for_update=True)
        if existing is None:
            raise
        return existing
    return row


async def _replace_balances(
    session: AsyncSession,
    employee: EmployeeInfo,
    as_of: date,
    actor_id: uuid.UUID,
) -> list[LeaveBalance]:
    """Delete the rows of the rebuilt periods and insert freshly recomputed ones.

    Runs inside the caller's transaction; does not commit.
    """
    approved = await fetch_approved_applications(session, employee.id)
    rebuilt = rebuild_balances(employee.id, employee.service_start_date, as_of, approved)

    rows: list[LeaveBalance] = []
    for category, figures in rebuilt.items():
        existing = await get_balance_row(session, employee.id, category, figures.accounting_year, for_update=True)
        before = to_audit_dict(existing) if existing is not None else None
        if existing is not None:
            await session.delete(existing)
            await session.flush()

        row = row_from_figures(employee.id, figures)
        session.add(row)
        rows.append(row)

        if before is not None and before["used"] != figures.used:
            logger.warning(
                "Rebuild corrected %s balance for employee=%s: used %d -> %d",
                category,
                employee.id,
                before["used"],
                figures.used,
            )

        await write_audit_log(
            session,
            actor_id=actor_id,
            entity_type=AuditEntityType.BALANCE,
            entity_key=_balance_key(employee.id, category, figures.accounting_year),
            action=AuditAction.REBUILD,
            before_json=before,
            after_json=to_audit_dict(figures),
        )

    await session.flush()
    return rows


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_employee_balances(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int | None = None,
) -> BalanceListResponse:
    """Get every category balance of an employee.

    CASUAL is reported for ``year`` (default: the current year); career
    categories are the same whatever the year. Rows not yet materialized
    are computed on the fly without being written.
    """
    employee = await get_employee_or_404(employee_id)
    today = date.today()
    target_year = year if year is not None else today.year

    approved: list[LeaveApplication] | None = None
    items: list[BalanceResponse] = []
    for category in LeaveCategory:
        accounting_year = balance_period(category, date(target_year, 1, 1))
        row = await get_balance_row(session, employee_id, category, accounting_year)
        if row is not None:
            items.append(_build_balance_response(figures_from_row(row), today, row.updated_at))
            continue

        if approved is None:
            approved = await fetch_approved_applications(session, employee_id)
        figures = rebuild_category(
            category,
            employee.service_start_date,
            today,
            approved,
            employee_id=employee_id,
            accounting_year=accounting_year,
        )
        items.append(_build_balance_response(figures, today))

    return BalanceListResponse(employee_id=employee_id, year=target_year, items=items, total=len(items))


# ---------------------------------------------------------------------------
# Write path - full recompute
# ---------------------------------------------------------------------------


async def rebuild_employee_balances(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID,
    as_of: date | None = None,
) -> RebuildResponse:
    """Regenerate an employee's balances from approved applications.

    This is the repair path for balance drift: every row of the current
    accounting period is replaced, including manual overrides (whose prior
    values remain in the audit log).
    """
    employee = await get_employee_or_404(employee_id)
    as_of = as_of or date.today()

    rows = await _replace_balances(session, employee, as_of, auth.user_id)
    await session.commit()

    logger.info("Rebuilt balances for employee=%s as of %s", employee_id, as_of)
    return RebuildResponse(
        employee_id=employee_id,
        as_of_date=as_of,
        items=[_build_balance_response(figures_from_row(row), date.today(), row.updated_at) for row in rows],
    )


async def rebuild_all_balances(
    session: AsyncSession,
    as_of: date | None = None,
) -> RebuildRunResult:
    """Rebuild balances for every employee in the directory.

    A failure for one employee is logged and counted; the others still
    commit. Re-running for the same date yields the same balances.
    """
    as_of = as_of or date.today()
    result = RebuildRunResult(as_of_date=as_of)

    employees = await get_employee_service().list_employees()
    for employee in employees:
        result.processed += 1
        try:
            async with session.begin_nested():
                await _replace_balances(session, employee, as_of, SYSTEM_ACTOR_ID)
            result.rebuilt += 1
        except Exception:
            logger.exception("Error rebuilding balances for employee=%s", employee.id)
            result.errors += 1

    await session.commit()
    return result


# ---------------------------------------------------------------------------
# Write path - manual override
# ---------------------------------------------------------------------------


async def override_balance(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID,
    category: LeaveCategory,
    payload: BalanceOverrideRequest,
) -> BalanceResponse:
    """Set ``total_allocated`` and/or ``used`` of a balance row directly.

    The edit bypasses the ledger: ``used`` may exceed ``total_allocated``
    until the next full recompute, which replaces the row.
    """
    employee = await get_employee_or_404(employee_id)
    today = date.today()

    accounting_year: int | None = None
    if get_policy(category).is_year_partitioned:
        if payload.accounting_year is None:
            raise AppError(f"accounting_year is required for {category} balances", status_code=400)
        accounting_year = payload.accounting_year

    row = await get_or_create_balance_for_update(session, employee, category, accounting_year, today)
    before = to_audit_dict(row)

    if payload.total_allocated is not None:
        row.total_allocated = payload.total_allocated
    if payload.used is not None:
        row.used = payload.used
    row.remaining = row.total_allocated - row.used
    row.version += 1

    await session.flush()

    after = to_audit_dict(row)
    after["reason"] = payload.reason
    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.BALANCE,
        entity_key=_balance_key(employee_id, category, accounting_year),
        action=AuditAction.OVERRIDE,
        before_json=before,
        after_json=after,
    )

    await session.commit()
    await session.refresh(row)
    logger.info("Manual override of %s balance for employee=%s by %s", category, employee_id, auth.user_id)
    return _build_balance_response(figures_from_row(row), today, row.updated_at)
