# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leave_tracker.exceptions import AppError, ConflictError, NotFoundError
from leave_tracker.models.application import LeaveApplication
from leave_tracker.models.base import utc_now
from leave_tracker.models.enums import (
    ApplicationStatus,
    AuditAction,
    AuditEntityType,
    LeaveCategory,
)
from leave_tracker.schemas.application import (
    ApplicationListResponse,
    ApplicationPreviewResponse,
    ApplicationResponse,
    ValidationMessage,
)
from leave_tracker.services.audit import to_audit_dict, write_audit_log
from leave_tracker.services.balance import (
    fetch_approved_applications,
    figures_from_row,
    get_balance_row,
    get_employee_or_404,
    get_or_create_balance_for_update,
)
from leave_tracker.services.dates import working_days_inclusive
from leave_tracker.services.leave_policy import balance_period
from leave_tracker.services.ledger import apply_transition, rebuild_category, usage_delta
from leave_tracker.services.validator import validate

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leave_tracker.schemas.application import DecisionPayload, SubmitApplicationPayload
    from leave_tracker.schemas.auth import AuthContext

logger = logging.getLogger(__name__)

_TRANSITION_ACTIONS = {
    ApplicationStatus.APPROVED: AuditAction.APPROVE,
    ApplicationStatus.REJECTED: AuditAction.REJECT,
    ApplicationStatus.PENDING: AuditAction.REOPEN,
}

# Applications that still occupy their dates.
_ACTIVE_STATUSES = [ApplicationStatus.PENDING.value, ApplicationStatus.APPROVED.value]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_application_response(
    application: LeaveApplication,
    warnings: list[ValidationMessage] | None = None,
) -> ApplicationResponse:
    """Map an application model to its response schema."""
    return ApplicationResponse(
        id=application.id,
        employee_id=application.employee_id,
        category=LeaveCategory(application.category),
        start_date=application.start_date,
        end_date=application.end_date,
        days_requested=application.days_requested,
        reason=application.reason,
        status=ApplicationStatus(application.status),
        decided_at=application.decided_at,
        decided_by=application.decided_by,
        decision_note=application.decision_note,
        created_at=application.created_at,
        warnings=warnings or [],
    )


def _days_for_range(start_date: date, end_date: date) -> int:
    """Working days of the range; an inverted range counts as zero and is reported by the validator."""
    if start_date > end_date:
        return 0
    return working_days_inclusive(start_date, end_date)


async def _get_application_or_404(
    session: AsyncSession,
    application_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveApplication:
    """Fetch an application by ID, optionally locked FOR UPDATE. Raises 404 if not found.

    A locked read refreshes the instance from the database so the status seen
    is the one committed by any transaction that held the lock before.
    """
    query = select(LeaveApplication).where(col(LeaveApplication.id) == application_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    application = result.scalar_one_or_none()
    if application is None:
        raise NotFoundError("Leave application not found")
    return application


async def _check_application_overlap(
    session: AsyncSession,
    employee_id: uuid.UUID,
    start_date: date,
    end_date: date,
) -> None:
    """Raise 409 if a PENDING or APPROVED application of the employee overlaps the range.

    Both ranges are inclusive, so they overlap when
    existing.start_date <= new.end_date AND existing.end_date >= new.start_date.
    """
    result = await session.execute(
        select(LeaveApplication.id)
        .where(
            col(LeaveApplication.employee_id) == employee_id,
            col(LeaveApplication.status).in_(_ACTIVE_STATUSES),
            col(LeaveApplication.start_date) <= end_date,
            col(LeaveApplication.end_date) >= start_date,
        )
        .limit(1)
    )
    if result.scalar_one_or_none() is not None:
        raise ConflictError("Application overlaps with an existing pending or approved application")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def preview_application(
    session: AsyncSession,
    payload: SubmitApplicationPayload,
) -> ApplicationPreviewResponse:
    """Validate a proposed application against the current balance without writing anything."""
    employee = await get_employee_or_404(payload.employee_id)
    today = date.today()

    days_requested = _days_for_range(payload.start_date, payload.end_date)
    accounting_year = balance_period(payload.category, payload.start_date)

    row = await get_balance_row(session, employee.id, payload.category, accounting_year)
    if row is not None:
        figures = figures_from_row(row)
    else:
        approved = await fetch_approved_applications(session, employee.id)
        figures = rebuild_category(
            payload.category,
            employee.service_start_date,
            today,
            approved,
            employee_id=employee.id,
            accounting_year=accounting_year,
        )

    current_remaining = max(0, figures.remaining)
    result = validate(
        payload.category,
        days_requested,
        current_remaining,
        payload.start_date,
        payload.end_date,
        today,
    )
    return ApplicationPreviewResponse(
        days_requested=days_requested,
        current_remaining=current_remaining,
        validation=result,
    )


async def submit_application(
    session: AsyncSession,
    auth: AuthContext,
    payload: SubmitApplicationPayload,
) -> ApplicationResponse:
    """Submit a leave application as PENDING.

    Flow:
    1. Resolve the employee
    2. Derive days requested from the working days of the range
    3. Lock (or lazily create) the balance row of the application's period
    4. Validate; refuse with the blocking messages when not ok
    5. Refuse overlapping pending/approved applications
    6. Create the application (PENDING)
    7. Write audit log
    8. Commit
    """
    employee = await get_employee_or_404(payload.employee_id)
    today = date.today()

    days_requested = _days_for_range(payload.start_date, payload.end_date)
    accounting_year = balance_period(payload.category, payload.start_date)

    row = await get_or_create_balance_for_update(session, employee, payload.category, accounting_year, today)

    result = validate(
        payload.category,
        days_requested,
        max(0, row.remaining),
        payload.start_date,
        payload.end_date,
        today,
    )
    if not result.ok:
        raise AppError(
            "Leave application failed validation",
            status_code=400,
            messages=[m.text for m in result.errors],
        )

    await _check_application_overlap(session, employee.id, payload.start_date, payload.end_date)

    application = LeaveApplication(
        employee_id=employee.id,
        category=payload.category.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
        days_requested=days_requested,
        reason=payload.reason,
        status=ApplicationStatus.PENDING.value,
    )
    session.add(application)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.APPLICATION,
        entity_key=str(application.id),
        action=AuditAction.CREATE,
        after_json=to_audit_dict(application),
    )

    await session.commit()
    await session.refresh(application)
    logger.info(
        "Application %s submitted: employee=%s category=%s days=%d",
        application.id,
        employee.id,
        payload.category,
        days_requested,
    )
    return _build_application_response(application, result.warnings)


async def transition_application(
    session: AsyncSession,
    auth: AuthContext,
    application_id: uuid.UUID,
    new_status: ApplicationStatus,
    payload: DecisionPayload | None = None,
) -> ApplicationResponse:
    """Move an application to ``new_status`` and keep its balance row in step.

    Approving deducts the application's days; moving an APPROVED
    application to any other status restores them. Transitions that do not
    pass through APPROVED leave the balance untouched, and a transition to
    the current status changes nothing at all.
    """
    application = await _get_application_or_404(session, application_id, for_update=True)
    old_status = ApplicationStatus(application.status)
    if old_status == new_status:
        return _build_application_response(application)

    category = LeaveCategory(application.category)
    accounting_year = balance_period(category, application.start_date)

    if usage_delta(application.days_requested, old_status, new_status) != 0:
        employee = await get_employee_or_404(application.employee_id)
        row = await get_or_create_balance_for_update(session, employee, category, accounting_year, date.today())
        figures = apply_transition(
            figures_from_row(row),
            category,
            application.days_requested,
            old_status,
            new_status,
            accounting_year,
        )
        if figures is not None:
            row.used = figures.used
            row.remaining = figures.remaining
            row.version += 1
            if figures.remaining < 0:
                logger.warning(
                    "%s balance of employee=%s is overdrawn by %d days after approving %s",
                    category,
                    employee.id,
                    -figures.remaining,
                    application.id,
                )

    before_dict = to_audit_dict(application)

    application.status = new_status.value
    application.decided_at = utc_now()
    application.decided_by = auth.user_id
    application.decision_note = payload.note if payload else None

    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.APPLICATION,
        entity_key=str(application.id),
        action=_TRANSITION_ACTIONS[new_status],
        before_json=before_dict,
        after_json=to_audit_dict(application),
    )

    await session.commit()
    await session.refresh(application)
    logger.info("Application %s moved %s -> %s by %s", application.id, old_status, new_status, auth.user_id)
    return _build_application_response(application)


async def get_application(
    session: AsyncSession,
    application_id: uuid.UUID,
) -> ApplicationResponse:
    """Get a single application by ID."""
    application = await _get_application_or_404(session, application_id)
    return _build_application_response(application)


async def list_applications(
    session: AsyncSession,
    employee_id: uuid.UUID | None = None,
    status_filter: ApplicationStatus | None = None,
    category: LeaveCategory | None = None,
    start_from: date | None = None,
    end_to: date | None = None,
    offset: int = 0,
    limit: int = 50,
) -> ApplicationListResponse:
    """List applications with optional filters, newest first."""
    filters = []
    if employee_id is not None:
        filters.append(col(LeaveApplication.employee_id) == employee_id)
    if status_filter is not None:
        filters.append(col(LeaveApplication.status) == status_filter.value)
    if category is not None:
        filters.append(col(LeaveApplication.category) == category.value)
    if start_from is not None:
        filters.append(col(LeaveApplication.start_date) >= start_from)
    if end_to is not None:
        filters.append(col(LeaveApplication.end_date) <= end_to)

    count_result = await session.execute(select(func.count()).select_from(LeaveApplication).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveApplication)
        .where(*filters)
        .order_by(col(LeaveApplication.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    applications = list(result.scalars().all())

    return ApplicationListResponse(
        items=[_build_application_response(a) for a in applications],
        total=total,
    )
