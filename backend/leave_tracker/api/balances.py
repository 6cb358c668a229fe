# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query

from leave_tracker.api.deps import AdminDep, AuthDep
from leave_tracker.db import SessionDep
from leave_tracker.models.enums import LeaveCategory
from leave_tracker.schemas.balance import (
    BalanceListResponse,
    BalanceOverrideRequest,
    BalanceResponse,
    RebuildResponse,
    RebuildRunResponse,
)
from leave_tracker.services import balance as balance_service

employee_balance_router = APIRouter(
    prefix="/employees/{employee_id}/balances",
    tags=["balances"],
)

balance_rebuild_router = APIRouter(
    prefix="/balances",
    tags=["balances"],
)


@employee_balance_router.get("", response_model=BalanceListResponse)
async def get_employee_balances(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None, ge=1900, le=9999),
) -> BalanceListResponse:
    """Get every leave category balance for an employee."""
    return await balance_service.get_employee_balances(session, employee_id, year)


@employee_balance_router.post("/rebuild", response_model=RebuildResponse)
async def rebuild_employee_balances(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    as_of: date | None = Query(default=None),
) -> RebuildResponse:
    """Recompute an employee's balances from approved applications (admin only)."""
    return await balance_service.rebuild_employee_balances(session, auth, employee_id, as_of)


@employee_balance_router.put("/{category}", response_model=BalanceResponse)
async def override_balance(
    employee_id: uuid.UUID,
    category: LeaveCategory,
    payload: BalanceOverrideRequest,
    session: SessionDep,
    auth: AdminDep,
) -> BalanceResponse:
    """Manually set a balance row (admin only)."""
    return await balance_service.override_balance(session, auth, employee_id, category, payload)


@balance_rebuild_router.post("/rebuild", response_model=RebuildRunResponse)
async def rebuild_all_balances(
    session: SessionDep,
    auth: AdminDep,
    as_of: date | None = Query(default=None),
) -> RebuildRunResponse:
    """Recompute balances for every employee (admin only)."""
    result = await balance_service.rebuild_all_balances(session, as_of)
    return RebuildRunResponse(
        as_of_date=result.as_of_date,
        processed=result.processed,
        rebuilt=result.rebuilt,
        errors=result.errors,
    )
