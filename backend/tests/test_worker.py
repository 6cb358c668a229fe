"""Tests for the scheduled balance rebuild worker."""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import col

from leave_tracker import db, worker
from leave_tracker.models.balance import LeaveBalance
from leave_tracker.services.employee import EmployeeInfo, InMemoryEmployeeService, set_employee_service

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

EMPLOYEE_ID = uuid.uuid4()


@pytest.fixture(autouse=True)
def _seed_employee_service() -> Iterator[None]:
    svc = InMemoryEmployeeService()
    svc.seed(
        EmployeeInfo(id=EMPLOYEE_ID, employee_code="E001", name="Worker Test", service_start_date=date(2024, 2, 1))
    )
    set_employee_service(svc)
    yield
    set_employee_service(InMemoryEmployeeService())


async def test_run_rebuild_once(engine: AsyncEngine, monkeypatch: pytest.MonkeyPatch) -> None:
    factory = async_sessionmaker(engine, expire_on_commit=False)
    monkeypatch.setattr(db, "get_session_factory", lambda: factory)

    run = await worker.run_rebuild_once(date(2025, 2, 1))
    assert run.rebuilt == 1

    async with factory() as session:
        result = await session.execute(select(LeaveBalance))
        rows = {row.category: row for row in result.scalars().all()}

    assert set(rows) == {"MEDICAL", "CASUAL", "EARNED"}
    assert rows["CASUAL"].accounting_year == 2025
    assert rows["EARNED"].total_allocated == 12


async def test_run_rebuild_once_advances_casual_year(engine: AsyncEngine, monkeypatch: pytest.MonkeyPatch) -> None:
    factory = async_sessionmaker(engine, expire_on_commit=False)
    monkeypatch.setattr(db, "get_session_factory", lambda: factory)

    await worker.run_rebuild_once(date(2025, 12, 31))
    await worker.run_rebuild_once(date(2026, 1, 1))

    async with factory() as session:
        result = await session.execute(
            select(col(LeaveBalance.accounting_year)).where(col(LeaveBalance.category) == "CASUAL")
        )
        years = sorted(result.scalars().all())

    assert years == [2025, 2026]
