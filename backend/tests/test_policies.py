"""Tests for the leave policy, entitlement and working-day endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from httpx import AsyncClient


async def test_list_leave_policies(async_client: AsyncClient) -> None:
    resp = await async_client.get("/leave-policies")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 3
    assert [p["category"] for p in data["items"]] == ["MEDICAL", "CASUAL", "EARNED"]


async def test_get_earned_policy(async_client: AsyncClient) -> None:
    resp = await async_client.get("/leave-policies/EARNED")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Earned Leave"
    assert data["period"] == "ROLLING"
    assert data["fixed_allocation"] is None
    assert data["accrual_days"] == 6
    assert data["accrual_per_months"] == 6
    assert data["max_consecutive_days"] == 30
    assert data["carry_forward"] is True
    assert data["restrictions"]


async def test_get_casual_policy(async_client: AsyncClient) -> None:
    resp = await async_client.get("/leave-policies/CASUAL")
    data = resp.json()
    assert data["period"] == "CALENDAR_YEAR"
    assert data["fixed_allocation"] == 12
    assert data["accrual_days"] is None
    assert data["max_consecutive_days"] == 5


async def test_get_unknown_policy(async_client: AsyncClient) -> None:
    resp = await async_client.get("/leave-policies/SABBATICAL")
    assert resp.status_code == 422


@pytest.mark.parametrize(
    ("category", "service_start", "as_of", "months", "entitlement"),
    [
        ("EARNED", "2023-01-15", "2025-07-15", 30, 30),
        ("EARNED", "2023-01-15", "2025-07-14", 29, 24),
        ("EARNED", "2025-08-01", "2025-07-01", 0, 0),
        ("CASUAL", "2025-06-01", "2025-07-01", 1, 12),
        ("MEDICAL", "2010-01-01", "2025-07-01", 186, 365),
    ],
)
async def test_entitlement(
    async_client: AsyncClient,
    category: str,
    service_start: str,
    as_of: str,
    months: int,
    entitlement: int,
) -> None:
    resp = await async_client.get(
        f"/leave-policies/{category}/entitlement",
        params={"service_start_date": service_start, "as_of": as_of},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["months_of_service"] == months
    assert data["entitlement"] == entitlement


async def test_entitlement_requires_service_start(async_client: AsyncClient) -> None:
    resp = await async_client.get("/leave-policies/EARNED/entitlement")
    assert resp.status_code == 422


async def test_working_days(async_client: AsyncClient) -> None:
    resp = await async_client.get("/calendar/working-days", params={"start": "2025-03-10", "end": "2025-03-16"})
    assert resp.status_code == 200
    assert resp.json()["working_days"] == 5


async def test_working_days_weekend(async_client: AsyncClient) -> None:
    resp = await async_client.get("/calendar/working-days", params={"start": "2025-03-15", "end": "2025-03-16"})
    assert resp.json()["working_days"] == 0


async def test_working_days_inverted_range(async_client: AsyncClient) -> None:
    resp = await async_client.get("/calendar/working-days", params={"start": "2025-03-16", "end": "2025-03-10"})
    assert resp.status_code == 400
    data = resp.json()
    assert data["error"] == "InvalidRangeError"
    assert data["detail"] == "start date 2025-03-16 is after end date 2025-03-10"


async def test_working_days_at_end_of_calendar(async_client: AsyncClient) -> None:
    resp = await async_client.get("/calendar/working-days", params={"start": "9999-12-30", "end": "9999-12-31"})
    assert resp.status_code == 200
    assert resp.json()["working_days"] == 2
