# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leave_tracker.models.base import UpdatedAtMixin

# Stored accounting_year for categories that are not partitioned by year.
CAREER_YEAR = 0


class LeaveBalance(UpdatedAtMixin, table=True):
    """Materialized balance row per employee, category and accounting year.

    CASUAL rows are partitioned by calendar year; MEDICAL and EARNED rows are
    career-cumulative and stored under ``CAREER_YEAR``. ``version`` is bumped
    on every in-place write.
    """

    __tablename__ = "leave_balance"
    __table_args__ = (sa.PrimaryKeyConstraint("employee_id", "category", "accounting_year"),)

    employee_id: uuid.UUID = Field(index=True)
    category: str = Field(max_length=20)
    accounting_year: int = Field(default=CAREER_YEAR)
    total_allocated: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    used: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    remaining: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
