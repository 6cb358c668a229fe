from sqlmodel import SQLModel

from leave_tracker.models.application import LeaveApplication
from leave_tracker.models.audit import AuditLog
from leave_tracker.models.balance import CAREER_YEAR, LeaveBalance
from leave_tracker.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from leave_tracker.models.enums import (
    ApplicationStatus,
    AuditAction,
    AuditEntityType,
    LeaveCategory,
    LeavePeriod,
    ValidationSeverity,
)

__all__ = [
    "CAREER_YEAR",
    "ApplicationStatus",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "LeaveApplication",
    "LeaveBalance",
    "LeaveCategory",
    "LeavePeriod",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
    "UpdatedAtMixin",
    "ValidationSeverity",
]
