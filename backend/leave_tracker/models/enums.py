from __future__ import annotations

import enum


class LeaveCategory(enum.StrEnum):
    """Leave category with its own accrual and depletion rules."""

    MEDICAL = "MEDICAL"
    CASUAL = "CASUAL"
    EARNED = "EARNED"


class LeavePeriod(enum.StrEnum):
    """Window over which a category's allocation and usage are accounted."""

    CAREER = "CAREER"
    CALENDAR_YEAR = "CALENDAR_YEAR"
    ROLLING = "ROLLING"


class ApplicationStatus(enum.StrEnum):
    """Lifecycle of a leave application. APPROVED and REJECTED may be reversed."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ValidationSeverity(enum.StrEnum):
    """Whether a validation message blocks submission or is advisory only."""

    BLOCKING = "BLOCKING"
    ADVISORY = "ADVISORY"


class AuditEntityType(enum.StrEnum):
    """Entity type recorded in the audit log."""

    APPLICATION = "APPLICATION"
    BALANCE = "BALANCE"


class AuditAction(enum.StrEnum):
    """Action recorded in the audit log."""

    CREATE = "CREATE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    REOPEN = "REOPEN"
    REBUILD = "REBUILD"
    OVERRIDE = "OVERRIDE"
