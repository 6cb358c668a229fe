"""Application validator: business-rule checks on a proposed leave application."""

from __future__ import annotations

from typing import TYPE_CHECKING

from leave_tracker.models.enums import ValidationSeverity
from leave_tracker.schemas.application import ValidationMessage, ValidationResult
from leave_tracker.services.leave_policy import get_policy

if TYPE_CHECKING:
    from datetime import date

    from leave_tracker.models.enums import LeaveCategory


def _blocking(code: str, text: str) -> ValidationMessage:
    return ValidationMessage(severity=ValidationSeverity.BLOCKING, code=code, text=text)


def validate(
    category: LeaveCategory,
    days_requested: int,
    current_remaining: int,
    start_date: date,
    end_date: date,
    today: date,
) -> ValidationResult:
    """Check a proposed application against balance and date rules.

    Every rule is evaluated, so violating more rules never yields fewer
    messages. Only the date and balance rules block; exceeding the
    category's recommended consecutive days adds an ADVISORY message.
    """
    messages: list[ValidationMessage] = []

    if days_requested <= 0:
        messages.append(_blocking("DAYS_NOT_POSITIVE", "days requested must be positive"))

    if days_requested > current_remaining:
        messages.append(
            _blocking("INSUFFICIENT_BALANCE", f"insufficient balance, available: {current_remaining}")
        )

    if start_date > end_date:
        messages.append(_blocking("START_AFTER_END", "start date after end date"))

    if start_date < today:
        messages.append(_blocking("START_IN_PAST", "cannot apply for leave in the past"))

    policy = get_policy(category)
    if days_requested > policy.max_consecutive_days:
        messages.append(
            ValidationMessage(
                severity=ValidationSeverity.ADVISORY,
                code="EXCEEDS_RECOMMENDED_CONSECUTIVE_DAYS",
                text=policy.advisory,
            )
        )

    return ValidationResult(messages=messages)
