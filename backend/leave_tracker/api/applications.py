# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from leave_tracker.api.deps import AdminDep, AuthDep
from leave_tracker.db import SessionDep
from leave_tracker.models.enums import ApplicationStatus, LeaveCategory
from leave_tracker.schemas.application import (
    ApplicationListResponse,
    ApplicationPreviewResponse,
    ApplicationResponse,
    DecisionPayload,
    SubmitApplicationPayload,
)
from leave_tracker.services import application as application_service

applications_router = APIRouter(
    prefix="/applications",
    tags=["applications"],
)


@applications_router.post("/validate", response_model=ApplicationPreviewResponse)
async def validate_application(
    payload: SubmitApplicationPayload,
    session: SessionDep,
    auth: AuthDep,
) -> ApplicationPreviewResponse:
    """Validate a proposed application without submitting it."""
    return await application_service.preview_application(session, payload)


@applications_router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(
    payload: SubmitApplicationPayload,
    session: SessionDep,
    auth: AuthDep,
) -> ApplicationResponse:
    """Submit a new leave application."""
    return await application_service.submit_application(session, auth, payload)


@applications_router.get("", response_model=ApplicationListResponse)
async def list_applications(
    session: SessionDep,
    auth: AuthDep,
    employee_id: uuid.UUID | None = Query(default=None),
    status_filter: ApplicationStatus | None = Query(default=None, alias="status"),
    category: LeaveCategory | None = Query(default=None),
    start_from: date | None = Query(default=None),
    end_to: date | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> ApplicationListResponse:
    """List leave applications with optional filters."""
    return await application_service.list_applications(
        session, employee_id, status_filter, category, start_from, end_to, offset, limit
    )


@applications_router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> ApplicationResponse:
    """Get a single leave application."""
    return await application_service.get_application(session, application_id)


@applications_router.post("/{application_id}/approve", response_model=ApplicationResponse)
async def approve_application(
    application_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    payload: DecisionPayload | None = None,
) -> ApplicationResponse:
    """Approve an application, deducting its days (admin only)."""
    return await application_service.transition_application(
        session, auth, application_id, ApplicationStatus.APPROVED, payload
    )


@applications_router.post("/{application_id}/reject", response_model=ApplicationResponse)
async def reject_application(
    application_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    payload: DecisionPayload | None = None,
) -> ApplicationResponse:
    """Reject an application; rejecting an approved one restores its days (admin only)."""
    return await application_service.transition_application(
        session, auth, application_id, ApplicationStatus.REJECTED, payload
    )


@applications_router.post("/{application_id}/reopen", response_model=ApplicationResponse)
async def reopen_application(
    application_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    payload: DecisionPayload | None = None,
) -> ApplicationResponse:
    """Move a decided application back to PENDING (admin only)."""
    return await application_service.transition_application(
        session, auth, application_id, ApplicationStatus.PENDING, payload
    )
