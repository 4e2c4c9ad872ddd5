# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from hrdesk.api.deps import AuthDep
from hrdesk.db import SessionDep
from hrdesk.schemas.notification import MarkAllReadResponse, NotificationListResponse, NotificationResponse
from hrdesk.services import notification as notification_service

notifications_router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
)


@notifications_router.get("", response_model=NotificationListResponse)
async def list_notifications(
    session: SessionDep,
    auth: AuthDep,
    limit: int = Query(default=10, ge=1, le=100),
    unread_only: bool = Query(default=False),
) -> NotificationListResponse:
    """List the current user's notifications, newest first."""
    return await notification_service.list_notifications(session, auth.user_id, limit, unread_only)


@notifications_router.post("/mark-all-read", response_model=MarkAllReadResponse)
async def mark_all_notifications_read(
    session: SessionDep,
    auth: AuthDep,
) -> MarkAllReadResponse:
    """Mark every unread notification of the current user as read."""
    return await notification_service.mark_all_notifications_read(session, auth.user_id)


@notifications_router.post("/{notification_id}/mark-read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> NotificationResponse:
    """Mark one of the current user's notifications as read."""
    return await notification_service.mark_notification_read(session, auth.user_id, notification_id)
