# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from hrdesk.models.enums import NotificationType


class NotificationResponse(BaseModel):
    """Response schema for a notification."""

    id: uuid.UUID
    recipient_id: uuid.UUID
    type: NotificationType
    message: str
    link: str | None
    is_read: bool
    created_at: datetime


class NotificationListResponse(BaseModel):
    """Newest-first notifications of the current user."""

    items: list[NotificationResponse]
    total: int


class MarkAllReadResponse(BaseModel):
    """Number of notifications flipped to read."""

    updated: int
