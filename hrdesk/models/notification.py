# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from hrdesk.models.base import TimestampMixin, UUIDBase


class Notification(UUIDBase, TimestampMixin, table=True):
    """User-facing message describing a lifecycle event."""

    __tablename__ = "notification"
    __table_args__ = (sa.Index("ix_notification_recipient_read", "recipient_id", "is_read"),)

    recipient_id: uuid.UUID = Field(index=True)
    type: str = Field(max_length=50)
    message: str
    link: str | None = Field(default=None, max_length=255)
    is_read: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
