from __future__ import annotations

from sqlmodel import Field

from hrdesk.models.base import TimestampMixin, UUIDBase


class LeaveType(UUIDBase, TimestampMixin, table=True):
    """Reference data naming a kind of leave (e.g. Annual, Sick)."""

    __tablename__ = "leave_type"

    name: str = Field(max_length=100, unique=True)
