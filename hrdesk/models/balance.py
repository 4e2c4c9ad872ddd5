# ruff: noqa: TC003
from __future__ import annotations

import uuid
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from hrdesk.models.base import UpdatedAtMixin


class LeaveBalance(UpdatedAtMixin, SQLModel, table=True):
    """Allocated and used days for one (employee, leave type, year) key.

    ``used_days`` never exceeds ``allocated_days`` in a committed state; the
    remaining quantity is derived and never stored.
    """

    __tablename__ = "leave_balance"
    __table_args__ = (
        sa.CheckConstraint("used_days >= 0", name="ck_balance_used_non_negative"),
        sa.CheckConstraint("used_days <= allocated_days", name="ck_balance_used_within_allocation"),
    )

    employee_id: uuid.UUID = Field(primary_key=True)
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("leave_type.id", ondelete="RESTRICT"), primary_key=True, nullable=False
        ),
    )
    year: int = Field(primary_key=True)
    allocated_days: Decimal = Field(
        default=Decimal(0), sa_type=sa.Numeric(8, 2), sa_column_kwargs={"server_default": "0"}
    )
    used_days: Decimal = Field(default=Decimal(0), sa_type=sa.Numeric(8, 2), sa_column_kwargs={"server_default": "0"})
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})

    @property
    def remaining_days(self) -> Decimal:
        return self.allocated_days - self.used_days
