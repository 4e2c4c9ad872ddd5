# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class BalanceResponse(BaseModel):
    """Balance for a single (employee, leave type, year) key."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    leave_type_name: str
    year: int
    allocated_days: Decimal
    used_days: Decimal
    remaining_days: Decimal
    updated_at: datetime | None


class BalanceListResponse(BaseModel):
    """All balances of an employee for one year."""

    items: list[BalanceResponse]
    total: int


class AllocateBalanceRequest(BaseModel):
    """Request body for setting the allocation of a balance key."""

    allocated_days: Decimal = Field(ge=0, max_digits=8, decimal_places=2)
