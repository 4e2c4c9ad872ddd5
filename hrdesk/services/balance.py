from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlmodel import col

from hrdesk.exceptions import (
    ConflictRetryableError,
    InsufficientBalanceError,
    InvalidLeaveRequestError,
    NotFoundError,
)
from hrdesk.models.balance import LeaveBalance
from hrdesk.models.leave_type import LeaveType
from hrdesk.schemas.balance import BalanceListResponse, BalanceResponse
from hrdesk.services.leave_type import get_leave_type_or_404
from hrdesk.services.unit_of_work import run_unit_of_work

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hrdesk.schemas.auth import AuthContext
    from hrdesk.schemas.balance import AllocateBalanceRequest

logger = logging.getLogger(__name__)

_ZERO = Decimal(0)


@dataclass(frozen=True, order=True)
class BalanceKey:
    """Identifies one ledger row."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    year: int


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _key_filter(key: BalanceKey) -> list:
    return [
        col(LeaveBalance.employee_id) == key.employee_id,
        col(LeaveBalance.leave_type_id) == key.leave_type_id,
        col(LeaveBalance.year) == key.year,
    ]


def _build_balance_response(balance: LeaveBalance, leave_type_name: str) -> BalanceResponse:
    return BalanceResponse(
        employee_id=balance.employee_id,
        leave_type_id=balance.leave_type_id,
        leave_type_name=leave_type_name,
        year=balance.year,
        allocated_days=balance.allocated_days,
        used_days=balance.used_days,
        remaining_days=balance.remaining_days,
        updated_at=balance.updated_at,
    )


async def _get_balance_for_update(session: AsyncSession, key: BalanceKey) -> LeaveBalance | None:
    """Get the balance row with a FOR UPDATE lock."""
    result = await session.execute(
        select(LeaveBalance)
        .where(*_key_filter(key))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _get_or_create_balance_for_update(session: AsyncSession, key: BalanceKey) -> LeaveBalance:
    """Get the balance row with a FOR UPDATE lock, creating an empty one if absent."""
    balance = await _get_balance_for_update(session, key)
    if balance is None:
        balance = LeaveBalance(
            employee_id=key.employee_id,
            leave_type_id=key.leave_type_id,
            year=key.year,
            allocated_days=_ZERO,
            used_days=_ZERO,
            version=1,
        )
        session.add(balance)
        await session.flush()
    return balance


# ---------------------------------------------------------------------------
# Atomic read-check-write
# ---------------------------------------------------------------------------


async def apply_balance_delta(session: AsyncSession, key: BalanceKey, delta: Decimal) -> LeaveBalance:
    """Add ``delta`` days to ``used_days`` for ``key`` inside the caller's transaction.

    Positive deltas debit the balance, negative deltas credit it back. The row
    is locked, the bounds ``0 <= used <= allocated`` are checked against the
    locked value, and the write is guarded by the row version so a writer that
    slipped in between (e.g. on a database without row locks) is reported as
    ``ConflictRetryableError`` instead of being overwritten. Never commits.
    """
    balance = await _get_balance_for_update(session, key)
    if balance is None:
        if delta > 0:
            # A key nobody allocated has nothing to spend.
            raise InsufficientBalanceError(requested=delta, available=_ZERO)
        raise NotFoundError(
            f"No leave balance for employee {key.employee_id}, leave type {key.leave_type_id}, year {key.year}"
        )

    if delta == 0:
        return balance

    new_used = balance.used_days + delta
    if new_used > balance.allocated_days:
        raise InsufficientBalanceError(requested=delta, available=balance.remaining_days)
    if new_used < 0:
        raise InvalidLeaveRequestError(f"Cannot release {-delta} day(s): only {balance.used_days} in use")

    result = await session.execute(
        update(LeaveBalance)
        .where(*_key_filter(key), col(LeaveBalance.version) == balance.version)
        .values(used_days=new_used, version=balance.version + 1, updated_at=datetime.now(UTC))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:  # type: ignore[attr-defined]
        raise ConflictRetryableError()

    await session.refresh(balance)
    return balance


# ---------------------------------------------------------------------------
# Adjustment engine
# ---------------------------------------------------------------------------


async def reserve(session: AsyncSession, key: BalanceKey, days: Decimal) -> LeaveBalance:
    """Debit ``days`` from the remaining balance of ``key``."""
    return await apply_balance_delta(session, key, days)


async def release(session: AsyncSession, key: BalanceKey, days: Decimal) -> LeaveBalance:
    """Credit ``days`` back to the balance of ``key``."""
    return await apply_balance_delta(session, key, -days)


async def adjust(
    session: AsyncSession,
    old_key: BalanceKey,
    old_days: Decimal,
    new_key: BalanceKey,
    new_days: Decimal,
) -> None:
    """Move a reservation from (old_key, old_days) to (new_key, new_days).

    On the same key only the difference is applied. When the key changes
    (different leave type or year) the old reservation is released and the new
    one reserved in the same transaction; if the reserve fails the caller's
    rollback undoes the release as well.
    """
    if old_key == new_key:
        delta = new_days - old_days
        if delta > 0:
            await reserve(session, new_key, delta)
        elif delta < 0:
            await release(session, old_key, -delta)
        return

    # Lock both rows in a stable order so two opposite moves cannot deadlock.
    for key in sorted((old_key, new_key)):
        await _get_balance_for_update(session, key)

    await release(session, old_key, old_days)
    await reserve(session, new_key, new_days)


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_leave_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
) -> BalanceResponse:
    """Get the latest committed balance for one key or raise 404."""
    result = await session.execute(
        select(LeaveBalance, col(LeaveType.name))
        .join(LeaveType, col(LeaveType.id) == col(LeaveBalance.leave_type_id))
        .where(*_key_filter(BalanceKey(employee_id, leave_type_id, year)))
        .execution_options(populate_existing=True)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Leave balance not found")
    balance, leave_type_name = row
    return _build_balance_response(balance, leave_type_name)


async def list_employee_balances(
    session: AsyncSession,
    employee_id: uuid.UUID,
    year: int,
) -> BalanceListResponse:
    """List every balance of an employee for a year, with leave type names."""
    result = await session.execute(
        select(LeaveBalance, col(LeaveType.name))
        .join(LeaveType, col(LeaveType.id) == col(LeaveBalance.leave_type_id))
        .where(col(LeaveBalance.employee_id) == employee_id, col(LeaveBalance.year) == year)
        .order_by(col(LeaveType.name))
        .execution_options(populate_existing=True)
    )
    items = [_build_balance_response(balance, name) for balance, name in result.all()]
    return BalanceListResponse(items=items, total=len(items))


# ---------------------------------------------------------------------------
# Write path: allocation
# ---------------------------------------------------------------------------


async def allocate_balance(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    payload: AllocateBalanceRequest,
) -> BalanceResponse:
    """Set the allocated days of a balance key, creating the row if needed.

    An allocation may never drop below the days already in use.
    """
    leave_type = await get_leave_type_or_404(session, leave_type_id)
    key = BalanceKey(employee_id, leave_type_id, year)

    async def _work() -> LeaveBalance:
        balance = await _get_or_create_balance_for_update(session, key)
        if payload.allocated_days < balance.used_days:
            raise InvalidLeaveRequestError(
                f"Allocation of {payload.allocated_days} day(s) is below the {balance.used_days} already in use"
            )
        balance.allocated_days = payload.allocated_days
        balance.version += 1
        await session.flush()
        return balance

    # Two first allocations of the same key race on the INSERT; the loser retries and finds the row.
    balance = await run_unit_of_work(session, _work, label="allocate balance")

    logger.info(
        "Allocated %s day(s) of %s for employee %s in %d (by %s)",
        payload.allocated_days,
        leave_type.name,
        employee_id,
        year,
        auth.user_id,
    )
    await session.refresh(balance)
    return _build_balance_response(balance, leave_type.name)
