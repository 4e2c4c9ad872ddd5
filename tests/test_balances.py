"""Tests for the balance ledger: allocation, reads, and the reserve/release engine."""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from hrdesk.exceptions import (
    ConflictRetryableError,
    InsufficientBalanceError,
    InvalidLeaveRequestError,
    NotFoundError,
)
from hrdesk.models.balance import LeaveBalance
from hrdesk.models.leave_type import LeaveType
from hrdesk.services import balance as balance_service
from hrdesk.services.balance import BalanceKey, adjust, apply_balance_delta, release, reserve

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

ADMIN_ID = uuid.uuid4()
EMPLOYEE_ID = uuid.uuid4()
AUTH_HEADERS = {"X-User-Id": str(ADMIN_ID), "X-Role": "admin"}
EMPLOYEE_HEADERS = {"X-User-Id": str(EMPLOYEE_ID), "X-Role": "employee"}
YEAR = 2024


# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


async def _create_leave_type(client: AsyncClient, name: str = "Annual Leave") -> str:
    resp = await client.post("/leave-types", json={"name": name}, headers=AUTH_HEADERS)
    assert resp.status_code == 201
    leave_type_id: str = resp.json()["id"]
    return leave_type_id


def _balance_url(leave_type_id: str | None = None, employee_id: uuid.UUID = EMPLOYEE_ID) -> str:
    url = f"/employees/{employee_id}/leave-balances"
    return f"{url}/{leave_type_id}" if leave_type_id else url


async def _allocate(client: AsyncClient, leave_type_id: str, days: str, year: int = YEAR) -> dict:
    resp = await client.put(
        _balance_url(leave_type_id), json={"allocated_days": days}, params={"year": year}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


async def _leave_type_row(session: AsyncSession, name: str = "Annual Leave") -> LeaveType:
    leave_type = LeaveType(name=name)
    session.add(leave_type)
    await session.commit()
    return leave_type


async def _balance_row(session: AsyncSession, leave_type: LeaveType, allocated: str, used: str = "0") -> BalanceKey:
    session.add(
        LeaveBalance(
            employee_id=EMPLOYEE_ID,
            leave_type_id=leave_type.id,
            year=YEAR,
            allocated_days=Decimal(allocated),
            used_days=Decimal(used),
        )
    )
    await session.commit()
    return BalanceKey(EMPLOYEE_ID, leave_type.id, YEAR)


async def _stored(session: AsyncSession, key: BalanceKey) -> LeaveBalance:
    result = await session.execute(
        select(LeaveBalance)
        .where(
            col(LeaveBalance.employee_id) == key.employee_id,
            col(LeaveBalance.leave_type_id) == key.leave_type_id,
            col(LeaveBalance.year) == key.year,
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# Allocation API
# ---------------------------------------------------------------------------


async def test_allocate_creates_balance(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client)
    data = await _allocate(async_client, leave_type_id, "10")
    assert data["leave_type_name"] == "Annual Leave"
    assert data["year"] == YEAR
    assert Decimal(data["allocated_days"]) == Decimal("10")
    assert Decimal(data["used_days"]) == Decimal("0")
    assert Decimal(data["remaining_days"]) == Decimal("10")


async def test_allocate_twice_overwrites(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client)
    await _allocate(async_client, leave_type_id, "10")
    data = await _allocate(async_client, leave_type_id, "12.5")
    assert Decimal(data["allocated_days"]) == Decimal("12.5")


async def test_allocate_retries_after_insert_race(async_client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """A concurrent first allocation of the same key loses the INSERT once, then succeeds."""
    leave_type_id = await _create_leave_type(async_client)
    real_get_or_create = balance_service._get_or_create_balance_for_update
    calls = 0

    async def _racing_get_or_create(session: AsyncSession, key: BalanceKey) -> LeaveBalance:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise IntegrityError("INSERT INTO leave_balance", {}, Exception("duplicate key"))
        return await real_get_or_create(session, key)

    monkeypatch.setattr(balance_service, "_get_or_create_balance_for_update", _racing_get_or_create)

    data = await _allocate(async_client, leave_type_id, "10")
    assert Decimal(data["allocated_days"]) == Decimal("10")
    assert calls == 2


async def test_allocate_requires_admin(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client)
    resp = await async_client.put(
        _balance_url(leave_type_id), json={"allocated_days": "10"}, params={"year": YEAR}, headers=EMPLOYEE_HEADERS
    )
    assert resp.status_code == 403


async def test_allocate_unknown_leave_type(async_client: AsyncClient) -> None:
    resp = await async_client.put(
        _balance_url(str(uuid.uuid4())), json={"allocated_days": "10"}, params={"year": YEAR}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 404


async def test_allocate_negative_rejected(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client)
    resp = await async_client.put(
        _balance_url(leave_type_id), json={"allocated_days": "-1"}, params={"year": YEAR}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 422


async def test_allocate_below_used_rejected(async_client: AsyncClient, db_session: AsyncSession) -> None:
    leave_type_id = await _create_leave_type(async_client)
    await _allocate(async_client, leave_type_id, "10")
    key = BalanceKey(EMPLOYEE_ID, uuid.UUID(leave_type_id), YEAR)
    await reserve(db_session, key, Decimal("6"))
    await db_session.commit()

    resp = await async_client.put(
        _balance_url(leave_type_id), json={"allocated_days": "5"}, params={"year": YEAR}, headers=AUTH_HEADERS
    )
    assert resp.status_code == 422
    assert resp.json()["error"] == "InvalidLeaveRequestError"

    balance = await _stored(db_session, key)
    assert balance.allocated_days == Decimal("10")
    assert balance.used_days == Decimal("6")


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def test_list_balances_for_year(async_client: AsyncClient) -> None:
    annual_id = await _create_leave_type(async_client, "Annual Leave")
    sick_id = await _create_leave_type(async_client, "Sick Leave")
    await _allocate(async_client, sick_id, "5")
    await _allocate(async_client, annual_id, "20")
    await _allocate(async_client, annual_id, "18", year=YEAR + 1)

    resp = await async_client.get(_balance_url(), params={"year": YEAR}, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 2
    assert [item["leave_type_name"] for item in data["items"]] == ["Annual Leave", "Sick Leave"]


async def test_list_balances_requires_year(async_client: AsyncClient) -> None:
    resp = await async_client.get(_balance_url(), headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 422


async def test_list_balances_empty(async_client: AsyncClient) -> None:
    resp = await async_client.get(_balance_url(), params={"year": YEAR}, headers=EMPLOYEE_HEADERS)
    assert resp.json() == {"items": [], "total": 0}


async def test_get_single_balance_not_found(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client)
    resp = await async_client.get(_balance_url(leave_type_id), params={"year": YEAR}, headers=EMPLOYEE_HEADERS)
    assert resp.status_code == 404


async def test_balance_read_is_idempotent(async_client: AsyncClient) -> None:
    leave_type_id = await _create_leave_type(async_client)
    await _allocate(async_client, leave_type_id, "10")

    url = _balance_url(leave_type_id)
    first = (await async_client.get(url, params={"year": YEAR}, headers=EMPLOYEE_HEADERS)).json()
    second = (await async_client.get(url, params={"year": YEAR}, headers=EMPLOYEE_HEADERS)).json()
    assert first == second


# ---------------------------------------------------------------------------
# Adjustment engine
# ---------------------------------------------------------------------------


async def test_reserve_and_release_keep_invariant(db_session: AsyncSession) -> None:
    leave_type = await _leave_type_row(db_session)
    key = await _balance_row(db_session, leave_type, "10")

    balance = await reserve(db_session, key, Decimal("4"))
    assert balance.used_days == Decimal("4")
    assert balance.version == 2

    balance = await release(db_session, key, Decimal("1.5"))
    await db_session.commit()
    assert balance.used_days == Decimal("2.5")
    assert balance.remaining_days == Decimal("7.5")
    assert balance.version == 3


async def test_reserve_exactly_remaining_allowed(db_session: AsyncSession) -> None:
    leave_type = await _leave_type_row(db_session)
    key = await _balance_row(db_session, leave_type, "10", used="7")
    balance = await reserve(db_session, key, Decimal("3"))
    assert balance.remaining_days == Decimal("0")


async def test_reserve_over_remaining_raises(db_session: AsyncSession) -> None:
    leave_type = await _leave_type_row(db_session)
    key = await _balance_row(db_session, leave_type, "10", used="8")

    with pytest.raises(InsufficientBalanceError) as exc_info:
        await reserve(db_session, key, Decimal("3"))
    assert exc_info.value.requested == Decimal("3")
    assert exc_info.value.available == Decimal("2")
    assert exc_info.value.shortfall == Decimal("1")
    assert exc_info.value.status_code == 400

    await db_session.rollback()
    assert (await _stored(db_session, key)).used_days == Decimal("8")


async def test_reserve_without_balance_row_has_nothing_available(db_session: AsyncSession) -> None:
    key = BalanceKey(EMPLOYEE_ID, uuid.uuid4(), YEAR)
    with pytest.raises(InsufficientBalanceError) as exc_info:
        await reserve(db_session, key, Decimal("1"))
    assert exc_info.value.available == Decimal("0")


async def test_release_without_balance_row_not_found(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError):
        await release(db_session, BalanceKey(EMPLOYEE_ID, uuid.uuid4(), YEAR), Decimal("1"))


async def test_release_more_than_used_rejected(db_session: AsyncSession) -> None:
    leave_type = await _leave_type_row(db_session)
    key = await _balance_row(db_session, leave_type, "10", used="2")
    with pytest.raises(InvalidLeaveRequestError) as exc_info:
        await release(db_session, key, Decimal("3"))
    assert exc_info.value.status_code == 422


async def test_zero_delta_is_a_no_op(db_session: AsyncSession) -> None:
    leave_type = await _leave_type_row(db_session)
    key = await _balance_row(db_session, leave_type, "10", used="2")
    balance = await apply_balance_delta(db_session, key, Decimal("0"))
    assert balance.version == 1


async def test_stale_version_raises_conflict(db_session: AsyncSession, monkeypatch: pytest.MonkeyPatch) -> None:
    """A write based on an outdated version of the row must not land."""
    leave_type = await _leave_type_row(db_session)
    key = await _balance_row(db_session, leave_type, "10")

    async def _stale_read(session: AsyncSession, key: BalanceKey) -> LeaveBalance:
        return LeaveBalance(
            employee_id=key.employee_id,
            leave_type_id=key.leave_type_id,
            year=key.year,
            allocated_days=Decimal("10"),
            used_days=Decimal("0"),
            version=99,
        )

    monkeypatch.setattr(balance_service, "_get_balance_for_update", _stale_read)
    with pytest.raises(ConflictRetryableError):
        await reserve(db_session, key, Decimal("1"))

    await db_session.rollback()
    monkeypatch.undo()
    assert (await _stored(db_session, key)).used_days == Decimal("0")


async def test_adjust_same_key_applies_difference(db_session: AsyncSession) -> None:
    leave_type = await _leave_type_row(db_session)
    key = await _balance_row(db_session, leave_type, "10", used="5")

    await adjust(db_session, key, Decimal("5"), key, Decimal("3"))
    assert (await _stored(db_session, key)).used_days == Decimal("3")

    await adjust(db_session, key, Decimal("3"), key, Decimal("7"))
    assert (await _stored(db_session, key)).used_days == Decimal("7")


async def test_adjust_moves_reservation_between_keys(db_session: AsyncSession) -> None:
    annual = await _leave_type_row(db_session, "Annual Leave")
    sick = await _leave_type_row(db_session, "Sick Leave")
    old_key = await _balance_row(db_session, annual, "10", used="4")
    new_key = await _balance_row(db_session, sick, "5")

    await adjust(db_session, old_key, Decimal("4"), new_key, Decimal("2"))
    await db_session.commit()

    assert (await _stored(db_session, old_key)).used_days == Decimal("0")
    assert (await _stored(db_session, new_key)).used_days == Decimal("2")


async def test_adjust_failed_reserve_keeps_old_reservation(db_session: AsyncSession) -> None:
    annual = await _leave_type_row(db_session, "Annual Leave")
    sick = await _leave_type_row(db_session, "Sick Leave")
    old_key = await _balance_row(db_session, annual, "10", used="4")
    new_key = await _balance_row(db_session, sick, "1")

    with pytest.raises(InsufficientBalanceError):
        await adjust(db_session, old_key, Decimal("4"), new_key, Decimal("4"))
    await db_session.rollback()

    assert (await _stored(db_session, old_key)).used_days == Decimal("4")
    assert (await _stored(db_session, new_key)).used_days == Decimal("0")
