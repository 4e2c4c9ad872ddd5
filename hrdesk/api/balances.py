# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from hrdesk.api.deps import AdminDep, AuthDep
from hrdesk.db import SessionDep
from hrdesk.schemas.balance import AllocateBalanceRequest, BalanceListResponse, BalanceResponse
from hrdesk.services import balance as balance_service

employee_balance_router = APIRouter(
    prefix="/employees/{employee_id}/leave-balances",
    tags=["balances"],
)


@employee_balance_router.get("", response_model=BalanceListResponse)
async def get_employee_balances(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    year: int = Query(ge=1900, le=9999),
) -> BalanceListResponse:
    """Get all leave balances of an employee for a year."""
    return await balance_service.list_employee_balances(session, employee_id, year)


@employee_balance_router.get("/{leave_type_id}", response_model=BalanceResponse)
async def get_employee_balance(
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    year: int = Query(ge=1900, le=9999),
) -> BalanceResponse:
    """Get one leave balance of an employee."""
    return await balance_service.get_leave_balance(session, employee_id, leave_type_id, year)


@employee_balance_router.put("/{leave_type_id}", response_model=BalanceResponse)
async def allocate_employee_balance(
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    payload: AllocateBalanceRequest,
    session: SessionDep,
    auth: AdminDep,
    year: int = Query(ge=1900, le=9999),
) -> BalanceResponse:
    """Set the allocated days of a leave balance (admin only)."""
    return await balance_service.allocate_balance(session, auth, employee_id, leave_type_id, year, payload)
