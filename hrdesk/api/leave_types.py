# ruff: noqa: TC001
from __future__ import annotations

from fastapi import APIRouter, status

from hrdesk.api.deps import AdminDep, AuthDep
from hrdesk.db import SessionDep
from hrdesk.schemas.leave_type import CreateLeaveTypeRequest, LeaveTypeListResponse, LeaveTypeResponse
from hrdesk.services import leave_type as leave_type_service

leave_types_router = APIRouter(
    prefix="/leave-types",
    tags=["leave-types"],
)


@leave_types_router.get("", response_model=LeaveTypeListResponse)
async def list_leave_types(
    session: SessionDep,
    auth: AuthDep,
) -> LeaveTypeListResponse:
    """List all leave types."""
    return await leave_type_service.list_leave_types(session)


@leave_types_router.post("", response_model=LeaveTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_type(
    payload: CreateLeaveTypeRequest,
    session: SessionDep,
    auth: AdminDep,
) -> LeaveTypeResponse:
    """Create a leave type (admin only)."""
    return await leave_type_service.create_leave_type(session, auth, payload)
