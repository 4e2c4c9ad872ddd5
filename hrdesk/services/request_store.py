"""Row-level persistence for leave requests.

Nothing here touches balances or commits; the lifecycle coordinator in
``hrdesk.services.request`` decides what runs inside one transaction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlmodel import col

from hrdesk.exceptions import NotFoundError
from hrdesk.models.request import LeaveRequest

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

# Accepted by the list filter as "no status filter".
ALL_STATUSES = "all"


async def create_request_row(session: AsyncSession, **fields: Any) -> LeaveRequest:
    """Insert a leave request row and flush it so its id is usable."""
    leave_request = LeaveRequest(**fields)
    session.add(leave_request)
    await session.flush()
    return leave_request


async def get_request_row(
    session: AsyncSession,
    request_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> LeaveRequest:
    """Fetch a request by ID. Raises 404 if not found."""
    query = select(LeaveRequest).where(col(LeaveRequest.id) == request_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await session.execute(query)
    leave_request = result.scalar_one_or_none()
    if leave_request is None:
        raise NotFoundError("Leave request not found")
    return leave_request


async def update_request_row(session: AsyncSession, leave_request: LeaveRequest, patch: dict[str, Any]) -> LeaveRequest:
    """Apply ``patch`` to the row and flush."""
    for field, value in patch.items():
        setattr(leave_request, field, value)
    await session.flush()
    return leave_request


async def list_request_rows(
    session: AsyncSession,
    employee_id: uuid.UUID | None = None,
    status_filter: str | None = None,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[LeaveRequest], int]:
    """List requests newest first, returning the page and the filtered total."""
    base_filters = []
    if employee_id is not None:
        base_filters.append(col(LeaveRequest.employee_id) == employee_id)
    if status_filter is not None and status_filter != ALL_STATUSES:
        base_filters.append(col(LeaveRequest.status) == status_filter)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def delete_request_row(session: AsyncSession, leave_request: LeaveRequest) -> None:
    """Hard-delete a request row. The balance is left untouched."""
    await session.delete(leave_request)
    await session.flush()
