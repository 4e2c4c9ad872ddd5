# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from fastapi import status

from hrdesk.config import get_settings
from hrdesk.exceptions import AppError, InvalidLeaveRequestError, InvalidTransitionError, NotFoundError
from hrdesk.models.enums import ALLOWED_TRANSITIONS, RELEASING_STATUSES, NotificationType, RequestStatus
from hrdesk.schemas.request import LeaveRequestListResponse, LeaveRequestResponse
from hrdesk.services.balance import BalanceKey, adjust, release, reserve
from hrdesk.services.duration import count_leave_days
from hrdesk.services.employee import get_employee_service
from hrdesk.services.leave_type import get_leave_type_or_404
from hrdesk.services.notification import emit_notification
from hrdesk.services.request_store import (
    create_request_row,
    delete_request_row,
    get_request_row,
    list_request_rows,
    update_request_row,
)
from hrdesk.services.unit_of_work import run_unit_of_work

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hrdesk.models.request import LeaveRequest
    from hrdesk.schemas.auth import AuthContext
    from hrdesk.schemas.request import CreateLeaveRequestPayload, UpdateLeaveRequestPayload

logger = logging.getLogger(__name__)

# Status transitions that notify the filing employee, and with which type.
_DECISION_NOTIFICATIONS: dict[RequestStatus, NotificationType] = {
    RequestStatus.APPROVED: NotificationType.LEAVE_REQUEST_APPROVED,
    RequestStatus.REJECTED: NotificationType.LEAVE_REQUEST_REJECTED,
}
_ADMIN_ONLY_STATUSES = frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED})

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_request_response(leave_request: LeaveRequest) -> LeaveRequestResponse:
    """Map a request model to its response schema."""
    return LeaveRequestResponse(
        id=leave_request.id,
        employee_id=leave_request.employee_id,
        employee_name=leave_request.employee_name,
        leave_type_id=leave_request.leave_type_id,
        start_date=leave_request.start_date,
        end_date=leave_request.end_date,
        reason=leave_request.reason,
        requested_days=leave_request.requested_days,
        status=RequestStatus(leave_request.status),
        decided_at=leave_request.decided_at,
        decided_by=leave_request.decided_by,
        created_at=leave_request.created_at,
        updated_at=leave_request.updated_at,
    )


def _balance_key(leave_request: LeaveRequest) -> BalanceKey:
    return BalanceKey(leave_request.employee_id, leave_request.leave_type_id, leave_request.balance_year)


def _ensure_owner_or_admin(auth: AuthContext, employee_id: uuid.UUID, action: str) -> None:
    if not auth.is_admin and auth.user_id != employee_id:
        raise AppError(f"Not authorized to {action} this leave request", status_code=status.HTTP_403_FORBIDDEN)


def _check_transition(current: RequestStatus, target: RequestStatus) -> None:
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(
            current.value,
            f"Cannot change a {current.value} leave request to {target.value}",
        )


def _created_message(response: LeaveRequestResponse) -> str:
    return (
        f"{response.employee_name} submitted a new leave request from "
        f"{response.start_date.isoformat()} to {response.end_date.isoformat()}."
    )


def _decision_message(response: LeaveRequestResponse) -> str:
    return (
        f"Your leave request from {response.start_date.isoformat()} to "
        f"{response.end_date.isoformat()} has been {response.status.value}."
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeaveRequestPayload,
) -> LeaveRequestResponse:
    """File a leave request, reserving its days against the balance.

    Flow:
    1. Resolve the employee (for the denormalized name) and count the days
    2. In one unit of work: check the leave type, reserve the days, insert
       the request as pending, commit
    3. Notify the admin recipient (best effort, after commit)

    Nothing is persisted when the reservation fails.
    """
    settings = get_settings()
    _ensure_owner_or_admin(auth, payload.employee_id, "file")

    employee = await get_employee_service().get_employee(payload.employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")

    days = count_leave_days(payload.start_date, payload.end_date, settings.leave_day_count_policy)
    key = BalanceKey(payload.employee_id, payload.leave_type_id, payload.start_date.year)

    async def _work() -> LeaveRequest:
        await get_leave_type_or_404(session, payload.leave_type_id)
        await reserve(session, key, days)
        return await create_request_row(
            session,
            employee_id=payload.employee_id,
            employee_name=employee.full_name,
            leave_type_id=payload.leave_type_id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            reason=payload.reason,
            requested_days=days,
            status=RequestStatus.PENDING.value,
        )

    leave_request = await run_unit_of_work(session, _work, label="create leave request")
    response = _build_request_response(leave_request)
    logger.info("Leave request %s filed for %s: %s day(s) reserved", response.id, response.employee_id, days)

    await emit_notification(
        session,
        recipient_id=settings.admin_recipient_id,
        notification_type=NotificationType.LEAVE_REQUEST_CREATED,
        message=_created_message(response),
        link=f"/leave-requests/{response.id}",
    )
    return response


async def update_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
    payload: UpdateLeaveRequestPayload,
) -> LeaveRequestResponse:
    """Update dates, leave type, reason and/or status of a leave request.

    Date and leave type changes are only allowed while pending and move the
    reservation through ``adjust``. Status changes follow the pending ->
    approved | rejected | cancelled state machine; rejected and cancelled
    release the reserved days. The previous status is read under the same
    row lock as the write, so the notification decision cannot race.
    """
    settings = get_settings()

    async def _work() -> tuple[LeaveRequest, RequestStatus]:
        leave_request = await get_request_row(session, request_id, for_update=True)
        previous_status = RequestStatus(leave_request.status)
        _ensure_owner_or_admin(auth, leave_request.employee_id, "update")

        patch: dict[str, Any] = {}
        key = _balance_key(leave_request)
        days = leave_request.requested_days

        if payload.changes_balance_key_or_days:
            if previous_status is not RequestStatus.PENDING:
                raise InvalidTransitionError(
                    previous_status.value,
                    f"Dates and leave type of a {previous_status.value} leave request cannot change",
                )
            start_date = payload.start_date or leave_request.start_date
            end_date = payload.end_date or leave_request.end_date
            if end_date < start_date:
                raise InvalidLeaveRequestError("end_date must not be before start_date")
            leave_type_id = payload.leave_type_id or leave_request.leave_type_id
            if leave_type_id != leave_request.leave_type_id:
                await get_leave_type_or_404(session, leave_type_id)

            new_key = BalanceKey(leave_request.employee_id, leave_type_id, start_date.year)
            new_days = count_leave_days(start_date, end_date, settings.leave_day_count_policy)
            await adjust(session, key, days, new_key, new_days)

            key, days = new_key, new_days
            patch.update(
                start_date=start_date,
                end_date=end_date,
                leave_type_id=leave_type_id,
                requested_days=new_days,
            )

        if payload.reason is not None:
            patch["reason"] = payload.reason

        target = payload.status
        # Re-sending "pending" for a pending request is not a transition.
        if target is RequestStatus.PENDING and previous_status is RequestStatus.PENDING:
            target = None
        if target is not None:
            _check_transition(previous_status, target)
            if target in _ADMIN_ONLY_STATUSES and not auth.is_admin:
                raise AppError(
                    f"Only admins can mark a leave request {target.value}",
                    status_code=status.HTTP_403_FORBIDDEN,
                )
            if target in RELEASING_STATUSES:
                await release(session, key, days)
            patch.update(status=target.value, decided_at=datetime.now(UTC), decided_by=auth.user_id)

        if patch:
            await update_request_row(session, leave_request, patch)
        return leave_request, previous_status

    leave_request, previous_status = await run_unit_of_work(session, _work, label="update leave request")
    response = _build_request_response(leave_request)

    if response.status is not previous_status:
        logger.info(
            "Leave request %s moved %s -> %s by %s",
            response.id,
            previous_status.value,
            response.status.value,
            auth.user_id,
        )
        notification_type = _DECISION_NOTIFICATIONS.get(response.status)
        if notification_type is not None:
            await emit_notification(
                session,
                recipient_id=response.employee_id,
                notification_type=notification_type,
                message=_decision_message(response),
                link="/my-leave-status",
            )
    return response


async def delete_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> None:
    """Hard-delete a leave request.

    The reserved days are deliberately NOT released: deleting a pending or
    approved request leaves the balance as it is. Use a rejected/cancelled
    status update to hand days back.
    """

    async def _work() -> tuple[str, Decimal]:
        leave_request = await get_request_row(session, request_id, for_update=True)
        _ensure_owner_or_admin(auth, leave_request.employee_id, "delete")
        deleted = (leave_request.status, leave_request.requested_days)
        await delete_request_row(session, leave_request)
        return deleted

    deleted_status, kept_days = await run_unit_of_work(session, _work, label="delete leave request")
    logger.info(
        "Leave request %s (%s) deleted by %s without releasing %s day(s)",
        request_id,
        deleted_status,
        auth.user_id,
        kept_days,
    )


async def get_leave_request(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequestResponse:
    """Get a single leave request by ID."""
    leave_request = await get_request_row(session, request_id)
    return _build_request_response(leave_request)


async def list_leave_requests(
    session: AsyncSession,
    employee_id: uuid.UUID | None = None,
    status_filter: str | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveRequestListResponse:
    """List leave requests, optionally by employee and status, newest first."""
    leave_requests, total = await list_request_rows(session, employee_id, status_filter, offset, limit)
    return LeaveRequestListResponse(
        items=[_build_request_response(r) for r in leave_requests],
        total=total,
    )
