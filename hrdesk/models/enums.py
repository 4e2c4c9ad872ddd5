from __future__ import annotations

import enum


class RequestStatus(enum.StrEnum):
    """State machine for leave requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


# Every status a pending request may move to. All of them are terminal.
ALLOWED_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED, RequestStatus.CANCELLED}),
    RequestStatus.APPROVED: frozenset(),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.CANCELLED: frozenset(),
}

# Transitions that hand the reserved days back to the balance.
RELEASING_STATUSES = frozenset({RequestStatus.REJECTED, RequestStatus.CANCELLED})


class NotificationType(enum.StrEnum):
    """Kind of user-facing notification."""

    LEAVE_REQUEST_CREATED = "leave_request_created"
    LEAVE_REQUEST_APPROVED = "leave_request_approved"
    LEAVE_REQUEST_REJECTED = "leave_request_rejected"


class DayCountPolicy(enum.StrEnum):
    """How the days between start and end date are counted."""

    CALENDAR = "calendar"
    BUSINESS = "business"
