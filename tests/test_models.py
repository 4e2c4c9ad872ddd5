from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from hrdesk.models import LeaveBalance, LeaveRequest, LeaveType, Notification, SQLModel
from hrdesk.models.enums import ALLOWED_TRANSITIONS, RELEASING_STATUSES, RequestStatus

EXPECTED_TABLES = {
    "leave_type",
    "leave_balance",
    "leave_request",
    "notification",
}


def test_all_tables_registered() -> None:
    assert set(SQLModel.metadata.tables.keys()) == EXPECTED_TABLES


def test_leave_balance_primary_key_is_employee_type_year() -> None:
    pk = [c.name for c in SQLModel.metadata.tables["leave_balance"].primary_key.columns]
    assert pk == ["employee_id", "leave_type_id", "year"]


def test_leave_balance_remaining_days() -> None:
    balance = LeaveBalance(
        employee_id=uuid.uuid4(),
        leave_type_id=uuid.uuid4(),
        year=2024,
        allocated_days=Decimal("10"),
        used_days=Decimal("3.5"),
    )
    assert balance.remaining_days == Decimal("6.5")
    assert balance.version == 1


def test_leave_type_instantiation() -> None:
    leave_type = LeaveType(name="Annual Leave")
    assert leave_type.id is not None
    assert leave_type.name == "Annual Leave"


def test_leave_request_defaults_to_pending() -> None:
    leave_request = LeaveRequest(
        employee_id=uuid.uuid4(),
        employee_name="Jane Doe",
        leave_type_id=uuid.uuid4(),
        start_date=date(2024, 12, 30),
        end_date=date(2025, 1, 2),
        requested_days=Decimal("4"),
    )
    assert leave_request.status == RequestStatus.PENDING
    assert leave_request.decided_at is None
    assert leave_request.balance_year == 2024


def test_notification_defaults_unread() -> None:
    notification = Notification(recipient_id=uuid.uuid4(), type="leave_request_created", message="hi")
    assert notification.is_read is False
    assert notification.link is None


def test_only_pending_has_outgoing_transitions() -> None:
    assert ALLOWED_TRANSITIONS[RequestStatus.PENDING] == {
        RequestStatus.APPROVED,
        RequestStatus.REJECTED,
        RequestStatus.CANCELLED,
    }
    for terminal in (RequestStatus.APPROVED, RequestStatus.REJECTED, RequestStatus.CANCELLED):
        assert ALLOWED_TRANSITIONS[terminal] == frozenset()


def test_releasing_statuses() -> None:
    assert RequestStatus.REJECTED in RELEASING_STATUSES
    assert RequestStatus.CANCELLED in RELEASING_STATUSES
    assert RequestStatus.APPROVED not in RELEASING_STATUSES
