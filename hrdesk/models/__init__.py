from sqlmodel import SQLModel

from hrdesk.models.balance import LeaveBalance
from hrdesk.models.base import TimestampMixin, UpdatedAtMixin, UUIDBase
from hrdesk.models.enums import DayCountPolicy, NotificationType, RequestStatus
from hrdesk.models.leave_type import LeaveType
from hrdesk.models.notification import Notification
from hrdesk.models.request import LeaveRequest

__all__ = [
    "DayCountPolicy",
    "LeaveBalance",
    "LeaveRequest",
    "LeaveType",
    "Notification",
    "NotificationType",
    "RequestStatus",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
    "UpdatedAtMixin",
]
