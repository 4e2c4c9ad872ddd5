from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from hrdesk.exceptions import InvalidLeaveRequestError
from hrdesk.models.enums import DayCountPolicy


def count_leave_days(start_date: date, end_date: date, policy: DayCountPolicy | str) -> Decimal:
    """Count the days debited for a leave spanning start_date..end_date inclusive.

    The calendar policy counts every day in the range. The business policy
    skips Saturdays and Sundays.
    """
    if end_date < start_date:
        raise InvalidLeaveRequestError("end_date must not be before start_date")

    policy = DayCountPolicy(policy)
    if policy is DayCountPolicy.CALENDAR:
        return Decimal((end_date - start_date).days + 1)

    total = 0
    current = start_date
    one_day = timedelta(days=1)
    while current <= end_date:
        if current.weekday() < 5:
            total += 1
        current += one_day

    if total <= 0:
        raise InvalidLeaveRequestError("Request covers no working days after excluding weekends")

    return Decimal(total)
