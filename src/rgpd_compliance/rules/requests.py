"""
rgpd_compliance.rules.requests

Deadlines of data subject requests (Art. 12.3 GDPR).

Responsibilities:
- Compute the answer deadline: one calendar month after receipt.
- Tell open requests from closed ones and flag overdue ones.
"""

from __future__ import annotations

import calendar
from datetime import datetime

OPEN_STATUSES: tuple[str, ...] = ("new", "inprogress", "verification")
CLOSED_STATUS = "closed"


def add_one_month(moment: datetime) -> datetime:
    """
    Same day next month, clamped to the last day of a shorter month
    (31 January -> 28/29 February).
    """

    year, month = (moment.year + 1, 1) if moment.month == 12 else (moment.year, moment.month + 1)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def is_open(status: str) -> bool:
    return status != CLOSED_STATUS


def is_overdue(status: str, due_date: datetime, now: datetime) -> bool:
    return is_open(status) and due_date < now
