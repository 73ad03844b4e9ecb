from __future__ import annotations

from datetime import datetime

import pytest

from rgpd_compliance.rules import requests


@pytest.mark.parametrize(
    ("received", "due"),
    [
        (datetime(2024, 3, 10, 9, 30), datetime(2024, 4, 10, 9, 30)),
        (datetime(2024, 1, 31), datetime(2024, 2, 29)),
        (datetime(2023, 1, 31), datetime(2023, 2, 28)),
        (datetime(2024, 12, 15), datetime(2025, 1, 15)),
    ],
)
def test_deadline_is_one_calendar_month(received, due) -> None:
    assert requests.add_one_month(received) == due


def test_closed_requests_are_never_overdue() -> None:
    now = datetime(2024, 6, 1)
    past = datetime(2024, 5, 1)
    assert requests.is_overdue("new", past, now) is True
    assert requests.is_overdue("closed", past, now) is False
    assert requests.is_overdue("inprogress", datetime(2024, 6, 2), now) is False
