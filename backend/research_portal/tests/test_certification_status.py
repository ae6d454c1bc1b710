from datetime import date, timedelta

import pytest

from research_portal.services.certifications import add_months, derive_status

TODAY = date(2025, 6, 15)


@pytest.mark.parametrize(
    "end_date,expected",
    [
        (None, "never"),
        (TODAY - timedelta(days=1), "expired"),
        (TODAY, "expiring"),
        (TODAY + timedelta(days=15), "expiring"),
        (TODAY + timedelta(days=30), "expiring"),
        (TODAY + timedelta(days=31), "valid"),
        (TODAY + timedelta(days=45), "valid"),
    ],
)
def test_derive_status(end_date, expected):
    assert derive_status(end_date, TODAY) == expected


def test_add_months_plain():
    assert add_months(date(2024, 3, 10), 36) == date(2027, 3, 10)


def test_add_months_clamps_month_end():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 2, 29), 12) == date(2025, 2, 28)


def test_add_months_crosses_year():
    assert add_months(date(2024, 11, 5), 3) == date(2025, 2, 5)
