"""Tests for month key helpers."""

from datetime import date, datetime

import pytest

from src.utils.month_utils import (
    LATEST_MONTH,
    iter_month_keys,
    last_day_of_month,
    to_month_key,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2025-03", "2025-03"),
        ("2025-03-17", "2025-03"),
        (" 2025-03-31 ", "2025-03"),
        (date(2024, 2, 29), "2024-02"),
        (datetime(2024, 11, 5, 12, 30), "2024-11"),
        ("LATEST", LATEST_MONTH),
    ],
)
def test_to_month_key_truncates_to_month(value, expected) -> None:
    assert to_month_key(value) == expected


@pytest.mark.parametrize("value", ["2025", "2025-13", "03-2025", "", 202503])
def test_to_month_key_rejects_malformed_values(value) -> None:
    with pytest.raises(ValueError):
        to_month_key(value)


def test_last_day_of_month_handles_leap_years() -> None:
    assert last_day_of_month("2024-02") == date(2024, 2, 29)
    assert last_day_of_month("2025-02") == date(2025, 2, 28)
    assert last_day_of_month("2025-12-01") == date(2025, 12, 31)


def test_last_day_of_month_rejects_latest() -> None:
    with pytest.raises(ValueError):
        last_day_of_month(LATEST_MONTH)


def test_iter_month_keys_crosses_year_boundary() -> None:
    assert list(iter_month_keys("2024-11", "2025-02")) == [
        "2024-11",
        "2024-12",
        "2025-01",
        "2025-02",
    ]


def test_iter_month_keys_is_empty_for_reversed_range() -> None:
    assert list(iter_month_keys("2025-02", "2024-11")) == []
