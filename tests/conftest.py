"""Shared fixtures for the test suite."""

from datetime import date
from decimal import Decimal

import pytest

from src.domain.models import Currency, RateRecord, RateSource


def make_record(
    month: str,
    eur: str = "1.20",
    usd: str = "1.25",
    aed: str = "4.60",
    source: RateSource = RateSource.EXACT,
    rate_date: date | None = None,
) -> RateRecord:
    """Build a rate record with readable defaults."""
    year, month_num = (int(part) for part in month.split("-"))
    return RateRecord.from_rates(
        month,
        rate_date or date(year, month_num, 28),
        {
            Currency.EUR: Decimal(eur),
            Currency.USD: Decimal(usd),
            Currency.AED: Decimal(aed),
        },
        source,
    )


@pytest.fixture
def record_factory():
    return make_record
