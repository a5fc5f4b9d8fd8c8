"""Tests for the in-memory rate table and resolver."""

from decimal import Decimal
import threading

import pytest

from src.domain.models import Currency, RateSource
from src.domain.services import RateResolver, RateTable


def test_table_is_seeded_from_initial_records(record_factory) -> None:
    table = RateTable([record_factory("2025-01"), record_factory("2025-02")])

    assert len(table) == 2
    assert table.months() == ["2025-01", "2025-02"]
    assert "2025-01-31" in table


def test_merge_never_overwrites_existing_month(record_factory) -> None:
    """Merging is an idempotent union keyed by month."""
    original = record_factory("2025-01", eur="1.10")
    table = RateTable([original])

    inserted = table.merge(
        [record_factory("2025-01", eur="9.99"), record_factory("2025-02")]
    )

    assert [record.month for record in inserted] == ["2025-02"]
    assert table.get("2025-01") is original


def test_merge_rejects_latest_sentinel(record_factory) -> None:
    record = record_factory("2025-01").with_source("latest", RateSource.EXACT)

    with pytest.raises(ValueError):
        RateTable().merge([record])


def test_latest_uses_greatest_month_key(record_factory) -> None:
    table = RateTable(
        [
            record_factory("2024-12"),
            record_factory("2025-10"),
            record_factory("2025-02"),
        ]
    )

    assert table.latest().month == "2025-10"
    assert RateTable().latest() is None


def test_concurrent_merges_keep_one_record_per_month(record_factory) -> None:
    """Threads racing on the same months must not duplicate or replace."""
    table = RateTable()
    months = [f"2024-{month:02d}" for month in range(1, 13)]

    def _worker() -> None:
        table.merge(record_factory(month) for month in months)

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert table.months() == months


def test_resolver_returns_exact_month_rate(record_factory) -> None:
    resolver = RateResolver(RateTable([record_factory("2025-03", usd="1.30")]))

    assert resolver.resolve("2025-03", Currency.USD) == Decimal("1.30")
    assert resolver.resolve("2025-03-15", "usd") == Decimal("1.30")


def test_resolver_does_not_borrow_other_months(record_factory) -> None:
    """Only exact months and the latest sentinel are resolved."""
    resolver = RateResolver(RateTable([record_factory("2025-02")]))

    assert resolver.resolve("2025-03", Currency.EUR) is None
    assert resolver.resolve_record("2025-03") is None


def test_resolver_latest_picks_most_recent_month(record_factory) -> None:
    resolver = RateResolver(
        RateTable(
            [
                record_factory("2025-01", eur="1.10"),
                record_factory("2025-06", eur="1.16"),
            ]
        )
    )

    assert resolver.resolve("latest", Currency.EUR) == Decimal("1.16")


def test_resolver_pivot_is_one_without_lookup() -> None:
    """The pivot resolves even when nothing is loaded."""
    resolver = RateResolver(RateTable())

    assert resolver.resolve("2025-03", Currency.GBP) == Decimal("1")
    assert resolver.resolve("latest", Currency.EUR) is None


def test_resolver_rejects_unknown_currency(record_factory) -> None:
    resolver = RateResolver(RateTable([record_factory("2025-03")]))

    with pytest.raises(ValueError):
        resolver.resolve("2025-03", "CHF")
