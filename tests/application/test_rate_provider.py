"""Tests for the RateProvider ensure boundary."""

import asyncio
from datetime import date
import threading
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError

from src.application.use_cases.rate_provider import RateProvider
from src.domain.models import Currency, RateRecord, RateSource
from src.domain.services import RateTable
from src.infrastructure.rate_store_repository import SqlAlchemyRateStore


class _FakeRateStore:
    def __init__(self, records=(), fail: bool = False) -> None:
        self.records = {record.rate_date: record for record in records}
        self.fail = fail
        self.calls: list[tuple[str, object]] = []
        self.saved: list[RateRecord] = []

    def _check(self, name: str, arg) -> None:
        self.calls.append((name, arg))
        if self.fail:
            raise OperationalError("SELECT", {}, Exception("store down"))

    def prepare(self) -> None:
        pass

    def fetch_by_date(self, rate_date):
        self._check("by_date", rate_date)
        return self.records.get(rate_date)

    def fetch_by_month(self, month):
        self._check("by_month", month)
        matches = [
            record
            for rate_date, record in self.records.items()
            if rate_date.strftime("%Y-%m") == month
        ]
        return max(matches, key=lambda r: r.rate_date) if matches else None

    def fetch_latest_before(self, rate_date):
        self._check("before", rate_date)
        matches = [r for d, r in self.records.items() if d < rate_date]
        return max(matches, key=lambda r: r.rate_date) if matches else None

    def fetch_latest(self):
        self._check("latest", None)
        if not self.records:
            return None
        return self.records[max(self.records)]

    def save(self, record):
        self._check("save", record.rate_date)
        self.saved.append(record)
        self.records[record.rate_date] = record
        return True


class _FakePricingService:
    def __init__(self, rates=None, gate: asyncio.Event | None = None) -> None:
        self.rates = rates if rates is not None else {
            Currency.EUR: Decimal("1.20"),
            Currency.USD: Decimal("1.25"),
            Currency.AED: Decimal("4.60"),
        }
        self.gate = gate
        self.calls: list[tuple[Currency, Currency, date]] = []

    async def fetch_pair_rate(self, base, target, rate_date):
        self.calls.append((base, target, rate_date))
        if self.gate is not None:
            await self.gate.wait()
        return self.rates.get(target)


def _stored(rate_date: date, eur: str = "1.15") -> RateRecord:
    return RateRecord.from_rates(
        rate_date.strftime("%Y-%m"),
        rate_date,
        {
            Currency.EUR: Decimal(eur),
            Currency.USD: Decimal("1.27"),
            Currency.AED: Decimal("4.66"),
        },
        RateSource.EXACT,
    )


async def _wait_until(condition, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition():
        assert loop.time() < deadline, "condition not reached"
        await asyncio.sleep(0.005)


def _provider(store, pricing, table=None, **kwargs):
    return RateProvider(
        table if table is not None else RateTable(),
        store,
        pricing,
        logger=MagicMock(),
        request_delay=0,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_ensure_uses_exact_store_record() -> None:
    """The month-end row is used without calling the pricing service."""
    store = _FakeRateStore([_stored(date(2025, 3, 31))])
    pricing = _FakePricingService()
    table = RateTable()

    result = await _provider(store, pricing, table).ensure(["2025-03"])

    assert result.resolved == ("2025-03",)
    assert table.get("2025-03").source is RateSource.EXACT
    assert table.get("2025-03").rate_date == date(2025, 3, 31)
    assert pricing.calls == []


@pytest.mark.asyncio
async def test_ensure_falls_back_to_same_month_record() -> None:
    """Stores keyed by trading days still serve the month."""
    store = _FakeRateStore([_stored(date(2025, 5, 30))])
    table = RateTable()

    await _provider(store, _FakePricingService(), table).ensure(["2025-05"])

    record = table.get("2025-05")
    assert record.source is RateSource.SAME_MONTH
    assert record.rate_date == date(2025, 5, 30)


@pytest.mark.asyncio
async def test_ensure_substitutes_prior_month_and_flags_it() -> None:
    store = _FakeRateStore([_stored(date(2024, 12, 31), eur="1.19")])
    pricing = _FakePricingService()
    table = RateTable()
    provider = _provider(store, pricing, table)

    result = await provider.ensure(["2025-01"])

    record = table.get("2025-01")
    assert result.substituted == ("2025-01",)
    assert record.is_substitute
    assert record.rate_date == date(2024, 12, 31)
    assert record.rate_for(Currency.EUR) == Decimal("1.19")
    assert pricing.calls == []
    provider._logger.warning.assert_called()


@pytest.mark.asyncio
async def test_substitute_can_be_disabled() -> None:
    store = _FakeRateStore([_stored(date(2024, 12, 31))])
    pricing = _FakePricingService()
    table = RateTable()

    await _provider(
        store,
        pricing,
        table,
        allow_substitute=False,
    ).ensure(["2025-01"])

    assert table.get("2025-01").source is RateSource.REMOTE
    assert len(pricing.calls) == 3


@pytest.mark.asyncio
async def test_ensure_fetches_remotely_and_persists() -> None:
    """All non-pivot pairs are fetched at month end and stored."""
    store = _FakeRateStore()
    pricing = _FakePricingService()
    table = RateTable()

    result = await _provider(store, pricing, table).ensure(["2024-02"])

    assert result.resolved == ("2024-02",)
    assert pricing.calls == [
        (Currency.GBP, Currency.EUR, date(2024, 2, 29)),
        (Currency.GBP, Currency.USD, date(2024, 2, 29)),
        (Currency.GBP, Currency.AED, date(2024, 2, 29)),
    ]
    assert [record.rate_date for record in store.saved] == [date(2024, 2, 29)]
    assert table.get("2024-02").rate_for(Currency.USD) == Decimal("1.25")


@pytest.mark.asyncio
async def test_partial_remote_rates_are_discarded() -> None:
    """A month is only cached when every currency resolves."""
    store = _FakeRateStore()
    pricing = _FakePricingService(
        rates={Currency.EUR: Decimal("1.2"), Currency.USD: Decimal("1.3")}
    )
    table = RateTable()
    provider = _provider(store, pricing, table)

    result = await provider.ensure(["2025-03"])

    assert result.failed == ("2025-03",)
    assert "2025-03" not in table
    assert store.saved == []

    pricing.rates[Currency.AED] = Decimal("4.7")
    retried = await provider.ensure(["2025-03"])

    assert retried.resolved == ("2025-03",)
    assert len(pricing.calls) == 6


@pytest.mark.asyncio
async def test_second_ensure_is_a_no_op() -> None:
    """Months already in the table cause no store or remote request."""
    store = _FakeRateStore()
    pricing = _FakePricingService()
    provider = _provider(store, pricing)

    await provider.ensure(["2025-03"])
    store_calls = len(store.calls)
    remote_calls = len(pricing.calls)
    await provider.ensure(["2025-03", "2025-03-31"])

    assert len(store.calls) == store_calls
    assert len(pricing.calls) == remote_calls == 3


@pytest.mark.asyncio
async def test_seeded_months_are_not_fetched(record_factory) -> None:
    store = _FakeRateStore()
    pricing = _FakePricingService()
    table = RateTable([record_factory("2025-03", source=RateSource.SEEDED)])

    result = await _provider(store, pricing, table).ensure(["2025-03"])

    assert result.resolved == ("2025-03",)
    assert store.calls == []
    assert pricing.calls == []


@pytest.mark.asyncio
async def test_concurrent_ensures_share_one_fetch() -> None:
    """Overlapping callers await the same in-flight month."""
    gate = asyncio.Event()
    store = _FakeRateStore()
    pricing = _FakePricingService(gate=gate)
    provider = _provider(store, pricing)

    first = asyncio.create_task(provider.ensure(["2025-03"]))
    second = asyncio.create_task(provider.ensure(["2025-03", "2025-03-15"]))
    await asyncio.sleep(0)
    assert provider.in_flight() == ["2025-03"]
    gate.set()
    results = await asyncio.gather(first, second)

    assert [result.resolved for result in results] == [
        ("2025-03",),
        ("2025-03",),
    ]
    assert len(pricing.calls) == 3
    assert len(store.saved) == 1
    assert provider.in_flight() == []


@pytest.mark.asyncio
async def test_months_in_one_call_are_fetched_concurrently() -> None:
    gate = asyncio.Event()
    pricing = _FakePricingService(gate=gate)
    provider = _provider(_FakeRateStore(), pricing)

    pending = asyncio.create_task(provider.ensure(["2025-01", "2025-02"]))
    await _wait_until(lambda: len(pricing.calls) == 2)

    assert provider.in_flight() == ["2025-01", "2025-02"]
    assert {call[2] for call in pricing.calls} == {
        date(2025, 1, 31),
        date(2025, 2, 28),
    }
    gate.set()
    result = await pending
    assert result.resolved == ("2025-01", "2025-02")


@pytest.mark.asyncio
async def test_cancelled_caller_does_not_cancel_fetch() -> None:
    """Abandoned ensures still populate the table for later callers."""
    gate = asyncio.Event()
    pricing = _FakePricingService(gate=gate)
    table = RateTable()
    provider = _provider(_FakeRateStore(), pricing, table)

    caller = asyncio.create_task(provider.ensure(["2025-03"]))
    await asyncio.sleep(0)
    caller.cancel()
    with pytest.raises(asyncio.CancelledError):
        await caller

    gate.set()
    await _wait_until(lambda: not provider.in_flight())

    assert "2025-03" in table


@pytest.mark.asyncio
async def test_store_failure_is_logged_and_remote_used() -> None:
    """Store connectivity errors never escape the provider."""
    store = _FakeRateStore(fail=True)
    pricing = _FakePricingService()
    table = RateTable()
    provider = _provider(store, pricing, table)

    result = await provider.ensure(["2025-03"])

    assert result.resolved == ("2025-03",)
    assert table.get("2025-03").source is RateSource.REMOTE
    provider._logger.error.assert_called()


@pytest.mark.asyncio
async def test_total_failure_leaves_month_unresolved() -> None:
    store = _FakeRateStore(fail=True)
    pricing = _FakePricingService(rates={})
    table = RateTable()

    result = await _provider(store, pricing, table).ensure(["2025-03"])

    assert result.failed == ("2025-03",)
    assert len(table) == 0


@pytest.mark.asyncio
async def test_latest_loads_most_recent_stored_record_once() -> None:
    store = _FakeRateStore(
        [_stored(date(2025, 8, 31)), _stored(date(2025, 9, 30), eur="1.17")]
    )
    table = RateTable()
    provider = _provider(store, _FakePricingService(), table)

    result = await provider.ensure(["latest"])
    await provider.ensure(["latest"])

    assert result.resolved == ("latest",)
    assert table.months() == ["2025-09"]
    assert [name for name, _ in store.calls] == ["latest"]


@pytest.mark.asyncio
async def test_ensure_rejects_malformed_month() -> None:
    provider = _provider(_FakeRateStore(), _FakePricingService())

    with pytest.raises(ValueError):
        await provider.ensure(["March 2025"])


class _SqliteDbPort:
    def __init__(self, url: str) -> None:
        self.engine = create_engine(url, future=True)

    def get_rates_engine(self):
        return self.engine


class _BarrierRateStore(_FakeRateStore):
    """Store whose date lookups only return once every month is querying."""

    def __init__(self, parties: int) -> None:
        super().__init__()
        self.barrier = threading.Barrier(parties, timeout=2)

    def fetch_by_date(self, rate_date):
        self.barrier.wait()
        return super().fetch_by_date(rate_date)


@pytest.mark.asyncio
async def test_store_lookups_overlap_across_months() -> None:
    """Blocking store calls for different months run side by side."""
    store = _BarrierRateStore(parties=3)
    table = RateTable()
    provider = _provider(store, _FakePricingService(), table)

    result = await provider.ensure(["2025-01", "2025-02", "2025-03"])

    assert result.resolved == ("2025-01", "2025-02", "2025-03")
    assert len(store.saved) == 3


@pytest.mark.asyncio
async def test_invalid_stored_row_falls_through_to_remote(tmp_path) -> None:
    """A stored row with a non-positive rate never escapes ensure."""
    db_port = _SqliteDbPort(f"sqlite:///{tmp_path / 'rates.db'}")
    store = SqlAlchemyRateStore(db_port, logger=MagicMock())
    store.prepare()
    with db_port.engine.begin() as conn:
        conn.execute(
            text(
                "INSERT INTO exchange_rates "
                "(date, gbp_rate, eur_rate, usd_rate, aed_rate) "
                "VALUES ('2025-03-31', 1, 0, 1.25, 4.6)"
            )
        )
    pricing = _FakePricingService()
    table = RateTable()

    result = await _provider(store, pricing, table).ensure(["2025-03"])

    assert result.resolved == ("2025-03",)
    assert table.get("2025-03").source is RateSource.REMOTE
    assert table.get("2025-03").rate_for(Currency.EUR) == Decimal("1.20")
    assert len(pricing.calls) == 3
    store._logger.error.assert_called()
    db_port.engine.dispose()
