"""Use case that loads missing monthly rates into a rate table."""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from src.application.ports.pricing_service import PricingServicePort
from src.application.ports.rate_store import RateStorePort
from src.application.use_cases.fx_utils import fetch_month_rates
from src.domain.models import RateRecord, RateSource
from src.domain.services.rate_table import RateTable
from src.infrastructure.logging.logger import get_app_logger
from src.utils.month_utils import LATEST_MONTH, last_day_of_month, to_month_key


@dataclass(frozen=True)
class EnsureRatesResult:
    """Outcome of an ``ensure`` call.

    Attributes:
        resolved: Requested months now backed by an exact record.
        substituted: Requested months backed by an earlier date's rates.
        failed: Requested months still missing from the table.
    """

    resolved: tuple[str, ...] = ()
    substituted: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()


class RateProvider:
    """Populate a rate table from the rate store and the pricing service.

    Each missing month is loaded by one task; concurrent callers asking for
    the same month await that task instead of starting another fetch.
    Store calls run in worker threads so months load concurrently.
    """

    def __init__(
        self,
        table: RateTable,
        rate_store: RateStorePort,
        pricing_service: PricingServicePort,
        logger=None,
        request_delay: float = 0.5,
        allow_substitute: bool = True,
    ) -> None:
        """Initialize the provider.

        Args:
            table: Rate table to populate.
            rate_store: Durable store queried before the pricing service.
            pricing_service: Remote service used when the store has nothing.
            logger: Optional logger compatible with logging.Logger-like API.
            request_delay: Seconds between pair requests to the service.
            allow_substitute: Whether an earlier stored month may stand in
                for a missing one.
        """
        self._table = table
        self._rate_store = rate_store
        self._pricing_service = pricing_service
        self._logger = logger or get_app_logger()
        self._request_delay = request_delay
        self._allow_substitute = allow_substitute
        self._in_flight: dict[str, asyncio.Task] = {}
        self._latest_loaded = False

    async def ensure(self, months: Iterable[str]) -> EnsureRatesResult:
        """Load every requested month that is not in the table yet.

        Args:
            months: Month keys, date strings or ``latest``.

        Returns:
            EnsureRatesResult: Per-month outcome after loading.
        """
        keys = list(dict.fromkeys(to_month_key(month) for month in months))
        pending = [key for key in keys if self._needs_load(key)]
        if not pending:
            self._logger.debug(f"Rates already loaded for {keys}")
            return self._summarize(keys)

        tasks = [self._task_for(key) for key in pending]
        await asyncio.gather(*(asyncio.shield(task) for task in tasks))
        return self._summarize(keys)

    def in_flight(self) -> list[str]:
        return sorted(self._in_flight)

    def _needs_load(self, key: str) -> bool:
        if key == LATEST_MONTH:
            return not self._latest_loaded
        return key not in self._table

    def _task_for(self, key: str) -> asyncio.Task:
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.get_running_loop().create_task(self._load(key))
            self._in_flight[key] = task
            task.add_done_callback(
                lambda _, key=key: self._in_flight.pop(key, None)
            )
        return task

    async def _load(self, key: str) -> RateRecord | None:
        if key == LATEST_MONTH:
            return await self._load_latest()

        rate_date = last_day_of_month(key)
        record = await self._load_from_store(key, rate_date)
        if record is None:
            record = await self._load_from_service(key, rate_date)
        if record is None:
            self._logger.warning(f"No exchange rates available for {key}")
            return None
        self._table.merge([record])
        return record

    async def _load_latest(self) -> RateRecord | None:
        record, ok = await self._call_store(
            "latest rate lookup",
            self._rate_store.fetch_latest,
        )
        if ok:
            self._latest_loaded = True
        if record is not None:
            self._table.merge([record])
        return record

    async def _load_from_store(
        self,
        key: str,
        rate_date: date,
    ) -> RateRecord | None:
        exact, _ = await self._call_store(
            f"rate lookup for {rate_date}",
            self._rate_store.fetch_by_date,
            rate_date,
        )
        if exact is not None:
            return exact.with_source(key, RateSource.EXACT)

        same_month, _ = await self._call_store(
            f"month rate lookup for {key}",
            self._rate_store.fetch_by_month,
            key,
        )
        if same_month is not None:
            self._logger.info(
                f"Using rates stored on {same_month.rate_date} for {key}"
            )
            return same_month.with_source(key, RateSource.SAME_MONTH)

        if not self._allow_substitute:
            return None
        prior, _ = await self._call_store(
            f"prior rate lookup for {key}",
            self._rate_store.fetch_latest_before,
            rate_date.replace(day=1),
        )
        if prior is not None:
            self._logger.warning(
                f"Substituting rates from {prior.rate_date} for {key}"
            )
            return prior.with_source(key, RateSource.SUBSTITUTE)
        return None

    async def _load_from_service(
        self,
        key: str,
        rate_date: date,
    ) -> RateRecord | None:
        try:
            rates = await fetch_month_rates(
                self._pricing_service,
                rate_date,
                self._request_delay,
                self._logger,
            )
        except OSError as exc:
            self._logger.error(f"Pricing service failed for {key}: {exc}")
            return None
        if rates is None:
            return None

        record = RateRecord.from_rates(key, rate_date, rates, RateSource.REMOTE)
        _, ok = await self._call_store(
            f"saving rates for {rate_date}",
            self._rate_store.save,
            record,
        )
        if ok:
            self._logger.info(f"Fetched and stored rates for {rate_date}")
        return record

    async def _call_store(self, description: str, func: Callable, *args):
        """Run a blocking store call in a worker thread.

        Returns:
            tuple: The call result (None on failure) and whether it succeeded.
        """
        try:
            return await asyncio.to_thread(func, *args), True
        except SQLAlchemyError as exc:
            self._logger.error(f"Rate store failed during {description}: {exc}")
            return None, False

    def _summarize(self, keys: list[str]) -> EnsureRatesResult:
        resolved: list[str] = []
        substituted: list[str] = []
        failed: list[str] = []
        for key in keys:
            if key == LATEST_MONTH:
                record = self._table.latest()
            else:
                record = self._table.get(key)
            if record is None:
                failed.append(key)
            elif record.is_substitute:
                substituted.append(key)
            else:
                resolved.append(key)
        return EnsureRatesResult(
            resolved=tuple(resolved),
            substituted=tuple(substituted),
            failed=tuple(failed),
        )


__all__ = ["RateProvider", "EnsureRatesResult"]
