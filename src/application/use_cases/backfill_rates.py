"""Use case to backfill the rate store for a range of months."""

import asyncio
from dataclasses import dataclass, field

from src.application.ports.pricing_service import PricingServicePort
from src.application.ports.rate_store import RateStorePort
from src.application.use_cases.fx_utils import fetch_month_rates
from src.domain.models import RateRecord, RateSource
from src.infrastructure.logging.logger import get_app_logger
from src.utils.month_utils import (
    iter_month_keys,
    last_day_of_month,
    to_month_key,
)


@dataclass(frozen=True)
class BackfillRatesResult:
    """Result of a backfill run.

    Attributes:
        inserted_count: Months fetched and stored.
        skipped_count: Months already present in the store.
        failed_months: Months for which no complete rate set was fetched.
    """

    inserted_count: int
    skipped_count: int
    failed_months: list[str] = field(default_factory=list)


class BackfillRatesUseCase:
    """Fetch and store month-end rates for every month in a range."""

    def __init__(
        self,
        rate_store: RateStorePort,
        pricing_service: PricingServicePort,
        logger=None,
        request_delay: float = 0.5,
    ) -> None:
        """Initialize the use case.

        Args:
            rate_store: Store receiving the fetched rates.
            pricing_service: Remote service providing pair rates.
            logger: Optional logger compatible with logging.Logger-like API.
            request_delay: Seconds between requests to the service.
        """
        self._rate_store = rate_store
        self._pricing_service = pricing_service
        self._logger = logger or get_app_logger()
        self._request_delay = request_delay

    async def run(self, start_month: str, end_month: str) -> BackfillRatesResult:
        """Backfill rates from ``start_month`` to ``end_month`` inclusive.

        Args:
            start_month: First month (YYYY-MM).
            end_month: Last month (YYYY-MM).

        Returns:
            BackfillRatesResult: Counts of inserted and skipped months.

        Raises:
            ValueError: If a month is malformed or the range is reversed.
        """
        if to_month_key(start_month) > to_month_key(end_month):
            raise ValueError(
                f"Backfill start {start_month} is after end {end_month}"
            )
        await asyncio.to_thread(self._rate_store.prepare)
        inserted = 0
        skipped = 0
        failed: list[str] = []
        for month in iter_month_keys(start_month, end_month):
            rate_date = last_day_of_month(month)
            stored = await asyncio.to_thread(
                self._rate_store.fetch_by_date,
                rate_date,
            )
            if stored is not None:
                self._logger.info(f"Rates for {rate_date} already stored")
                skipped += 1
                continue

            rates = await fetch_month_rates(
                self._pricing_service,
                rate_date,
                self._request_delay,
                self._logger,
            )
            if self._request_delay > 0:
                await asyncio.sleep(self._request_delay)
            if rates is None:
                failed.append(month)
                continue
            record = RateRecord.from_rates(
                month,
                rate_date,
                rates,
                RateSource.REMOTE,
            )
            if await asyncio.to_thread(self._rate_store.save, record):
                inserted += 1
                self._logger.info(f"Stored rates for {rate_date}")
            else:
                skipped += 1

        self._logger.info(
            f"Backfill finished: inserted={inserted}, skipped={skipped}, "
            f"failed={len(failed)}"
        )
        return BackfillRatesResult(
            inserted_count=inserted,
            skipped_count=skipped,
            failed_months=failed,
        )


__all__ = ["BackfillRatesUseCase", "BackfillRatesResult"]
