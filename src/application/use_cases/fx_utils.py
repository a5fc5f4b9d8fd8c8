"""Shared helpers for fetching monthly rates in application use cases."""

import asyncio
from datetime import date
from decimal import Decimal

from src.application.ports.pricing_service import PricingServicePort
from src.domain.models import PIVOT_CURRENCY, Currency


def non_pivot_currencies() -> tuple[Currency, ...]:
    """Return the currencies that need a remote rate, in enum order."""
    return tuple(currency for currency in Currency if currency is not PIVOT_CURRENCY)


async def fetch_month_rates(
    pricing_service: PricingServicePort,
    rate_date: date,
    request_delay: float,
    logger,
) -> dict[Currency, Decimal] | None:
    """Fetch every non-pivot rate for a date, one pair at a time.

    Args:
        pricing_service: Remote pricing service.
        rate_date: Observation date (last day of the month).
        request_delay: Seconds to wait between pair requests.
        logger: Logger used for warnings.

    Returns:
        dict[Currency, Decimal] | None: Rates per currency, or None when any
        pair is unavailable.
    """
    rates: dict[Currency, Decimal] = {}
    currencies = non_pivot_currencies()
    for index, currency in enumerate(currencies):
        if index and request_delay > 0:
            await asyncio.sleep(request_delay)
        rate = await pricing_service.fetch_pair_rate(
            PIVOT_CURRENCY,
            currency,
            rate_date,
        )
        if rate is None:
            logger.warning(
                f"No {PIVOT_CURRENCY.value}/{currency.value} rate for {rate_date}"
            )
            continue
        rates[currency] = rate
    if len(rates) != len(currencies):
        logger.warning(
            f"Discarding partial rates for {rate_date}: "
            f"{len(rates)}/{len(currencies)} pairs resolved"
        )
        return None
    return rates


__all__ = ["non_pivot_currencies", "fetch_month_rates"]
