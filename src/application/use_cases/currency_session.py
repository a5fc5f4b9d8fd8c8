"""Per-session facade over rate loading, conversion and aggregation."""

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from src.application.ports.pricing_service import PricingServicePort
from src.application.ports.rate_store import RateStorePort
from src.application.use_cases.rate_provider import (
    EnsureRatesResult,
    RateProvider,
)
from src.domain.models import (
    Breakdown,
    ConversionResult,
    ConvertedBreakdown,
    Currency,
    DerivedMetric,
    MonetaryAmount,
    NetWorthPoint,
    NetWorthSummary,
    PercentageComposition,
    RateRecord,
)
from src.domain.services import (
    Aggregator,
    CurrencyConverter,
    RateResolver,
    RateTable,
)
from src.infrastructure.logging.logger import get_app_logger


class CurrencySession:
    """Rates and conversions scoped to one client session or request.

    ``ensure`` is the only coroutine and the only method that changes
    state; every other method reads whatever rates are loaded at call time.
    """

    def __init__(
        self,
        rate_store: RateStorePort,
        pricing_service: PricingServicePort,
        initial_records: Iterable[RateRecord] = (),
        logger=None,
        request_delay: float = 0.5,
        allow_substitute: bool = True,
    ) -> None:
        """Initialize the session.

        Args:
            rate_store: Durable rate store.
            pricing_service: Remote pricing service.
            initial_records: Records already known to the caller.
            logger: Optional logger compatible with logging.Logger-like API.
            request_delay: Seconds between pair requests to the service.
            allow_substitute: Whether earlier months may stand in for
                missing ones.
        """
        self._logger = logger or get_app_logger()
        self.table = RateTable(initial_records)
        self.resolver = RateResolver(self.table)
        self.provider = RateProvider(
            self.table,
            rate_store,
            pricing_service,
            logger=self._logger,
            request_delay=request_delay,
            allow_substitute=allow_substitute,
        )
        self.converter = CurrencyConverter(self.resolver, logger=self._logger)
        self.aggregator = Aggregator(self.converter)

    async def ensure(self, months: Iterable[str]) -> EnsureRatesResult:
        return await self.provider.ensure(months)

    def get_rate(self, month: str, currency: Currency | str) -> Decimal | None:
        return self.resolver.resolve(month, currency)

    def convert_amount(
        self,
        amount,
        from_currency: Currency | str,
        to_currency: Currency | str,
        month: str,
    ) -> ConversionResult:
        return self.converter.convert(amount, from_currency, to_currency, month)

    def convert_balances(
        self,
        amounts: Iterable[MonetaryAmount],
        to_currency: Currency | str,
        month: str,
    ) -> NetWorthSummary:
        return self.aggregator.net_worth_summary(amounts, to_currency, month)

    def convert_breakdown(
        self,
        breakdown: Breakdown,
        to_currency: Currency | str,
        metrics: Sequence[DerivedMetric] = (),
    ) -> ConvertedBreakdown:
        return self.aggregator.convert_breakdown(breakdown, to_currency, metrics)

    def convert_series(
        self,
        breakdowns: Iterable[Breakdown],
        to_currency: Currency | str,
        metrics: Sequence[DerivedMetric] = (),
    ) -> list[ConvertedBreakdown]:
        return self.aggregator.convert_series(breakdowns, to_currency, metrics)

    def net_worth_series(
        self,
        points: Iterable[tuple[str, Iterable[MonetaryAmount]]],
        to_currency: Currency | str,
    ) -> list[NetWorthPoint]:
        return self.aggregator.net_worth_series(points, to_currency)

    def percentage_composition(
        self,
        entries: Mapping[str, Iterable[MonetaryAmount]],
        to_currency: Currency | str,
        month: str,
    ) -> PercentageComposition:
        return self.aggregator.percentage_composition(
            entries,
            to_currency,
            month,
        )


__all__ = ["CurrencySession"]
