"""Aggregation of currency-tagged amounts into display-currency views."""

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from src.domain.models import (
    Breakdown,
    CompositionShare,
    ConvertedAmount,
    ConvertedBreakdown,
    Currency,
    DerivedMetric,
    MonetaryAmount,
    NetWorthPoint,
    NetWorthSummary,
    PercentageComposition,
)
from src.domain.services.fx import CurrencyConverter
from src.utils.month_utils import to_month_key

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


class Aggregator:
    """Reduce converted amounts into totals, breakdowns and percentages.

    Every figure is derived from amounts converted for their own month;
    ratios are always recomputed after conversion.
    """

    def __init__(self, converter: CurrencyConverter) -> None:
        self._converter = converter

    def convert_amount(
        self,
        amount: MonetaryAmount,
        target_currency: Currency | str,
        month: str,
    ) -> ConvertedAmount:
        """Convert one amount, keeping its liability flag and label.

        Args:
            amount: Amount to convert.
            target_currency: Display currency.
            month: Month whose rates apply.

        Returns:
            ConvertedAmount: Converted leaf with availability flags.
        """
        result = self._converter.convert(
            amount.value,
            amount.currency,
            target_currency,
            month,
        )
        return ConvertedAmount(
            value=result.value,
            currency=result.currency,
            is_liability=amount.is_liability,
            label=amount.label,
            converted=result.converted,
            stale=result.stale,
        )

    def net_worth_summary(
        self,
        amounts: Iterable[MonetaryAmount],
        target_currency: Currency | str,
        month: str,
    ) -> NetWorthSummary:
        """Convert balances and apply the liability sign rule.

        Args:
            amounts: Balances for a single month.
            target_currency: Display currency.
            month: Month whose rates apply.

        Returns:
            NetWorthSummary: Asset, liability and net totals.
        """
        target = Currency.parse(target_currency)
        asset_total = _ZERO
        liability_total = _ZERO
        approximate = False
        stale = False
        for amount in amounts:
            converted = self.convert_amount(amount, target, month)
            approximate = approximate or not converted.converted
            stale = stale or converted.stale
            if converted.is_liability:
                liability_total += converted.value
            else:
                asset_total += converted.value
        return NetWorthSummary(
            asset_total=asset_total,
            liability_total=liability_total,
            net_worth=asset_total - liability_total,
            currency_code=target.value,
            approximate=approximate,
            stale=stale,
        )

    def net_worth_series(
        self,
        points: Iterable[tuple[str, Iterable[MonetaryAmount]]],
        target_currency: Currency | str,
    ) -> list[NetWorthPoint]:
        """Summarize each month of a balance history independently."""
        series = []
        for month, amounts in points:
            key = to_month_key(month)
            series.append(
                NetWorthPoint(
                    month=key,
                    summary=self.net_worth_summary(amounts, target_currency, key),
                )
            )
        return series

    def convert_breakdown(
        self,
        breakdown: Breakdown,
        target_currency: Currency | str,
        metrics: Sequence[DerivedMetric] = (),
    ) -> ConvertedBreakdown:
        """Convert every leaf, re-sum labels and recompute metrics.

        Args:
            breakdown: Labelled amounts for one month.
            target_currency: Display currency.
            metrics: Derived figures evaluated in order over the converted
                totals; later metrics can read earlier ones.

        Returns:
            ConvertedBreakdown: Converted leaves, totals and metrics.
        """
        target = Currency.parse(target_currency)
        entries: dict[str, list[ConvertedAmount]] = {}
        totals: dict[str, Decimal] = {}
        approximate = False
        stale = False
        for label, amounts in breakdown.entries.items():
            converted = [
                self.convert_amount(amount, target, breakdown.month)
                for amount in amounts
            ]
            entries[label] = converted
            totals[label] = sum(
                (item.signed_value for item in converted),
                _ZERO,
            )
            approximate = approximate or any(
                not item.converted for item in converted
            )
            stale = stale or any(item.stale for item in converted)

        scope = dict(totals)
        computed: dict[str, Decimal] = {}
        for metric in metrics:
            value = metric.compute(scope)
            scope[metric.name] = value
            computed[metric.name] = value

        return ConvertedBreakdown(
            month=breakdown.month,
            currency_code=target.value,
            entries=entries,
            totals=totals,
            metrics=computed,
            approximate=approximate,
            stale=stale,
        )

    def convert_series(
        self,
        breakdowns: Iterable[Breakdown],
        target_currency: Currency | str,
        metrics: Sequence[DerivedMetric] = (),
    ) -> list[ConvertedBreakdown]:
        """Convert each breakdown with its own month's rates."""
        return [
            self.convert_breakdown(breakdown, target_currency, metrics)
            for breakdown in breakdowns
        ]

    def percentage_composition(
        self,
        entries: Mapping[str, Iterable[MonetaryAmount]],
        target_currency: Currency | str,
        month: str,
    ) -> PercentageComposition:
        """Express each label as a share of the converted whole.

        The denominator is the sum of absolute converted label totals, so
        shares of assets and liabilities together span 100 in magnitude.

        Args:
            entries: Amounts per label (account, account type, category).
            target_currency: Display currency.
            month: Month whose rates apply.

        Returns:
            PercentageComposition: Converted amount and percentage per label.
        """
        breakdown = self.convert_breakdown(
            Breakdown(month=month, entries=dict(entries)),
            target_currency,
        )
        denominator = sum(
            (abs(total) for total in breakdown.totals.values()),
            _ZERO,
        )
        shares = [
            CompositionShare(
                label=label,
                amount=total,
                percentage=(
                    total / denominator * _HUNDRED if denominator else _ZERO
                ),
            )
            for label, total in breakdown.totals.items()
        ]
        return PercentageComposition(
            month=breakdown.month,
            currency_code=breakdown.currency_code,
            shares=shares,
            approximate=breakdown.approximate,
            stale=breakdown.stale,
        )


__all__ = ["Aggregator"]
