"""Domain models for currency-tagged amounts and their aggregates."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Mapping

from src.domain.models.currency import Currency
from src.utils.month_utils import to_month_key
from src.utils.decimal_utils import coerce_decimal


@dataclass(frozen=True)
class MonetaryAmount:
    """Non-negative amount tagged with its currency and direction.

    Attributes:
        value: Magnitude of the amount, never negative.
        currency: Currency the value is denominated in.
        is_liability: Whether the amount subtracts from totals.
        label: Optional account or line-item name.
    """

    value: Decimal
    currency: Currency
    is_liability: bool = False
    label: str | None = None

    def __post_init__(self) -> None:
        value = coerce_decimal(self.value)
        if not value.is_finite():
            raise ValueError(f"Amount must be finite, got {value}")
        if value < 0:
            raise ValueError(
                f"Amount must be non-negative, got {value}; "
                "use is_liability for direction"
            )
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "currency", Currency.parse(self.currency))

    @property
    def signed_value(self) -> Decimal:
        return -self.value if self.is_liability else self.value


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a single conversion.

    Attributes:
        value: Converted value, or the original value when not converted.
        currency: Currency ``value`` is denominated in.
        converted: False when a rate was missing and the input was returned.
        stale: True when a substitute rate record was used.
    """

    value: Decimal
    currency: Currency
    converted: bool = True
    stale: bool = False


@dataclass(frozen=True)
class ConvertedAmount:
    """Leaf amount after conversion into the display currency."""

    value: Decimal
    currency: Currency
    is_liability: bool = False
    label: str | None = None
    converted: bool = True
    stale: bool = False

    @property
    def signed_value(self) -> Decimal:
        return -self.value if self.is_liability else self.value


@dataclass(frozen=True)
class Breakdown:
    """Labelled amounts for a single month.

    Attributes:
        month: Month key the amounts belong to.
        entries: Amounts per label, e.g. ``{"Capital Gains": [...]}``.
    """

    month: str
    entries: Mapping[str, list[MonetaryAmount]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "month", to_month_key(self.month))
        object.__setattr__(
            self,
            "entries",
            {label: list(amounts) for label, amounts in self.entries.items()},
        )


@dataclass(frozen=True)
class DerivedMetric:
    """Figure computed from the converted totals of a breakdown."""

    name: str
    compute: Callable[[Mapping[str, Decimal]], Decimal]


@dataclass(frozen=True)
class ConvertedBreakdown:
    """Breakdown converted into a display currency.

    Attributes:
        month: Month key of the source breakdown.
        currency_code: Display currency.
        entries: Converted leaves per label.
        totals: Signed sum of converted leaves per label.
        metrics: Derived figures recomputed from ``totals``.
        approximate: At least one leaf kept its original currency.
        stale: At least one leaf used a substitute rate record.
    """

    month: str
    currency_code: str
    entries: dict[str, list[ConvertedAmount]]
    totals: dict[str, Decimal]
    metrics: dict[str, Decimal] = field(default_factory=dict)
    approximate: bool = False
    stale: bool = False

    def value(self, name: str) -> Decimal:
        """Return a label total or a derived metric by name."""
        if name in self.metrics:
            return self.metrics[name]
        return self.totals.get(name, Decimal("0"))


@dataclass(frozen=True)
class NetWorthSummary:
    """Summary of net worth figures.

    Attributes:
        asset_total: Sum of asset balances.
        liability_total: Sum of liability balances.
        net_worth: Assets minus liabilities.
        currency_code: Display currency.
        approximate: At least one balance kept its original currency.
        stale: At least one balance used a substitute rate record.
    """

    asset_total: Decimal
    liability_total: Decimal
    net_worth: Decimal
    currency_code: str
    approximate: bool = False
    stale: bool = False


@dataclass(frozen=True)
class NetWorthPoint:
    """Net worth summary for one month of a series."""

    month: str
    summary: NetWorthSummary


@dataclass(frozen=True)
class CompositionShare:
    """Converted amount and its share of the composition."""

    label: str
    amount: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class PercentageComposition:
    """Percentage view of labelled balances for one month."""

    month: str
    currency_code: str
    shares: list[CompositionShare]
    approximate: bool = False
    stale: bool = False

    def percentage(self, label: str) -> Decimal:
        for share in self.shares:
            if share.label == label:
                return share.percentage
        raise KeyError(label)


__all__ = [
    "MonetaryAmount",
    "ConversionResult",
    "ConvertedAmount",
    "Breakdown",
    "DerivedMetric",
    "ConvertedBreakdown",
    "NetWorthSummary",
    "NetWorthPoint",
    "CompositionShare",
    "PercentageComposition",
]
