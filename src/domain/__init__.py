"""Domain package for business rules and core models."""

from .constants import SOURCE_OF_GROWTH_LABELS
from .models import (
    PIVOT_CURRENCY,
    Breakdown,
    ConversionResult,
    ConvertedBreakdown,
    Currency,
    MonetaryAmount,
    NetWorthSummary,
    PercentageComposition,
    RateRecord,
    RateSource,
)
from .services import (
    SOURCE_OF_GROWTH_METRICS,
    Aggregator,
    CurrencyConverter,
    RateResolver,
    RateTable,
)

__all__ = [
    "PIVOT_CURRENCY",
    "SOURCE_OF_GROWTH_LABELS",
    "SOURCE_OF_GROWTH_METRICS",
    "Aggregator",
    "Breakdown",
    "ConversionResult",
    "ConvertedBreakdown",
    "Currency",
    "CurrencyConverter",
    "MonetaryAmount",
    "NetWorthSummary",
    "PercentageComposition",
    "RateRecord",
    "RateResolver",
    "RateSource",
    "RateTable",
]
