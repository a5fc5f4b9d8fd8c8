"""Domain models package."""

from .currency import PIVOT_CURRENCY, Currency, RateRecord, RateSource
from .finance import (
    Breakdown,
    CompositionShare,
    ConversionResult,
    ConvertedAmount,
    ConvertedBreakdown,
    DerivedMetric,
    MonetaryAmount,
    NetWorthPoint,
    NetWorthSummary,
    PercentageComposition,
)

__all__ = [
    "PIVOT_CURRENCY",
    "Currency",
    "RateRecord",
    "RateSource",
    "Breakdown",
    "CompositionShare",
    "ConversionResult",
    "ConvertedAmount",
    "ConvertedBreakdown",
    "DerivedMetric",
    "MonetaryAmount",
    "NetWorthPoint",
    "NetWorthSummary",
    "PercentageComposition",
]
