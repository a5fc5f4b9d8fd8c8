"""Domain services package."""

from .finance import Aggregator
from .fx import CurrencyConverter
from .metrics import SOURCE_OF_GROWTH_METRICS, savings_rate
from .rate_resolver import RateResolver
from .rate_table import RateTable

__all__ = [
    "Aggregator",
    "CurrencyConverter",
    "RateResolver",
    "RateTable",
    "SOURCE_OF_GROWTH_METRICS",
    "savings_rate",
]
