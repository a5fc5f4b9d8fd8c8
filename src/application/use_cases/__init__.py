"""Application use cases package."""

from .backfill_rates import BackfillRatesResult, BackfillRatesUseCase
from .currency_session import CurrencySession
from .rate_provider import EnsureRatesResult, RateProvider

__all__ = [
    "BackfillRatesUseCase",
    "BackfillRatesResult",
    "CurrencySession",
    "EnsureRatesResult",
    "RateProvider",
]
