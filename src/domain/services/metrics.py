"""Derived metrics recomputed from converted breakdown totals."""

from decimal import Decimal
from typing import Mapping

from src.domain.constants import (
    INCOME,
    SAVINGS_FROM_INCOME,
    SAVINGS_RATE,
    SOURCE_OF_GROWTH_LABELS,
    TOTAL_GROWTH,
    TOTAL_INCOME,
)
from src.domain.models.finance import DerivedMetric

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def total_income(totals: Mapping[str, Decimal]) -> Decimal:
    return totals.get(INCOME, _ZERO)


def total_growth(totals: Mapping[str, Decimal]) -> Decimal:
    return sum(
        (totals.get(label, _ZERO) for label in SOURCE_OF_GROWTH_LABELS),
        _ZERO,
    )


def savings_rate(totals: Mapping[str, Decimal]) -> Decimal:
    """Return savings as a percentage of income.

    Args:
        totals: Converted label totals, possibly including ``Total Income``.

    Returns:
        Decimal: ``|savings| / income * 100``, or 0 without positive income.
    """
    income = totals.get(TOTAL_INCOME, total_income(totals))
    if income <= 0:
        return _ZERO
    return abs(totals.get(SAVINGS_FROM_INCOME, _ZERO)) / income * _HUNDRED


SOURCE_OF_GROWTH_METRICS = (
    DerivedMetric(TOTAL_INCOME, total_income),
    DerivedMetric(TOTAL_GROWTH, total_growth),
    DerivedMetric(SAVINGS_RATE, savings_rate),
)


__all__ = [
    "total_income",
    "total_growth",
    "savings_rate",
    "SOURCE_OF_GROWTH_METRICS",
]
