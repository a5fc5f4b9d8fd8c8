"""Currency and exchange-rate domain models."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Mapping

from src.utils.decimal_utils import coerce_decimal


class Currency(str, Enum):
    """Currencies supported by the dashboard."""

    GBP = "GBP"
    EUR = "EUR"
    USD = "USD"
    AED = "AED"

    @classmethod
    def parse(cls, value: "Currency | str") -> "Currency":
        """Return the enum member for a currency code.

        Args:
            value: Currency member or ISO code in any case.

        Returns:
            Currency: Matching enum member.

        Raises:
            ValueError: If the code is not a supported currency.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unsupported currency: {value!r}")
        cleaned = value.strip().upper()
        try:
            return cls(cleaned)
        except ValueError:
            raise ValueError(f"Unsupported currency: {value!r}") from None

    @property
    def rate_column(self) -> str:
        """Column name holding this currency's rate in the rate store."""
        return f"{self.value.lower()}_rate"


PIVOT_CURRENCY = Currency.GBP


class RateSource(str, Enum):
    """Origin of a rate record."""

    SEEDED = "seeded"
    EXACT = "exact"
    SAME_MONTH = "same_month"
    SUBSTITUTE = "substitute"
    REMOTE = "remote"


@dataclass(frozen=True)
class RateRecord:
    """Rates for one month, expressed as ``1 pivot = X currency``.

    Attributes:
        month: Month key (YYYY-MM) the record is filed under.
        rates: Rate per currency; the pivot is exactly 1.
        rate_date: Date of the underlying observation.
        source: Where the record came from.
    """

    month: str
    rates: Mapping[Currency, Decimal]
    rate_date: date
    source: RateSource = RateSource.EXACT

    def __post_init__(self) -> None:
        normalized: dict[Currency, Decimal] = {}
        for currency, rate in self.rates.items():
            normalized[Currency.parse(currency)] = coerce_decimal(rate)
        missing = [c.value for c in Currency if c not in normalized]
        if missing:
            raise ValueError(
                f"Rate record for {self.month} is missing {', '.join(missing)}"
            )
        if normalized[PIVOT_CURRENCY] != Decimal("1"):
            raise ValueError(
                f"Pivot rate must be 1 for {self.month}, "
                f"got {normalized[PIVOT_CURRENCY]}"
            )
        for currency, rate in normalized.items():
            if not rate.is_finite() or rate <= 0:
                raise ValueError(
                    f"Invalid {currency.value} rate for {self.month}: {rate}"
                )
        object.__setattr__(self, "rates", normalized)

    @property
    def is_substitute(self) -> bool:
        """Whether the rates were borrowed from an earlier date."""
        return self.source is RateSource.SUBSTITUTE

    def rate_for(self, currency: Currency) -> Decimal:
        """Return the ``1 pivot = X currency`` rate for a currency."""
        return self.rates[currency]

    def with_source(self, month: str, source: RateSource) -> "RateRecord":
        """Return a copy filed under another month with another source."""
        return RateRecord(
            month=month,
            rates=self.rates,
            rate_date=self.rate_date,
            source=source,
        )

    @classmethod
    def from_rates(
        cls,
        month: str,
        rate_date: date,
        rates: Mapping[Currency, Decimal],
        source: RateSource,
    ) -> "RateRecord":
        """Build a record from the non-pivot rates.

        Args:
            month: Month key the record is filed under.
            rate_date: Date of the observation.
            rates: Rates for the non-pivot currencies.
            source: Record origin.

        Returns:
            RateRecord: Record with the pivot rate filled in.
        """
        full = {PIVOT_CURRENCY: Decimal("1")}
        full.update(rates)
        return cls(month=month, rates=full, rate_date=rate_date, source=source)

    @classmethod
    def from_snapshot(
        cls,
        payload: Mapping[str, object],
        source: RateSource = RateSource.SEEDED,
    ) -> "RateRecord":
        """Build a record from a store-shaped mapping.

        The payload carries ``date`` (YYYY-MM-DD) and one ``<code>_rate``
        entry per currency, as stored in the ``exchange_rates`` table.

        Args:
            payload: Mapping such as ``{"date": "2025-03-31", "eur_rate": "1.19", ...}``.
            source: Record origin, seeded by default.

        Returns:
            RateRecord: Parsed record filed under the payload's month.
        """
        raw_date = payload.get("date")
        if isinstance(raw_date, date):
            rate_date = raw_date
        elif isinstance(raw_date, str):
            rate_date = date.fromisoformat(raw_date.strip())
        else:
            raise ValueError(f"Snapshot is missing a date: {payload!r}")
        rates = {}
        for currency in Currency:
            raw = payload.get(currency.rate_column)
            if raw is None and currency is PIVOT_CURRENCY:
                raw = "1"
            if raw is None:
                raise ValueError(
                    f"Snapshot for {rate_date} is missing "
                    f"{currency.rate_column}"
                )
            rates[currency] = coerce_decimal(raw)
        return cls(
            month=rate_date.strftime("%Y-%m"),
            rates=rates,
            rate_date=rate_date,
            source=source,
        )

    def to_snapshot(self) -> dict[str, str]:
        """Return the store-shaped mapping for this record."""
        payload = {"date": self.rate_date.isoformat()}
        for currency in Currency:
            payload[currency.rate_column] = str(self.rates[currency])
        return payload


__all__ = ["Currency", "PIVOT_CURRENCY", "RateSource", "RateRecord"]
