"""Currency conversion through the pivot currency."""

from decimal import Decimal

from src.domain.models.currency import PIVOT_CURRENCY, Currency
from src.domain.models.finance import ConversionResult
from src.domain.services.rate_resolver import RateResolver
from src.utils.decimal_utils import coerce_decimal
from src.utils.month_utils import to_month_key


class CurrencyConverter:
    """Convert amounts between currencies using month-specific rates.

    Conversion never raises for missing rates: the original amount is
    returned with ``converted=False``. Unknown currencies and malformed
    months raise ``ValueError``.
    """

    def __init__(self, resolver: RateResolver, logger=None) -> None:
        """Initialize the converter.

        Args:
            resolver: Rate lookup used for every conversion.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._resolver = resolver
        self._logger = logger

    def convert(
        self,
        amount,
        from_currency: Currency | str,
        to_currency: Currency | str,
        month: str,
    ) -> ConversionResult:
        """Convert an amount for the given month.

        Args:
            amount: Amount in ``from_currency``.
            from_currency: Source currency.
            to_currency: Target currency.
            month: Month whose rates apply.

        Returns:
            ConversionResult: Converted value and availability flags.
        """
        value = coerce_decimal(amount)
        if not value.is_finite():
            raise ValueError(f"Amount must be finite, got {value}")
        source = Currency.parse(from_currency)
        target = Currency.parse(to_currency)
        month_key = to_month_key(month)
        if source is target:
            return ConversionResult(value=value, currency=target)

        record = self._resolver.resolve_record(month_key)
        from_rate = self._resolver.resolve(month_key, source)
        to_rate = self._resolver.resolve(month_key, target)
        if from_rate is None or to_rate is None:
            if self._logger is not None:
                self._logger.warning(
                    f"Missing FX rate for {source.value} to {target.value} "
                    f"in {month_key}; keeping original amount"
                )
            return ConversionResult(
                value=value,
                currency=source,
                converted=False,
            )

        amount_in_pivot = value if source is PIVOT_CURRENCY else value / from_rate
        result = (
            amount_in_pivot
            if target is PIVOT_CURRENCY
            else amount_in_pivot * to_rate
        )
        stale = record is not None and record.is_substitute
        return ConversionResult(value=result, currency=target, stale=stale)

    def convert_value(
        self,
        amount,
        from_currency: Currency | str,
        to_currency: Currency | str,
        month: str,
    ) -> Decimal:
        """Return only the converted value of ``convert``."""
        return self.convert(amount, from_currency, to_currency, month).value


__all__ = ["CurrencyConverter"]
