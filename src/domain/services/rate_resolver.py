"""Rate lookup over a rate table."""

from decimal import Decimal

from src.domain.models.currency import PIVOT_CURRENCY, Currency, RateRecord
from src.domain.services.rate_table import RateTable
from src.utils.month_utils import LATEST_MONTH, to_month_key


class RateResolver:
    """Resolve ``1 pivot = X currency`` rates for a month.

    Only exact months and the ``latest`` sentinel are resolved; any other
    fallback belongs to the rate provider.
    """

    def __init__(self, table: RateTable) -> None:
        self._table = table

    def resolve_record(self, month: str) -> RateRecord | None:
        """Return the record for a month key or the ``latest`` sentinel."""
        key = to_month_key(month)
        if key == LATEST_MONTH:
            return self._table.latest()
        return self._table.get(key)

    def resolve(self, month: str, currency: Currency | str) -> Decimal | None:
        """Return the rate for a currency in a month.

        Args:
            month: Month key, date string or ``latest``.
            currency: Currency to resolve.

        Returns:
            Decimal | None: Rate, or None when the month is not loaded.
        """
        currency = Currency.parse(currency)
        if currency is PIVOT_CURRENCY:
            return Decimal("1")
        record = self.resolve_record(month)
        if record is None:
            return None
        return record.rate_for(currency)


__all__ = ["RateResolver"]
