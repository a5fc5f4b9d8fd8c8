"""Port for the durable exchange rate store."""

from datetime import date
from typing import Protocol

from src.domain.models import RateRecord


class RateStorePort(Protocol):
    """Port exposing persisted monthly rates.

    Lookups return records whose ``month`` is the month of the stored date;
    callers re-file them under the requested month when substituting.
    """

    def prepare(self) -> None:
        """Ensure the store is ready to be read and written."""

    def fetch_by_date(self, rate_date: date) -> RateRecord | None:
        """Return the record stored exactly at ``rate_date``."""

    def fetch_by_month(self, month: str) -> RateRecord | None:
        """Return the latest record stored on any day of ``month``."""

    def fetch_latest_before(self, rate_date: date) -> RateRecord | None:
        """Return the most recent record strictly before ``rate_date``."""

    def fetch_latest(self) -> RateRecord | None:
        """Return the most recent stored record."""

    def save(self, record: RateRecord) -> bool:
        """Persist a record unless its date is already stored.

        Returns:
            bool: True when a row was inserted.
        """


__all__ = ["RateStorePort"]
