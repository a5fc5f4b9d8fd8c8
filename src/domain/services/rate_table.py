"""In-memory table of monthly rate records."""

from collections.abc import Iterable
import threading

from src.domain.models.currency import RateRecord
from src.utils.month_utils import LATEST_MONTH, to_month_key


class RateTable:
    """Append-only mapping of month key to rate record.

    Records are never replaced or removed once merged. ``merge`` and the
    readers share one lock so no reader sees a half-applied merge.
    """

    def __init__(self, records: Iterable[RateRecord] = ()) -> None:
        self._records: dict[str, RateRecord] = {}
        self._lock = threading.Lock()
        self.merge(records)

    def get(self, month: str) -> RateRecord | None:
        """Return the record filed under a month, if any."""
        key = to_month_key(month)
        with self._lock:
            return self._records.get(key)

    def latest(self) -> RateRecord | None:
        """Return the record with the greatest month key, if any."""
        with self._lock:
            if not self._records:
                return None
            return self._records[max(self._records)]

    def merge(self, records: Iterable[RateRecord]) -> list[RateRecord]:
        """Insert records for months not yet present.

        Args:
            records: Candidate records.

        Returns:
            list[RateRecord]: Records actually inserted.
        """
        incoming = list(records)
        inserted: list[RateRecord] = []
        with self._lock:
            for record in incoming:
                key = to_month_key(record.month)
                if key == LATEST_MONTH:
                    raise ValueError("Rate records must be filed under a month")
                if key in self._records:
                    continue
                self._records[key] = record
                inserted.append(record)
        return inserted

    def months(self) -> list[str]:
        with self._lock:
            return sorted(self._records)

    def __contains__(self, month: str) -> bool:
        return self.get(month) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


__all__ = ["RateTable"]
