"""SQLAlchemy-backed durable store for monthly exchange rates."""

from datetime import date

from sqlalchemy import text

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.rate_store import RateStorePort
from src.domain.models import PIVOT_CURRENCY, Currency, RateRecord, RateSource
from src.infrastructure.logging.logger import get_app_logger
from src.utils.month_utils import to_month_key

_RATE_COLUMNS = tuple(currency.rate_column for currency in Currency)
_SELECT_COLUMNS = ", ".join(("date",) + _RATE_COLUMNS)


class SqlAlchemyRateStore(RateStorePort):
    """Rate store persisted in the ``exchange_rates`` table.

    One row per observation date, ``date`` stored as ``YYYY-MM-DD`` text so
    lexical order is chronological. Rows that do not form a valid rate
    record are logged and read as missing.
    """

    def __init__(self, db_port: DatabaseEnginePort, logger=None) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the rate store engine.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._db_port = db_port
        self._logger = logger or get_app_logger()

    def prepare(self) -> None:
        rate_columns = ",\n                ".join(
            f"{column} NUMERIC NOT NULL" for column in _RATE_COLUMNS
        )
        engine = self._db_port.get_rates_engine()
        with engine.begin() as conn:
            conn.exec_driver_sql(
                f"""
                CREATE TABLE IF NOT EXISTS exchange_rates (
                date TEXT PRIMARY KEY,
                base_currency TEXT NOT NULL DEFAULT '{PIVOT_CURRENCY.value}',
                {rate_columns}
                )
                """
            )

    def fetch_by_date(self, rate_date: date) -> RateRecord | None:
        query = text(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM exchange_rates
            WHERE date = :rate_date
            LIMIT 1
            """
        )
        return self._fetch_one(query, {"rate_date": rate_date.isoformat()})

    def fetch_by_month(self, month: str) -> RateRecord | None:
        query = text(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM exchange_rates
            WHERE date LIKE :prefix
            ORDER BY date DESC
            LIMIT 1
            """
        )
        return self._fetch_one(query, {"prefix": f"{to_month_key(month)}-%"})

    def fetch_latest_before(self, rate_date: date) -> RateRecord | None:
        query = text(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM exchange_rates
            WHERE date < :rate_date
            ORDER BY date DESC
            LIMIT 1
            """
        )
        return self._fetch_one(query, {"rate_date": rate_date.isoformat()})

    def fetch_latest(self) -> RateRecord | None:
        query = text(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM exchange_rates
            ORDER BY date DESC
            LIMIT 1
            """
        )
        return self._fetch_one(query, {})

    def save(self, record: RateRecord) -> bool:
        columns = ", ".join(("date", "base_currency") + _RATE_COLUMNS)
        placeholders = ", ".join(
            (":date", ":base_currency")
            + tuple(f":{column}" for column in _RATE_COLUMNS)
        )
        query = text(
            f"""
            INSERT INTO exchange_rates ({columns})
            VALUES ({placeholders})
            ON CONFLICT (date) DO NOTHING
            """
        )
        params = record.to_snapshot()
        params["base_currency"] = PIVOT_CURRENCY.value
        engine = self._db_port.get_rates_engine()
        with engine.begin() as conn:
            result = conn.execute(query, params)
        return result.rowcount == 1

    def _fetch_one(self, query, params: dict) -> RateRecord | None:
        engine = self._db_port.get_rates_engine()
        with engine.connect() as conn:
            row = conn.execute(query, params).first()
        if row is None:
            return None
        payload = dict(row._mapping)
        try:
            return RateRecord.from_snapshot(payload, source=RateSource.EXACT)
        except ValueError as exc:
            self._logger.error(
                f"Ignoring invalid stored rates for {payload.get('date')}: {exc}"
            )
            return None


__all__ = ["SqlAlchemyRateStore"]
