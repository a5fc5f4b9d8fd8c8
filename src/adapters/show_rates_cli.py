"""CLI adapter to load and print monthly exchange rates."""

import asyncio
import os

import dotenv

from src.domain.models import Currency
from src.infrastructure.container import build_currency_session
from src.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)
from src.utils.month_utils import LATEST_MONTH


def _parse_months(raw: str | None) -> list[str]:
    if not raw:
        return [LATEST_MONTH]
    return [part.strip() for part in raw.split(",") if part.strip()]


def main() -> None:
    """Ensure rates for FX_MONTHS and print one line per month."""
    dotenv.load_dotenv()
    logger = get_app_logger()
    months = _parse_months(os.getenv("FX_MONTHS"))
    get_usage_logger().info(f"show_rates months={','.join(months)}")
    session = build_currency_session()
    try:
        result = asyncio.run(session.ensure(months))
    except ValueError as exc:
        logger.error(str(exc))
        return

    for month in result.resolved + result.substituted:
        record = session.resolver.resolve_record(month)
        rates = ", ".join(
            f"{currency.value}={record.rate_for(currency)}"
            for currency in Currency
        )
        marker = " (substitute)" if record.is_substitute else ""
        print(f"{month} [{record.rate_date}]{marker}: {rates}")
    for month in result.failed:
        print(f"{month}: unavailable")


if __name__ == "__main__":  # pragma: no cover
    main()
