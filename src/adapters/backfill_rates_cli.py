"""CLI adapter to backfill month-end exchange rates into the rate store."""

import asyncio
from datetime import date
import os

import dotenv

from src.infrastructure.container import build_backfill_use_case
from src.infrastructure.logging.logger import (
    get_app_logger,
    get_usage_logger,
)
from src.utils.month_utils import to_month_key


def _parse_month(value: str | None, logger) -> str | None:
    """Parse a YYYY-MM string into a month key.

    Args:
        value: Month string in YYYY-MM format.
        logger: Logger used for warnings.

    Returns:
        str | None: Month key or None when missing or invalid.
    """
    if not value:
        return None
    try:
        return to_month_key(value)
    except ValueError:
        logger.warning(f"Invalid month '{value}'. Expected format YYYY-MM.")
        return None


def main() -> None:
    """Backfill rates between FX_BACKFILL_START and FX_BACKFILL_END."""
    dotenv.load_dotenv()
    logger = get_app_logger()
    start_month = _parse_month(os.getenv("FX_BACKFILL_START"), logger)
    end_month = _parse_month(
        os.getenv("FX_BACKFILL_END"),
        logger,
    ) or to_month_key(date.today())
    if start_month is None:
        logger.warning("FX_BACKFILL_START is required (YYYY-MM).")
        return

    get_usage_logger().info(
        f"backfill_rates start={start_month} end={end_month}"
    )
    use_case = build_backfill_use_case()
    try:
        result = asyncio.run(use_case.run(start_month, end_month))
    except ValueError as exc:
        logger.error(str(exc))
        return

    print(f"Backfill {start_month} -> {end_month}")
    print(
        f"inserted={result.inserted_count}, skipped={result.skipped_count}, "
        f"failed={len(result.failed_months)}"
    )
    if result.failed_months:
        print(f"Failed months: {', '.join(result.failed_months)}")


if __name__ == "__main__":  # pragma: no cover
    main()
