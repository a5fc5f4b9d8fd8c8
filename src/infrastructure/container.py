"""Composition root for wiring infrastructure adapters."""

from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.pricing_service import PricingServicePort
from src.application.ports.rate_store import RateStorePort
from src.application.use_cases.backfill_rates import BackfillRatesUseCase
from src.application.use_cases.currency_session import CurrencySession
from src.domain.models import RateRecord
from src.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from src.infrastructure.hexarate_client import HexaRateClient
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.rate_store_repository import SqlAlchemyRateStore
from src.infrastructure.settings import FxSettings


def build_database_adapter() -> DatabaseEnginePort:
    """Return the database adapter instance."""
    return SqlAlchemyDatabaseEngineAdapter()


def build_rate_store(
    db_port: DatabaseEnginePort | None = None,
) -> RateStorePort:
    """Return the durable rate store."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyRateStore(resolved_db, logger=get_app_logger())


def build_pricing_service(
    settings: FxSettings | None = None,
) -> PricingServicePort:
    """Return the configured pricing service client."""
    resolved = settings or FxSettings.from_env()
    return HexaRateClient(
        base_url=resolved.provider_url,
        timeout=resolved.request_timeout,
        logger=get_app_logger(),
    )


def build_currency_session(
    initial_records: Iterable[RateRecord] = (),
    db_port: DatabaseEnginePort | None = None,
) -> CurrencySession:
    """Return a session wired to the configured store and pricing service."""
    settings = FxSettings.from_env()
    logger = get_app_logger()
    rate_store = build_rate_store(db_port)
    try:
        rate_store.prepare()
    except SQLAlchemyError as exc:
        logger.error(f"Rate store unavailable: {exc}")
    return CurrencySession(
        rate_store=rate_store,
        pricing_service=build_pricing_service(settings),
        initial_records=initial_records,
        logger=logger,
        request_delay=settings.request_delay,
        allow_substitute=settings.allow_substitute,
    )


def build_backfill_use_case(
    db_port: DatabaseEnginePort | None = None,
) -> BackfillRatesUseCase:
    """Return the backfill use case wired to the configured adapters."""
    settings = FxSettings.from_env()
    return BackfillRatesUseCase(
        rate_store=build_rate_store(db_port),
        pricing_service=build_pricing_service(settings),
        logger=get_app_logger(),
        request_delay=settings.request_delay,
    )


__all__ = [
    "build_database_adapter",
    "build_rate_store",
    "build_pricing_service",
    "build_currency_session",
    "build_backfill_use_case",
]
