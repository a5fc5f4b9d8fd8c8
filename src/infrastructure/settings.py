"""Settings helpers for infrastructure adapters."""

from dataclasses import dataclass
import os

import dotenv

from src.infrastructure.hexarate_client import DEFAULT_BASE_URL
from src.infrastructure.logging.logger import get_app_logger

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class FxSettings:
    """Settings for the rate provider and pricing service.

    Attributes:
        provider_url: Base URL of the pricing service.
        request_timeout: Seconds allowed per HTTP request.
        request_delay: Seconds between consecutive pair requests.
        allow_substitute: Whether an earlier stored month may stand in for a
            missing one.
    """

    provider_url: str = DEFAULT_BASE_URL
    request_timeout: float = 30.0
    request_delay: float = 0.5
    allow_substitute: bool = True

    @classmethod
    def from_env(cls) -> "FxSettings":
        """Build settings from environment variables.

        Returns:
            FxSettings: Settings sourced from environment variables.
        """
        dotenv.load_dotenv()
        logger = get_app_logger()
        defaults = cls()
        provider_url = (
            os.getenv("FX_PROVIDER_URL", "").strip() or defaults.provider_url
        )
        return cls(
            provider_url=provider_url,
            request_timeout=cls._read_float(
                "FX_REQUEST_TIMEOUT",
                defaults.request_timeout,
                logger,
            ),
            request_delay=cls._read_float(
                "FX_REQUEST_DELAY",
                defaults.request_delay,
                logger,
            ),
            allow_substitute=cls._read_bool(
                "FX_ALLOW_SUBSTITUTE",
                defaults.allow_substitute,
                logger,
            ),
        )

    @staticmethod
    def _read_float(name: str, default: float, logger) -> float:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            return default
        try:
            value = float(raw)
        except ValueError:
            logger.warning(f"Invalid {name}={raw!r}; using {default}")
            return default
        if value < 0:
            logger.warning(f"Negative {name}={raw!r}; using {default}")
            return default
        return value

    @staticmethod
    def _read_bool(name: str, default: bool, logger) -> bool:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            return default
        cleaned = raw.strip().lower()
        if cleaned in _TRUE_VALUES:
            return True
        if cleaned in _FALSE_VALUES:
            return False
        logger.warning(f"Invalid {name}={raw!r}; using {default}")
        return default


__all__ = ["FxSettings"]
