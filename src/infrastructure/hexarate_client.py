"""HTTP client for the HexaRate historical exchange rate API."""

from datetime import date
from decimal import Decimal

import httpx

from src.application.ports.pricing_service import PricingServicePort
from src.domain.models import Currency
from src.infrastructure.logging.logger import get_app_logger
from src.utils.decimal_utils import coerce_decimal

DEFAULT_BASE_URL = "https://hexarate.paikama.co"


class HexaRateClient(PricingServicePort):
    """Pricing service backed by ``/api/rates/{base}/{target}/{date}``.

    Any non-2xx status, transport error or payload without a positive mid
    rate is reported as an unavailable rate.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        logger=None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Root URL of the HexaRate service.
            timeout: Seconds allowed per request.
            logger: Optional logger compatible with logging.Logger-like API.
            client: Optional shared ``httpx.AsyncClient``; a short-lived
                client is opened per request otherwise.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._logger = logger or get_app_logger()
        self._client = client

    async def fetch_pair_rate(
        self,
        base: Currency,
        target: Currency,
        rate_date: date,
    ) -> Decimal | None:
        url = (
            f"{self._base_url}/api/rates/"
            f"{base.value}/{target.value}/{rate_date.isoformat()}"
        )
        self._logger.info(f"Fetching {base.value}/{target.value}: {url}")
        try:
            response = await self._get(url)
        except httpx.HTTPError as exc:
            self._logger.error(
                f"Request error for {base.value}/{target.value}: {exc}"
            )
            return None

        if not response.is_success:
            self._logger.warning(
                f"HTTP {response.status_code} for "
                f"{base.value}/{target.value} on {rate_date}"
            )
            return None
        try:
            payload = response.json()
        except ValueError:
            self._logger.error(
                f"Unparsable response for {base.value}/{target.value}: "
                f"{response.text[:200]}"
            )
            return None
        rate = self._extract_mid(payload)
        if rate is None:
            self._logger.warning(
                f"No rate found in response for {base.value}/{target.value}"
            )
        return rate

    async def _get(self, url: str) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if self._client is not None:
            return await self._client.get(
                url,
                headers=headers,
                timeout=self._timeout,
            )
        async with httpx.AsyncClient() as client:
            return await client.get(url, headers=headers, timeout=self._timeout)

    @staticmethod
    def _extract_mid(payload) -> Decimal | None:
        if not isinstance(payload, dict):
            return None
        data = payload.get("data")
        candidates = []
        if isinstance(data, dict):
            candidates.append(data.get("mid"))
        candidates.extend((payload.get("mid"), payload.get("rate")))
        for candidate in candidates:
            if candidate is None:
                continue
            try:
                rate = coerce_decimal(candidate)
            except ValueError:
                continue
            if rate.is_finite() and rate > 0:
                return rate
        return None


__all__ = ["HexaRateClient", "DEFAULT_BASE_URL"]
