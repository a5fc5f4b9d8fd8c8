"""Port for the remote pricing service."""

from datetime import date
from decimal import Decimal
from typing import Protocol

from src.domain.models import Currency


class PricingServicePort(Protocol):
    """Port exposing historical mid-rates for a single currency pair."""

    async def fetch_pair_rate(
        self,
        base: Currency,
        target: Currency,
        rate_date: date,
    ) -> Decimal | None:
        """Return ``1 base = X target`` on ``rate_date``, or None."""


__all__ = ["PricingServicePort"]
