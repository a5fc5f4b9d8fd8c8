"""Application ports package."""

from .database import DatabaseEnginePort
from .pricing_service import PricingServicePort
from .rate_store import RateStorePort

__all__ = [
    "DatabaseEnginePort",
    "PricingServicePort",
    "RateStorePort",
]
