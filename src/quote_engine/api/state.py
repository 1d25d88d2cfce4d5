"""
Shared engine/service instances for the API process.
"""
from functools import lru_cache

from ..catalog.rate_catalog import RateCatalog
from ..config.settings import get_settings
from ..engine.pricing_engine import PricingEngine
from ..quotes.lifecycle import QuoteService


@lru_cache()
def get_engine() -> PricingEngine:
    settings = get_settings()
    return PricingEngine(RateCatalog.load(settings), settings)


@lru_cache()
def get_quote_service() -> QuoteService:
    return QuoteService(get_engine())
