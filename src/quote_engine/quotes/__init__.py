"""Quotes subpackage - persisted quotes and their lifecycle."""
from .lifecycle import QuoteService
from .models import Discount, DiscountType, ProjectDetails, Quote, QuoteStatus, QuoteTimeline
from .store import QuoteStore

__all__ = [
    'QuoteService', 'QuoteStore', 'Quote', 'QuoteStatus', 'ProjectDetails',
    'QuoteTimeline', 'Discount', 'DiscountType',
]
