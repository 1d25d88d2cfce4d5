"""Engine subpackage - price computation, conversion and milestone split."""
from .pricing_engine import PricingEngine
from .models import Complexity, DesignType, Feature, PriceBreakdown, RateTemplate, Selection, Timeline
from .milestones import Milestone, split_into_milestones
from .errors import InvalidTransition, QuoteNotFound, TemplateNotFound

__all__ = [
    'PricingEngine', 'Complexity', 'DesignType', 'Feature', 'PriceBreakdown',
    'RateTemplate', 'Selection', 'Timeline', 'Milestone', 'split_into_milestones',
    'InvalidTransition', 'QuoteNotFound', 'TemplateNotFound',
]
