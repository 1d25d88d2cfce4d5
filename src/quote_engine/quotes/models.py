"""
Data models for persisted quotes.
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Optional

from ..engine.milestones import Milestone
from ..engine.models import Complexity, DesignType, Timeline


class QuoteStatus(str, Enum):
    DRAFT = 'draft'
    SENT = 'sent'
    VIEWED = 'viewed'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'
    EXPIRED = 'expired'


# Statuses from which a client may accept or reject
RESPONDABLE = frozenset({QuoteStatus.SENT, QuoteStatus.VIEWED})


class DiscountType(str, Enum):
    PERCENTAGE = 'percentage'
    FIXED = 'fixed'


@dataclass
class Discount:
    """A reduction applied to the quote subtotal."""
    name: str
    amount: float
    type: DiscountType = DiscountType.FIXED

    def value_for(self, subtotal: float) -> float:
        if self.type == DiscountType.PERCENTAGE:
            return subtotal * self.amount / 100.0
        return self.amount


@dataclass
class ProjectDetails:
    title: str
    type: str  # rate template category
    description: str = ""
    features: list[str] = field(default_factory=list)
    design_type: DesignType = DesignType.CUSTOM
    complexity: Complexity = Complexity.MEDIUM

    def __post_init__(self):
        self.design_type = DesignType.parse(self.design_type)
        self.complexity = Complexity.parse(self.complexity)


@dataclass
class QuoteTimeline:
    estimated_days: Optional[int] = None
    deadline: Optional[datetime] = None
    urgency: Timeline = Timeline.NORMAL

    def __post_init__(self):
        self.urgency = Timeline.parse(self.urgency)


@dataclass
class LineCharge:
    """A named amount on the quote (feature or add-on)."""
    name: str
    price: float


@dataclass
class QuotePricing:
    """Money side of a quote, in `currency`."""
    base_price: float
    features: list[LineCharge]
    add_ons: list[LineCharge]
    discounts: list[Discount]
    multipliers: dict[str, float]
    custom_requirement_count: int
    custom_cost: float
    subtotal: float
    discount_total: float
    taxes: float
    total_amount: float
    currency: str
    estimated_hours: float


@dataclass
class QuoteTerms:
    payment_terms: str
    delivery_terms: str
    revision_policy: str
    cancellation_policy: str


@dataclass
class Quote:
    """A client-facing formal price offer."""
    quote_number: str
    client_id: str
    project_details: ProjectDetails
    timeline: QuoteTimeline
    pricing: QuotePricing
    milestones: list[Milestone]
    terms: QuoteTerms
    valid_until: datetime
    created_at: datetime
    status: QuoteStatus = QuoteStatus.DRAFT
    sent_at: Optional[datetime] = None
    viewed_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
    notes: Optional[str] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.now()) > self.valid_until

    def effective_status(self, now: Optional[datetime] = None) -> QuoteStatus:
        """Status for display: anything past valid_until reads as expired."""
        if self.is_expired(now):
            return QuoteStatus.EXPIRED
        return self.status

    def to_dict(self, now: Optional[datetime] = None) -> dict:
        """Wire shape: camelCase keys, status as displayed at `now`."""
        data = _camelize(asdict(self))
        data['status'] = self.effective_status(now).value
        return data


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def _camelize(value):
    if isinstance(value, dict):
        return {_camel(k): _camelize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_camelize(v) for v in value]
    return value
