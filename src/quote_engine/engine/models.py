"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation and
str-backed enums for the qualitative tiers a client picks.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class Tier(str, Enum):
    """Base for tier enums. Unknown names fall back to the default tier."""

    # Each tier enum overrides default() to name its fallback member.
    @classmethod
    def default(cls) -> 'Tier':
        raise NotImplementedError(f"{cls.__name__} does not define a default tier")

    @classmethod
    def parse(cls, value) -> 'Tier':
        """Coerce a raw client value into a tier, failing open to the default."""
        if isinstance(value, cls):
            return value
        if value is None or value == '':
            return cls.default()
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            fallback = cls.default()
            logger.warning(
                "Unknown %s tier %r, using %s", cls.__name__, value, fallback.value
            )
            return fallback


class Complexity(Tier):
    SIMPLE = 'simple'
    MEDIUM = 'medium'
    COMPLEX = 'complex'
    ENTERPRISE = 'enterprise'

    @classmethod
    def default(cls) -> 'Complexity':
        return cls.MEDIUM


class Timeline(Tier):
    RUSH = 'rush'
    NORMAL = 'normal'
    FLEXIBLE = 'flexible'

    @classmethod
    def default(cls) -> 'Timeline':
        return cls.NORMAL


class DesignType(Tier):
    TEMPLATE = 'template'
    CUSTOM = 'custom'
    PREMIUM = 'premium'

    @classmethod
    def default(cls) -> 'DesignType':
        return cls.CUSTOM


# Working hours per day by complexity tier
HOURS_PER_DAY = {
    Complexity.SIMPLE: 8,
    Complexity.MEDIUM: 6,
    Complexity.COMPLEX: 4,
    Complexity.ENTERPRISE: 3,
}


@dataclass
class TraceStep:
    """A single step in the price computation trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class Feature:
    """A priced feature offered by a rate template."""
    name: str
    price: float
    estimated_hours: Optional[float] = None
    is_required: bool = False
    description: Optional[str] = None
    category: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'description': self.description,
            'price': self.price,
            'category': self.category,
            'isRequired': self.is_required,
            'estimatedHours': self.estimated_hours,
        }


@dataclass
class RateTemplate:
    """Per-category pricing configuration maintained by operators."""
    category: str
    name: str
    base_price: float
    features: list[Feature] = field(default_factory=list)
    complexity_multipliers: dict[str, float] = field(default_factory=dict)
    timeline_multipliers: dict[str, float] = field(default_factory=dict)
    design_multipliers: dict[str, float] = field(default_factory=dict)
    is_active: bool = True

    def __post_init__(self):
        if self.base_price <= 0:
            raise ValueError(f"Template '{self.category}' base price must be positive")
        names = [f.name for f in self.features]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(
                f"Template '{self.category}' has duplicate features: {', '.join(sorted(duplicates))}"
            )
        for table in (self.complexity_multipliers, self.timeline_multipliers, self.design_multipliers):
            for tier, value in table.items():
                if value <= 0:
                    raise ValueError(
                        f"Template '{self.category}' multiplier for '{tier}' must be positive"
                    )

    def find_feature(self, name: str) -> Optional[Feature]:
        for feature in self.features:
            if feature.name == name:
                return feature
        return None

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'category': self.category,
            'basePrice': self.base_price,
            'features': [f.to_dict() for f in self.features],
            'complexityMultipliers': dict(self.complexity_multipliers),
        }


@dataclass
class AddOn:
    """A flat-priced extra attached to a formal quote."""
    name: str
    price: float


@dataclass
class Selection:
    """What the client asked for."""
    features: list[str] = field(default_factory=list)
    complexity: Complexity = Complexity.MEDIUM
    timeline: Timeline = Timeline.NORMAL
    design_type: DesignType = DesignType.CUSTOM
    custom_requirements: list[str] = field(default_factory=list)
    add_ons: list[AddOn] = field(default_factory=list)

    def __post_init__(self):
        self.complexity = Complexity.parse(self.complexity)
        self.timeline = Timeline.parse(self.timeline)
        self.design_type = DesignType.parse(self.design_type)


@dataclass
class PriceBreakdown:
    """Complete result of a price computation."""
    category: str
    base_price: float
    selected_features: list[Feature]
    multipliers: dict[str, float]
    custom_requirement_count: int
    custom_cost: float
    subtotal: float  # base currency, before conversion
    currency: str
    total_price: int  # display currency, rounded
    estimated_hours: float
    estimated_days: int
    add_ons: list[AddOn] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the computation trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    @property
    def features_total(self) -> float:
        return sum(f.price for f in self.selected_features)

    @property
    def add_ons_total(self) -> float:
        return sum(a.price for a in self.add_ons)

    def to_estimate_dict(self) -> dict:
        """Convert to the quick-estimate response shape."""
        pre_multiplier = self.base_price + self.features_total + self.add_ons_total
        return {
            'category': self.category,
            'basePrice': self.base_price,
            'selectedFeatures': [f.to_dict() for f in self.selected_features],
            'multipliers': dict(self.multipliers),
            'customRequirements': self.custom_requirement_count,
            'customCost': self.custom_cost,
            'totalPrice': self.total_price,
            'currency': self.currency,
            'estimatedHours': self.estimated_hours,
            'estimatedDays': self.estimated_days,
            'breakdown': {
                'base': self.base_price,
                'features': self.features_total,
                'addOns': self.add_ons_total,
                'multipliers': self.subtotal - pre_multiplier - self.custom_cost,
                'custom': self.custom_cost,
            },
        }
