"""
Pydantic request models for the HTTP API.

Tier fields accept any string; unknown tiers fall back to their default
tier instead of failing validation.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..engine.models import AddOn, Complexity, DesignType, Selection, Timeline
from ..quotes.models import Discount, DiscountType, ProjectDetails, QuoteStatus, QuoteTimeline


class BudgetRequest(BaseModel):
    """Quick estimate request."""
    category: str
    features: list[str] = Field(default_factory=list)
    complexity: Complexity = Complexity.MEDIUM
    timeline: Timeline = Timeline.NORMAL
    designType: DesignType = DesignType.CUSTOM
    customRequirements: list[str] = Field(default_factory=list)

    @field_validator('complexity', mode='before')
    @classmethod
    def _complexity(cls, v):
        return Complexity.parse(v)

    @field_validator('timeline', mode='before')
    @classmethod
    def _timeline(cls, v):
        return Timeline.parse(v)

    @field_validator('designType', mode='before')
    @classmethod
    def _design(cls, v):
        return DesignType.parse(v)

    def to_selection(self) -> Selection:
        return Selection(
            features=self.features,
            complexity=self.complexity,
            timeline=self.timeline,
            design_type=self.designType,
            custom_requirements=self.customRequirements,
        )


class ProjectDetailsIn(BaseModel):
    title: str
    description: str = ""
    type: str
    features: list[str] = Field(default_factory=list)
    designType: DesignType = DesignType.CUSTOM
    complexity: Complexity = Complexity.MEDIUM

    @field_validator('complexity', mode='before')
    @classmethod
    def _complexity(cls, v):
        return Complexity.parse(v)

    @field_validator('designType', mode='before')
    @classmethod
    def _design(cls, v):
        return DesignType.parse(v)

    def to_model(self) -> ProjectDetails:
        return ProjectDetails(
            title=self.title,
            type=self.type,
            description=self.description,
            features=self.features,
            design_type=self.designType,
            complexity=self.complexity,
        )


class TimelineIn(BaseModel):
    estimatedDays: Optional[int] = Field(default=None, ge=0)
    deadline: Optional[datetime] = None
    urgency: Timeline = Timeline.NORMAL

    @field_validator('urgency', mode='before')
    @classmethod
    def _urgency(cls, v):
        return Timeline.parse(v)

    def to_model(self) -> QuoteTimeline:
        return QuoteTimeline(
            estimated_days=self.estimatedDays,
            deadline=self.deadline,
            urgency=self.urgency,
        )


class AddOnIn(BaseModel):
    name: str
    price: float = Field(ge=0)


class DiscountIn(BaseModel):
    name: str
    amount: float = Field(ge=0)
    type: DiscountType = DiscountType.FIXED


class QuoteRequest(BaseModel):
    """Formal quote request."""
    projectDetails: ProjectDetailsIn
    timeline: TimelineIn = Field(default_factory=TimelineIn)
    addOns: list[AddOnIn] = Field(default_factory=list)
    discounts: list[DiscountIn] = Field(default_factory=list)
    customRequirements: list[str] = Field(default_factory=list)
    status: QuoteStatus = QuoteStatus.DRAFT

    def add_ons(self) -> list[AddOn]:
        return [AddOn(name=a.name, price=a.price) for a in self.addOns]

    def discount_models(self) -> list[Discount]:
        return [Discount(name=d.name, amount=d.amount, type=d.type) for d in self.discounts]


class RejectRequest(BaseModel):
    reason: Optional[str] = None
