"""
Pricing Engine - Core price computation with traceability.

Composes a rate template's base price, the selected feature prices, three
multiplicative tier adjustments and a custom-requirement surcharge into a
total, then converts it to the requester's currency.
"""
import logging
import math
from typing import Optional

from ..config.settings import get_settings, Settings
from .currency import convert, resolve_currency
from .errors import TemplateNotFound
from .models import HOURS_PER_DAY, PriceBreakdown, RateTemplate, Selection

logger = logging.getLogger(__name__)

BASE_HOURS = 40
CUSTOM_REQUIREMENT_RATE = 0.1


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive amounts."""
    return math.floor(value + 0.5)


class PricingEngine:
    """
    Computes price breakdowns from rate templates.

    Computation order (fixed, it affects rounding):
    1. Start from the base price and 40 base hours
    2. Add matched feature prices/hours, then add-on prices
    3. Multiply price by complexity x timeline x design, hours by complexity only
    4. Add 10% of the multiplied price per custom requirement
    5. Convert to the display currency and round
    6. Derive days from hours using the complexity tier's hours per day
    """

    def __init__(self, catalog=None, settings: Optional[Settings] = None):
        """Initialize engine with a rate catalog (see catalog.RateCatalog)."""
        self.settings = settings or get_settings()
        self.catalog = catalog

    def compute_price(
        self,
        template: RateTemplate,
        selection: Selection,
        currency: str = 'INR'
    ) -> PriceBreakdown:
        """
        Compute a price breakdown for a selection against a template.

        Args:
            template: Active rate template for the project category
            selection: Requested features, tiers and custom requirements
            currency: Display currency for total_price

        Returns:
            PriceBreakdown with totals, estimates and trace
        """
        rates = self.settings.exchange_rates
        currency = resolve_currency(currency, rates)

        price = template.base_price
        hours = BASE_HOURS
        trace = [("Base", f"{template.name} base price", f"{price:,.2f}")]

        selected = []
        for name in selection.features:
            feature = template.find_feature(name)
            if feature is None:
                continue
            price += feature.price
            hours += feature.estimated_hours or 0
            selected.append(feature)
            trace.append(("Feature", feature.name, f"+{feature.price:,.2f}"))

        for add_on in selection.add_ons:
            price += add_on.price
            trace.append(("Add-on", add_on.name, f"+{add_on.price:,.2f}"))

        complexity_mult = template.complexity_multipliers.get(selection.complexity.value, 1)
        timeline_mult = template.timeline_multipliers.get(selection.timeline.value, 1)
        design_mult = template.design_multipliers.get(selection.design_type.value, 1)

        price *= complexity_mult * timeline_mult * design_mult
        hours *= complexity_mult
        trace.append((
            "Multipliers",
            f"{selection.complexity.value} x {selection.timeline.value} x {selection.design_type.value}",
            f"{complexity_mult} x {timeline_mult} x {design_mult}",
        ))

        custom_count = len(selection.custom_requirements)
        custom_cost = price * CUSTOM_REQUIREMENT_RATE * custom_count
        price += custom_cost
        if custom_count:
            trace.append(("Custom", f"{custom_count} custom requirement(s)", f"+{custom_cost:,.2f}"))

        total_price = round_half_up(convert(price, currency, rates))
        trace.append(("Total", f"Converted to {currency}", f"{total_price:,}"))

        estimated_days = math.ceil(hours / HOURS_PER_DAY[selection.complexity])

        breakdown = PriceBreakdown(
            category=template.category,
            base_price=template.base_price,
            selected_features=selected,
            multipliers={
                'complexity': complexity_mult,
                'timeline': timeline_mult,
                'design': design_mult,
            },
            custom_requirement_count=custom_count,
            custom_cost=custom_cost,
            subtotal=price,
            currency=currency,
            total_price=total_price,
            estimated_hours=hours,
            estimated_days=estimated_days,
            add_ons=list(selection.add_ons),
        )
        for step, desc, val in trace:
            breakdown.add_trace(step, desc, val)
        return breakdown

    def estimate(
        self,
        category: str,
        selection: Selection,
        client_id: Optional[str] = None
    ) -> PriceBreakdown:
        """
        Quick estimate for a category, priced in the client's preferred currency.

        Raises:
            TemplateNotFound: no active template for the category
        """
        template = self.catalog.find_active_template(category)
        if template is None:
            logger.info("No active rate template for category %r", category)
            raise TemplateNotFound(category)

        currency = self.settings.base_currency
        if client_id:
            currency = self.catalog.get_preferred_currency(client_id)

        breakdown = self.compute_price(template, selection, currency)
        logger.debug("Estimate for %s:\n%s", category, breakdown.get_trace_text())
        return breakdown
