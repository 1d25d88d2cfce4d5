"""
Quote Lifecycle Manager - assembles, persists and transitions formal quotes.

State machine (stored status):

    draft --send--> sent --client views--> viewed
    sent|viewed --accept--> accepted
    sent|viewed --reject--> rejected

Past valid_until every quote reads as expired; nothing is mutated for that.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

from ..config.settings import get_settings, Settings
from ..engine.currency import convert, resolve_currency
from ..engine.errors import InvalidTransition, QuoteNotFound, TemplateNotFound
from ..engine.milestones import split_into_milestones
from ..engine.models import AddOn, Selection
from ..engine.pricing_engine import PricingEngine
from .models import (
    RESPONDABLE,
    Discount,
    DiscountType,
    LineCharge,
    ProjectDetails,
    Quote,
    QuotePricing,
    QuoteStatus,
    QuoteTerms,
    QuoteTimeline,
)
from .store import QuoteStore

logger = logging.getLogger(__name__)

PAYMENT_TERMS = '30% advance, 40% on milestone completion, 30% on final delivery'
REVISION_POLICY = '3 free revisions included'
CANCELLATION_POLICY = 'Cancellation allowed with 48 hours notice'


class QuoteService:
    """Creates quotes from the pricing engine and drives their lifecycle."""

    def __init__(
        self,
        engine: PricingEngine,
        store: Optional[QuoteStore] = None,
        settings: Optional[Settings] = None
    ):
        self.engine = engine
        self.store = store or QuoteStore()
        self.settings = settings or engine.settings or get_settings()

    def generate_quote(
        self,
        client_id: str,
        project_details: ProjectDetails,
        timeline: Optional[QuoteTimeline] = None,
        add_ons: Optional[list[AddOn]] = None,
        discounts: Optional[list[Discount]] = None,
        custom_requirements: Optional[list[str]] = None,
        status: QuoteStatus = QuoteStatus.DRAFT,
        now: Optional[datetime] = None
    ) -> Quote:
        """
        Price a project and persist it as a new quote.

        Args:
            client_id: Trusted identity of the requesting client
            project_details: Title, category, features and tiers
            timeline: Urgency and optional day estimate/deadline
            add_ons: Flat-priced extras, priced before multipliers
            discounts: Reductions applied to the subtotal before tax
            custom_requirements: Each adds the custom surcharge
            status: Initial status, draft or sent
            now: Creation time (defaults to the current time)

        Raises:
            TemplateNotFound: no active template for project_details.type
        """
        status = QuoteStatus(status)
        if status not in (QuoteStatus.DRAFT, QuoteStatus.SENT):
            raise ValueError(f"Quotes are created as draft or sent, not {status.value}")

        now = now or datetime.now()
        timeline = timeline or QuoteTimeline()
        discounts = list(discounts or [])

        template = self.engine.catalog.find_active_template(project_details.type)
        if template is None:
            raise TemplateNotFound(project_details.type)

        rates = self.settings.exchange_rates
        currency = resolve_currency(self.engine.catalog.get_preferred_currency(client_id), rates)

        selection = Selection(
            features=list(project_details.features),
            complexity=project_details.complexity,
            timeline=timeline.urgency,
            design_type=project_details.design_type,
            custom_requirements=list(custom_requirements or []),
            add_ons=list(add_ons or []),
        )
        breakdown = self.engine.compute_price(template, selection, currency)

        subtotal = breakdown.subtotal
        discount_total = min(sum(d.value_for(subtotal) for d in discounts), subtotal)
        taxable = subtotal - discount_total
        taxes = taxable * self.settings.tax_rate

        def money(amount: float) -> float:
            return round(convert(amount, currency, rates), 2)

        total_amount = money(taxable + taxes)

        estimated_days = timeline.estimated_days or breakdown.estimated_days
        quote_timeline = QuoteTimeline(
            estimated_days=estimated_days,
            deadline=timeline.deadline,
            urgency=timeline.urgency,
        )

        pricing = QuotePricing(
            base_price=money(breakdown.base_price),
            features=[LineCharge(f.name, money(f.price)) for f in breakdown.selected_features],
            add_ons=[LineCharge(a.name, money(a.price)) for a in breakdown.add_ons],
            discounts=[
                Discount(d.name, d.amount if d.type == DiscountType.PERCENTAGE else money(d.amount), d.type)
                for d in discounts
            ],
            multipliers=dict(breakdown.multipliers),
            custom_requirement_count=breakdown.custom_requirement_count,
            custom_cost=money(breakdown.custom_cost),
            subtotal=money(subtotal),
            discount_total=money(discount_total),
            taxes=money(taxes),
            total_amount=total_amount,
            currency=currency,
            estimated_hours=breakdown.estimated_hours,
        )

        quote = Quote(
            quote_number=self._next_quote_number(now),
            client_id=client_id,
            project_details=project_details,
            timeline=quote_timeline,
            pricing=pricing,
            milestones=split_into_milestones(total_amount, estimated_days),
            terms=QuoteTerms(
                payment_terms=PAYMENT_TERMS,
                delivery_terms=f'Delivery within {estimated_days} working days',
                revision_policy=REVISION_POLICY,
                cancellation_policy=CANCELLATION_POLICY,
            ),
            valid_until=now + timedelta(days=self.settings.quote_validity_days),
            created_at=now,
            status=status,
            sent_at=now if status == QuoteStatus.SENT else None,
        )
        logger.info(
            "Generated quote %s: %s %.2f over %d days",
            quote.quote_number, currency, total_amount, estimated_days
        )
        return self.store.add(quote)

    def _next_quote_number(self, now: datetime) -> str:
        millis = int(now.timestamp() * 1000)
        return f"{self.settings.quote_number_prefix}-{millis}-{self.store.next_sequence():04d}"

    def list_quotes(self, client_id: str) -> list[Quote]:
        return self.store.list_for_client(client_id)

    def get_quote(self, quote_number: str, client_id: str, now: Optional[datetime] = None) -> Quote:
        """Client read of a quote; the first read of a sent quote marks it viewed."""
        return self.client_views(quote_number, client_id, now)

    def client_views(self, quote_number: str, client_id: str, now: Optional[datetime] = None) -> Quote:
        now = now or datetime.now()
        quote = self.store.get(quote_number, client_id)
        if quote is None:
            raise QuoteNotFound(quote_number)

        def mark_viewed(q: Quote):
            q.status = QuoteStatus.VIEWED
            if q.viewed_at is None:
                q.viewed_at = now

        updated = self.store.update_if_status(
            quote_number, client_id, {QuoteStatus.SENT}, mark_viewed, valid_at=now
        )
        if updated is not None:
            logger.info("Quote %s viewed by client %s", quote_number, client_id)
            return updated
        return quote

    def send(self, quote_number: str, now: Optional[datetime] = None) -> Quote:
        """Release a draft to its client."""
        now = now or datetime.now()

        def mark_sent(q: Quote):
            q.status = QuoteStatus.SENT
            q.sent_at = now

        return self._transition(quote_number, None, 'sent', {QuoteStatus.DRAFT}, mark_sent, now)

    def accept(self, quote_number: str, client_id: str, now: Optional[datetime] = None) -> Quote:
        now = now or datetime.now()

        def mark_accepted(q: Quote):
            q.status = QuoteStatus.ACCEPTED
            q.responded_at = now

        return self._transition(quote_number, client_id, 'accepted', RESPONDABLE, mark_accepted, now)

    def reject(
        self,
        quote_number: str,
        client_id: str,
        reason: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Quote:
        now = now or datetime.now()

        def mark_rejected(q: Quote):
            q.status = QuoteStatus.REJECTED
            q.responded_at = now
            q.notes = reason

        return self._transition(quote_number, client_id, 'rejected', RESPONDABLE, mark_rejected, now)

    def _transition(self, quote_number, client_id, action, expected, apply, now) -> Quote:
        """Apply a guarded transition; the stored quote is untouched on failure."""
        if self.store.get(quote_number, client_id) is None:
            raise QuoteNotFound(quote_number)

        updated = self.store.update_if_status(quote_number, client_id, expected, apply, valid_at=now)
        if updated is None:
            current = self.store.get(quote_number, client_id)
            status = current.effective_status(now).value if current else 'missing'
            logger.warning("Rejected %s transition for quote %s (status %s)", action, quote_number, status)
            raise InvalidTransition(quote_number, action, status)

        logger.info("Quote %s %s", quote_number, action)
        return updated
