"""
Quote generation and the quote state machine.
"""
import re
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

import pytest

from quote_engine.engine import InvalidTransition, QuoteNotFound, TemplateNotFound
from quote_engine.engine.models import AddOn
from quote_engine.quotes import Discount, DiscountType, ProjectDetails, QuoteStatus, QuoteTimeline

NOW = datetime(2026, 3, 1, 12, 0, 0)


def details(**overrides):
    fields = dict(
        title="Customer portal",
        type="webapp",
        features=["auth"],
        design_type="custom",
        complexity="medium",
    )
    fields.update(overrides)
    return ProjectDetails(**fields)


def make_quote(service, client_id="client-1", status=QuoteStatus.SENT, **kwargs):
    kwargs.setdefault("now", NOW)
    return service.generate_quote(client_id, details(), status=status, **kwargs)


def test_generate_quote_pricing(service):
    quote = make_quote(service, status=QuoteStatus.DRAFT)

    assert quote.status == QuoteStatus.DRAFT
    assert quote.sent_at is None
    assert quote.pricing.currency == "INR"
    assert quote.pricing.subtotal == 27000
    assert quote.pricing.taxes == 4860
    assert quote.pricing.total_amount == 31860
    assert [f.name for f in quote.pricing.features] == ["auth"]
    assert quote.timeline.estimated_days == 13
    assert quote.terms.delivery_terms == "Delivery within 13 working days"
    assert quote.valid_until == NOW + timedelta(days=30)


def test_quote_number_format_and_sequence(service):
    first = make_quote(service)
    second = make_quote(service)

    millis = int(NOW.timestamp() * 1000)
    assert first.quote_number == f"WN-Q-{millis}-0001"
    assert second.quote_number == f"WN-Q-{millis}-0002"
    assert re.fullmatch(r"WN-Q-\d+-\d{4}", first.quote_number)


def test_milestones_match_total_and_days(service):
    quote = make_quote(service)

    assert len(quote.milestones) == 3
    assert abs(sum(m.amount for m in quote.milestones) - quote.pricing.total_amount) <= 1
    total_days = sum(m.estimated_days for m in quote.milestones)
    assert quote.timeline.estimated_days <= total_days <= quote.timeline.estimated_days + 2


def test_caller_supplied_days_and_urgency(service):
    quote = make_quote(service, timeline=QuoteTimeline(estimated_days=20, urgency="rush"))
    assert quote.timeline.estimated_days == 20
    assert [m.estimated_days for m in quote.milestones] == [4, 10, 6]
    # rush is not in the template's timeline table
    assert quote.pricing.multipliers["timeline"] == 1


def test_sent_quote_stamps_sent_at(service):
    quote = make_quote(service, status=QuoteStatus.SENT)
    assert quote.status == QuoteStatus.SENT
    assert quote.sent_at == NOW


def test_quote_in_client_currency(service):
    quote = make_quote(service, client_id="client-usd")
    assert quote.pricing.currency == "USD"
    assert quote.pricing.total_amount == pytest.approx(382.32)
    assert quote.pricing.base_price == pytest.approx(120)
    assert abs(sum(m.amount for m in quote.milestones) - quote.pricing.total_amount) <= 1


def test_unknown_preferred_currency_quotes_in_base(service):
    quote = make_quote(service, client_id="client-odd")
    assert quote.pricing.currency == "INR"
    assert quote.pricing.total_amount == 31860


def test_add_ons_discounts_and_custom_requirements(service):
    quote = make_quote(
        service,
        add_ons=[AddOn("hosting setup", 1000)],
        discounts=[Discount("launch", 10, DiscountType.PERCENTAGE)],
        custom_requirements=["sso"],
    )
    # (12000 + 1000) x 2.25 = 29250, +10% custom = 32175
    assert quote.pricing.subtotal == pytest.approx(32175)
    assert quote.pricing.discount_total == pytest.approx(3217.5)
    assert quote.pricing.taxes == pytest.approx(5212.35)
    assert quote.pricing.total_amount == pytest.approx(34169.85)
    assert quote.pricing.add_ons[0].name == "hosting setup"


def test_discount_never_drives_total_negative(service):
    quote = make_quote(service, discounts=[Discount("goodwill", 1_000_000)])
    assert quote.pricing.total_amount == 0
    assert all(m.amount == 0 for m in quote.milestones)


def test_generate_without_active_template(service):
    with pytest.raises(TemplateNotFound):
        service.generate_quote("client-1", details(type="maintenance"))
    assert len(service.store) == 0


def test_generate_rejects_non_initial_status(service):
    with pytest.raises(ValueError):
        make_quote(service, status=QuoteStatus.ACCEPTED)


def test_client_views_sent_quote_once(service):
    quote = make_quote(service)
    first_view = NOW + timedelta(hours=1)

    viewed = service.client_views(quote.quote_number, "client-1", now=first_view)
    assert viewed.status == QuoteStatus.VIEWED
    assert viewed.viewed_at == first_view

    again = service.client_views(quote.quote_number, "client-1", now=first_view + timedelta(hours=5))
    assert again.status == QuoteStatus.VIEWED
    assert again.viewed_at == first_view


def test_viewing_draft_does_not_change_it(service):
    quote = make_quote(service, status=QuoteStatus.DRAFT)
    seen = service.get_quote(quote.quote_number, "client-1", now=NOW)
    assert seen.status == QuoteStatus.DRAFT
    assert seen.viewed_at is None


def test_accept_from_draft_is_rejected_and_unmodified(service):
    quote = make_quote(service, status=QuoteStatus.DRAFT)

    with pytest.raises(InvalidTransition):
        service.accept(quote.quote_number, "client-1", now=NOW)

    stored = service.store.get(quote.quote_number)
    assert stored.status == QuoteStatus.DRAFT
    assert stored.responded_at is None


@pytest.mark.parametrize("view_first", [False, True])
def test_accept_sent_or_viewed(service, view_first):
    quote = make_quote(service)
    if view_first:
        service.client_views(quote.quote_number, "client-1", now=NOW)

    later = NOW + timedelta(days=2)
    accepted = service.accept(quote.quote_number, "client-1", now=later)
    assert accepted.status == QuoteStatus.ACCEPTED
    assert accepted.responded_at == later


def test_reject_stores_reason(service):
    quote = make_quote(service)
    rejected = service.reject(quote.quote_number, "client-1", reason="Over budget", now=NOW)

    assert rejected.status == QuoteStatus.REJECTED
    assert rejected.notes == "Over budget"
    assert rejected.responded_at == NOW


def test_no_second_decision(service):
    quote = make_quote(service)
    service.accept(quote.quote_number, "client-1", now=NOW)

    with pytest.raises(InvalidTransition):
        service.reject(quote.quote_number, "client-1", reason="changed my mind", now=NOW)
    stored = service.store.get(quote.quote_number)
    assert stored.status == QuoteStatus.ACCEPTED
    assert stored.notes is None


def test_other_clients_cannot_see_or_act(service):
    quote = make_quote(service)

    with pytest.raises(QuoteNotFound):
        service.get_quote(quote.quote_number, "intruder")
    with pytest.raises(QuoteNotFound):
        service.accept(quote.quote_number, "intruder")
    assert service.list_quotes("intruder") == []
    assert service.store.get(quote.quote_number).status == QuoteStatus.SENT


def test_unknown_quote(service):
    with pytest.raises(QuoteNotFound):
        service.accept("WN-Q-0-0001", "client-1")


def test_expiry_is_read_time_only(service):
    quote = make_quote(service)
    expired_at = NOW + timedelta(days=31)

    assert quote.effective_status(NOW) == QuoteStatus.SENT
    assert quote.effective_status(expired_at) == QuoteStatus.EXPIRED
    assert quote.to_dict(expired_at)["status"] == "expired"
    assert quote.to_dict(expired_at)["validUntil"] == quote.valid_until

    with pytest.raises(InvalidTransition) as exc:
        service.accept(quote.quote_number, "client-1", now=expired_at)
    assert exc.value.status == "expired"

    seen = service.client_views(quote.quote_number, "client-1", now=expired_at)
    assert seen.status == QuoteStatus.SENT
    assert seen.viewed_at is None
    assert service.store.get(quote.quote_number).status == QuoteStatus.SENT


def test_send_draft(service):
    quote = make_quote(service, status=QuoteStatus.DRAFT)
    sent = service.send(quote.quote_number, now=NOW + timedelta(minutes=5))

    assert sent.status == QuoteStatus.SENT
    assert sent.sent_at == NOW + timedelta(minutes=5)
    with pytest.raises(InvalidTransition):
        service.send(quote.quote_number, now=NOW)


def test_list_quotes_newest_first(service):
    older = make_quote(service, now=NOW)
    newer = make_quote(service, now=NOW + timedelta(days=1))
    make_quote(service, client_id="client-2")

    assert [q.quote_number for q in service.list_quotes("client-1")] == [
        newer.quote_number, older.quote_number
    ]


def test_returned_quotes_are_snapshots(service):
    quote = make_quote(service)
    quote.status = QuoteStatus.ACCEPTED
    assert service.store.get(quote.quote_number).status == QuoteStatus.SENT


def test_concurrent_decisions_apply_once(service):
    quote = make_quote(service)

    def decide(i):
        try:
            if i % 2:
                service.accept(quote.quote_number, "client-1", now=NOW)
            else:
                service.reject(quote.quote_number, "client-1", reason="no", now=NOW)
            return True
        except InvalidTransition:
            return False

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(decide, range(40)))

    assert outcomes.count(True) == 1
    assert service.store.get(quote.quote_number).status in (QuoteStatus.ACCEPTED, QuoteStatus.REJECTED)


def test_concurrent_quote_numbers_are_unique(service):
    with ThreadPoolExecutor(max_workers=8) as pool:
        quotes = list(pool.map(lambda _: make_quote(service), range(50)))

    assert len({q.quote_number for q in quotes}) == 50
    assert len(service.store) == 50
