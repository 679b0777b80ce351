"""
Reconstruction of event earnings from the tickets collection.

Used when an event has no ledger entry, or when the stored entry was computed
in the wrong currency (e.g. Stripe's USD charge currency leaking into an HTG
event). Pure: takes loaded rows, returns a view, writes nothing.

Steps:
1. Resolve the event's scheduling date (no date -> no derivation)
2. Keep tickets with empty/valid/confirmed status and a positive price
3. Work out what each ticket actually charged in settlement currency
4. Group tickets by payment_id so fixed processing fees apply once per checkout
5. Resolve fees per group and sum
6. Settlement status from the event date + hold period
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from earnings_ledger.schemas.earnings import (
    Currency,
    EventEarnings,
    EventTierSalesBreakdownRow,
    PaymentMethod,
    SettlementStatus,
)
from .fee_calculator import FeeCalculator, round_half_up
from .fee_resolver import resolve_fees
from .normalizers import (
    MONCASH_METHODS,
    STRIPE_METHODS,
    cents_from_major,
    normalize_currency,
    normalize_payment_method,
    positive_rate,
    to_number,
)
from .settlement import calculate_settlement_date, is_settlement_ready, resolve_event_date, utcnow

UNKNOWN_PAYMENT_ID = "unknown"


@dataclass
class PaymentGroup:
    """All tickets of one checkout transaction within an event."""

    payment_id: str
    payment_method: PaymentMethod
    fx_rate: Optional[float]
    gross_event_cents: int = 0
    charged_amount_cents: int = 0
    ticket_ids: List[str] = field(default_factory=list)

    @property
    def ticket_count(self) -> int:
        return len(self.ticket_ids)


def event_currency(event) -> Currency:
    """The authoritative (listed) currency of an event."""
    return normalize_currency(
        getattr(event, "currency", None) or getattr(event, "original_currency", None)
    )


def ticket_counts(ticket) -> bool:
    return (ticket.status or "").strip().lower() in ("", "valid", "confirmed")


def ticket_fx_rate(ticket, listed_currency: Optional[Currency] = None) -> Optional[float]:
    """Recorded FX rate, or None when the charge was in the listed currency."""
    charged_currency = getattr(ticket, "charged_currency", None)
    if listed_currency is not None and charged_currency and normalize_currency(charged_currency) == listed_currency:
        return None
    return positive_rate(ticket.exchange_rate_used)


def ticket_charged_cents(ticket, gross_event_cents: int, rate: Optional[float] = None) -> int:
    """Amount charged in settlement currency, in cents."""
    explicit = to_number(ticket.charged_amount)
    if explicit is not None and explicit > 0:
        return cents_from_major(explicit)

    # Older tickets: infer from the recorded rate.
    method = normalize_payment_method(ticket.payment_method)
    if rate and (method in STRIPE_METHODS or method in MONCASH_METHODS):
        return round_half_up(gross_event_cents * rate)
    return gross_event_cents


def qualifying_tickets(tickets: Iterable) -> List[Tuple[object, int]]:
    """(ticket, gross event cents) for tickets that count toward earnings."""
    counted = []
    for ticket in tickets:
        if not ticket_counts(ticket):
            continue
        gross = cents_from_major(ticket.price_paid)
        if gross <= 0:
            continue
        counted.append((ticket, gross))
    return counted


def build_payment_groups(
    counted: Iterable[Tuple[object, int]], listed_currency: Optional[Currency] = None
) -> List[PaymentGroup]:
    groups = {}
    for ticket, gross in counted:
        payment_id = str(ticket.payment_id or UNKNOWN_PAYMENT_ID)
        method = normalize_payment_method(ticket.payment_method)
        rate = ticket_fx_rate(ticket, listed_currency)

        group = groups.get(payment_id)
        if group is None:
            group = groups[payment_id] = PaymentGroup(
                payment_id=payment_id, payment_method=method, fx_rate=rate
            )
        else:
            if group.payment_method == PaymentMethod.unknown:
                group.payment_method = method
            if group.fx_rate is None:
                group.fx_rate = rate

        group.gross_event_cents += gross
        group.charged_amount_cents += ticket_charged_cents(ticket, gross, rate)
        group.ticket_ids.append(ticket.id)

    return list(groups.values())


def derive_event_earnings(
    event,
    tickets: Iterable,
    now: Optional[datetime] = None,
    calculator: Optional[FeeCalculator] = None,
    hold_days: Optional[int] = None,
) -> Optional[EventEarnings]:
    """Earnings view rebuilt from tickets, or None when nothing can be derived."""
    event_date = resolve_event_date(event)
    if event_date is None:
        return None

    counted = qualifying_tickets(tickets)
    groups = build_payment_groups(counted, event_currency(event))
    if not counted or not groups:
        return None

    gross_sales = platform_fee = processing_fees = net_amount = 0
    for group in groups:
        fees = resolve_fees(
            group.gross_event_cents,
            group.payment_method,
            charged_amount_cents=group.charged_amount_cents,
            fx_rate=group.fx_rate,
            calculator=calculator,
        )
        gross_sales += fees.gross_amount
        platform_fee += fees.platform_fee
        processing_fees += fees.processing_fee
        net_amount += fees.net_amount

    now = now or utcnow()
    ready_date = calculate_settlement_date(event_date, hold_days)
    ready = is_settlement_ready(ready_date, now)

    return EventEarnings(
        event_id=event.id,
        organizer_id=event.organizer_id,
        gross_sales=gross_sales,
        tickets_sold=len(counted),
        platform_fee=platform_fee,
        processing_fees=processing_fees,
        net_amount=net_amount,
        available_to_withdraw=max(0, net_amount) if ready else 0,
        withdrawn_amount=0,
        settlement_status=SettlementStatus.ready if ready else SettlementStatus.pending,
        settlement_ready_date=ready_date,
        currency=event_currency(event),
        last_calculated_at=now,
        derived=True,
    )


def tier_sales_breakdown(event, tickets: Iterable) -> List[EventTierSalesBreakdownRow]:
    """Gross and counts per (tier, unit price, listed currency), largest first."""
    currency = event_currency(event)
    rows = {}
    for ticket, gross in qualifying_tickets(tickets):
        tier_key = str(ticket.tier_id or ticket.tier_name or "general")
        key = (tier_key, gross, currency)
        row = rows.get(key)
        if row is None:
            row = rows[key] = EventTierSalesBreakdownRow(
                tier_key=tier_key,
                tier_id=ticket.tier_id,
                tier_name=ticket.tier_name,
                unit_price=gross,
                currency=currency,
                tickets_sold=0,
                gross_sales=0,
            )
        row.tickets_sold += 1
        row.gross_sales += gross

    return sorted(rows.values(), key=lambda r: (-r.gross_sales, r.tier_key, r.unit_price))
