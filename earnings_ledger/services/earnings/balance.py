"""
Organizer balance and payout eligibility.

Works from tickets rather than the per-event ledger. Tickets already listed
in a completed or processing payout are excluded before anything is summed,
so no ticket can be disbursed twice. Any code that builds a payout must go
through get_available_tickets_for_payout.

Net per ticket uses the flat PAYOUT_PLATFORM_FEE_PERCENT, not the rail-aware
resolver used by the per-event ledger.
"""

import logging
import math
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from earnings_ledger import crud
from earnings_ledger.core.config import settings
from earnings_ledger.models.event import Event
from earnings_ledger.models.organizer_payout import OrganizerPayout
from earnings_ledger.models.ticket import Ticket
from earnings_ledger.schemas.earnings import (
    Currency,
    OrganizerBalance,
    PayoutMethod,
    PayoutTicket,
    PayoutTicketSelection,
)
from .fee_calculator import meets_minimum_payout
from .normalizers import cents_from_major, normalize_currency
from .settlement import calculate_settlement_date, parse_datetime, resolve_event_end, utcnow

logger = logging.getLogger(__name__)


class OrganizerBalanceService:
    """
    Args:
        db: SQLAlchemy session
        batch_size: Max event ids per ticket query
        fee_percent: Flat platform fee percentage for payout net amounts
        hold_days: Days after event end before tickets become payable
    """

    def __init__(
        self,
        db: Session,
        batch_size: Optional[int] = None,
        fee_percent: Optional[float] = None,
        hold_days: Optional[int] = None,
    ):
        self.db = db
        self.batch_size = batch_size or settings.TICKET_QUERY_BATCH_SIZE
        self.fee_percent = settings.PAYOUT_PLATFORM_FEE_PERCENT if fee_percent is None else fee_percent
        self.hold_days = settings.SETTLEMENT_HOLD_DAYS if hold_days is None else hold_days

    def net_amount(self, gross: int) -> int:
        return int(math.floor(gross * (1 - self.fee_percent / 100)))

    def available_date(self, event: Event) -> Optional[datetime]:
        end = resolve_event_end(event)
        return calculate_settlement_date(end, self.hold_days) if end else None

    def _unpaid_tickets(self, organizer_id: str) -> Tuple[List[Event], Dict[str, Event], List[Ticket]]:
        events = crud.event.get_by_organizer(self.db, organizer_id=organizer_id)
        if not events:
            return [], {}, []

        events_by_id = {e.id: e for e in events}
        paid_ticket_ids = crud.payout.get_disbursed_ticket_ids(self.db, organizer_id=organizer_id)
        tickets = crud.ticket.get_by_event_ids(
            self.db,
            event_ids=list(events_by_id),
            status="valid",
            batch_size=self.batch_size,
        )
        unpaid = [t for t in tickets if t.id not in paid_ticket_ids and t.event_id in events_by_id]
        return events, events_by_id, unpaid

    def get_organizer_balance(self, organizer_id: str) -> OrganizerBalance:
        events, events_by_id, tickets = self._unpaid_tickets(organizer_id)
        if not events:
            return OrganizerBalance()

        now = utcnow()
        available = pending = 0
        next_payout_date: Optional[datetime] = None

        for ticket in tickets:
            net = self.net_amount(cents_from_major(ticket.price_paid))
            available_at = self.available_date(events_by_id[ticket.event_id])

            if available_at is not None and now >= available_at:
                available += net
            else:
                pending += net
                if available_at is not None and (next_payout_date is None or available_at < next_payout_date):
                    next_payout_date = available_at

        return OrganizerBalance(
            available=available,
            pending=pending,
            next_payout_date=next_payout_date,
            total_earnings=available + pending,
            currency=normalize_currency(events[0].currency or events[0].original_currency),
        )

    def get_available_tickets_for_payout(self, organizer_id: str) -> PayoutTicketSelection:
        """Unpaid tickets past their settlement date, with total and purchase period."""
        events, events_by_id, tickets = self._unpaid_tickets(organizer_id)
        if not events:
            return PayoutTicketSelection()

        now = utcnow()
        selected: List[PayoutTicket] = []
        for ticket in tickets:
            event = events_by_id[ticket.event_id]
            available_at = self.available_date(event)
            if available_at is None or now < available_at:
                continue
            gross = cents_from_major(ticket.price_paid)
            selected.append(
                PayoutTicket(
                    ticket_id=ticket.id,
                    event_id=event.id,
                    event_title=event.title,
                    gross_amount=gross,
                    net_amount=self.net_amount(gross),
                    purchased_at=parse_datetime(ticket.purchased_at),
                )
            )

        if not selected:
            return PayoutTicketSelection()

        purchase_dates = sorted(t.purchased_at for t in selected if t.purchased_at is not None)
        return PayoutTicketSelection(
            tickets=selected,
            total_amount=sum(t.net_amount for t in selected),
            period_start=purchase_dates[0] if purchase_dates else None,
            period_end=purchase_dates[-1] if purchase_dates else None,
        )

    def create_payout_request(
        self, organizer_id: str, method: Optional[PayoutMethod] = None
    ) -> Optional[OrganizerPayout]:
        """
        Open a pending payout covering every currently payable ticket.

        Returns None when nothing is payable or the total is under the
        minimum payout amount.
        """
        selection = self.get_available_tickets_for_payout(organizer_id)
        if not selection.tickets:
            logger.info(f"No payable tickets for organizer {organizer_id}")
            return None
        if not meets_minimum_payout(selection.total_amount):
            logger.info(
                f"Payable total {selection.total_amount} for organizer {organizer_id} "
                f"is below the minimum payout"
            )
            return None

        events = crud.event.get_by_organizer(self.db, organizer_id=organizer_id)
        currency = normalize_currency(events[0].currency or events[0].original_currency) if events else Currency.HTG

        payout = crud.payout.create_payout(
            self.db,
            organizer_id=organizer_id,
            amount=selection.total_amount,
            currency=currency.value,
            method=method.value if method else None,
            ticket_ids=selection.ticket_ids,
            period_start=selection.period_start,
            period_end=selection.period_end,
        )
        logger.info(
            f"Created payout {payout.id} for organizer {organizer_id}: "
            f"{len(selection.tickets)} tickets, amount {payout.amount}"
        )
        return payout
