"""
Choosing between the stored ledger entry and a ticket-derived view.

Stored entries whose currency disagrees with the event's listed currency were
computed from charge data in the wrong currency. For those the view is rebuilt
from tickets, keeping what has already been withdrawn.
"""

import logging
from typing import Callable, Optional

from earnings_ledger.schemas.earnings import Currency, EventEarnings, SettlementStatus

logger = logging.getLogger(__name__)


def carry_withdrawals(derived: EventEarnings, stored: EventEarnings) -> EventEarnings:
    withdrawn = stored.withdrawn_amount
    status = derived.settlement_status
    available = 0
    if status == SettlementStatus.ready:
        available = max(0, derived.net_amount - withdrawn)
        if withdrawn > 0 and available == 0:
            status = SettlementStatus.locked

    return derived.model_copy(
        update={
            "id": stored.id,
            "withdrawn_amount": withdrawn,
            "available_to_withdraw": available,
            "settlement_status": status,
        }
    )


def reconcile_earnings(
    stored: Optional[EventEarnings],
    authoritative_currency: Currency,
    derive: Callable[[], Optional[EventEarnings]],
) -> Optional[EventEarnings]:
    """
    Returns:
        - the stored view when its currency matches the event's
        - a derived view carrying stored withdrawals when it doesn't
        - the stored view with only its currency corrected if derivation fails
        - the derived view (or None) when nothing is stored
    """
    if stored is not None and stored.currency == authoritative_currency:
        return stored

    derived = derive()

    if stored is None:
        return derived

    logger.warning(
        f"Stored earnings for event {stored.event_id} are in {stored.currency.value}, "
        f"event currency is {authoritative_currency.value}; reconciling from tickets"
    )
    if derived is None:
        return stored.model_copy(update={"currency": authoritative_currency})
    return carry_withdrawals(derived, stored)
