# earnings_ledger/api/v1/endpoints/earnings.py
"""
Organizer-facing earnings endpoints.

Reads go through the ledger (reconciled per-event earnings, tier report,
organizer summary) and the balance service (ticket-level payout eligibility).
Purchase and refund updates are applied by the payment webhooks directly
through EarningsLedger and are not exposed here.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from earnings_ledger.api.deps import get_db
from earnings_ledger.schemas.earnings import (
    EarningsSummary,
    EventEarnings,
    EventTierSalesBreakdownRow,
    OrganizerBalance,
    PayoutTicketSelection,
    SettlementStatus,
    WithdrawalRequest,
    WithdrawalResult,
)
from earnings_ledger.services.earnings import (
    EarningsLedger,
    EventNotFoundError,
    OrganizerBalanceService,
)

router = APIRouter(tags=["Earnings"])
logger = logging.getLogger(__name__)


def _not_found(e: EventNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"code": e.code, "message": e.message},
    )


@router.get("/events/{event_id}/earnings", response_model=Optional[EventEarnings])
def read_event_earnings(event_id: str, db: Session = Depends(get_db)):
    """Reconciled earnings for an event; null when it has no sales yet."""
    return EarningsLedger(db).get_event_earnings(event_id)


@router.get(
    "/events/{event_id}/earnings/tiers",
    response_model=List[EventTierSalesBreakdownRow],
)
def read_event_tier_sales(event_id: str, db: Session = Depends(get_db)):
    try:
        return EarningsLedger(db).get_event_tier_sales_breakdown(event_id)
    except EventNotFoundError as e:
        raise _not_found(e)


@router.post("/events/{event_id}/earnings/settlement", response_model=SettlementStatus)
def refresh_event_settlement(event_id: str, db: Session = Depends(get_db)):
    try:
        return EarningsLedger(db).update_settlement_status(event_id)
    except EventNotFoundError as e:
        raise _not_found(e)


@router.post("/events/{event_id}/earnings/withdrawals", response_model=WithdrawalResult)
def withdraw_event_earnings(
    event_id: str,
    withdrawal_in: WithdrawalRequest,
    db: Session = Depends(get_db),
):
    try:
        result = EarningsLedger(db).withdraw_from_earnings(
            event_id, withdrawal_in.amount, withdrawal_in.payout_id
        )
    except EventNotFoundError as e:
        raise _not_found(e)

    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": result.error_code.value, "message": result.error},
        )
    return result


@router.get("/organizers/{organizer_id}/earnings/summary", response_model=EarningsSummary)
def read_organizer_earnings_summary(organizer_id: str, db: Session = Depends(get_db)):
    return EarningsLedger(db).get_organizer_earnings_summary(organizer_id)


@router.get("/organizers/{organizer_id}/balance", response_model=OrganizerBalance)
def read_organizer_balance(organizer_id: str, db: Session = Depends(get_db)):
    return OrganizerBalanceService(db).get_organizer_balance(organizer_id)


@router.get(
    "/organizers/{organizer_id}/payouts/available-tickets",
    response_model=PayoutTicketSelection,
)
def read_payable_tickets(organizer_id: str, db: Session = Depends(get_db)):
    return OrganizerBalanceService(db).get_available_tickets_for_payout(organizer_id)
