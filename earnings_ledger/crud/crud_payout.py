# earnings_ledger/crud/crud_payout.py
from datetime import datetime, timezone
from typing import Optional, Sequence, Set
from sqlalchemy.orm import Session

from .base import CRUDBase
from earnings_ledger.models.organizer_payout import OrganizerPayout
from earnings_ledger.schemas.earnings import PayoutStatus

# Payouts in these states own their tickets.
DISBURSING_STATUSES = (PayoutStatus.completed.value, PayoutStatus.processing.value)


class CRUDPayout(CRUDBase[OrganizerPayout]):

    def get_disbursed_ticket_ids(self, db: Session, *, organizer_id: str) -> Set[str]:
        """Union of ticket ids held by the organizer's completed/processing payouts."""
        payouts = (
            db.query(self.model)
            .filter(
                self.model.organizer_id == organizer_id,
                self.model.status.in_(DISBURSING_STATUSES),
            )
            .all()
        )
        paid: Set[str] = set()
        for payout in payouts:
            paid.update(payout.ticket_ids or [])
        return paid

    def create_payout(
        self,
        db: Session,
        *,
        organizer_id: str,
        amount: int,
        currency: str,
        method: Optional[str],
        ticket_ids: Sequence[str],
        period_start: Optional[datetime],
        period_end: Optional[datetime],
    ) -> OrganizerPayout:
        now = datetime.now(timezone.utc)
        db_obj = OrganizerPayout(
            organizer_id=organizer_id,
            amount=amount,
            currency=currency,
            status=PayoutStatus.pending.value,
            method=method,
            ticket_ids=list(ticket_ids),
            period_start=period_start,
            period_end=period_end,
            created_at=now,
            updated_at=now,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj


payout = CRUDPayout(OrganizerPayout)
