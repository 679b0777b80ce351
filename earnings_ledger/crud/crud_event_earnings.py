# earnings_ledger/crud/crud_event_earnings.py
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from .base import CRUDBase
from earnings_ledger.models.event_earnings import EventEarnings
from earnings_ledger.schemas.earnings import SettlementStatus


class CRUDEventEarnings(CRUDBase[EventEarnings]):

    def get_by_event(self, db: Session, *, event_id: str) -> Optional[EventEarnings]:
        return db.query(self.model).filter(self.model.event_id == event_id).first()

    def get_for_update(self, db: Session, *, earnings_id: str) -> Optional[EventEarnings]:
        """Re-read a ledger row under a row lock for read-modify-write."""
        return (
            db.query(self.model)
            .filter(self.model.id == earnings_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def get_by_organizer(self, db: Session, *, organizer_id: str) -> List[EventEarnings]:
        return (
            db.query(self.model)
            .filter(self.model.organizer_id == organizer_id)
            .order_by(self.model.created_at.asc())
            .all()
        )

    def get_due_for_settlement(self, db: Session, *, now: datetime) -> List[EventEarnings]:
        """Pending entries whose settlement date has passed."""
        return (
            db.query(self.model)
            .filter(
                self.model.settlement_status == SettlementStatus.pending.value,
                self.model.settlement_ready_date.isnot(None),
                self.model.settlement_ready_date <= now,
            )
            .all()
        )


event_earnings = CRUDEventEarnings(EventEarnings)
