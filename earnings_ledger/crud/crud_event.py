# earnings_ledger/crud/crud_event.py
from typing import List
from sqlalchemy.orm import Session

from .base import CRUDBase
from earnings_ledger.models.event import Event


class CRUDEvent(CRUDBase[Event]):

    def get_by_organizer(self, db: Session, *, organizer_id: str) -> List[Event]:
        """All events owned by an organizer, oldest first."""
        return (
            db.query(self.model)
            .filter(self.model.organizer_id == organizer_id)
            .order_by(self.model.created_at.asc(), self.model.id.asc())
            .all()
        )


event = CRUDEvent(Event)
