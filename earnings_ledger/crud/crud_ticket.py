# earnings_ledger/crud/crud_ticket.py
from typing import List, Sequence
from sqlalchemy.orm import Session

from .base import CRUDBase
from earnings_ledger.models.ticket import Ticket


class CRUDTicket(CRUDBase[Ticket]):

    def get_by_event(self, db: Session, *, event_id: str) -> List[Ticket]:
        """Every ticket of an event regardless of status."""
        return (
            db.query(self.model)
            .filter(self.model.event_id == event_id)
            .order_by(self.model.purchased_at.asc(), self.model.id.asc())
            .all()
        )

    def get_by_event_ids(
        self,
        db: Session,
        *,
        event_ids: Sequence[str],
        status: str,
        batch_size: int,
    ) -> List[Ticket]:
        """
        Tickets with the given status across many events.

        Event ids are chunked so no IN (...) clause exceeds batch_size. Chunks
        are independent of each other.
        """
        tickets: List[Ticket] = []
        batch_size = max(1, batch_size)
        for i in range(0, len(event_ids), batch_size):
            batch = list(event_ids[i:i + batch_size])
            tickets.extend(
                db.query(self.model)
                .filter(self.model.event_id.in_(batch), self.model.status == status)
                .all()
            )
        return tickets


ticket = CRUDTicket(Ticket)
