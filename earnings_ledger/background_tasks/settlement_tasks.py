"""
Background task that releases settled funds.

Finds pending earnings records whose settlement date has passed and promotes
them to 'ready'. One failing event does not stop the sweep.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from earnings_ledger import crud
from earnings_ledger.db.session import SessionLocal
from earnings_ledger.schemas.earnings import SettlementStatus
from earnings_ledger.services.earnings.ledger import EarningsLedger
from earnings_ledger.services.earnings.settlement import utcnow

logger = logging.getLogger(__name__)


def refresh_settlement_statuses(db: Optional[Session] = None) -> int:
    """Returns the number of events promoted to 'ready'."""
    owns_session = db is None
    db = db or SessionLocal()
    promoted = 0
    try:
        due = crud.event_earnings.get_due_for_settlement(db, now=utcnow())
        event_ids = [record.event_id for record in due]
        ledger = EarningsLedger(db)

        for event_id in event_ids:
            try:
                if ledger.update_settlement_status(event_id) == SettlementStatus.ready:
                    promoted += 1
            except Exception as e:
                logger.error(f"Settlement refresh failed for event {event_id}: {e}", exc_info=True)

        if event_ids:
            logger.info(f"Settlement sweep: {promoted}/{len(event_ids)} events released")
        return promoted
    finally:
        if owns_session:
            db.close()
