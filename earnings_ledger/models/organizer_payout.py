# earnings_ledger/models/organizer_payout.py
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, DateTime, JSON
from earnings_ledger.db.base_class import Base
import uuid


class OrganizerPayout(Base):
    __tablename__ = "organizer_payouts"

    id = Column(
        String, primary_key=True, default=lambda: f"po_{uuid.uuid4().hex[:12]}"
    )
    organizer_id = Column(String, nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False)
    # Values: 'pending', 'processing', 'completed', 'failed', 'cancelled'
    status = Column(String(50), nullable=False, index=True, default="pending")
    method = Column(String(50), nullable=True)

    # Tickets disbursed by this payout; a ticket may sit in at most one
    # completed/processing payout.
    ticket_ids = Column(JSON, nullable=False, default=list)
    period_start = Column(DateTime(timezone=True), nullable=True)
    period_end = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
