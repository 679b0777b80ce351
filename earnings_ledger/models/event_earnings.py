# earnings_ledger/models/event_earnings.py
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, DateTime
from earnings_ledger.db.base_class import Base
import uuid


class EventEarnings(Base):
    """Per-event ledger of record. All money columns are cents."""
    __tablename__ = "event_earnings"

    id = Column(
        String, primary_key=True, default=lambda: f"earn_{uuid.uuid4().hex[:12]}"
    )
    event_id = Column(String, nullable=False, unique=True, index=True)
    organizer_id = Column(String, nullable=False, index=True)

    gross_sales = Column(Integer, nullable=False, default=0)
    tickets_sold = Column(Integer, nullable=False, default=0)
    platform_fee = Column(Integer, nullable=False, default=0)
    processing_fees = Column(Integer, nullable=False, default=0)
    net_amount = Column(Integer, nullable=False, default=0)  # gross - platform - processing

    available_to_withdraw = Column(Integer, nullable=False, default=0)
    withdrawn_amount = Column(Integer, nullable=False, default=0)

    # Values: 'pending', 'ready', 'locked'
    settlement_status = Column(String(20), nullable=False, default="pending", index=True)
    settlement_ready_date = Column(DateTime(timezone=True), nullable=True)

    # Always the event's listed currency, never the processor's charge currency
    currency = Column(String(3), nullable=False, default="HTG")

    last_calculated_at = Column(DateTime(timezone=True), nullable=True)
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
