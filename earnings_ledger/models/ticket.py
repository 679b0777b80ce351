# earnings_ledger/models/ticket.py
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Float, ForeignKey
from earnings_ledger.db.base_class import Base
import uuid


class Ticket(Base):
    """One purchased admission unit, written by the checkout flow."""
    __tablename__ = "tickets"

    id = Column(
        String, primary_key=True, default=lambda: f"tkt_{uuid.uuid4().hex[:12]}"
    )
    event_id = Column(String, ForeignKey("events.id"), nullable=False, index=True)

    # Status: 'valid', 'confirmed', 'cancelled', 'refunded' (empty on legacy rows)
    status = Column(String(50), nullable=True, index=True)

    # Major units, event currency
    price_paid = Column(Float, nullable=True)

    # Groups tickets bought in one checkout transaction
    payment_id = Column(String(255), nullable=True, index=True)
    payment_method = Column(String(50), nullable=True)

    # Settlement-currency units per one event-currency unit
    exchange_rate_used = Column(Float, nullable=True)
    # Major units, settlement currency
    charged_amount = Column(Float, nullable=True)
    charged_currency = Column(String(3), nullable=True)

    tier_id = Column(String, nullable=True)
    tier_name = Column(String(255), nullable=True)

    purchased_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=True,
    )
