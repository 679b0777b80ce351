# earnings_ledger/models/event.py
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime
from earnings_ledger.db.base_class import Base
import uuid


class Event(Base):
    """Event as owned by the catalog service; read-only from the ledger."""
    __tablename__ = "events"

    id = Column(
        String, primary_key=True, default=lambda: f"evt_{uuid.uuid4().hex[:12]}"
    )
    organizer_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=True)

    # Listed (organizer-facing) currency. Older rows only carry original_currency.
    currency = Column(String(3), nullable=True)
    original_currency = Column(String(3), nullable=True)

    start_datetime = Column(DateTime(timezone=True), nullable=True)
    end_datetime = Column(DateTime(timezone=True), nullable=True)

    # Legacy scheduling fields, stored as free-form ISO strings
    date_time = Column(String, nullable=True)
    date = Column(String, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=True,
    )
