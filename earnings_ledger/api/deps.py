# earnings_ledger/api/deps.py
from earnings_ledger.db.session import get_db

__all__ = ["get_db"]
