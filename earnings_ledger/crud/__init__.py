# earnings_ledger/crud/__init__.py

from .crud_event import event
from .crud_ticket import ticket
from .crud_payout import payout
from .crud_event_earnings import event_earnings
