# earnings_ledger/services/earnings/__init__.py
from .balance import OrganizerBalanceService
from .errors import EarningsError, EventNotFoundError
from .fee_calculator import FeeCalculation, FeeCalculator, calculate_fees, get_fee_calculator
from .fee_resolver import resolve_fees
from .ledger import EarningsLedger
from .normalizers import normalize_currency, normalize_payment_method
from .reconciliation import reconcile_earnings

__all__ = [
    "OrganizerBalanceService",
    "EarningsError",
    "EventNotFoundError",
    "FeeCalculation",
    "FeeCalculator",
    "calculate_fees",
    "get_fee_calculator",
    "resolve_fees",
    "EarningsLedger",
    "normalize_currency",
    "normalize_payment_method",
    "reconcile_earnings",
]
