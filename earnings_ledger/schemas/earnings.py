# earnings_ledger/schemas/earnings.py
from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime
from enum import Enum


# ============================================
# Enums
# ============================================

class Currency(str, Enum):
    HTG = "HTG"
    USD = "USD"


class PaymentMethod(str, Enum):
    stripe = "stripe"
    stripe_connect = "stripe_connect"
    moncash = "moncash"
    moncash_button = "moncash_button"
    natcash = "natcash"
    sogepay = "sogepay"
    unknown = "unknown"


class SettlementStatus(str, Enum):
    pending = "pending"
    ready = "ready"
    locked = "locked"


class PayoutStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"


class PayoutMethod(str, Enum):
    bank_transfer = "bank_transfer"
    mobile_money = "mobile_money"


class WithdrawalErrorCode(str, Enum):
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    NOT_SETTLED = "NOT_SETTLED"
    INVALID_AMOUNT = "INVALID_AMOUNT"


# ============================================
# Event Earnings
# ============================================

class EventEarnings(BaseModel):
    """Organizer-facing earnings for one event. Money fields are cents."""

    id: Optional[str] = None
    event_id: str
    organizer_id: str
    gross_sales: int = 0
    tickets_sold: int = 0
    platform_fee: int = 0
    processing_fees: int = 0
    net_amount: int = 0
    available_to_withdraw: int = 0
    withdrawn_amount: int = 0
    settlement_status: SettlementStatus = SettlementStatus.pending
    settlement_ready_date: Optional[datetime] = None
    currency: Currency = Currency.HTG
    last_calculated_at: Optional[datetime] = None
    derived: bool = Field(
        False, description="True when reconstructed from tickets rather than read from the ledger"
    )

    model_config = {"from_attributes": True}


class EventTierSalesBreakdownRow(BaseModel):
    tier_key: str
    tier_id: Optional[str] = None
    tier_name: Optional[str] = None
    unit_price: int = Field(..., description="Unit price in cents")
    currency: Currency
    tickets_sold: int
    gross_sales: int


class CurrencyTotals(BaseModel):
    total_gross_sales: int = 0
    total_net_amount: int = 0
    total_available_to_withdraw: int = 0
    total_withdrawn: int = 0
    total_platform_fees: int = 0
    total_processing_fees: int = 0


class EarningsSummaryEvent(BaseModel):
    event_id: str
    event_title: str
    event_date: Optional[datetime] = None
    gross_sales: int
    net_amount: int
    available_to_withdraw: int
    settlement_status: SettlementStatus
    currency: Currency


class EarningsSummary(CurrencyTotals):
    # Shared currency code, or "mixed" when events span currencies
    currency: str = Currency.HTG.value
    totals_by_currency: Dict[str, CurrencyTotals] = {}
    events: List[EarningsSummaryEvent] = []


class TotalAvailableBalance(BaseModel):
    available: int = 0
    pending: int = 0
    currency: Currency = Currency.HTG


# ============================================
# Withdrawals
# ============================================

class WithdrawalRequest(BaseModel):
    amount: int = Field(..., description="Amount to withdraw in cents")
    payout_id: str


class WithdrawalResult(BaseModel):
    success: bool
    error_code: Optional[WithdrawalErrorCode] = None
    error: Optional[str] = None


# ============================================
# Organizer balance / payout eligibility
# ============================================

class OrganizerBalance(BaseModel):
    available: int = 0
    pending: int = 0
    next_payout_date: Optional[datetime] = None
    total_earnings: int = 0
    currency: Currency = Currency.HTG


class PayoutTicket(BaseModel):
    ticket_id: str
    event_id: str
    event_title: Optional[str] = None
    gross_amount: int
    net_amount: int
    purchased_at: Optional[datetime] = None


class PayoutTicketSelection(BaseModel):
    tickets: List[PayoutTicket] = []
    total_amount: int = 0
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None

    @property
    def ticket_ids(self) -> List[str]:
        return [t.ticket_id for t in self.tickets]
