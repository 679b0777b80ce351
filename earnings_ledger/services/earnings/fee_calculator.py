"""
Platform and processing fee calculation for ticket sales.

Fee model (all amounts in cents):
- platform_fee = max(round(gross * platform_percent / 100), platform_min)
- processing_fee = round(gross * processing_percent / 100) + processing_fixed
- net = gross - platform_fee - processing_fee
- Free (or negative) amounts carry no fees
- When fees would exceed gross, they are capped so net is 0, never negative
"""

from dataclasses import dataclass
from typing import Optional
import logging
import math

from earnings_ledger.core.config import settings
from earnings_ledger.schemas.earnings import Currency

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, like JavaScript's Math.round."""
    return int(math.floor(value + 0.5))


@dataclass
class FeeCalculation:
    gross_amount: int       # cents
    platform_fee: int       # cents
    processing_fee: int     # cents
    net_amount: int         # cents
    fees_capped: bool = False


@dataclass
class NetEstimate:
    ticket_price: int       # cents
    platform_fee: int       # cents
    processing_fee: int     # cents
    net_per_ticket: int     # cents
    net_percentage: float   # 0-1 share of the price kept by the organizer


class FeeCalculator:
    """
    Calculates platform and processing fees for a gross amount.

    Args:
        platform_percent: Platform commission percentage (e.g., 10.0 for 10%)
        platform_min_cents: Minimum platform fee per calculation
        processing_percent: Processor percentage (e.g., 2.9 for 2.9%)
        processing_fixed_cents: Processor fixed fee per transaction
    """

    def __init__(
        self,
        platform_percent: float,
        platform_min_cents: int,
        processing_percent: float,
        processing_fixed_cents: int,
    ):
        self.platform_percent = platform_percent
        self.platform_min_cents = platform_min_cents
        self.processing_percent = processing_percent
        self.processing_fixed_cents = processing_fixed_cents

    def platform_fee(self, amount: int) -> int:
        """Uncapped platform fee on an amount."""
        fee = round_half_up(amount * self.platform_percent / 100)
        return max(fee, self.platform_min_cents)

    def processing_fee(self, amount: int) -> int:
        """Uncapped processor fee on an amount (percentage + fixed)."""
        return round_half_up(amount * self.processing_percent / 100) + self.processing_fixed_cents

    def calculate_fees(self, gross_amount: int) -> FeeCalculation:
        """
        Apply both fees to the same gross amount.

        platform_fee + processing_fee + net_amount == gross_amount always holds.
        """
        gross = max(0, int(gross_amount or 0))
        if gross == 0:
            return FeeCalculation(gross_amount=0, platform_fee=0, processing_fee=0, net_amount=0)

        platform_fee = self.platform_fee(gross)
        processing_fee = self.processing_fee(gross)
        capped = False

        if platform_fee + processing_fee > gross:
            capped = True
            platform_fee = min(platform_fee, gross)
            processing_fee = min(processing_fee, gross - platform_fee)
            logger.warning(
                f"Fees exceed gross amount {gross}; capped to platform={platform_fee} "
                f"processing={processing_fee}, net=0"
            )

        return FeeCalculation(
            gross_amount=gross,
            platform_fee=platform_fee,
            processing_fee=processing_fee,
            net_amount=gross - platform_fee - processing_fee,
            fees_capped=capped,
        )

    def estimate_net_per_ticket(self, ticket_price: int) -> NetEstimate:
        """Net an organizer keeps per ticket at a proposed price (for event setup)."""
        fees = self.calculate_fees(ticket_price)
        return NetEstimate(
            ticket_price=fees.gross_amount,
            platform_fee=fees.platform_fee,
            processing_fee=fees.processing_fee,
            net_per_ticket=fees.net_amount,
            net_percentage=fees.net_amount / fees.gross_amount if fees.gross_amount else 0.0,
        )


def get_fee_calculator() -> FeeCalculator:
    """Calculator configured from the current settings."""
    return FeeCalculator(
        platform_percent=settings.PLATFORM_FEE_PERCENT,
        platform_min_cents=settings.PLATFORM_FEE_MIN_CENTS,
        processing_percent=settings.PROCESSING_FEE_PERCENT,
        processing_fixed_cents=settings.PROCESSING_FEE_FIXED_CENTS,
    )


def calculate_fees(gross_amount: int) -> FeeCalculation:
    return get_fee_calculator().calculate_fees(gross_amount)


def meets_minimum_payout(amount: int, minimum: Optional[int] = None) -> bool:
    threshold = settings.MINIMUM_PAYOUT_AMOUNT_CENTS if minimum is None else minimum
    return amount >= threshold


def format_cents(cents: int, currency: Currency = Currency.HTG) -> str:
    """Format cents for display: 'HTG 1,234.56' or '$1,234.56'."""
    amount = f"{round_half_up(cents) / 100:,.2f}"
    if Currency(currency) == Currency.USD:
        return f"${amount}"
    return f"HTG {amount}"
