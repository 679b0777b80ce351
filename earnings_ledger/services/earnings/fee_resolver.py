"""
Per-payment-group fee resolution in event currency.

The platform fee is always taken on the organizer-facing gross. The Stripe
processing fee is charged in the settlement currency, so it is computed on the
charged amount and converted back with the recorded FX rate
(settlement units per one event unit). Mobile-money and other rails settle
their own fees at charge time and contribute nothing here.
"""

from typing import Any, Optional

from .fee_calculator import FeeCalculation, FeeCalculator, get_fee_calculator, round_half_up
from .normalizers import STRIPE_METHODS, normalize_payment_method, positive_rate, to_number


def resolve_fees(
    gross_event_cents: int,
    payment_method: Any,
    charged_amount_cents: Optional[int] = None,
    fx_rate: Optional[float] = None,
    calculator: Optional[FeeCalculator] = None,
) -> FeeCalculation:
    gross = round_half_up(to_number(gross_event_cents) or 0)
    if gross <= 0:
        return FeeCalculation(gross_amount=0, platform_fee=0, processing_fee=0, net_amount=0)

    calculator = calculator or get_fee_calculator()
    platform_fee = calculator.platform_fee(gross)

    processing_fee = 0
    if normalize_payment_method(payment_method) in STRIPE_METHODS:
        charged = to_number(charged_amount_cents)
        charged_cents = max(0, round_half_up(charged if charged is not None else gross))
        fee_in_charge_currency = calculator.processing_fee(charged_cents)
        rate = positive_rate(fx_rate)
        # Without a rate the fee is taken as-is (best effort).
        processing_fee = round_half_up(fee_in_charge_currency / rate) if rate else fee_in_charge_currency

    return FeeCalculation(
        gross_amount=gross,
        platform_fee=platform_fee,
        processing_fee=processing_fee,
        net_amount=gross - platform_fee - processing_fee,
    )
