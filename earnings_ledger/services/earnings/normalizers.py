"""
Normalization of stored currency and payment-method strings.

Historical ticket and event rows spell these inconsistently ('usd', 'Stripe',
'moncash-button', None). Everything downstream works with the closed enums.
"""

from enum import Enum
from typing import Any, Optional
import math

from earnings_ledger.schemas.earnings import Currency, PaymentMethod
from .fee_calculator import round_half_up

_PAYMENT_METHODS = {method.value: method for method in PaymentMethod}

STRIPE_METHODS = frozenset({PaymentMethod.stripe, PaymentMethod.stripe_connect})
MONCASH_METHODS = frozenset({PaymentMethod.moncash, PaymentMethod.moncash_button})


def _raw_text(raw: Any) -> str:
    if isinstance(raw, Enum):
        raw = raw.value
    return str(raw or "").strip()


def normalize_currency(raw: Any) -> Currency:
    """Anything not recognizably USD is HTG."""
    return Currency.USD if _raw_text(raw).upper() == "USD" else Currency.HTG


def normalize_payment_method(raw: Any) -> PaymentMethod:
    value = _raw_text(raw).lower().replace("-", "_").replace(" ", "_")
    return _PAYMENT_METHODS.get(value, PaymentMethod.unknown)


def to_number(value: Any) -> Optional[float]:
    """Finite float or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def positive_rate(value: Any) -> Optional[float]:
    rate = to_number(value)
    return rate if rate is not None and rate > 0 else None


def cents_from_major(value: Any) -> int:
    """Major currency units to cents (half-up); unparseable input is 0."""
    number = to_number(value)
    if number is None:
        return 0
    return round_half_up(number * 100)
