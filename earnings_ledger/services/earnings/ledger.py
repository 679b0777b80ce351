"""
Per-event earnings ledger.

Handles creation, incremental updates and reads of the event_earnings record:
- Purchases add gross/fees/net (atomic column increments)
- Refunds reverse the fee split, floored at zero (row lock)
- Withdrawals move available funds to withdrawn (row lock)
- Settlement promotes pending -> ready once the hold period has passed

Every mutation commits before returning, or rolls back and re-raises.
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from earnings_ledger import crud
from earnings_ledger.models.event_earnings import EventEarnings
from earnings_ledger.schemas.earnings import (
    Currency,
    CurrencyTotals,
    EarningsSummary,
    EarningsSummaryEvent,
    EventEarnings as EventEarningsView,
    EventTierSalesBreakdownRow,
    SettlementStatus,
    TotalAvailableBalance,
    WithdrawalErrorCode,
    WithdrawalResult,
)
from .derivation import derive_event_earnings, event_currency, tier_sales_breakdown
from .errors import EventNotFoundError
from .fee_calculator import FeeCalculation, FeeCalculator, format_cents, get_fee_calculator
from .fee_resolver import resolve_fees
from .normalizers import normalize_currency
from .reconciliation import reconcile_earnings
from .settlement import (
    calculate_settlement_date,
    ensure_utc,
    is_settlement_ready,
    parse_datetime,
    resolve_event_date,
    utcnow,
)

logger = logging.getLogger(__name__)


class EarningsLedger:
    """
    Ledger operations for a single datastore session.

    Args:
        db: SQLAlchemy session used for every read and write
        calculator: Fee calculator; defaults to the configured fee table
    """

    def __init__(self, db: Session, calculator: Optional[FeeCalculator] = None):
        self.db = db
        self.calculator = calculator or get_fee_calculator()

    @contextmanager
    def _transaction(self):
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # ------------------------------------------------------------------ #
    # Record access
    # ------------------------------------------------------------------ #

    def get_or_create_event_earnings(self, event_id: str) -> EventEarnings:
        """
        Return the event's ledger record, creating a zeroed one on first use.

        Raises:
            EventNotFoundError: If the event does not exist.
        """
        existing = crud.event_earnings.get_by_event(self.db, event_id=event_id)
        if existing:
            return existing

        event = crud.event.get(self.db, id=event_id)
        if not event:
            raise EventNotFoundError(event_id)

        start = parse_datetime(event.start_datetime) or resolve_event_date(event)
        now = utcnow()
        record = EventEarnings(
            event_id=event_id,
            organizer_id=event.organizer_id,
            gross_sales=0,
            tickets_sold=0,
            platform_fee=0,
            processing_fees=0,
            net_amount=0,
            available_to_withdraw=0,
            withdrawn_amount=0,
            settlement_status=SettlementStatus.pending.value,
            settlement_ready_date=calculate_settlement_date(start) if start else None,
            currency=event_currency(event).value,
            last_calculated_at=now,
            created_at=now,
            updated_at=now,
        )
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            # Another request created it first.
            self.db.rollback()
            existing = crud.event_earnings.get_by_event(self.db, event_id=event_id)
            if existing:
                return existing
            raise
        self.db.refresh(record)
        logger.info(f"Created earnings record {record.id} for event {event_id}")
        return record

    def _lock(self, record: EventEarnings) -> EventEarnings:
        return crud.event_earnings.get_for_update(self.db, earnings_id=record.id)

    def _to_view(self, record: EventEarnings) -> EventEarningsView:
        """Organizer-facing view of a stored record; available is 0 unless ready."""
        status = SettlementStatus(record.settlement_status)
        ready_date = ensure_utc(record.settlement_ready_date)
        if status == SettlementStatus.pending and is_settlement_ready(ready_date):
            status = SettlementStatus.ready

        return EventEarningsView(
            id=record.id,
            event_id=record.event_id,
            organizer_id=record.organizer_id,
            gross_sales=record.gross_sales,
            tickets_sold=record.tickets_sold,
            platform_fee=record.platform_fee,
            processing_fees=record.processing_fees,
            net_amount=record.net_amount,
            available_to_withdraw=(
                max(0, record.available_to_withdraw) if status == SettlementStatus.ready else 0
            ),
            withdrawn_amount=record.withdrawn_amount,
            settlement_status=status,
            settlement_ready_date=ready_date,
            currency=normalize_currency(record.currency),
            last_calculated_at=ensure_utc(record.last_calculated_at),
        )

    def _derive(self, event) -> Optional[EventEarningsView]:
        tickets = crud.ticket.get_by_event(self.db, event_id=event.id)
        return derive_event_earnings(event, tickets, calculator=self.calculator)

    def _reconciled(self, record: Optional[EventEarnings], event) -> Optional[EventEarningsView]:
        stored = self._to_view(record) if record else None
        if event is None:
            return stored
        return reconcile_earnings(stored, event_currency(event), lambda: self._derive(event))

    def get_event_earnings(self, event_id: str) -> Optional[EventEarningsView]:
        """
        Earnings for an event, reconciled against the event's currency.

        None means no sales yet, not a fault.
        """
        record = crud.event_earnings.get_by_event(self.db, event_id=event_id)
        event = crud.event.get(self.db, id=event_id)
        return self._reconciled(record, event)

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def add_ticket_to_earnings(
        self,
        event_id: str,
        ticket_amount: int,
        quantity: int = 1,
        *,
        currency: Optional[str] = None,
        payment_method: Optional[str] = None,
        charged_amount_cents: Optional[int] = None,
        charged_currency: Optional[str] = None,
        fx_rate: Optional[float] = None,
    ) -> FeeCalculation:
        """
        Record a confirmed purchase. Called once per payment confirmation.

        ticket_amount is the gross in event-currency cents for all tickets
        of the checkout.
        """
        record = self.get_or_create_event_earnings(event_id)
        ledger_currency = normalize_currency(record.currency)

        if currency is not None and normalize_currency(currency) != ledger_currency:
            logger.warning(
                f"Purchase for event {event_id} reported in {currency}; "
                f"treating amount as {ledger_currency.value}"
            )
        if charged_currency is not None and normalize_currency(charged_currency) == ledger_currency:
            # Charged in the event's own currency, so there is nothing to convert.
            fx_rate = None

        fees = resolve_fees(
            ticket_amount,
            payment_method,
            charged_amount_cents=charged_amount_cents,
            fx_rate=fx_rate,
            calculator=self.calculator,
        )

        model = EventEarnings
        new_available = model.available_to_withdraw + fees.net_amount
        now = utcnow()
        values: Dict[Any, Any] = {
            model.gross_sales: model.gross_sales + fees.gross_amount,
            model.tickets_sold: model.tickets_sold + quantity,
            model.platform_fee: model.platform_fee + fees.platform_fee,
            model.processing_fees: model.processing_fees + fees.processing_fee,
            model.net_amount: model.net_amount + fees.net_amount,
            model.available_to_withdraw: case((new_available < 0, 0), else_=new_available),
            model.last_calculated_at: now,
            model.updated_at: now,
        }
        if fees.net_amount > 0:
            # New money on a fully withdrawn event is withdrawable again.
            values[model.settlement_status] = case(
                (model.settlement_status == SettlementStatus.locked.value, SettlementStatus.ready.value),
                else_=model.settlement_status,
            )

        with self._transaction():
            self.db.query(model).filter(model.id == record.id).update(
                values, synchronize_session=False
            )
        self.db.refresh(record)

        logger.info(
            f"Updated earnings for event {event_id}: gross +{fees.gross_amount}, "
            f"net +{fees.net_amount}, total gross {record.gross_sales}"
        )
        return fees

    def withdraw_from_earnings(self, event_id: str, amount: int, payout_id: str) -> WithdrawalResult:
        """
        Move amount (cents) from available to withdrawn for a payout.

        Business-rule failures come back as an unsuccessful result.
        """
        if amount is None or amount <= 0:
            return WithdrawalResult(
                success=False,
                error_code=WithdrawalErrorCode.INVALID_AMOUNT,
                error="Withdrawal amount must be greater than zero.",
            )

        record = self.get_or_create_event_earnings(event_id)
        result = WithdrawalResult(success=True)

        with self._transaction():
            locked = self._lock(record)
            self._promote_if_due(locked)
            currency = normalize_currency(locked.currency)

            if locked.available_to_withdraw < amount:
                result = WithdrawalResult(
                    success=False,
                    error_code=WithdrawalErrorCode.INSUFFICIENT_FUNDS,
                    error=(
                        f"Insufficient funds. Available: {format_cents(locked.available_to_withdraw, currency)}, "
                        f"requested: {format_cents(amount, currency)}."
                    ),
                )
            elif locked.settlement_status != SettlementStatus.ready.value:
                ready_date = ensure_utc(locked.settlement_ready_date)
                when = f" on {ready_date:%Y-%m-%d}" if ready_date else " after the event"
                result = WithdrawalResult(
                    success=False,
                    error_code=WithdrawalErrorCode.NOT_SETTLED,
                    error=f"Funds are not yet available for withdrawal. They will be released{when}.",
                )
            else:
                locked.available_to_withdraw -= amount
                locked.withdrawn_amount += amount
                locked.settlement_status = (
                    SettlementStatus.locked.value
                    if locked.available_to_withdraw == 0
                    else SettlementStatus.ready.value
                )
                locked.updated_at = utcnow()

        if result.success:
            logger.info(f"Withdrew {amount} from event {event_id} for payout {payout_id}")
        else:
            logger.warning(
                f"Withdrawal of {amount} from event {event_id} for payout {payout_id} "
                f"rejected: {result.error_code.value}"
            )
        return result

    def refund_ticket_from_earnings(self, event_id: str, ticket_amount: int, quantity: int = 1) -> EventEarnings:
        """
        Reverse a refunded purchase using the standard fee split.

        Every total is floored at zero. Callers must not refund the same
        ticket twice.
        """
        fees = self.calculator.calculate_fees(ticket_amount)
        record = self.get_or_create_event_earnings(event_id)

        with self._transaction():
            locked = self._lock(record)
            locked.gross_sales = max(0, locked.gross_sales - fees.gross_amount)
            locked.tickets_sold = max(0, locked.tickets_sold - quantity)
            locked.platform_fee = max(0, locked.platform_fee - fees.platform_fee)
            locked.processing_fees = max(0, locked.processing_fees - fees.processing_fee)
            locked.net_amount = max(0, locked.net_amount - fees.net_amount)
            locked.available_to_withdraw = max(0, locked.available_to_withdraw - fees.net_amount)
            locked.last_calculated_at = utcnow()
            locked.updated_at = locked.last_calculated_at

        logger.info(f"Refunded {ticket_amount} ({quantity} tickets) from event {event_id}")
        if locked.withdrawn_amount > locked.net_amount:
            logger.warning(
                f"Refund on event {event_id} leaves net {locked.net_amount} below "
                f"withdrawn {locked.withdrawn_amount}; funds already paid out exceed earnings"
            )
        return locked

    def _promote_if_due(self, record: EventEarnings) -> bool:
        if (
            record.settlement_status == SettlementStatus.pending.value
            and is_settlement_ready(ensure_utc(record.settlement_ready_date))
        ):
            record.settlement_status = SettlementStatus.ready.value
            record.updated_at = utcnow()
            logger.info(f"Event {record.event_id} settlement status changed to 'ready'")
            return True
        return False

    def update_settlement_status(self, event_id: str) -> SettlementStatus:
        """Promote pending -> ready once the settlement date has passed."""
        record = self.get_or_create_event_earnings(event_id)
        with self._transaction():
            locked = self._lock(record)
            self._promote_if_due(locked)
            status = SettlementStatus(locked.settlement_status)
        return status

    # ------------------------------------------------------------------ #
    # Organizer rollups and reports
    # ------------------------------------------------------------------ #

    def _organizer_views(self, organizer_id: str) -> List[tuple]:
        views = []
        for record in crud.event_earnings.get_by_organizer(self.db, organizer_id=organizer_id):
            event = crud.event.get(self.db, id=record.event_id)
            view = self._reconciled(record, event)
            if view is not None:
                views.append((view, event))
        return views

    def get_organizer_earnings_summary(self, organizer_id: str) -> EarningsSummary:
        by_currency: Dict[str, CurrencyTotals] = {}
        events: List[EarningsSummaryEvent] = []

        for view, event in self._organizer_views(organizer_id):
            totals = by_currency.setdefault(view.currency.value, CurrencyTotals())
            totals.total_gross_sales += view.gross_sales
            totals.total_net_amount += view.net_amount
            totals.total_available_to_withdraw += view.available_to_withdraw
            totals.total_withdrawn += view.withdrawn_amount
            totals.total_platform_fees += view.platform_fee
            totals.total_processing_fees += view.processing_fees

            events.append(
                EarningsSummaryEvent(
                    event_id=view.event_id,
                    event_title=(event.title if event and event.title else "Unknown Event"),
                    event_date=resolve_event_date(event) if event else None,
                    gross_sales=view.gross_sales,
                    net_amount=view.net_amount,
                    available_to_withdraw=view.available_to_withdraw,
                    settlement_status=view.settlement_status,
                    currency=view.currency,
                )
            )

        grand = CurrencyTotals()
        for totals in by_currency.values():
            for field in CurrencyTotals.model_fields:
                setattr(grand, field, getattr(grand, field) + getattr(totals, field))

        if len(by_currency) > 1:
            currency = "mixed"
        elif by_currency:
            currency = next(iter(by_currency))
        else:
            currency = Currency.HTG.value

        undated = datetime.min.replace(tzinfo=timezone.utc)
        events.sort(key=lambda e: e.event_date or undated, reverse=True)

        return EarningsSummary(
            **grand.model_dump(),
            currency=currency,
            totals_by_currency=by_currency,
            events=events,
        )

    def get_withdrawable_events(self, organizer_id: str) -> List[EventEarningsView]:
        """Events whose funds are settled and not yet fully withdrawn."""
        return [
            view
            for view, _ in self._organizer_views(organizer_id)
            if view.settlement_status == SettlementStatus.ready and view.available_to_withdraw > 0
        ]

    def get_total_available_balance(self, organizer_id: str) -> TotalAvailableBalance:
        """Stored balances split into settled (available) and pending."""
        balance = TotalAvailableBalance()
        for record in crud.event_earnings.get_by_organizer(self.db, organizer_id=organizer_id):
            view = self._to_view(record)
            balance.currency = view.currency
            if view.settlement_status == SettlementStatus.ready:
                balance.available += view.available_to_withdraw
            elif view.settlement_status == SettlementStatus.pending:
                balance.pending += max(0, record.available_to_withdraw)
        return balance

    def get_event_tier_sales_breakdown(self, event_id: str) -> List[EventTierSalesBreakdownRow]:
        """
        Raises:
            EventNotFoundError: If the event does not exist.
        """
        event = crud.event.get(self.db, id=event_id)
        if not event:
            raise EventNotFoundError(event_id)
        tickets = crud.ticket.get_by_event(self.db, event_id=event_id)
        return tier_sales_breakdown(event, tickets)
