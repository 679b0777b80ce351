"""
Tests for ticket-based earnings derivation and the tier sales report.

Rows are plain namespaces: derivation only reads attributes.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from earnings_ledger.schemas.earnings import Currency, SettlementStatus
from earnings_ledger.services.earnings.derivation import (
    build_payment_groups,
    derive_event_earnings,
    qualifying_tickets,
    tier_sales_breakdown,
)
from earnings_ledger.services.earnings.fee_calculator import FeeCalculator

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _event(**overrides):
    values = dict(
        id="evt_1",
        organizer_id="org_1",
        currency="HTG",
        original_currency=None,
        start_datetime=NOW - timedelta(days=30),
        date_time=None,
        date=None,
        created_at=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


_ticket_seq = iter(range(1, 10000))


def _ticket(**overrides):
    values = dict(
        id=f"tkt_{next(_ticket_seq)}",
        status="valid",
        price_paid=1000.0,
        payment_id="pay_1",
        payment_method="moncash",
        exchange_rate_used=None,
        charged_amount=None,
        charged_currency=None,
        tier_id=None,
        tier_name=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestDeriveEventEarnings:

    def setup_method(self):
        self.calculator = FeeCalculator(
            platform_percent=10.0,
            platform_min_cents=50,
            processing_percent=2.9,
            processing_fixed_cents=30,
        )

    def _derive(self, event, tickets):
        return derive_event_earnings(event, tickets, now=NOW, calculator=self.calculator, hold_days=7)

    def test_moncash_sale(self):
        tickets = [_ticket(), _ticket()]

        result = self._derive(_event(), tickets)

        assert result.gross_sales == 200000
        assert result.platform_fee == 20000
        assert result.processing_fees == 0
        assert result.net_amount == 180000
        assert result.tickets_sold == 2
        assert result.settlement_status == SettlementStatus.ready
        assert result.available_to_withdraw == 180000
        assert result.currency == Currency.HTG
        assert result.derived is True

    def test_fixed_processing_fee_applied_once_per_payment(self):
        """Two 50.00 HTG stripe tickets in one checkout share one fixed fee."""
        tickets = [
            _ticket(price_paid=50.0, payment_id="pi_1", payment_method="stripe", exchange_rate_used=0.0076),
            _ticket(price_paid=50.0, payment_id="pi_1", payment_method="stripe", exchange_rate_used=0.0076),
        ]

        result = self._derive(_event(), tickets)

        # Charged 76 US cents: 2 + 30 = 32, / 0.0076 -> 4211 HTG cents
        assert result.processing_fees == 4211
        assert result.platform_fee == 1000
        assert result.net_amount == 10000 - 1000 - 4211

    def test_separate_payments_pay_separate_fixed_fees(self):
        tickets = [
            _ticket(price_paid=50.0, payment_id="pi_1", payment_method="stripe", exchange_rate_used=0.0076),
            _ticket(price_paid=50.0, payment_id="pi_2", payment_method="stripe", exchange_rate_used=0.0076),
        ]

        grouped = build_payment_groups(qualifying_tickets(tickets))

        assert len(grouped) == 2
        assert all(g.ticket_count == 1 for g in grouped)

    def test_explicit_charged_amount_wins(self):
        ticket = _ticket(
            price_paid=1320.0,
            payment_method="stripe",
            charged_amount=10.0,
            exchange_rate_used=0.007576,
        )

        group = build_payment_groups(qualifying_tickets([ticket]))[0]

        assert group.charged_amount_cents == 1000
        assert group.gross_event_cents == 132000

    def test_charge_in_listed_currency_ignores_rate(self):
        """A stripe charge already in HTG is not converted back with a stale rate."""
        local = _ticket(
            price_paid=100.0, payment_method="stripe", exchange_rate_used=0.0076, charged_currency="HTG"
        )
        foreign = _ticket(
            price_paid=100.0, payment_method="stripe", exchange_rate_used=0.0076, charged_currency="USD"
        )

        assert self._derive(_event(), [local]).processing_fees == 320
        # Charged 76 US cents: 2 + 30 = 32, / 0.0076 -> 4211 HTG cents
        assert self._derive(_event(), [foreign]).processing_fees == 4211

    def test_group_keeps_first_known_method(self):
        tickets = [
            _ticket(payment_method=None),
            _ticket(payment_method="stripe", exchange_rate_used=0.0076),
        ]

        group = build_payment_groups(qualifying_tickets(tickets))[0]

        assert group.payment_method.value == "stripe"
        assert group.fx_rate == 0.0076

    def test_excluded_tickets(self):
        tickets = [
            _ticket(status="cancelled"),
            _ticket(status="refunded"),
            _ticket(price_paid=0),
            _ticket(price_paid=None),
            _ticket(status=None),
            _ticket(status="Confirmed"),
        ]

        result = self._derive(_event(), tickets)

        assert result.tickets_sold == 2
        assert result.gross_sales == 200000

    def test_no_date_returns_none(self):
        event = _event(start_datetime=None)

        assert self._derive(event, [_ticket()]) is None

    def test_no_tickets_returns_none(self):
        assert self._derive(_event(), []) is None
        assert self._derive(_event(), [_ticket(status="cancelled")]) is None

    def test_future_event_is_pending(self):
        event = _event(start_datetime=NOW + timedelta(days=2))

        result = self._derive(event, [_ticket()])

        assert result.settlement_status == SettlementStatus.pending
        assert result.available_to_withdraw == 0
        assert result.settlement_ready_date == NOW + timedelta(days=9)

    def test_legacy_date_string(self):
        event = _event(start_datetime=None, date_time="2024-01-10T20:00:00Z")

        result = self._derive(event, [_ticket()])

        assert result.settlement_ready_date == datetime(2024, 1, 17, 20, 0, tzinfo=timezone.utc)
        assert result.settlement_status == SettlementStatus.ready

    def test_currency_from_original_currency(self):
        event = _event(currency=None, original_currency="usd")

        assert self._derive(event, [_ticket()]).currency == Currency.USD


class TestTierSalesBreakdown:

    def test_rows_sorted_by_gross(self):
        tickets = [
            _ticket(tier_id="vip", tier_name="VIP", price_paid=100.0),
            _ticket(tier_id="vip", tier_name="VIP", price_paid=100.0),
            _ticket(tier_id="ga", tier_name="General Admission", price_paid=25.0),
            _ticket(tier_id="ga", tier_name="General Admission", price_paid=25.0),
            _ticket(tier_id="ga", tier_name="General Admission", price_paid=25.0),
            _ticket(price_paid=10.0),
            _ticket(tier_id="vip", status="refunded", price_paid=100.0),
        ]

        rows = tier_sales_breakdown(_event(), tickets)

        assert [r.tier_key for r in rows] == ["vip", "ga", "general"]
        assert rows[0].tickets_sold == 2
        assert rows[0].gross_sales == 20000
        assert rows[1].tickets_sold == 3
        assert rows[1].unit_price == 2500
        assert rows[2].tier_id is None

    def test_price_change_splits_rows(self):
        tickets = [
            _ticket(tier_id="early", price_paid=20.0),
            _ticket(tier_id="early", price_paid=30.0),
        ]

        rows = tier_sales_breakdown(_event(), tickets)

        assert len(rows) == 2
        assert {r.unit_price for r in rows} == {2000, 3000}

    def test_tier_name_used_when_no_id(self):
        rows = tier_sales_breakdown(_event(), [_ticket(tier_name="Balcony")])

        assert rows[0].tier_key == "Balcony"
        assert rows[0].currency == Currency.HTG
