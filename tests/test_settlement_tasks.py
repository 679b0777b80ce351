from datetime import timedelta
from unittest.mock import patch

from earnings_ledger import crud
from earnings_ledger.background_tasks.settlement_tasks import refresh_settlement_statuses
from earnings_ledger.services.earnings import EarningsLedger
from earnings_ledger.services.earnings.settlement import calculate_settlement_date, is_settlement_ready
from tests.utils.ledger import make_event, now_utc


class TestRefreshSettlementStatuses:

    def test_promotes_due_events_only(self, db):
        ledger = EarningsLedger(db)
        due = [make_event(db), make_event(db, start_datetime=now_utc() - timedelta(days=8))]
        future = make_event(db, start_datetime=now_utc() + timedelta(days=1))
        for event in due + [future]:
            ledger.get_or_create_event_earnings(event.id)

        promoted = refresh_settlement_statuses(db)

        assert promoted == 2
        for event in due:
            assert crud.event_earnings.get_by_event(db, event_id=event.id).settlement_status == "ready"
        assert crud.event_earnings.get_by_event(db, event_id=future.id).settlement_status == "pending"

    def test_nothing_due(self, db):
        assert refresh_settlement_statuses(db) == 0

    def test_one_failure_does_not_stop_sweep(self, db):
        ledger = EarningsLedger(db)
        events = [make_event(db), make_event(db)]
        for event in events:
            ledger.get_or_create_event_earnings(event.id)

        real_update = EarningsLedger.update_settlement_status
        failing_id = events[0].id

        def flaky(self, event_id):
            if event_id == failing_id:
                raise RuntimeError("lock timeout")
            return real_update(self, event_id)

        with patch.object(EarningsLedger, "update_settlement_status", flaky):
            promoted = refresh_settlement_statuses(db)

        assert promoted == 1
        assert crud.event_earnings.get_by_event(db, event_id=events[1].id).settlement_status == "ready"


class TestSettlementDates:

    def test_hold_period(self):
        start = now_utc()

        assert calculate_settlement_date(start, 7) == start + timedelta(days=7)
        assert calculate_settlement_date(start, 0) == start

    def test_ready_boundary(self):
        ready = now_utc()

        assert is_settlement_ready(ready, now=ready) is True
        assert is_settlement_ready(ready, now=ready - timedelta(seconds=1)) is False
        assert is_settlement_ready(None) is False
