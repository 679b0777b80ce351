from datetime import timedelta

from earnings_ledger.services.earnings import EarningsLedger
from tests.utils.ledger import make_event, make_payout, make_ticket, now_utc


def test_read_event_earnings(test_client, db):
    event = make_event(db)
    EarningsLedger(db).add_ticket_to_earnings(event.id, 200000, 2, payment_method="moncash")

    response = test_client.get(f"/api/v1/events/{event.id}/earnings")

    assert response.status_code == 200
    data = response.json()
    assert data["gross_sales"] == 200000
    assert data["net_amount"] == 180000
    assert data["settlement_status"] == "ready"
    assert data["currency"] == "HTG"


def test_read_event_earnings_no_sales(test_client, db):
    event = make_event(db)

    response = test_client.get(f"/api/v1/events/{event.id}/earnings")

    assert response.status_code == 200
    assert response.json() is None


def test_read_tier_sales(test_client, db):
    event = make_event(db)
    make_ticket(db, event, tier_id="vip", price_paid=100.0)

    response = test_client.get(f"/api/v1/events/{event.id}/earnings/tiers")

    assert response.status_code == 200
    assert response.json()[0]["tier_key"] == "vip"
    assert response.json()[0]["gross_sales"] == 10000


def test_read_tier_sales_missing_event(test_client):
    response = test_client.get("/api/v1/events/evt_missing/earnings/tiers")

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "EVENT_NOT_FOUND"


def test_refresh_settlement(test_client, db):
    event = make_event(db)

    response = test_client.post(f"/api/v1/events/{event.id}/earnings/settlement")

    assert response.status_code == 200
    assert response.json() == "ready"


def test_withdraw(test_client, db):
    event = make_event(db)
    EarningsLedger(db).add_ticket_to_earnings(event.id, 200000, 2, payment_method="moncash")

    response = test_client.post(
        f"/api/v1/events/{event.id}/earnings/withdrawals",
        json={"amount": 50000, "payout_id": "po_1"},
    )

    assert response.status_code == 200
    assert response.json()["success"] is True


def test_withdraw_rejected(test_client, db):
    event = make_event(db, start_datetime=now_utc() + timedelta(days=1))
    EarningsLedger(db).add_ticket_to_earnings(event.id, 200000, 2, payment_method="moncash")

    response = test_client.post(
        f"/api/v1/events/{event.id}/earnings/withdrawals",
        json={"amount": 50000, "payout_id": "po_1"},
    )

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "NOT_SETTLED"


def test_withdraw_missing_event(test_client):
    response = test_client.post(
        "/api/v1/events/evt_missing/earnings/withdrawals",
        json={"amount": 100, "payout_id": "po_1"},
    )

    assert response.status_code == 404


def test_organizer_summary(test_client, db):
    event = make_event(db)
    EarningsLedger(db).add_ticket_to_earnings(event.id, 10000, payment_method="moncash")

    response = test_client.get("/api/v1/organizers/org_1/earnings/summary")

    assert response.status_code == 200
    data = response.json()
    assert data["currency"] == "HTG"
    assert data["total_net_amount"] == 9000
    assert len(data["events"]) == 1


def test_organizer_balance(test_client, db):
    event = make_event(db)
    make_ticket(db, event)

    response = test_client.get("/api/v1/organizers/org_1/balance")

    assert response.status_code == 200
    assert response.json()["available"] == 9000


def test_payable_tickets(test_client, db):
    event = make_event(db)
    t1 = make_ticket(db, event)
    t2 = make_ticket(db, event)
    make_payout(db, "org_1", [t1.id])

    response = test_client.get("/api/v1/organizers/org_1/payouts/available-tickets")

    assert response.status_code == 200
    data = response.json()
    assert [t["ticket_id"] for t in data["tickets"]] == [t2.id]
    assert data["total_amount"] == 9000
