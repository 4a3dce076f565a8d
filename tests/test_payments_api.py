from datetime import date

from fastapi.testclient import TestClient

from paydash import crud
from paydash.core.schedule import DefaultStatusPolicy, PaymentStatus
from paydash.database import SessionLocal
from paydash.main import app
from paydash.services import PaymentScheduleService


def api_login(client: TestClient) -> dict:
    resp = client.post("/api/login", json={"username": "admin", "password": "admin"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['sessionId']}"}


def test_list_payments_returns_full_schedule_in_order():
    client = TestClient(app)
    resp = client.get("/api/payments")
    assert resp.status_code == 200
    data = resp.json()
    assert data[0]["date"] == "2025-10-31"
    assert data[1]["date"] == "2025-11-14"
    assert [item["date"] for item in data] == sorted(item["date"] for item in data)
    assert {item["status"] for item in data} == {"nothing"}
    assert data[0]["amount"] == "300.00"


def test_update_payment_status_persists_and_is_reflected():
    client = TestClient(app)
    headers = api_login(client)

    resp = client.put("/api/payments/2025-11-14", json={"status": "paid"}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["date"] == "2025-11-14"
    assert body["status"] == "paid"
    assert "updated_at" in body

    listing = {item["date"]: item["status"] for item in client.get("/api/payments").json()}
    assert listing["2025-11-14"] == "paid"

    session = SessionLocal()
    try:
        assert crud.load_override_map(session) == {"2025-11-14": "paid"}
    finally:
        session.close()


def test_setting_nothing_explicitly_is_kept_as_override():
    client = TestClient(app)
    headers = api_login(client)
    client.put("/api/payments/2025-11-14", json={"status": "paid"}, headers=headers)
    resp = client.put("/api/payments/2025-11-14", json={"status": "nothing"}, headers=headers)
    assert resp.status_code == 200

    session = SessionLocal()
    try:
        assert crud.load_override_map(session) == {"2025-11-14": "nothing"}
    finally:
        session.close()


def test_update_payment_rejects_invalid_status():
    client = TestClient(app)
    headers = api_login(client)
    resp = client.put("/api/payments/2025-11-14", json={"status": "refunded"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid status"

    session = SessionLocal()
    try:
        assert crud.get_payment(session, "2025-11-14").status == "nothing"
    finally:
        session.close()


def test_update_payment_unknown_date_is_not_found():
    client = TestClient(app)
    headers = api_login(client)
    resp = client.put("/api/payments/2025-11-15", json={"status": "paid"}, headers=headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Payment not found"


def test_update_payment_requires_session():
    client = TestClient(app)
    resp = client.put("/api/payments/2025-11-14", json={"status": "paid"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Not authenticated"


def test_summary_endpoint_reports_month_figures(frozen_today):
    client = TestClient(app)
    headers = api_login(client)
    client.put("/api/payments/2025-10-31", json={"status": "due"}, headers=headers)
    client.put("/api/payments/2025-11-14", json={"status": "paid"}, headers=headers)

    resp = client.get("/api/payments/summary", params={"month": "2025-11"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["month_label"] == "November 2025"
    assert [item["date"] for item in data["monthly_payments"]] == ["2025-11-14", "2025-11-28"]
    assert float(data["monthly_received"]) == 300.0
    assert float(data["total_overdue"]) == 300.0
    assert [item["date"] for item in data["overdue"]] == ["2025-10-31"]
    assert data["next_payment"]["date"] == "2025-11-28"


def test_summary_endpoint_rejects_bad_month():
    client = TestClient(app)
    resp = client.get("/api/payments/summary", params={"month": "2025-13"})
    assert resp.status_code == 400


def test_explicit_nothing_beats_time_derived_default():
    session = SessionLocal()
    try:
        assert crud.update_payment_status(session, "2025-10-31", "nothing") is not None
        service = PaymentScheduleService(session, policy=DefaultStatusPolicy.TIME_DERIVED)
        statuses = {record.key: record.status for record in service.series(date(2025, 12, 1))}
    finally:
        session.close()

    assert statuses["2025-10-31"] is PaymentStatus.NOTHING
    assert statuses["2025-11-14"] is PaymentStatus.PAID
    assert statuses["2025-12-12"] is PaymentStatus.DUE
