"""Tests for the admin and guardian dashboards."""

from datetime import date, timedelta
from decimal import Decimal

from models import utcnow


def test_admin_dashboard(client, create_invoice, pay, seed, admin_headers):
    amy = create_invoice(student=seed.amy)
    create_invoice(student=seed.cara, due_date=(date.today() - timedelta(days=3)).isoformat())
    ben = create_invoice(student=seed.ben)
    pay(amy["id"], "1000.00")
    pay(ben["id"], "5000.00")
    pay(amy["id"], "500.00", status="failed")

    response = client.get("/api/dashboard/admin", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()

    stats = body["stats"]
    assert Decimal(stats["total_revenue"]) == Decimal("6000.00")
    assert stats["pending_invoices"] == 2
    assert stats["overdue_invoices"] == 1
    assert Decimal(stats["total_pending_amount"]) == Decimal("9000.00")

    this_month = utcnow().strftime("%Y-%m")
    revenue = {m["month"]: m for m in body["monthly_revenue"]}
    assert Decimal(revenue[this_month]["total"]) == Decimal("6000.00")
    assert revenue[this_month]["count"] == 2

    assert len(body["recent_payments"]) == 2
    assert {p["student_name"] for p in body["recent_payments"]} == {"Amy Doe", "Ben Doe"}


def test_guardian_dashboard(client, create_invoice, pay, seed, jane_headers):
    amy_first = create_invoice(student=seed.amy, due_date=(date.today() + timedelta(days=5)).isoformat())
    create_invoice(student=seed.amy, due_date=(date.today() + timedelta(days=60)).isoformat())
    create_invoice(student=seed.cara)
    pay(amy_first["id"], "1000.00")

    response = client.get("/api/dashboard/guardian", headers=jane_headers)
    assert response.status_code == 200
    body = response.json()

    children = {c["student_name"]: c for c in body["children"]}
    assert set(children) == {"Amy Doe", "Ben Doe"}

    amy = children["Amy Doe"]
    assert amy["pending_invoices"] == 2
    assert Decimal(amy["total_due"]) == Decimal("9000.00")
    assert amy["upcoming_due"]["invoice_id"] == amy_first["id"]
    assert Decimal(amy["upcoming_due"]["amount_due"]) == Decimal("4000.00")

    ben = children["Ben Doe"]
    assert ben["pending_invoices"] == 0
    assert ben["upcoming_due"] is None

    assert [p["invoice_number"] for p in body["recent_payments"]] == [amy_first["invoice_number"]]


def test_guardian_dashboard_requires_guardian(client, seed, admin_headers):
    assert client.get("/api/dashboard/guardian", headers=admin_headers).status_code == 403


def test_health(client, seed):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": True}
