"""Tests for the billing reports."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from models import Invoice, Payment, utcnow
from services.report_service import collection_rate


def _get(client, headers, path, **params):
    response = client.get(f"/api/reports/{path}", params=params, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def billed(create_invoice, pay, seed):
    """
    Amy (Grade 5): 5000 invoice, 2000 paid by cash in Jan, 1000 by card in Feb.
    Ben (Grade 6): 5500 invoice, 5500 paid online in Feb.
    Cara (Grade 5): 5000 invoice, nothing paid, already overdue.
    """
    amy = create_invoice(student=seed.amy)
    ben = create_invoice(student=seed.ben, items=[{"fee_id": seed.tuition.id}, {"fee_id": seed.lab.id}])
    cara = create_invoice(student=seed.cara, due_date=(date.today() - timedelta(days=1)).isoformat())

    pay(amy["id"], "2000.00", transaction_date="2026-01-15T10:00:00")
    pay(amy["id"], "1000.00", method="card", transaction_date="2026-02-03T09:30:00")
    pay(ben["id"], "5500.00", method="online", transaction_date="2026-02-28T23:59:00")
    return {"amy": amy, "ben": ben, "cara": cara}


def test_fee_collection_groups_by_month(client, billed, admin_headers):
    body = _get(client, admin_headers, "fee-collection")

    months = {m["month"]: m for m in body["monthly_collection"]}
    assert list(months) == ["2026-01", "2026-02"]
    assert Decimal(months["2026-01"]["total_collected"]) == Decimal("2000.00")
    assert Decimal(months["2026-02"]["total_collected"]) == Decimal("6500.00")
    assert months["2026-02"]["payment_count"] == 2
    assert Decimal(body["grand_total"]) == Decimal("8500.00")
    assert body["total_payments"] == 3

    feb_by_class = {
        row["class_name"]: Decimal(row["total_collected"])
        for row in body["class_breakdown"]
        if row["month"] == "2026-02"
    }
    assert feb_by_class == {"Grade 5": Decimal("1000.00"), "Grade 6": Decimal("5500.00")}


def test_fee_collection_window_is_inclusive(client, billed, admin_headers):
    body = _get(client, admin_headers, "fee-collection", start_date="2026-02-03", end_date="2026-02-28")
    assert Decimal(body["grand_total"]) == Decimal("6500.00")

    body = _get(client, admin_headers, "fee-collection", end_date="2026-01-31", class_name="Grade 5")
    assert Decimal(body["grand_total"]) == Decimal("2000.00")


def test_inverted_window_is_rejected(client, seed, admin_headers):
    response = client.get(
        "/api/reports/fee-collection",
        params={"start_date": "2026-03-01", "end_date": "2026-02-01"},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_outstanding_dues_summary_ignores_page_size(client, billed, admin_headers):
    small = _get(client, admin_headers, "outstanding-dues", page_size=1)
    large = _get(client, admin_headers, "outstanding-dues", page_size=50)

    assert small["summary"] == large["summary"]
    assert len(small["invoices"]) == 1
    assert len(large["invoices"]) == 2
    assert small["pagination"]["pages"] == 2

    summary = large["summary"]
    assert summary["invoice_count"] == 2
    assert summary["overdue_count"] == 1
    assert Decimal(summary["total_billed"]) == Decimal("10000.00")
    assert Decimal(summary["total_paid"]) == Decimal("3000.00")
    assert Decimal(summary["total_due"]) == Decimal("7000.00")

    # Oldest due date first
    first = large["invoices"][0]
    assert first["invoice_id"] == billed["cara"]["id"]
    assert first["is_overdue"] is True
    assert first["guardian_phone"] == "+15550002"


def test_outstanding_dues_class_filter(client, billed, admin_headers):
    body = _get(client, admin_headers, "outstanding-dues", class_name="Grade 6")
    assert body["invoices"] == []
    assert body["summary"]["invoice_count"] == 0
    assert Decimal(body["summary"]["total_due"]) == Decimal("0")


def test_payment_history_method_summary(client, billed, admin_headers):
    body = _get(client, admin_headers, "payment-history", page_size=2)

    assert [m["method"] for m in body["method_summary"]] == ["online", "cash", "card"]
    assert Decimal(body["grand_total"]) == Decimal("8500.00")
    assert body["pagination"]["total"] == 3
    assert len(body["payments"]) == 2
    # Newest first
    assert body["payments"][0]["payment_method"] == "online"

    body = _get(client, admin_headers, "payment-history", method="card")
    assert Decimal(body["grand_total"]) == Decimal("1000.00")
    assert body["payments"][0]["student_name"] == "Amy Doe"


def test_payment_history_excludes_non_completed(client, billed, pay, admin_headers):
    pay(billed["cara"]["id"], "100.00", status="failed", transaction_date="2026-02-10T12:00:00")

    body = _get(client, admin_headers, "payment-history")
    assert body["pagination"]["total"] == 3


def test_class_wise_summary(client, billed, admin_headers):
    body = _get(client, admin_headers, "class-wise-summary")

    rows = {row["class_name"]: row for row in body["class_summary"]}
    grade5 = rows["Grade 5"]
    assert Decimal(grade5["total_billed"]) == Decimal("10000.00")
    assert Decimal(grade5["total_collected"]) == Decimal("3000.00")
    assert Decimal(grade5["total_pending"]) == Decimal("7000.00")
    assert Decimal(grade5["collection_rate"]) == Decimal("30.00")
    assert grade5["student_count"] == 2
    assert Decimal(rows["Grade 6"]["collection_rate"]) == Decimal("100.00")

    totals = body["totals"]
    assert Decimal(totals["total_billed"]) == Decimal("15500.00")
    assert Decimal(totals["total_collected"]) == Decimal("8500.00")


def test_class_with_nothing_billed_has_zero_rate(client, create_invoice, seed, admin_headers):
    create_invoice(student=seed.ben, items=[{"description": "Waived", "amount": "0.00"}])

    body = _get(client, admin_headers, "class-wise-summary")
    row = body["class_summary"][0]
    assert Decimal(row["total_billed"]) == Decimal("0")
    assert Decimal(row["collection_rate"]) == Decimal("0")


def test_class_wise_summary_academic_year_filter(client, billed, admin_headers):
    body = _get(client, admin_headers, "class-wise-summary", academic_year="1999-2000")
    assert body["class_summary"] == []
    assert Decimal(body["totals"]["total_billed"]) == Decimal("0")


def test_collection_rate_rounding():
    assert collection_rate(Decimal("0"), Decimal("0")) == Decimal("0.00")
    assert collection_rate(Decimal("1"), Decimal("3")) == Decimal("33.33")
    assert collection_rate(Decimal("2"), Decimal("3")) == Decimal("66.67")


def test_class_wise_summary_date_window(client, create_invoice, seed, admin_headers):
    create_invoice(student=seed.ben)
    today = utcnow().date()

    yesterday = (today - timedelta(days=1)).isoformat()
    body = _get(client, admin_headers, "class-wise-summary", start_date=yesterday, end_date=yesterday)
    assert body["class_summary"] == []

    body = _get(client, admin_headers, "class-wise-summary", start_date=today.isoformat(), end_date=today.isoformat())
    assert [row["class_name"] for row in body["class_summary"]] == ["Grade 6"]
    assert Decimal(body["totals"]["total_billed"]) == Decimal("5000.00")


def test_payment_and_invoice_dates_share_one_clock(client, create_invoice, pay, seed, db, admin_headers):
    invoice = create_invoice(student=seed.cara)
    assert pay(invoice["id"], "1200.00").status_code == 201

    payment = db.query(Payment).one()
    created_at = db.get(Invoice, invoice["id"]).created_at
    assert payment.transaction_date.date() == created_at.date()

    day = payment.transaction_date.date().isoformat()
    collected = _get(client, admin_headers, "fee-collection", start_date=day, end_date=day)
    assert Decimal(collected["grand_total"]) == Decimal("1200.00")

    summary = _get(client, admin_headers, "class-wise-summary", start_date=day, end_date=day)
    assert Decimal(summary["totals"]["total_collected"]) == Decimal("1200.00")
