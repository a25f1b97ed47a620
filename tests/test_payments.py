"""Tests for payment recording and invoice reconciliation."""

import re
from decimal import Decimal

from models import Payment


def _amount_due(client, headers, invoice_id):
    response = client.get(f"/api/invoices/{invoice_id}/amount-due", headers=headers)
    assert response.status_code == 200
    return response.json()


def test_partial_then_full_payment(client, create_invoice, pay, admin_headers):
    invoice = create_invoice()

    first = pay(invoice["id"], "2000.00")
    assert first.status_code == 201, first.text
    body = first.json()
    assert Decimal(body["invoice_total"]) == Decimal("5000.00")
    assert Decimal(body["amount_due"]) == Decimal("3000.00")
    assert body["invoice_status"] == "partially_paid"

    second = pay(invoice["id"], "3000.00")
    assert second.status_code == 201
    assert Decimal(second.json()["amount_due"]) == Decimal("0.00")
    assert second.json()["invoice_status"] == "paid"

    third = pay(invoice["id"], "1.00")
    assert third.status_code == 400
    assert third.json()["detail"] == "Payment amount exceeds amount due (0.00)"

    due = _amount_due(client, admin_headers, invoice["id"])
    assert Decimal(due["amount_paid"]) == Decimal("5000.00")
    assert due["status"] == "paid"


def test_overpayment_leaves_no_record(client, db, create_invoice, pay, admin_headers):
    invoice = create_invoice()

    response = pay(invoice["id"], "5000.01")
    assert response.status_code == 400
    assert "exceeds amount due (5000.00)" in response.json()["detail"]

    assert db.query(Payment).filter(Payment.invoice_id == invoice["id"]).count() == 0
    due = _amount_due(client, admin_headers, invoice["id"])
    assert due["status"] == "pending"
    assert Decimal(due["amount_due"]) == Decimal("5000.00")


def test_amount_due_read_is_idempotent(client, create_invoice, pay, admin_headers):
    invoice = create_invoice()
    pay(invoice["id"], "1250.50")

    reads = [_amount_due(client, admin_headers, invoice["id"]) for _ in range(3)]
    assert reads[0] == reads[1] == reads[2]
    assert Decimal(reads[0]["amount_due"]) == Decimal("3749.50")


def test_payment_numbers_and_receipts_are_generated(create_invoice, pay):
    invoice = create_invoice()

    first = pay(invoice["id"], "100.00").json()["payment"]
    second = pay(invoice["id"], "100.00").json()["payment"]

    assert re.fullmatch(r"PAY-\d{4}-\d{5}", first["payment_number"])
    assert re.fullmatch(r"REC-\d{4}-\d{5}", first["receipt_number"])
    assert first["payment_number"] != second["payment_number"]
    assert first["receipt_number"] != second["receipt_number"]
    assert first["student_id"] == invoice["student_id"]
    assert first["guardian_id"] == invoice["guardian_id"]


def test_duplicate_explicit_receipt_number_rejected(create_invoice, pay):
    invoice = create_invoice()
    assert pay(invoice["id"], "10.00", receipt_number="R-1").status_code == 201
    assert pay(invoice["id"], "10.00", receipt_number="R-1").status_code == 400


def test_payment_against_unknown_invoice(pay, seed):
    assert pay(999, "10.00").status_code == 404


def test_non_positive_amount_rejected(create_invoice, pay):
    invoice = create_invoice()
    assert pay(invoice["id"], "0").status_code == 422
    assert pay(invoice["id"], "-5").status_code == 422


def test_payment_on_cancelled_invoice_rejected(client, create_invoice, pay, admin_headers):
    invoice = create_invoice()
    client.put(f"/api/invoices/{invoice['id']}", json={"status": "cancelled"}, headers=admin_headers)

    response = pay(invoice["id"], "100.00")
    assert response.status_code == 400
    assert "cancelled" in response.json()["detail"]


def test_guardian_cannot_record_payment(client, create_invoice, jane_headers):
    invoice = create_invoice()
    response = client.post(
        "/api/payments",
        json={"invoice_id": invoice["id"], "amount": "100.00", "payment_method": "cash"},
        headers=jane_headers,
    )
    assert response.status_code == 403


def test_payment_amount_cannot_be_edited(client, create_invoice, pay, admin_headers):
    invoice = create_invoice()
    payment = pay(invoice["id"], "1000.00").json()["payment"]

    response = client.put(f"/api/payments/{payment['id']}", json={"amount": "10.00"}, headers=admin_headers)
    assert response.status_code == 422

    response = client.get(f"/api/payments/{payment['id']}", headers=admin_headers)
    assert Decimal(response.json()["amount"]) == Decimal("1000.00")


def test_payment_details_can_be_edited(client, create_invoice, pay, admin_headers):
    invoice = create_invoice()
    payment = pay(invoice["id"], "1000.00").json()["payment"]

    response = client.put(
        f"/api/payments/{payment['id']}",
        json={"payment_method": "cheque", "cheque_number": "000123", "remarks": "Re-keyed"},
        headers=admin_headers,
    )
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["payment_method"] == "cheque"
    assert body["cheque_number"] == "000123"
    assert body["status"] == "completed"


def test_refund_reopens_balance(client, create_invoice, pay, admin_headers):
    invoice = create_invoice()
    first = pay(invoice["id"], "2000.00").json()["payment"]
    pay(invoice["id"], "3000.00")

    response = client.put(f"/api/payments/{first['id']}", json={"status": "refunded"}, headers=admin_headers)
    assert response.status_code == 200

    due = _amount_due(client, admin_headers, invoice["id"])
    assert due["status"] == "partially_paid"
    assert Decimal(due["amount_due"]) == Decimal("2000.00")


def test_pending_payment_counts_once_completed(client, create_invoice, pay, admin_headers):
    invoice = create_invoice()
    pending = pay(invoice["id"], "5000.00", status="pending")
    assert pending.status_code == 201
    assert pending.json()["invoice_status"] == "pending"
    assert Decimal(pending.json()["amount_due"]) == Decimal("5000.00")

    # A completed payment fills the invoice; the pending one can no longer complete
    pay(invoice["id"], "4000.00")
    payment_id = pending.json()["payment"]["id"]
    response = client.put(f"/api/payments/{payment_id}", json={"status": "completed"}, headers=admin_headers)
    assert response.status_code == 400

    due = _amount_due(client, admin_headers, invoice["id"])
    assert Decimal(due["amount_paid"]) == Decimal("4000.00")


def test_completing_pending_payment_settles_invoice(client, create_invoice, pay, admin_headers):
    invoice = create_invoice()
    payment_id = pay(invoice["id"], "5000.00", status="pending").json()["payment"]["id"]

    response = client.put(f"/api/payments/{payment_id}", json={"status": "completed"}, headers=admin_headers)
    assert response.status_code == 200

    assert _amount_due(client, admin_headers, invoice["id"])["status"] == "paid"


def test_list_payments_filters(client, create_invoice, pay, admin_headers, seed):
    amy_invoice = create_invoice()
    cara_invoice = create_invoice(student=seed.cara)
    pay(amy_invoice["id"], "100.00")
    pay(amy_invoice["id"], "200.00", status="failed")
    pay(cara_invoice["id"], "300.00")

    body = client.get("/api/payments", headers=admin_headers).json()
    assert body["total"] == 3

    body = client.get("/api/payments", params={"invoice_id": amy_invoice["id"]}, headers=admin_headers).json()
    assert body["total"] == 2

    body = client.get("/api/payments", params={"status": "failed"}, headers=admin_headers).json()
    assert [Decimal(p["amount"]) for p in body["payments"]] == [Decimal("200.00")]

    body = client.get("/api/payments", params={"student_id": seed.cara.id}, headers=admin_headers).json()
    assert body["payments"][0]["student_name"] == "Cara Patel"
