# routers/payments.py
"""
Payment API.

POST /api/payments records a payment against an invoice, checks it does not
exceed the amount due, and moves the invoice to partially_paid / paid.
Payments are never deleted.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_current_actor
from exceptions import NotFoundError
from models import Payment, PaymentStatus
from schemas.payment import (
     PaymentCreate,
     PaymentListResponse,
     PaymentRecordedResponse,
     PaymentResponse,
     PaymentUpdate,
)
from services.access import Actor, ensure_can_view, require_admin, scope_payments
from services.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, page_count
from services.reconciliation_service import record_payment, update_payment as update_payment_record
from services.report_service import date_window

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.get(
     "",
     response_model=PaymentListResponse,
     summary="List payments with filters"
)
def list_payments(
     student_id: Optional[int] = Query(None, description="Filter by student ID"),
     invoice_id: Optional[int] = Query(None, description="Filter by invoice ID"),
     status: Optional[PaymentStatus] = Query(None, description="Filter by payment status"),
     start_date: Optional[date] = Query(None, description="Transaction date from (inclusive)"),
     end_date: Optional[date] = Query(None, description="Transaction date to (inclusive)"),
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     """
     Retrieve payments, newest transaction first.

     **Role-based access:**
     - **Parent**: Only payments on own invoices.
     - **Admin**: All payments.
     """
     query = scope_payments(db.query(Payment), actor)

     if student_id:
          query = query.filter(Payment.student_id == student_id)
     if invoice_id:
          query = query.filter(Payment.invoice_id == invoice_id)
     if status:
          query = query.filter(Payment.status == status)
     query = query.filter(*date_window(Payment.transaction_date, start_date, end_date))

     total = query.count()
     offset = (page - 1) * page_size
     payments = (
          query.order_by(Payment.transaction_date.desc(), Payment.id.desc())
          .offset(offset)
          .limit(page_size)
          .all()
     )

     return PaymentListResponse(
          payments=[_build_payment_response(p) for p in payments],
          total=total,
          page=page,
          page_size=page_size,
          pages=page_count(total, page_size),
     )


@router.post(
     "",
     response_model=PaymentRecordedResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Record a payment",
)
def create_payment(
     body: PaymentCreate,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     """
     Record a payment against an invoice.

     1. Validates the invoice exists and the amount does not exceed what is due.
     2. Creates the payment (PAY-/REC- numbers generated unless supplied).
     3. Moves the invoice to partially_paid or paid.
     4. Returns the payment with the invoice total and remaining amount due.
     """
     require_admin(actor, "record payments")

     payment, invoice, amount_due = record_payment(
          db,
          invoice_id=body.invoice_id,
          amount=body.amount,
          method=body.payment_method,
          actor=actor,
          transaction_date=body.transaction_date,
          remarks=body.remarks,
          status=body.status,
          transaction_id=body.transaction_id,
          cheque_number=body.cheque_number,
          cheque_date=body.cheque_date,
          bank_name=body.bank_name,
          payment_number=body.payment_number,
          receipt_number=body.receipt_number,
     )

     return PaymentRecordedResponse(
          payment=_build_payment_response(payment),
          invoice_total=invoice.total,
          amount_due=amount_due,
          invoice_status=invoice.status,
     )


@router.get(
     "/{payment_id}",
     response_model=PaymentResponse,
     summary="Get payment by ID"
)
def get_payment(
     payment_id: int,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     """
     **Role-based access:**
     - **Parent**: Can only access payments on own invoices.
     - **Admin**: Can access any payment.
     """
     payment = db.query(Payment).filter(Payment.id == payment_id).first()
     if not payment:
          raise NotFoundError(f"Payment with ID {payment_id} not found")
     ensure_can_view(actor, payment)

     return _build_payment_response(payment)


@router.put(
     "/{payment_id}",
     response_model=PaymentResponse,
     summary="Update payment"
)
def update_payment(
     payment_id: int,
     body: PaymentUpdate,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor),
):
     """
     Update method details, remarks or status of a payment.

     The amount cannot be changed. A status change re-runs reconciliation on
     the invoice (e.g. refunding a payment reopens the balance).
     """
     require_admin(actor, "update payments")

     payment = update_payment_record(db, payment_id, body.model_dump(exclude_unset=True))
     return _build_payment_response(payment)


def _build_payment_response(payment: Payment) -> PaymentResponse:
     student = payment.student
     guardian = payment.guardian
     received_by = payment.received_by

     return PaymentResponse(
          id=payment.id,
          payment_number=payment.payment_number,
          receipt_number=payment.receipt_number,
          invoice_id=payment.invoice_id,
          invoice_number=payment.invoice.invoice_number if payment.invoice else None,
          student_id=payment.student_id,
          guardian_id=payment.guardian_id,
          amount=payment.amount,
          payment_method=payment.payment_method,
          transaction_date=payment.transaction_date,
          transaction_id=payment.transaction_id,
          cheque_number=payment.cheque_number,
          cheque_date=payment.cheque_date,
          bank_name=payment.bank_name,
          status=payment.status,
          remarks=payment.remarks,
          received_by_id=payment.received_by_id,
          created_at=payment.created_at,
          student_name=student.full_name if student else None,
          student_class=student.class_name if student else None,
          guardian_name=guardian.full_name if guardian else None,
          received_by_name=received_by.full_name if received_by else None,
     )
