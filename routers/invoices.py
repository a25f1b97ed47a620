# routers/invoices.py
"""
Invoice API routes.

Role-based access:
- Parent (guardian): can only read own invoices
- Admin: can read everything and is the only role that writes
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_current_actor
from models import Invoice, InvoiceStatus, Payment
from schemas.invoice import (
     AmountDueResponse,
     InvoiceCreate,
     InvoiceDetailResponse,
     InvoiceListResponse,
     InvoiceResponse,
     InvoiceUpdate,
)
from services.access import Actor, ensure_can_view, require_admin
from services.invoice_service import InvoiceService
from services.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, page_count
from services.reconciliation_service import amount_paid, delete_invoice as delete_invoice_record, get_invoice_or_404, to_money

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.post(
     "",
     response_model=InvoiceResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a new invoice"
)
def create_invoice(
     invoice_data: InvoiceCreate,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """
     Create an invoice for a student.

     - **items**: line items; an item with only **fee_id** is pre-filled from the fee structure
     - **tax** / **discount**: non-negative adjustments
     - subtotal and total are computed: total = sum(items) + tax - discount
     - **invoice_number**: generated as INV-<year>-<sequence> when omitted
     """
     require_admin(actor, "create invoices")

     invoice = InvoiceService.create_invoice(db, invoice_data)
     db.commit()

     return _build_invoice_response(invoice)


@router.get(
     "",
     response_model=InvoiceListResponse,
     summary="List invoices with filters"
)
def list_invoices(
     status: Optional[InvoiceStatus] = Query(None, description="Filter by status (overdue = past due and unpaid)"),
     student_id: Optional[int] = Query(None, description="Filter by student ID"),
     guardian_id: Optional[int] = Query(None, description="Filter by guardian ID"),
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """
     Retrieve a paginated list of invoices, newest first.

     **Role-based access:**
     - **Parent**: Only own invoices (a guardian_id filter naming someone else returns nothing).
     - **Admin**: All invoices.
     """
     invoices, total = InvoiceService.list_invoices(
          db,
          actor,
          status=status,
          student_id=student_id,
          guardian_id=guardian_id,
          page=page,
          page_size=page_size,
     )

     return InvoiceListResponse(
          invoices=[_build_invoice_response(inv) for inv in invoices],
          total=total,
          page=page,
          page_size=page_size,
          pages=page_count(total, page_size),
     )


@router.get(
     "/{invoice_id}/amount-due",
     response_model=AmountDueResponse,
     summary="Get the amount still due on an invoice"
)
def get_invoice_amount_due(
     invoice_id: int,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """Used to pre-fill the payment form."""
     invoice = get_invoice_or_404(db, invoice_id)
     ensure_can_view(actor, invoice)

     paid = amount_paid(db, invoice.id)
     return AmountDueResponse(
          invoice_id=invoice.id,
          invoice_number=invoice.invoice_number,
          total=to_money(invoice.total),
          amount_paid=paid,
          amount_due=to_money(invoice.total) - paid,
          status=invoice.status,
     )


@router.get(
     "/{invoice_id}",
     response_model=InvoiceDetailResponse,
     summary="Get invoice by ID"
)
def get_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """
     Retrieve an invoice with its items, payments, amount paid and amount due.

     **Role-based access:**
     - **Parent**: Can only access own invoices.
     - **Admin**: Can access any invoice.
     """
     invoice = get_invoice_or_404(db, invoice_id)
     ensure_can_view(actor, invoice)

     payments = (
          db.query(Payment)
          .filter(Payment.invoice_id == invoice.id)
          .order_by(Payment.transaction_date.asc(), Payment.id.asc())
          .all()
     )
     paid = amount_paid(db, invoice.id)
     base = _build_invoice_response(invoice)

     return InvoiceDetailResponse(
          **base.model_dump(),
          amount_paid=paid,
          amount_due=to_money(invoice.total) - paid,
          payments=[
               {
                    "id": p.id,
                    "payment_number": p.payment_number,
                    "receipt_number": p.receipt_number,
                    "amount": p.amount,
                    "payment_method": p.payment_method.value,
                    "status": p.status.value,
                    "transaction_date": p.transaction_date,
               }
               for p in payments
          ],
     )


@router.put(
     "/{invoice_id}",
     response_model=InvoiceResponse,
     summary="Update invoice"
)
def update_invoice(
     invoice_id: int,
     invoice_data: InvoiceUpdate,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """
     Update an existing invoice.

     Only provided fields will be updated. Common use cases:
     - Correct items, tax or discount (totals are recomputed)
     - Move the due date
     - Cancel an unpaid invoice, or reopen a cancelled one
     """
     require_admin(actor, "update invoices")

     invoice = InvoiceService.update_invoice(db, invoice_id, invoice_data)
     return _build_invoice_response(invoice)


@router.delete(
     "/{invoice_id}",
     status_code=status.HTTP_204_NO_CONTENT,
     summary="Delete invoice"
)
def delete_invoice(
     invoice_id: int,
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """
     Delete an invoice by ID.

     Refused with 409 while any payment references the invoice.
     """
     require_admin(actor, "delete invoices")

     delete_invoice_record(db, invoice_id)
     return None


def _build_invoice_response(invoice: Invoice) -> InvoiceResponse:
     """
     Helper function to build InvoiceResponse with related data.
     """
     student = invoice.student
     guardian = invoice.guardian

     return InvoiceResponse(
          id=invoice.id,
          invoice_number=invoice.invoice_number,
          student_id=invoice.student_id,
          guardian_id=invoice.guardian_id,
          items=[
               {"id": item.id, "fee_id": item.fee_id, "description": item.description, "amount": item.amount}
               for item in invoice.items
          ],
          subtotal=invoice.subtotal,
          tax=invoice.tax,
          discount=invoice.discount,
          total=invoice.total,
          due_date=invoice.due_date,
          status=invoice.status,
          is_overdue=invoice.is_overdue,
          academic_year=invoice.academic_year,
          term=invoice.term,
          created_at=invoice.created_at,
          student_name=student.full_name if student else None,
          student_class=student.class_name if student else None,
          guardian_name=guardian.full_name if guardian else None,
          guardian_email=guardian.email if guardian else None,
     )
