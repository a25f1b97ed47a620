"""
Reconciliation Service - keeps invoice status in step with its payments.

Rules:
- amount paid = sum of COMPLETED payments against the invoice
- amount due  = invoice.total - amount paid
- a payment may never push amount paid above the invoice total
- status: PAID when paid >= total, PARTIALLY_PAID when 0 < paid < total,
  PENDING when nothing is paid. CANCELLED invoices are left alone.

Every write that changes amount paid runs inside a per-invoice critical
section (in-process lock + SELECT ... FOR UPDATE on the invoice row) and
commits before leaving it, so two payments against the same invoice can
never both pass the amount-due check.
"""
import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple

from sqlalchemy.orm import Session

from exceptions import ConflictError, NotFoundError, ValidationError
from models import Invoice, InvoiceStatus, Payment, PaymentMethod, PaymentStatus, utcnow
from services.access import Actor
from services.locks import invoice_locks
from services.sequence_service import PAYMENT_PREFIX, RECEIPT_PREFIX, allocate_number

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
CENT = Decimal("0.01")


def to_money(value) -> Decimal:
     """Coerce to a Decimal with two places. Never goes through float."""
     if value is None:
          return ZERO
     if not isinstance(value, Decimal):
          value = Decimal(str(value))
     return value.quantize(CENT, rounding=ROUND_HALF_UP)


def derive_status(total: Decimal, paid: Decimal) -> InvoiceStatus:
     if paid > 0 and paid >= total:
          return InvoiceStatus.PAID
     if paid > 0:
          return InvoiceStatus.PARTIALLY_PAID
     return InvoiceStatus.PENDING


def amount_paid(db: Session, invoice_id: int) -> Decimal:
     """Sum of completed payments against one invoice."""
     rows = (
          db.query(Payment.amount)
          .filter(Payment.invoice_id == invoice_id, Payment.status == PaymentStatus.COMPLETED)
          .all()
     )
     return sum((to_money(row.amount) for row in rows), ZERO)


def amounts_paid(db: Session, invoice_ids: Iterable[int]) -> dict[int, Decimal]:
     """Completed totals for many invoices in one query. Missing ids map to 0."""
     ids = list(set(invoice_ids))
     paid = {invoice_id: ZERO for invoice_id in ids}
     if not ids:
          return paid
     rows = (
          db.query(Payment.invoice_id, Payment.amount)
          .filter(Payment.invoice_id.in_(ids), Payment.status == PaymentStatus.COMPLETED)
          .all()
     )
     for invoice_id, amount in rows:
          paid[invoice_id] += to_money(amount)
     return paid


def get_invoice_or_404(db: Session, invoice_id: int) -> Invoice:
     invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
     if not invoice:
          raise NotFoundError(f"Invoice with ID {invoice_id} not found")
     return invoice


def get_amount_due(db: Session, invoice_id: int) -> Decimal:
     """invoice.total - completed payments. Read only."""
     invoice = get_invoice_or_404(db, invoice_id)
     return to_money(invoice.total) - amount_paid(db, invoice.id)


def lock_invoice(db: Session, invoice_id: int) -> Invoice:
     invoice = (
          db.query(Invoice)
          .filter(Invoice.id == invoice_id)
          .with_for_update()
          .populate_existing()
          .first()
     )
     if not invoice:
          raise NotFoundError(f"Invoice with ID {invoice_id} not found")
     return invoice


def apply_status(invoice: Invoice, paid: Decimal) -> InvoiceStatus:
     """Move the invoice to the status implied by paid. Returns the new status."""
     if invoice.status == InvoiceStatus.CANCELLED:
          return invoice.status
     new_status = derive_status(to_money(invoice.total), paid)
     if new_status != invoice.status:
          logger.info(
               "Invoice %s status %s -> %s (paid %s of %s)",
               invoice.invoice_number, invoice.status.value, new_status.value, paid, invoice.total,
          )
          invoice.status = new_status
     return new_status


def _unique_number(db: Session, prefix: str, column, explicit: Optional[str], label: str) -> str:
     if explicit:
          if db.query(Payment.id).filter(column == explicit).first():
               raise ValidationError(f"{label} '{explicit}' already exists")
          return explicit
     # Skip values already taken by explicitly numbered payments
     while True:
          number = allocate_number(db, prefix)
          if not db.query(Payment.id).filter(column == number).first():
               return number


def record_payment(
     db: Session,
     invoice_id: int,
     amount: Decimal,
     method: PaymentMethod,
     actor: Actor,
     transaction_date: Optional[datetime] = None,
     remarks: Optional[str] = None,
     status: PaymentStatus = PaymentStatus.COMPLETED,
     transaction_id: Optional[str] = None,
     cheque_number: Optional[str] = None,
     cheque_date=None,
     bank_name: Optional[str] = None,
     payment_number: Optional[str] = None,
     receipt_number: Optional[str] = None,
) -> Tuple[Payment, Invoice, Decimal]:
     """
     Record a payment against an invoice and update the invoice status.

     Returns:
          (payment, invoice, amount_due_after)

     Raises:
          NotFoundError: invoice does not exist
          ValidationError: non-positive amount, cancelled invoice, amount above
               what is still due, duplicate explicit payment/receipt number
     """
     amount = to_money(amount)
     if amount <= 0:
          raise ValidationError("Payment amount must be greater than zero")

     with invoice_locks.hold(invoice_id):
          try:
               invoice = lock_invoice(db, invoice_id)
               if invoice.status == InvoiceStatus.CANCELLED:
                    raise ValidationError("Cannot record a payment against a cancelled invoice")

               total = to_money(invoice.total)
               total_paid = amount_paid(db, invoice.id)
               amount_due = total - total_paid
               if amount > amount_due:
                    logger.warning(
                         "Rejected payment of %s on %s: only %s due",
                         amount, invoice.invoice_number, amount_due,
                    )
                    raise ValidationError(f"Payment amount exceeds amount due ({amount_due})")

               payment = Payment(
                    payment_number=_unique_number(
                         db, PAYMENT_PREFIX, Payment.payment_number, payment_number, "Payment number"
                    ),
                    receipt_number=_unique_number(
                         db, RECEIPT_PREFIX, Payment.receipt_number, receipt_number, "Receipt number"
                    ),
                    invoice_id=invoice.id,
                    student_id=invoice.student_id,
                    guardian_id=invoice.guardian_id,
                    amount=amount,
                    payment_method=method,
                    transaction_date=transaction_date or utcnow(),
                    transaction_id=transaction_id,
                    cheque_number=cheque_number,
                    cheque_date=cheque_date,
                    bank_name=bank_name,
                    status=status,
                    remarks=remarks,
                    received_by_id=actor.id,
               )
               db.add(payment)
               db.flush()

               if status == PaymentStatus.COMPLETED:
                    total_paid += amount
               apply_status(invoice, total_paid)
               db.commit()
          except Exception:
               db.rollback()
               raise

     logger.info(
          "Recorded %s (%s, %s) on %s by user %s",
          payment.payment_number, amount, method.value, invoice.invoice_number, actor.id,
     )
     return payment, invoice, total - total_paid


def update_payment(db: Session, payment_id: int, changes: dict) -> Payment:
     """
     Apply an administrative edit to a payment.

     The amount is never editable. A status change is re-reconciled: moving
     into COMPLETED must fit in the amount due, and the invoice status is
     re-derived afterwards.
     """
     payment = db.query(Payment).filter(Payment.id == payment_id).first()
     if not payment:
          raise NotFoundError(f"Payment with ID {payment_id} not found")
     if "amount" in changes:
          raise ValidationError("Payment amount cannot be changed after it is recorded")

     with invoice_locks.hold(payment.invoice_id):
          try:
               invoice = lock_invoice(db, payment.invoice_id)
               db.refresh(payment)

               new_status = changes.get("status")
               if new_status is not None and new_status != payment.status:
                    if new_status == PaymentStatus.COMPLETED:
                         if invoice.status == InvoiceStatus.CANCELLED:
                              raise ValidationError("Cannot complete a payment on a cancelled invoice")
                         amount_due = to_money(invoice.total) - amount_paid(db, invoice.id)
                         if to_money(payment.amount) > amount_due:
                              raise ValidationError(f"Payment amount exceeds amount due ({amount_due})")
                    logger.info(
                         "Payment %s status %s -> %s",
                         payment.payment_number, payment.status.value, PaymentStatus(new_status).value,
                    )

               for field, value in changes.items():
                    if value is None and field in ("status", "payment_method"):
                         continue
                    setattr(payment, field, value)
               db.flush()

               apply_status(invoice, amount_paid(db, invoice.id))
               db.commit()
          except Exception:
               db.rollback()
               raise

     return payment


def delete_invoice(db: Session, invoice_id: int) -> None:
     """
     Delete an invoice with no payments.

     Raises:
          NotFoundError: invoice does not exist
          ConflictError: at least one payment (any status) references it
     """
     with invoice_locks.hold(invoice_id):
          try:
               invoice = lock_invoice(db, invoice_id)
               payment_count = db.query(Payment).filter(Payment.invoice_id == invoice.id).count()
               if payment_count > 0:
                    raise ConflictError("Cannot delete invoice with existing payments")
               db.delete(invoice)
               db.commit()
          except Exception:
               db.rollback()
               raise

     logger.info("Deleted invoice %s", invoice.invoice_number)
