"""
Invoice Service - Business logic layer for invoice operations.

This service handles invoice creation, updates, listing and business rules
separate from the API layer. Totals are always computed here, never taken
from the client.
"""
import logging
from datetime import date
from typing import Optional, List, Tuple

from sqlalchemy.orm import Session

from exceptions import NotFoundError, ValidationError
from models import Fee, Invoice, InvoiceItem, InvoiceStatus, OUTSTANDING_STATUSES, Student, User, UserRole
from schemas.invoice import InvoiceCreate, InvoiceItemIn, InvoiceUpdate
from services.access import Actor, scope_invoices
from services.locks import invoice_locks
from services.reconciliation_service import lock_invoice, amount_paid, apply_status, to_money
from services.sequence_service import INVOICE_PREFIX, allocate_number

logger = logging.getLogger(__name__)

# Statuses an admin may set by hand; the paid states belong to reconciliation
MANUAL_STATUSES = (InvoiceStatus.PENDING, InvoiceStatus.CANCELLED)


class InvoiceService:
     """Service class for invoice-related business logic."""

     @staticmethod
     def build_items(db: Session, items: List[InvoiceItemIn]) -> List[InvoiceItem]:
          """
          Turn request items into InvoiceItem rows, pre-filling description and
          amount from the referenced fee structure where they were omitted.

          Raises:
               NotFoundError: If a referenced fee doesn't exist
          """
          rows = []
          for position, item in enumerate(items):
               description = item.description
               amount = item.amount
               if item.fee_id is not None:
                    fee = db.query(Fee).filter(Fee.id == item.fee_id).first()
                    if not fee:
                         raise NotFoundError(f"Fee structure with ID {item.fee_id} not found")
                    if description is None:
                         description = fee.name
                    if amount is None:
                         amount = fee.amount
               rows.append(
                    InvoiceItem(
                         fee_id=item.fee_id,
                         description=description,
                         amount=to_money(amount),
                         position=position,
                    )
               )
          return rows

     @staticmethod
     def _invoice_number(db: Session, explicit: Optional[str]) -> str:
          if explicit:
               if db.query(Invoice.id).filter(Invoice.invoice_number == explicit).first():
                    raise ValidationError(f"Invoice number '{explicit}' already exists")
               return explicit
          while True:
               number = allocate_number(db, INVOICE_PREFIX)
               if not db.query(Invoice.id).filter(Invoice.invoice_number == number).first():
                    return number

     @staticmethod
     def create_invoice(db: Session, data: InvoiceCreate) -> Invoice:
          """
          Create an invoice with computed subtotal and total.

          Args:
               db: SQLAlchemy database session
               data: Validated request body

          Returns:
               Created Invoice object (flushed, not committed)

          Raises:
               NotFoundError: If the student, guardian or a referenced fee doesn't exist
               ValidationError: If the student isn't in the guardian's care, the
                    number is taken, or the discount makes the total negative
          """
          # Verify student exists
          student = db.query(Student).filter(Student.id == data.student_id).first()
          if not student:
               raise NotFoundError(f"Student with ID {data.student_id} not found")

          # Verify guardian exists
          guardian = (
               db.query(User)
               .filter(User.id == data.guardian_id, User.role == UserRole.PARENT.value)
               .first()
          )
          if not guardian:
               raise NotFoundError(f"Guardian with ID {data.guardian_id} not found")

          if student.guardian_id != guardian.id:
               raise ValidationError("Student does not belong to the specified guardian")

          invoice = Invoice(
               invoice_number=InvoiceService._invoice_number(db, data.invoice_number),
               student_id=student.id,
               guardian_id=guardian.id,
               tax=to_money(data.tax),
               discount=to_money(data.discount),
               due_date=data.due_date,
               status=InvoiceStatus.PENDING,
               academic_year=data.academic_year,
               term=data.term,
          )
          invoice.items = InvoiceService.build_items(db, data.items)
          invoice.recalculate_totals()

          db.add(invoice)
          db.flush()  # Flush to get the ID without committing

          logger.info(
               "Created invoice %s for student %s: total %s due %s",
               invoice.invoice_number, student.id, invoice.total, invoice.due_date,
          )
          return invoice

     @staticmethod
     def update_invoice(db: Session, invoice_id: int, data: InvoiceUpdate) -> Invoice:
          """
          Apply an administrative edit.

          Items/tax/discount changes recompute the totals; the new total may not
          drop below what has already been paid. Status is re-derived from the
          payments afterwards.
          """
          changes = data.model_dump(exclude_unset=True)

          with invoice_locks.hold(invoice_id):
               try:
                    invoice = lock_invoice(db, invoice_id)
                    paid = amount_paid(db, invoice.id)

                    if "status" in changes and changes["status"] is not None:
                         InvoiceService._change_status(invoice, changes["status"], paid)

                    for field in ("due_date", "academic_year", "term"):
                         if field in changes and (changes[field] is not None or field == "term"):
                              setattr(invoice, field, changes[field])

                    if any(changes.get(field) is not None for field in ("items", "tax", "discount")):
                         if data.items is not None:
                              invoice.items = InvoiceService.build_items(db, data.items)
                         if data.tax is not None:
                              invoice.tax = to_money(data.tax)
                         if data.discount is not None:
                              invoice.discount = to_money(data.discount)
                         invoice.recalculate_totals()
                         if to_money(invoice.total) < paid:
                              raise ValidationError(
                                   f"Invoice total ({invoice.total}) cannot be less than the amount already paid ({paid})"
                              )

                    apply_status(invoice, paid)
                    db.flush()
                    db.commit()
               except Exception:
                    db.rollback()
                    raise

          logger.info("Updated invoice %s: total %s, status %s", invoice.invoice_number, invoice.total, invoice.status.value)
          return invoice

     @staticmethod
     def _change_status(invoice: Invoice, status: InvoiceStatus, paid) -> None:
          if status == invoice.status:
               return
          if status not in MANUAL_STATUSES:
               raise ValidationError(
                    f"Status '{status.value}' cannot be set directly; it follows from recorded payments"
               )
          if status == InvoiceStatus.CANCELLED and paid > 0:
               raise ValidationError("Cannot cancel an invoice that has completed payments")
          if status == InvoiceStatus.PENDING and invoice.status != InvoiceStatus.CANCELLED:
               raise ValidationError("Only a cancelled invoice can be reopened")
          logger.info("Invoice %s status %s -> %s", invoice.invoice_number, invoice.status.value, status.value)
          invoice.status = status

     @staticmethod
     def list_invoices(
          db: Session,
          actor: Actor,
          status: Optional[InvoiceStatus] = None,
          student_id: Optional[int] = None,
          guardian_id: Optional[int] = None,
          page: int = 1,
          page_size: int = 10,
     ) -> Tuple[List[Invoice], int]:
          """
          Return one page of invoices visible to the actor plus the filtered count.

          status=OVERDUE selects the derived overdue set: outstanding invoices
          whose due date has passed.
          """
          query = scope_invoices(db.query(Invoice), actor)

          if student_id:
               query = query.filter(Invoice.student_id == student_id)
          if guardian_id:
               query = query.filter(Invoice.guardian_id == guardian_id)

          if status == InvoiceStatus.OVERDUE:
               query = query.filter(
                    Invoice.status.in_(OUTSTANDING_STATUSES),
                    Invoice.due_date < date.today(),
               )
          elif status is not None:
               query = query.filter(Invoice.status == status)

          total = query.count()
          offset = (page - 1) * page_size
          invoices = (
               query.order_by(Invoice.created_at.desc(), Invoice.id.desc())
               .offset(offset)
               .limit(page_size)
               .all()
          )
          return invoices, total
