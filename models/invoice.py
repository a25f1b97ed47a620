import enum
from datetime import date
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Numeric, Date, ForeignKey, Enum
from sqlalchemy.orm import relationship

from exceptions import ValidationError
from .base import Base, TimestampMixin, enum_values


class InvoiceStatus(str, enum.Enum):
     """Enumeration for invoice payment status."""
     PENDING = "pending"
     PAID = "paid"
     PARTIALLY_PAID = "partially_paid"
     OVERDUE = "overdue"
     CANCELLED = "cancelled"


# Statuses that still expect money
OUTSTANDING_STATUSES = (InvoiceStatus.PENDING, InvoiceStatus.PARTIALLY_PAID)


class Invoice(TimestampMixin, Base):
     """
     Invoice model - a charge issued to a guardian for a student.

     Totals are always derived from the line items:
     subtotal = sum(items.amount), total = subtotal + tax - discount.
     Status is only moved by reconciliation or by an administrative edit.
     """
     __tablename__ = "invoices"

     id = Column(Integer, primary_key=True, autoincrement=True)
     invoice_number = Column(String(32), nullable=False, unique=True, index=True)

     # Foreign keys
     student_id = Column(
          Integer,
          ForeignKey("students.id"),
          nullable=False,
          index=True
     )
     guardian_id = Column(
          Integer,
          ForeignKey("users.id"),
          nullable=False,
          index=True
     )

     # Amounts
     subtotal = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     tax = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     discount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     total = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))

     due_date = Column(Date, nullable=False, index=True)
     status = Column(
          Enum(InvoiceStatus, name="invoice_status", create_constraint=True, values_callable=enum_values),
          default=InvoiceStatus.PENDING,
          nullable=False,
          index=True
     )
     academic_year = Column(String(20), nullable=False, index=True)
     term = Column(String(50), nullable=True)  # e.g. "Term 1", "Q1 2026"

     # Relationships
     student = relationship("Student", back_populates="invoices")
     guardian = relationship("User", foreign_keys=[guardian_id])
     items = relationship(
          "InvoiceItem",
          back_populates="invoice",
          cascade="all, delete-orphan",
          order_by="InvoiceItem.position"
     )
     payments = relationship("Payment", back_populates="invoice", passive_deletes="all")

     def __repr__(self):
          return f"<Invoice(id={self.id}, number='{self.invoice_number}', total={self.total}, status='{self.status.value}')>"

     @property
     def is_overdue(self) -> bool:
          """Due date has passed while money is still outstanding. Derived, never stored."""
          return self.status in OUTSTANDING_STATUSES and self.due_date < date.today()

     def recalculate_totals(self) -> None:
          """Recompute subtotal and total from the line items, tax and discount."""
          subtotal = sum((Decimal(item.amount) for item in self.items), Decimal("0.00"))
          total = subtotal + Decimal(self.tax or 0) - Decimal(self.discount or 0)
          if total < 0:
               raise ValidationError("Invoice total cannot be negative (discount exceeds subtotal plus tax)")
          self.subtotal = subtotal
          self.total = total


class InvoiceItem(Base):
     """One billed line on an invoice, optionally pre-filled from a Fee."""

     id = Column(Integer, primary_key=True, autoincrement=True)
     invoice_id = Column(
          Integer,
          ForeignKey("invoices.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     fee_id = Column(Integer, ForeignKey("fees.id", ondelete="SET NULL"), nullable=True)
     description = Column(String(255), nullable=False)
     amount = Column(Numeric(12, 2), nullable=False)
     position = Column(Integer, nullable=False, default=0)

     invoice = relationship("Invoice", back_populates="items")
     fee = relationship("Fee")

     def __repr__(self):
          return f"<InvoiceItem(id={self.id}, description='{self.description}', amount={self.amount})>"
