"""
Payment model - a settlement amount applied against exactly one invoice.

student_id / guardian_id are copied from the invoice when the payment is
recorded so guardian-scoped listings don't need a join. The invoice stays
the source of truth for ownership.
"""
import enum

from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text, ForeignKey, Enum, func
from sqlalchemy.orm import relationship

from .base import Base, TimestampMixin, enum_values, utcnow


class PaymentMethod(str, enum.Enum):
     CASH = "cash"
     CARD = "card"
     ONLINE = "online"
     BANK_TRANSFER = "bank_transfer"
     CHEQUE = "cheque"


class PaymentStatus(str, enum.Enum):
     PENDING = "pending"
     COMPLETED = "completed"
     FAILED = "failed"
     REFUNDED = "refunded"


class Payment(TimestampMixin, Base):
     """Recorded payment. Amount is fixed once created."""

     id = Column(Integer, primary_key=True, autoincrement=True)
     payment_number = Column(String(32), nullable=False, unique=True, index=True)
     receipt_number = Column(String(32), nullable=False, unique=True, index=True)

     invoice_id = Column(
          Integer,
          ForeignKey("invoices.id", ondelete="NO ACTION"),  # Prevent delete while payments exist
          nullable=False,
          index=True
     )
     student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
     guardian_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

     amount = Column(Numeric(12, 2), nullable=False)
     payment_method = Column(
          Enum(PaymentMethod, name="payment_method", create_constraint=True, values_callable=enum_values),
          nullable=False
     )
     transaction_date = Column(DateTime, default=utcnow, server_default=func.now(), nullable=False, index=True)

     # Method-specific details
     transaction_id = Column(String(100), nullable=True)
     cheque_number = Column(String(50), nullable=True)
     cheque_date = Column(Date, nullable=True)
     bank_name = Column(String(100), nullable=True)

     status = Column(
          Enum(PaymentStatus, name="payment_status", create_constraint=True, values_callable=enum_values),
          default=PaymentStatus.COMPLETED,
          nullable=False,
          index=True
     )
     remarks = Column(Text, nullable=True)
     received_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

     # Relationships
     invoice = relationship("Invoice", back_populates="payments")
     student = relationship("Student")
     guardian = relationship("User", foreign_keys=[guardian_id])
     received_by = relationship("User", foreign_keys=[received_by_id])

     def __repr__(self):
          return f"<Payment(id={self.id}, number='{self.payment_number}', amount={self.amount}, status='{self.status.value}')>"
