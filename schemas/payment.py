"""
Pydantic schemas for the payment API.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from models import InvoiceStatus, PaymentMethod, PaymentStatus


class PaymentCreate(BaseModel):
     """Request body for POST /api/payments."""

     invoice_id: int = Field(..., gt=0, description="Invoice the payment settles")
     amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Must not exceed the amount due")
     payment_method: PaymentMethod
     transaction_date: Optional[datetime] = Field(None, description="Defaults to now")
     transaction_id: Optional[str] = Field(None, max_length=100)
     cheque_number: Optional[str] = Field(None, max_length=50)
     cheque_date: Optional[date] = None
     bank_name: Optional[str] = Field(None, max_length=100)
     status: PaymentStatus = PaymentStatus.COMPLETED
     remarks: Optional[str] = Field(None, max_length=2000)
     payment_number: Optional[str] = Field(None, min_length=1, max_length=32, description="Leave empty to auto-generate")
     receipt_number: Optional[str] = Field(None, min_length=1, max_length=32, description="Leave empty to auto-generate")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "invoice_id": 1,
                    "amount": 2000.00,
                    "payment_method": "cash",
                    "remarks": "First instalment",
               }
          }
     )


class PaymentUpdate(BaseModel):
     """
     Request body for PUT /api/payments/{id}.

     The amount is fixed once recorded; record a new payment instead.
     """

     payment_method: Optional[PaymentMethod] = None
     transaction_id: Optional[str] = Field(None, max_length=100)
     cheque_number: Optional[str] = Field(None, max_length=50)
     cheque_date: Optional[date] = None
     bank_name: Optional[str] = Field(None, max_length=100)
     status: Optional[PaymentStatus] = None
     remarks: Optional[str] = Field(None, max_length=2000)

     model_config = ConfigDict(extra="forbid")


class PaymentResponse(BaseModel):
     """Payment with display fields from the student, guardian and invoice."""

     id: int
     payment_number: str
     receipt_number: str
     invoice_id: int
     invoice_number: Optional[str] = None
     student_id: int
     guardian_id: int
     amount: Decimal
     payment_method: PaymentMethod
     transaction_date: datetime
     transaction_id: Optional[str] = None
     cheque_number: Optional[str] = None
     cheque_date: Optional[date] = None
     bank_name: Optional[str] = None
     status: PaymentStatus
     remarks: Optional[str] = None
     received_by_id: Optional[int] = None
     created_at: datetime

     student_name: Optional[str] = None
     student_class: Optional[str] = None
     guardian_name: Optional[str] = None
     received_by_name: Optional[str] = None

     model_config = ConfigDict(from_attributes=True)


class PaymentRecordedResponse(BaseModel):
     """Response for POST /api/payments: the payment plus the invoice position after it."""

     payment: PaymentResponse
     invoice_total: Decimal
     amount_due: Decimal
     invoice_status: InvoiceStatus

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "payment": {"payment_number": "PAY-2026-00001", "amount": 2000.00},
                    "invoice_total": 5000.00,
                    "amount_due": 3000.00,
                    "invoice_status": "partially_paid",
               }
          }
     )


class PaymentListResponse(BaseModel):
     payments: List[PaymentResponse]
     total: int
     page: int = 1
     page_size: int = 10
     pages: int = 0
