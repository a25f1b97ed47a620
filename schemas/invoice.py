"""
Pydantic schemas for Invoice API request/response validation.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict, model_validator

from models import InvoiceStatus


class InvoiceItemIn(BaseModel):
     """
     One line item. When fee_id is given, a missing description/amount is
     filled from the fee structure.
     """
     fee_id: Optional[int] = Field(None, gt=0, description="Fee structure to pre-fill from")
     description: Optional[str] = Field(None, min_length=1, max_length=255)
     amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)

     @model_validator(mode="after")
     def _needs_fee_or_values(self):
          if self.fee_id is None and (self.description is None or self.amount is None):
               raise ValueError("Item needs description and amount when no fee_id is given")
          return self


class InvoiceCreate(BaseModel):
     """Schema for creating a new invoice. Totals are computed server-side."""
     student_id: int = Field(..., gt=0, description="Student ID (must exist)")
     guardian_id: int = Field(..., gt=0, description="Guardian user ID (must exist)")
     items: List[InvoiceItemIn] = Field(..., min_length=1)
     tax: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
     discount: Decimal = Field(Decimal("0"), ge=0, max_digits=12, decimal_places=2)
     due_date: date = Field(..., description="Payment due date")
     academic_year: str = Field(..., min_length=1, max_length=20)
     term: Optional[str] = Field(None, max_length=50)
     invoice_number: Optional[str] = Field(None, min_length=1, max_length=32, description="Leave empty to auto-generate")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "student_id": 1,
                    "guardian_id": 2,
                    "items": [
                         {"fee_id": 1},
                         {"description": "Lab materials", "amount": 500.00}
                    ],
                    "tax": 0,
                    "discount": 250.00,
                    "due_date": "2026-02-28",
                    "academic_year": "2025-2026",
                    "term": "Term 2"
               }
          }
     )


class InvoiceUpdate(BaseModel):
     """
     Schema for updating an existing invoice.

     Changing items, tax or discount recomputes the totals. Student and
     guardian cannot be reassigned. status only accepts "pending" or
     "cancelled"; the paid states are owned by reconciliation.
     """
     items: Optional[List[InvoiceItemIn]] = Field(None, min_length=1)
     tax: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     discount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
     due_date: Optional[date] = None
     academic_year: Optional[str] = Field(None, min_length=1, max_length=20)
     term: Optional[str] = Field(None, max_length=50)
     status: Optional[InvoiceStatus] = None

     model_config = ConfigDict(
          extra="forbid",
          json_schema_extra={
               "example": {
                    "discount": 500.00
               }
          }
     )


class InvoiceItemResponse(BaseModel):
     id: int
     fee_id: Optional[int] = None
     description: str
     amount: Decimal

     model_config = ConfigDict(from_attributes=True)


class InvoicePaymentSummary(BaseModel):
     """Payment line shown on the invoice detail view."""
     id: int
     payment_number: str
     receipt_number: str
     amount: Decimal
     payment_method: str
     status: str
     transaction_date: datetime


class InvoiceResponse(BaseModel):
     """Schema for invoice response."""
     id: int
     invoice_number: str
     student_id: int
     guardian_id: int
     items: List[InvoiceItemResponse] = []
     subtotal: Decimal
     tax: Decimal
     discount: Decimal
     total: Decimal
     due_date: date
     status: InvoiceStatus
     is_overdue: bool = False
     academic_year: str
     term: Optional[str] = None
     created_at: datetime

     # Optional related data
     student_name: Optional[str] = None
     student_class: Optional[str] = None
     guardian_name: Optional[str] = None
     guardian_email: Optional[str] = None

     model_config = ConfigDict(
          from_attributes=True,
          json_schema_extra={
               "example": {
                    "id": 1,
                    "invoice_number": "INV-2026-00001",
                    "student_id": 1,
                    "guardian_id": 2,
                    "items": [{"id": 1, "fee_id": 1, "description": "Tuition", "amount": 5000.00}],
                    "subtotal": 5000.00,
                    "tax": 0,
                    "discount": 0,
                    "total": 5000.00,
                    "due_date": "2026-02-28",
                    "status": "pending",
                    "is_overdue": False,
                    "academic_year": "2025-2026",
                    "term": "Term 2",
                    "created_at": "2026-01-31T10:30:00",
                    "student_name": "Ada Mensah",
                    "student_class": "5",
                    "guardian_name": "Kofi Mensah",
                    "guardian_email": "kofi@example.com"
               }
          }
     )


class InvoiceDetailResponse(InvoiceResponse):
     """Invoice with reconciliation figures and its payments."""
     amount_paid: Decimal
     amount_due: Decimal
     payments: List[InvoicePaymentSummary] = []


class AmountDueResponse(BaseModel):
     """Pre-fill data for the payment form."""
     invoice_id: int
     invoice_number: str
     total: Decimal
     amount_paid: Decimal
     amount_due: Decimal
     status: InvoiceStatus


class InvoiceListResponse(BaseModel):
     """Schema for paginated invoice list response."""
     invoices: List[InvoiceResponse]
     total: int
     page: int = 1
     page_size: int = 10
     pages: int = 0

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "invoices": [],
                    "total": 0,
                    "page": 1,
                    "page_size": 10,
                    "pages": 0
               }
          }
     )
