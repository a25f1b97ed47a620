"""
Pydantic schemas for reporting and dashboard responses.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel


class Pagination(BaseModel):
     total: int
     page: int
     page_size: int
     pages: int


class MonthlyCollection(BaseModel):
     month: str  # YYYY-MM
     total_collected: Decimal
     payment_count: int


class ClassMonthCollection(BaseModel):
     month: str
     class_name: str
     total_collected: Decimal
     payment_count: int


class FeeCollectionReport(BaseModel):
     monthly_collection: List[MonthlyCollection]
     class_breakdown: List[ClassMonthCollection]
     grand_total: Decimal
     total_payments: int


class OutstandingInvoice(BaseModel):
     invoice_id: int
     invoice_number: str
     total: Decimal
     amount_paid: Decimal
     amount_due: Decimal
     due_date: date
     status: str
     is_overdue: bool
     student_name: str
     student_class: str
     guardian_name: str
     guardian_phone: Optional[str] = None


class OutstandingSummary(BaseModel):
     total_billed: Decimal
     total_paid: Decimal
     total_due: Decimal
     invoice_count: int
     overdue_count: int


class OutstandingDuesReport(BaseModel):
     invoices: List[OutstandingInvoice]
     summary: OutstandingSummary
     pagination: Pagination


class PaymentHistoryRow(BaseModel):
     payment_id: int
     payment_number: str
     receipt_number: str
     amount: Decimal
     payment_method: str
     transaction_date: datetime
     remarks: Optional[str] = None
     student_name: str
     student_class: str
     invoice_number: str


class MethodSummary(BaseModel):
     method: str
     total_amount: Decimal
     count: int


class PaymentHistoryReport(BaseModel):
     payments: List[PaymentHistoryRow]
     method_summary: List[MethodSummary]
     grand_total: Decimal
     pagination: Pagination


class ClassSummaryRow(BaseModel):
     class_name: str
     total_billed: Decimal
     total_collected: Decimal
     total_pending: Decimal
     collection_rate: Decimal
     invoice_count: int
     student_count: int


class ClassSummaryTotals(BaseModel):
     total_billed: Decimal
     total_collected: Decimal
     total_pending: Decimal


class ClassWiseFeeSummary(BaseModel):
     class_summary: List[ClassSummaryRow]
     totals: ClassSummaryTotals


class RecentPayment(BaseModel):
     payment_id: int
     payment_number: str
     amount: Decimal
     payment_method: str
     transaction_date: datetime
     student_name: str
     student_class: str
     invoice_number: str


class MonthlyRevenue(BaseModel):
     month: str
     total: Decimal
     count: int


class AdminBillingStats(BaseModel):
     total_revenue: Decimal
     pending_invoices: int
     overdue_invoices: int
     total_pending_amount: Decimal


class AdminDashboard(BaseModel):
     stats: AdminBillingStats
     monthly_revenue: List[MonthlyRevenue]
     recent_payments: List[RecentPayment]


class UpcomingDue(BaseModel):
     invoice_id: int
     invoice_number: str
     due_date: date
     amount_due: Decimal
     is_overdue: bool


class ChildFees(BaseModel):
     student_id: int
     student_name: str
     student_class: str
     pending_invoices: int
     total_due: Decimal
     upcoming_due: Optional[UpcomingDue] = None


class GuardianDashboard(BaseModel):
     children: List[ChildFees]
     recent_payments: List[RecentPayment]
