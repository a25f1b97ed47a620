# routers/reports.py
"""
Billing reports. Admin only.

Date filters are inclusive calendar dates. Paginated reports always compute
their summary over the full filtered set.
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_current_actor
from exceptions import ValidationError
from models import PaymentMethod
from schemas.report import (
     ClassWiseFeeSummary,
     FeeCollectionReport,
     OutstandingDuesReport,
     PaymentHistoryReport,
)
from services import report_service
from services.access import Actor, require_admin
from services.pagination import MAX_PAGE_SIZE, REPORT_PAGE_SIZE

router = APIRouter(prefix="/api/reports", tags=["reports"])


def _check_window(start_date: Optional[date], end_date: Optional[date]) -> None:
     if start_date and end_date and start_date > end_date:
          raise ValidationError("start_date must be on or before end_date")


@router.get(
     "/fee-collection",
     response_model=FeeCollectionReport,
     summary="Fee collection by month"
)
def fee_collection(
     start_date: Optional[date] = Query(None, description="Transaction date from (inclusive)"),
     end_date: Optional[date] = Query(None, description="Transaction date to (inclusive)"),
     class_name: Optional[str] = Query(None, description="Restrict to one class"),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """Completed payments per month, with a per-class breakdown."""
     require_admin(actor, "view reports")
     _check_window(start_date, end_date)

     return report_service.fee_collection_report(db, start_date, end_date, class_name)


@router.get(
     "/outstanding-dues",
     response_model=OutstandingDuesReport,
     summary="Outstanding dues"
)
def outstanding_dues(
     class_name: Optional[str] = Query(None, description="Restrict to one class"),
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(REPORT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """
     Pending and partially paid invoices with the amount still due, oldest
     due date first. The summary covers every matching invoice.
     """
     require_admin(actor, "view reports")

     return report_service.outstanding_dues_report(db, class_name, page, page_size)


@router.get(
     "/payment-history",
     response_model=PaymentHistoryReport,
     summary="Payment history"
)
def payment_history(
     start_date: Optional[date] = Query(None, description="Transaction date from (inclusive)"),
     end_date: Optional[date] = Query(None, description="Transaction date to (inclusive)"),
     class_name: Optional[str] = Query(None, description="Restrict to one class"),
     method: Optional[PaymentMethod] = Query(None, description="Restrict to one payment method"),
     page: int = Query(1, ge=1, description="Page number"),
     page_size: int = Query(REPORT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Items per page"),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     require_admin(actor, "view reports")
     _check_window(start_date, end_date)

     return report_service.payment_history_report(
          db,
          start_date=start_date,
          end_date=end_date,
          class_name=class_name,
          method=method,
          page=page,
          page_size=page_size,
     )


@router.get(
     "/class-wise-summary",
     response_model=ClassWiseFeeSummary,
     summary="Billing and collection per class"
)
def class_wise_summary(
     start_date: Optional[date] = Query(None, description="Invoice created from (inclusive)"),
     end_date: Optional[date] = Query(None, description="Invoice created to (inclusive)"),
     academic_year: Optional[str] = Query(None, description="Restrict to one academic year"),
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """
     Billed, collected and pending totals per class, with the collection
     rate (0 for a class with nothing billed).
     """
     require_admin(actor, "view reports")
     _check_window(start_date, end_date)

     return report_service.class_wise_fee_summary(db, start_date, end_date, academic_year)
