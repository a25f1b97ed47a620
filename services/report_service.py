"""
Report Service - read-only billing summaries for administrators.

All reports share the same filters:
- an inclusive [start_date, end_date] window on the payment transaction date
  (payment reports) or the invoice creation date (invoice reports); either
  end may be omitted
- an optional class filter joined through the student

Money is summed in Python as Decimal so totals are exact whatever the
database does with NUMERIC aggregates.
"""
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session

from models import Invoice, OUTSTANDING_STATUSES, Payment, PaymentMethod, PaymentStatus, Student, User
from services.pagination import page_info
from services.reconciliation_service import ZERO, amounts_paid, to_money

HUNDRED = Decimal("100")
RATE_PLACES = Decimal("0.01")


def date_window(column, start_date: Optional[date], end_date: Optional[date]) -> list:
     """Inclusive date window on a DATETIME column."""
     criteria = []
     if start_date:
          criteria.append(column >= datetime.combine(start_date, time.min))
     if end_date:
          criteria.append(column < datetime.combine(end_date + timedelta(days=1), time.min))
     return criteria


def month_key(value: datetime) -> str:
     return value.strftime("%Y-%m")


def collection_rate(collected: Decimal, billed: Decimal) -> Decimal:
     """collected / billed * 100, two places; 0 when nothing was billed."""
     if billed == 0:
          return Decimal("0.00")
     return (collected / billed * HUNDRED).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)


def _completed_payments(
     db: Session,
     start_date: Optional[date] = None,
     end_date: Optional[date] = None,
     class_name: Optional[str] = None,
     method: Optional[PaymentMethod] = None,
):
     query = (
          db.query(Payment)
          .join(Student, Payment.student_id == Student.id)
          .filter(Payment.status == PaymentStatus.COMPLETED)
          .filter(*date_window(Payment.transaction_date, start_date, end_date))
     )
     if class_name:
          query = query.filter(Student.class_name == class_name)
     if method:
          query = query.filter(Payment.payment_method == method)
     return query


def fee_collection_report(
     db: Session,
     start_date: Optional[date] = None,
     end_date: Optional[date] = None,
     class_name: Optional[str] = None,
) -> dict:
     """Completed payments bucketed by YYYY-MM, and by (month, class)."""
     rows = (
          _completed_payments(db, start_date, end_date, class_name)
          .with_entities(Payment.transaction_date, Payment.amount, Student.class_name)
          .all()
     )

     monthly = defaultdict(lambda: [ZERO, 0])
     by_class = defaultdict(lambda: [ZERO, 0])
     for transaction_date, amount, student_class in rows:
          month = month_key(transaction_date)
          amount = to_money(amount)
          monthly[month][0] += amount
          monthly[month][1] += 1
          by_class[(month, student_class)][0] += amount
          by_class[(month, student_class)][1] += 1

     monthly_collection = [
          {"month": month, "total_collected": total, "payment_count": count}
          for month, (total, count) in sorted(monthly.items())
     ]
     class_breakdown = [
          {"month": month, "class_name": student_class, "total_collected": total, "payment_count": count}
          for (month, student_class), (total, count) in sorted(by_class.items())
     ]

     return {
          "monthly_collection": monthly_collection,
          "class_breakdown": class_breakdown,
          "grand_total": sum((m["total_collected"] for m in monthly_collection), ZERO),
          "total_payments": sum(m["payment_count"] for m in monthly_collection),
     }


def outstanding_dues_report(
     db: Session,
     class_name: Optional[str] = None,
     page: int = 1,
     page_size: int = 20,
) -> dict:
     """
     Pending and partially paid invoices, oldest due date first.

     The summary covers the whole filtered set, not just the returned page.
     """
     today = date.today()
     query = (
          db.query(Invoice)
          .join(Student, Invoice.student_id == Student.id)
          .filter(Invoice.status.in_(OUTSTANDING_STATUSES))
     )
     if class_name:
          query = query.filter(Student.class_name == class_name)

     # Summary over every matching invoice
     everything = query.with_entities(Invoice.id, Invoice.total, Invoice.due_date).all()
     paid = amounts_paid(db, [row.id for row in everything])
     total_billed = sum((to_money(row.total) for row in everything), ZERO)
     total_paid = sum(paid.values(), ZERO)
     summary = {
          "total_billed": total_billed,
          "total_paid": total_paid,
          "total_due": total_billed - total_paid,
          "invoice_count": len(everything),
          "overdue_count": sum(1 for row in everything if row.due_date < today),
     }

     invoices = (
          query.join(User, Invoice.guardian_id == User.id)
          .with_entities(Invoice, Student, User)
          .order_by(Invoice.due_date.asc(), Invoice.id.asc())
          .offset((page - 1) * page_size)
          .limit(page_size)
          .all()
     )
     rows = []
     for invoice, student, guardian in invoices:
          amount_paid = paid.get(invoice.id, ZERO)
          rows.append({
               "invoice_id": invoice.id,
               "invoice_number": invoice.invoice_number,
               "total": to_money(invoice.total),
               "amount_paid": amount_paid,
               "amount_due": to_money(invoice.total) - amount_paid,
               "due_date": invoice.due_date,
               "status": invoice.status.value,
               "is_overdue": invoice.due_date < today,
               "student_name": student.full_name,
               "student_class": student.class_name,
               "guardian_name": guardian.full_name,
               "guardian_phone": guardian.phone,
          })

     return {
          "invoices": rows,
          "summary": summary,
          "pagination": page_info(len(everything), page, page_size),
     }


def payment_history_report(
     db: Session,
     start_date: Optional[date] = None,
     end_date: Optional[date] = None,
     class_name: Optional[str] = None,
     method: Optional[PaymentMethod] = None,
     page: int = 1,
     page_size: int = 20,
) -> dict:
     """Completed payments, newest first, with a per-method summary of the full set."""
     query = _completed_payments(db, start_date, end_date, class_name, method)

     by_method = defaultdict(lambda: [ZERO, 0])
     for payment_method, amount in query.with_entities(Payment.payment_method, Payment.amount).all():
          by_method[payment_method.value][0] += to_money(amount)
          by_method[payment_method.value][1] += 1
     method_summary = sorted(
          (
               {"method": name, "total_amount": total, "count": count}
               for name, (total, count) in by_method.items()
          ),
          key=lambda m: (-m["total_amount"], m["method"]),
     )
     total = sum(m["count"] for m in method_summary)

     payments = (
          query.join(Invoice, Payment.invoice_id == Invoice.id)
          .with_entities(Payment, Student, Invoice.invoice_number)
          .order_by(Payment.transaction_date.desc(), Payment.id.desc())
          .offset((page - 1) * page_size)
          .limit(page_size)
          .all()
     )
     rows = [
          {
               "payment_id": payment.id,
               "payment_number": payment.payment_number,
               "receipt_number": payment.receipt_number,
               "amount": to_money(payment.amount),
               "payment_method": payment.payment_method.value,
               "transaction_date": payment.transaction_date,
               "remarks": payment.remarks,
               "student_name": student.full_name,
               "student_class": student.class_name,
               "invoice_number": invoice_number,
          }
          for payment, student, invoice_number in payments
     ]

     return {
          "payments": rows,
          "method_summary": method_summary,
          "grand_total": sum((m["total_amount"] for m in method_summary), ZERO),
          "pagination": page_info(total, page, page_size),
     }


def class_wise_fee_summary(
     db: Session,
     start_date: Optional[date] = None,
     end_date: Optional[date] = None,
     academic_year: Optional[str] = None,
) -> dict:
     """Billing vs. collection per class over every invoice in the window, whatever its status."""
     query = (
          db.query(Invoice.id, Invoice.total, Invoice.student_id, Student.class_name)
          .join(Student, Invoice.student_id == Student.id)
          .filter(*date_window(Invoice.created_at, start_date, end_date))
     )
     if academic_year:
          query = query.filter(Invoice.academic_year == academic_year)
     invoices = query.all()
     paid = amounts_paid(db, [row.id for row in invoices])

     groups = defaultdict(lambda: {"billed": ZERO, "collected": ZERO, "invoices": 0, "students": set()})
     for row in invoices:
          group = groups[row.class_name]
          group["billed"] += to_money(row.total)
          group["collected"] += paid[row.id]
          group["invoices"] += 1
          group["students"].add(row.student_id)

     class_summary = []
     for class_name in sorted(groups):
          group = groups[class_name]
          class_summary.append({
               "class_name": class_name,
               "total_billed": group["billed"],
               "total_collected": group["collected"],
               "total_pending": group["billed"] - group["collected"],
               "collection_rate": collection_rate(group["collected"], group["billed"]),
               "invoice_count": group["invoices"],
               "student_count": len(group["students"]),
          })

     totals = {
          "total_billed": sum((c["total_billed"] for c in class_summary), ZERO),
          "total_collected": sum((c["total_collected"] for c in class_summary), ZERO),
          "total_pending": sum((c["total_pending"] for c in class_summary), ZERO),
     }
     return {"class_summary": class_summary, "totals": totals}
