"""
Dashboard Service - billing figures for the admin and guardian dashboards.

Amounts due shown here come from the same reconciliation helpers as the
invoice detail view and the outstanding-dues report.
"""
from collections import defaultdict
from datetime import date, datetime, time
from typing import List

from sqlalchemy.orm import Session

from models import Invoice, OUTSTANDING_STATUSES, Payment, PaymentStatus, Student, utcnow
from services.reconciliation_service import ZERO, amounts_paid, to_money
from services.report_service import month_key

RECENT_PAYMENTS = 5
REVENUE_MONTHS = 6


def _months_back(today: date, months: int) -> date:
     """First day of the month `months` before today's month."""
     index = today.year * 12 + (today.month - 1) - months
     return date(index // 12, index % 12 + 1, 1)


def _recent_payments(query) -> List[dict]:
     rows = (
          query.join(Student, Payment.student_id == Student.id)
          .join(Invoice, Payment.invoice_id == Invoice.id)
          .filter(Payment.status == PaymentStatus.COMPLETED)
          .with_entities(Payment, Student, Invoice.invoice_number)
          .order_by(Payment.transaction_date.desc(), Payment.id.desc())
          .limit(RECENT_PAYMENTS)
          .all()
     )
     return [
          {
               "payment_id": payment.id,
               "payment_number": payment.payment_number,
               "amount": to_money(payment.amount),
               "payment_method": payment.payment_method.value,
               "transaction_date": payment.transaction_date,
               "student_name": student.full_name,
               "student_class": student.class_name,
               "invoice_number": invoice_number,
          }
          for payment, student, invoice_number in rows
     ]


def admin_dashboard(db: Session) -> dict:
     today = utcnow().date()

     completed = (
          db.query(Payment.amount, Payment.transaction_date)
          .filter(Payment.status == PaymentStatus.COMPLETED)
          .all()
     )
     total_revenue = sum((to_money(row.amount) for row in completed), ZERO)

     since = datetime.combine(_months_back(today, REVENUE_MONTHS), time.min)
     monthly = defaultdict(lambda: [ZERO, 0])
     for row in completed:
          if row.transaction_date >= since:
               monthly[month_key(row.transaction_date)][0] += to_money(row.amount)
               monthly[month_key(row.transaction_date)][1] += 1

     outstanding = (
          db.query(Invoice.id, Invoice.total, Invoice.due_date)
          .filter(Invoice.status.in_(OUTSTANDING_STATUSES))
          .all()
     )
     paid = amounts_paid(db, [row.id for row in outstanding])

     return {
          "stats": {
               "total_revenue": total_revenue,
               "pending_invoices": len(outstanding),
               "overdue_invoices": sum(1 for row in outstanding if row.due_date < today),
               "total_pending_amount": sum(
                    (to_money(row.total) - paid[row.id] for row in outstanding), ZERO
               ),
          },
          "monthly_revenue": [
               {"month": month, "total": total, "count": count}
               for month, (total, count) in sorted(monthly.items())
          ],
          "recent_payments": _recent_payments(db.query(Payment)),
     }


def guardian_dashboard(db: Session, guardian_id: int) -> dict:
     today = date.today()
     children = (
          db.query(Student)
          .filter(Student.guardian_id == guardian_id, Student.status == "active")
          .order_by(Student.first_name, Student.id)
          .all()
     )

     child_rows = []
     for child in children:
          invoices = (
               db.query(Invoice)
               .filter(
                    Invoice.student_id == child.id,
                    Invoice.guardian_id == guardian_id,
                    Invoice.status.in_(OUTSTANDING_STATUSES),
               )
               .order_by(Invoice.due_date.asc(), Invoice.id.asc())
               .all()
          )
          paid = amounts_paid(db, [inv.id for inv in invoices])
          upcoming = None
          if invoices:
               first = invoices[0]
               upcoming = {
                    "invoice_id": first.id,
                    "invoice_number": first.invoice_number,
                    "due_date": first.due_date,
                    "amount_due": to_money(first.total) - paid[first.id],
                    "is_overdue": first.due_date < today,
               }
          child_rows.append({
               "student_id": child.id,
               "student_name": child.full_name,
               "student_class": child.class_name,
               "pending_invoices": len(invoices),
               "total_due": sum((to_money(inv.total) - paid[inv.id] for inv in invoices), ZERO),
               "upcoming_due": upcoming,
          })

     return {
          "children": child_rows,
          "recent_payments": _recent_payments(db.query(Payment).filter(Payment.guardian_id == guardian_id)),
     }
