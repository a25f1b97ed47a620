"""Concurrent payments against a file-backed database, one session per thread."""

import threading
from collections import Counter
from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, func
from sqlalchemy.orm import sessionmaker

from exceptions import ValidationError
from models import Base, Invoice, InvoiceStatus, Payment, PaymentMethod, PaymentStatus, Student, User, UserRole
from services.access import Actor
from services.reconciliation_service import record_payment

INVOICE_COUNT = 3
THREADS = 24
INVOICE_TOTAL = Decimal("5000.00")
PAYMENT = Decimal("1000.00")


@pytest.fixture
def file_sessions(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'billing.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    yield factory
    engine.dispose()


@pytest.fixture
def ledger(file_sessions):
    """An admin, one guardian with one student, and three unpaid 5000.00 invoices."""
    with file_sessions() as session:
        admin = User(email="bursar@school.test", first_name="Bo", last_name="Bursar", role=UserRole.ADMIN.value)
        guardian = User(email="kim@home.test", first_name="Kim", last_name="Lee", role=UserRole.PARENT.value)
        session.add_all([admin, guardian])
        session.flush()

        student = Student(
            admission_number="ADM-100", first_name="Lou", last_name="Lee",
            class_name="Grade 4", guardian_id=guardian.id, academic_year="2025-2026",
        )
        session.add(student)
        session.flush()

        invoices = [
            Invoice(
                invoice_number=f"INV-LOAD-{n}",
                student_id=student.id,
                guardian_id=guardian.id,
                subtotal=INVOICE_TOTAL,
                total=INVOICE_TOTAL,
                due_date=date.today() + timedelta(days=30),
                academic_year="2025-2026",
            )
            for n in range(INVOICE_COUNT)
        ]
        session.add_all(invoices)
        session.commit()
        return Actor(id=admin.id, role=UserRole.ADMIN.value), [invoice.id for invoice in invoices]


def test_parallel_payments_never_overpay(file_sessions, ledger):
    actor, invoice_ids = ledger
    barrier = threading.Barrier(THREADS)
    outcomes = []
    errors = []
    guard = threading.Lock()

    def worker(index):
        invoice_id = invoice_ids[index % INVOICE_COUNT]
        session = file_sessions()
        try:
            barrier.wait()
            record_payment(session, invoice_id, PAYMENT, PaymentMethod.CASH, actor)
            result = "recorded"
        except ValidationError as exc:
            result = exc.message
        except Exception as exc:
            with guard:
                errors.append(repr(exc))
            return
        finally:
            session.close()
        with guard:
            outcomes.append(result)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(THREADS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    counts = Counter(outcomes)
    assert counts["recorded"] == INVOICE_COUNT * 5
    assert counts["Payment amount exceeds amount due (0.00)"] == THREADS - INVOICE_COUNT * 5

    with file_sessions() as session:
        for invoice_id in invoice_ids:
            paid = (
                session.query(func.coalesce(func.sum(Payment.amount), 0))
                .filter(Payment.invoice_id == invoice_id, Payment.status == PaymentStatus.COMPLETED)
                .scalar()
            )
            assert Decimal(paid) == INVOICE_TOTAL
            assert session.get(Invoice, invoice_id).status == InvoiceStatus.PAID

        payments = session.query(Payment).all()
        assert len(payments) == INVOICE_COUNT * 5
        assert len({p.payment_number for p in payments}) == len(payments)
        assert len({p.receipt_number for p in payments}) == len(payments)
