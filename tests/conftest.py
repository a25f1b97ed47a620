"""Shared fixtures: an in-memory database, seeded roster, tokens and an API client."""

import os

# Must be set before the application modules read the environment
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_ALGORITHM"] = "HS256"

from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from database import SessionLocal, engine, init_db
from main import app
from models import Base, Fee, FeeFrequency, Student, User, UserRole


@pytest.fixture
def db():
    """Fresh schema per test."""
    Base.metadata.drop_all(bind=engine)
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db):
    """
    Two guardians, three students in two classes, one admin, one inactive
    admin and two fee structures.
    """
    admin = User(email="admin@school.test", first_name="Ada", last_name="Admin", role=UserRole.ADMIN.value)
    inactive = User(
        email="former@school.test", first_name="Fay", last_name="Former",
        role=UserRole.ADMIN.value, is_active=False,
    )
    jane = User(
        email="jane@home.test", first_name="Jane", last_name="Doe",
        phone="+15550001", role=UserRole.PARENT.value,
    )
    raj = User(
        email="raj@home.test", first_name="Raj", last_name="Patel",
        phone="+15550002", role=UserRole.PARENT.value,
    )
    db.add_all([admin, inactive, jane, raj])
    db.flush()

    amy = Student(
        admission_number="ADM-001", first_name="Amy", last_name="Doe",
        class_name="Grade 5", guardian_id=jane.id, academic_year="2025-2026",
    )
    ben = Student(
        admission_number="ADM-002", first_name="Ben", last_name="Doe",
        class_name="Grade 6", guardian_id=jane.id, academic_year="2025-2026",
    )
    cara = Student(
        admission_number="ADM-003", first_name="Cara", last_name="Patel",
        class_name="Grade 5", guardian_id=raj.id, academic_year="2025-2026",
    )
    db.add_all([amy, ben, cara])

    tuition = Fee(
        name="Tuition", amount=Decimal("5000.00"), frequency=FeeFrequency.QUARTERLY,
        applicable_classes="all", academic_year="2025-2026",
    )
    lab = Fee(
        name="Lab Fee", amount=Decimal("500.00"), frequency=FeeFrequency.YEARLY,
        applicable_classes="Grade 6", academic_year="2025-2026",
    )
    db.add_all([tuition, lab])
    db.commit()

    return SimpleNamespace(
        admin=admin, inactive=inactive, jane=jane, raj=raj,
        amy=amy, ben=ben, cara=cara, tuition=tuition, lab=lab,
    )


@pytest.fixture
def client(db):
    with TestClient(app) as test_client:
        yield test_client


def make_token(user_id: int, secret: str = "test-secret") -> str:
    return jwt.encode({"id": user_id}, secret, algorithm="HS256")


def auth(user) -> dict:
    return {"Authorization": f"Bearer {make_token(user.id)}"}


@pytest.fixture
def admin_headers(seed):
    return auth(seed.admin)


@pytest.fixture
def jane_headers(seed):
    return auth(seed.jane)


@pytest.fixture
def raj_headers(seed):
    return auth(seed.raj)


@pytest.fixture
def create_invoice(client, seed, admin_headers):
    """Factory: POST an invoice for a student (default Amy, 5000.00 tuition) and return the body."""

    def _create(student=None, items=None, expect=201, **overrides):
        student = student or seed.amy
        body = {
            "student_id": student.id,
            "guardian_id": student.guardian_id,
            "items": items or [{"fee_id": seed.tuition.id}],
            "due_date": (date.today() + timedelta(days=30)).isoformat(),
            "academic_year": "2025-2026",
            "term": "Term 1",
        }
        body.update(overrides)
        response = client.post("/api/invoices", json=body, headers=admin_headers)
        assert response.status_code == expect, response.text
        return response.json()

    return _create


@pytest.fixture
def pay(client, admin_headers):
    """Factory: POST a payment and return the response."""

    def _pay(invoice_id, amount, method="cash", **extra):
        body = {"invoice_id": invoice_id, "amount": str(amount), "payment_method": method}
        body.update(extra)
        return client.post("/api/payments", json=body, headers=admin_headers)

    return _pay
