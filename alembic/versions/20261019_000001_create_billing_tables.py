"""Create billing tables

Revision ID: 20261019_000001
Revises: None
Create Date: 2026-10-19

Creates the roster tables the ledger references (users, students), fee
structures, invoices with their line items, payments and the per-year
number sequences.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

INVOICE_STATUSES = ('pending', 'paid', 'partially_paid', 'overdue', 'cancelled')
PAYMENT_METHODS = ('cash', 'card', 'online', 'bank_transfer', 'cheque')
PAYMENT_STATUSES = ('pending', 'completed', 'failed', 'refunded')
FEE_FREQUENCIES = ('monthly', 'quarterly', 'half-yearly', 'yearly', 'one-time')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create the billing tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('admission_number', sa.String(length=50), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('class_name', sa.String(length=50), nullable=False),
        sa.Column('section', sa.String(length=20), nullable=True),
        sa.Column('guardian_id', sa.Integer(), nullable=False),
        sa.Column('academic_year', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('admission_number'),
        sa.ForeignKeyConstraint(['guardian_id'], ['users.id'], name='fk_students_guardian_id'),
    )
    op.create_index('ix_students_class_name', 'students', ['class_name'])
    op.create_index('ix_students_guardian_id', 'students', ['guardian_id'])

    op.create_table(
        'fees',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column(
            'frequency',
            sa.Enum(*FEE_FREQUENCIES, name='fee_frequency', create_constraint=True),
            nullable=False
        ),
        sa.Column('applicable_classes', sa.String(length=255), nullable=True),
        sa.Column('academic_year', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_fees_is_active', 'fees', ['is_active'])
    op.create_index('ix_fees_created_at', 'fees', ['created_at'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('invoice_number', sa.String(length=32), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('guardian_id', sa.Integer(), nullable=False),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('tax', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('discount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('total', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column(
            'status',
            sa.Enum(*INVOICE_STATUSES, name='invoice_status', create_constraint=True),
            nullable=False,
            server_default='pending'
        ),
        sa.Column('academic_year', sa.String(length=20), nullable=False),
        sa.Column('term', sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], name='fk_invoices_student_id'),
        sa.ForeignKeyConstraint(['guardian_id'], ['users.id'], name='fk_invoices_guardian_id'),
    )

    # Create indexes for common queries
    op.create_index('ix_invoices_invoice_number', 'invoices', ['invoice_number'], unique=True)
    op.create_index('ix_invoices_student_id', 'invoices', ['student_id'])
    op.create_index('ix_invoices_guardian_id', 'invoices', ['guardian_id'])
    op.create_index('ix_invoices_due_date', 'invoices', ['due_date'])
    op.create_index('ix_invoices_status', 'invoices', ['status'])
    op.create_index('ix_invoices_academic_year', 'invoices', ['academic_year'])
    op.create_index('ix_invoices_created_at', 'invoices', ['created_at'])

    op.create_table(
        'invoice_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('fee_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['invoice_id'],
            ['invoices.id'],
            name='fk_invoice_items_invoice_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['fee_id'],
            ['fees.id'],
            name='fk_invoice_items_fee_id',
            ondelete='SET NULL'
        ),
    )
    op.create_index('ix_invoice_items_invoice_id', 'invoice_items', ['invoice_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('payment_number', sa.String(length=32), nullable=False),
        sa.Column('receipt_number', sa.String(length=32), nullable=False),
        sa.Column('invoice_id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('guardian_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column(
            'payment_method',
            sa.Enum(*PAYMENT_METHODS, name='payment_method', create_constraint=True),
            nullable=False
        ),
        sa.Column('transaction_date', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('transaction_id', sa.String(length=100), nullable=True),
        sa.Column('cheque_number', sa.String(length=50), nullable=True),
        sa.Column('cheque_date', sa.Date(), nullable=True),
        sa.Column('bank_name', sa.String(length=100), nullable=True),
        sa.Column(
            'status',
            sa.Enum(*PAYMENT_STATUSES, name='payment_status', create_constraint=True),
            nullable=False,
            server_default='completed'
        ),
        sa.Column('remarks', sa.Text(), nullable=True),
        sa.Column('received_by_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['invoice_id'],
            ['invoices.id'],
            name='fk_payments_invoice_id',
            ondelete='NO ACTION',  # Invoices with payments cannot be deleted
        ),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], name='fk_payments_student_id'),
        sa.ForeignKeyConstraint(['guardian_id'], ['users.id'], name='fk_payments_guardian_id'),
        sa.ForeignKeyConstraint(['received_by_id'], ['users.id'], name='fk_payments_received_by_id'),
    )
    op.create_index('ix_payments_payment_number', 'payments', ['payment_number'], unique=True)
    op.create_index('ix_payments_receipt_number', 'payments', ['receipt_number'], unique=True)
    op.create_index('ix_payments_invoice_id', 'payments', ['invoice_id'])
    op.create_index('ix_payments_student_id', 'payments', ['student_id'])
    op.create_index('ix_payments_guardian_id', 'payments', ['guardian_id'])
    op.create_index('ix_payments_transaction_date', 'payments', ['transaction_date'])
    op.create_index('ix_payments_status', 'payments', ['status'])
    op.create_index('ix_payments_created_at', 'payments', ['created_at'])

    op.create_table(
        'number_sequences',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('prefix', sa.String(length=10), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('last_value', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('prefix', 'year', name='uq_number_sequences_prefix_year'),
    )


def downgrade() -> None:
    """Drop the billing tables."""
    op.drop_table('number_sequences')

    for index in (
        'ix_payments_created_at', 'ix_payments_status', 'ix_payments_transaction_date',
        'ix_payments_guardian_id', 'ix_payments_student_id', 'ix_payments_invoice_id',
        'ix_payments_receipt_number', 'ix_payments_payment_number',
    ):
        op.drop_index(index, table_name='payments')
    op.drop_table('payments')

    op.drop_index('ix_invoice_items_invoice_id', table_name='invoice_items')
    op.drop_table('invoice_items')

    for index in (
        'ix_invoices_created_at', 'ix_invoices_academic_year', 'ix_invoices_status',
        'ix_invoices_due_date', 'ix_invoices_guardian_id', 'ix_invoices_student_id',
        'ix_invoices_invoice_number',
    ):
        op.drop_index(index, table_name='invoices')
    op.drop_table('invoices')

    op.drop_index('ix_fees_created_at', table_name='fees')
    op.drop_index('ix_fees_is_active', table_name='fees')
    op.drop_table('fees')

    op.drop_index('ix_students_guardian_id', table_name='students')
    op.drop_index('ix_students_class_name', table_name='students')
    op.drop_table('students')

    op.drop_index('ix_users_role', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
