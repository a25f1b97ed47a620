from .access import Actor, require_admin, scope_invoices, scope_payments, ensure_can_view
from .invoice_service import InvoiceService
from .reconciliation_service import (
     amount_paid,
     amounts_paid,
     derive_status,
     get_amount_due,
     record_payment,
     update_payment,
     delete_invoice,
)
from .sequence_service import allocate_number, format_number

__all__ = [
     "Actor",
     "require_admin",
     "scope_invoices",
     "scope_payments",
     "ensure_can_view",
     "InvoiceService",
     "amount_paid",
     "amounts_paid",
     "derive_status",
     "get_amount_due",
     "record_payment",
     "update_payment",
     "delete_invoice",
     "allocate_number",
     "format_number",
]
