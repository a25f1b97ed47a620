from .base import Base, utcnow
from .user import User, UserRole
from .student import Student
from .fee import Fee, FeeFrequency
from .invoice import Invoice, InvoiceItem, InvoiceStatus, OUTSTANDING_STATUSES
from .payment import Payment, PaymentMethod, PaymentStatus
from .sequence import NumberSequence

__all__ = [
     "Base",
     "utcnow",
     "User",
     "UserRole",
     "Student",
     "Fee",
     "FeeFrequency",
     "Invoice",
     "InvoiceItem",
     "InvoiceStatus",
     "OUTSTANDING_STATUSES",
     "Payment",
     "PaymentMethod",
     "PaymentStatus",
     "NumberSequence",
]
