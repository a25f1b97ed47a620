from .invoice import (
     InvoiceItemIn,
     InvoiceCreate,
     InvoiceUpdate,
     InvoiceResponse,
     InvoiceDetailResponse,
     InvoiceListResponse,
     AmountDueResponse,
)
from .payment import (
     PaymentCreate,
     PaymentUpdate,
     PaymentResponse,
     PaymentRecordedResponse,
     PaymentListResponse,
)
from .fee import FeeCreate, FeeUpdate, FeeResponse

__all__ = [
     "InvoiceItemIn",
     "InvoiceCreate",
     "InvoiceUpdate",
     "InvoiceResponse",
     "InvoiceDetailResponse",
     "InvoiceListResponse",
     "AmountDueResponse",
     "PaymentCreate",
     "PaymentUpdate",
     "PaymentResponse",
     "PaymentRecordedResponse",
     "PaymentListResponse",
     "FeeCreate",
     "FeeUpdate",
     "FeeResponse",
]
