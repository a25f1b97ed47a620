from .invoices import router as invoices_router
from .payments import router as payments_router
from .fees import router as fees_router
from .reports import router as reports_router
from .dashboard import router as dashboard_router

__all__ = [
     "invoices_router",
     "payments_router",
     "fees_router",
     "reports_router",
     "dashboard_router",
]
