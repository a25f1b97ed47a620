# routers/dashboard.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_current_actor
from exceptions import AuthorizationError
from schemas.report import AdminDashboard, GuardianDashboard
from services.access import Actor, require_admin
from services.dashboard_service import admin_dashboard, guardian_dashboard

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get(
     "/admin",
     response_model=AdminDashboard,
     summary="Admin billing dashboard"
)
def get_admin_dashboard(
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """Revenue, outstanding invoices, six months of revenue and the latest payments."""
     require_admin(actor, "view the admin dashboard")
     return admin_dashboard(db)


@router.get(
     "/guardian",
     response_model=GuardianDashboard,
     summary="Guardian billing dashboard"
)
def get_guardian_dashboard(
     db: Session = Depends(get_session),
     actor: Actor = Depends(get_current_actor)
):
     """Per-child dues and the guardian's own recent payments."""
     if not actor.is_guardian:
          raise AuthorizationError("Only guardians have a guardian dashboard")
     return guardian_dashboard(db, actor.id)
